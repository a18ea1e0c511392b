"""Cache-flush marker polling.

Each WSF data group exposes a cheap ``cacheflushdate`` endpoint that returns
the time its data last changed. :class:`CacheFlushPoller` polls those markers
on a fixed interval and tells an :class:`InvalidationSink` which groups went
stale. The first marker seen for a group is only a baseline.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Protocol

from .dates import is_wire_date, parse_wire_timestamp
from .models import EndpointDescriptor, FetchMode
from .query_cache import InvalidationSink

logger = logging.getLogger("wsdot_api_client")

DEFAULT_POLL_INTERVAL_SECONDS = 5 * 60


class MarkerFetcher(Protocol):
    async def execute(
        self,
        descriptor: EndpointDescriptor,
        params: Mapping[str, object] | None = None,
        mode: FetchMode = FetchMode.NATIVE,
    ) -> object: ...


def normalize_marker(payload: object) -> object:
    """Comparable form of a marker payload.

    Wire dates compare by instant, so a change in the offset suffix alone is
    not a change.
    """

    if payload is None or payload == "":
        raise ValueError("cache flush marker is empty")
    if is_wire_date(payload):
        return parse_wire_timestamp(payload).millis  # type: ignore[arg-type]
    return payload


class CacheFlushPoller:
    """Polls flush markers for a set of cache groups."""

    def __init__(
        self,
        fetcher: MarkerFetcher,
        sink: InvalidationSink,
        *,
        groups: Mapping[str, EndpointDescriptor],
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be > 0")
        if not groups:
            raise ValueError("groups must not be empty")
        self._fetcher = fetcher
        self._sink = sink
        self._groups = dict(groups)
        self._interval_seconds = interval_seconds
        self._markers: dict[str, object] = {}
        self._task: asyncio.Task[None] | None = None
        self._stop: asyncio.Event | None = None
        self._disposed = False

    @property
    def markers(self) -> dict[str, object]:
        return dict(self._markers)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def disposed(self) -> bool:
        return self._disposed

    async def poll_group(self, group_key: str) -> bool:
        """Poll one group; return True when an invalidation was sent."""

        descriptor = self._groups[group_key]
        try:
            payload = await self._fetcher.execute(descriptor, {}, FetchMode.RAW)
            marker = normalize_marker(payload)
        except Exception as exc:
            logger.warning(
                "cache flush poll failed group=%s error=%s",
                group_key,
                getattr(exc, "kind", exc.__class__.__name__),
            )
            return False

        previous = self._markers.get(group_key)
        if previous is None:
            self._markers[group_key] = marker
            logger.info("cache flush baseline group=%s marker=%s", group_key, marker)
            return False
        if previous == marker:
            return False

        try:
            removed = self._sink.invalidate(group_key)
        except Exception:
            logger.exception("cache invalidation failed group=%s", group_key)
            return False
        self._markers[group_key] = marker
        logger.info(
            "cache flush invalidated group=%s previous=%s marker=%s removed=%s",
            group_key,
            previous,
            marker,
            removed,
        )
        return True

    async def poll_once(self) -> list[str]:
        """Poll every group in order; return the groups that were invalidated."""

        invalidated: list[str] = []
        for group_key in self._groups:
            if await self.poll_group(group_key):
                invalidated.append(group_key)
        return invalidated

    def start(self) -> None:
        if self._disposed:
            raise RuntimeError("poller is disposed")
        if self.running:
            return
        self._stop = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def dispose(self) -> None:
        """Stop scheduling ticks; an in-flight tick is allowed to finish."""

        if self._disposed:
            return
        self._disposed = True
        if self._stop is not None:
            self._stop.set()
        if self._task is not None:
            await self._task
            self._task = None

    async def _run(self) -> None:
        assert self._stop is not None
        while not self._stop.is_set():
            await self.poll_once()
            try:
                await asyncio.wait_for(self._stop.wait(), self._interval_seconds)
            except asyncio.TimeoutError:
                continue


__all__ = [
    "DEFAULT_POLL_INTERVAL_SECONDS",
    "MarkerFetcher",
    "normalize_marker",
    "CacheFlushPoller",
]
