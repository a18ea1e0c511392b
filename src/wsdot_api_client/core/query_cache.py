"""Response cache abstraction and in-memory implementation."""

from __future__ import annotations

import json
import logging
import threading
import time
from collections.abc import Callable, Mapping
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Protocol

logger = logging.getLogger("wsdot_api_client")


class InvalidationSink(Protocol):
    """Receiver of cache-group invalidation signals."""

    def invalidate(self, group_key: str) -> int:
        """Drop every entry tagged with ``group_key``; return the count removed."""


class QueryCache(InvalidationSink, Protocol):
    """Cache contract used by the client facade."""

    def get(self, key: str) -> Any: ...

    def generation(self, group_key: str) -> int: ...

    def set(
        self,
        key: str,
        value: Any,
        *,
        ttl_seconds: float,
        group_key: str | None = None,
        expected_generation: int | None = None,
    ) -> bool: ...

    def clear(self) -> None: ...


def make_cache_key(endpoint_id: str, params: Mapping[str, object] | None) -> str:
    """Stable key for one endpoint call; parameter order does not matter."""

    encoded = json.dumps(dict(params or {}), sort_keys=True, default=str, separators=(",", ":"))
    return f"{endpoint_id}:{encoded}"


@dataclass(slots=True)
class _StoredEntry:
    expires_at: float
    group_key: str | None
    value: Any


class MemoryQueryCache:
    """Process-local TTL cache with group tags.

    ``get`` returns ``None`` for a miss or an expired entry. Values are
    deep-copied on the way in and out so callers cannot mutate cached state.

    Every ``invalidate`` bumps the group's generation. A ``set`` carrying an
    ``expected_generation`` that no longer matches is dropped, so a response
    fetched before an invalidation is never stored after it.
    """

    def __init__(self, *, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.monotonic
        self._lock = threading.RLock()
        self._items: dict[str, _StoredEntry] = {}
        self._generations: dict[str, int] = {}

    def __len__(self) -> int:
        with self._lock:
            self._purge_expired_locked(self._clock())
            return len(self._items)

    def get(self, key: str) -> Any:
        now = self._clock()
        with self._lock:
            stored = self._items.get(key)
            if stored is None:
                return None
            if stored.expires_at <= now:
                del self._items[key]
                return None
            return deepcopy(stored.value)

    def generation(self, group_key: str) -> int:
        with self._lock:
            return self._generations.get(group_key, 0)

    def set(
        self,
        key: str,
        value: Any,
        *,
        ttl_seconds: float,
        group_key: str | None = None,
        expected_generation: int | None = None,
    ) -> bool:
        """Store ``value``; return False when the write lost a race with ``invalidate``."""

        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        now = self._clock()
        stored = _StoredEntry(
            expires_at=now + ttl_seconds,
            group_key=group_key,
            value=deepcopy(value),
        )
        with self._lock:
            if (
                group_key is not None
                and expected_generation is not None
                and self._generations.get(group_key, 0) != expected_generation
            ):
                logger.debug("cache write skipped group=%s key=%s", group_key, key)
                return False
            self._purge_expired_locked(now)
            self._items[key] = stored
        return True

    def invalidate(self, group_key: str) -> int:
        with self._lock:
            self._generations[group_key] = self._generations.get(group_key, 0) + 1
            stale = [key for key, item in self._items.items() if item.group_key == group_key]
            for key in stale:
                del self._items[key]
        logger.debug("cache group invalidated group=%s removed=%s", group_key, len(stale))
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def _purge_expired_locked(self, now: float) -> None:
        expired = [key for key, item in self._items.items() if item.expires_at <= now]
        for key in expired:
            del self._items[key]


__all__ = [
    "InvalidationSink",
    "QueryCache",
    "make_cache_key",
    "MemoryQueryCache",
]
