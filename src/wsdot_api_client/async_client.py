"""Public async client entrypoint."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any

from .apis.border_crossings import BorderCrossingsApi
from .apis.cache_flush_date import CACHE_FLUSH_DATE_ENDPOINTS, CacheFlushDateApi
from .apis.registry import get_endpoint
from .apis.traffic_flow import TrafficFlowApi
from .apis.wsf_schedule import WsfScheduleApi
from .apis.wsf_vessels import WsfVesselsApi
from .client_shared import resolve_query_cache, validate_client_config
from .config import WsdotClientConfig
from .core.cache_flush import CacheFlushPoller
from .core.errors import WsdotClientClosedError, WsdotConfigError
from .core.models import EndpointDescriptor, FetchMode
from .core.pipeline import RequestPipeline
from .core.query_cache import InvalidationSink, QueryCache, make_cache_key
from .core.script_transport import ScriptHost
from .core.strategy import RuntimeEnvironment
from .core.transport_shared import TransportStrategy

logger = logging.getLogger("wsdot_api_client")


class AsyncWsdotClient:
    """Public async WSDOT/WSF API client.

    Without an explicit ``config`` the client reads ``WSDOT_*`` environment
    variables (see :meth:`WsdotClientConfig.from_env`).
    """

    def __init__(
        self,
        *,
        config: WsdotClientConfig | None = None,
        transport: TransportStrategy | None = None,
        pipeline: RequestPipeline | None = None,
        query_cache: QueryCache | None = None,
        environment: RuntimeEnvironment | None = None,
        script_host: ScriptHost | None = None,
    ) -> None:
        self._config = config or WsdotClientConfig.from_env()
        validate_client_config(self._config)

        self._pipeline = pipeline or RequestPipeline(
            self._config,
            transport=transport,
            environment=environment,
            script_host=script_host,
        )
        self._cache = resolve_query_cache(config=self._config, query_cache=query_cache)
        self._pollers: list[CacheFlushPoller] = []
        self._closed = False

        self.traffic_flow = TrafficFlowApi(self.fetch)
        self.border_crossings = BorderCrossingsApi(self.fetch)
        self.wsf_vessels = WsfVesselsApi(self.fetch)
        self.wsf_schedule = WsfScheduleApi(self.fetch)
        self.cache_flush_date = CacheFlushDateApi(self.fetch)

    @property
    def config(self) -> WsdotClientConfig:
        return self._config

    @property
    def query_cache(self) -> QueryCache | None:
        return self._cache

    def _ensure_open(self) -> None:
        if self._closed:
            raise WsdotClientClosedError("AsyncWsdotClient is already closed")

    async def fetch(
        self,
        descriptor: EndpointDescriptor,
        params: Mapping[str, object] | None = None,
        *,
        mode: FetchMode = FetchMode.VALIDATED,
    ) -> Any:
        """Execute one endpoint call.

        Validated results of cacheable endpoints are served from the query
        cache while fresh.
        """

        self._ensure_open()
        cache = self._cache if mode is FetchMode.VALIDATED and descriptor.cacheable else None
        key = make_cache_key(descriptor.endpoint_id, params) if cache is not None else ""
        generation: int | None = None
        if cache is not None:
            cached = cache.get(key)
            if cached is not None:
                logger.debug("cache hit endpoint=%s", descriptor.endpoint_id)
                return cached
            if descriptor.cache_group is not None:
                generation = cache.generation(descriptor.cache_group)

        result = await self._pipeline.execute(descriptor, params, mode)

        if cache is not None:
            cache.set(
                key,
                result,
                ttl_seconds=descriptor.cache_strategy.ttl_seconds,
                group_key=descriptor.cache_group,
                expected_generation=generation,
            )
        return result

    async def fetch_by_id(
        self,
        endpoint_id: str,
        params: Mapping[str, object] | None = None,
        *,
        mode: FetchMode = FetchMode.VALIDATED,
    ) -> Any:
        return await self.fetch(get_endpoint(endpoint_id), params, mode=mode)

    def build_url(self, template: str, params: Mapping[str, object] | None = None) -> str:
        self._ensure_open()
        return self._pipeline.build_url(template, params)

    def inject_auth(self, url: str) -> str:
        self._ensure_open()
        return self._pipeline.inject_auth(url)

    def create_cache_flush_poller(
        self,
        *,
        sink: InvalidationSink | None = None,
        interval_seconds: float | None = None,
    ) -> CacheFlushPoller:
        """Create (but do not start) a poller over the four WSF flush markers.

        The poller is disposed together with the client.
        """

        self._ensure_open()
        resolved_sink = sink if sink is not None else self._cache
        if resolved_sink is None:
            raise WsdotConfigError("no invalidation sink: query cache is disabled")
        poller = CacheFlushPoller(
            self._pipeline,
            resolved_sink,
            groups=CACHE_FLUSH_DATE_ENDPOINTS,
            interval_seconds=interval_seconds or self._config.cache_flush.interval_seconds,
        )
        self._pollers.append(poller)
        return poller

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        for poller in self._pollers:
            await poller.dispose()
        self._pollers.clear()
        await self._pipeline.close()

    async def __aenter__(self) -> "AsyncWsdotClient":
        self._ensure_open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


__all__ = [
    "AsyncWsdotClient",
]
