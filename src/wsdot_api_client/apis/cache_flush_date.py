"""WSF cache-flush date endpoints, one per data group."""

from __future__ import annotations

from datetime import datetime

from ..core.models import CacheStrategy, EndpointDescriptor, EndpointFetcher
from .schemas import NoParams, ParamsValidator, ShapeValidator, WsdotDateTime

WSF_SOURCES = ("fares", "vessels", "terminals", "schedule")


def cache_group_for(source: str) -> str:
    return f"wsf-{source}"


def _descriptor(source: str) -> EndpointDescriptor:
    return EndpointDescriptor(
        endpoint_id=f"wsf-{source}/cacheFlushDate",
        url_template=f"/ferries/api/{source}/rest/cacheflushdate",
        input_schema=ParamsValidator(NoParams),
        output_schema=ShapeValidator(WsdotDateTime),
        cache_strategy=CacheStrategy.NONE,
    )


CACHE_FLUSH_DATE_ENDPOINTS: dict[str, EndpointDescriptor] = {
    cache_group_for(source): _descriptor(source) for source in WSF_SOURCES
}

ENDPOINTS = tuple(CACHE_FLUSH_DATE_ENDPOINTS.values())


class CacheFlushDateApi:
    def __init__(self, fetch: EndpointFetcher) -> None:
        self._fetch = fetch

    async def get_cache_flush_date(self, source: str) -> datetime:
        group_key = cache_group_for(source)
        if group_key not in CACHE_FLUSH_DATE_ENDPOINTS:
            raise ValueError(f"unknown WSF source: {source!r} (expected one of {WSF_SOURCES})")
        return await self._fetch(CACHE_FLUSH_DATE_ENDPOINTS[group_key], {})


__all__ = [
    "WSF_SOURCES",
    "cache_group_for",
    "CACHE_FLUSH_DATE_ENDPOINTS",
    "ENDPOINTS",
    "CacheFlushDateApi",
]
