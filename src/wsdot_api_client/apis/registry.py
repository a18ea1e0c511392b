"""Lookup of bundled endpoint descriptors by id."""

from __future__ import annotations

from types import MappingProxyType

from ..core.models import EndpointDescriptor
from . import border_crossings, cache_flush_date, traffic_flow, wsf_schedule, wsf_vessels


def _index(*groups: tuple[EndpointDescriptor, ...]) -> dict[str, EndpointDescriptor]:
    index: dict[str, EndpointDescriptor] = {}
    for group in groups:
        for descriptor in group:
            if descriptor.endpoint_id in index:
                raise ValueError(f"duplicate endpoint id: {descriptor.endpoint_id}")
            index[descriptor.endpoint_id] = descriptor
    return index


ENDPOINT_REGISTRY = MappingProxyType(
    _index(
        traffic_flow.ENDPOINTS,
        border_crossings.ENDPOINTS,
        wsf_vessels.ENDPOINTS,
        wsf_schedule.ENDPOINTS,
        cache_flush_date.ENDPOINTS,
    )
)


def get_endpoint(endpoint_id: str) -> EndpointDescriptor:
    try:
        return ENDPOINT_REGISTRY[endpoint_id]
    except KeyError:
        raise KeyError(f"unknown endpoint id: {endpoint_id!r}") from None


def list_endpoint_ids() -> list[str]:
    return sorted(ENDPOINT_REGISTRY)


__all__ = [
    "ENDPOINT_REGISTRY",
    "get_endpoint",
    "list_endpoint_ids",
]
