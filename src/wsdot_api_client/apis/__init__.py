"""Bundled endpoint groups."""

from .border_crossings import BorderCrossing, BorderCrossingsApi
from .cache_flush_date import CACHE_FLUSH_DATE_ENDPOINTS, CacheFlushDateApi
from .registry import ENDPOINT_REGISTRY, get_endpoint, list_endpoint_ids
from .traffic_flow import TrafficFlow, TrafficFlowApi
from .wsf_schedule import Schedule, WsfScheduleApi
from .wsf_vessels import VesselLocation, WsfVesselsApi

__all__ = [
    "BorderCrossing",
    "BorderCrossingsApi",
    "CACHE_FLUSH_DATE_ENDPOINTS",
    "CacheFlushDateApi",
    "ENDPOINT_REGISTRY",
    "get_endpoint",
    "list_endpoint_ids",
    "TrafficFlow",
    "TrafficFlowApi",
    "Schedule",
    "WsfScheduleApi",
    "VesselLocation",
    "WsfVesselsApi",
]
