"""WSDOT Border Crossings API."""

from __future__ import annotations

from ..core.models import CacheStrategy, EndpointDescriptor, EndpointFetcher
from .schemas import NoParams, ParamsValidator, ShapeValidator, WsdotDateTime, WsdotModel


class BorderCrossingLocation(WsdotModel):
    description: str | None = None
    direction: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    mile_post: float | None = None
    road_name: str | None = None


class BorderCrossing(WsdotModel):
    """Wait time at one US/Canada crossing lane; ``wait_time`` is in minutes."""

    border_crossing_location: BorderCrossingLocation | None = None
    crossing_name: str | None = None
    time: WsdotDateTime | None = None
    wait_time: int | None = None


GET_BORDER_CROSSINGS = EndpointDescriptor(
    endpoint_id="wsdot-border-crossings/getBorderCrossings",
    url_template="/Traffic/api/BorderCrossings/BorderCrossingsREST.svc/GetBorderCrossingsAsJson",
    input_schema=ParamsValidator(NoParams),
    output_schema=ShapeValidator(list[BorderCrossing]),
    cache_strategy=CacheStrategy.MINUTE,
)

ENDPOINTS = (GET_BORDER_CROSSINGS,)


class BorderCrossingsApi:
    def __init__(self, fetch: EndpointFetcher) -> None:
        self._fetch = fetch

    async def get_border_crossings(self) -> list[BorderCrossing]:
        return await self._fetch(GET_BORDER_CROSSINGS, {})


__all__ = [
    "BorderCrossingLocation",
    "BorderCrossing",
    "GET_BORDER_CROSSINGS",
    "ENDPOINTS",
    "BorderCrossingsApi",
]
