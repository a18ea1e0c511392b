"""WSF Vessels API: real-time vessel locations."""

from __future__ import annotations

from pydantic import Field

from ..core.models import CacheStrategy, EndpointDescriptor, EndpointFetcher
from .schemas import NoParams, ParamsModel, ParamsValidator, ShapeValidator, WsdotDateTime, WsdotModel

CACHE_GROUP = "wsf-vessels"


class VesselLocation(WsdotModel):
    vessel_id: int = Field(alias="VesselID", gt=0)
    vessel_name: str | None = None
    mmsi: int | None = None
    departing_terminal_id: int | None = Field(default=None, alias="DepartingTerminalID")
    departing_terminal_name: str | None = None
    departing_terminal_abbrev: str | None = None
    arriving_terminal_id: int | None = Field(default=None, alias="ArrivingTerminalID")
    arriving_terminal_name: str | None = None
    arriving_terminal_abbrev: str | None = None
    latitude: float | None = Field(default=None, ge=-90, le=90)
    longitude: float | None = Field(default=None, ge=-180, le=180)
    speed: float | None = Field(default=None, ge=0)
    heading: float | None = Field(default=None, ge=0, le=359)
    in_service: bool | None = None
    at_dock: bool | None = None
    left_dock: WsdotDateTime | None = None
    eta: WsdotDateTime | None = None
    eta_basis: str | None = None
    scheduled_departure: WsdotDateTime | None = None
    op_route_abbrev: list[str] | None = None
    vessel_position_num: int | None = None
    sort_seq: int | None = None
    managed_by: int | None = None
    time_stamp: WsdotDateTime | None = None


class VesselIdParams(ParamsModel):
    vessel_id: int = Field(alias="vesselId", gt=0)


GET_VESSEL_LOCATIONS = EndpointDescriptor(
    endpoint_id="wsf-vessels/getVesselLocations",
    url_template="/ferries/api/vessels/rest/vessellocations",
    input_schema=ParamsValidator(NoParams),
    output_schema=ShapeValidator(list[VesselLocation]),
    cache_strategy=CacheStrategy.REALTIME,
    cache_group=CACHE_GROUP,
)

GET_VESSEL_LOCATIONS_BY_VESSEL_ID = EndpointDescriptor(
    endpoint_id="wsf-vessels/getVesselLocationsByVesselId",
    url_template="/ferries/api/vessels/rest/vessellocations/{vesselId}",
    input_schema=ParamsValidator(VesselIdParams),
    output_schema=ShapeValidator(VesselLocation),
    cache_strategy=CacheStrategy.REALTIME,
    cache_group=CACHE_GROUP,
)

ENDPOINTS = (GET_VESSEL_LOCATIONS, GET_VESSEL_LOCATIONS_BY_VESSEL_ID)


class WsfVesselsApi:
    def __init__(self, fetch: EndpointFetcher) -> None:
        self._fetch = fetch

    async def get_vessel_locations(self) -> list[VesselLocation]:
        return await self._fetch(GET_VESSEL_LOCATIONS, {})

    async def get_vessel_locations_by_vessel_id(self, vessel_id: int) -> VesselLocation:
        return await self._fetch(GET_VESSEL_LOCATIONS_BY_VESSEL_ID, {"vesselId": vessel_id})


__all__ = [
    "CACHE_GROUP",
    "VesselLocation",
    "VesselIdParams",
    "GET_VESSEL_LOCATIONS",
    "GET_VESSEL_LOCATIONS_BY_VESSEL_ID",
    "ENDPOINTS",
    "WsfVesselsApi",
]
