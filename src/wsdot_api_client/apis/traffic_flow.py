"""WSDOT Traffic Flow API."""

from __future__ import annotations

from pydantic import Field

from ..core.models import CacheStrategy, EndpointDescriptor, EndpointFetcher
from .schemas import NoParams, ParamsModel, ParamsValidator, ShapeValidator, WsdotDateTime, WsdotModel

_BASE = "/traffic/api/TrafficFlow/TrafficFlowREST.svc"


class FlowStationLocation(WsdotModel):
    description: str | None = None
    direction: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    mile_post: float | None = None
    road_name: str | None = None


class TrafficFlow(WsdotModel):
    """One flow station reading.

    ``flow_reading_value`` is 0 (unknown) through 4 (stop and go).
    """

    flow_data_id: int | None = Field(default=None, alias="FlowDataID")
    flow_reading_value: int | None = None
    flow_station_location: FlowStationLocation | None = None
    region: str | None = None
    station_name: str | None = None
    time: WsdotDateTime | None = None


class TrafficFlowByIdParams(ParamsModel):
    flow_data_id: int = Field(alias="flowDataID", gt=0)


GET_TRAFFIC_FLOW_BY_ID = EndpointDescriptor(
    endpoint_id="wsdot-traffic-flow/getTrafficFlowById",
    url_template=f"{_BASE}/GetTrafficFlowAsJson?FlowDataID={{flowDataID}}",
    input_schema=ParamsValidator(TrafficFlowByIdParams),
    output_schema=ShapeValidator(TrafficFlow),
    cache_strategy=CacheStrategy.MINUTE,
)

GET_TRAFFIC_FLOWS = EndpointDescriptor(
    endpoint_id="wsdot-traffic-flow/getTrafficFlows",
    url_template=f"{_BASE}/GetTrafficFlowsAsJson",
    input_schema=ParamsValidator(NoParams),
    output_schema=ShapeValidator(list[TrafficFlow]),
    cache_strategy=CacheStrategy.MINUTE,
)

ENDPOINTS = (GET_TRAFFIC_FLOW_BY_ID, GET_TRAFFIC_FLOWS)


class TrafficFlowApi:
    def __init__(self, fetch: EndpointFetcher) -> None:
        self._fetch = fetch

    async def get_traffic_flow_by_id(self, flow_data_id: int) -> TrafficFlow:
        return await self._fetch(GET_TRAFFIC_FLOW_BY_ID, {"flowDataID": flow_data_id})

    async def get_traffic_flows(self) -> list[TrafficFlow]:
        return await self._fetch(GET_TRAFFIC_FLOWS, {})


__all__ = [
    "FlowStationLocation",
    "TrafficFlow",
    "TrafficFlowByIdParams",
    "GET_TRAFFIC_FLOW_BY_ID",
    "GET_TRAFFIC_FLOWS",
    "ENDPOINTS",
    "TrafficFlowApi",
]
