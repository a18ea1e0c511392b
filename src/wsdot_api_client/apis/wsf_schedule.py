"""WSF Schedule API: sailings by route and today's remaining sailings."""

from __future__ import annotations

from datetime import date

from pydantic import Field

from ..core.models import CacheStrategy, EndpointDescriptor, EndpointFetcher
from .schemas import ParamsModel, ParamsValidator, ShapeValidator, WsdotDateTime, WsdotModel

CACHE_GROUP = "wsf-schedule"


class ScheduleTime(WsdotModel):
    departing_time: WsdotDateTime | None = None
    arriving_time: WsdotDateTime | None = None
    loading_rule: int | None = None
    vessel_id: int | None = Field(default=None, alias="VesselID")
    vessel_name: str | None = None
    vessel_handicap_accessible: bool | None = None
    vessel_position_num: int | None = None
    routes: list[int] | None = None
    annotation_indexes: list[int] | None = None


class ScheduleTerminalCombo(WsdotModel):
    departing_terminal_id: int | None = Field(default=None, alias="DepartingTerminalID")
    departing_terminal_name: str | None = None
    arriving_terminal_id: int | None = Field(default=None, alias="ArrivingTerminalID")
    arriving_terminal_name: str | None = None
    sailing_notes: str | None = None
    annotations: list[str] | None = None
    annotations_ivr: list[str] | None = Field(default=None, alias="AnnotationsIVR")
    times: list[ScheduleTime] | None = None


class Schedule(WsdotModel):
    schedule_id: int | None = Field(default=None, alias="ScheduleID")
    schedule_name: str | None = None
    schedule_season: int | None = None
    schedule_pdf_url: str | None = Field(default=None, alias="SchedulePDFUrl")
    schedule_start: WsdotDateTime | None = None
    schedule_end: WsdotDateTime | None = None
    all_routes: list[int] | None = None
    terminal_combos: list[ScheduleTerminalCombo] | None = None


class ScheduleByRouteParams(ParamsModel):
    trip_date: date = Field(alias="tripDate")
    route_id: int = Field(alias="routeId", gt=0)


class ScheduleTodayParams(ParamsModel):
    departing_terminal_id: int = Field(alias="departingTerminalId", gt=0)
    arriving_terminal_id: int = Field(alias="arrivingTerminalId", gt=0)
    only_remaining_times: bool | None = Field(default=None, alias="onlyRemainingTimes")


GET_SCHEDULE_BY_ROUTE = EndpointDescriptor(
    endpoint_id="wsf-schedule/getScheduleByRoute",
    url_template="/ferries/api/schedule/rest/schedulebyroute/{tripDate}/{routeId}",
    input_schema=ParamsValidator(ScheduleByRouteParams),
    output_schema=ShapeValidator(Schedule),
    cache_strategy=CacheStrategy.DAILY,
    cache_group=CACHE_GROUP,
)

# onlyRemainingTimes is optional; the trailing segment is dropped when omitted.
GET_SCHEDULE_TODAY_BY_TERMINALS = EndpointDescriptor(
    endpoint_id="wsf-schedule/getScheduleTodayByTerminals",
    url_template=(
        "/ferries/api/schedule/rest/scheduletoday/"
        "{departingTerminalId}/{arrivingTerminalId}/{onlyRemainingTimes}"
    ),
    input_schema=ParamsValidator(ScheduleTodayParams),
    output_schema=ShapeValidator(Schedule),
    cache_strategy=CacheStrategy.FIVE_MINUTE,
    cache_group=CACHE_GROUP,
)

ENDPOINTS = (GET_SCHEDULE_BY_ROUTE, GET_SCHEDULE_TODAY_BY_TERMINALS)


class WsfScheduleApi:
    def __init__(self, fetch: EndpointFetcher) -> None:
        self._fetch = fetch

    async def get_schedule_by_route(self, trip_date: date, route_id: int) -> Schedule:
        return await self._fetch(
            GET_SCHEDULE_BY_ROUTE,
            {"tripDate": trip_date, "routeId": route_id},
        )

    async def get_schedule_today_by_terminals(
        self,
        departing_terminal_id: int,
        arriving_terminal_id: int,
        *,
        only_remaining_times: bool | None = None,
    ) -> Schedule:
        return await self._fetch(
            GET_SCHEDULE_TODAY_BY_TERMINALS,
            {
                "departingTerminalId": departing_terminal_id,
                "arrivingTerminalId": arriving_terminal_id,
                "onlyRemainingTimes": only_remaining_times,
            },
        )


__all__ = [
    "CACHE_GROUP",
    "ScheduleTime",
    "ScheduleTerminalCombo",
    "Schedule",
    "ScheduleByRouteParams",
    "ScheduleTodayParams",
    "GET_SCHEDULE_BY_ROUTE",
    "GET_SCHEDULE_TODAY_BY_TERMINALS",
    "ENDPOINTS",
    "WsfScheduleApi",
]
