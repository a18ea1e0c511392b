"""Endpoint descriptors and request-mode models."""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from .validation import Validator

_ENDPOINT_ID_RE = re.compile(r"^[a-z0-9-]+/[A-Za-z0-9]+$")


class ServiceFamily(str, Enum):
    """Upstream service family; decides the credential parameter name."""

    WSDOT = "wsdot"
    WSF = "wsf"

    @property
    def auth_param(self) -> str:
        if self is ServiceFamily.WSDOT:
            return "accesscode"
        return "apiaccesscode"

    @property
    def path_marker(self) -> str:
        if self is ServiceFamily.WSDOT:
            return "/traffic/"
        return "/ferries/"


class FetchMode(str, Enum):
    """How the pipeline post-processes a parsed response body."""

    RAW = "raw"
    NATIVE = "native"
    VALIDATED = "validated"


class CacheStrategy(Enum):
    """Freshness window for cached responses, in seconds."""

    REALTIME = 5.0
    MINUTE = 60.0
    FIVE_MINUTE = 300.0
    HOURLY = 3600.0
    DAILY = 86400.0
    DAILY_STATIC = 86400.0 * 2
    WEEKLY_STATIC = 86400.0 * 7
    NONE = 0.0

    @property
    def ttl_seconds(self) -> float:
        return float(self.value)


@dataclass(slots=True, frozen=True)
class EndpointDescriptor:
    """Static description of one remote operation.

    ``endpoint_id`` has the form ``"<api>/<function>"`` (for example
    ``"wsdot-traffic-flow/getTrafficFlowById"``); ``url_template`` is the
    host-relative path with ``{name}`` placeholders.
    """

    endpoint_id: str
    url_template: str
    input_schema: "Validator | None" = None
    output_schema: "Validator | None" = None
    cache_strategy: CacheStrategy = CacheStrategy.NONE
    cache_group: str | None = None

    def __post_init__(self) -> None:
        if _ENDPOINT_ID_RE.fullmatch(self.endpoint_id) is None:
            raise ValueError(f"endpoint_id must look like 'api/function': {self.endpoint_id!r}")
        if not self.url_template.startswith("/"):
            raise ValueError("url_template must start with '/'")

    @property
    def api(self) -> str:
        return self.endpoint_id.split("/", 1)[0]

    @property
    def function_name(self) -> str:
        return self.endpoint_id.split("/", 1)[1]

    @property
    def service_family(self) -> ServiceFamily | None:
        lowered = self.url_template.lower()
        for family in ServiceFamily:
            if family.path_marker in lowered:
                return family
        return None

    @property
    def cacheable(self) -> bool:
        return self.cache_strategy.ttl_seconds > 0


class EndpointFetcher(Protocol):
    """Callable used by API groups to execute one descriptor."""

    async def __call__(
        self,
        descriptor: EndpointDescriptor,
        params: Mapping[str, object] | None = None,
        *,
        mode: FetchMode = FetchMode.VALIDATED,
    ) -> Any: ...


__all__ = [
    "ServiceFamily",
    "FetchMode",
    "CacheStrategy",
    "EndpointDescriptor",
    "EndpointFetcher",
]
