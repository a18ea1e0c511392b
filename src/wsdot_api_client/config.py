"""Client configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

DEFAULT_BASE_URL = "https://www.wsdot.wa.gov"
_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(slots=True, frozen=True)
class TransportConfig:
    """Transport-related settings."""

    timeout_connect_seconds: float = 5.0
    timeout_read_seconds: float = 30.0
    timeout_write_seconds: float = 30.0
    timeout_pool_seconds: float = 5.0
    script_timeout_seconds: float = 30.0
    force_script_injection: bool = False

    def validate(self) -> None:
        for field_name in (
            "timeout_connect_seconds",
            "timeout_read_seconds",
            "timeout_write_seconds",
            "timeout_pool_seconds",
            "script_timeout_seconds",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"transport.{field_name} must be > 0")
        if not isinstance(self.force_script_injection, bool):
            raise ValueError("transport.force_script_injection must be bool")


@dataclass(slots=True, frozen=True)
class CacheFlushConfig:
    """Cache-flush polling settings."""

    interval_seconds: float = 300.0

    def validate(self) -> None:
        if self.interval_seconds <= 0:
            raise ValueError("cache_flush.interval_seconds must be > 0")


@dataclass(slots=True, frozen=True)
class QueryCacheConfig:
    """In-memory response cache settings."""

    enabled: bool = True

    def validate(self) -> None:
        if not isinstance(self.enabled, bool):
            raise ValueError("cache.enabled must be bool")


@dataclass(slots=True, frozen=True)
class WsdotClientConfig:
    """Runtime configuration for the WSDOT/WSF client."""

    api_key: str | None = field(default=None, repr=False)
    base_url: str = DEFAULT_BASE_URL
    user_agent: str = "wsdot-api-client/0.1.0"

    transport: TransportConfig = field(default_factory=TransportConfig)
    cache_flush: CacheFlushConfig = field(default_factory=CacheFlushConfig)
    cache: QueryCacheConfig = field(default_factory=QueryCacheConfig)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "WsdotClientConfig":
        """Build a config from ``WSDOT_*`` environment variables.

        * ``WSDOT_ACCESS_TOKEN`` - access code issued by WSDOT.
        * ``WSDOT_BASE_URL`` - optional override of the production host.
        * ``WSDOT_FORCE_JSONP`` - force the script-injection transport.
        """

        env = os.environ if environ is None else environ
        api_key = (env.get("WSDOT_ACCESS_TOKEN") or "").strip() or None
        base_url = (env.get("WSDOT_BASE_URL") or "").strip() or DEFAULT_BASE_URL
        force = (env.get("WSDOT_FORCE_JSONP") or "").strip().lower() in _TRUTHY
        return cls(
            api_key=api_key,
            base_url=base_url,
            transport=TransportConfig(force_script_injection=force),
        )

    def get_credential(self) -> str:
        credential = (self.api_key or "").strip()
        if not credential:
            raise ValueError("api_key is not configured (set WSDOT_ACCESS_TOKEN)")
        return credential

    def get_base_url(self) -> str:
        return self.base_url.rstrip("/")

    def validate(self) -> None:
        if not self.base_url or not self.base_url.strip():
            raise ValueError("base_url must not be empty")
        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("base_url must be an absolute http(s) URL")
        if self.api_key is not None and not isinstance(self.api_key, str):
            raise ValueError("api_key must be str")
        self.transport.validate()
        self.cache_flush.validate()
        self.cache.validate()


__all__ = [
    "DEFAULT_BASE_URL",
    "TransportConfig",
    "CacheFlushConfig",
    "QueryCacheConfig",
    "WsdotClientConfig",
]
