"""Shared helpers for client bootstrap."""

from __future__ import annotations

from .config import WsdotClientConfig
from .core.errors import WsdotConfigError
from .core.query_cache import MemoryQueryCache, QueryCache


def validate_client_config(config: WsdotClientConfig) -> None:
    try:
        config.validate()
    except ValueError as exc:
        raise WsdotConfigError(str(exc)) from exc


def resolve_query_cache(
    *,
    config: WsdotClientConfig,
    query_cache: QueryCache | None,
) -> QueryCache | None:
    if query_cache is not None:
        return query_cache
    if config.cache.enabled:
        return MemoryQueryCache()
    return None


__all__ = [
    "validate_client_config",
    "resolve_query_cache",
]
