"""Shared helpers for direct/script-injection transports."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol

import httpx

from ..config import WsdotClientConfig


class TransportStrategy(Protocol):
    """Executes a GET against a fully resolved URL and returns the body text."""

    name: str

    async def fetch(self, url: str) -> str: ...
    async def close(self) -> None: ...


def build_default_headers(config: WsdotClientConfig) -> Mapping[str, str]:
    return {
        "Accept": "application/json",
        "Accept-Encoding": "gzip",
        "User-Agent": config.user_agent,
    }


def build_default_timeout(config: WsdotClientConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=config.transport.timeout_connect_seconds,
        read=config.transport.timeout_read_seconds,
        write=config.transport.timeout_write_seconds,
        pool=config.transport.timeout_pool_seconds,
    )


__all__ = [
    "TransportStrategy",
    "build_default_headers",
    "build_default_timeout",
]
