"""Direct HTTP transport backed by httpx."""

from __future__ import annotations

import logging
from typing import Protocol

import httpx

from ..config import WsdotClientConfig
from .transport_shared import build_default_headers, build_default_timeout
from .urls import redact_url

logger = logging.getLogger("wsdot_api_client")


class AsyncHttpClient(Protocol):
    async def get(self, url: str) -> httpx.Response: ...
    async def aclose(self) -> None: ...


class DirectTransport:
    """Issues the request on the local network stack.

    Non-success HTTP statuses raise :class:`httpx.HTTPStatusError`; timeouts and
    connection failures surface as the corresponding httpx exceptions.
    """

    name = "direct"

    def __init__(
        self,
        config: WsdotClientConfig,
        *,
        client: AsyncHttpClient | None = None,
    ) -> None:
        self._config = config
        self._closed = False
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            headers=build_default_headers(config),
            timeout=build_default_timeout(config),
            follow_redirects=True,
        )

    async def fetch(self, url: str) -> str:
        if self._closed:
            raise RuntimeError("transport is already closed")
        response = await self._client.get(url)
        logger.debug(
            "response received url=%s http_status=%s",
            redact_url(url),
            response.status_code,
        )
        response.raise_for_status()
        return response.text

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            await self._client.aclose()


__all__ = [
    "AsyncHttpClient",
    "DirectTransport",
]
