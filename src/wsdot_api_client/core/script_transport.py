"""Script-injection (JSONP) transport for browser-hosted interpreters.

The upstream services do not send CORS headers, so a page cannot read their
responses with a plain request. They do honour a ``callback`` query parameter
and wrap the JSON body in a call to that function. This transport injects a
``<script>`` element pointing at such a URL and waits for the callback.

All page manipulation goes through :class:`ScriptHost`; the only concrete host
is :class:`PyodideScriptHost`.
"""

from __future__ import annotations

import asyncio
import json
import logging
import random
import time
from collections.abc import Callable
from typing import Any, Protocol

import httpx

from ..config import WsdotClientConfig
from .errors import (
    EmbeddedApiMessageError,
    ScriptLoadError,
    ScriptTimeoutError,
    has_embedded_error_message,
)
from .urls import redact_url

logger = logging.getLogger("wsdot_api_client")

CALLBACK_PARAM = "callback"


class ScriptHost(Protocol):
    """Page-level operations needed by the script-injection transport."""

    def attach(
        self,
        name: str,
        src: str,
        *,
        on_payload: Callable[[object], None],
        on_error: Callable[[str], None],
    ) -> None:
        """Bind a global callback ``name`` and inject a script loading ``src``."""

    def detach(self, name: str) -> None:
        """Remove the script element and callback binding for ``name``."""


class PyodideScriptHost:
    """ScriptHost for Pyodide, using the page DOM through the ``js`` module."""

    def __init__(self) -> None:
        self._bindings: dict[str, tuple[Any, ...]] = {}

    def attach(
        self,
        name: str,
        src: str,
        *,
        on_payload: Callable[[object], None],
        on_error: Callable[[str], None],
    ) -> None:
        import js
        from pyodide.ffi import create_proxy

        def _on_callback(data: Any) -> None:
            on_payload(data.to_py() if hasattr(data, "to_py") else data)

        def _on_error(_event: Any) -> None:
            on_error(f"script load failed callback={name}")

        callback_proxy = create_proxy(_on_callback)
        error_proxy = create_proxy(_on_error)
        setattr(js.globalThis, name, callback_proxy)

        script = js.document.createElement("script")
        script.src = src
        script.onerror = error_proxy
        js.document.head.appendChild(script)
        self._bindings[name] = (script, callback_proxy, error_proxy)

    def detach(self, name: str) -> None:
        binding = self._bindings.pop(name, None)
        if binding is None:
            return
        import js

        script, *proxies = binding
        if script.parentNode is not None:
            script.parentNode.removeChild(script)
        js.Reflect.deleteProperty(js.globalThis, name)
        for proxy in proxies:
            proxy.destroy()


class ScriptInjectionTransport:
    """Fetch via an injected script tag and a per-call global callback."""

    name = "script"

    def __init__(
        self,
        config: WsdotClientConfig,
        *,
        host: ScriptHost | None = None,
        clock: Callable[[], float] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._timeout_seconds = config.transport.script_timeout_seconds
        self._host = host or PyodideScriptHost()
        self._clock = clock or time.time
        self._rng = rng or random.Random()
        self._in_flight: set[str] = set()
        self._closed = False

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    def new_callback_name(self) -> str:
        while True:
            millis = int(self._clock() * 1000)
            name = f"jsonp_{millis}_{self._rng.getrandbits(32):08x}"
            if name not in self._in_flight:
                return name

    async def fetch(self, url: str) -> str:
        if self._closed:
            raise RuntimeError("transport is already closed")

        loop = asyncio.get_running_loop()
        future: asyncio.Future[object] = loop.create_future()
        name = self.new_callback_name()
        src = str(httpx.URL(url).copy_set_param(CALLBACK_PARAM, name))

        def _on_payload(payload: object) -> None:
            if not future.done():
                future.set_result(payload)

        def _on_error(message: str) -> None:
            if not future.done():
                future.set_exception(ScriptLoadError(message))

        self._in_flight.add(name)
        logger.debug("script inject callback=%s url=%s", name, redact_url(url))
        try:
            self._host.attach(name, src, on_payload=_on_payload, on_error=_on_error)
            try:
                payload = await asyncio.wait_for(future, self._timeout_seconds)
            except asyncio.TimeoutError as exc:
                raise ScriptTimeoutError(
                    f"script request timed out after {self._timeout_seconds}s"
                ) from exc
        finally:
            self._in_flight.discard(name)
            self._host.detach(name)

        if has_embedded_error_message(payload):
            raise EmbeddedApiMessageError(str(payload["Message"]))  # type: ignore[index]
        return json.dumps(payload)

    async def close(self) -> None:
        self._closed = True


__all__ = [
    "CALLBACK_PARAM",
    "ScriptHost",
    "PyodideScriptHost",
    "ScriptInjectionTransport",
]
