"""Runtime detection and transport selection."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum

from ..config import WsdotClientConfig
from .direct_transport import DirectTransport
from .script_transport import ScriptHost, ScriptInjectionTransport
from .transport_shared import TransportStrategy

logger = logging.getLogger("wsdot_api_client")


class TransportKind(str, Enum):
    DIRECT = "direct"
    SCRIPT = "script"


@dataclass(slots=True, frozen=True)
class RuntimeEnvironment:
    """Facts about the interpreter that decide the transport."""

    is_test: bool
    is_browser: bool


def _is_test_environment(environ: Mapping[str, str]) -> bool:
    if environ.get("PYTEST_CURRENT_TEST"):
        return True
    return (environ.get("WSDOT_ENV") or "").strip().lower() == "test"


def _is_browser_environment() -> bool:
    if sys.platform != "emscripten":
        return False
    try:
        import js
    except ImportError:
        return False
    return getattr(js, "document", None) is not None


def detect_environment(environ: Mapping[str, str] | None = None) -> RuntimeEnvironment:
    env = os.environ if environ is None else environ
    return RuntimeEnvironment(
        is_test=_is_test_environment(env),
        is_browser=_is_browser_environment(),
    )


def select_transport_kind(
    environment: RuntimeEnvironment,
    *,
    force_script_injection: bool = False,
) -> TransportKind:
    """Pick a transport: tests always go direct, then browsers (or a forced
    setting) use script injection, everything else goes direct."""

    if environment.is_test:
        return TransportKind.DIRECT
    if environment.is_browser or force_script_injection:
        return TransportKind.SCRIPT
    return TransportKind.DIRECT


def create_transport(
    config: WsdotClientConfig,
    *,
    environment: RuntimeEnvironment | None = None,
    script_host: ScriptHost | None = None,
) -> TransportStrategy:
    resolved_env = environment or detect_environment()
    kind = select_transport_kind(
        resolved_env,
        force_script_injection=config.transport.force_script_injection,
    )
    logger.debug(
        "transport selected kind=%s is_test=%s is_browser=%s",
        kind.value,
        resolved_env.is_test,
        resolved_env.is_browser,
    )
    if kind is TransportKind.SCRIPT:
        return ScriptInjectionTransport(config, host=script_host)
    return DirectTransport(config)


__all__ = [
    "TransportKind",
    "RuntimeEnvironment",
    "detect_environment",
    "select_transport_kind",
    "create_transport",
]
