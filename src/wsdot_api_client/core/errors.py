"""Error types and failure classification."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum

import httpx

from .dates import WireDateError
from .urls import redact_url
from .validation import ValidationFailure

_FAILURE_TERMS = ("failed", "invalid", "not valid", "cannot be used", "error")


class ErrorKind(str, Enum):
    NETWORK_ERROR = "NETWORK_ERROR"
    TIMEOUT_ERROR = "TIMEOUT_ERROR"
    RATE_LIMIT_ERROR = "RATE_LIMIT_ERROR"
    API_ERROR = "API_ERROR"
    CORS_ERROR = "CORS_ERROR"
    TRANSFORM_ERROR = "TRANSFORM_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"

    @property
    def retryable(self) -> bool:
        return self in _RETRYABLE_KINDS


_RETRYABLE_KINDS = frozenset(
    {ErrorKind.NETWORK_ERROR, ErrorKind.TIMEOUT_ERROR, ErrorKind.RATE_LIMIT_ERROR}
)

_USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.NETWORK_ERROR: "Network connection failed. Please check your internet connection.",
    ErrorKind.TIMEOUT_ERROR: "Request timed out. Please try again.",
    ErrorKind.RATE_LIMIT_ERROR: "Too many requests. Please wait before retrying.",
    ErrorKind.API_ERROR: "The API is currently unavailable. Please try again later.",
    ErrorKind.CORS_ERROR: "Cross-origin request failed. This may be a browser security issue.",
    ErrorKind.TRANSFORM_ERROR: "The data could not be processed.",
    ErrorKind.INVALID_RESPONSE: "Received an invalid response from the server.",
}


class WsdotError(Exception):
    """Base exception for this package."""


class WsdotConfigError(WsdotError):
    """Client configuration is missing or invalid."""


class WsdotClientClosedError(WsdotError):
    """Raised when the client is used after close."""


class WsdotApiError(WsdotError):
    """A single failed call, classified into one :class:`ErrorKind`."""

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        endpoint: str | None = None,
        url: str | None = None,
        http_status: int | None = None,
        timestamp: datetime | None = None,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.endpoint = endpoint
        self.url = redact_url(url)
        self.http_status = http_status
        self.timestamp = timestamp or datetime.now(timezone.utc)

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    @property
    def user_message(self) -> str:
        return _USER_MESSAGES[self.kind]

    def __repr__(self) -> str:
        return (
            f"WsdotApiError(kind={self.kind.value}, endpoint={self.endpoint!r}, "
            f"http_status={self.http_status!r}, message={str(self)!r})"
        )


class ScriptLoadError(ConnectionError):
    """The injected script element failed to load."""


class ScriptTimeoutError(TimeoutError):
    """The injected script never invoked its callback in time."""


class EmbeddedApiMessageError(Exception):
    """A successful transport returned a payload describing a failure."""


class OutputValidationError(Exception):
    """Response payload did not match the endpoint's output shape."""


def has_embedded_error_message(payload: object) -> bool:
    if not isinstance(payload, Mapping):
        return False
    message = payload.get("Message")
    if not isinstance(message, str):
        return False
    lowered = message.lower()
    return any(term in lowered for term in _FAILURE_TERMS)


def _kind_from_message(message: str) -> ErrorKind:
    lowered = message.lower()
    if "timeout" in lowered or "timed out" in lowered:
        return ErrorKind.TIMEOUT_ERROR
    if "cors" in lowered or "cross-origin" in lowered:
        return ErrorKind.CORS_ERROR
    if "invalid response" in lowered or "empty body" in lowered:
        return ErrorKind.INVALID_RESPONSE
    return ErrorKind.NETWORK_ERROR


def classify_error(
    exc: BaseException,
    *,
    endpoint: str | None,
    url: str | None = None,
) -> WsdotApiError:
    """Map a raw failure to the caller-visible error record."""

    if isinstance(exc, WsdotApiError):
        return exc

    message = str(exc) or exc.__class__.__name__
    http_status: int | None = None

    if isinstance(exc, httpx.HTTPStatusError):
        http_status = exc.response.status_code
        kind = ErrorKind.RATE_LIMIT_ERROR if http_status == 429 else ErrorKind.API_ERROR
        message = f"HTTP {http_status} from upstream"
    elif isinstance(exc, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
        kind = ErrorKind.TIMEOUT_ERROR
    elif isinstance(exc, EmbeddedApiMessageError):
        kind = ErrorKind.API_ERROR
    elif isinstance(exc, OutputValidationError):
        kind = ErrorKind.INVALID_RESPONSE
    elif isinstance(exc, (json.JSONDecodeError, WireDateError, ValidationFailure)):
        kind = ErrorKind.TRANSFORM_ERROR
    elif isinstance(exc, (httpx.TransportError, ScriptLoadError)):
        kind = ErrorKind.NETWORK_ERROR
    else:
        kind = _kind_from_message(message)

    return WsdotApiError(
        message,
        kind=kind,
        endpoint=endpoint,
        url=url,
        http_status=http_status,
    )


__all__ = [
    "ErrorKind",
    "WsdotError",
    "WsdotConfigError",
    "WsdotClientClosedError",
    "WsdotApiError",
    "ScriptLoadError",
    "ScriptTimeoutError",
    "EmbeddedApiMessageError",
    "OutputValidationError",
    "has_embedded_error_message",
    "classify_error",
]
