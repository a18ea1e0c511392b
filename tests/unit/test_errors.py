from __future__ import annotations

import json
from datetime import timezone

import httpx
import pytest

from wsdot_api_client.core.dates import WireDateError
from wsdot_api_client.core.errors import (
    EmbeddedApiMessageError,
    ErrorKind,
    OutputValidationError,
    ScriptLoadError,
    ScriptTimeoutError,
    WsdotApiError,
    classify_error,
    has_embedded_error_message,
)
from wsdot_api_client.core.validation import ValidationFailure
from tests.shared.transport import http_status_error


def _json_error() -> json.JSONDecodeError:
    try:
        json.loads("{")
    except json.JSONDecodeError as exc:
        return exc
    raise AssertionError("expected JSONDecodeError")


@pytest.mark.parametrize(
    ("exc", "expected_kind"),
    [
        (httpx.ConnectError("connection refused"), ErrorKind.NETWORK_ERROR),
        (ScriptLoadError("script load failed"), ErrorKind.NETWORK_ERROR),
        (httpx.ReadTimeout("read timed out"), ErrorKind.TIMEOUT_ERROR),
        (ScriptTimeoutError("script request timed out"), ErrorKind.TIMEOUT_ERROR),
        (TimeoutError(), ErrorKind.TIMEOUT_ERROR),
        (http_status_error(429), ErrorKind.RATE_LIMIT_ERROR),
        (http_status_error(500), ErrorKind.API_ERROR),
        (http_status_error(404), ErrorKind.API_ERROR),
        (EmbeddedApiMessageError("Invalid access code"), ErrorKind.API_ERROR),
        (_json_error(), ErrorKind.TRANSFORM_ERROR),
        (WireDateError("bad date"), ErrorKind.TRANSFORM_ERROR),
        (ValidationFailure("bad params"), ErrorKind.TRANSFORM_ERROR),
        (OutputValidationError("bad shape"), ErrorKind.INVALID_RESPONSE),
        (RuntimeError("CORS request did not succeed"), ErrorKind.CORS_ERROR),
        (RuntimeError("blocked by cross-origin policy"), ErrorKind.CORS_ERROR),
        (RuntimeError("something odd"), ErrorKind.NETWORK_ERROR),
    ],
    ids=[
        "connect",
        "script-load",
        "read-timeout",
        "script-timeout",
        "builtin-timeout",
        "http-429",
        "http-500",
        "http-404",
        "embedded-message",
        "json-decode",
        "wire-date",
        "input-validation",
        "output-validation",
        "cors",
        "cross-origin",
        "fallback",
    ],
)
def test_classify_error_matrix(exc: BaseException, expected_kind: ErrorKind):
    error = classify_error(exc, endpoint="wsdot-traffic-flow/getTrafficFlows")
    assert error.kind is expected_kind
    assert error.endpoint == "wsdot-traffic-flow/getTrafficFlows"


def test_classify_error_keeps_http_status_and_retryability():
    rate_limited = classify_error(http_status_error(429), endpoint="e")
    assert rate_limited.http_status == 429
    assert rate_limited.retryable is True

    server = classify_error(http_status_error(503), endpoint="e")
    assert server.http_status == 503
    assert server.retryable is False

    network = classify_error(httpx.ConnectError("down"), endpoint="e")
    assert network.http_status is None
    assert network.retryable is True


def test_classify_error_passes_existing_error_through():
    original = WsdotApiError("x", kind=ErrorKind.API_ERROR, endpoint="e")
    assert classify_error(original, endpoint="other") is original


def test_error_record_redacts_credential_and_is_timestamped():
    error = classify_error(
        httpx.ConnectError("down"),
        endpoint="e",
        url="https://www.wsdot.wa.gov/traffic/x?accesscode=secret",
    )
    assert error.url == "https://www.wsdot.wa.gov/traffic/x?accesscode=***"
    assert error.timestamp.tzinfo is timezone.utc
    assert "secret" not in repr(error)


@pytest.mark.parametrize("kind", list(ErrorKind))
def test_every_kind_has_user_message(kind: ErrorKind):
    error = WsdotApiError("x", kind=kind)
    assert error.user_message
    assert error.kind == kind.value


def test_retryable_kinds():
    retryable = {kind for kind in ErrorKind if kind.retryable}
    assert retryable == {
        ErrorKind.NETWORK_ERROR,
        ErrorKind.TIMEOUT_ERROR,
        ErrorKind.RATE_LIMIT_ERROR,
    }


@pytest.mark.parametrize(
    ("payload", "expected"),
    [
        ({"Message": "Invalid access code"}, True),
        ({"Message": "The request failed"}, True),
        ({"Message": "Date is not valid"}, True),
        ({"Message": "Access code cannot be used"}, True),
        ({"Message": "An error has occurred."}, True),
        ({"Message": "OK"}, False),
        ({"message": "error"}, False),
        ({"Message": 5}, False),
        ([{"Message": "error"}], False),
        ("error", False),
        (None, False),
    ],
)
def test_has_embedded_error_message(payload: object, expected: bool):
    assert has_embedded_error_message(payload) is expected
