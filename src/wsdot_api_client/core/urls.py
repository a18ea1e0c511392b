"""URL template resolution and credential injection."""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from datetime import date
from urllib.parse import quote

import httpx

from .dates import format_path_date
from .models import ServiceFamily

logger = logging.getLogger("wsdot_api_client")

_PLACEHOLDER_RE = re.compile(r"\{[^{}]*\}")
_ORIGIN_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://[^/?#]*")
_REPEATED_SLASH_RE = re.compile(r"/{2,}")
_CREDENTIAL_RE = re.compile(
    r"([?&](?:" + "|".join(family.auth_param for family in ServiceFamily) + r")=)[^&#]*",
    re.IGNORECASE,
)


def format_param_value(value: object) -> str:
    """Text form of a request parameter; dates become ``YYYY-MM-DD``."""

    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, date):
        return format_path_date(value)
    return str(value)


def _substitute(text: str, values: Mapping[str, str]) -> str:
    for key, value in values.items():
        text = text.replace("{" + key + "}", value)
    return text


def _strip_path_placeholders(path: str) -> str:
    match = _ORIGIN_RE.match(path)
    origin = match.group(0) if match else ""
    rest = _PLACEHOLDER_RE.sub("", path[len(origin) :])
    rest = _REPEATED_SLASH_RE.sub("/", rest)
    if len(rest) > 1 and rest.endswith("/"):
        rest = rest.rstrip("/")
    return origin + rest


def resolve_against_base(relative: str, base_url: str) -> str:
    if _ORIGIN_RE.match(relative):
        return relative
    return base_url.rstrip("/") + "/" + relative.lstrip("/")


def build_url(
    template: str,
    params: Mapping[str, object] | None = None,
    *,
    base_url: str,
) -> str:
    """Resolve ``template`` against ``params`` and ``base_url``.

    Placeholders without a value are removed. In the query string the whole
    ``key={placeholder}`` pair is dropped so no empty assignment is sent.
    """

    values = {
        key: quote(format_param_value(value), safe=":,")
        for key, value in (params or {}).items()
        if value is not None
    }
    path, _, query = template.partition("?")
    path = _strip_path_placeholders(_substitute(path, values))

    segments: list[str] = []
    for segment in query.split("&") if query else ():
        resolved = _substitute(segment, values)
        if not resolved or _PLACEHOLDER_RE.search(resolved):
            continue
        segments.append(resolved)

    relative = path + ("?" + "&".join(segments) if segments else "")
    return resolve_against_base(relative, base_url)


def service_family_for_url(url: str) -> ServiceFamily | None:
    path = httpx.URL(url).path.lower()
    for family in ServiceFamily:
        if family.path_marker in path:
            return family
    return None


def inject_auth(url: str, credential: str) -> str:
    """Append the credential under the parameter name of the URL's service family."""

    family = service_family_for_url(url)
    if family is None:
        logger.warning("unknown service family; no credential injected url=%s", redact_url(url))
        return url
    return str(httpx.URL(url).copy_set_param(family.auth_param, credential))


def redact_url(url: str | None) -> str | None:
    if url is None:
        return None
    return _CREDENTIAL_RE.sub(r"\1***", url)


__all__ = [
    "format_param_value",
    "resolve_against_base",
    "build_url",
    "service_family_for_url",
    "inject_auth",
    "redact_url",
]
