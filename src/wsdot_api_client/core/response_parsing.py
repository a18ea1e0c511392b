"""Response body parsing and wire-date conversion."""

from __future__ import annotations

import json

from .dates import is_wire_date, parse_wire_date


def parse_json_text(text: str) -> object:
    """Parse a response body; raises :class:`json.JSONDecodeError` on bad input."""

    if not isinstance(text, str):
        raise TypeError("response body must be text")
    return json.loads(text)


def convert_wire_dates(value: object) -> object:
    """Return a copy of ``value`` with every wire-date string parsed.

    Walks dicts and lists recursively; other values are returned unchanged.
    A string that looks like a wire date but fails to parse raises
    :class:`~wsdot_api_client.core.dates.WireDateError`.
    """

    if isinstance(value, str):
        return parse_wire_date(value) if is_wire_date(value) else value
    if isinstance(value, dict):
        return {key: convert_wire_dates(item) for key, item in value.items()}
    if isinstance(value, list):
        return [convert_wire_dates(item) for item in value]
    return value


__all__ = [
    "parse_json_text",
    "convert_wire_dates",
]
