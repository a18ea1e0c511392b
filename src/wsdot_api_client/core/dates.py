"""Wire-format date handling.

The upstream services encode instants inside JSON strings as
``/Date(<millis>[+-HHMM])/`` (optionally with escaped slashes, ``\\/Date(...)\\/``).
``<millis>`` is a signed count of milliseconds since the Unix epoch and is
already UTC-relative; the optional suffix only records the offset the server
computed the value in and never shifts the instant.

Dates sent *to* the services as URL path segments use plain ``YYYY-MM-DD``
and are handled by :func:`format_path_date`, independently of the wire form.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone

_PREFIX = "/Date("
_SUFFIX = ")/"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_MILLIS_RE = re.compile(r"-?[0-9]+")
_OFFSET_RE = re.compile(r"[+-][0-9]{4}")
_WIRE_DATE_RE = re.compile(r"\\?/Date\(.*\)\\?/", re.DOTALL)


class WireDateError(ValueError):
    """Raised when a string cannot be read as a wire-format date."""


@dataclass(slots=True, frozen=True)
class WireTimestamp:
    """Parsed wire date that keeps the informational offset suffix."""

    millis: int
    offset: str | None = None

    def to_datetime(self) -> datetime:
        return millis_to_datetime(self.millis)

    def to_wire(self) -> str:
        return f"{_PREFIX}{self.millis}{self.offset or ''}{_SUFFIX}"

    @property
    def utc_offset(self) -> timedelta | None:
        if self.offset is None:
            return None
        sign = -1 if self.offset[0] == "-" else 1
        hours = int(self.offset[1:3])
        minutes = int(self.offset[3:5])
        return sign * timedelta(hours=hours, minutes=minutes)


def is_wire_date(value: object) -> bool:
    """Cheap shape check; does not guarantee :func:`parse_wire_date` succeeds."""

    return isinstance(value, str) and _WIRE_DATE_RE.fullmatch(value.strip()) is not None


def millis_to_datetime(millis: int) -> datetime:
    try:
        return _EPOCH + timedelta(milliseconds=millis)
    except OverflowError as exc:
        raise WireDateError(f"timestamp out of range: {millis}") from exc


def datetime_to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - _EPOCH) // timedelta(milliseconds=1)


def _offset_index(interior: str) -> int:
    # Position 0 is skipped so a negative timestamp's sign is not read as an offset.
    for index, char in enumerate(interior):
        if index > 0 and char in "+-":
            return index
    return -1


def parse_wire_timestamp(text: str) -> WireTimestamp:
    if not isinstance(text, str):
        raise WireDateError("wire date must be a string")
    raw = text.strip()
    if not raw:
        raise WireDateError("wire date is empty")

    normalized = raw.replace("\\/", "/")
    if not normalized.startswith(_PREFIX) or not normalized.endswith(_SUFFIX):
        raise WireDateError(f"missing /Date(...)/ delimiters: {text!r}")
    interior = normalized[len(_PREFIX) : -len(_SUFFIX)]

    split_at = _offset_index(interior)
    if split_at < 0:
        millis_text, offset = interior, None
    else:
        millis_text, offset = interior[:split_at], interior[split_at:]

    if _MILLIS_RE.fullmatch(millis_text) is None:
        raise WireDateError(f"invalid millisecond count in {text!r}")
    if offset is not None and _OFFSET_RE.fullmatch(offset) is None:
        raise WireDateError(f"invalid offset suffix in {text!r}")

    millis = int(millis_text)
    millis_to_datetime(millis)
    return WireTimestamp(millis=millis, offset=offset)


def parse_wire_date(text: str) -> datetime:
    """Parse a wire date into an aware UTC ``datetime``."""

    return parse_wire_timestamp(text).to_datetime()


def format_wire_date(value: datetime | int | WireTimestamp, *, offset: str | None = None) -> str:
    if isinstance(value, WireTimestamp):
        return value.to_wire()
    if isinstance(value, datetime):
        millis = datetime_to_millis(value)
    elif isinstance(value, int) and not isinstance(value, bool):
        millis = value
    else:
        raise TypeError("value must be datetime, int or WireTimestamp")
    if offset is not None and _OFFSET_RE.fullmatch(offset) is None:
        raise ValueError("offset must look like +HHMM or -HHMM")
    return WireTimestamp(millis=millis, offset=offset).to_wire()


def format_path_date(value: date) -> str:
    """Render a calendar date as ``YYYY-MM-DD`` for URL path segments."""

    day = value.date() if isinstance(value, datetime) else value
    return f"{day.year:04d}-{day.month:02d}-{day.day:02d}"


__all__ = [
    "WireDateError",
    "WireTimestamp",
    "is_wire_date",
    "millis_to_datetime",
    "datetime_to_millis",
    "parse_wire_timestamp",
    "parse_wire_date",
    "format_wire_date",
    "format_path_date",
]
