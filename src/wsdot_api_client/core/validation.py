"""Opaque schema capability used by endpoint descriptors."""

from __future__ import annotations

from typing import Protocol


class ValidationFailure(ValueError):
    """Value did not satisfy a schema."""

    def __init__(self, message: str, *, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class Validator(Protocol):
    """Validates a value, returning the (possibly coerced) result.

    Implementations raise :class:`ValidationFailure` on mismatch.
    """

    def validate(self, value: object) -> object: ...


__all__ = [
    "ValidationFailure",
    "Validator",
]
