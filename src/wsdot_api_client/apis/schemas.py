"""Pydantic adapters for endpoint input/output shapes."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, TypeAdapter, ValidationError
from pydantic.alias_generators import to_pascal

from ..core.dates import WireDateError, is_wire_date, parse_wire_date
from ..core.validation import ValidationFailure


def _coerce_wire_date(value: Any) -> Any:
    if isinstance(value, str) and is_wire_date(value):
        return parse_wire_date(value)
    return value


WsdotDateTime = Annotated[datetime, BeforeValidator(_coerce_wire_date)]


class WsdotModel(BaseModel):
    """Base for upstream records; field aliases follow the PascalCase wire names."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class ParamsModel(BaseModel):
    """Base for request parameter sets; aliases are the URL placeholder names."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")


def _describe(exc: ValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
        for error in exc.errors()
    ]


def _raise_wire_date_error(exc: ValidationError) -> None:
    # A malformed date string is a conversion failure, not a shape mismatch.
    for error in exc.errors():
        cause = error.get("ctx", {}).get("error")
        if isinstance(cause, WireDateError):
            raise cause from exc


class ShapeValidator:
    """Validates a parsed payload against any pydantic-compatible type."""

    def __init__(self, shape: Any) -> None:
        self._name = getattr(shape, "__name__", repr(shape))
        self._adapter = TypeAdapter(shape)

    def validate(self, value: object) -> object:
        try:
            return self._adapter.validate_python(value)
        except ValidationError as exc:
            _raise_wire_date_error(exc)
            errors = _describe(exc)
            raise ValidationFailure(
                f"value does not match {self._name}: {'; '.join(errors[:3])}",
                errors=errors,
            ) from exc


class ParamsValidator:
    """Validates request parameters and returns them keyed by placeholder name."""

    def __init__(self, model: type[ParamsModel]) -> None:
        self._model = model

    def validate(self, value: object) -> dict[str, object]:
        try:
            parsed = self._model.model_validate(value)
        except ValidationError as exc:
            errors = _describe(exc)
            raise ValidationFailure(
                f"invalid parameters for {self._model.__name__}: {'; '.join(errors[:3])}",
                errors=errors,
            ) from exc
        return parsed.model_dump(by_alias=True)


class NoParams(ParamsModel):
    pass


__all__ = [
    "WsdotDateTime",
    "WsdotModel",
    "ParamsModel",
    "ShapeValidator",
    "ParamsValidator",
    "NoParams",
]
