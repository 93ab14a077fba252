"""Conversion of loosely-typed JSON values into declared field types."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from datetime import date, datetime
from enum import Enum
from typing import Any

from sellerkit.core.errors import CoercionError, InvalidDateTimeError, InvalidEnumValueError
from sellerkit.dto.schema import FieldKind, FieldSpec, classify

TRUE_STRINGS = frozenset({"1", "true", "yes", "y", "on"})
FALSE_STRINGS = frozenset({"0", "false", "no", "n", "off", ""})

_NUMERIC_PREFIX = re.compile(
    r"\s*[+-]?(?:(?P<int>\d+)(?P<frac>\.\d*)?|\.\d+)(?P<exp>[eE][+-]?\d+)?"
)

NestedDecoder = Callable[[type, Mapping[str, Any]], Any]


def _from_dict(target: type, value: Mapping[str, Any]) -> Any:
    return target.from_dict(value)  # type: ignore[attr-defined]


class TypeCoercionEngine:
    """Applies the coercion rule of a declared type to a raw value.

    ``None`` always passes through.  Values already of the target type are
    returned unchanged; anything the engine cannot classify (unions of
    several types, ``Any``, ``dict[...]``) is returned as is.

    Args:
        decode_nested: Called as ``decode_nested(dto_type, mapping)``
            for nested DTO fields.  Defaults to ``dto_type.from_dict``.
    """

    def __init__(self, decode_nested: NestedDecoder | None = None) -> None:
        self._decode_nested = decode_nested or _from_dict

    def coerce(self, annotation: Any, value: Any) -> Any:
        if value is None:
            return None
        kind, target = classify(annotation)
        return self._apply(kind, target, value)

    def coerce_field(self, spec: FieldSpec, value: Any) -> Any:
        if value is None:
            return None
        if spec.converter is not None:
            return spec.converter(value)
        return self._apply(spec.kind, spec.target, value)

    def _apply(self, kind: FieldKind, target: Any, value: Any) -> Any:
        match kind:
            case FieldKind.INT:
                return to_int(value)
            case FieldKind.FLOAT:
                return to_float(value)
            case FieldKind.BOOL:
                return to_bool(value)
            case FieldKind.STR:
                return value if isinstance(value, str) else str(value)
            case FieldKind.LIST:
                return self._to_list(value, target)
            case FieldKind.ENUM:
                return to_enum(value, target)
            case FieldKind.DATETIME:
                return to_datetime(value)
            case FieldKind.DATE:
                return to_date(value)
            case FieldKind.DTO:
                # Nested DTOs always decode tolerantly, whatever the outer mode.
                if isinstance(value, Mapping):
                    return self._decode_nested(target, value)
                return value
            case _:
                return value

    def _to_list(self, value: Any, item_type: Any) -> list[Any]:
        if isinstance(value, list):
            items = value
        elif isinstance(value, tuple):
            items = list(value)
        else:
            items = [value]
        if item_type is None:
            return items
        return [self.coerce(item_type, item) for item in items]


def to_int(value: Any) -> int:
    """Numeric cast; strings use their leading number, 0 when there is none."""
    if isinstance(value, int):
        return int(value)
    number: int | float
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        if match is None:
            return 0
        if match["int"] is not None and match["frac"] is None and match["exp"] is None:
            return int(match[0])
        number = float(match[0])
    else:
        number = _as_number(value)
    try:
        return int(number)
    except (ValueError, OverflowError):
        raise CoercionError(f'Cannot convert "{value}" to int', value=value, target=int) from None


def to_float(value: Any) -> float:
    """Numeric cast; strings use their leading number, 0.0 when there is none."""
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        match = _NUMERIC_PREFIX.match(value)
        return float(match[0]) if match is not None else 0.0
    try:
        return float(_as_number(value))
    except OverflowError:
        raise CoercionError(
            f"Value too large for float: {value!r}", value=value, target=float
        ) from None


def _as_number(value: Any) -> int | float:
    if isinstance(value, int | float):
        return value
    # Containers cast like their truthiness; other objects without a number are 0.
    if isinstance(value, Mapping | list | tuple):
        return 1 if value else 0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0


def to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return bool(value)
    text = str(value).strip().lower()
    if text in TRUE_STRINGS:
        return True
    if text in FALSE_STRINGS:
        return False
    return bool(value)


def to_enum(value: Any, enum_type: type[Enum]) -> Enum:
    if isinstance(value, enum_type):
        return value
    try:
        return enum_type(value)
    except ValueError:
        raise InvalidEnumValueError(value, enum_type) from None


def to_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    try:
        return datetime.fromisoformat(str(value).strip())
    except ValueError:
        raise InvalidDateTimeError(value, datetime) from None


def to_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return date.fromisoformat(text)
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidDateTimeError(value, date) from None
