"""Coercion of raw filter values (usually query-string text) to field types."""

from __future__ import annotations

import math
from typing import Any

from domain.models.field import FieldDataType

_TRUE_VALUES: tuple[Any, ...] = ("true", "1")


def is_empty_value(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def to_number(value: Any) -> int | float | None:
    """Parse *value* as a number, or ``None`` when it is not one.

    Integral values come back as ``int``.  NaN is rejected.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return None if math.isnan(value) else value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text == "":
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    if math.isnan(number):
        return None
    if number.is_integer() and not math.isinf(number):
        return int(number)
    return number


def to_boolean(value: Any) -> bool:
    if value is True:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)) and value == 1:
        return True
    return isinstance(value, str) and value in _TRUE_VALUES


def coerce_filter_value(value: Any, data_type: FieldDataType | str | None) -> tuple[bool, Any]:
    """Convert *value* according to *data_type*.

    Returns ``(accepted, converted)``.  Only numeric conversion can reject a
    value; every other type passes through unchanged.
    """
    resolved = FieldDataType.parse(data_type)
    if resolved is FieldDataType.NUMBER:
        number = to_number(value)
        if number is None:
            return False, value
        return True, number
    if resolved is FieldDataType.BOOLEAN:
        return True, to_boolean(value)
    return True, value
