"""JSON-safe coercion for values leaving the catalog overview."""

from __future__ import annotations

from dataclasses import fields, is_dataclass, replace
from datetime import date, datetime
from decimal import Decimal
from typing import Any, TypeVar

# Largest integer a JavaScript number represents exactly.
MAX_SAFE_INTEGER = 2**53 - 1

T = TypeVar("T")


def to_json_safe(value: Any) -> Any:
    """Coerce wide integers, decimals and datetimes into JSON-friendly forms.

    Integers outside the exactly-representable range become strings, integral
    decimals become ints and the rest floats, datetimes become ISO strings.
    Containers are converted recursively; frozen dataclasses are rebuilt.
    """

    if value is None or isinstance(value, (bool, str, float)):
        return value
    if isinstance(value, int):
        return value if -MAX_SAFE_INTEGER <= value <= MAX_SAFE_INTEGER else str(value)
    if isinstance(value, Decimal):
        if not value.is_finite():
            return None
        if value == value.to_integral_value():
            return to_json_safe(int(value))
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return type(value)(to_json_safe(item) for item in value)
    if is_dataclass(value) and not isinstance(value, type):
        return _rebuild_dataclass(value)
    return value


def _rebuild_dataclass(instance: T) -> T:
    changes = {}
    for field_info in fields(instance):
        current = getattr(instance, field_info.name)
        coerced = to_json_safe(current)
        if coerced is not current:
            changes[field_info.name] = coerced
    return replace(instance, **changes) if changes else instance
