"""Decode denomination ranges from provider raw catalog payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Tuple

from rewards_api.domain.rewards.errors import UnknownProviderError


class ProviderKind(str, Enum):
    TREMENDOUS = "tremendous"
    TANGO = "tango"
    BLACKHAWK = "blackhawk"
    AMAZON = "amazon"

    @classmethod
    def from_source(cls, source_fk: str) -> "ProviderKind":
        """Parse a source key such as ``source-tango``."""

        key = (source_fk or "").strip().lower()
        if key.startswith("source-"):
            key = key[len("source-"):]
        try:
            return cls(key)
        except ValueError as exc:
            raise UnknownProviderError(f"Unsupported reward source '{source_fk}'") from exc


class ValueRangeType(str, Enum):
    FIXED = "fixed"
    VARIABLE = "variable"
    UNKNOWN = "unknown"


@dataclass(frozen=True, slots=True)
class ValueRange:
    type: ValueRangeType = ValueRangeType.UNKNOWN
    currency: str | None = None
    min_value: float | None = None
    max_value: float | None = None
    fixed_values: Tuple[float, ...] = field(default_factory=tuple)

    def as_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"type": self.type.value}
        if self.currency:
            payload["currency"] = self.currency
        if self.min_value is not None:
            payload["minValue"] = self.min_value
        if self.max_value is not None:
            payload["maxValue"] = self.max_value
        if self.fixed_values:
            payload["fixedValues"] = list(self.fixed_values)
        return payload


UNKNOWN_RANGE = ValueRange()


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return value
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _numbers(values: Any) -> Tuple[float, ...]:
    if not isinstance(values, (list, tuple)):
        return tuple()
    parsed = (_number(value) for value in values)
    return tuple(value for value in parsed if value is not None)


def _currency(raw: Mapping[str, Any], key: str = "currencyCode") -> str | None:
    value = raw.get(key)
    return str(value) if value else None


def _decode_tremendous(raw: Mapping[str, Any]) -> ValueRange:
    skus = raw.get("skus")
    if not isinstance(skus, list) or not skus or not isinstance(skus[0], Mapping):
        return UNKNOWN_RANGE
    sku = skus[0]
    return ValueRange(
        type=ValueRangeType.VARIABLE,
        currency=_currency(sku, "currency_code"),
        min_value=_number(sku.get("min")),
        max_value=_number(sku.get("max")),
    )


def _decode_tango(raw: Mapping[str, Any]) -> ValueRange:
    value_type = raw.get("valueType")
    if value_type == "FIXED_VALUE":
        face_value = _number(raw.get("faceValue"))
        return ValueRange(
            type=ValueRangeType.FIXED,
            currency=_currency(raw),
            fixed_values=(face_value,) if face_value else tuple(),
        )
    if value_type == "VARIABLE_VALUE":
        return ValueRange(
            type=ValueRangeType.VARIABLE,
            currency=_currency(raw),
            min_value=_number(raw.get("minValue")),
            max_value=_number(raw.get("maxValue")),
        )
    return UNKNOWN_RANGE


def _decode_blackhawk(raw: Mapping[str, Any]) -> ValueRange:
    denominations = _numbers(raw.get("fixedDenominations"))
    if denominations:
        return ValueRange(type=ValueRangeType.FIXED, currency=_currency(raw), fixed_values=denominations)
    minimum = _number(raw.get("minAmount"))
    maximum = _number(raw.get("maxAmount"))
    if minimum is None and maximum is None:
        return UNKNOWN_RANGE
    return ValueRange(type=ValueRangeType.VARIABLE, currency=_currency(raw), min_value=minimum, max_value=maximum)


def _decode_amazon(raw: Mapping[str, Any]) -> ValueRange:
    denominations = _numbers(raw.get("fixedDenominations"))
    if denominations:
        return ValueRange(type=ValueRangeType.FIXED, currency=_currency(raw), fixed_values=denominations)
    value_range = raw.get("valueRange")
    if not isinstance(value_range, Mapping):
        return UNKNOWN_RANGE
    return ValueRange(
        type=ValueRangeType.VARIABLE,
        currency=_currency(raw),
        min_value=_number(value_range.get("min")),
        max_value=_number(value_range.get("max")),
    )


DECODERS: Mapping[ProviderKind, Callable[[Mapping[str, Any]], ValueRange]] = {
    ProviderKind.TREMENDOUS: _decode_tremendous,
    ProviderKind.TANGO: _decode_tango,
    ProviderKind.BLACKHAWK: _decode_blackhawk,
    ProviderKind.AMAZON: _decode_amazon,
}

_missing = set(ProviderKind) - set(DECODERS)
if _missing:  # pragma: no cover - import-time exhaustiveness guard
    raise RuntimeError(f"No value range decoder for providers: {sorted(kind.value for kind in _missing)}")


def decode_value_range(kind: ProviderKind, raw_data: Mapping[str, Any] | None) -> ValueRange:
    if not isinstance(raw_data, Mapping) or not raw_data:
        return UNKNOWN_RANGE
    return DECODERS[kind](raw_data)
