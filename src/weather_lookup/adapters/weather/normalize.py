from __future__ import annotations

import math
import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from .base import ProviderError

KMH_TO_MPS = 0.27778

_LEADING_NUMBER = re.compile(r"\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def coerce_float(value: Any, *, field_name: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ProviderError(f"Invalid numeric value for {field_name}") from exc
    if not math.isfinite(number):
        raise ProviderError(f"Non-finite numeric value for {field_name}")
    return number


def coerce_float_or_zero(value: Any, *, field_name: str) -> float:
    """Lenient variant for string upstreams: missing means 0, trailing junk is ignored."""
    if value is None or value == "":
        return 0.0
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if match is None:
            raise ProviderError(f"Invalid numeric value for {field_name}")
        value = match.group(0)
    return coerce_float(value, field_name=field_name)


def _round_half_up(value: float, places: int) -> float:
    quantum = Decimal(1).scaleb(-places)
    try:
        rounded = float(Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP))
    except InvalidOperation as exc:
        raise ProviderError(f"Numeric value out of range: {value!r}") from exc
    # Drop the sign of negative zero.
    return rounded + 0.0


def round_temperature(value: float) -> float:
    return _round_half_up(value, 0)


def round_wind_speed(value: float) -> float:
    return _round_half_up(value, 1)


def kmh_to_mps(value: float) -> float:
    return value * KMH_TO_MPS


def first_item(value: Any) -> dict[str, Any]:
    if isinstance(value, list) and value and isinstance(value[0], dict):
        return value[0]
    return {}


def first_value(value: Any, default: str = "") -> str:
    """Read ``[{"value": "..."}]`` wrappers used by wttr.in."""
    text = first_item(value).get("value")
    if isinstance(text, str) and text.strip():
        return text.strip()
    return default
