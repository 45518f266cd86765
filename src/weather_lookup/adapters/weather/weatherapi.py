from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ...domain.models import WeatherSnapshot
from .base import ProviderError
from .http import fetch_json
from .normalize import (
    coerce_float,
    kmh_to_mps,
    round_temperature,
    round_wind_speed,
)

WEATHERAPI_CURRENT_URL = "https://api.weatherapi.com/v1/current.json"
DEFAULT_TIMEOUT_SECONDS = 5.0
# current.json has no daily range; min/max are approximated around the current reading.
ESTIMATED_RANGE_DELTA_C = 2.0


def _icon_url(raw_icon: Any) -> str:
    if not isinstance(raw_icon, str) or not raw_icon.strip():
        return ""
    icon = raw_icon.strip()
    if icon.startswith("//"):
        return f"https:{icon}"
    return icon


class WeatherApiAdapter:
    """Current conditions from WeatherAPI.com."""

    name = "weatherapi"

    def __init__(self, *, api_key: str | None, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def fetch(self, city: str) -> WeatherSnapshot:
        if not self._api_key:
            raise ProviderError("WeatherAPI key is not configured")

        payload = fetch_json(
            WEATHERAPI_CURRENT_URL,
            provider="WeatherAPI",
            params={"key": self._api_key, "q": city, "aqi": "no"},
            timeout=self._timeout_seconds,
        )
        try:
            return self._parse_snapshot(payload, city=city)
        except ValidationError as exc:
            raise ProviderError(f"{self.name} payload failed validation") from exc

    def _parse_snapshot(self, payload: dict[str, Any], *, city: str) -> WeatherSnapshot:
        current = payload.get("current")
        if not isinstance(current, dict):
            raise ProviderError("WeatherAPI response did not include 'current'")

        temp = coerce_float(current.get("temp_c"), field_name="current.temp_c")
        feels_like = coerce_float(current.get("feelslike_c", temp), field_name="current.feelslike_c")
        humidity = coerce_float(current.get("humidity", 0), field_name="current.humidity")
        wind_kph = coerce_float(current.get("wind_kph", 0), field_name="current.wind_kph")

        condition = current.get("condition")
        if not isinstance(condition, dict):
            condition = {}
        text = condition.get("text")
        summary = text.strip() if isinstance(text, str) and text.strip() else "Unknown"

        location = payload.get("location")
        name = location.get("name") if isinstance(location, dict) else None
        location_name = name if isinstance(name, str) and name.strip() else city

        current_c = round_temperature(temp)
        return WeatherSnapshot(
            location_name=location_name,
            temperature_c=current_c,
            feels_like_c=round_temperature(feels_like),
            temperature_min_c=current_c - ESTIMATED_RANGE_DELTA_C,
            temperature_max_c=current_c + ESTIMATED_RANGE_DELTA_C,
            humidity_percent=humidity,
            wind_speed_mps=round_wind_speed(kmh_to_mps(wind_kph)),
            condition_summary=summary,
            condition_description=summary,
            icon_ref=_icon_url(condition.get("icon")),
            provider=self.name,
            temperature_range_estimated=True,
        )
