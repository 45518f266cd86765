from __future__ import annotations

from typing import Any
from urllib.parse import quote

from pydantic import ValidationError

from ...domain.models import WeatherSnapshot
from .base import ProviderError
from .http import fetch_json
from .normalize import (
    coerce_float_or_zero,
    first_item,
    first_value,
    kmh_to_mps,
    round_temperature,
    round_wind_speed,
)

WTTR_IN_BASE_URL = "https://wttr.in"
# wttr.in is noticeably slower than the keyed services.
DEFAULT_TIMEOUT_SECONDS = 8.0
# wttr.in serves plain text to unknown agents; a browser agent gets JSON reliably.
BROWSER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class WttrInAdapter:
    """Keyless current conditions from wttr.in's ``format=j1`` JSON."""

    name = "wttr_in"
    enabled = True

    def __init__(self, *, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout_seconds = timeout_seconds

    def fetch(self, city: str) -> WeatherSnapshot:
        payload = fetch_json(
            f"{WTTR_IN_BASE_URL}/{quote(city, safe='')}",
            provider="wttr.in",
            params={"format": "j1"},
            timeout=self._timeout_seconds,
            user_agent=BROWSER_USER_AGENT,
        )
        try:
            return self._parse_snapshot(payload, city=city)
        except ValidationError as exc:
            raise ProviderError(f"{self.name} payload failed validation") from exc

    def _parse_snapshot(self, payload: dict[str, Any], *, city: str) -> WeatherSnapshot:
        current = first_item(payload.get("current_condition"))
        if not current:
            raise ProviderError("wttr.in response did not include 'current_condition'")

        temp = coerce_float_or_zero(current.get("temp_C"), field_name="temp_C")
        feels_like = coerce_float_or_zero(current.get("FeelsLikeC"), field_name="FeelsLikeC")
        humidity = coerce_float_or_zero(current.get("humidity"), field_name="humidity")
        wind_kmh = coerce_float_or_zero(current.get("windspeedKmph"), field_name="windspeedKmph")

        today = first_item(payload.get("weather"))
        temp_min = self._daily_value(today.get("mintempC"), fallback=temp, field_name="mintempC")
        temp_max = self._daily_value(today.get("maxtempC"), fallback=temp, field_name="maxtempC")

        area = first_item(payload.get("nearest_area"))
        location_name = first_value(area.get("areaName"), default=city)
        description = first_value(current.get("weatherDesc"), default="Unknown")

        return WeatherSnapshot(
            location_name=location_name,
            temperature_c=round_temperature(temp),
            feels_like_c=round_temperature(feels_like),
            temperature_min_c=round_temperature(temp_min),
            temperature_max_c=round_temperature(temp_max),
            humidity_percent=humidity,
            wind_speed_mps=round_wind_speed(kmh_to_mps(wind_kmh)),
            condition_summary=description,
            condition_description=description,
            icon_ref=first_value(current.get("weatherIconUrl")),
            provider=self.name,
        )

    @staticmethod
    def _daily_value(value: Any, *, fallback: float, field_name: str) -> float:
        if value is None or value == "":
            return fallback
        return coerce_float_or_zero(value, field_name=field_name)
