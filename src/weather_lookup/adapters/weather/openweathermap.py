from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from ...domain.models import WeatherSnapshot
from .base import ProviderError
from .http import fetch_json
from .normalize import (
    coerce_float,
    first_item,
    round_temperature,
    round_wind_speed,
)

OPENWEATHER_CURRENT_URL = "https://api.openweathermap.org/data/2.5/weather"
OPENWEATHER_ICON_URL = "https://openweathermap.org/img/wn/{icon}@2x.png"
DEFAULT_TIMEOUT_SECONDS = 5.0


class OpenWeatherMapAdapter:
    """Current conditions from the OpenWeather Current Weather API (metric units)."""

    name = "openweathermap"

    def __init__(self, *, api_key: str | None, timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._api_key = api_key
        self._timeout_seconds = timeout_seconds

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def fetch(self, city: str) -> WeatherSnapshot:
        if not self._api_key:
            raise ProviderError("OpenWeatherMap API key is not configured")

        payload = fetch_json(
            OPENWEATHER_CURRENT_URL,
            provider="OpenWeatherMap",
            params={"q": city, "units": "metric", "appid": self._api_key},
            timeout=self._timeout_seconds,
        )
        try:
            return self._parse_snapshot(payload, city=city)
        except ValidationError as exc:
            raise ProviderError(f"{self.name} payload failed validation") from exc

    def _parse_snapshot(self, payload: dict[str, Any], *, city: str) -> WeatherSnapshot:
        main = payload.get("main")
        if not isinstance(main, dict):
            raise ProviderError("OpenWeatherMap response did not include 'main'")

        temp = coerce_float(main.get("temp"), field_name="main.temp")
        feels_like = coerce_float(main.get("feels_like", temp), field_name="main.feels_like")
        temp_min = coerce_float(main.get("temp_min", temp), field_name="main.temp_min")
        temp_max = coerce_float(main.get("temp_max", temp), field_name="main.temp_max")
        humidity = coerce_float(main.get("humidity", 0), field_name="main.humidity")

        wind = payload.get("wind")
        wind_speed = 0.0
        if isinstance(wind, dict):
            wind_speed = coerce_float(wind.get("speed", 0), field_name="wind.speed")

        weather = first_item(payload.get("weather"))
        summary = weather.get("main") if isinstance(weather.get("main"), str) else "Unknown"
        description = weather.get("description")
        if not isinstance(description, str) or not description.strip():
            description = summary
        icon = weather.get("icon")
        icon_ref = OPENWEATHER_ICON_URL.format(icon=icon) if isinstance(icon, str) and icon else ""

        name = payload.get("name")
        location_name = name if isinstance(name, str) and name.strip() else city

        return WeatherSnapshot(
            location_name=location_name,
            temperature_c=round_temperature(temp),
            feels_like_c=round_temperature(feels_like),
            temperature_min_c=round_temperature(temp_min),
            temperature_max_c=round_temperature(temp_max),
            humidity_percent=humidity,
            wind_speed_mps=round_wind_speed(wind_speed),
            condition_summary=summary,
            condition_description=description,
            icon_ref=icon_ref,
            provider=self.name,
        )
