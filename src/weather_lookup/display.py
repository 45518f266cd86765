from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .domain.models import WeatherSnapshot
from .lookup.service import LookupService, WeatherLookupError

LOGGER = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Could not load weather data. Please try again."

ERROR_MESSAGES_BY_STATUS = {
    400: "Please enter a city name.",
    503: "Weather data is temporarily unavailable. Please try again later.",
}

PROVIDER_LABELS = {
    "openweathermap": "OpenWeatherMap",
    "weatherapi": "WeatherAPI",
    "wttr_in": "wttr.in",
}


def error_message_for_status(status_code: int) -> str:
    """Map any non-200 lookup outcome to one user-facing sentence."""
    return ERROR_MESSAGES_BY_STATUS.get(status_code, GENERIC_ERROR_MESSAGE)


class DisplayPhase(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class DisplayState:
    """Single-screen lookup state.

    ``IDLE -> LOADING -> (SUCCESS | FAILURE)``; any later submit re-enters
    ``LOADING``. Resolutions are not matched to submissions, so when two
    requests overlap the one that resolves last decides what is shown.
    """

    phase: DisplayPhase = DisplayPhase.IDLE
    city: str = ""
    snapshot: WeatherSnapshot | None = None
    error_message: str | None = None
    submissions: int = 0

    def submit(self, city: str) -> bool:
        query = city.strip() if isinstance(city, str) else ""
        if not query:
            return False
        self.phase = DisplayPhase.LOADING
        self.city = query
        self.error_message = None
        self.submissions += 1
        return True

    def resolve(self, snapshot: WeatherSnapshot) -> None:
        self._require_submitted()
        self.phase = DisplayPhase.SUCCESS
        self.snapshot = snapshot
        self.error_message = None

    def fail(self, message: str) -> None:
        self._require_submitted()
        self.phase = DisplayPhase.FAILURE
        self.snapshot = None
        self.error_message = message

    def _require_submitted(self) -> None:
        if self.phase is DisplayPhase.IDLE:
            raise RuntimeError("No lookup has been submitted")

    def to_context(self) -> dict[str, Any]:
        context: dict[str, Any] = {
            "phase": self.phase.value,
            "city": self.city,
            "weather_available": False,
            "error_message": self.error_message,
        }
        snapshot = self.snapshot
        if self.phase is not DisplayPhase.SUCCESS or snapshot is None:
            return context

        context.update(
            {
                "weather_available": True,
                "location_name": snapshot.location_name,
                "condition_description": snapshot.condition_description,
                "icon_ref": snapshot.icon_ref or None,
                "temp_display": f"{snapshot.temperature_c:.0f}",
                "temp_min_display": f"{snapshot.temperature_min_c:.0f}",
                "temp_max_display": f"{snapshot.temperature_max_c:.0f}",
                "range_estimated": snapshot.temperature_range_estimated,
                "feels_like_display": f"{snapshot.feels_like_c:.0f}",
                "humidity_display": f"{snapshot.humidity_percent:g}",
                "wind_display": f"{snapshot.wind_speed_mps:.1f}",
                "provider_label": PROVIDER_LABELS.get(snapshot.provider, snapshot.provider),
            }
        )
        return context


def run_lookup(service: LookupService, city: str, state: DisplayState | None = None) -> DisplayState:
    """Drive one submit/resolve cycle against the lookup service."""
    display = state or DisplayState()
    if not display.submit(city):
        return display

    try:
        snapshot = service.get_weather(display.city)
    except WeatherLookupError as exc:
        display.fail(error_message_for_status(exc.status_code))
    except Exception:
        LOGGER.exception("Unexpected failure while looking up '%s'", display.city)
        display.fail(error_message_for_status(500))
    else:
        display.resolve(snapshot)
    return display
