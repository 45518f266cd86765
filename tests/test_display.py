"""Display state transitions and error message mapping."""

from __future__ import annotations

from typing import Any

import pytest

from weather_lookup.display import (
    GENERIC_ERROR_MESSAGE,
    DisplayPhase,
    DisplayState,
    error_message_for_status,
    run_lookup,
)
from weather_lookup.domain.models import WeatherSnapshot
from weather_lookup.lookup import AllProvidersUnavailableError


def _make_snapshot(**overrides: Any) -> WeatherSnapshot:
    values: dict[str, Any] = {
        "location_name": "Madrid",
        "temperature_c": 27.0,
        "feels_like_c": 28.0,
        "temperature_min_c": 25.0,
        "temperature_max_c": 29.0,
        "humidity_percent": 30.0,
        "wind_speed_mps": 2.0,
        "condition_summary": "Sunny",
        "condition_description": "Sunny",
        "icon_ref": "https://cdn.example.com/sun.png",
        "provider": "weatherapi",
        "temperature_range_estimated": True,
    }
    values.update(overrides)
    return WeatherSnapshot(**values)


class _StubService:
    def __init__(self, *, snapshot: WeatherSnapshot | None = None, error: Exception | None = None) -> None:
        self._snapshot = snapshot
        self._error = error
        self.calls: list[str] = []

    def get_weather(self, city: str) -> WeatherSnapshot:
        self.calls.append(city)
        if self._error is not None:
            raise self._error
        assert self._snapshot is not None
        return self._snapshot


def test_state_starts_idle_and_ignores_blank_submit() -> None:
    state = DisplayState()

    assert state.submit("   ") is False
    assert state.phase is DisplayPhase.IDLE
    assert state.submissions == 0


def test_submit_then_resolve_reaches_success() -> None:
    state = DisplayState()

    assert state.submit(" Madrid ") is True
    assert state.phase is DisplayPhase.LOADING
    assert state.city == "Madrid"

    state.resolve(_make_snapshot())
    assert state.phase is DisplayPhase.SUCCESS
    assert state.error_message is None


def test_failure_then_resubmit_reenters_loading() -> None:
    state = DisplayState()
    state.submit("Madrid")
    state.fail("nope")

    assert state.phase is DisplayPhase.FAILURE
    assert state.snapshot is None

    state.submit("Sevilla")
    assert state.phase is DisplayPhase.LOADING
    assert state.error_message is None


def test_resolution_without_submission_is_rejected() -> None:
    with pytest.raises(RuntimeError):
        DisplayState().resolve(_make_snapshot())


def test_last_resolution_wins_for_overlapping_requests() -> None:
    state = DisplayState()
    state.submit("Madrid")
    state.submit("Sevilla")

    state.resolve(_make_snapshot(location_name="Sevilla"))
    state.resolve(_make_snapshot(location_name="Madrid"))

    assert state.submissions == 2
    assert state.snapshot is not None
    assert state.snapshot.location_name == "Madrid"


def test_error_message_for_status() -> None:
    assert "city" in error_message_for_status(400)
    assert "try again later" in error_message_for_status(503)
    assert error_message_for_status(500) == GENERIC_ERROR_MESSAGE
    assert error_message_for_status(418) == GENERIC_ERROR_MESSAGE


def test_run_lookup_success_builds_display_context() -> None:
    service = _StubService(snapshot=_make_snapshot())

    state = run_lookup(service, "Madrid")  # type: ignore[arg-type]
    context = state.to_context()

    assert context["phase"] == "success"
    assert context["weather_available"] is True
    assert context["temp_display"] == "27"
    assert context["wind_display"] == "2.0"
    assert context["humidity_display"] == "30"
    assert context["range_estimated"] is True
    assert context["provider_label"] == "WeatherAPI"


def test_run_lookup_maps_unavailable_to_message() -> None:
    service = _StubService(error=AllProvidersUnavailableError("down"))

    state = run_lookup(service, "Madrid")  # type: ignore[arg-type]

    assert state.phase is DisplayPhase.FAILURE
    assert state.error_message == error_message_for_status(503)


def test_run_lookup_survives_unexpected_errors() -> None:
    service = _StubService(error=RuntimeError("secret upstream detail"))

    state = run_lookup(service, "Madrid")  # type: ignore[arg-type]

    assert state.phase is DisplayPhase.FAILURE
    assert state.error_message == GENERIC_ERROR_MESSAGE


def test_run_lookup_skips_service_for_blank_input() -> None:
    service = _StubService(snapshot=_make_snapshot())

    state = run_lookup(service, "  ")  # type: ignore[arg-type]

    assert state.phase is DisplayPhase.IDLE
    assert service.calls == []
