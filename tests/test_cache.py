"""In-memory snapshot cache: freshness window, LRU bound and sweeping."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from weather_lookup.domain.models import WeatherSnapshot
from weather_lookup.storage import SnapshotCache, normalize_cache_key


class _FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


def _make_snapshot(**overrides: Any) -> WeatherSnapshot:
    values: dict[str, Any] = {
        "location_name": "Vienna",
        "temperature_c": 18.0,
        "feels_like_c": 17.0,
        "temperature_min_c": 15.0,
        "temperature_max_c": 21.0,
        "humidity_percent": 60.0,
        "wind_speed_mps": 3.2,
        "condition_summary": "Clear",
        "condition_description": "clear sky",
        "icon_ref": "",
        "provider": "openweathermap",
    }
    values.update(overrides)
    return WeatherSnapshot(**values)


def test_normalize_cache_key_trims_collapses_and_casefolds() -> None:
    assert normalize_cache_key("  New   York ") == "new york"
    assert normalize_cache_key("MÜNCHEN") == normalize_cache_key("münchen")


def test_fresh_entry_is_returned_until_ttl_passes() -> None:
    clock = _FakeClock()
    cache = SnapshotCache(ttl_seconds=300, clock=clock)
    snapshot = _make_snapshot()

    cache.set("Vienna", snapshot)
    clock.advance(seconds=300)
    assert cache.get("vienna") == snapshot

    clock.advance(milliseconds=1)
    assert cache.get("Vienna") is None
    # Stale entries stay in place until overwritten or swept.
    assert cache.get_entry("Vienna") is not None


def test_set_overwrites_existing_entry() -> None:
    clock = _FakeClock()
    cache = SnapshotCache(ttl_seconds=300, clock=clock)
    cache.set("Vienna", _make_snapshot(temperature_c=10.0))
    clock.advance(minutes=10)

    cache.set("VIENNA", _make_snapshot(temperature_c=12.0))

    assert len(cache) == 1
    entry = cache.get_entry("vienna")
    assert entry is not None
    assert entry.snapshot.temperature_c == 12.0
    assert entry.fetched_at == clock.now


def test_capacity_evicts_least_recently_used() -> None:
    cache = SnapshotCache(ttl_seconds=300, max_entries=2, clock=_FakeClock())
    cache.set("Vienna", _make_snapshot(location_name="Vienna"))
    cache.set("Graz", _make_snapshot(location_name="Graz"))

    assert cache.get("Vienna") is not None
    cache.set("Linz", _make_snapshot(location_name="Linz"))

    assert cache.keys() == ["vienna", "linz"]
    assert cache.get("Graz") is None


def test_prune_expired_removes_only_stale_entries() -> None:
    clock = _FakeClock()
    cache = SnapshotCache(ttl_seconds=60, clock=clock)
    cache.set("Vienna", _make_snapshot())
    clock.advance(seconds=45)
    cache.set("Graz", _make_snapshot(location_name="Graz"))
    clock.advance(seconds=30)

    removed = cache.prune_expired()

    assert removed == 1
    assert cache.keys() == ["graz"]


@pytest.mark.parametrize("kwargs", [{"ttl_seconds": -1}, {"max_entries": 0}])
def test_invalid_cache_configuration_is_rejected(kwargs: dict[str, Any]) -> None:
    with pytest.raises(ValueError):
        SnapshotCache(**kwargs)
