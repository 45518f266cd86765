from __future__ import annotations

from typing import Protocol

from ...domain.models import WeatherSnapshot


class ProviderError(RuntimeError):
    """Raised when a weather provider cannot produce a snapshot for a city."""


class WeatherAdapter(Protocol):
    name: str
    enabled: bool

    def fetch(self, city: str) -> WeatherSnapshot:
        """Fetch normalized current conditions for the provided city name."""
