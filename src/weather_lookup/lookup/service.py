from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Sequence

from pydantic import SecretStr

from ..adapters.weather import (
    OpenWeatherMapAdapter,
    ProviderError,
    WeatherAdapter,
    WeatherApiAdapter,
    WttrInAdapter,
)
from ..domain.models import WeatherSnapshot
from ..settings import AppSettings
from ..storage.cache import SnapshotCache, normalize_cache_key

LOGGER = logging.getLogger(__name__)


class WeatherLookupError(RuntimeError):
    """Base class for lookup failures that are reported to callers."""

    status_code = 500


class InvalidCityError(WeatherLookupError):
    """Raised when the requested city is empty after trimming."""

    status_code = 400


class AllProvidersUnavailableError(WeatherLookupError):
    """Raised when every provider in the fallback chain failed."""

    status_code = 503


class LookupService:
    """Resolve current conditions for a city through cache and provider fallback.

    Providers are tried strictly in order; the first snapshot wins and is
    cached. Concurrent lookups for the same city share a single provider
    chain run.
    """

    def __init__(self, *, adapters: Sequence[WeatherAdapter], cache: SnapshotCache) -> None:
        if not adapters:
            raise ValueError("LookupService requires at least one weather adapter")
        self._adapters = tuple(adapters)
        self._cache = cache
        self._inflight: dict[str, Future[WeatherSnapshot]] = {}
        self._inflight_lock = threading.Lock()

    @property
    def adapters(self) -> tuple[WeatherAdapter, ...]:
        return self._adapters

    @property
    def cache(self) -> SnapshotCache:
        return self._cache

    def get_weather(self, city: str) -> WeatherSnapshot:
        query = city.strip() if isinstance(city, str) else ""
        if not query:
            raise InvalidCityError("City name must not be empty")

        cached = self._cache.get(query)
        if cached is not None:
            LOGGER.debug("Cache hit for '%s' (provider=%s)", query, cached.provider)
            return cached

        key = normalize_cache_key(query)
        with self._inflight_lock:
            pending = self._inflight.get(key)
            if pending is None:
                future: Future[WeatherSnapshot] = Future()
                self._inflight[key] = future

        if pending is not None:
            LOGGER.debug("Joining in-flight lookup for '%s'", query)
            return pending.result()

        try:
            snapshot = self._cache.get(query)
            if snapshot is None:
                snapshot = self._fetch_from_providers(query)
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(snapshot)
            return snapshot
        finally:
            with self._inflight_lock:
                self._inflight.pop(key, None)

    def _fetch_from_providers(self, query: str) -> WeatherSnapshot:
        for adapter in self._adapters:
            try:
                snapshot = adapter.fetch(query)
            except ProviderError as exc:
                LOGGER.warning("Weather provider '%s' failed for '%s': %s", adapter.name, query, exc)
                continue

            self._cache.set(query, snapshot)
            LOGGER.info("Weather provider '%s' answered for '%s'", adapter.name, query)
            return snapshot

        LOGGER.error("All %d weather providers failed for '%s'", len(self._adapters), query)
        raise AllProvidersUnavailableError("Weather data is temporarily unavailable")


def _secret_value(secret: SecretStr | None) -> str | None:
    if secret is None:
        return None
    value = secret.get_secret_value().strip()
    return value or None


def build_adapters(settings: AppSettings) -> list[WeatherAdapter]:
    providers = settings.yaml.providers
    adapters: list[WeatherAdapter] = []
    for name in providers.order:
        timeout = providers.timeouts.for_provider(name)
        if name == "openweathermap":
            adapters.append(
                OpenWeatherMapAdapter(
                    api_key=_secret_value(settings.env.openweather_api_key),
                    timeout_seconds=timeout,
                )
            )
            continue
        if name == "weatherapi":
            adapters.append(
                WeatherApiAdapter(
                    api_key=_secret_value(settings.env.weatherapi_key),
                    timeout_seconds=timeout,
                )
            )
            continue
        if name == "wttr_in":
            adapters.append(WttrInAdapter(timeout_seconds=timeout))
            continue
        raise ValueError(f"Unsupported weather provider: {name}")
    return adapters


def build_lookup_service(settings: AppSettings) -> LookupService:
    cache = SnapshotCache(
        ttl_seconds=settings.yaml.cache.ttl_seconds,
        max_entries=settings.yaml.cache.max_entries,
    )
    return LookupService(adapters=build_adapters(settings), cache=cache)
