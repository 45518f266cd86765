from .service import (
    AllProvidersUnavailableError,
    InvalidCityError,
    LookupService,
    WeatherLookupError,
    build_adapters,
    build_lookup_service,
)

__all__ = [
    "AllProvidersUnavailableError",
    "InvalidCityError",
    "LookupService",
    "WeatherLookupError",
    "build_adapters",
    "build_lookup_service",
]
