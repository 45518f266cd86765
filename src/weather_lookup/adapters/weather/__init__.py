from .base import ProviderError, WeatherAdapter
from .openweathermap import OpenWeatherMapAdapter
from .weatherapi import WeatherApiAdapter
from .wttr_in import WttrInAdapter

__all__ = [
    "OpenWeatherMapAdapter",
    "ProviderError",
    "WeatherAdapter",
    "WeatherApiAdapter",
    "WttrInAdapter",
]
