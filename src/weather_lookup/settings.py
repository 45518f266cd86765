from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]

ProviderName = Literal["openweathermap", "weatherapi", "wttr_in"]


class UiSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = "Weather Lookup"

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("ui.title must not be empty")
        return text


class CacheSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ttl_seconds: int = Field(default=300, ge=0, le=86400)
    max_entries: int = Field(default=256, ge=1, le=100_000)
    sweep_interval_seconds: int = Field(default=60, ge=5, le=3600)


class ProviderTimeoutSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    openweathermap: float = Field(default=5.0, gt=0, le=60)
    weatherapi: float = Field(default=5.0, gt=0, le=60)
    wttr_in: float = Field(default=8.0, gt=0, le=60)

    def for_provider(self, name: str) -> float:
        return float(getattr(self, name))


class ProvidersSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    order: list[ProviderName] = Field(
        default_factory=lambda: ["openweathermap", "weatherapi", "wttr_in"]
    )
    timeouts: ProviderTimeoutSettings = Field(default_factory=ProviderTimeoutSettings)

    @field_validator("order")
    @classmethod
    def validate_order(cls, values: list[ProviderName]) -> list[ProviderName]:
        deduplicated = list(dict.fromkeys(values))
        if not deduplicated:
            raise ValueError("providers.order must contain at least one provider")
        return deduplicated


class WeatherYamlSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ui: UiSettings = Field(default_factory=UiSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    providers: ProvidersSettings = Field(default_factory=ProvidersSettings)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    weather_env: Literal["dev", "test", "prod"] = "dev"
    weather_config_path: Path = Path("config/weather.yaml")
    weather_log_level: str = "INFO"
    openweather_api_key: SecretStr | None = None
    weatherapi_key: SecretStr | None = None

    @field_validator("weather_log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {value}")
        return level


class AppSettings(BaseModel):
    env: EnvSettings
    yaml: WeatherYamlSettings
    project_root: Path
    config_path: Path


def _resolve_project_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def _load_yaml_settings(path: Path) -> WeatherYamlSettings:
    if not path.exists():
        raise FileNotFoundError(f"Weather config file not found: {path}")

    raw_config = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValueError("Weather config must be a YAML mapping/object at the top level")
    return WeatherYamlSettings.model_validate(raw_config)


@lru_cache(maxsize=1)
def load_settings() -> AppSettings:
    env = EnvSettings()
    config_path = _resolve_project_path(env.weather_config_path)
    yaml_settings = _load_yaml_settings(config_path)
    return AppSettings(
        env=env,
        yaml=yaml_settings,
        project_root=PROJECT_ROOT,
        config_path=config_path,
    )
