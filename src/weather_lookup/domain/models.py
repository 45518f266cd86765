from __future__ import annotations

import math

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class WeatherSnapshot(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    location_name: str
    temperature_c: float
    feels_like_c: float
    temperature_min_c: float
    temperature_max_c: float
    # Upstream contract says 0-100; passed through as reported.
    humidity_percent: float
    wind_speed_mps: float = Field(ge=0)
    condition_summary: str
    condition_description: str
    icon_ref: str = ""
    provider: str
    temperature_range_estimated: bool = False

    @field_validator(
        "temperature_c",
        "feels_like_c",
        "temperature_min_c",
        "temperature_max_c",
        "humidity_percent",
        "wind_speed_mps",
    )
    @classmethod
    def validate_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("weather snapshot numeric fields must be finite")
        return value

    @field_validator("location_name")
    @classmethod
    def validate_location_name(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("weather snapshot location_name must not be empty")
        return text
