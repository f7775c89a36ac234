"""
Per-request context: the weather reading and time-of-day bucket a ranking
pass is evaluated under.  Created per request and discarded afterwards.

The weather collaborator is trusted for plausibility, but the ranges below
are still enforced so a malformed context is rejected before any scoring.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from saferun.taxonomy.context_taxonomy import (
    TimeSlot,
    WeatherCondition,
    parse_weather_condition,
)
from saferun.utils.time_utils import parse_time_slot


class WeatherReading(BaseModel):
    """Current weather at the runner's location.

    Attributes:
        temperature_c: Air temperature in Celsius.
        condition: Normalized weather condition.
        humidity_pct: Relative humidity 0-100.
        wind_speed_kmh: Wind speed in km/h.
        description: Optional provider description.
    """

    model_config = ConfigDict(frozen=True)

    temperature_c: float = Field(ge=-60.0, le=60.0)
    condition: WeatherCondition
    humidity_pct: float = Field(ge=0.0, le=100.0)
    wind_speed_kmh: float = Field(ge=0.0)
    description: str = ""

    @field_validator("condition", mode="before")
    @classmethod
    def normalize_condition(cls, v: Any) -> WeatherCondition:
        if isinstance(v, WeatherCondition):
            return v
        return parse_weather_condition(str(v))


class ContextSnapshot(BaseModel):
    """Environment of one recommendation request.

    Attributes:
        weather: Current weather reading.
        time_slot: Current time-of-day bucket.
        latitude: Runner latitude, if known.
        longitude: Runner longitude, if known.
    """

    model_config = ConfigDict(frozen=True)

    weather: WeatherReading
    time_slot: TimeSlot
    latitude: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0)

    @field_validator("time_slot", mode="before")
    @classmethod
    def normalize_time_slot(cls, v: Any) -> TimeSlot:
        return parse_time_slot(v)
