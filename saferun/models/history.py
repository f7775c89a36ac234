"""
Running history — one completed run per record, append-only.

The store returns history newest-first; the engine only considers the
newest ``recommend.history_window`` records when estimating a runner's
typical distance, effort, and satisfaction.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from saferun.taxonomy.context_taxonomy import WeatherCondition, parse_weather_condition


class HistoryRecord(BaseModel):
    """A past completed run.

    Attributes:
        record_id: Store PK; ``None`` before insertion.
        user_id: Runner who completed the run.
        route_id: Route that was run.
        distance_km: Distance actually covered.
        duration_min: Elapsed time in minutes.
        avg_pace: Average pace in min/km, if recorded.
        effort_level: Perceived effort 1-10, if recorded.
        user_rating: Post-run rating 1-5, if recorded.
        weather_condition: Condition during the run.
        completed_at: Completion timestamp (UTC).
    """

    model_config = ConfigDict(frozen=True)

    record_id: Optional[int] = None
    user_id: str
    route_id: str
    distance_km: float = Field(ge=0.0)
    duration_min: float = Field(ge=0.0)
    avg_pace: Optional[float] = Field(default=None, ge=0.0)
    effort_level: Optional[int] = Field(default=None, ge=1, le=10)
    user_rating: Optional[int] = Field(default=None, ge=1, le=5)
    weather_condition: WeatherCondition = WeatherCondition.UNKNOWN
    completed_at: datetime

    @field_validator("weather_condition", mode="before")
    @classmethod
    def normalize_condition(cls, v: Any) -> WeatherCondition:
        if v is None:
            return WeatherCondition.UNKNOWN
        if isinstance(v, WeatherCondition):
            return v
        return parse_weather_condition(str(v))
