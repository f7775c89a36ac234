"""
Safety analysis models: environmental readings and the analyzer's outputs.

All scores use a 0-100 scale (higher ``safety_score`` / ``overall`` is
safer; higher ``overall_risk`` is riskier).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from saferun.taxonomy.context_taxonomy import (
    TimeSlot,
    WeatherCondition,
    parse_weather_condition,
)
from saferun.taxonomy.route_taxonomy import RiskFactor, SafetyLevel


class EnvironmentalData(BaseModel):
    """Live conditions around the runner.

    Attributes:
        weather_condition: Current condition.
        crowd_density: People nearby, 0 (deserted) to 100 (packed).
        visibility: Visibility, 0-100.
        lighting_level: Ambient lighting, 0-100.
    """

    model_config = ConfigDict(frozen=True)

    weather_condition: WeatherCondition = WeatherCondition.CLEAR
    crowd_density: float = Field(default=50.0, ge=0.0, le=100.0)
    visibility: float = Field(default=100.0, ge=0.0, le=100.0)
    lighting_level: float = Field(default=100.0, ge=0.0, le=100.0)

    @field_validator("weather_condition", mode="before")
    @classmethod
    def normalize_condition(cls, v: Any) -> WeatherCondition:
        if isinstance(v, WeatherCondition):
            return v
        return parse_weather_condition(str(v))


class RiskAnalysis(BaseModel):
    """Environmental risk at one place and time."""

    model_config = ConfigDict(frozen=True)

    overall_risk: float = Field(ge=0.0, le=100.0)
    risk_factors: list[RiskFactor] = []
    historical_risk: float = Field(default=0.0, ge=0.0, le=1.0)


class TimeSlotSafety(BaseModel):
    """Incident-adjusted safety of one time slot."""

    model_config = ConfigDict(frozen=True)

    time_slot: TimeSlot
    safety_score: float = Field(ge=0.0, le=100.0)
    risk_factors: list[RiskFactor] = []
    incident_count: int = Field(default=0, ge=0)
    total_runs: int = Field(default=0, ge=0)


class SafetyAssessment(BaseModel):
    """Real-time safety assessment shown before a run starts."""

    model_config = ConfigDict(frozen=True)

    time_slot: TimeSlot
    overall: float = Field(ge=0.0, le=100.0)
    level: SafetyLevel
    risk: RiskAnalysis
    factors: dict[str, float] = {}
    recommendations: list[str] = []
    alerts: list[str] = []
