"""
User preference profile.

The profile carries two kinds of data:

  - Declared preferences (``fitness_level``, ``difficulty_band``,
    ``distance_range``, ``terrain_preferences``, ``time_preferences``) read by
    the preference-match calculators.  Any of them may be absent; absent
    factors are skipped rather than scored as zero.
  - Learned weights (``difficulty_preference``, ``safety_importance``,
    ``scenery_importance``), each in [1, 10], updated only by the feedback
    learner through an exponential moving average.

The model is frozen.  The learner produces a new profile with
``model_copy(update=...)`` and persists it in a single store write.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from saferun.taxonomy.context_taxonomy import TimeSlot
from saferun.taxonomy.route_taxonomy import DifficultyBand, band_for_level
from saferun.utils.time_utils import parse_time_slot

LEARNED_DIMENSIONS: tuple[str, ...] = (
    "difficulty_preference",
    "safety_importance",
    "scenery_importance",
)


class DistanceRange(BaseModel):
    """Preferred route length interval in kilometres."""

    model_config = ConfigDict(frozen=True)

    min_km: float = Field(gt=0.0)
    max_km: float = Field(gt=0.0)

    @model_validator(mode="after")
    def validate_order(self) -> "DistanceRange":
        if self.min_km > self.max_km:
            raise ValueError(
                f"min_km ({self.min_km}) must be <= max_km ({self.max_km})."
            )
        return self

    def contains(self, distance_km: float) -> bool:
        return self.min_km <= distance_km <= self.max_km


class UserPreferenceProfile(BaseModel):
    """Per-user preferences and learned preference weights.

    Attributes:
        user_id: Owner of the profile.
        fitness_level: Self-reported fitness 1-10, or ``None``.
        difficulty_band: Declared difficulty band, or ``None`` to derive it
            from the learned ``difficulty_preference``.
        distance_range: Preferred distance interval, or ``None``.
        terrain_preferences: Preferred terrain categories.
        time_preferences: Preferred time slots.
        difficulty_preference: Learned difficulty weight, 1-10.
        safety_importance: Learned safety weight, 1-10.
        scenery_importance: Learned scenery weight, 1-10.
        updated_at: Last successful learner write (UTC).
    """

    model_config = ConfigDict(frozen=True)

    user_id: str
    fitness_level: Optional[int] = Field(default=None, ge=1, le=10)
    difficulty_band: Optional[DifficultyBand] = None
    distance_range: Optional[DistanceRange] = None
    terrain_preferences: list[str] = []
    time_preferences: list[TimeSlot] = []
    difficulty_preference: float = Field(default=5.0, ge=1.0, le=10.0)
    safety_importance: float = Field(default=5.0, ge=1.0, le=10.0)
    scenery_importance: float = Field(default=5.0, ge=1.0, le=10.0)
    updated_at: Optional[datetime] = None

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("user_id must not be empty.")
        return v.strip()

    @field_validator("time_preferences", mode="before")
    @classmethod
    def normalize_time_preferences(cls, v: object) -> list[TimeSlot]:
        return [parse_time_slot(str(s)) for s in (v or [])]

    @property
    def effective_difficulty_band(self) -> DifficultyBand:
        """Declared band, else the band of the learned difficulty preference."""
        if self.difficulty_band is not None:
            return self.difficulty_band
        return band_for_level(self.difficulty_preference)
