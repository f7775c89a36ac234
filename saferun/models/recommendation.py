"""
Recommendation output model — the caller-facing result of a ranking pass.

A ``Recommendation`` couples a route with its aggregate confidence score in
[0, 1], the per-signal score breakdown, the reasoning flags and reason
strings, and the archetype tag.  It is frozen: re-ranking produces fresh
objects rather than mutating old ones.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator

from saferun.models.route import Route
from saferun.taxonomy.context_taxonomy import TimeSlot
from saferun.taxonomy.route_taxonomy import RecommendationType


class ReasoningFlags(BaseModel):
    """Which signals crossed their explanation thresholds."""

    model_config = ConfigDict(frozen=True)

    weather_match: bool = False
    time_match: bool = False
    difficulty_match: bool = False
    preference_match: bool = False
    novelty_factor: bool = False
    safety_factor: bool = False


class Recommendation(BaseModel):
    """A ranked route recommendation.

    Attributes:
        route: The recommended route.
        rank: 1-based position in the returned list.
        score: Aggregate confidence score in [0, 1].
        components: Per-signal sub-scores, each in [0, 1].
        flags: Reasoning flags.
        factors: Ordered human-readable reasons.
        recommendation_type: Archetype tag.
        time_slot: Time slot the route was scored for.
    """

    model_config = ConfigDict(frozen=True)

    route: Route
    rank: int = Field(ge=1)
    score: float = Field(ge=0.0, le=1.0)
    components: dict[str, float]
    flags: ReasoningFlags
    factors: list[str] = []
    recommendation_type: RecommendationType
    time_slot: TimeSlot

    @field_validator("components")
    @classmethod
    def validate_components(cls, v: dict[str, float]) -> dict[str, float]:
        for name, value in v.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Component '{name}' must be in [0, 1], got {value}.")
        return v

    @property
    def reason(self) -> str:
        """Reasons joined into one display string."""
        return "; ".join(self.factors)
