"""
Route model — the candidate item ranked by the recommendation engine.

Routes are owned by the external store and are read-only to the engine:
the model is frozen, and a ranking pass never mutates one.

Suitability tables
------------------
``time_suitability`` maps a ``TimeSlot`` to a [0, 1] suitability value.
Keys may be given as any slot name accepted by ``parse_time_slot`` (legacy
``"morning"``/``"night"`` names included) and are normalized on construction.

``weather_suitability`` maps a coarse weather key to [0, 1]:
``"sun"``, ``"rain"``, ``"wind"``.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from saferun.taxonomy.context_taxonomy import LightingQuality, TimeSlot
from saferun.utils.time_utils import parse_time_slot

VALID_WEATHER_KEYS = frozenset({"sun", "rain", "wind"})


class GeoPoint(BaseModel):
    """A WGS84 coordinate."""

    model_config = ConfigDict(frozen=True)

    longitude: float = Field(ge=-180.0, le=180.0)
    latitude: float = Field(ge=-90.0, le=90.0)


class Route(BaseModel):
    """A running route eligible for recommendation.

    Attributes:
        route_id: Store identifier.
        name: Display name.
        description: Free-form description.
        distance_km: Route length in kilometres (> 0).
        difficulty_level: Ordinal difficulty 1 (easiest) to 10.
        terrain_type: Terrain category, e.g. ``"flat"``, ``"hills"``.
        features: Lowercase feature tags (``"scenic"``, ``"facilities"``,
            ``"shade"``, ``"indoor"``, ...).
        avg_rating: Mean user rating 0-5.
        total_ratings: Number of ratings behind ``avg_rating``.
        elevation_gain_m: Total climb in metres.
        estimated_duration_min: Typical completion time in minutes.
        safety_rating: Safety score 0-10.
        lighting_quality: Lighting after dark.
        time_suitability: Per-slot suitability in [0, 1].
        weather_suitability: Per-weather-key suitability in [0, 1].
        start: Optional start coordinate.
        end: Optional end coordinate.
    """

    model_config = ConfigDict(frozen=True)

    route_id: str
    name: str
    description: str = ""
    distance_km: float = Field(gt=0.0)
    difficulty_level: int = Field(ge=1, le=10)
    terrain_type: str = "flat"
    features: list[str] = []
    avg_rating: float = Field(default=0.0, ge=0.0, le=5.0)
    total_ratings: int = Field(default=0, ge=0)
    elevation_gain_m: float = 0.0
    estimated_duration_min: float = 0.0
    safety_rating: float = Field(default=5.0, ge=0.0, le=10.0)
    lighting_quality: LightingQuality = LightingQuality.FAIR
    time_suitability: dict[TimeSlot, float] = {}
    weather_suitability: dict[str, float] = {}
    start: Optional[GeoPoint] = None
    end: Optional[GeoPoint] = None

    @field_validator("route_id", "name")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("route_id and name must not be empty.")
        return v.strip()

    @field_validator("features", mode="before")
    @classmethod
    def normalize_features(cls, v: Any) -> list[str]:
        # Older rows store features as {"scenic": true, "shade": false}
        if isinstance(v, dict):
            return [str(k).lower() for k, flag in v.items() if flag]
        return [str(tag).strip().lower() for tag in (v or [])]

    @field_validator("time_suitability", mode="before")
    @classmethod
    def normalize_time_keys(cls, v: Any) -> dict[TimeSlot, float]:
        if not v:
            return {}
        return {parse_time_slot(str(k)): val for k, val in dict(v).items()}

    @model_validator(mode="after")
    def validate_tables(self) -> "Route":
        for slot, value in self.time_suitability.items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(
                    f"time_suitability['{slot}'] must be in [0, 1], got {value}."
                )
        for key, value in self.weather_suitability.items():
            if key not in VALID_WEATHER_KEYS:
                raise ValueError(
                    f"Unknown weather_suitability key '{key}'. "
                    f"Must be one of {sorted(VALID_WEATHER_KEYS)}."
                )
            if not 0.0 <= value <= 1.0:
                raise ValueError(
                    f"weather_suitability['{key}'] must be in [0, 1], got {value}."
                )
        return self

    def has_feature(self, tag: str) -> bool:
        return tag.lower() in self.features
