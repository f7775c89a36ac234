"""
Repository for the ``user_profiles`` table.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from saferun.db.repositories.base import BaseRepository, from_json, to_json
from saferun.models.profile import DistanceRange, UserPreferenceProfile
from saferun.taxonomy.route_taxonomy import DifficultyBand

logger = logging.getLogger(__name__)


class ProfileRepository(BaseRepository):
    """Read/write access to the ``user_profiles`` table."""

    def upsert(self, profile: UserPreferenceProfile) -> None:
        """Insert a profile, or overwrite the stored one (last writer wins)."""
        rng = profile.distance_range
        self.execute(
            """
            INSERT INTO user_profiles (
                user_id, fitness_level, difficulty_band,
                distance_min_km, distance_max_km,
                terrain_preferences_json, time_preferences_json,
                difficulty_preference, safety_importance, scenery_importance,
                updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                fitness_level            = excluded.fitness_level,
                difficulty_band          = excluded.difficulty_band,
                distance_min_km          = excluded.distance_min_km,
                distance_max_km          = excluded.distance_max_km,
                terrain_preferences_json = excluded.terrain_preferences_json,
                time_preferences_json    = excluded.time_preferences_json,
                difficulty_preference    = excluded.difficulty_preference,
                safety_importance        = excluded.safety_importance,
                scenery_importance       = excluded.scenery_importance,
                updated_at               = excluded.updated_at;
            """,
            (
                profile.user_id,
                profile.fitness_level,
                profile.difficulty_band.value if profile.difficulty_band else None,
                rng.min_km if rng else None,
                rng.max_km if rng else None,
                to_json(profile.terrain_preferences),
                to_json([slot.value for slot in profile.time_preferences]),
                profile.difficulty_preference,
                profile.safety_importance,
                profile.scenery_importance,
                profile.updated_at.isoformat() if profile.updated_at else None,
            ),
        )

    def get(self, user_id: str) -> Optional[UserPreferenceProfile]:
        row = self.fetchone("SELECT * FROM user_profiles WHERE user_id = ?;", (user_id,))
        return _row_to_profile(row) if row else None


# ── Private helper ────────────────────────────────────────────────────────────


def _row_to_profile(row: sqlite3.Row) -> UserPreferenceProfile:
    """Convert a ``sqlite3.Row`` from ``user_profiles`` to a profile model."""
    distance_range = None
    if row["distance_min_km"] is not None and row["distance_max_km"] is not None:
        distance_range = DistanceRange(
            min_km=row["distance_min_km"], max_km=row["distance_max_km"]
        )

    return UserPreferenceProfile(
        user_id=row["user_id"],
        fitness_level=row["fitness_level"],
        difficulty_band=DifficultyBand(row["difficulty_band"]) if row["difficulty_band"] else None,
        distance_range=distance_range,
        terrain_preferences=from_json(row["terrain_preferences_json"], []),
        time_preferences=from_json(row["time_preferences_json"], []),
        difficulty_preference=row["difficulty_preference"],
        safety_importance=row["safety_importance"],
        scenery_importance=row["scenery_importance"],
        updated_at=datetime.fromisoformat(row["updated_at"]) if row["updated_at"] else None,
    )
