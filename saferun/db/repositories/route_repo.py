"""
Repository for the ``routes`` table.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from saferun.db.repositories.base import BaseRepository, from_json, to_json
from saferun.models.route import GeoPoint, Route
from saferun.taxonomy.context_taxonomy import LightingQuality

logger = logging.getLogger(__name__)


class RouteRepository(BaseRepository):
    """Read/write access to the ``routes`` table."""

    def upsert(self, route: Route) -> str:
        """Insert a route, or replace every column of an existing one.

        Returns:
            The ``route_id``.
        """
        start = route.start
        end = route.end
        self.execute(
            """
            INSERT INTO routes (
                route_id, name, description, distance_km, difficulty_level,
                terrain_type, features_json, avg_rating, total_ratings,
                elevation_gain_m, estimated_duration_min, safety_rating,
                lighting_quality, time_suitability_json, weather_suitability_json,
                start_lon, start_lat, end_lon, end_lat, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?,
                      strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
            ON CONFLICT(route_id) DO UPDATE SET
                name                     = excluded.name,
                description              = excluded.description,
                distance_km              = excluded.distance_km,
                difficulty_level         = excluded.difficulty_level,
                terrain_type             = excluded.terrain_type,
                features_json            = excluded.features_json,
                avg_rating               = excluded.avg_rating,
                total_ratings            = excluded.total_ratings,
                elevation_gain_m         = excluded.elevation_gain_m,
                estimated_duration_min   = excluded.estimated_duration_min,
                safety_rating            = excluded.safety_rating,
                lighting_quality         = excluded.lighting_quality,
                time_suitability_json    = excluded.time_suitability_json,
                weather_suitability_json = excluded.weather_suitability_json,
                start_lon                = excluded.start_lon,
                start_lat                = excluded.start_lat,
                end_lon                  = excluded.end_lon,
                end_lat                  = excluded.end_lat,
                updated_at               = excluded.updated_at;
            """,
            (
                route.route_id,
                route.name,
                route.description,
                route.distance_km,
                route.difficulty_level,
                route.terrain_type,
                to_json(route.features),
                route.avg_rating,
                route.total_ratings,
                route.elevation_gain_m,
                route.estimated_duration_min,
                route.safety_rating,
                route.lighting_quality.value,
                to_json({slot.value: v for slot, v in route.time_suitability.items()}),
                to_json(route.weather_suitability),
                start.longitude if start else None,
                start.latitude if start else None,
                end.longitude if end else None,
                end.latitude if end else None,
            ),
        )
        return route.route_id

    def get_by_id(self, route_id: str) -> Optional[Route]:
        row = self.fetchone("SELECT * FROM routes WHERE route_id = ?;", (route_id,))
        return _row_to_route(row) if row else None

    def get_all(self) -> list[Route]:
        """Return every stored route, ordered by ``route_id``.

        Ordering is fixed so that score ties rank identically across calls.
        """
        rows = self.fetchall("SELECT * FROM routes ORDER BY route_id;")
        return [_row_to_route(r) for r in rows]


# ── Private helper ────────────────────────────────────────────────────────────


def _row_to_route(row: sqlite3.Row) -> Route:
    """Convert a ``sqlite3.Row`` from ``routes`` to a ``Route``."""
    start = None
    if row["start_lon"] is not None and row["start_lat"] is not None:
        start = GeoPoint(longitude=row["start_lon"], latitude=row["start_lat"])
    end = None
    if row["end_lon"] is not None and row["end_lat"] is not None:
        end = GeoPoint(longitude=row["end_lon"], latitude=row["end_lat"])

    return Route(
        route_id=row["route_id"],
        name=row["name"],
        description=row["description"],
        distance_km=row["distance_km"],
        difficulty_level=row["difficulty_level"],
        terrain_type=row["terrain_type"],
        features=from_json(row["features_json"], []),
        avg_rating=row["avg_rating"],
        total_ratings=row["total_ratings"],
        elevation_gain_m=row["elevation_gain_m"],
        estimated_duration_min=row["estimated_duration_min"],
        safety_rating=row["safety_rating"],
        lighting_quality=LightingQuality(row["lighting_quality"]),
        time_suitability=from_json(row["time_suitability_json"], {}),
        weather_suitability=from_json(row["weather_suitability_json"], {}),
        start=start,
        end=end,
    )
