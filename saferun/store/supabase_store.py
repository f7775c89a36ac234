"""
SupabaseStore — ``RecommendationStore`` over the Supabase PostgREST API.

Tables
------
  routes            — candidate routes; ``id``, ``distance``,
                      ``elevation_gain``, ``estimated_duration``, and
                      ``gps_coordinates`` ({"start": [lon, lat], "end": ...})
  user_preferences  — one row per runner, upserted on ``user_id``
  running_history   — completed runs (``distance``, ``duration``)
  route_feedback    — ratings; the comment lives in ``feedback_text``

``user_preferences.difficulty_preference`` holds either a band name
(``"easy"``/``"moderate"``/``"hard"``, older rows) or the learned 1-10
weight; both are accepted on read.

Credential placement (.env, gitignored):
  SUPABASE_URL  — project URL, e.g. https://abc.supabase.co
  SUPABASE_KEY  — anon or service-role API key

PostgREST has no multi-table transaction, so ``save_feedback`` inserts the
feedback row first and upserts the profile second.  If the profile upsert
fails the feedback row remains but the profile is unchanged.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from saferun.config import StoreConfig
from saferun.models.feedback import FeedbackRatings, RouteFeedback
from saferun.models.history import HistoryRecord
from saferun.models.profile import DistanceRange, UserPreferenceProfile
from saferun.models.route import GeoPoint, Route
from saferun.store.base import StoreError
from saferun.taxonomy.route_taxonomy import DifficultyBand

logger = logging.getLogger(__name__)


class SupabaseStore:
    """PostgREST client for the runner data tables.

    Args:
        config: Store settings (URL, API key, timeout).
        client: Optional pre-built ``httpx.Client`` (tests inject one with a
                mock transport).
    """

    def __init__(
        self,
        config: StoreConfig,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if not config.supabase_url or not config.supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set to use the supabase store.")
        self.config = config
        self._client = client or httpx.Client(
            base_url=f"{config.supabase_url.rstrip('/')}/rest/v1",
            timeout=config.timeout_seconds,
        )
        self._headers = {
            "apikey": config.supabase_key,
            "Authorization": f"Bearer {config.supabase_key}",
            "Content-Type": "application/json",
        }

    def close(self) -> None:
        self._client.close()

    # ── HTTP helpers ──────────────────────────────────────────────────────────

    def _get(self, operation: str, table: str, params: dict[str, Any]) -> list[dict[str, Any]]:
        try:
            resp = self._client.get(f"/{table}", params=params, headers=self._headers)
            resp.raise_for_status()
            return resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Supabase %s failed: %s", operation, exc)
            raise StoreError(operation, str(exc)) from exc

    def _post(
        self,
        operation: str,
        table: str,
        payload: dict[str, Any],
        upsert_on: Optional[str] = None,
    ) -> None:
        headers = dict(self._headers)
        params: dict[str, Any] = {}
        if upsert_on:
            headers["Prefer"] = "resolution=merge-duplicates,return=minimal"
            params["on_conflict"] = upsert_on
        else:
            headers["Prefer"] = "return=minimal"
        try:
            resp = self._client.post(f"/{table}", json=payload, params=params, headers=headers)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            logger.error("Supabase %s failed: %s", operation, exc)
            raise StoreError(operation, str(exc)) from exc

    # ── RecommendationStore ───────────────────────────────────────────────────

    def load_profile(self, user_id: str) -> Optional[UserPreferenceProfile]:
        rows = self._get(
            "load_profile", "user_preferences",
            {"select": "*", "user_id": f"eq.{user_id}", "limit": 1},
        )
        if not rows:
            return None
        return _convert("load_profile", _row_to_profile, rows[0])

    def load_history(self, user_id: str, limit: int) -> list[HistoryRecord]:
        rows = self._get(
            "load_history", "running_history",
            {
                "select": "*",
                "user_id": f"eq.{user_id}",
                "order": "completed_at.desc",
                "limit": limit,
            },
        )
        return [_convert("load_history", _row_to_history, r, user_id) for r in rows]

    def load_candidates(self) -> list[Route]:
        rows = self._get(
            "load_candidates", "routes", {"select": "*", "order": "avg_rating.desc,id.asc"}
        )
        return [_convert("load_candidates", _row_to_route, r) for r in rows]

    def save_profile(self, profile: UserPreferenceProfile) -> None:
        self._post("save_profile", "user_preferences", _profile_to_row(profile), upsert_on="user_id")

    def save_feedback(self, feedback: RouteFeedback, profile: UserPreferenceProfile) -> None:
        self._post("save_feedback", "route_feedback", _feedback_to_row(feedback))
        self._post("save_feedback", "user_preferences", _profile_to_row(profile), upsert_on="user_id")

    def load_route_feedback(self, route_id: str) -> list[RouteFeedback]:
        rows = self._get(
            "load_route_feedback", "route_feedback",
            {"select": "*", "route_id": f"eq.{route_id}", "order": "created_at.desc"},
        )
        return [_convert("load_route_feedback", _row_to_feedback, r) for r in rows]


# ── Row mapping ───────────────────────────────────────────────────────────────


def _convert(operation: str, fn, row: dict[str, Any], *args: Any):
    try:
        return fn(row, *args)
    except (ValidationError, KeyError, TypeError, ValueError) as exc:
        raise StoreError(operation, f"Malformed row: {exc}") from exc


def _point(value: Any) -> Optional[GeoPoint]:
    if not value or len(value) != 2:
        return None
    return GeoPoint(longitude=value[0], latitude=value[1])


def _parse_ts(value: str) -> datetime:
    # PostgREST emits a trailing "Z" for UTC timestamps
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _row_to_route(row: dict[str, Any]) -> Route:
    coords = row.get("gps_coordinates") or {}
    return Route(
        route_id=str(row["id"]),
        name=row["name"],
        description=row.get("description") or "",
        distance_km=row["distance"],
        difficulty_level=row["difficulty_level"],
        terrain_type=row.get("terrain_type") or "flat",
        features=row.get("features") or [],
        avg_rating=row.get("avg_rating") or 0.0,
        total_ratings=row.get("total_ratings") or 0,
        elevation_gain_m=row.get("elevation_gain") or 0.0,
        estimated_duration_min=row.get("estimated_duration") or 0.0,
        safety_rating=row.get("safety_rating") if row.get("safety_rating") is not None else 5.0,
        lighting_quality=row.get("lighting_quality") or "fair",
        time_suitability=row.get("time_suitability") or {},
        weather_suitability=row.get("weather_suitability") or {},
        start=_point(coords.get("start")),
        end=_point(coords.get("end")),
    )


def _row_to_profile(row: dict[str, Any]) -> UserPreferenceProfile:
    band: Optional[DifficultyBand] = None
    learned: dict[str, Any] = {}
    raw_difficulty = row.get("difficulty_preference")
    if isinstance(raw_difficulty, str):
        band = DifficultyBand(raw_difficulty.lower())
    elif raw_difficulty is not None:
        learned["difficulty_preference"] = raw_difficulty

    for field in ("safety_importance", "scenery_importance"):
        if row.get(field) is not None:
            learned[field] = row[field]

    rng = row.get("distance_range")
    distance_range = DistanceRange(min_km=rng["min"], max_km=rng["max"]) if rng else None

    return UserPreferenceProfile(
        user_id=row["user_id"],
        fitness_level=row.get("fitness_level"),
        difficulty_band=band,
        distance_range=distance_range,
        terrain_preferences=row.get("terrain_preferences") or [],
        time_preferences=row.get("time_preferences") or [],
        updated_at=_parse_ts(row["updated_at"]) if row.get("updated_at") else None,
        **learned,
    )


def _profile_to_row(profile: UserPreferenceProfile) -> dict[str, Any]:
    rng = profile.distance_range
    return {
        "user_id": profile.user_id,
        "fitness_level": profile.fitness_level,
        "distance_range": {"min": rng.min_km, "max": rng.max_km} if rng else None,
        "terrain_preferences": list(profile.terrain_preferences),
        "time_preferences": [slot.value for slot in profile.time_preferences],
        "difficulty_preference": profile.difficulty_preference,
        "safety_importance": profile.safety_importance,
        "scenery_importance": profile.scenery_importance,
        "updated_at": profile.updated_at.isoformat() if profile.updated_at else None,
    }


def _row_to_history(row: dict[str, Any], user_id: str) -> HistoryRecord:
    return HistoryRecord(
        record_id=None,
        user_id=row.get("user_id") or user_id,
        route_id=str(row["route_id"]),
        distance_km=row["distance"],
        duration_min=row.get("duration") or 0.0,
        avg_pace=row.get("avg_pace"),
        effort_level=row.get("effort_level"),
        user_rating=row.get("user_rating"),
        weather_condition=row.get("weather_condition"),
        completed_at=_parse_ts(row["completed_at"]),
    )


def _feedback_to_row(feedback: RouteFeedback) -> dict[str, Any]:
    r = feedback.ratings
    return {
        "route_id": feedback.route_id,
        "user_id": feedback.user_id,
        "rating": r.rating,
        "difficulty_rating": r.difficulty,
        "safety_rating": r.safety,
        "scenery_rating": r.scenery,
        "tags": list(r.tags),
        "feedback_text": r.comment,
        "created_at": feedback.created_at.isoformat(),
    }


def _row_to_feedback(row: dict[str, Any]) -> RouteFeedback:
    return RouteFeedback(
        feedback_id=row.get("id") if isinstance(row.get("id"), int) else None,
        route_id=str(row["route_id"]),
        user_id=str(row["user_id"]),
        ratings=FeedbackRatings(
            rating=row["rating"],
            difficulty=row.get("difficulty_rating") or 0.0,
            safety=row.get("safety_rating") or 0.0,
            scenery=row.get("scenery_rating") or 0.0,
            tags=row.get("tags") or [],
            comment=row.get("feedback_text") or "",
            would_recommend=bool(row.get("would_recommend", False)),
        ),
        created_at=_parse_ts(row["created_at"]),
    )
