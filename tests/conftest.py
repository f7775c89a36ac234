"""
Shared pytest fixtures for the SafeRun test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - ``fake_store``: An in-memory ``RecommendationStore`` whose methods can be
    made to fail with ``StoreError`` (add the method name to ``fail_on``).
  - Sample domain objects (routes, profile, history, context).
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Generator, Optional

import pytest

from saferun.db.connection import IN_MEMORY, open_connection
from saferun.db.schema import apply_schema
from saferun.models.context import ContextSnapshot, WeatherReading
from saferun.models.feedback import RouteFeedback
from saferun.models.history import HistoryRecord
from saferun.models.profile import DistanceRange, UserPreferenceProfile
from saferun.models.route import Route
from saferun.store.base import StoreError
from saferun.taxonomy.context_taxonomy import LightingQuality, TimeSlot, WeatherCondition
from saferun.taxonomy.route_taxonomy import DifficultyBand


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied."""
    conn = open_connection(IN_MEMORY)
    apply_schema(conn)
    yield conn
    conn.close()


# ── Fake store ────────────────────────────────────────────────────────────────

class FakeStore:
    """Dict-backed store.  Every call is recorded in ``calls``."""

    def __init__(
        self,
        routes: Optional[list[Route]] = None,
        profiles: Optional[dict[str, UserPreferenceProfile]] = None,
        history: Optional[dict[str, list[HistoryRecord]]] = None,
    ) -> None:
        self.routes = list(routes or [])
        self.profiles = dict(profiles or {})
        self.history = dict(history or {})
        self.feedback: list[RouteFeedback] = []
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _check(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self.fail_on:
            raise StoreError(operation, "simulated outage")

    def load_profile(self, user_id):
        self._check("load_profile")
        return self.profiles.get(user_id)

    def load_history(self, user_id, limit):
        self._check("load_history")
        return list(self.history.get(user_id, []))[:limit]

    def load_candidates(self):
        self._check("load_candidates")
        return list(self.routes)

    def save_profile(self, profile):
        self._check("save_profile")
        self.profiles[profile.user_id] = profile

    def save_feedback(self, feedback, profile):
        self._check("save_feedback")
        self.feedback.append(feedback)
        self.profiles[profile.user_id] = profile

    def load_route_feedback(self, route_id):
        self._check("load_route_feedback")
        rows = [f for f in self.feedback if f.route_id == route_id]
        return sorted(rows, key=lambda f: f.created_at, reverse=True)


@pytest.fixture
def fake_store(sample_routes: list[Route]) -> FakeStore:
    """A ``FakeStore`` holding ``sample_routes`` and no runner data."""
    return FakeStore(routes=sample_routes)


# ── Sample domain objects ─────────────────────────────────────────────────────

@pytest.fixture
def sample_route() -> Route:
    """A well-lit, scenic, easy riverside route."""
    return Route(
        route_id="r-river",
        name="Riverside Loop",
        distance_km=5.0,
        difficulty_level=3,
        terrain_type="flat",
        features=["scenic", "riverside"],
        avg_rating=4.5,
        total_ratings=120,
        safety_rating=9,
        lighting_quality=LightingQuality.EXCELLENT,
        time_suitability={"morning": 0.9, "evening": 0.95, "night": 0.85},
        weather_suitability={"sun": 0.9, "rain": 0.3, "wind": 0.7},
    )


@pytest.fixture
def sample_routes(sample_route: Route) -> list[Route]:
    """Three routes of distinct character, in catalog order."""
    park = Route(
        route_id="r-park",
        name="Park Trail",
        distance_km=3.0,
        difficulty_level=2,
        terrain_type="trail",
        features=["facilities", "shade"],
        avg_rating=4.0,
        total_ratings=40,
        safety_rating=8,
        lighting_quality=LightingQuality.GOOD,
        time_suitability={"morning": 0.95, "afternoon": 0.7},
        weather_suitability={"sun": 0.8, "rain": 0.6},
    )
    hills = Route(
        route_id="r-hills",
        name="Hill Repeats",
        distance_km=10.0,
        difficulty_level=8,
        terrain_type="hills",
        features=[],
        avg_rating=3.5,
        total_ratings=12,
        safety_rating=5,
        lighting_quality=LightingQuality.POOR,
    )
    return [sample_route, park, hills]


@pytest.fixture
def sample_profile() -> UserPreferenceProfile:
    return UserPreferenceProfile(
        user_id="alice",
        fitness_level=4,
        difficulty_band=DifficultyBand.EASY,
        distance_range=DistanceRange(min_km=3.0, max_km=6.0),
        terrain_preferences=["flat"],
        time_preferences=[TimeSlot.MORNING],
    )


@pytest.fixture
def sample_history() -> list[HistoryRecord]:
    """Three runs by alice, newest first."""
    base = datetime(2026, 3, 1, 7, 0, tzinfo=timezone.utc)
    return [
        HistoryRecord(
            user_id="alice",
            route_id="r-river",
            distance_km=5.0,
            duration_min=30.0,
            effort_level=3,
            user_rating=5,
            weather_condition="clear",
            completed_at=base - timedelta(days=i),
        )
        for i in range(3)
    ]


@pytest.fixture
def clear_weather() -> WeatherReading:
    return WeatherReading(
        temperature_c=20.0,
        condition=WeatherCondition.CLEAR,
        humidity_pct=55.0,
        wind_speed_kmh=5.0,
    )


@pytest.fixture
def morning_context(clear_weather: WeatherReading) -> ContextSnapshot:
    return ContextSnapshot(weather=clear_weather, time_slot=TimeSlot.MORNING)
