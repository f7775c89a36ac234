"""
Tests for saferun/store/supabase_store.py.

All HTTP traffic goes through ``httpx.MockTransport``; no network access.

What we test
------------
  - Missing credentials are rejected.
  - Requests carry the API key headers and PostgREST filters.
  - Rows map onto domain models (legacy band strings included).
  - HTTP errors, malformed rows and non-JSON bodies surface as StoreError,
    so the engine falls back on a broken catalog read.
  - save_feedback inserts the feedback row, then upserts the profile.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone

import httpx
import pytest

from saferun.config import StoreConfig
from saferun.models.feedback import FeedbackRatings, RouteFeedback
from saferun.recommendations.engine import RecommendationEngine
from saferun.recommendations.errors import DataUnavailableError
from saferun.store.base import StoreError
from saferun.store.supabase_store import SupabaseStore
from saferun.taxonomy.context_taxonomy import TimeSlot
from saferun.taxonomy.route_taxonomy import DifficultyBand

_CONFIG = StoreConfig(
    backend="supabase", supabase_url="https://abc.supabase.co", supabase_key="secret-key",
)

_ROUTE_ROW = {
    "id": 7,
    "name": "Bund Promenade",
    "distance": 5.2,
    "difficulty_level": 3,
    "features": ["scenic"],
    "avg_rating": 4.6,
    "total_ratings": 128,
    "elevation_gain": 15,
    "estimated_duration": 35,
    "safety_rating": 9,
    "lighting_quality": "excellent",
    "time_suitability": {"morning": 0.9, "night": 0.85},
    "weather_suitability": {"sun": 0.9, "rain": 0.3},
    "gps_coordinates": {"start": [121.47, 31.23], "end": [121.50, 31.24]},
}


# ── Helpers ────────────────────────────────────────────────────────────────────

def _store(handler) -> tuple[SupabaseStore, list[httpx.Request]]:
    seen: list[httpx.Request] = []

    def recording(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return handler(request)

    client = httpx.Client(
        base_url="https://abc.supabase.co/rest/v1",
        transport=httpx.MockTransport(recording),
    )
    return SupabaseStore(_CONFIG, client=client), seen


def _json(payload, status: int = 200):
    return lambda request: httpx.Response(status, json=payload)


class TestConstruction:
    def test_requires_credentials(self):
        with pytest.raises(ValueError, match="SUPABASE_URL"):
            SupabaseStore(StoreConfig(backend="supabase"))


class TestReads:
    def test_load_candidates(self):
        store, seen = _store(_json([_ROUTE_ROW]))
        routes = store.load_candidates()
        assert len(routes) == 1
        route = routes[0]
        assert route.route_id == "7"
        assert route.distance_km == 5.2
        assert route.time_suitability[TimeSlot.NIGHT] == 0.85
        assert route.start.longitude == 121.47

        request = seen[0]
        assert request.url.path == "/rest/v1/routes"
        assert request.url.params["order"] == "avg_rating.desc,id.asc"
        assert request.headers["apikey"] == "secret-key"
        assert request.headers["Authorization"] == "Bearer secret-key"

    def test_load_profile_with_band_string(self):
        row = {
            "user_id": "alice",
            "fitness_level": 6,
            "difficulty_preference": "Moderate",
            "distance_range": {"min": 3, "max": 8},
            "terrain_preferences": ["flat"],
            "time_preferences": ["morning", "evening"],
            "updated_at": "2026-04-01T08:00:00Z",
        }
        store, seen = _store(_json([row]))
        profile = store.load_profile("alice")
        assert profile.difficulty_band == DifficultyBand.MODERATE
        assert profile.difficulty_preference == 5.0
        assert profile.distance_range.max_km == 8
        assert profile.updated_at == datetime(2026, 4, 1, 8, 0, tzinfo=timezone.utc)
        assert seen[0].url.params["user_id"] == "eq.alice"

    def test_load_profile_with_learned_weight(self):
        store, _ = _store(_json([{"user_id": "alice", "difficulty_preference": 6.4}]))
        profile = store.load_profile("alice")
        assert profile.difficulty_band is None
        assert profile.difficulty_preference == 6.4

    def test_load_profile_missing(self):
        store, _ = _store(_json([]))
        assert store.load_profile("ghost") is None

    def test_load_history(self):
        rows = [{
            "route_id": 7, "distance": 5.0, "duration": 30, "effort_level": 4,
            "weather_condition": "sunny", "completed_at": "2026-04-01T07:30:00Z",
        }]
        store, seen = _store(_json(rows))
        history = store.load_history("alice", 30)
        assert history[0].user_id == "alice"
        assert history[0].route_id == "7"
        assert seen[0].url.params["order"] == "completed_at.desc"
        assert seen[0].url.params["limit"] == "30"

    def test_load_route_feedback(self):
        rows = [{
            "id": 3, "route_id": "7", "user_id": "alice", "rating": 4,
            "safety_rating": 8, "tags": ["well-lit"], "feedback_text": "Nice",
            "created_at": "2026-04-01T09:00:00Z",
        }]
        store, _ = _store(_json(rows))
        feedback = store.load_route_feedback("7")
        assert feedback[0].feedback_id == 3
        assert feedback[0].ratings.comment == "Nice"
        assert feedback[0].ratings.safety == 8

    def test_http_error(self):
        store, _ = _store(_json({"message": "boom"}, status=500))
        with pytest.raises(StoreError) as exc_info:
            store.load_candidates()
        assert exc_info.value.operation == "load_candidates"

    def test_transport_error(self):
        def fail(request):
            raise httpx.ConnectError("unreachable", request=request)

        store, _ = _store(fail)
        with pytest.raises(StoreError):
            store.load_history("alice", 5)

    def test_malformed_row(self):
        store, _ = _store(_json([{"id": 1, "name": "No distance", "difficulty_level": 2}]))
        with pytest.raises(StoreError, match="Malformed row"):
            store.load_candidates()

    def test_non_json_body(self):
        store, _ = _store(lambda request: httpx.Response(200, text="<html>gateway</html>"))
        with pytest.raises(StoreError) as exc_info:
            store.load_candidates()
        assert exc_info.value.operation == "load_candidates"

    def test_non_json_catalog_falls_back(self, morning_context):
        def handler(request):
            if request.url.path.endswith("/routes"):
                return httpx.Response(200, text="<html>gateway</html>")
            return httpx.Response(200, json=[])

        store, _ = _store(handler)
        recs = RecommendationEngine(store).generate("alice", morning_context)
        assert len(recs) == 6
        assert {r.route.route_id for r in recs} <= {f"route-{i}" for i in range(1, 9)}

    def test_non_json_profile_is_typed(self, morning_context):
        store, _ = _store(lambda request: httpx.Response(200, text="not json"))
        with pytest.raises(DataUnavailableError):
            RecommendationEngine(store).generate("alice", morning_context)


class TestWrites:
    def test_save_feedback_order_and_payload(self, sample_profile):
        store, seen = _store(lambda request: httpx.Response(201))
        feedback = RouteFeedback(
            route_id="7", user_id="alice",
            ratings=FeedbackRatings(rating=5, difficulty=8, comment="Loved it"),
            created_at=datetime(2026, 4, 1, 9, 0, tzinfo=timezone.utc),
        )
        store.save_feedback(feedback, sample_profile)

        assert [r.url.path for r in seen] == [
            "/rest/v1/route_feedback", "/rest/v1/user_preferences",
        ]
        body = json.loads(seen[0].content)
        assert body["feedback_text"] == "Loved it"
        assert body["difficulty_rating"] == 8

        upsert = seen[1]
        assert upsert.url.params["on_conflict"] == "user_id"
        assert "merge-duplicates" in upsert.headers["Prefer"]
        profile_body = json.loads(upsert.content)
        assert profile_body["distance_range"] == {"min": 3.0, "max": 6.0}
        assert profile_body["time_preferences"] == ["morning"]

    def test_profile_failure_after_feedback_insert(self, sample_profile):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("user_preferences"):
                return httpx.Response(503)
            return httpx.Response(201)

        store, seen = _store(handler)
        feedback = RouteFeedback(
            route_id="7", user_id="alice", ratings=FeedbackRatings(rating=3),
            created_at=datetime(2026, 4, 1, tzinfo=timezone.utc),
        )
        with pytest.raises(StoreError):
            store.save_feedback(feedback, sample_profile)
        assert len(seen) == 2
