"""
Tests for saferun/recommendations/feedback.py.

What we test
------------
round_half_up() / ema_update():
  - Halves round up (unlike the built-in ``round``).
  - difficulty 8, overall 5, prior 5 gives 5.6.
  - A 0 observation leaves the weight unchanged.
  - Results stay within [1, 10].

FeedbackLearner.record_feedback():
  - First-time runners start from the default profile.
  - Declared profile fields survive the update.
  - Feedback row and profile are saved together.
  - Write failure raises PersistFailureError and leaves the profile as it was.
  - Read failure raises DataUnavailableError.
  - Malformed input raises InvalidInputError before any store call.

compute_feedback_stats() / route_feedback_stats():
  - Averages, recommendation rate, popular tags, recent comments.
  - Empty feedback gives zeroed stats.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from saferun.config import AppConfig, FeedbackConfig
from saferun.models.feedback import FeedbackRatings, RouteFeedback
from saferun.recommendations.errors import (
    DataUnavailableError,
    InvalidInputError,
    PersistFailureError,
)
from saferun.recommendations.feedback import (
    FeedbackLearner,
    compute_feedback_stats,
    ema_update,
    round_half_up,
)
from saferun.store.base import StoreError

_T0 = datetime(2026, 4, 1, 8, 0, tzinfo=timezone.utc)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _feedback(
    rating: int,
    minutes: int = 0,
    difficulty: float = 0.0,
    safety: float = 0.0,
    tags: list[str] | None = None,
    comment: str = "",
    route_id: str = "r-river",
) -> RouteFeedback:
    return RouteFeedback(
        route_id=route_id,
        user_id="alice",
        ratings=FeedbackRatings(
            rating=rating, difficulty=difficulty, safety=safety,
            tags=tags or [], comment=comment,
        ),
        created_at=_T0 + timedelta(minutes=minutes),
    )


class TestRounding:
    def test_half_rounds_up(self):
        assert round_half_up(2.25, 1) == 2.3
        assert round_half_up(0.125, 2) == 0.13

    def test_plain_values(self):
        assert round_half_up(5.6) == 5.6
        assert round_half_up(3.14159, 2) == 3.14


class TestEmaUpdate:
    def test_reference_update(self):
        assert ema_update(5.0, 8.0, 5) == pytest.approx(5.6)

    def test_low_overall_rating_teaches_less(self):
        # 5 * 0.8 + 8 * (1 / 5) * 0.2 = 4.32 -> 4.3
        assert ema_update(5.0, 8.0, 1) == pytest.approx(4.3)

    def test_unrated_dimension_unchanged(self):
        assert ema_update(7.3, 0, 5) == 7.3

    def test_clamped_to_bounds(self):
        assert ema_update(1.0, 1.0, 1) == 1.0
        assert ema_update(10.0, 10.0, 5) == 10.0

    def test_bounds_hold_across_inputs(self):
        for current in (1.0, 3.3, 5.0, 9.9, 10.0):
            for observed in (0.5, 1, 5, 10):
                for rating in (1, 3, 5):
                    assert 1.0 <= ema_update(current, observed, rating) <= 10.0


class TestRecordFeedback:
    def test_first_time_runner(self, fake_store):
        learner = FeedbackLearner(fake_store)
        updated = learner.record_feedback(
            "alice", "r-river", {"rating": 5, "difficulty": 8, "scenery": 10},
        )
        assert updated.difficulty_preference == pytest.approx(5.6)
        assert updated.safety_importance == 5.0
        assert updated.scenery_importance == pytest.approx(6.0)
        assert updated.updated_at is not None
        assert fake_store.profiles["alice"] == updated
        assert len(fake_store.feedback) == 1
        assert fake_store.feedback[0].ratings.difficulty == 8

    def test_existing_profile_keeps_declared_fields(self, fake_store, sample_profile):
        fake_store.profiles["alice"] = sample_profile
        updated = FeedbackLearner(fake_store).record_feedback(
            "alice", "r-park", FeedbackRatings(rating=4, safety=9),
        )
        assert updated.distance_range == sample_profile.distance_range
        assert updated.terrain_preferences == ["flat"]
        # 5 * 0.8 + 9 * 0.8 * 0.2 = 5.44 -> 5.4
        assert updated.safety_importance == pytest.approx(5.4)

    def test_custom_learning_rate(self, fake_store):
        config = AppConfig(feedback=FeedbackConfig(retain=0.5, learn=0.5))
        updated = FeedbackLearner(fake_store, config).record_feedback(
            "alice", "r-river", {"rating": 5, "difficulty": 9},
        )
        assert updated.difficulty_preference == pytest.approx(7.0)

    def test_write_failure(self, fake_store, sample_profile):
        fake_store.profiles["alice"] = sample_profile
        fake_store.fail_on.add("save_feedback")
        with pytest.raises(PersistFailureError) as exc_info:
            FeedbackLearner(fake_store).record_feedback("alice", "r-river", {"rating": 5, "difficulty": 9})
        assert exc_info.value.route_id == "r-river"
        assert fake_store.profiles["alice"] == sample_profile
        assert fake_store.feedback == []

    def test_read_failure(self, fake_store):
        fake_store.fail_on.add("load_profile")
        with pytest.raises(DataUnavailableError):
            FeedbackLearner(fake_store).record_feedback("alice", "r-river", {"rating": 3})
        assert "save_feedback" not in fake_store.calls

    @pytest.mark.parametrize(
        "user_id, route_id, ratings",
        [
            ("", "r-river", {"rating": 3}),
            ("alice", " ", {"rating": 3}),
            ("alice", "r-river", {"rating": 6}),
            ("alice", "r-river", {"rating": 3, "safety": 11}),
            ("alice", "r-river", {}),
        ],
    )
    def test_invalid_input(self, fake_store, user_id, route_id, ratings):
        with pytest.raises(InvalidInputError):
            FeedbackLearner(fake_store).record_feedback(user_id, route_id, ratings)
        assert fake_store.calls == []


class TestFeedbackStats:
    def test_empty(self):
        stats = compute_feedback_stats("r-river", [])
        assert stats.total_feedbacks == 0
        assert stats.average_rating == 0.0
        assert stats.popular_tags == []

    def test_aggregates(self):
        feedbacks = [
            _feedback(5, minutes=0, difficulty=6, safety=8, tags=["well-lit", "quiet"], comment="Great"),
            _feedback(4, minutes=10, safety=8, tags=["well-lit"]),
            _feedback(2, minutes=20, difficulty=3, tags=["crowded"], comment="Too busy"),
        ]
        stats = compute_feedback_stats("r-river", feedbacks)
        assert stats.total_feedbacks == 3
        assert stats.average_rating == 3.7
        assert stats.difficulty_rating == 3.0
        assert stats.safety_rating == 5.3
        assert stats.recommendation_rate == 0.67
        assert stats.popular_tags[0].tag == "well-lit"
        assert stats.popular_tags[0].count == 2
        assert [c.comment for c in stats.recent_comments] == ["Too busy", "Great"]

    def test_recent_comments_capped(self):
        feedbacks = [_feedback(4, minutes=i, comment=f"c{i}") for i in range(8)]
        stats = compute_feedback_stats("r-river", feedbacks)
        assert [c.comment for c in stats.recent_comments] == ["c7", "c6", "c5", "c4", "c3"]

    def test_route_feedback_stats_from_store(self, fake_store):
        learner = FeedbackLearner(fake_store)
        learner.record_feedback("alice", "r-river", {"rating": 5, "tags": ["scenic"]})
        learner.record_feedback("bob", "r-park", {"rating": 1})
        stats = learner.route_feedback_stats("r-river")
        assert stats.total_feedbacks == 1
        assert stats.recommendation_rate == 1.0

    def test_route_feedback_stats_rejects_empty_id(self, fake_store):
        with pytest.raises(InvalidInputError):
            FeedbackLearner(fake_store).route_feedback_stats("")

    def test_route_feedback_stats_store_failure_propagates(self, fake_store):
        fake_store.fail_on.add("load_route_feedback")
        with pytest.raises(StoreError):
            FeedbackLearner(fake_store).route_feedback_stats("r-river")
