"""
Tests for saferun/recommendations/reasoning.py.

What we test
------------
build_flags():
  - Flags require a value strictly above the threshold.

build_factors():
  - Flag reasons appear in fixed order.
  - "Highly rated" reason carries the rating and count.
  - Scenic / facilities features add their reasons.
  - Empty list when nothing stands out.

classify():
  - Archetype priority: perfect match, popular, challenge, exploration,
    safe night, general.
"""

from __future__ import annotations

from saferun.config import ReasoningThresholds
from saferun.models.recommendation import ReasoningFlags
from saferun.models.route import Route
from saferun.recommendations.reasoning import build_factors, build_flags, classify
from saferun.recommendations.scorer import ScoreComponents
from saferun.taxonomy.context_taxonomy import TimeSlot
from saferun.taxonomy.route_taxonomy import RecommendationType

_THRESHOLDS = ReasoningThresholds()


# ── Helpers ────────────────────────────────────────────────────────────────────

def _components(**overrides: float) -> ScoreComponents:
    fields = dict(
        preference=0.5, history=0.5, weather=0.5, time=0.5,
        safety=0.5, popularity=0.5, novelty=0.2, difficulty_fit=0.5,
    )
    fields.update(overrides)
    return ScoreComponents(**fields)


def _route(**overrides) -> Route:
    fields = dict(
        route_id="r1", name="Loop", distance_km=4.0, difficulty_level=3,
        avg_rating=4.5, total_ratings=120,
    )
    fields.update(overrides)
    return Route(**fields)


def _classify(components: ScoreComponents, route: Route | None = None,
              slot: TimeSlot = TimeSlot.MORNING) -> RecommendationType:
    flags = build_flags(components, _THRESHOLDS)
    return classify(flags, components, route or _route(), slot, _THRESHOLDS)


class TestBuildFlags:
    def test_threshold_is_strict(self):
        flags = build_flags(_components(weather=0.7, time=0.7, difficulty_fit=0.6), _THRESHOLDS)
        assert not flags.weather_match
        assert not flags.time_match
        assert not flags.difficulty_match

    def test_above_threshold(self):
        flags = build_flags(
            _components(
                weather=0.71, time=0.71, difficulty_fit=0.61,
                preference=0.51, novelty=1.0, safety=0.9,
            ),
            _THRESHOLDS,
        )
        assert flags == ReasoningFlags(
            weather_match=True, time_match=True, difficulty_match=True,
            preference_match=True, novelty_factor=True, safety_factor=True,
        )

    def test_neutral_preference_not_flagged(self):
        assert not build_flags(_components(preference=0.5), _THRESHOLDS).preference_match


class TestBuildFactors:
    def test_fixed_order(self):
        c = _components(weather=0.9, time=0.9, novelty=1.0, safety=0.9)
        flags = build_flags(c, _THRESHOLDS)
        factors = build_factors(flags, c, _route(), _THRESHOLDS)
        assert factors == [
            "Weather conditions suit this route",
            "Good fit for this time of day",
            "A new route to explore",
            "High safety rating",
        ]

    def test_highly_rated_reason(self):
        c = _components(popularity=0.9)
        factors = build_factors(build_flags(c, _THRESHOLDS), c, _route(), _THRESHOLDS)
        assert factors == ["Highly rated by runners (4.5/5 from 120)"]

    def test_feature_reasons_come_last(self):
        c = _components(safety=0.9)
        route = _route(features=["facilities", "Scenic"])
        factors = build_factors(build_flags(c, _THRESHOLDS), c, route, _THRESHOLDS)
        assert factors == ["High safety rating", "Scenic views", "Good facilities along the way"]

    def test_empty_when_nothing_stands_out(self):
        c = _components()
        assert build_factors(build_flags(c, _THRESHOLDS), c, _route(), _THRESHOLDS) == []


class TestClassify:
    def test_perfect_match_wins_over_popular(self):
        c = _components(weather=0.8, time=0.8, difficulty_fit=0.7, popularity=0.95)
        assert _classify(c) == RecommendationType.PERFECT_MATCH

    def test_popular(self):
        assert _classify(_components(popularity=0.95)) == RecommendationType.POPULAR

    def test_popular_requires_strictly_above(self):
        assert _classify(_components(popularity=0.9)) == RecommendationType.GENERAL

    def test_challenge(self):
        route = _route(difficulty_level=7)
        assert _classify(_components(novelty=1.0), route) == RecommendationType.CHALLENGE

    def test_exploration(self):
        assert _classify(_components(novelty=1.0)) == RecommendationType.EXPLORATION

    def test_safe_night(self):
        assert _classify(_components(safety=0.9), slot=TimeSlot.NIGHT) == RecommendationType.SAFE_NIGHT

    def test_safe_route_late_night_is_general(self):
        assert _classify(_components(safety=0.9), slot=TimeSlot.LATE_NIGHT) == RecommendationType.GENERAL

    def test_safe_route_in_daylight_is_general(self):
        assert _classify(_components(safety=0.9)) == RecommendationType.GENERAL

    def test_general(self):
        assert _classify(_components()) == RecommendationType.GENERAL
