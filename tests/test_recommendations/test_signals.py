"""
Tests for saferun/recommendations/signals.py.

What we test
------------
weather_suitability():
  - 20 C / clear / 55 % / 5 km/h is a perfect 1.0.
  - The same reading in rain drops to 0.1.
  - Output stays in [0, 1] and never rises as wind speed rises.
  - Unrecognized conditions use the 0.7 multiplier.

route_weather_match():
  - Route's sun / rain factor scales the general suitability.
  - Routes without a weather table score neutral.
  - Shaded routes gain on hot days.

preference_match() / difficulty_fit():
  - Neutral 0.5 without a profile.
  - Only evaluated factors count toward the mean.

history_match() / novelty():
  - Neutral 0.5 without history.
  - Distance, effort and satisfaction credits.
  - Average effort rounds half up.
  - Only the newest ``window`` records count.

time_match():
  - Table value when present, lighting fallback at night only (late_night stays neutral).
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from saferun.models.context import WeatherReading
from saferun.models.history import HistoryRecord
from saferun.models.profile import UserPreferenceProfile
from saferun.models.route import Route
from saferun.recommendations import signals
from saferun.taxonomy.context_taxonomy import LightingQuality, TimeSlot, WeatherCondition


# ── Helpers ────────────────────────────────────────────────────────────────────

def _weather(
    temperature_c: float = 20.0,
    condition: str = "clear",
    humidity_pct: float = 55.0,
    wind_speed_kmh: float = 5.0,
) -> WeatherReading:
    return WeatherReading(
        temperature_c=temperature_c,
        condition=condition,
        humidity_pct=humidity_pct,
        wind_speed_kmh=wind_speed_kmh,
    )


def _run(
    route_id: str = "r-x",
    distance_km: float = 5.0,
    effort_level: int | None = None,
    user_rating: int | None = None,
    days_ago: int = 0,
) -> HistoryRecord:
    return HistoryRecord(
        user_id="u1",
        route_id=route_id,
        distance_km=distance_km,
        duration_min=30.0,
        effort_level=effort_level,
        user_rating=user_rating,
        completed_at=datetime(2026, 3, 1, tzinfo=timezone.utc) - timedelta(days=days_ago),
    )


# ── weather_suitability ───────────────────────────────────────────────────────

class TestWeatherSuitability:
    def test_ideal_conditions_score_one(self):
        assert signals.weather_suitability(_weather()) == pytest.approx(1.0)

    def test_rain_dominates(self):
        assert signals.weather_suitability(_weather(condition="rain")) == pytest.approx(0.1)

    def test_light_rain(self):
        assert signals.weather_suitability(_weather(condition="light-rain")) == pytest.approx(0.4)

    def test_storm_scores_like_heavy_rain(self):
        storm = signals.weather_suitability(_weather(condition="storm"))
        heavy = signals.weather_suitability(_weather(condition="heavy_rain"))
        assert storm == pytest.approx(heavy)
        assert storm == pytest.approx(0.1)

    def test_unrecognized_condition_uses_fallback_multiplier(self):
        reading = _weather(condition="volcanic ash")
        assert reading.condition == WeatherCondition.UNKNOWN
        assert signals.weather_suitability(reading) == pytest.approx(0.7)

    def test_factors_multiply(self):
        # temp 0.8 * cloudy 0.9 * wind 0.8 * humidity 0.9
        reading = _weather(temperature_c=28, condition="cloudy", humidity_pct=75, wind_speed_kmh=15)
        assert signals.weather_suitability(reading) == pytest.approx(0.8 * 0.9 * 0.8 * 0.9)

    def test_non_increasing_in_wind(self):
        winds = [0, 5, 10, 10.5, 15, 20, 20.5, 40, 120]
        scores = [signals.weather_suitability(_weather(wind_speed_kmh=w)) for w in winds]
        assert all(0.0 <= s <= 1.0 for s in scores)
        assert all(a >= b for a, b in zip(scores, scores[1:]))

    def test_extreme_reading_stays_in_range(self):
        reading = _weather(temperature_c=-40, condition="snow", humidity_pct=100, wind_speed_kmh=90)
        score = signals.weather_suitability(reading)
        assert 0.0 <= score <= 1.0
        assert score == pytest.approx(0.3 * 0.2 * 0.5 * 0.7)

    @pytest.mark.parametrize(
        "temp, expected",
        [(15, 1.0), (25, 1.0), (10, 0.8), (30, 0.8), (5, 0.6), (35, 0.6), (4.9, 0.3), (36, 0.3)],
    )
    def test_temperature_bands(self, temp, expected):
        assert signals.temperature_score(temp) == expected

    @pytest.mark.parametrize(
        "humidity, expected",
        [(40, 1.0), (70, 1.0), (30, 0.9), (80, 0.9), (29, 0.7), (95, 0.7)],
    )
    def test_humidity_bands(self, humidity, expected):
        assert signals.humidity_score(humidity) == expected


# ── route_weather_match ───────────────────────────────────────────────────────

class TestRouteWeatherMatch:
    def test_sun_factor_in_clear_weather(self, sample_route):
        assert signals.route_weather_match(sample_route, _weather()) == pytest.approx(0.9)

    def test_rain_factor_in_rain(self, sample_route):
        score = signals.route_weather_match(sample_route, _weather(condition="rain"))
        assert score == pytest.approx(0.3 * 0.1)

    def test_cloudy_uses_fixed_factor(self, sample_route):
        score = signals.route_weather_match(sample_route, _weather(condition="cloudy"))
        assert score == pytest.approx(0.9 * 0.9)

    def test_no_table_is_neutral(self):
        route = Route(route_id="r", name="Bare", distance_km=3, difficulty_level=2)
        assert signals.route_weather_match(route, _weather()) == signals.NEUTRAL_SCORE

    def test_shade_bonus_on_hot_day(self):
        hot = _weather(temperature_c=32)
        shaded = Route(
            route_id="a", name="A", distance_km=3, difficulty_level=2,
            features=["shade"], weather_suitability={"sun": 0.7},
        )
        exposed = Route(
            route_id="b", name="B", distance_km=3, difficulty_level=2,
            weather_suitability={"sun": 0.7},
        )
        assert signals.route_weather_match(shaded, hot) > signals.route_weather_match(exposed, hot)

    def test_result_clamped(self):
        route = Route(
            route_id="a", name="A", distance_km=3, difficulty_level=2,
            features=["shade"], weather_suitability={"sun": 1.0},
        )
        assert signals.route_weather_match(route, _weather(temperature_c=32)) <= 1.0


# ── preference_match / difficulty_fit ─────────────────────────────────────────

class TestPreferenceMatch:
    def test_no_profile_is_neutral(self, sample_route):
        assert signals.preference_match(sample_route, None) == 0.5

    def test_all_factors_satisfied(self, sample_route, sample_profile):
        # (0.25 distance + 0.2 terrain + 0.2 band + 0.15 fitness) / 4
        assert signals.preference_match(sample_route, sample_profile) == pytest.approx(0.2)

    def test_poor_fit(self, sample_routes, sample_profile):
        hills = sample_routes[2]
        # only the distance factor earns partial credit: 0.25 * 6 / 10
        assert signals.preference_match(hills, sample_profile) == pytest.approx(0.15 / 4)

    def test_missing_factors_are_skipped(self):
        profile = UserPreferenceProfile(user_id="u1")
        route = Route(route_id="r", name="R", distance_km=5, difficulty_level=5)
        # only the band factor (derived from difficulty_preference 5) is evaluated
        assert signals.preference_match(route, profile) == pytest.approx(0.2)

    def test_short_route_partial_distance_credit(self, sample_profile):
        route = Route(route_id="r", name="R", distance_km=1.5, difficulty_level=9, terrain_type="hills")
        # 0.25 * 1.5 / 3.0 over 4 factors
        assert signals.preference_match(route, sample_profile) == pytest.approx(0.125 / 4)


class TestDifficultyFit:
    def test_no_profile_is_neutral(self, sample_route):
        assert signals.difficulty_fit(sample_route, None) == 0.5

    def test_band_and_fitness_match(self, sample_route, sample_profile):
        assert signals.difficulty_fit(sample_route, sample_profile) == pytest.approx(1.0)

    def test_partial_fitness_closeness(self, sample_routes, sample_profile):
        park = sample_routes[1]
        assert signals.difficulty_fit(park, sample_profile) == pytest.approx((1.0 + 0.10 / 0.15) / 2)

    def test_out_of_band(self, sample_routes, sample_profile):
        assert signals.difficulty_fit(sample_routes[2], sample_profile) == 0.0


# ── history_match / novelty ───────────────────────────────────────────────────

class TestHistoryMatch:
    def test_no_history_is_neutral(self, sample_route):
        assert signals.history_match(sample_route, []) == 0.5

    def test_close_match_with_satisfied_runner(self, sample_route, sample_history):
        # distance 0.3 + difficulty 0.3 + satisfied 0.2
        assert signals.history_match(sample_route, sample_history) == pytest.approx(0.8)

    def test_distant_route_keeps_satisfaction_bonus(self, sample_routes, sample_history):
        assert signals.history_match(sample_routes[2], sample_history) == pytest.approx(0.2)

    def test_average_effort_rounds_half_up(self):
        route = Route(route_id="r", name="R", distance_km=20, difficulty_level=5)
        history = [_run(effort_level=2), _run(effort_level=3, days_ago=1)]
        # avg effort 2.5 -> expected difficulty 3 -> |5 - 3| = 2 earns 0.2
        assert signals.history_match(route, history) == pytest.approx(0.2)

    def test_missing_effort_and_rating_use_defaults(self):
        route = Route(route_id="r", name="R", distance_km=5, difficulty_level=5)
        history = [_run(distance_km=5.0)]
        # distance 0.3 + default effort 5 -> 0.3; default rating 3 earns nothing
        assert signals.history_match(route, history) == pytest.approx(0.6)

    def test_window_limits_records(self):
        route = Route(route_id="r", name="R", distance_km=5, difficulty_level=5)
        recent = [_run(distance_km=5.0, effort_level=5, days_ago=0)]
        old = [_run(distance_km=30.0, effort_level=10, days_ago=d) for d in range(1, 10)]
        assert signals.history_match(route, recent + old, window=1) == pytest.approx(0.6)


class TestNovelty:
    def test_run_route(self, sample_route, sample_history):
        assert signals.novelty(sample_route, sample_history) == 0.2

    def test_new_route(self, sample_routes, sample_history):
        assert signals.novelty(sample_routes[1], sample_history) == 1.0

    def test_no_history(self, sample_route):
        assert signals.novelty(sample_route, []) == 1.0


# ── time / safety / popularity ────────────────────────────────────────────────

class TestTimeMatch:
    def test_table_value(self, sample_route):
        assert signals.time_match(sample_route, TimeSlot.MORNING) == 0.9

    def test_night_lighting_fallback(self, sample_routes):
        assert signals.time_match(sample_routes[1], TimeSlot.NIGHT) == 0.6

    def test_late_night_without_value_is_neutral(self, sample_route):
        poorly_lit = Route(
            route_id="r", name="R", distance_km=3, difficulty_level=2,
            lighting_quality=LightingQuality.POOR,
            time_suitability={"morning": 0.9, "night": 0.3},
        )
        assert signals.time_match(poorly_lit, TimeSlot.LATE_NIGHT) == 0.5
        assert signals.time_match(sample_route, TimeSlot.LATE_NIGHT) == 0.5

    def test_poorly_lit_route_after_dark(self):
        route = Route(
            route_id="r", name="R", distance_km=3, difficulty_level=2,
            lighting_quality=LightingQuality.POOR, time_suitability={"morning": 0.9},
        )
        assert signals.time_match(route, TimeSlot.NIGHT) == 0.2

    def test_missing_daylight_slot_is_neutral(self, sample_route):
        assert signals.time_match(sample_route, TimeSlot.AFTERNOON) == 0.5

    def test_empty_table_is_neutral(self, sample_routes):
        assert signals.time_match(sample_routes[2], TimeSlot.NIGHT) == 0.5


class TestNormalizedRatings:
    def test_safety(self, sample_route):
        assert signals.safety_normalized(sample_route) == pytest.approx(0.9)

    def test_popularity(self, sample_route):
        assert signals.popularity_normalized(sample_route) == pytest.approx(0.9)

    def test_clamp(self):
        assert signals.clamp(1.7) == 1.0
        assert signals.clamp(-0.2) == 0.0
        assert signals.clamp(0.4) == 0.4
