"""
Signal calculators: pure functions turning raw context into [0, 1] scores.

Every calculator is side-effect free and performs no I/O.  Each one clamps
its own output, so the aggregator can rely on the [0, 1] contract.

Calculators
-----------
weather_suitability(reading):
    Product of four sub-scores (temperature, condition, wind, humidity).
    Multiplicative, so a single severely adverse factor (heavy rain)
    dominates regardless of how pleasant the others are.

        temperature  [15,25] 1.0 | [10,30] 0.8 | [5,35] 0.6 | else 0.3
        condition    clear/sunny/partly cloudy 1.0 | cloudy/overcast 0.9
                     light rain 0.4 | rain/heavy rain/storm 0.1
                     snow/fog 0.2 | anything else 0.7
        wind (km/h)  <=10 1.0 | <=20 0.8 | else 0.5
        humidity (%) [40,70] 1.0 | [30,80] 0.9 | else 0.7

route_weather_match(route, reading):
    Route-specific weather factor times ``weather_suitability``.

preference_match(route, profile):
    Mean over the profile factors that could be evaluated (distance range,
    terrain, difficulty band, fitness closeness).  Neutral 0.5 without data.

difficulty_fit(route, profile):
    Band membership and fitness closeness, rescaled to [0, 1].

history_match(route, history):
    Distance / effort / satisfaction similarity to the recent run window.
    Neutral 0.5 with no history.

novelty(route, history):
    0.2 for a route already run, 1.0 otherwise.

time_match(route, time_slot):
    Route's own suitability for the slot; lighting fallback at night.

safety_normalized(route) / popularity_normalized(route):
    Ratings rescaled onto [0, 1].
"""

from __future__ import annotations

import math
from typing import Optional, Sequence

from saferun.models.context import WeatherReading
from saferun.models.history import HistoryRecord
from saferun.models.profile import UserPreferenceProfile
from saferun.models.route import Route
from saferun.taxonomy.context_taxonomy import (
    RAIN_CONDITIONS,
    SUN_CONDITIONS,
    LightingQuality,
    TimeSlot,
    WeatherCondition,
)
from saferun.taxonomy.route_taxonomy import DIFFICULTY_BAND_LEVELS

NEUTRAL_SCORE = 0.5

# ── Lookup tables ─────────────────────────────────────────────────────────────

_CONDITION_MULTIPLIER: dict[WeatherCondition, float] = {
    WeatherCondition.CLEAR:         1.0,
    WeatherCondition.SUNNY:         1.0,
    WeatherCondition.PARTLY_CLOUDY: 1.0,
    WeatherCondition.CLOUDY:        0.9,
    WeatherCondition.OVERCAST:      0.9,
    WeatherCondition.LIGHT_RAIN:    0.4,
    WeatherCondition.RAIN:          0.1,
    WeatherCondition.HEAVY_RAIN:    0.1,
    WeatherCondition.STORM:         0.1,
    WeatherCondition.SNOW:          0.2,
    WeatherCondition.FOG:           0.2,
}
_UNRECOGNIZED_CONDITION_MULTIPLIER = 0.7

# Fallback for routes with no value for the night slot
_LIGHTING_FALLBACK: dict[LightingQuality, float] = {
    LightingQuality.EXCELLENT: 0.8,
    LightingQuality.GOOD:      0.6,
}
_POOR_LIGHTING_SCORE = 0.2

# |fitness - difficulty| upper bound → bonus
_FITNESS_TIERS: tuple[tuple[int, float], ...] = ((1, 0.15), (2, 0.10), (3, 0.05))
_MAX_FITNESS_BONUS = 0.15

_DISTANCE_WEIGHT = 0.25
_TERRAIN_BONUS = 0.2
_BAND_BONUS = 0.2

_RUN_ROUTE_NOVELTY = 0.2
_NEW_ROUTE_NOVELTY = 1.0

# History tiers: |difference| upper bound → credit
_HISTORY_DISTANCE_TIERS: tuple[tuple[float, float], ...] = ((1, 0.3), (2, 0.2), (3, 0.1))
_HISTORY_DIFFICULTY_TIERS: tuple[tuple[float, float], ...] = ((1, 0.3), (2, 0.2))
_HISTORY_SATISFIED_BONUS = 0.2
_DEFAULT_EFFORT = 5
_DEFAULT_RATING = 3


# ── Weather ───────────────────────────────────────────────────────────────────

def temperature_score(temperature_c: float) -> float:
    if 15.0 <= temperature_c <= 25.0:
        return 1.0
    if 10.0 <= temperature_c <= 30.0:
        return 0.8
    if 5.0 <= temperature_c <= 35.0:
        return 0.6
    return 0.3


def condition_score(condition: WeatherCondition) -> float:
    return _CONDITION_MULTIPLIER.get(condition, _UNRECOGNIZED_CONDITION_MULTIPLIER)


def wind_score(wind_speed_kmh: float) -> float:
    if wind_speed_kmh <= 10.0:
        return 1.0
    if wind_speed_kmh <= 20.0:
        return 0.8
    return 0.5


def humidity_score(humidity_pct: float) -> float:
    if 40.0 <= humidity_pct <= 70.0:
        return 1.0
    if 30.0 <= humidity_pct <= 80.0:
        return 0.9
    return 0.7


def weather_suitability(reading: WeatherReading) -> float:
    """Return how suitable the current weather is for running, in [0, 1]."""
    score = (
        temperature_score(reading.temperature_c)
        * condition_score(reading.condition)
        * wind_score(reading.wind_speed_kmh)
        * humidity_score(reading.humidity_pct)
    )
    return clamp(score)


def route_weather_match(route: Route, reading: WeatherReading) -> float:
    """Return how well ``route`` suits the current weather, in [0, 1].

    The route's own weather table picks a base factor for the condition
    family (sun / rain / wind), with conservative defaults when the table
    lacks the key.  Shaded routes gain on hot days and indoor routes on
    cold days.  The result is scaled by the general weather suitability.
    Routes without a weather table score neutral.
    """
    if not route.weather_suitability:
        return NEUTRAL_SCORE

    table = route.weather_suitability
    condition = reading.condition
    if condition in SUN_CONDITIONS:
        factor = table.get("sun", 0.3)
    elif condition in RAIN_CONDITIONS:
        factor = table.get("rain", 0.1)
    elif condition in (WeatherCondition.CLOUDY, WeatherCondition.PARTLY_CLOUDY):
        factor = 0.9
    elif condition == WeatherCondition.WINDY:
        factor = table.get("wind", 0.7)
    else:
        factor = 0.7

    if reading.temperature_c > 30.0 and route.has_feature("shade"):
        factor += 0.2
    if reading.temperature_c < 10.0 and route.has_feature("indoor"):
        factor += 0.3

    return clamp(factor * weather_suitability(reading))


# ── Profile ───────────────────────────────────────────────────────────────────

def _fitness_bonus(fitness_level: int, difficulty_level: int) -> float:
    diff = abs(fitness_level - difficulty_level)
    for bound, bonus in _FITNESS_TIERS:
        if diff <= bound:
            return bonus
    return 0.0


def preference_match(route: Route, profile: Optional[UserPreferenceProfile]) -> float:
    """Return the user-route preference match, in [0, 1].

    Each evaluated factor adds its credit to a running sum which is divided
    by the number of factors evaluated.  Factors whose profile data is
    missing are skipped, not zero-filled.

    Returns:
        ``0.5`` without a profile or when no factor could be evaluated.
    """
    if profile is None:
        return NEUTRAL_SCORE

    score = 0.0
    factors = 0

    if profile.distance_range is not None:
        rng = profile.distance_range
        if rng.contains(route.distance_km):
            score += _DISTANCE_WEIGHT
        elif route.distance_km < rng.min_km:
            score += max(0.0, _DISTANCE_WEIGHT * (route.distance_km / rng.min_km))
        else:
            score += max(0.0, _DISTANCE_WEIGHT * (rng.max_km / route.distance_km))
        factors += 1

    if profile.terrain_preferences:
        if route.terrain_type in profile.terrain_preferences:
            score += _TERRAIN_BONUS
        factors += 1

    band_levels = DIFFICULTY_BAND_LEVELS[profile.effective_difficulty_band]
    if route.difficulty_level in band_levels:
        score += _BAND_BONUS
    factors += 1

    if profile.fitness_level is not None:
        score += _fitness_bonus(profile.fitness_level, route.difficulty_level)
        factors += 1

    return clamp(score / factors) if factors else NEUTRAL_SCORE


def difficulty_fit(route: Route, profile: Optional[UserPreferenceProfile]) -> float:
    """Return how well the route's difficulty suits the runner, in [0, 1].

    Mean of band membership (1.0 / 0.0) and the fitness-closeness tier
    rescaled so the closest tier is 1.0.  Neutral 0.5 without a profile.
    """
    if profile is None:
        return NEUTRAL_SCORE

    parts: list[float] = []
    band_levels = DIFFICULTY_BAND_LEVELS[profile.effective_difficulty_band]
    parts.append(1.0 if route.difficulty_level in band_levels else 0.0)
    if profile.fitness_level is not None:
        bonus = _fitness_bonus(profile.fitness_level, route.difficulty_level)
        parts.append(bonus / _MAX_FITNESS_BONUS)

    return clamp(sum(parts) / len(parts))


# ── History ───────────────────────────────────────────────────────────────────

def _tier_credit(diff: float, tiers: tuple[tuple[float, float], ...]) -> float:
    for bound, credit in tiers:
        if diff <= bound:
            return credit
    return 0.0


def history_match(
    route: Route,
    history: Sequence[HistoryRecord],
    window: int = 30,
) -> float:
    """Return how closely ``route`` resembles the runner's recent runs, in [0, 1].

    Args:
        route:   Candidate route.
        history: Run history, newest first.
        window:  Number of newest records considered.

    Returns:
        ``0.5`` (neutral) when there is no history.
    """
    recent = list(history[:window])
    if not recent:
        return NEUTRAL_SCORE

    n = len(recent)
    avg_distance = sum(r.distance_km for r in recent) / n
    avg_effort = sum(r.effort_level or _DEFAULT_EFFORT for r in recent) / n
    avg_rating = sum(r.user_rating or _DEFAULT_RATING for r in recent) / n

    score = _tier_credit(abs(route.distance_km - avg_distance), _HISTORY_DISTANCE_TIERS)

    expected_difficulty = math.floor(avg_effort + 0.5)  # half rounds up
    score += _tier_credit(
        abs(route.difficulty_level - expected_difficulty), _HISTORY_DIFFICULTY_TIERS
    )

    if avg_rating >= 4.0:
        score += _HISTORY_SATISFIED_BONUS

    return clamp(score)


def novelty(route: Route, history: Sequence[HistoryRecord]) -> float:
    """Return 0.2 for a route already completed, 1.0 for an unseen one."""
    if any(r.route_id == route.route_id for r in history):
        return _RUN_ROUTE_NOVELTY
    return _NEW_ROUTE_NOVELTY


# ── Time / safety / popularity ───────────────────────────────────────────────

def time_match(route: Route, time_slot: TimeSlot) -> float:
    """Return the route's suitability for ``time_slot``, in [0, 1].

    Uses the route's own table value when present.  For the night slot without
    a value, lighting quality decides (excellent 0.8, good 0.6, else 0.2).
    Anything else is neutral.
    """
    if not route.time_suitability:
        return NEUTRAL_SCORE

    value = route.time_suitability.get(time_slot)
    if value is not None:
        return clamp(value)

    if time_slot == TimeSlot.NIGHT:
        return _LIGHTING_FALLBACK.get(route.lighting_quality, _POOR_LIGHTING_SCORE)

    return NEUTRAL_SCORE


def safety_normalized(route: Route) -> float:
    """Safety rating (0-10) rescaled to [0, 1]."""
    return clamp(route.safety_rating / 10.0)


def popularity_normalized(route: Route) -> float:
    """Average rating (0-5) rescaled to [0, 1]."""
    return clamp(route.avg_rating / 5.0)


# ── Helper ────────────────────────────────────────────────────────────────────

def clamp(value: float, lo: float = 0.0, hi: float = 1.0) -> float:
    return max(lo, min(hi, value))
