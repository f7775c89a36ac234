"""
Explanation builder: turns sub-scores into reasoning flags, ordered reason
strings, and a recommendation archetype.

Flags (strictly greater than the configured threshold)
------------------------------------------------------
    weather_match     weather        > 0.7
    time_match        time           > 0.7
    difficulty_match  difficulty_fit > 0.6
    preference_match  preference     > 0.5
    novelty_factor    novelty        > 0.8
    safety_factor     safety         > 0.8

Reason order
------------
Flag reasons in the order above, then "highly rated" when popularity
exceeds 0.8, then the ``scenic`` and ``facilities`` route features.

Archetype (evaluated in order — first match wins)
-------------------------------------------------
    1. PERFECT_MATCH : weather, time and difficulty flags all set
    2. POPULAR       : popularity > 0.9
    3. CHALLENGE     : difficulty level >= 7
    4. EXPLORATION   : novelty flag set
    5. SAFE_NIGHT    : safety flag set and the slot is night
    6. GENERAL       : everything else
"""

from __future__ import annotations

from saferun.config import ReasoningThresholds
from saferun.models.recommendation import ReasoningFlags
from saferun.models.route import Route
from saferun.recommendations.scorer import ScoreComponents
from saferun.taxonomy.context_taxonomy import TimeSlot
from saferun.taxonomy.route_taxonomy import RecommendationType

_FLAG_REASONS: tuple[tuple[str, str], ...] = (
    ("weather_match",    "Weather conditions suit this route"),
    ("time_match",       "Good fit for this time of day"),
    ("difficulty_match", "Difficulty matches your level"),
    ("preference_match", "Matches your preferences"),
    ("novelty_factor",   "A new route to explore"),
    ("safety_factor",    "High safety rating"),
)

_FEATURE_REASONS: tuple[tuple[str, str], ...] = (
    ("scenic",     "Scenic views"),
    ("facilities", "Good facilities along the way"),
)


def build_flags(
    components: ScoreComponents,
    thresholds: ReasoningThresholds,
) -> ReasoningFlags:
    """Return which signals crossed their thresholds."""
    return ReasoningFlags(
        weather_match=components.weather > thresholds.weather_match,
        time_match=components.time > thresholds.time_match,
        difficulty_match=components.difficulty_fit > thresholds.difficulty_match,
        preference_match=components.preference > thresholds.preference_match,
        novelty_factor=components.novelty > thresholds.novelty,
        safety_factor=components.safety > thresholds.safety,
    )


def build_factors(
    flags:      ReasoningFlags,
    components: ScoreComponents,
    route:      Route,
    thresholds: ReasoningThresholds,
) -> list[str]:
    """Assemble the ordered list of human-readable reasons.

    May be empty when no signal stands out.
    """
    factors = [text for flag, text in _FLAG_REASONS if getattr(flags, flag)]

    if components.popularity > thresholds.high_popularity:
        factors.append(
            f"Highly rated by runners ({route.avg_rating:.1f}/5 from {route.total_ratings})"
        )

    for tag, text in _FEATURE_REASONS:
        if route.has_feature(tag):
            factors.append(text)

    return factors


def classify(
    flags:      ReasoningFlags,
    components: ScoreComponents,
    route:      Route,
    time_slot:  TimeSlot,
    thresholds: ReasoningThresholds,
) -> RecommendationType:
    """Assign exactly one archetype, in fixed priority order."""
    if flags.weather_match and flags.time_match and flags.difficulty_match:
        return RecommendationType.PERFECT_MATCH
    if components.popularity > thresholds.popular_archetype:
        return RecommendationType.POPULAR
    if route.difficulty_level >= thresholds.challenge_difficulty:
        return RecommendationType.CHALLENGE
    if flags.novelty_factor:
        return RecommendationType.EXPLORATION
    if flags.safety_factor and time_slot == TimeSlot.NIGHT:
        return RecommendationType.SAFE_NIGHT
    return RecommendationType.GENERAL
