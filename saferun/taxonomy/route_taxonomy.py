"""
Route and recommendation taxonomy.

  - ``DifficultyBand``      — coarse difficulty preference of a runner.
  - ``RecommendationType``  — archetype tag attached to every recommendation.
  - ``RiskFactor``          — environmental risk flags from safety analysis.
  - ``SafetyLevel``         — banded real-time safety classification.

``DIFFICULTY_BAND_LEVELS`` is the canonical band → ordinal mapping:
every difficulty level 1..10 belongs to exactly one band.

This module has NO imports from any other ``saferun`` package.
"""

from enum import StrEnum


class DifficultyBand(StrEnum):
    """Preferred difficulty band of a runner."""

    EASY = "easy"
    MODERATE = "moderate"
    HARD = "hard"


DIFFICULTY_BAND_LEVELS: dict[DifficultyBand, frozenset[int]] = {
    DifficultyBand.EASY:     frozenset({1, 2, 3}),
    DifficultyBand.MODERATE: frozenset({4, 5, 6}),
    DifficultyBand.HARD:     frozenset({7, 8, 9, 10}),
}


def band_for_level(level: float) -> DifficultyBand:
    """Return the band containing ``round(level)``, clamped to 1..10."""
    ordinal = max(1, min(10, int(round(level))))
    for band, levels in DIFFICULTY_BAND_LEVELS.items():
        if ordinal in levels:
            return band
    return DifficultyBand.MODERATE


class RecommendationType(StrEnum):
    """Archetype of a recommendation, evaluated in this priority order."""

    PERFECT_MATCH = "perfect_match"
    """Weather, time and difficulty all matched."""

    POPULAR = "popular"
    """Very highly rated by other runners."""

    CHALLENGE = "challenge"
    """Difficulty 7 or above."""

    EXPLORATION = "exploration"
    """A route the runner has not tried yet."""

    SAFE_NIGHT = "safe_night"
    """High safety rating during a dark time slot."""

    GENERAL = "general"


class RiskFactor(StrEnum):
    """Environmental risk flags raised by the safety analyzer."""

    POOR_LIGHTING = "poor_lighting"
    ISOLATED_AREA = "isolated_area"
    HIGH_CRIME_RATE = "high_crime_rate"
    HEAVY_TRAFFIC = "heavy_traffic"
    CONSTRUCTION_ZONE = "construction_zone"
    WEATHER_CONDITIONS = "weather_conditions"
    CROWD_DENSITY = "crowd_density"


class SafetyLevel(StrEnum):
    """Banded real-time safety classification (score 0-100)."""

    VERY_SAFE = "very_safe"
    SAFE = "safe"
    MODERATE = "moderate"
    RISKY = "risky"
    DANGEROUS = "dangerous"
