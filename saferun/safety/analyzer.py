"""
Time-slot safety analysis.

Scores (0-100)
--------------
    base safety      = slot weight x 100
    environmental    = (1 - slot weight) x 40
      risk             + 0.5 x 20   rain / heavy rain / storm
                       + 0.9 x 25   crowd density < 20      (isolated)
                       + 0.4 x 15   crowd density > 80      (crowded)
                       + 0.5 x 15   visibility < 40
                       + 0.8 x 25   lighting level < 40
                       + historical location risk x 30
                     capped at 100
    slot safety      = base x (1 - incident_rate x 0.5), floored at 0
    real-time safety = max(base - environmental risk, 0)

Safety levels: very_safe >= 80, safe >= 70, moderate >= 55, risky >= 40,
dangerous below.

Historical location risk comes from a ``LocationRiskProvider``; the default
``StaticLocationRiskProvider`` uses fixed bounding boxes over central Shanghai.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol, Sequence

from saferun.config import SafetyConfig
from saferun.models.safety import (
    EnvironmentalData,
    RiskAnalysis,
    SafetyAssessment,
    TimeSlotSafety,
)
from saferun.taxonomy.context_taxonomy import DARK_SLOTS, TimeSlot, WeatherCondition
from saferun.taxonomy.route_taxonomy import RiskFactor, SafetyLevel

logger = logging.getLogger(__name__)

_RISK_FACTOR_WEIGHTS: dict[RiskFactor, float] = {
    RiskFactor.POOR_LIGHTING:      0.8,
    RiskFactor.ISOLATED_AREA:      0.9,
    RiskFactor.HIGH_CRIME_RATE:    0.95,
    RiskFactor.HEAVY_TRAFFIC:      0.7,
    RiskFactor.CONSTRUCTION_ZONE:  0.6,
    RiskFactor.WEATHER_CONDITIONS: 0.5,
    RiskFactor.CROWD_DENSITY:      0.4,
}

_SEVERE_WEATHER: frozenset[WeatherCondition] = frozenset({
    WeatherCondition.RAIN, WeatherCondition.HEAVY_RAIN, WeatherCondition.STORM,
})

# (minimum score, level), checked top-down
_LEVEL_BANDS: tuple[tuple[float, SafetyLevel], ...] = (
    (80.0, SafetyLevel.VERY_SAFE),
    (70.0, SafetyLevel.SAFE),
    (55.0, SafetyLevel.MODERATE),
    (40.0, SafetyLevel.RISKY),
)

_HIGH_HISTORICAL_RISK = 0.7
_INCIDENT_RATE_ALERT = 0.1
_HOTSPOT_RISK = 60.0
_AVOID_SLOT_BELOW = 50.0

SLOT_LABELS: dict[TimeSlot, str] = {
    TimeSlot.EARLY_MORNING: "early morning (05-07)",
    TimeSlot.MORNING:       "morning (07-10)",
    TimeSlot.LATE_MORNING:  "late morning (10-12)",
    TimeSlot.AFTERNOON:     "afternoon (12-17)",
    TimeSlot.EVENING:       "evening (17-20)",
    TimeSlot.NIGHT:         "night (20-23)",
    TimeSlot.LATE_NIGHT:    "late night (23-05)",
}

_FACTOR_TIPS: tuple[tuple[RiskFactor, str], ...] = (
    (RiskFactor.POOR_LIGHTING, "Carry a light and stick to well-lit stretches."),
    (RiskFactor.ISOLATED_AREA, "Avoid running alone in isolated areas; pick a busier route or a partner."),
    (RiskFactor.HEAVY_TRAFFIC, "Watch for traffic and prefer routes with sidewalks or running lanes."),
)

_GENERAL_TIPS: tuple[str, ...] = (
    "Carry a charged phone.",
    "Tell someone your route and expected return time.",
    "Wear reflective or bright clothing.",
)


# ── Location risk ─────────────────────────────────────────────────────────────


class LocationRiskProvider(Protocol):
    def historical_risk(self, latitude: float, longitude: float) -> float:
        """Return the historical incident risk of a location, in [0, 1]."""
        ...


class StaticLocationRiskProvider:
    """Fixed bounding-box risk map (strict bounds)."""

    def historical_risk(self, latitude: float, longitude: float) -> float:
        if 31.2 < latitude < 31.25 and 121.45 < longitude < 121.5:
            return 0.8
        if 31.15 < latitude < 31.3 and 121.4 < longitude < 121.55:
            return 0.4
        return 0.2


# ── Scores ────────────────────────────────────────────────────────────────────


def _slot_weight(slot: TimeSlot, weights: Optional[dict[TimeSlot, float]]) -> float:
    table = weights if weights is not None else SafetyConfig().time_slot_weights
    return table[slot]


def time_slot_base_safety(
    slot: TimeSlot,
    weights: Optional[dict[TimeSlot, float]] = None,
) -> float:
    """Base safety of ``slot`` on a 0-100 scale."""
    return _slot_weight(slot, weights) * 100.0


def safety_level_for(score: float) -> SafetyLevel:
    for minimum, level in _LEVEL_BANDS:
        if score >= minimum:
            return level
    return SafetyLevel.DANGEROUS


def analyze_environmental_risk(
    slot: TimeSlot,
    environment: Optional[EnvironmentalData] = None,
    historical_risk: float = 0.2,
    weights: Optional[dict[TimeSlot, float]] = None,
) -> RiskAnalysis:
    """Combine time, live conditions, and location history into a 0-100 risk.

    Args:
        slot:            Current time slot.
        environment:     Live conditions, if known; skipped otherwise.
        historical_risk: Location risk in [0, 1].
        weights:         Slot weights; defaults to ``SafetyConfig``.

    Raises:
        ValueError: If ``historical_risk`` is outside [0, 1].
    """
    if not 0.0 <= historical_risk <= 1.0:
        raise ValueError(f"historical_risk must be in [0, 1], got {historical_risk}.")

    factors: list[RiskFactor] = []
    risk = (1.0 - _slot_weight(slot, weights)) * 40.0

    if slot in DARK_SLOTS:
        factors.append(RiskFactor.POOR_LIGHTING)

    if environment is not None:
        if environment.weather_condition in _SEVERE_WEATHER:
            factors.append(RiskFactor.WEATHER_CONDITIONS)
            risk += _RISK_FACTOR_WEIGHTS[RiskFactor.WEATHER_CONDITIONS] * 20.0

        if environment.crowd_density < 20.0:
            factors.append(RiskFactor.ISOLATED_AREA)
            risk += _RISK_FACTOR_WEIGHTS[RiskFactor.ISOLATED_AREA] * 25.0
        elif environment.crowd_density > 80.0:
            factors.append(RiskFactor.CROWD_DENSITY)
            risk += _RISK_FACTOR_WEIGHTS[RiskFactor.CROWD_DENSITY] * 15.0

        if environment.visibility < 40.0:
            factors.append(RiskFactor.WEATHER_CONDITIONS)
            risk += _RISK_FACTOR_WEIGHTS[RiskFactor.WEATHER_CONDITIONS] * 15.0

        if environment.lighting_level < 40.0:
            factors.append(RiskFactor.POOR_LIGHTING)
            risk += _RISK_FACTOR_WEIGHTS[RiskFactor.POOR_LIGHTING] * 25.0

    risk += historical_risk * 30.0
    if historical_risk > _HIGH_HISTORICAL_RISK:
        factors.append(RiskFactor.HIGH_CRIME_RATE)

    return RiskAnalysis(
        overall_risk=min(risk, 100.0),
        risk_factors=list(dict.fromkeys(factors)),
        historical_risk=historical_risk,
    )


def analyze_time_slot_safety(
    slot: TimeSlot,
    runs_in_slot: int,
    incidents_in_slot: int,
    weights: Optional[dict[TimeSlot, float]] = None,
) -> TimeSlotSafety:
    """Adjust a slot's base safety by its observed incident rate.

    Raises:
        ValueError: If a count is negative.
    """
    if runs_in_slot < 0 or incidents_in_slot < 0:
        raise ValueError("Run and incident counts must be non-negative.")

    rate = incidents_in_slot / runs_in_slot if runs_in_slot > 0 else 0.0
    adjusted = time_slot_base_safety(slot, weights) * (1.0 - rate * 0.5)

    factors: list[RiskFactor] = []
    if slot in DARK_SLOTS:
        factors.append(RiskFactor.POOR_LIGHTING)
    if rate > _INCIDENT_RATE_ALERT:
        factors.append(RiskFactor.HIGH_CRIME_RATE)

    return TimeSlotSafety(
        time_slot=slot,
        safety_score=min(max(adjusted, 0.0), 100.0),
        risk_factors=factors,
        incident_count=incidents_in_slot,
        total_runs=runs_in_slot,
    )


def analyze_day(
    runs_by_slot: dict[TimeSlot, int],
    incidents_by_slot: dict[TimeSlot, int],
    weights: Optional[dict[TimeSlot, float]] = None,
) -> list[TimeSlotSafety]:
    """Analyze all seven slots in day order.  Missing counts are zero."""
    return [
        analyze_time_slot_safety(
            slot, runs_by_slot.get(slot, 0), incidents_by_slot.get(slot, 0), weights
        )
        for slot in TimeSlot
    ]


def schedule_advice(analyses: Sequence[TimeSlotSafety]) -> list[str]:
    """Name the safest slot, and the riskiest one when it scores below 50.

    Ties go to the earlier slot in ``analyses``.
    """
    if not analyses:
        return []
    safest = max(analyses, key=lambda a: a.safety_score)
    riskiest = min(analyses, key=lambda a: a.safety_score)

    advice = [
        f"Safest time to run: {SLOT_LABELS[safest.time_slot]} "
        f"(safety {safest.safety_score:.1f})."
    ]
    if riskiest.safety_score < _AVOID_SLOT_BELOW:
        advice.append(f"Avoid running in the {SLOT_LABELS[riskiest.time_slot]}; risk is high.")
    return advice


def assess_realtime_safety(
    slot: TimeSlot,
    environment: Optional[EnvironmentalData] = None,
    historical_risk: float = 0.2,
    weights: Optional[dict[TimeSlot, float]] = None,
) -> SafetyAssessment:
    """Real-time safety for the current slot, place, and conditions."""
    risk = analyze_environmental_risk(slot, environment, historical_risk, weights)
    base = time_slot_base_safety(slot, weights)
    overall = max(base - risk.overall_risk, 0.0)
    location_safety = 100.0 - historical_risk * 100.0

    if environment is None:
        crowd, weather = 75.0, 85.0
    else:
        crowd = environment.crowd_density
        weather = 70.0 if environment.weather_condition in _SEVERE_WEATHER else 100.0

    factors = {
        "lighting":             base,
        "crowd_density":        crowd,
        "crime_rate":           location_safety,
        "emergency_access":     85.0,
        "road_condition":       90.0,
        "weather_condition":    weather,
        "time_of_day":          base,
        "historical_incidents": location_safety,
    }

    is_hotspot = risk.overall_risk > _HOTSPOT_RISK
    recommendations = schedule_advice([analyze_time_slot_safety(slot, 1, 0, weights)])
    if is_hotspot:
        recommendations.append(
            "Elevated risk at your location; adjust the route or stay extra alert."
        )
        for factor, tip in _FACTOR_TIPS:
            if factor in risk.risk_factors:
                recommendations.append(tip)
    recommendations.extend(_GENERAL_TIPS)

    alerts = ["Elevated risk in the current area. Stay alert."] if is_hotspot else []

    level = safety_level_for(overall)
    logger.debug(
        "Safety slot=%s base=%.1f risk=%.1f overall=%.1f level=%s",
        slot, base, risk.overall_risk, overall, level,
    )
    return SafetyAssessment(
        time_slot=slot,
        overall=overall,
        level=level,
        risk=risk,
        factors=factors,
        recommendations=recommendations,
        alerts=alerts,
    )
