"""
ASCII terminal formatters for CLI commands.

All formatters accept models and return plain multi-line strings suitable
for ``typer.echo()``.  No third-party dependencies (no ``rich``, no
``colorama``).

Recommendation table
--------------------
::

    Rank  Route                              Dist  Lvl  Score  Type
    ----------------------------------------------------------------------
       1  The Bund Riverside Promenade     5.2km    3  0.742  perfect_match
          - Weather conditions suit this route
          - Good fit for this time of day
"""

from __future__ import annotations

from typing import Sequence

from saferun.models.context import WeatherReading
from saferun.models.feedback import FeedbackStats
from saferun.models.profile import UserPreferenceProfile
from saferun.models.recommendation import Recommendation
from saferun.models.safety import SafetyAssessment, TimeSlotSafety

_RULE = "-" * 70


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


# ── Recommendations ───────────────────────────────────────────────────────────


def format_weather_line(reading: WeatherReading, advice: str = "") -> str:
    line = (
        f"  Weather: {reading.condition.value}, {reading.temperature_c:.0f}C, "
        f"humidity {reading.humidity_pct:.0f}%, wind {reading.wind_speed_kmh:.0f} km/h"
    )
    if advice:
        line += f"\n  Advice:  {advice}"
    return line


def format_recommendations_table(
    recommendations: Sequence[Recommendation],
    user_id: str,
    show_components: bool = False,
) -> str:
    """Format ranked recommendations, one block per route.

    Args:
        recommendations: Ranked output of the engine.
        user_id:         Runner the list was generated for (header).
        show_components: Also print the per-signal sub-scores.
    """
    lines: list[str] = ["", f"=== Route Recommendations for {user_id} ==="]
    if not recommendations:
        lines.append("  (no routes available)")
        return "\n".join(lines)

    lines.append(f"  Time slot: {recommendations[0].time_slot.value}")
    lines.append("")
    lines.append(
        f"  {'Rank':>4}  {'Route':<32}  {'Dist':>6}  {'Lvl':>3}  {'Score':>5}  Type"
    )
    lines.append("  " + _RULE)

    for rec in recommendations:
        route = rec.route
        lines.append(
            f"  {rec.rank:>4}  {_truncate(route.name, 32):<32}  "
            f"{route.distance_km:>4.1f}km  {route.difficulty_level:>3}  "
            f"{rec.score:>5.3f}  {rec.recommendation_type.value}"
        )
        for factor in rec.factors:
            lines.append(f"        - {factor}")
        if show_components:
            parts = "  ".join(f"{k}={v:.2f}" for k, v in rec.components.items())
            lines.append(f"        [{parts}]")

    return "\n".join(lines)


# ── Feedback ──────────────────────────────────────────────────────────────────


def format_profile_update(profile: UserPreferenceProfile) -> str:
    return "\n".join([
        "",
        f"=== Preferences updated for {profile.user_id} ===",
        f"  Difficulty preference: {profile.difficulty_preference:.1f}",
        f"  Safety importance:     {profile.safety_importance:.1f}",
        f"  Scenery importance:    {profile.scenery_importance:.1f}",
        f"  Difficulty band:       {profile.effective_difficulty_band.value}",
    ])


def format_feedback_stats(stats: FeedbackStats) -> str:
    lines = ["", f"=== Feedback for route {stats.route_id} ==="]
    if stats.total_feedbacks == 0:
        lines.append("  (no feedback yet)")
        return "\n".join(lines)

    lines.extend([
        f"  Ratings:             {stats.total_feedbacks}",
        f"  Average rating:      {stats.average_rating:.1f} / 5",
        f"  Difficulty:          {stats.difficulty_rating:.1f} / 10",
        f"  Safety:              {stats.safety_rating:.1f} / 10",
        f"  Scenery:             {stats.scenery_rating:.1f} / 10",
        f"  Recommendation rate: {stats.recommendation_rate:.0%}",
    ])
    if stats.popular_tags:
        tags = ", ".join(f"{t.tag} ({t.count})" for t in stats.popular_tags)
        lines.append(f"  Popular tags:        {tags}")
    if stats.recent_comments:
        lines.append("  Recent comments:")
        for c in stats.recent_comments:
            lines.append(
                f"    [{c.created_at:%Y-%m-%d}] {c.rating}/5  {_truncate(c.comment, 60)}"
            )
    return "\n".join(lines)


# ── Safety ────────────────────────────────────────────────────────────────────


def format_safety_assessment(assessment: SafetyAssessment) -> str:
    risk = assessment.risk
    lines = [
        "",
        "=== Safety Check ===",
        f"  Time slot:    {assessment.time_slot.value}",
        f"  Safety score: {assessment.overall:.1f} / 100  [{assessment.level.value.upper()}]",
        f"  Risk:         {risk.overall_risk:.1f} / 100",
    ]
    if risk.risk_factors:
        lines.append("  Risk factors: " + ", ".join(f.value for f in risk.risk_factors))
    for alert in assessment.alerts:
        lines.append(f"  [ALERT] {alert}")
    if assessment.recommendations:
        lines.append("  Recommendations:")
        lines.extend(f"    - {r}" for r in assessment.recommendations)
    return "\n".join(lines)


def format_time_slot_table(analyses: Sequence[TimeSlotSafety], advice: Sequence[str] = ()) -> str:
    lines = [
        "",
        "=== Safety by Time Slot ===",
        f"  {'Slot':<14}  {'Score':>6}  {'Runs':>5}  {'Incidents':>9}  Risk factors",
        "  " + _RULE,
    ]
    for a in analyses:
        factors = ", ".join(f.value for f in a.risk_factors) or "-"
        lines.append(
            f"  {a.time_slot.value:<14}  {a.safety_score:>6.1f}  {a.total_runs:>5}  "
            f"{a.incident_count:>9}  {factors}"
        )
    if advice:
        lines.append("")
        lines.extend(f"  {line}" for line in advice)
    return "\n".join(lines)
