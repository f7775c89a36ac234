"""
Recommendation ranker: scores every candidate route, orders them, and
builds the caller-facing ``Recommendation`` records.

Usage flow
----------
1. score_routes(routes, context, profile, history, scoring)
   -> list[ScoredRoute]  (one per candidate, in catalog order)

2. rank_top_n(scored, limit)
   -> list[ScoredRoute]  (score descending, catalog order on ties, <= limit)

3. build_recommendations(ranked, time_slot)
   -> list[Recommendation]  (1-based rank attached)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from saferun.config import ScoringConfig
from saferun.models.context import ContextSnapshot
from saferun.models.history import HistoryRecord
from saferun.models.profile import UserPreferenceProfile
from saferun.models.recommendation import ReasoningFlags, Recommendation
from saferun.models.route import Route
from saferun.recommendations.reasoning import build_factors, build_flags, classify
from saferun.recommendations.scorer import ScoreComponents, aggregate, compute_components
from saferun.taxonomy.context_taxonomy import TimeSlot
from saferun.taxonomy.route_taxonomy import RecommendationType


@dataclass(frozen=True)
class ScoredRoute:
    """Intermediate object coupling a route with its scoring results.

    Attributes:
        route:               The candidate route.
        position:            Index of the route in the candidate list.
        score:               Aggregate confidence score in [0, 1].
        components:          Detailed sub-score breakdown.
        flags:               Reasoning flags.
        factors:             Ordered reason strings.
        recommendation_type: Archetype tag.
    """

    route:               Route
    position:            int
    score:               float
    components:          ScoreComponents
    flags:               ReasoningFlags
    factors:             list[str]
    recommendation_type: RecommendationType


def score_routes(
    routes:  Sequence[Route],
    context: ContextSnapshot,
    profile: Optional[UserPreferenceProfile],
    history: Sequence[HistoryRecord],
    scoring: ScoringConfig,
    history_window: int = 30,
) -> list[ScoredRoute]:
    """Score and explain every candidate route.

    Args:
        routes:         Candidate routes in catalog order.
        context:        Request weather and time slot.
        profile:        Runner profile, or ``None``.
        history:        Run history, newest first.
        scoring:        Weights and thresholds.
        history_window: Newest history records considered.

    Returns:
        One ScoredRoute per route, in input order.
    """
    scored: list[ScoredRoute] = []
    thresholds = scoring.thresholds

    for position, route in enumerate(routes):
        components = compute_components(
            route, context, profile, history, history_window=history_window
        )
        flags = build_flags(components, thresholds)
        scored.append(
            ScoredRoute(
                route=route,
                position=position,
                score=aggregate(components, scoring.weights),
                components=components,
                flags=flags,
                factors=build_factors(flags, components, route, thresholds),
                recommendation_type=classify(
                    flags, components, route, context.time_slot, thresholds
                ),
            )
        )

    return scored


def rank_top_n(scored: Sequence[ScoredRoute], limit: int) -> list[ScoredRoute]:
    """Return at most ``limit`` routes, best first.

    Primary sort: score descending.  Ties keep their candidate-list order
    (``sorted`` is stable and ``position`` makes the tie-break explicit).
    """
    ordered = sorted(scored, key=lambda s: (-s.score, s.position))
    return ordered[:limit]


def build_recommendations(
    ranked:    Sequence[ScoredRoute],
    time_slot: TimeSlot,
) -> list[Recommendation]:
    """Convert ranked routes into frozen ``Recommendation`` records."""
    return [
        Recommendation(
            route=sr.route,
            rank=rank,
            score=sr.score,
            components=sr.components.as_dict(),
            flags=sr.flags,
            factors=list(sr.factors),
            recommendation_type=sr.recommendation_type,
            time_slot=time_slot,
        )
        for rank, sr in enumerate(ranked, start=1)
    ]
