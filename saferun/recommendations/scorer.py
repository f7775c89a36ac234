"""
Recommendation scoring: runs every signal calculator for one route and
combines the sub-scores into a single confidence score.

Score formula (weighted sum, range 0–1)
---------------------------------------
    total = (
        preference   * 0.25   # declared profile fit
        + history    * 0.20   # similarity to recent runs
        + weather    * 0.20   # route weather fit x weather suitability
        + time       * 0.15   # route suitability for the time slot
        + safety     * 0.10   # safety rating / 10
        + popularity * 0.05   # average rating / 5
        + novelty    * 0.05   # unseen route bonus
    )

Weights come from ``ScoringConfig.weights`` and are validated to sum to 1.0.
Each sub-score is clamped by its calculator and validated here; the
aggregator does not re-clamp inputs.  The weighted total is clamped once at
the point it is produced.

``difficulty_fit`` is carried alongside the weighted signals: it feeds the
``difficulty_match`` explanation flag but has no aggregate weight.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Optional, Sequence

from saferun.config import ScoringWeights
from saferun.models.context import ContextSnapshot
from saferun.models.history import HistoryRecord
from saferun.models.profile import UserPreferenceProfile
from saferun.models.route import Route
from saferun.recommendations import signals


@dataclass(frozen=True)
class ScoreComponents:
    """All sub-scores of one (user, route, context) triple, each in [0, 1].

    Attributes:
        preference:     Profile preference match.
        history:        Similarity to recent run history.
        weather:        Route weather match.
        time:           Route suitability for the current time slot.
        safety:         Normalized safety rating.
        popularity:     Normalized average rating.
        novelty:        Unfamiliarity of the route to this runner.
        difficulty_fit: Difficulty suitability (explanation only).
    """

    preference:     float
    history:        float
    weather:        float
    time:           float
    safety:         float
    popularity:     float
    novelty:        float
    difficulty_fit: float

    def __post_init__(self) -> None:
        for name, value in asdict(self).items():
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Sub-score '{name}' must be in [0, 1], got {value}.")

    def as_dict(self) -> dict[str, float]:
        return asdict(self)


def compute_components(
    route:   Route,
    context: ContextSnapshot,
    profile: Optional[UserPreferenceProfile],
    history: Sequence[HistoryRecord],
    history_window: int = 30,
) -> ScoreComponents:
    """Run every signal calculator for one route.

    Args:
        route:          Candidate route.
        context:        Weather and time slot of the request.
        profile:        Runner profile, or ``None`` for a first-time user.
        history:        Run history, newest first.
        history_window: Newest records considered by the history signal.

    Returns:
        ScoreComponents with all fields populated.
    """
    return ScoreComponents(
        preference=signals.preference_match(route, profile),
        history=signals.history_match(route, history, window=history_window),
        weather=signals.route_weather_match(route, context.weather),
        time=signals.time_match(route, context.time_slot),
        safety=signals.safety_normalized(route),
        popularity=signals.popularity_normalized(route),
        novelty=signals.novelty(route, history),
        difficulty_fit=signals.difficulty_fit(route, profile),
    )


def aggregate(components: ScoreComponents, weights: ScoringWeights) -> float:
    """Return the weighted confidence score in [0, 1].

    Deterministic: identical inputs always give an identical result.
    """
    total = (
        components.preference   * weights.preference
        + components.history    * weights.history
        + components.weather    * weights.weather
        + components.time       * weights.time
        + components.safety     * weights.safety
        + components.popularity * weights.popularity
        + components.novelty    * weights.novelty
    )
    return signals.clamp(total)
