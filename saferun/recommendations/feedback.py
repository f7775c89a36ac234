"""
Feedback learner: folds post-run ratings into a runner's learned preference
weights, and aggregates per-route feedback statistics.

Update rule (exponential moving average, per dimension)
--------------------------------------------------------
    new = clamp(current * 0.8 + observed * (overall / 5) * 0.2, 1, 10)

rounded to one decimal.  An ``observed`` value of 0 means "not rated" and
leaves the weight unchanged.  The overall 1-5 rating scales how much a
dimension rating is trusted: a 1-star run teaches a fifth as much as a
5-star one.

Dimensions
----------
    difficulty -> difficulty_preference
    safety     -> safety_importance
    scenery    -> scenery_importance

The feedback row and the updated profile are written with one
``store.save_feedback`` call; when it fails the stored profile is unchanged.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from saferun.config import AppConfig
from saferun.models.feedback import (
    DIMENSION_TO_PREFERENCE,
    FeedbackRatings,
    FeedbackStats,
    RecentComment,
    RouteFeedback,
    TagCount,
)
from saferun.models.profile import UserPreferenceProfile
from saferun.recommendations.errors import (
    DataUnavailableError,
    InvalidInputError,
    PersistFailureError,
)
from saferun.store.base import RecommendationStore, StoreError
from saferun.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

_MAX_OVERALL_RATING = 5.0
_RECOMMEND_MIN_RATING = 4
_POPULAR_TAG_LIMIT = 10
_RECENT_COMMENT_LIMIT = 5


def round_half_up(value: float, digits: int = 1) -> float:
    """Round ``value`` to ``digits`` decimals with halves rounded up."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def ema_update(
    current: float,
    observed: float,
    overall_rating: float,
    retain: float = 0.8,
    learn: float = 0.2,
    lo: float = 1.0,
    hi: float = 10.0,
) -> float:
    """Return the updated preference weight.

    Args:
        current:        Current learned weight.
        observed:       Dimension rating 0-10; ``0`` leaves ``current`` as is.
        overall_rating: Overall 1-5 rating scaling the observation.

    Returns:
        New weight in ``[lo, hi]``, rounded to one decimal.
    """
    if observed == 0:
        return current
    blended = current * retain + observed * (overall_rating / _MAX_OVERALL_RATING) * learn
    return round_half_up(max(lo, min(hi, blended)), 1)


class FeedbackLearner:
    """Updates learned preference weights from post-run feedback.

    Args:
        store:  Persistence collaborator.
        config: Application config; only the ``feedback`` section is read.
    """

    def __init__(
        self,
        store: RecommendationStore,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.store = store
        self.config = config or AppConfig()

    def update_preference(self, current: float, observed: float, overall_rating: float) -> float:
        """Apply the configured moving-average rule to a single weight."""
        cfg = self.config.feedback
        return ema_update(
            current,
            observed,
            overall_rating,
            retain=cfg.retain,
            learn=cfg.learn,
            lo=cfg.min_value,
            hi=cfg.max_value,
        )

    def record_feedback(
        self,
        user_id: str,
        route_id: str,
        ratings: FeedbackRatings | dict[str, Any],
    ) -> UserPreferenceProfile:
        """Record one feedback submission and return the updated profile.

        Raises:
            InvalidInputError:    Empty ids or out-of-range ratings.
            DataUnavailableError: The current profile could not be read.
            PersistFailureError:  The feedback and profile could not be saved.
        """
        ratings = _validate_feedback(user_id, route_id, ratings)

        try:
            profile = self.store.load_profile(user_id)
        except StoreError as exc:
            raise DataUnavailableError(user_id, str(exc)) from exc

        if profile is None:
            profile = self._default_profile(user_id)
            logger.info("Creating preference profile for user=%s", user_id)

        updates: dict[str, Any] = {
            field: self.update_preference(
                getattr(profile, field), getattr(ratings, dimension), ratings.rating
            )
            for dimension, field in DIMENSION_TO_PREFERENCE.items()
        }
        now = utcnow()
        updates["updated_at"] = now
        updated = profile.model_copy(update=updates)

        feedback = RouteFeedback(
            route_id=route_id, user_id=user_id, ratings=ratings, created_at=now,
        )
        try:
            self.store.save_feedback(feedback, updated)
        except StoreError as exc:
            logger.error(
                "Feedback write failed for user=%s route=%s: %s", user_id, route_id, exc
            )
            raise PersistFailureError(user_id, route_id, str(exc)) from exc

        logger.info(
            "Feedback recorded user=%s route=%s rating=%d difficulty=%.1f safety=%.1f scenery=%.1f",
            user_id, route_id, ratings.rating,
            updated.difficulty_preference, updated.safety_importance, updated.scenery_importance,
            extra={"user_id": user_id, "route_id": route_id},
        )
        return updated

    def route_feedback_stats(self, route_id: str) -> FeedbackStats:
        """Aggregate all stored feedback for ``route_id``.

        Raises:
            InvalidInputError: Empty route id.
            StoreError:        The feedback rows could not be read.
        """
        if not route_id or not route_id.strip():
            raise InvalidInputError("route_id must not be empty.", field="route_id")
        return compute_feedback_stats(route_id, self.store.load_route_feedback(route_id))

    def _default_profile(self, user_id: str) -> UserPreferenceProfile:
        default = self.config.feedback.default_value
        return UserPreferenceProfile(
            user_id=user_id,
            difficulty_preference=default,
            safety_importance=default,
            scenery_importance=default,
        )


def _validate_feedback(
    user_id: str,
    route_id: str,
    ratings: FeedbackRatings | dict[str, Any],
) -> FeedbackRatings:
    if not isinstance(user_id, str) or not user_id.strip():
        raise InvalidInputError("user_id must be a non-empty string.", field="user_id")
    if not isinstance(route_id, str) or not route_id.strip():
        raise InvalidInputError("route_id must be a non-empty string.", field="route_id")
    if isinstance(ratings, FeedbackRatings):
        return ratings
    try:
        return FeedbackRatings.model_validate(ratings)
    except ValidationError as exc:
        raise InvalidInputError(f"Invalid feedback ratings: {exc}", field="ratings") from exc


def compute_feedback_stats(route_id: str, feedbacks: Sequence[RouteFeedback]) -> FeedbackStats:
    """Build per-route statistics from raw feedback rows.

    Dimension averages include unrated (0) entries, so a route with few
    dimension ratings shows a low average rather than a missing one.
    """
    if not feedbacks:
        return FeedbackStats(route_id=route_id)

    n = len(feedbacks)
    ratings = [f.ratings for f in feedbacks]

    tag_counts = Counter(tag for r in ratings for tag in r.tags)
    popular = [
        TagCount(tag=tag, count=count)
        for tag, count in tag_counts.most_common(_POPULAR_TAG_LIMIT)
    ]

    commented = sorted(
        (f for f in feedbacks if f.ratings.comment.strip()),
        key=lambda f: f.created_at,
        reverse=True,
    )
    recent = [
        RecentComment(comment=f.ratings.comment, rating=f.ratings.rating, created_at=f.created_at)
        for f in commented[:_RECENT_COMMENT_LIMIT]
    ]

    return FeedbackStats(
        route_id=route_id,
        average_rating=round_half_up(sum(r.rating for r in ratings) / n, 1),
        total_feedbacks=n,
        difficulty_rating=round_half_up(sum(r.difficulty for r in ratings) / n, 1),
        safety_rating=round_half_up(sum(r.safety for r in ratings) / n, 1),
        scenery_rating=round_half_up(sum(r.scenery for r in ratings) / n, 1),
        recommendation_rate=round_half_up(
            sum(1 for r in ratings if r.rating >= _RECOMMEND_MIN_RATING) / n, 2
        ),
        popular_tags=popular,
        recent_comments=recent,
    )
