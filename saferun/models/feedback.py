"""
Post-run feedback models.

``FeedbackRatings`` is what a runner submits after finishing a route: an
overall 1-5 rating plus optional per-dimension ratings on a 0-10 scale,
where ``0`` means "not rated" and leaves the learned weight unchanged.

``RouteFeedback`` is the persisted row; ``FeedbackStats`` is the per-route
aggregate shown on route detail screens.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Feedback dimension → learned profile weight it feeds.
DIMENSION_TO_PREFERENCE: dict[str, str] = {
    "difficulty": "difficulty_preference",
    "safety":     "safety_importance",
    "scenery":    "scenery_importance",
}


class FeedbackRatings(BaseModel):
    """Ratings submitted for one completed route.

    Attributes:
        rating: Overall rating 1-5.
        difficulty: Perceived difficulty 0-10 (0 = not rated).
        safety: Perceived safety 0-10 (0 = not rated).
        scenery: Scenery 0-10 (0 = not rated).
        tags: Free-form tags (``"well-lit"``, ``"crowded"``...).
        comment: Optional free text.
        would_recommend: Whether the runner would recommend the route.
    """

    model_config = ConfigDict(frozen=True)

    rating: int = Field(ge=1, le=5)
    difficulty: float = Field(default=0.0, ge=0.0, le=10.0)
    safety: float = Field(default=0.0, ge=0.0, le=10.0)
    scenery: float = Field(default=0.0, ge=0.0, le=10.0)
    tags: list[str] = []
    comment: str = ""
    would_recommend: bool = False

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if t and t.strip()]


class RouteFeedback(BaseModel):
    """A persisted feedback row."""

    model_config = ConfigDict(frozen=True)

    feedback_id: Optional[int] = None
    route_id: str
    user_id: str
    ratings: FeedbackRatings
    created_at: datetime


class TagCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    tag: str
    count: int


class RecentComment(BaseModel):
    model_config = ConfigDict(frozen=True)

    comment: str
    rating: int
    created_at: datetime


class FeedbackStats(BaseModel):
    """Aggregate feedback for one route.

    Averages are rounded to one decimal; ``recommendation_rate`` is the share
    of feedback with an overall rating of 4 or more, rounded to two decimals.
    Per-dimension averages include unrated (0) entries.
    """

    model_config = ConfigDict(frozen=True)

    route_id: str
    average_rating: float = 0.0
    total_feedbacks: int = 0
    difficulty_rating: float = 0.0
    safety_rating: float = 0.0
    scenery_rating: float = 0.0
    recommendation_rate: float = 0.0
    popular_tags: list[TagCount] = []
    recent_comments: list[RecentComment] = []
