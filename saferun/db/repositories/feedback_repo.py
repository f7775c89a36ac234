"""
Repository for the ``route_feedback`` table.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime

from saferun.db.repositories.base import BaseRepository, from_json, to_json
from saferun.models.feedback import FeedbackRatings, RouteFeedback

logger = logging.getLogger(__name__)


class FeedbackRepository(BaseRepository):
    """Append/read access to ``route_feedback``."""

    def insert(self, feedback: RouteFeedback) -> int:
        """Persist a feedback row.

        Returns:
            The newly assigned ``feedback_id``.
        """
        r = feedback.ratings
        self.execute(
            """
            INSERT INTO route_feedback (
                route_id, user_id, rating, difficulty_rating, safety_rating,
                scenery_rating, tags_json, comment, would_recommend, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                feedback.route_id,
                feedback.user_id,
                r.rating,
                r.difficulty,
                r.safety,
                r.scenery,
                to_json(r.tags),
                r.comment,
                int(r.would_recommend),
                feedback.created_at.isoformat(),
            ),
        )
        return self.last_insert_rowid()

    def get_for_route(self, route_id: str) -> list[RouteFeedback]:
        """Return all feedback for ``route_id``, newest first."""
        rows = self.fetchall(
            """
            SELECT * FROM route_feedback
            WHERE route_id = ?
            ORDER BY created_at DESC, feedback_id DESC;
            """,
            (route_id,),
        )
        return [_row_to_feedback(r) for r in rows]


# ── Private helper ────────────────────────────────────────────────────────────


def _row_to_feedback(row: sqlite3.Row) -> RouteFeedback:
    return RouteFeedback(
        feedback_id=row["feedback_id"],
        route_id=row["route_id"],
        user_id=row["user_id"],
        ratings=FeedbackRatings(
            rating=row["rating"],
            difficulty=row["difficulty_rating"],
            safety=row["safety_rating"],
            scenery=row["scenery_rating"],
            tags=from_json(row["tags_json"], []),
            comment=row["comment"],
            would_recommend=bool(row["would_recommend"]),
        ),
        created_at=datetime.fromisoformat(row["created_at"]),
    )
