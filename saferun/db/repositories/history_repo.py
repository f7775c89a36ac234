"""
Repository for the append-only ``running_history`` table.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime

from saferun.db.repositories.base import BaseRepository
from saferun.models.history import HistoryRecord

logger = logging.getLogger(__name__)


class HistoryRepository(BaseRepository):
    """Append/read access to ``running_history``."""

    def insert(self, record: HistoryRecord) -> int:
        """Append a completed run.

        Returns:
            The newly assigned ``record_id``.
        """
        self.execute(
            """
            INSERT INTO running_history (
                user_id, route_id, distance_km, duration_min, avg_pace,
                effort_level, user_rating, weather_condition, completed_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                record.user_id,
                record.route_id,
                record.distance_km,
                record.duration_min,
                record.avg_pace,
                record.effort_level,
                record.user_rating,
                record.weather_condition.value,
                record.completed_at.isoformat(),
            ),
        )
        return self.last_insert_rowid()

    def get_recent(self, user_id: str, limit: int) -> list[HistoryRecord]:
        """Return at most ``limit`` runs for ``user_id``, newest first.

        ``record_id`` breaks ties between runs completed at the same instant.
        """
        rows = self.fetchall(
            """
            SELECT * FROM running_history
            WHERE user_id = ?
            ORDER BY completed_at DESC, record_id DESC
            LIMIT ?;
            """,
            (user_id, limit),
        )
        return [_row_to_record(r) for r in rows]


# ── Private helper ────────────────────────────────────────────────────────────


def _row_to_record(row: sqlite3.Row) -> HistoryRecord:
    return HistoryRecord(
        record_id=row["record_id"],
        user_id=row["user_id"],
        route_id=row["route_id"],
        distance_km=row["distance_km"],
        duration_min=row["duration_min"],
        avg_pace=row["avg_pace"],
        effort_level=row["effort_level"],
        user_rating=row["user_rating"],
        weather_condition=row["weather_condition"],
        completed_at=datetime.fromisoformat(row["completed_at"]),
    )
