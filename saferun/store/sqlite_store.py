"""
SqliteStore — ``RecommendationStore`` backed by the local SQLite schema.

Each call opens its own connection through ``connect_from_config()`` unless a
live connection was injected (tests pass an in-memory one).  Either way,
every call is one transaction: commit on success, rollback on error.

``save_feedback`` writes the feedback row and the profile upsert in the
same transaction, so a failure leaves the stored profile untouched.
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from typing import Generator, Iterable, Optional

from saferun.config import DatabaseConfig
from saferun.db.connection import connect_from_config
from saferun.db.repositories.feedback_repo import FeedbackRepository
from saferun.db.repositories.history_repo import HistoryRepository
from saferun.db.repositories.profile_repo import ProfileRepository
from saferun.db.repositories.route_repo import RouteRepository
from saferun.db.schema import apply_schema
from saferun.models.feedback import RouteFeedback
from saferun.models.history import HistoryRecord
from saferun.models.profile import UserPreferenceProfile
from saferun.models.route import Route
from saferun.store.base import StoreError

logger = logging.getLogger(__name__)


class SqliteStore:
    """Local store over ``routes``, ``user_profiles``, ``running_history``,
    and ``route_feedback``.

    Args:
        db_config: Database settings; ignored when ``conn`` is given.
        conn:      Optional live connection to reuse for every call.
    """

    def __init__(
        self,
        db_config: Optional[DatabaseConfig] = None,
        conn: Optional[sqlite3.Connection] = None,
    ) -> None:
        self.db_config = db_config or DatabaseConfig()
        self._conn = conn

    @contextmanager
    def _session(self, operation: str) -> Generator[sqlite3.Connection, None, None]:
        try:
            if self._conn is not None:
                try:
                    yield self._conn
                    self._conn.commit()
                except Exception:
                    self._conn.rollback()
                    raise
            else:
                with connect_from_config(self.db_config) as conn:
                    yield conn
        except (sqlite3.Error, ValueError) as exc:
            # malformed JSON columns and invalid rows both surface as ValueError
            logger.error("SQLite store %s failed: %s", operation, exc)
            raise StoreError(operation, str(exc)) from exc

    # ── Schema / seeding ──────────────────────────────────────────────────────

    def init_schema(self) -> None:
        with self._session("init_schema") as conn:
            apply_schema(conn)

    def upsert_routes(self, routes: Iterable[Route]) -> int:
        """Insert or replace routes.  Returns the number written."""
        with self._session("upsert_routes") as conn:
            repo = RouteRepository(conn)
            written = 0
            for route in routes:
                repo.upsert(route)
                written += 1
        return written

    def add_history(self, record: HistoryRecord) -> int:
        """Append a completed run.  Returns its ``record_id``."""
        with self._session("add_history") as conn:
            return HistoryRepository(conn).insert(record)

    # ── RecommendationStore ───────────────────────────────────────────────────

    def load_profile(self, user_id: str) -> Optional[UserPreferenceProfile]:
        with self._session("load_profile") as conn:
            return ProfileRepository(conn).get(user_id)

    def load_history(self, user_id: str, limit: int) -> list[HistoryRecord]:
        with self._session("load_history") as conn:
            return HistoryRepository(conn).get_recent(user_id, limit)

    def load_candidates(self) -> list[Route]:
        with self._session("load_candidates") as conn:
            return RouteRepository(conn).get_all()

    def save_profile(self, profile: UserPreferenceProfile) -> None:
        with self._session("save_profile") as conn:
            ProfileRepository(conn).upsert(profile)

    def save_feedback(self, feedback: RouteFeedback, profile: UserPreferenceProfile) -> None:
        with self._session("save_feedback") as conn:
            FeedbackRepository(conn).insert(feedback)
            ProfileRepository(conn).upsert(profile)

    def load_route_feedback(self, route_id: str) -> list[RouteFeedback]:
        with self._session("load_route_feedback") as conn:
            return FeedbackRepository(conn).get_for_route(route_id)
