"""
Store interface shared by the recommendation engine and the feedback learner.

The store owns routes, profiles, run history, and feedback.  The engine only
reads from it; the learner writes one feedback row plus the updated profile
per submission, through a single ``save_feedback`` call.

Implementations:
  - ``saferun.store.sqlite_store.SqliteStore``     — local SQLite database
  - ``saferun.store.supabase_store.SupabaseStore`` — Supabase PostgREST API

Every implementation raises ``StoreError`` on backend failure; callers never
see ``sqlite3.Error`` or ``httpx.HTTPError`` directly.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from saferun.models.feedback import RouteFeedback
from saferun.models.history import HistoryRecord
from saferun.models.profile import UserPreferenceProfile
from saferun.models.route import Route


class StoreError(RuntimeError):
    """Raised by a store when its backend fails.

    Attributes:
        operation: Store method that failed (``"load_profile"``...).
    """

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        message = f"Store operation '{operation}' failed."
        if detail:
            message += f"  {detail}"
        super().__init__(message)


@runtime_checkable
class RecommendationStore(Protocol):
    """Persistence collaborator of the engine and learner."""

    def load_profile(self, user_id: str) -> Optional[UserPreferenceProfile]:
        """Return the runner's profile, or ``None`` for a first-time runner."""
        ...

    def load_history(self, user_id: str, limit: int) -> list[HistoryRecord]:
        """Return at most ``limit`` history records, newest first."""
        ...

    def load_candidates(self) -> list[Route]:
        """Return every route eligible for recommendation."""
        ...

    def save_profile(self, profile: UserPreferenceProfile) -> None:
        """Insert or replace a profile."""
        ...

    def save_feedback(self, feedback: RouteFeedback, profile: UserPreferenceProfile) -> None:
        """Persist a feedback row and the updated profile together."""
        ...

    def load_route_feedback(self, route_id: str) -> list[RouteFeedback]:
        """Return all feedback for a route, newest first."""
        ...
