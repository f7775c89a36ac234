"""
Exceptions surfaced by the recommendation engine and the feedback learner.

Catalog read failures are not represented here: the engine recovers from
them with the built-in fallback catalog and only logs a warning.
"""

from __future__ import annotations

from typing import Optional


# ── Custom exceptions ─────────────────────────────────────────────────────────


class RecommendationError(RuntimeError):
    """Base class for all engine and learner errors."""


class DataUnavailableError(RecommendationError):
    """Raised when a runner's profile or history cannot be read.

    Attributes:
        user_id: The runner whose data could not be loaded.
    """

    def __init__(self, user_id: str, detail: str = "") -> None:
        self.user_id = user_id
        message = f"Profile or history for user '{user_id}' is unavailable."
        if detail:
            message += f"  {detail}"
        super().__init__(message)


class InvalidInputError(RecommendationError, ValueError):
    """Raised for a malformed request before any scoring or write happens.

    Attributes:
        field: Name of the offending input, when known.
    """

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


class PersistFailureError(RecommendationError):
    """Raised when feedback could not be written.  The stored profile is unchanged.

    Attributes:
        user_id:  Runner who submitted the feedback.
        route_id: Route the feedback was for.
    """

    def __init__(self, user_id: str, route_id: str, detail: str = "") -> None:
        self.user_id  = user_id
        self.route_id = route_id
        message = f"Could not save feedback from '{user_id}' for route '{route_id}'."
        if detail:
            message += f"  {detail}"
        super().__init__(message)
