"""
RecommendationEngine — ranks candidate routes for one runner and one context.

Recommendation flow
-------------------
  1. Validate the request (non-empty user id, limit >= 1, well-formed context).
  2. Load the runner's profile and newest run history from the store.
     A store failure here is surfaced as ``DataUnavailableError``.
  3. Load candidate routes.  A store failure or an empty catalog is recovered
     locally with the built-in fallback catalog and logged as a warning.
  4. Score, aggregate, and explain every candidate.
  5. Stable-sort by score descending and truncate to ``limit``.

The engine performs no writes.  Two calls with identical store contents and
identical context return identical lists.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional

from pydantic import ValidationError

from saferun.config import AppConfig
from saferun.models.context import ContextSnapshot, WeatherReading
from saferun.models.history import HistoryRecord
from saferun.models.profile import UserPreferenceProfile
from saferun.models.recommendation import Recommendation
from saferun.models.route import Route
from saferun.recommendations.catalog import fallback_routes
from saferun.recommendations.errors import DataUnavailableError, InvalidInputError
from saferun.recommendations.ranker import build_recommendations, rank_top_n, score_routes
from saferun.store.base import RecommendationStore, StoreError
from saferun.taxonomy.context_taxonomy import TimeSlot
from saferun.utils.time_utils import parse_time_slot, time_slot_for

logger = logging.getLogger(__name__)


class RecommendationEngine:
    """Orchestrates store reads, scoring, explanation, and ranking.

    Args:
        store:  Persistence collaborator (read-only use).
        config: Application config; defaults are used when omitted.
    """

    def __init__(
        self,
        store: RecommendationStore,
        config: Optional[AppConfig] = None,
    ) -> None:
        self.store = store
        self.config = config or AppConfig()

    # ── Public API ────────────────────────────────────────────────────────────

    def generate(
        self,
        user_id: str,
        context: ContextSnapshot,
        limit: Optional[int] = None,
    ) -> list[Recommendation]:
        """Return at most ``limit`` recommendations, best first.

        Args:
            user_id: Runner to recommend for.
            context: Weather and time slot of the request.
            limit:   Maximum number of results.  Defaults to
                     ``config.recommend.default_limit``.

        Raises:
            InvalidInputError:    Empty user id, limit < 1, or bad context.
            DataUnavailableError: Profile or history could not be read.
        """
        limit = self._validate_request(user_id, limit)
        if not isinstance(context, ContextSnapshot):
            raise InvalidInputError(
                f"context must be a ContextSnapshot, got {type(context).__name__}.",
                field="context",
            )

        profile, history = self._load_runner_data(user_id)
        routes = self._load_candidates()

        scored = score_routes(
            routes,
            context,
            profile,
            history,
            self.config.scoring,
            history_window=self.config.recommend.history_window,
        )
        ranked = rank_top_n(scored, limit)
        recommendations = build_recommendations(ranked, context.time_slot)

        logger.info(
            "Recommended %d of %d routes for user=%s slot=%s condition=%s",
            len(recommendations), len(routes), user_id,
            context.time_slot, context.weather.condition,
            extra={
                "user_id": user_id,
                "n_candidates": len(routes),
                "n_results": len(recommendations),
            },
        )
        return recommendations

    def generate_recommendations(
        self,
        user_id: str,
        weather: WeatherReading | dict[str, Any],
        time_of_day: TimeSlot | str | datetime,
        limit: Optional[int] = None,
    ) -> list[Recommendation]:
        """Caller-facing wrapper that builds the context snapshot first.

        Args:
            user_id:     Runner to recommend for.
            weather:     A ``WeatherReading`` or a dict of its fields.
            time_of_day: A ``TimeSlot``, a slot name, or a datetime to bucket.
            limit:       Maximum number of results.

        Raises:
            InvalidInputError:    Malformed weather or time of day.
            DataUnavailableError: Profile or history could not be read.
        """
        context = build_context(weather, time_of_day)
        return self.generate(user_id, context, limit=limit)

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _validate_request(self, user_id: str, limit: Optional[int]) -> int:
        if not isinstance(user_id, str) or not user_id.strip():
            raise InvalidInputError("user_id must be a non-empty string.", field="user_id")

        if limit is None:
            return self.config.recommend.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidInputError(f"limit must be an integer >= 1, got {limit!r}.", field="limit")
        return limit

    def _load_runner_data(
        self, user_id: str
    ) -> tuple[Optional[UserPreferenceProfile], list[HistoryRecord]]:
        try:
            profile = self.store.load_profile(user_id)
            history = self.store.load_history(user_id, self.config.recommend.history_window)
        except StoreError as exc:
            logger.error("Runner data unavailable for user=%s: %s", user_id, exc)
            raise DataUnavailableError(user_id, str(exc)) from exc

        if profile is None:
            logger.debug("No profile for user=%s; preference signals stay neutral.", user_id)
        return profile, list(history)

    def _load_candidates(self) -> list[Route]:
        try:
            routes = list(self.store.load_candidates())
        except StoreError as exc:
            logger.warning("Route catalog unavailable (%s); using fallback catalog.", exc)
            return fallback_routes()

        if not routes:
            logger.warning("Route catalog is empty; using fallback catalog.")
            return fallback_routes()
        return routes


def build_context(
    weather: WeatherReading | dict[str, Any],
    time_of_day: TimeSlot | str | datetime,
    latitude: Optional[float] = None,
    longitude: Optional[float] = None,
) -> ContextSnapshot:
    """Build a validated ``ContextSnapshot`` from loose caller input.

    Raises:
        InvalidInputError: If the weather or time of day cannot be parsed.
    """
    try:
        if isinstance(time_of_day, datetime):
            slot = time_slot_for(time_of_day)
        else:
            slot = parse_time_slot(time_of_day)

        reading = weather if isinstance(weather, WeatherReading) else WeatherReading(**weather)
        return ContextSnapshot(
            weather=reading, time_slot=slot, latitude=latitude, longitude=longitude,
        )
    except (ValidationError, ValueError, TypeError, AttributeError) as exc:
        raise InvalidInputError(f"Invalid recommendation context: {exc}", field="context") from exc
