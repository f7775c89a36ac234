"""
Store selection from configuration.
"""

from __future__ import annotations

import logging

from saferun.config import AppConfig
from saferun.store.base import RecommendationStore

logger = logging.getLogger(__name__)


def build_store(config: AppConfig) -> RecommendationStore:
    """Return the store named by ``config.store.backend``.

    Raises:
        ValueError: If the supabase backend is selected without credentials.
    """
    if config.store.backend == "supabase":
        from saferun.store.supabase_store import SupabaseStore

        logger.debug("Using Supabase store at %s", config.store.supabase_url)
        return SupabaseStore(config.store)

    from saferun.store.sqlite_store import SqliteStore

    logger.debug("Using SQLite store at %s", config.database.db_path)
    return SqliteStore(config.database)
