"""
SQLite schema DDL for the local store.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is idempotent:
safe to call on an already-initialized database.

Tables:
  1. routes           — candidate routes (JSON columns for tags and tables)
  2. user_profiles    — declared preferences and learned weights
  3. running_history  — completed runs, append-only
  4. route_feedback   — post-run ratings

History and feedback rows do not reference ``routes`` by foreign key:
runners may complete fallback-catalog routes that were never stored.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_ROUTES = """
CREATE TABLE IF NOT EXISTS routes (
    route_id                 TEXT    PRIMARY KEY,
    name                     TEXT    NOT NULL,
    description              TEXT    NOT NULL DEFAULT '',
    distance_km              REAL    NOT NULL CHECK (distance_km > 0),
    difficulty_level         INTEGER NOT NULL CHECK (difficulty_level BETWEEN 1 AND 10),
    terrain_type             TEXT    NOT NULL DEFAULT 'flat',
    features_json            TEXT    NOT NULL DEFAULT '[]',
    avg_rating               REAL    NOT NULL DEFAULT 0,
    total_ratings            INTEGER NOT NULL DEFAULT 0,
    elevation_gain_m         REAL    NOT NULL DEFAULT 0,
    estimated_duration_min   REAL    NOT NULL DEFAULT 0,
    safety_rating            REAL    NOT NULL DEFAULT 5,
    lighting_quality         TEXT    NOT NULL DEFAULT 'fair',
    time_suitability_json    TEXT    NOT NULL DEFAULT '{}',
    weather_suitability_json TEXT    NOT NULL DEFAULT '{}',
    start_lon                REAL,
    start_lat                REAL,
    end_lon                  REAL,
    end_lat                  REAL,
    created_at               TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    updated_at               TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_USER_PROFILES = """
CREATE TABLE IF NOT EXISTS user_profiles (
    user_id                  TEXT    PRIMARY KEY,
    fitness_level            INTEGER,
    difficulty_band          TEXT,
    distance_min_km          REAL,
    distance_max_km          REAL,
    terrain_preferences_json TEXT    NOT NULL DEFAULT '[]',
    time_preferences_json    TEXT    NOT NULL DEFAULT '[]',
    difficulty_preference    REAL    NOT NULL DEFAULT 5.0,
    safety_importance        REAL    NOT NULL DEFAULT 5.0,
    scenery_importance       REAL    NOT NULL DEFAULT 5.0,
    updated_at               TEXT
);
"""

_DDL_RUNNING_HISTORY = """
CREATE TABLE IF NOT EXISTS running_history (
    record_id          INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id            TEXT    NOT NULL,
    route_id           TEXT    NOT NULL,
    distance_km        REAL    NOT NULL,
    duration_min       REAL    NOT NULL,
    avg_pace           REAL,
    effort_level       INTEGER CHECK (effort_level BETWEEN 1 AND 10),
    user_rating        INTEGER CHECK (user_rating BETWEEN 1 AND 5),
    weather_condition  TEXT    NOT NULL DEFAULT 'unknown',
    completed_at       TEXT    NOT NULL
);
"""

_DDL_RUNNING_HISTORY_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_history_user_time
    ON running_history (user_id, completed_at DESC);
"""

_DDL_ROUTE_FEEDBACK = """
CREATE TABLE IF NOT EXISTS route_feedback (
    feedback_id        INTEGER PRIMARY KEY AUTOINCREMENT,
    route_id           TEXT    NOT NULL,
    user_id            TEXT    NOT NULL,
    rating             INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
    difficulty_rating  REAL    NOT NULL DEFAULT 0,
    safety_rating      REAL    NOT NULL DEFAULT 0,
    scenery_rating     REAL    NOT NULL DEFAULT 0,
    tags_json          TEXT    NOT NULL DEFAULT '[]',
    comment            TEXT    NOT NULL DEFAULT '',
    would_recommend    INTEGER NOT NULL DEFAULT 0,
    created_at         TEXT    NOT NULL
);
"""

_DDL_ROUTE_FEEDBACK_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_feedback_route_time
    ON route_feedback (route_id, created_at DESC);
CREATE INDEX IF NOT EXISTS idx_feedback_user
    ON route_feedback (user_id);
"""

# ── Ordered list of all DDL to apply ──────────────────────────────────────────

_ALL_DDL: list[str] = [
    _DDL_ROUTES,
    _DDL_USER_PROFILES,
    _DDL_RUNNING_HISTORY,
    _DDL_RUNNING_HISTORY_INDEXES,
    _DDL_ROUTE_FEEDBACK,
    _DDL_ROUTE_FEEDBACK_INDEXES,
]

# Table names for introspection / tests
ALL_TABLE_NAMES = [
    "routes",
    "user_profiles",
    "running_history",
    "route_feedback",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``."""
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.info("Schema applied: %d tables, indexes created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return the table names present in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
