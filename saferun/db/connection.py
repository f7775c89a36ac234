"""
SQLite connections for the local route store.

``open_connection`` applies the pragmas every saferun connection relies on
(foreign keys, busy timeout, WAL for file databases, ``sqlite3.Row`` rows).
``transaction`` wraps one such connection in a single unit of work, and
``connect_from_config`` reads its settings from ``DatabaseConfig``.

Feedback submission depends on the unit of work: the feedback row and the
updated profile either both land or neither does.

Usage::

    from saferun.db.connection import connect_from_config

    with connect_from_config(config.database) as conn:
        apply_schema(conn)
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Generator, Optional

if TYPE_CHECKING:
    from saferun.config import DatabaseConfig

logger = logging.getLogger(__name__)

IN_MEMORY = ":memory:"


def open_connection(
    db_path: str,
    *,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> sqlite3.Connection:
    """Open ``db_path`` and apply the saferun pragmas.

    Missing parent directories of a file database are created.  The caller
    owns the returned connection and must close it.
    """
    is_file = db_path != IN_MEMORY
    if is_file:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
    if wal_mode and is_file:
        conn.execute("PRAGMA journal_mode = WAL;")
    return conn


@contextmanager
def transaction(
    db_path: str,
    *,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
) -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh connection as one unit of work, then close it.

    Commits when the block exits cleanly and rolls back when it raises;
    the exception is re-raised unchanged.
    """
    conn = open_connection(db_path, wal_mode=wal_mode, busy_timeout_ms=busy_timeout_ms)
    try:
        yield conn
        conn.commit()
    except Exception:
        logger.debug("Rolling back saferun transaction on %s", db_path)
        conn.rollback()
        raise
    finally:
        conn.close()


def connect_from_config(
    db_config: "DatabaseConfig",
    db_path: Optional[str] = None,
):
    """Return ``transaction(...)`` for the configured database.

    Args:
        db_config: Database section of ``AppConfig``.
        db_path:   Optional override, e.g. the CLI's ``--db-path``.
    """
    return transaction(
        db_path or db_config.db_path,
        wal_mode=db_config.wal_mode,
        busy_timeout_ms=db_config.busy_timeout_ms,
    )
