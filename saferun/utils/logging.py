"""
Root-logger setup for the saferun CLI.

Commands print their results (tables, ``--json`` payloads) on stdout, so
log records go to stderr and, optionally, to ``[logging] log_file``.

Library modules only call ``logging.getLogger(__name__)`` and attach run
context with ``extra=`` (``user_id``, ``route_id``, ``n_candidates``).  With
``json_format = true`` each record becomes one object per line and that
context is lifted to top-level keys::

    {"ts": "2026-03-02T06:40:00Z", "level": "INFO", "logger": "saferun.recommendations.engine",
     "msg": "Recommended 6 of 8 routes ...", "user_id": "u-1", "n_candidates": 8, "n_results": 6}
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from saferun.config import LoggingConfig

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Present on every LogRecord; any other attribute was passed via extra=.
_STANDARD_ATTRS: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

# HTTP client chatter from the Supabase store.
_NOISY_LOGGERS: tuple[str, ...] = ("httpx", "httpcore")


class _JsonFormatter(logging.Formatter):
    """One JSON object per record, ``extra=`` context at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "ts": stamp.strftime(TIMESTAMP_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        )
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, ensure_ascii=False)


def _formatter_for(config: "LoggingConfig") -> logging.Formatter:
    if config.json_format:
        return _JsonFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TIMESTAMP_FORMAT)


def _file_handler(log_file: str) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def configure_logging(config: "LoggingConfig") -> None:
    """Install stderr (and optional file) handlers on the root logger.

    Replaces any handlers installed by an earlier call, so each CLI command
    can configure logging from its own ``AppConfig``.
    """
    level = logging.getLevelName(config.level)
    if not isinstance(level, int):
        level = logging.INFO

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(_file_handler(config.log_file))

    formatter = _formatter_for(config)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
