"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local secrets and env overrides (gitignored)
  4. Environment variables        — ``SAFERUN_*`` prefix, plus ``SUPABASE_*``

Entry point: ``load_config(config_path=None) -> AppConfig``

The engine, the feedback learner, and every CLI command receive an
``AppConfig`` (or one of its sections), never raw dicts or scattered env
var lookups.
"""

from __future__ import annotations

import math
import os
import tomllib
from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from saferun.taxonomy.context_taxonomy import TimeSlot

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite database connection settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/saferun.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class StoreConfig(BaseModel):
    """Which external store backs profiles, history, and routes."""

    model_config = ConfigDict(frozen=True)

    backend: Literal["sqlite", "supabase"] = "sqlite"
    supabase_url: str = ""
    supabase_key: str = ""
    timeout_seconds: float = 10.0


class ScoringWeights(BaseModel):
    """Aggregator weights.  Must sum to 1.0."""

    model_config = ConfigDict(frozen=True)

    preference: float = 0.25
    history: float = 0.20
    weather: float = 0.20
    time: float = 0.15
    safety: float = 0.10
    popularity: float = 0.05
    novelty: float = 0.05

    @model_validator(mode="after")
    def validate_weights(self) -> "ScoringWeights":
        values = self.model_dump()
        negative = [k for k, v in values.items() if v < 0.0]
        if negative:
            raise ValueError(f"Scoring weights must be non-negative: {negative}.")
        total = sum(values.values())
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"Scoring weights must sum to 1.0, got {total:.4f}.")
        return self


class ReasoningThresholds(BaseModel):
    """Strict lower bounds above which a reasoning flag is raised."""

    model_config = ConfigDict(frozen=True)

    weather_match: float = 0.7
    time_match: float = 0.7
    difficulty_match: float = 0.6
    preference_match: float = 0.5
    novelty: float = 0.8
    safety: float = 0.8
    high_popularity: float = 0.8
    popular_archetype: float = 0.9
    challenge_difficulty: int = 7


class ScoringConfig(BaseModel):
    """Weights and thresholds of the recommendation scorer."""

    model_config = ConfigDict(frozen=True)

    weights: ScoringWeights = ScoringWeights()
    thresholds: ReasoningThresholds = ReasoningThresholds()


class RecommendConfig(BaseModel):
    """Recommendation request defaults."""

    model_config = ConfigDict(frozen=True)

    default_limit: int = 6
    history_window: int = 30

    @field_validator("default_limit", "history_window")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"Value must be >= 1, got {v}.")
        return v


class FeedbackConfig(BaseModel):
    """Exponential-moving-average parameters of the feedback learner."""

    model_config = ConfigDict(frozen=True)

    retain: float = 0.8          # share of the previous preference kept
    learn: float = 0.2           # share of the new observation blended in
    min_value: float = 1.0
    max_value: float = 10.0
    default_value: float = 5.0

    @model_validator(mode="after")
    def validate_bounds(self) -> "FeedbackConfig":
        if self.min_value >= self.max_value:
            raise ValueError(
                f"min_value ({self.min_value}) must be < max_value ({self.max_value})."
            )
        if not self.min_value <= self.default_value <= self.max_value:
            raise ValueError("default_value must lie within [min_value, max_value].")
        if self.retain < 0 or self.learn < 0:
            raise ValueError("retain and learn must be non-negative.")
        return self


class SafetyConfig(BaseModel):
    """Time-slot safety weights (0-1; multiplied by 100 for base safety)."""

    model_config = ConfigDict(frozen=True)

    time_slot_weights: dict[TimeSlot, float] = {
        TimeSlot.EARLY_MORNING: 0.7,
        TimeSlot.MORNING:       0.9,
        TimeSlot.LATE_MORNING:  0.85,
        TimeSlot.AFTERNOON:     0.8,
        TimeSlot.EVENING:       0.6,
        TimeSlot.NIGHT:         0.3,
        TimeSlot.LATE_NIGHT:    0.1,
    }

    @field_validator("time_slot_weights")
    @classmethod
    def validate_slot_weights(cls, v: dict[TimeSlot, float]) -> dict[TimeSlot, float]:
        missing = set(TimeSlot) - set(v)
        if missing:
            raise ValueError(f"time_slot_weights missing slots: {sorted(missing)}.")
        for slot, weight in v.items():
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"Weight for '{slot}' must be in [0, 1], got {weight}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/saferun.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth."""

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    store: StoreConfig = StoreConfig()
    scoring: ScoringConfig = ScoringConfig()
    recommend: RecommendConfig = RecommendConfig()
    feedback: FeedbackConfig = FeedbackConfig()
    safety: SafetyConfig = SafetyConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(
            f"Config file not found: {config_path}\n"
            "Create config/default.toml or pass --config."
        )

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variables to the raw config dict.

    Supported overrides:
      SAFERUN_DB_PATH        → raw["database"]["db_path"]
      SAFERUN_LOG_LEVEL      → raw["logging"]["level"]
      SAFERUN_DEBUG          → raw["debug"]
      SAFERUN_STORE_BACKEND  → raw["store"]["backend"]
      SUPABASE_URL           → raw["store"]["supabase_url"]
      SUPABASE_KEY           → raw["store"]["supabase_key"]
    """
    if db_path := os.environ.get("SAFERUN_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("SAFERUN_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("SAFERUN_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    if backend := os.environ.get("SAFERUN_STORE_BACKEND"):
        raw.setdefault("store", {})["backend"] = backend

    if supabase_url := os.environ.get("SUPABASE_URL"):
        raw.setdefault("store", {})["supabase_url"] = supabase_url

    if supabase_key := os.environ.get("SUPABASE_KEY"):
        raw.setdefault("store", {})["supabase_key"] = supabase_key

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})
    scoring = raw.get("scoring", {})

    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        store=StoreConfig(**raw.get("store", {})),
        scoring=ScoringConfig(
            weights=ScoringWeights(**scoring.get("weights", {})),
            thresholds=ReasoningThresholds(**scoring.get("thresholds", {})),
        ),
        recommend=RecommendConfig(**raw.get("recommend", {})),
        feedback=FeedbackConfig(**raw.get("feedback", {})),
        safety=SafetyConfig(**raw.get("safety", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
