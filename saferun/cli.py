"""
SafeRun — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (DB init, recommendation, feedback, safety check).
  5. Report result to stdout.

Install and run::

    pip install -e .
    saferun --help
    saferun init-db
    saferun seed-routes
    saferun recommend --user alice --temp 20 --condition clear --slot morning
    saferun feedback --user alice --route route-1 --rating 5 --difficulty 8
    saferun route-stats --route route-1
    saferun safety-check --slot night --lat 31.22 --lng 121.47
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="saferun",
    help="SafeRun: route recommendations and safety checks for urban runners.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from saferun.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from saferun.utils.logging import configure_logging
    configure_logging(config.logging)


def _build_store_or_exit(config):
    from saferun.store.factory import build_store

    try:
        return build_store(config)
    except ValueError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)


def _sqlite_store(config, db_path: Optional[str]):
    from saferun.store.sqlite_store import SqliteStore

    db_config = config.database
    if db_path:
        db_config = db_config.model_copy(update={"db_path": db_path})
    return SqliteStore(db_config)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None, "--db-path", help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Initialize the SQLite database and apply the schema.

    Safe to run multiple times; all DDL uses IF NOT EXISTS.
    """
    from saferun.db.connection import connect_from_config
    from saferun.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with connect_from_config(config.database, target_path) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None, "--config", help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(False, "--full", help="Print full config including all fields."),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)
    weights = config.scoring.weights

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(f"  Store backend:    {config.store.backend}")
    typer.echo(
        "  Scoring weights:  "
        + ", ".join(f"{k}={v:.2f}" for k, v in weights.model_dump().items())
    )
    typer.echo(f"  Default limit:    {config.recommend.default_limit}")
    typer.echo(f"  History window:   {config.recommend.history_window}")
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        dumped = config.model_dump()
        dumped["store"]["supabase_key"] = "***" if config.store.supabase_key else ""
        typer.echo(json.dumps(dumped, indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("seed-routes")
def seed_routes(
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Load the built-in route catalog into the local SQLite store."""
    from saferun.recommendations.catalog import fallback_routes
    from saferun.store.base import StoreError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    store = _sqlite_store(config, db_path)
    try:
        store.init_schema()
        written = store.upsert_routes(fallback_routes())
    except StoreError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[OK] {written} routes seeded.")


@app.command("log-run")
def log_run(
    user: str = typer.Option(..., "--user", help="Runner id."),
    route: str = typer.Option(..., "--route", help="Route id."),
    distance: float = typer.Option(..., "--distance", help="Distance covered (km)."),
    duration: float = typer.Option(..., "--duration", help="Elapsed time (minutes)."),
    effort: Optional[int] = typer.Option(None, "--effort", help="Perceived effort 1-10."),
    rating: Optional[int] = typer.Option(None, "--rating", help="Run rating 1-5."),
    condition: str = typer.Option("unknown", "--condition", help="Weather during the run."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path from config."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Append a completed run to the local run history."""
    from pydantic import ValidationError

    from saferun.models.history import HistoryRecord
    from saferun.store.base import StoreError
    from saferun.utils.time_utils import utcnow

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        record = HistoryRecord(
            user_id=user,
            route_id=route,
            distance_km=distance,
            duration_min=duration,
            avg_pace=duration / distance if distance > 0 else None,
            effort_level=effort,
            user_rating=rating,
            weather_condition=condition,
            completed_at=utcnow(),
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid run: {exc}", err=True)
        raise typer.Exit(code=1)

    try:
        record_id = _sqlite_store(config, db_path).add_history(record)
    except StoreError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"[OK] Run {record_id} logged for {user}.")


@app.command("recommend")
def recommend(
    user: str = typer.Option(..., "--user", help="Runner id."),
    temp: Optional[float] = typer.Option(None, "--temp", help="Temperature (C)."),
    condition: str = typer.Option("clear", "--condition", help="Weather condition, e.g. light-rain."),
    humidity: float = typer.Option(55.0, "--humidity", help="Relative humidity (%)."),
    wind: float = typer.Option(5.0, "--wind", help="Wind speed (km/h)."),
    slot: Optional[str] = typer.Option(
        None, "--slot", help="Time slot (e.g. morning, late-night). Default: current local time.",
    ),
    limit: Optional[int] = typer.Option(None, "--limit", help="Max results (default from config)."),
    simulate: bool = typer.Option(False, "--simulate-weather", help="Use seeded simulated weather."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for --simulate-weather."),
    show_components: bool = typer.Option(False, "--components", help="Show per-signal sub-scores."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Rank routes for a runner under the given weather and time of day."""
    from saferun.ingestion.weather_provider import SimulatedWeatherProvider, running_advice
    from saferun.recommendations.engine import RecommendationEngine, build_context
    from saferun.recommendations.errors import RecommendationError
    from saferun.reporting.formatters import format_recommendations_table, format_weather_line

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        if simulate:
            weather = SimulatedWeatherProvider(seed=seed).current()
        else:
            if temp is None:
                typer.echo("[ERROR] --temp is required unless --simulate-weather is set.", err=True)
                raise typer.Exit(code=1)
            weather = {
                "temperature_c": temp,
                "condition": condition,
                "humidity_pct": humidity,
                "wind_speed_kmh": wind,
            }
        context = build_context(weather, slot if slot else datetime.now())

        engine = RecommendationEngine(_build_store_or_exit(config), config)
        recommendations = engine.generate(user, context, limit=limit)
    except RecommendationError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_weather_line(context.weather, running_advice(context.weather)))
    typer.echo(format_recommendations_table(recommendations, user, show_components=show_components))


@app.command("feedback")
def feedback(
    user: str = typer.Option(..., "--user", help="Runner id."),
    route: str = typer.Option(..., "--route", help="Route id."),
    rating: int = typer.Option(..., "--rating", help="Overall rating 1-5."),
    difficulty: float = typer.Option(0.0, "--difficulty", help="Difficulty 1-10 (0 = not rated)."),
    safety: float = typer.Option(0.0, "--safety", help="Safety 1-10 (0 = not rated)."),
    scenery: float = typer.Option(0.0, "--scenery", help="Scenery 1-10 (0 = not rated)."),
    tags: Optional[list[str]] = typer.Option(None, "--tag", help="Tag (repeatable)."),
    comment: str = typer.Option("", "--comment", help="Free-text comment."),
    would_recommend: bool = typer.Option(False, "--recommend", help="Would recommend this route."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Submit post-run feedback and update learned preferences."""
    from saferun.recommendations.errors import RecommendationError
    from saferun.recommendations.feedback import FeedbackLearner
    from saferun.reporting.formatters import format_profile_update

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    learner = FeedbackLearner(_build_store_or_exit(config), config)
    try:
        profile = learner.record_feedback(
            user,
            route,
            {
                "rating": rating,
                "difficulty": difficulty,
                "safety": safety,
                "scenery": scenery,
                "tags": tags or [],
                "comment": comment,
                "would_recommend": would_recommend,
            },
        )
    except RecommendationError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_profile_update(profile))
    typer.echo("[OK] Feedback saved.")


@app.command("route-stats")
def route_stats(
    route: str = typer.Option(..., "--route", help="Route id."),
    as_json: bool = typer.Option(False, "--json", help="Print raw JSON instead of a table."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show aggregate feedback for a route."""
    from saferun.recommendations.errors import RecommendationError
    from saferun.recommendations.feedback import FeedbackLearner
    from saferun.reporting.formatters import format_feedback_stats
    from saferun.store.base import StoreError

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    learner = FeedbackLearner(_build_store_or_exit(config), config)
    try:
        stats = learner.route_feedback_stats(route)
    except (RecommendationError, StoreError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    if as_json:
        typer.echo(stats.model_dump_json(indent=2))
    else:
        typer.echo(format_feedback_stats(stats))


@app.command("safety-check")
def safety_check(
    slot: Optional[str] = typer.Option(
        None, "--slot", help="Time slot. Default: current local time.",
    ),
    lat: Optional[float] = typer.Option(None, "--lat", help="Latitude."),
    lng: Optional[float] = typer.Option(None, "--lng", help="Longitude."),
    condition: Optional[str] = typer.Option(None, "--condition", help="Current weather condition."),
    crowd: float = typer.Option(50.0, "--crowd", help="Crowd density 0-100."),
    visibility: float = typer.Option(100.0, "--visibility", help="Visibility 0-100."),
    lighting: float = typer.Option(100.0, "--lighting", help="Lighting level 0-100."),
    all_slots: bool = typer.Option(False, "--all-slots", help="Also show base safety of every slot."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Assess running safety for a time slot and location."""
    from pydantic import ValidationError

    from saferun.models.safety import EnvironmentalData
    from saferun.reporting.formatters import format_safety_assessment, format_time_slot_table
    from saferun.safety.analyzer import (
        StaticLocationRiskProvider,
        analyze_day,
        assess_realtime_safety,
        schedule_advice,
    )
    from saferun.utils.time_utils import parse_time_slot, time_slot_for

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    weights = config.safety.time_slot_weights

    try:
        current_slot = parse_time_slot(slot) if slot else time_slot_for(datetime.now())
        environment = None
        if condition is not None:
            environment = EnvironmentalData(
                weather_condition=condition,
                crowd_density=crowd,
                visibility=visibility,
                lighting_level=lighting,
            )
    except (ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    historical_risk = 0.2
    if lat is not None and lng is not None:
        historical_risk = StaticLocationRiskProvider().historical_risk(lat, lng)

    assessment = assess_realtime_safety(current_slot, environment, historical_risk, weights)
    typer.echo(format_safety_assessment(assessment))

    if all_slots:
        analyses = analyze_day({}, {}, weights)
        typer.echo(format_time_slot_table(analyses, schedule_advice(analyses)))


if __name__ == "__main__":
    app()
