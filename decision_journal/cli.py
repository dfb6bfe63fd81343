"""
Decision Journal CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Validate inputs.
  4. Execute action (DB init, import, analytics, AI call).
  5. Report result to stdout.

Install and run::

    pip install -e .
    decision-journal --help
    decision-journal init-db
    decision-journal import-decisions --file data/decisions.json
    decision-journal import-reflections --file data/reflections.json
    decision-journal dashboard --user alice --time-range month
    decision-journal history --user alice --search lunch --sort title
    decision-journal recommend --file data/recommendation.json
    decision-journal quick-decide --user alice "Pizza or sushi tonight?"
"""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="decision-journal",
    help="Decision Journal: log decisions, reflect on them, and review your patterns.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from decision_journal.config import load_config

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
    from decision_journal.utils.logging import configure_logging
    configure_logging(config.logging)


def _open_db(config, db_path: Optional[str] = None):
    """Connection context manager for the configured (or overridden) DB."""
    from decision_journal.db.connection import get_connection

    return get_connection(
        db_path or config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )


def _parse_as_of(as_of: Optional[str]) -> Optional[datetime]:
    """Parse an ISO date/datetime option, exiting on a bad value."""
    if as_of is None:
        return None
    try:
        return datetime.fromisoformat(as_of)
    except ValueError:
        typer.echo(f"[ERROR] Invalid --as-of value '{as_of}'. Use YYYY-MM-DD.", err=True)
        raise typer.Exit(code=1)


def _parse_choice(enum_cls, value: Optional[str], flag: str):
    """Coerce an option to ``enum_cls``, exiting with the valid choices listed."""
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        typer.echo(f"[ERROR] Invalid {flag} '{value}'. Choose from: {choices}", err=True)
        raise typer.Exit(code=1)


def _load_json_array(path: Path, noun: str) -> list:
    """Read a JSON file that must contain an array, exiting on any problem."""
    if not path.exists():
        typer.echo(f"[ERROR] {noun.capitalize()} file not found: {path}", err=True)
        raise typer.Exit(code=1)
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)
    if not isinstance(raw, list):
        typer.echo(f"[ERROR] JSON {noun} file must contain an array.", err=True)
        raise typer.Exit(code=1)
    return raw


def _validate_items(raw_items: list, model_cls, noun: str) -> list:
    """Validate every item, reporting the first five failures and exiting."""
    from pydantic import ValidationError

    validated = []
    errors: list[tuple[int, str]] = []
    for i, raw in enumerate(raw_items):
        try:
            validated.append(model_cls.model_validate(raw))
        except ValidationError as exc:
            errors.append((i, str(exc)))

    if errors:
        typer.echo(f"[ERROR] {len(errors)} {noun}(s) failed validation:", err=True)
        for idx, msg in errors[:5]:
            typer.echo(f"  {noun.capitalize()} #{idx}: {msg}", err=True)
        if len(errors) > 5:
            typer.echo(f"  ... and {len(errors) - 5} more.", err=True)
        raise typer.Exit(code=1)
    return validated


def _assistant_or_exit(config):
    """Build a ``DecisionAssistant`` over the configured LLM, exiting without a key."""
    from decision_journal.ai.client import client_from_config
    from decision_journal.ai.services import DecisionAssistant

    client = client_from_config(config.llm)
    if not client.api_key:
        typer.echo(
            f"[ERROR] {config.llm.api_key_env} must be set in .env to use the AI assistant.",
            err=True,
        )
        raise typer.Exit(code=1)
    return DecisionAssistant(client)


# ── Setup commands ────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
) -> None:
    """Initialize the SQLite database and apply the full schema.

    Safe to run multiple times; all DDL uses IF NOT EXISTS.
    """
    from decision_journal.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with _open_db(config, target_path) as conn:
        apply_schema(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    import os

    config = _load_config_or_exit(config_path)

    key_state = "set" if os.environ.get(config.llm.api_key_env) else "NOT SET"
    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:    {config.database.db_path}")
    typer.echo(f"  LLM fast model:   {config.llm.fast_model}")
    typer.echo(f"  LLM pro model:    {config.llm.pro_model}")
    typer.echo(f"  API key ({config.llm.api_key_env}): {key_state}")
    typer.echo(f"  Activity window:  {config.analytics.activity_window_days} days")
    typer.echo(
        f"  Trend params:     window={config.analytics.trend_window}, "
        f"min={config.analytics.trend_min_reflections}, "
        f"threshold={config.analytics.trend_threshold}"
    )
    typer.echo(f"  Log level:        {config.logging.level}")
    typer.echo(f"  Debug mode:       {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


# ── Import commands ───────────────────────────────────────────────────────────

@app.command("import-decisions")
def import_decisions(
    decisions_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="Path to a JSON array of decision objects.",
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Validate decisions but do not write to the database.",
    ),
) -> None:
    """Import decisions from a JSON file into the database.

    Every item is validated against the Decision model before anything is
    written; a single invalid item aborts the import.
    """
    from decision_journal.db.repositories.decision_repo import DecisionRepository
    from decision_journal.db.repositories.stats_repo import DashboardStatsRepository
    from decision_journal.models.decision import Decision

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path = Path(decisions_file)
    raw = _load_json_array(path, "decisions")
    typer.echo(f"Loading decisions from: {path}")
    validated: list[Decision] = _validate_items(raw, Decision, "decision")
    typer.echo(f"  Validated {len(validated)} decision(s).")

    if dry_run:
        typer.echo("[DRY RUN] No decisions written to database.")
        for d in validated:
            typer.echo(f"  {d.id} | {d.type} | {d.status} | {d.title}")
        return

    with _open_db(config, db_path) as conn:
        written = DecisionRepository(conn).create_many(validated)
        cache = DashboardStatsRepository(conn)
        for user_id in sorted({d.user_id for d in validated}):
            cache.delete_for_user(user_id)

    typer.echo(f"  Inserted {written} decision(s) into database.")
    typer.echo("[OK] Decisions imported.")


@app.command("import-reflections")
def import_reflections(
    reflections_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help="Path to a JSON array of reflection objects.",
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Validate reflections but do not write to the database.",
    ),
) -> None:
    """Import reflections from a JSON file and recompute each user's stats."""
    from decision_journal.journal.reflections import ReflectionJournal
    from decision_journal.models.reflection import Reflection

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path = Path(reflections_file)
    raw = _load_json_array(path, "reflections")
    typer.echo(f"Loading reflections from: {path}")
    validated: list[Reflection] = _validate_items(raw, Reflection, "reflection")
    typer.echo(f"  Validated {len(validated)} reflection(s).")

    if dry_run:
        typer.echo("[DRY RUN] No reflections written to database.")
        for r in validated:
            typer.echo(f"  {r.id} | {r.decision_id} | {r.outcome}")
        return

    with _open_db(config, db_path) as conn:
        journal = ReflectionJournal(conn, config.analytics)
        written = journal.reflections.create_many(validated)
        users = sorted({r.user_id for r in validated})
        for user_id in users:
            journal.recompute_stats(user_id)

    typer.echo(f"  Inserted {written} reflection(s); stats recomputed for {len(users)} user(s).")
    typer.echo("[OK] Reflections imported.")


# ── Analytics commands ────────────────────────────────────────────────────────

@app.command("streak")
def streak(
    user_id: str = typer.Option(..., "--user", "-u", help="User id."),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Reference date (YYYY-MM-DD)."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show the user's current decision streak."""
    from decision_journal.analytics.activity import compute_streak
    from decision_journal.db.repositories.decision_repo import DecisionRepository
    from decision_journal.reporting.formatters import format_streak

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    reference = _parse_as_of(as_of)

    with _open_db(config, db_path) as conn:
        decisions = DecisionRepository(conn).list_by_user(user_id)

    typer.echo(format_streak(compute_streak(decisions, reference), user_id))


@app.command("activity")
def activity(
    user_id: str = typer.Option(..., "--user", "-u", help="User id."),
    days: Optional[int] = typer.Option(
        None, "--days", help="Window length (default: analytics.activity_window_days)."
    ),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Reference date (YYYY-MM-DD)."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show per-day quick/deep decision counts."""
    from decision_journal.analytics.activity import bucket_by_day
    from decision_journal.db.repositories.decision_repo import DecisionRepository
    from decision_journal.reporting.formatters import format_activity_chart

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    reference = _parse_as_of(as_of)
    window = days if days is not None else config.analytics.activity_window_days
    if window < 1:
        typer.echo("[ERROR] --days must be >= 1.", err=True)
        raise typer.Exit(code=1)

    with _open_db(config, db_path) as conn:
        decisions = DecisionRepository(conn).list_by_user(user_id)

    typer.echo(format_activity_chart(bucket_by_day(decisions, reference, window)))


@app.command("reflection-stats")
def reflection_stats(
    user_id: str = typer.Option(..., "--user", "-u", help="User id."),
    recompute: bool = typer.Option(
        False, "--recompute", help="Recompute from all reflections instead of reading the cache."
    ),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show cached reflection statistics for a user."""
    from decision_journal.journal.reflections import ReflectionJournal
    from decision_journal.reporting.formatters import format_reflection_stats

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_db(config, db_path) as conn:
        journal = ReflectionJournal(conn, config.analytics)
        stats = journal.recompute_stats(user_id) if recompute else journal.get_stats(user_id)

    if stats is None:
        typer.echo(f"No reflection stats for '{user_id}'. Import reflections or pass --recompute.")
        return
    typer.echo(format_reflection_stats(stats))


@app.command("dashboard")
def dashboard(
    user_id: str = typer.Option(..., "--user", "-u", help="User id."),
    time_range: str = typer.Option(
        "all_time", "--time-range", help="all_time, year, month, week or day."
    ),
    refresh: bool = typer.Option(False, "--refresh", help="Ignore the cache and recompute."),
    as_of: Optional[str] = typer.Option(None, "--as-of", help="Reference date (YYYY-MM-DD); bypasses the cache."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Show the dashboard summary for a time range."""
    from decision_journal.journal.dashboard import get_dashboard, refresh_dashboard
    from decision_journal.reporting.formatters import format_dashboard
    from decision_journal.taxonomy.decision_taxonomy import TimeRange

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    selected_range = _parse_choice(TimeRange, time_range, "--time-range")
    reference = _parse_as_of(as_of)

    with _open_db(config, db_path) as conn:
        loader = refresh_dashboard if refresh else get_dashboard
        stats = loader(conn, user_id, selected_range, reference)

    typer.echo(format_dashboard(stats))


@app.command("history")
def history(
    user_id: str = typer.Option(..., "--user", "-u", help="User id."),
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Title/description filter."),
    category: Optional[str] = typer.Option(None, "--category", help="Decision category."),
    status: Optional[str] = typer.Option(None, "--status", help="Decision status."),
    decision_type: Optional[str] = typer.Option(None, "--type", help="quick or deep."),
    sort: str = typer.Option("newest", "--sort", help="newest, oldest or title."),
    limit: int = typer.Option(50, "--limit", help="Max rows to print."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """List past decisions with search, filters and sorting."""
    from decision_journal.analytics.history import filter_decisions, summarize_history
    from decision_journal.db.repositories.decision_repo import DecisionRepository
    from decision_journal.reporting.formatters import format_history
    from decision_journal.taxonomy.decision_taxonomy import (
        DecisionCategory,
        DecisionStatus,
        DecisionType,
        HistorySort,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    category_f = _parse_choice(DecisionCategory, category, "--category")
    status_f = _parse_choice(DecisionStatus, status, "--status")
    type_f = _parse_choice(DecisionType, decision_type, "--type")
    sort_f = _parse_choice(HistorySort, sort, "--sort")

    with _open_db(config, db_path) as conn:
        decisions = DecisionRepository(conn).list_by_user(user_id)

    rows = filter_decisions(decisions, search, category_f, status_f, type_f, sort_f)
    summary = summarize_history(decisions, recent_days=config.analytics.recent_days)
    typer.echo(format_history(rows[:limit], summary))
    if len(rows) > limit:
        typer.echo(f"  ... and {len(rows) - limit} more (raise --limit).")


# ── Recommendation commands ───────────────────────────────────────────────────

@app.command("recommend")
def recommend(
    input_file: str = typer.Option(
        ...,
        "--file",
        "-f",
        help=(
            "JSON object with recommendation_text, reasoning, decision_type "
            "and an options array."
        ),
    ),
) -> None:
    """Reconcile a saved AI recommendation with its options, offline.

    Useful for checking how a recommendation text resolves without calling
    the language model.
    """
    from pydantic import ValidationError

    from decision_journal.models.ai import AIRecommendation
    from decision_journal.models.decision import Option
    from decision_journal.recommendations.pipeline import build_result
    from decision_journal.reporting.formatters import format_recommendation
    from decision_journal.taxonomy.decision_taxonomy import DecisionType

    path = Path(input_file)
    if not path.exists():
        typer.echo(f"[ERROR] Input file not found: {path}", err=True)
        raise typer.Exit(code=1)
    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
        ai_output = AIRecommendation(
            recommendation_text=raw.get("recommendation_text", ""),
            reasoning=raw.get("reasoning", ""),
        )
        options = [Option.model_validate(o) for o in raw.get("options", [])]
        decision_type = DecisionType(raw.get("decision_type", DecisionType.QUICK))
    except (json.JSONDecodeError, OSError, AttributeError, ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Invalid recommendation input: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(format_recommendation(build_result(ai_output, options, decision_type)))


@app.command("quick-decide")
def quick_decide(
    description: str = typer.Argument(..., help="Free-text description of the decision."),
    user_id: str = typer.Option(..., "--user", "-u", help="User id."),
    save: bool = typer.Option(True, "--save/--no-save", help="Persist the decision."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Extract options from a description and get an AI recommendation."""
    from decision_journal.ai.services import AIServiceError
    from decision_journal.journal.decisions import DecisionJournal
    from decision_journal.reporting.formatters import format_recommendation

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    assistant = _assistant_or_exit(config)

    try:
        outcome = assistant.process_quick_decision(description)
    except AIServiceError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Decision: {outcome.extracted.title} ({outcome.extracted.category})")
    typer.echo(format_recommendation(outcome.result))

    if not save:
        return
    with _open_db(config, db_path) as conn:
        decision = DecisionJournal(conn).save_quick_decision(
            user_id, outcome, description=description
        )
    typer.echo("")
    typer.echo(f"[OK] Saved decision {decision.id} as {decision.status}.")


@app.command("deep-decide")
def deep_decide(
    description: str = typer.Argument(..., help="Free-text description of the decision."),
    user_id: str = typer.Option(..., "--user", "-u", help="User id."),
    save: bool = typer.Option(True, "--save/--no-save", help="Persist the decision."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Guided deep analysis: values alignment, insights and next steps."""
    from decision_journal.ai.services import AIServiceError
    from decision_journal.journal.decisions import DecisionJournal
    from decision_journal.reporting.formatters import format_recommendation

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    assistant = _assistant_or_exit(config)

    try:
        outcome = assistant.process_deep_reflection(description)
    except AIServiceError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Decision: {outcome.extracted.title} ({outcome.extracted.category})")
    typer.echo(format_recommendation(outcome.result))
    for heading, items in (
        ("Key insights", outcome.analysis.key_insights),
        ("Cautionary notes", outcome.analysis.cautionary_notes),
        ("Next steps", outcome.analysis.next_steps),
    ):
        if items:
            typer.echo("")
            typer.echo(f"  {heading}:")
            for item in items:
                typer.echo(f"    - {item}")

    if not save:
        return
    with _open_db(config, db_path) as conn:
        decision = DecisionJournal(conn).save_deep_decision(user_id, outcome)
    typer.echo("")
    typer.echo(f"[OK] Saved decision {decision.id} as {decision.status}.")


@app.command("reflect")
def reflect(
    decision_id: str = typer.Option(..., "--decision", "-d", help="Decision id to reflect on."),
    text: str = typer.Option(..., "--text", "-t", help="Your reflection in free text."),
    db_path: Optional[str] = typer.Option(None, "--db-path", help="Override DB path."),
    config_path: Optional[str] = typer.Option(None, "--config", help="Path to TOML config file."),
) -> None:
    """Record a reflection; the AI extracts the outcome and learnings."""
    from decision_journal.ai.services import AIServiceError
    from decision_journal.db.repositories.decision_repo import DecisionRepository
    from decision_journal.journal.reflections import ReflectionJournal
    from decision_journal.models.reflection import Learning, Reflection
    from decision_journal.reporting.formatters import format_reflection_stats

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_db(config, db_path) as conn:
        decision = DecisionRepository(conn).get_by_id(decision_id)
    if decision is None:
        typer.echo(f"[ERROR] Decision not found: {decision_id}", err=True)
        raise typer.Exit(code=1)

    assistant = _assistant_or_exit(config)
    try:
        analysis = assistant.process_reflection(text, decision.category, decision.title)
    except AIServiceError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)

    extracted = analysis.learnings
    reflection = Reflection(
        user_id=decision.user_id,
        decision_id=decision.id,
        decision_type=decision.type,
        decision_category=decision.category,
        outcome=extracted.outcome,
        reflection_text=text,
        learnings=[Learning(type=x.type, description=x.description) for x in extracted.learnings],
        would_repeat=extracted.would_repeat,
        improvement_notes=extracted.improvement_notes,
        ai_insights="\n".join(analysis.insights) or None,
    )

    with _open_db(config, db_path) as conn:
        journal = ReflectionJournal(conn, config.analytics)
        journal.create(reflection)
        stats = journal.get_stats(decision.user_id)

    typer.echo(f"Outcome: {reflection.outcome} | would repeat: {reflection.would_repeat}")
    for learning in reflection.learnings:
        typer.echo(f"  [{learning.type}] {learning.description}")
    for insight in analysis.insights:
        typer.echo(f"  * {insight}")
    if stats is not None:
        typer.echo(format_reflection_stats(stats))
    typer.echo("")
    typer.echo(f"[OK] Reflection {reflection.id} saved.")


if __name__ == "__main__":
    app()
