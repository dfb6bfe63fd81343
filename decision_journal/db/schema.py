"""
SQLite schema DDL for the document store.

Every table stores the full pydantic model as a JSON ``document`` plus the
few columns that queries filter or order on. All statements use
``IF NOT EXISTS`` so ``apply_schema()`` is idempotent.

Tables:
  1. decisions          one row per Decision; indexed by (user_id, created_ts)
  2. reflections        one row per Reflection; indexed by (user_id, created_ts)
                        and decision_id
  3. reflection_stats   per-user ReflectionStats cache, keyed by user_id
  4. dashboard_stats    per-(user, time range) DashboardStats cache, keyed
                        by "{user_id}_{time_range}"

``created_ts`` is a POSIX timestamp (REAL) so ordering is correct across
timezone offsets.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_DECISIONS = """
CREATE TABLE IF NOT EXISTS decisions (
    id              TEXT    PRIMARY KEY,
    user_id         TEXT    NOT NULL,
    type            TEXT    NOT NULL,
    category        TEXT    NOT NULL,
    status          TEXT    NOT NULL,
    created_ts      REAL    NOT NULL,
    updated_ts      REAL    NOT NULL,
    document        TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_decisions_user_created
    ON decisions (user_id, created_ts);
"""

_DDL_REFLECTIONS = """
CREATE TABLE IF NOT EXISTS reflections (
    id              TEXT    PRIMARY KEY,
    user_id         TEXT    NOT NULL,
    decision_id     TEXT    NOT NULL,
    outcome         TEXT    NOT NULL,
    created_ts      REAL    NOT NULL,
    updated_ts      REAL    NOT NULL,
    document        TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_reflections_user_created
    ON reflections (user_id, created_ts);
CREATE INDEX IF NOT EXISTS idx_reflections_decision
    ON reflections (decision_id);
"""

_DDL_REFLECTION_STATS = """
CREATE TABLE IF NOT EXISTS reflection_stats (
    user_id         TEXT    PRIMARY KEY,
    last_updated    TEXT    NOT NULL,
    document        TEXT    NOT NULL
);
"""

_DDL_DASHBOARD_STATS = """
CREATE TABLE IF NOT EXISTS dashboard_stats (
    id              TEXT    PRIMARY KEY,
    user_id         TEXT    NOT NULL,
    time_range      TEXT    NOT NULL,
    last_updated    TEXT    NOT NULL,
    document        TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_dashboard_stats_user
    ON dashboard_stats (user_id);
"""

_ALL_DDL = [
    _DDL_DECISIONS,
    _DDL_REFLECTIONS,
    _DDL_REFLECTION_STATS,
    _DDL_DASHBOARD_STATS,
]

# Table names for introspection / tests
ALL_TABLE_NAMES = [
    "decisions",
    "reflections",
    "reflection_stats",
    "dashboard_stats",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``. Idempotent.

    Args:
        conn: An open ``sqlite3.Connection``.
    """
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
    """Return table names present in the database, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Return explicitly created index names, sorted."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='index' AND sql IS NOT NULL ORDER BY name;"
    ).fetchall()
    return [row[0] for row in rows]
