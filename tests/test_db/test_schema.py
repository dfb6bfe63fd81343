"""Tests for SQLite schema: idempotency, table/index creation, connection helper."""

from __future__ import annotations

import sqlite3

import pytest

from decision_journal.db.connection import get_connection
from decision_journal.db.schema import (
    ALL_TABLE_NAMES,
    apply_schema,
    get_existing_indexes,
    get_existing_tables,
)


class TestApplySchema:
    def test_all_tables_created(self, in_memory_db):
        tables = get_existing_tables(in_memory_db)
        for expected_table in ALL_TABLE_NAMES:
            assert expected_table in tables, (
                f"Expected table '{expected_table}' not found in database. "
                f"Found: {tables}"
            )

    def test_idempotent_double_apply(self, in_memory_db):
        """apply_schema() called twice must not raise errors."""
        apply_schema(in_memory_db)
        assert sorted(get_existing_tables(in_memory_db)) == sorted(ALL_TABLE_NAMES)

    def test_key_indexes_created(self, in_memory_db):
        indexes = get_existing_indexes(in_memory_db)
        for idx in (
            "idx_decisions_user_created",
            "idx_reflections_user_created",
            "idx_reflections_decision",
            "idx_dashboard_stats_user",
        ):
            assert idx in indexes, f"Expected index '{idx}' not found. Found: {indexes}"


class TestGetConnection:
    def test_creates_parent_dirs_and_commits(self, tmp_path):
        db_file = tmp_path / "nested" / "journal.db"
        with get_connection(str(db_file)) as conn:
            apply_schema(conn)
            conn.execute(
                "INSERT INTO reflection_stats (user_id, last_updated, document) VALUES (?, ?, ?);",
                ("alice", "2024-01-01", "{}"),
            )
        assert db_file.exists()

        with get_connection(str(db_file)) as conn:
            row = conn.execute("SELECT user_id FROM reflection_stats;").fetchone()
            assert row["user_id"] == "alice"
            mode = conn.execute("PRAGMA journal_mode;").fetchone()[0]
            assert mode.lower() == "wal"

    def test_rolls_back_on_error(self, tmp_path):
        db_file = str(tmp_path / "journal.db")
        with get_connection(db_file) as conn:
            apply_schema(conn)

        with pytest.raises(RuntimeError):
            with get_connection(db_file) as conn:
                conn.execute(
                    "INSERT INTO reflection_stats (user_id, last_updated, document) "
                    "VALUES ('bob', 'x', '{}');"
                )
                raise RuntimeError("boom")

        with get_connection(db_file) as conn:
            assert conn.execute("SELECT COUNT(*) FROM reflection_stats;").fetchone()[0] == 0

    def test_memory_database(self):
        with get_connection(":memory:") as conn:
            assert isinstance(conn, sqlite3.Connection)
