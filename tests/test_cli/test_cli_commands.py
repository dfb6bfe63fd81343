"""
End-to-end tests for decision_journal/cli.py using Typer's CliRunner.

Each test gets its own TOML config pointing at a temp database with file
logging disabled.
"""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from decision_journal.cli import app

runner = CliRunner()

DECISIONS = [
    {
        "id": "dec-lunch",
        "user_id": "alice",
        "title": "Lunch spot",
        "category": "food",
        "type": "quick",
        "status": "completed",
        "options": [
            {"id": "o1", "text": "Tacos", "selected": True, "pros": ["fast"]},
            {"id": "o2", "text": "Salad"},
        ],
        "time_spent": 40,
        "created_at": "2024-10-15T12:30:00",
        "updated_at": "2024-10-15T12:30:00",
    },
    {
        "id": "dec-trip",
        "user_id": "alice",
        "title": "Weekend trip",
        "category": "travel",
        "type": "deep",
        "options": [{"text": "Mountains"}, {"text": "Beach"}],
        "created_at": "2024-10-16T09:00:00",
        "updated_at": "2024-10-16T09:00:00",
    },
]

REFLECTIONS = [
    {
        "id": "ref-1",
        "user_id": "alice",
        "decision_id": "dec-lunch",
        "decision_category": "food",
        "outcome": "very_satisfied",
        "would_repeat": True,
        "created_at": "2024-10-16T08:00:00",
        "updated_at": "2024-10-16T08:00:00",
    },
]


@pytest.fixture
def cli_env(tmp_path, monkeypatch):
    """Write a temp config and return a helper that runs the CLI against it."""
    monkeypatch.delenv("DECISION_JOURNAL_DB_PATH", raising=False)
    monkeypatch.delenv("DECISION_JOURNAL_LOG_LEVEL", raising=False)
    config = tmp_path / "test.toml"
    config.write_text(
        "[database]\n"
        f'db_path = "{(tmp_path / "journal.db").as_posix()}"\n'
        "wal_mode = false\n\n"
        "[logging]\n"
        'level = "WARNING"\n'
        'log_file = ""\n',
        encoding="utf-8",
    )

    def _run(*args: str):
        return runner.invoke(app, [*args, "--config", str(config)])

    return _run


def _write_json(path, payload):
    path.write_text(json.dumps(payload), encoding="utf-8")
    return str(path)


@pytest.fixture
def seeded(cli_env, tmp_path):
    """CLI helper with DECISIONS and REFLECTIONS already imported."""
    assert cli_env("init-db").exit_code == 0
    result = cli_env("import-decisions", "--file", _write_json(tmp_path / "d.json", DECISIONS))
    assert result.exit_code == 0, result.output
    result = cli_env("import-reflections", "--file", _write_json(tmp_path / "r.json", REFLECTIONS))
    assert result.exit_code == 0, result.output
    return cli_env


class TestSetupCommands:
    def test_init_db(self, cli_env, tmp_path):
        result = cli_env("init-db")
        assert result.exit_code == 0
        assert "[OK] Database ready." in result.output
        assert (tmp_path / "journal.db").exists()

    def test_validate_config(self, cli_env):
        result = cli_env("validate-config")
        assert result.exit_code == 0
        assert "[OK] Config valid." in result.output

    def test_missing_config_exits(self, tmp_path):
        result = runner.invoke(app, ["init-db", "--config", str(tmp_path / "nope.toml")])
        assert result.exit_code == 1


class TestImportCommands:
    def test_import_and_counts(self, cli_env, tmp_path):
        cli_env("init-db")
        result = cli_env("import-decisions", "--file", _write_json(tmp_path / "d.json", DECISIONS))
        assert result.exit_code == 0
        assert "Inserted 2 decision(s)" in result.output

    def test_dry_run_writes_nothing(self, cli_env, tmp_path):
        cli_env("init-db")
        result = cli_env(
            "import-decisions", "--file", _write_json(tmp_path / "d.json", DECISIONS), "--dry-run",
        )
        assert result.exit_code == 0
        assert "[DRY RUN]" in result.output
        history = cli_env("history", "--user", "alice")
        assert "(no decisions match)" in history.output

    def test_invalid_item_aborts(self, cli_env, tmp_path):
        cli_env("init-db")
        bad = [DECISIONS[0], {"user_id": "alice", "title": "No type"}]
        result = cli_env("import-decisions", "--file", _write_json(tmp_path / "d.json", bad))
        assert result.exit_code == 1
        history = cli_env("history", "--user", "alice")
        assert "(no decisions match)" in history.output

    def test_not_an_array(self, cli_env, tmp_path):
        result = cli_env("import-decisions", "--file", _write_json(tmp_path / "d.json", {"a": 1}))
        assert result.exit_code == 1

    def test_reflections_recompute_stats(self, seeded):
        result = seeded("reflection-stats", "--user", "alice")
        assert result.exit_code == 0
        assert "Reflections:        1" in result.output
        assert "5.00 / 5" in result.output


class TestAnalyticsCommands:
    def test_streak(self, seeded):
        result = seeded("streak", "--user", "alice", "--as-of", "2024-10-16T20:00:00")
        assert result.exit_code == 0
        assert "Current streak:  2 days" in result.output

    def test_activity(self, seeded):
        result = seeded("activity", "--user", "alice", "--days", "3", "--as-of", "2024-10-16")
        assert result.exit_code == 0
        assert "last 3 days" in result.output
        assert "2024-10-14" in result.output

    def test_activity_rejects_zero_days(self, seeded):
        assert seeded("activity", "--user", "alice", "--days", "0").exit_code == 1

    def test_dashboard(self, seeded):
        result = seeded("dashboard", "--user", "alice", "--as-of", "2024-10-16T20:00:00")
        assert result.exit_code == 0
        assert "=== Dashboard (all_time) ===" in result.output
        assert "(quick 1, deep 1)" in result.output

    def test_dashboard_bad_range(self, seeded):
        result = seeded("dashboard", "--user", "alice", "--time-range", "decade")
        assert result.exit_code == 1

    def test_history_search_and_limit(self, seeded):
        result = seeded("history", "--user", "alice", "--search", "lunch")
        assert result.exit_code == 0
        assert "Lunch spot" in result.output
        assert "Weekend trip" not in result.output

        limited = seeded("history", "--user", "alice", "--limit", "1")
        assert "... and 1 more" in limited.output

    def test_history_bad_status(self, seeded):
        assert seeded("history", "--user", "alice", "--status", "done").exit_code == 1


class TestRecommendCommand:
    def test_offline_match(self, tmp_path):
        payload = {
            "recommendation_text": "I would go with the beach",
            "reasoning": "Sun.",
            "decision_type": "deep",
            "options": [{"text": "Mountains"}, {"text": "Beach", "pros": ["sun"]}],
        }
        result = runner.invoke(app, ["recommend", "--file", _write_json(tmp_path / "r.json", payload)])
        assert result.exit_code == 0
        assert "Best option: Beach" in result.output

    def test_bad_decision_type(self, tmp_path):
        payload = {"recommendation_text": "x", "decision_type": "medium", "options": []}
        result = runner.invoke(app, ["recommend", "--file", _write_json(tmp_path / "r.json", payload)])
        assert result.exit_code == 1


class TestAICommands:
    def test_quick_decide_needs_api_key(self, cli_env, monkeypatch):
        monkeypatch.delenv("GOOGLE_GENERATIVE_AI_API_KEY", raising=False)
        result = cli_env("quick-decide", "Pizza or sushi?", "--user", "alice")
        assert result.exit_code == 1
        assert "GOOGLE_GENERATIVE_AI_API_KEY" in result.output

    def test_quick_decide_saves(self, cli_env, monkeypatch, scripted_client):
        client = scripted_client(
            json.dumps({
                "title": "Dinner tonight",
                "category": "food",
                "options": [
                    {"text": "Pizza", "pros": ["tasty"], "cons": ["heavy"]},
                    {"text": "Sushi", "pros": ["healthy", "light"], "cons": ["pricey"]},
                ],
            }),
            "Sushi is the lighter choice.",
            json.dumps({"recommended_option": "Sushi", "reasoning": "Healthier"}),
        )
        client.api_key = "test-key"
        monkeypatch.setattr("decision_journal.ai.client.client_from_config", lambda cfg: client)

        cli_env("init-db")
        result = cli_env("quick-decide", "Pizza or sushi?", "--user", "alice")
        assert result.exit_code == 0, result.output
        assert "Best option: Sushi" in result.output
        assert "as completed" in result.output

        history = cli_env("history", "--user", "alice")
        assert "Dinner tonight" in history.output
