"""Tests for decision_journal/config.py: TOML loading and env overrides."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from decision_journal.config import AnalyticsConfig, load_config


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in ("DECISION_JOURNAL_DB_PATH", "DECISION_JOURNAL_LOG_LEVEL", "DECISION_JOURNAL_DEBUG"):
        monkeypatch.delenv(name, raising=False)


def _write(path, text: str):
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_reads_toml(self, tmp_path):
        cfg = load_config(_write(tmp_path / "app.toml", """
[database]
db_path = "journal.db"

[analytics]
activity_window_days = 14
"""))
        assert cfg.database.db_path == "journal.db"
        assert cfg.analytics.activity_window_days == 14
        assert cfg.analytics.recent_days == 7
        assert cfg.llm.api_key_env == "GOOGLE_GENERATIVE_AI_API_KEY"

    def test_local_toml_overrides(self, tmp_path):
        path = _write(tmp_path / "app.toml", '[logging]\nlevel = "INFO"\nlog_file = ""\n')
        _write(tmp_path / "local.toml", '[logging]\nlevel = "debug"\n')
        cfg = load_config(path)
        assert cfg.logging.level == "DEBUG"
        assert cfg.logging.log_file == ""

    def test_env_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("DECISION_JOURNAL_DB_PATH", "/tmp/other.db")
        monkeypatch.setenv("DECISION_JOURNAL_DEBUG", "yes")
        cfg = load_config(_write(tmp_path / "app.toml", ""))
        assert cfg.database.db_path == "/tmp/other.db"
        assert cfg.debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.toml")

    def test_invalid_value_rejected(self, tmp_path):
        with pytest.raises(ValidationError):
            load_config(_write(tmp_path / "app.toml", '[llm]\nprovider = "openai"\n'))


class TestAnalyticsConfig:
    def test_non_positive_window_rejected(self):
        with pytest.raises(ValidationError):
            AnalyticsConfig(trend_window=0)
