"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      committed static defaults
  2. ``config/local.toml``        optional local overrides (gitignored)
  3. ``.env``                     local secrets and env overrides (gitignored)
  4. Environment variables        ``DECISION_JOURNAL_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

The LLM API key is never stored in TOML. ``LLMConfig.api_key_env`` names the
environment variable that holds it (``GOOGLE_GENERATIVE_AI_API_KEY`` by
default), which is normally populated from ``.env``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# ── Sub-config models ─────────────────────────────────────────────────────────


class DatabaseConfig(BaseModel):
    """SQLite document store settings."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/decision_journal.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/decision_journal.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class LLMConfig(BaseModel):
    """Large-language-model collaborator settings.

    ``fast_model`` serves extraction and quick recommendations;
    ``pro_model`` serves deep analysis and reflection features.
    """

    model_config = ConfigDict(frozen=True)

    provider: str = "google"
    base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    fast_model: str = "gemini-2.0-flash"
    pro_model: str = "gemini-1.5-pro-latest"
    temperature: float = 0.7
    timeout_s: float = 60.0
    api_key_env: str = "GOOGLE_GENERATIVE_AI_API_KEY"

    @field_validator("provider")
    @classmethod
    def validate_provider(cls, v: str) -> str:
        if v != "google":
            raise ValueError(f"Unsupported LLM provider '{v}'. Only 'google' is available.")
        return v

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"temperature must be in [0.0, 2.0], got {v}.")
        return v


class AnalyticsConfig(BaseModel):
    """Parameters for the activity and reflection analytics."""

    model_config = ConfigDict(frozen=True)

    activity_window_days: int = 7   # days in the activity chart
    recent_days: int = 7            # look-back for the "this week" count
    trend_min_reflections: int = 5  # fewer than this → trend is "stable"
    trend_window: int = 3           # reflections per recent/older window
    trend_threshold: float = 0.5    # avg-satisfaction delta to call a trend

    @model_validator(mode="after")
    def validate_positive(self) -> "AnalyticsConfig":
        for name in ("activity_window_days", "recent_days", "trend_min_reflections", "trend_window"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}.")
        if self.trend_threshold < 0:
            raise ValueError("trend_threshold must be non-negative.")
        return self


class AppConfig(BaseModel):
    """Complete application configuration, the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + env vars.
    """

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    llm: LLMConfig = LLMConfig()
    analytics: AnalyticsConfig = AnalyticsConfig()
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

    load_dotenv(dotenv_path=root / ".env", override=False)

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

    raw = _apply_env_overrides(raw)

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
    """Apply DECISION_JOURNAL_* env vars to the raw config dict.

    Supported overrides:
      DECISION_JOURNAL_DB_PATH    → raw["database"]["db_path"]
      DECISION_JOURNAL_LOG_LEVEL  → raw["logging"]["level"]
      DECISION_JOURNAL_DEBUG      → raw["debug"]
    """
    if db_path := os.environ.get("DECISION_JOURNAL_DB_PATH"):
        raw.setdefault("database", {})["db_path"] = db_path

    if log_level := os.environ.get("DECISION_JOURNAL_LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get("DECISION_JOURNAL_DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    return AppConfig(
        database=DatabaseConfig(**raw.get("database", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        llm=LLMConfig(**raw.get("llm", {})),
        analytics=AnalyticsConfig(**raw.get("analytics", {})),
        debug=raw.get("debug", False),
    )
