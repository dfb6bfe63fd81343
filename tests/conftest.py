"""
Shared pytest fixtures for the Decision Journal test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema applied. Created anew for each test that requests it.
  - ``make_decision`` / ``make_reflection``: factories for domain objects
    with sensible defaults; pass keyword overrides for what a test cares
    about.

Timestamps in the factories are naive, i.e. already local, so day-based
analytics are independent of the machine's timezone.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime
from typing import Callable, Generator, Optional

import pytest

from decision_journal.ai.client import BaseLLMClient
from decision_journal.db.schema import apply_schema
from decision_journal.models.decision import Decision, Option
from decision_journal.models.reflection import Reflection
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionCategory,
    DecisionType,
    ReflectionOutcome,
)

REFERENCE_TIME = datetime(2024, 10, 16, 12, 0, 0)  # a Wednesday


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with the full schema applied.

    Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    apply_schema(conn)
    yield conn
    conn.close()


# ── Sample domain object factories ────────────────────────────────────────────

@pytest.fixture
def reference_time() -> datetime:
    return REFERENCE_TIME


@pytest.fixture
def sample_options() -> list[Option]:
    """Two options with distinct pros/cons shapes."""
    return [
        Option(id="opt-home", text="Stay home", pros=["rest", "cheap"], cons=["boring"]),
        Option(id="opt-out", text="Go out", pros=["fun"], cons=["expensive", "tired"]),
    ]


@pytest.fixture
def make_decision(sample_options) -> Callable[..., Decision]:
    """Factory: ``make_decision(created_at=..., type=..., **overrides)``."""

    def _make(**overrides) -> Decision:
        fields = dict(
            user_id="alice",
            title="Friday night plans",
            description="Stay in or go out with friends",
            category=DecisionCategory.LIFESTYLE,
            type=DecisionType.QUICK,
            options=list(sample_options),
            created_at=REFERENCE_TIME,
            updated_at=REFERENCE_TIME,
        )
        fields.update(overrides)
        return Decision(**fields)

    return _make


@pytest.fixture
def make_reflection() -> Callable[..., Reflection]:
    """Factory: ``make_reflection(outcome=..., created_at=..., **overrides)``."""

    def _make(**overrides) -> Reflection:
        fields = dict(
            user_id="alice",
            decision_id="dec-1",
            decision_category=DecisionCategory.LIFESTYLE,
            outcome=ReflectionOutcome.SATISFIED,
            reflection_text="It went fine.",
            created_at=REFERENCE_TIME,
            updated_at=REFERENCE_TIME,
        )
        fields.update(overrides)
        return Reflection(**fields)

    return _make


# ── Language-model double ─────────────────────────────────────────────────────

class ScriptedClient(BaseLLMClient):
    """Returns queued responses in order; a queued exception is raised instead.

    ``calls`` records ``(prompt, model, json_mode)`` for every request.
    """

    fast_model = "fast-model"
    pro_model = "pro-model"

    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.calls: list[tuple[str, Optional[str], bool]] = []

    def generate_text(self, prompt, *, model=None, json_mode=False) -> str:
        self.calls.append((prompt, model, json_mode))
        if not self.responses:
            raise AssertionError(f"Unexpected LLM call #{len(self.calls)}")
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def scripted_client() -> type[ScriptedClient]:
    """The ``ScriptedClient`` class; call it with the responses to queue."""
    return ScriptedClient
