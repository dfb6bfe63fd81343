"""Tests for repository round-trip operations using in-memory SQLite."""

from __future__ import annotations

import sqlite3
from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError

from decision_journal.db.repositories.decision_repo import DecisionRepository
from decision_journal.db.repositories.reflection_repo import ReflectionRepository
from decision_journal.db.repositories.stats_repo import (
    DashboardStatsRepository,
    ReflectionStatsRepository,
)
from decision_journal.models.analytics import DashboardStats, DecisionCounts
from decision_journal.models.decision import Option, UserFeedback
from decision_journal.models.reflection import ReflectionStats
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionStatus,
    DecisionType,
    ReflectionOutcome,
    ReflectionTrend,
    TimeRange,
)

BASE = datetime(2024, 10, 1, 9, 0)


# ── Decision repository tests ──────────────────────────────────────────────────

class TestDecisionRepository:
    def test_create_and_fetch(self, in_memory_db, make_decision):
        repo = DecisionRepository(in_memory_db)
        decision = make_decision(tags=["weekend"])
        assert repo.create(decision) == decision.id
        assert repo.get_by_id(decision.id) == decision

    def test_missing_returns_none(self, in_memory_db):
        assert DecisionRepository(in_memory_db).get_by_id("nope") is None

    def test_duplicate_id_rejected(self, in_memory_db, make_decision):
        repo = DecisionRepository(in_memory_db)
        decision = make_decision()
        repo.create(decision)
        with pytest.raises(sqlite3.IntegrityError):
            repo.create(decision)

    def test_list_by_user_newest_first_and_filtered(self, in_memory_db, make_decision):
        repo = DecisionRepository(in_memory_db)
        repo.create_many([
            make_decision(id="old", created_at=BASE),
            make_decision(id="new", created_at=BASE + timedelta(days=2), type=DecisionType.DEEP),
            make_decision(id="mid", created_at=BASE + timedelta(days=1)),
            make_decision(id="other", user_id="bob"),
        ])
        assert [d.id for d in repo.list_by_user("alice")] == ["new", "mid", "old"]
        assert [d.id for d in repo.list_by_user("alice", decision_type="quick")] == ["mid", "old"]
        assert [d.id for d in repo.list_by_user("alice", limit=1)] == ["new"]
        assert repo.list_by_user("carol") == []

    def test_update_mutable_fields(self, in_memory_db, make_decision, sample_options):
        repo = DecisionRepository(in_memory_db)
        decision = make_decision()
        repo.create(decision)

        selected = [sample_options[0].model_copy(update={"selected": True}), sample_options[1]]
        updated = repo.update(
            decision.id,
            status=DecisionStatus.COMPLETED,
            options=selected,
            user_feedback=UserFeedback(satisfaction_rating=5, followed_recommendation=True),
        )
        assert updated.status == DecisionStatus.COMPLETED
        assert updated.updated_at != decision.updated_at
        stored = repo.get_by_id(decision.id)
        assert stored.selected_option.id == "opt-home"
        assert stored.user_feedback.satisfaction_rating == 5
        assert repo.list_by_user("alice", status="completed")[0].id == decision.id

    def test_update_immutable_field_rejected(self, in_memory_db, make_decision):
        repo = DecisionRepository(in_memory_db)
        decision = make_decision()
        repo.create(decision)
        with pytest.raises(ValueError, match="immutable"):
            repo.update(decision.id, title="Rewritten history")

    def test_update_missing_raises_key_error(self, in_memory_db):
        with pytest.raises(KeyError):
            DecisionRepository(in_memory_db).update("nope", status="archived")

    def test_update_revalidates(self, in_memory_db, make_decision):
        repo = DecisionRepository(in_memory_db)
        decision = make_decision(options=[Option(text="only")])
        repo.create(decision)
        with pytest.raises(ValidationError):
            repo.update(decision.id, status=DecisionStatus.COMPLETED)
        assert repo.get_by_id(decision.id).status == DecisionStatus.DRAFT

    def test_delete(self, in_memory_db, make_decision):
        repo = DecisionRepository(in_memory_db)
        decision = make_decision()
        repo.create(decision)
        assert repo.delete(decision.id) is True
        assert repo.delete(decision.id) is False


# ── Reflection repository tests ────────────────────────────────────────────────

class TestReflectionRepository:
    def test_round_trip_and_listing(self, in_memory_db, make_reflection):
        repo = ReflectionRepository(in_memory_db)
        first = make_reflection(id="r1", decision_id="d1", created_at=BASE)
        second = make_reflection(id="r2", decision_id="d1", created_at=BASE + timedelta(days=1),
                                 outcome=ReflectionOutcome.NEUTRAL)
        third = make_reflection(id="r3", decision_id="d2", created_at=BASE + timedelta(days=2))
        assert repo.create_many([first, second, third]) == 3

        assert repo.get_by_id("r1") == first
        assert [r.id for r in repo.list_by_user("alice")] == ["r3", "r2", "r1"]
        assert [r.id for r in repo.list_by_user("alice", outcome="neutral")] == ["r2"]
        assert [r.id for r in repo.list_by_decision("d1")] == ["r2", "r1"]

    def test_update(self, in_memory_db, make_reflection):
        repo = ReflectionRepository(in_memory_db)
        reflection = make_reflection()
        repo.create(reflection)
        updated = repo.update(reflection.id, outcome=ReflectionOutcome.VERY_SATISFIED, would_repeat=True)
        assert updated.outcome == ReflectionOutcome.VERY_SATISFIED
        assert repo.list_by_user("alice", outcome="very_satisfied")[0].would_repeat is True

    def test_update_identity_rejected(self, in_memory_db, make_reflection):
        repo = ReflectionRepository(in_memory_db)
        reflection = make_reflection()
        repo.create(reflection)
        with pytest.raises(ValueError):
            repo.update(reflection.id, user_id="mallory")

    def test_delete_returns_document(self, in_memory_db, make_reflection):
        repo = ReflectionRepository(in_memory_db)
        reflection = make_reflection()
        repo.create(reflection)
        assert repo.delete(reflection.id) == reflection
        assert repo.delete(reflection.id) is None


# ── Stats cache repository tests ───────────────────────────────────────────────

class TestStatsRepositories:
    def test_reflection_stats_upsert_overwrites(self, in_memory_db):
        repo = ReflectionStatsRepository(in_memory_db)
        repo.upsert(ReflectionStats(user_id="alice", total_reflections=1))
        repo.upsert(ReflectionStats(
            user_id="alice", total_reflections=2, reflection_trend=ReflectionTrend.DECLINING,
        ))
        stored = repo.get("alice")
        assert stored.total_reflections == 2
        assert stored.reflection_trend == ReflectionTrend.DECLINING
        assert stored.satisfaction_counts[ReflectionOutcome.NEUTRAL] == 0
        assert repo.get("bob") is None

    def test_reflection_stats_need_user(self, in_memory_db):
        with pytest.raises(ValueError):
            ReflectionStatsRepository(in_memory_db).upsert(ReflectionStats())

    def test_dashboard_cache_per_range(self, in_memory_db):
        repo = DashboardStatsRepository(in_memory_db)
        repo.upsert(DashboardStats(user_id="alice", time_range=TimeRange.WEEK,
                                   decision_counts=DecisionCounts(total=3)))
        repo.upsert(DashboardStats(user_id="alice", time_range=TimeRange.ALL_TIME,
                                   decision_counts=DecisionCounts(total=9)))
        repo.upsert(DashboardStats(user_id="bob", time_range=TimeRange.WEEK))

        assert repo.get("alice", "week").decision_counts.total == 3
        assert repo.get("alice", TimeRange.ALL_TIME).decision_counts.total == 9
        assert repo.get("alice", "day") is None

        assert repo.delete_for_user("alice") == 2
        assert repo.get("alice", "week") is None
        assert repo.get("bob", "week") is not None
