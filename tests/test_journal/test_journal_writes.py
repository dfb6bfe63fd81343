"""
Tests for decision_journal/journal: decision saves, reflection stats
recompute, and the read-through dashboard cache.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from decision_journal.config import AnalyticsConfig
from decision_journal.db.repositories.stats_repo import DashboardStatsRepository
from decision_journal.journal.dashboard import get_dashboard, refresh_dashboard
from decision_journal.journal.decisions import DecisionJournal, decision_from_result
from decision_journal.journal.reflections import ReflectionJournal
from decision_journal.models.ai import AIRecommendation
from decision_journal.models.analytics import DashboardStats, DecisionCounts
from decision_journal.recommendations.pipeline import build_result
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionStatus,
    DecisionType,
    ReflectionOutcome,
    ReflectionTrend,
    TimeRange,
)


def _result(sample_options, text: str):
    return build_result(
        AIRecommendation(recommendation_text=text, reasoning="Because."),
        sample_options,
        DecisionType.QUICK,
    )


class TestDecisionFromResult:
    def test_matched_is_completed(self, sample_options):
        decision = decision_from_result("alice", "Friday", "lifestyle", _result(sample_options, "Stay home"))
        assert decision.status == DecisionStatus.COMPLETED
        assert decision.recommendation == "Stay home"
        assert decision.recommendation_reasoning == "Because."
        assert decision.selected_option.text == "Stay home"
        assert decision.ai_generated

    def test_mismatch_is_draft_without_recommendation(self, sample_options):
        decision = decision_from_result("alice", "Friday", "lifestyle", _result(sample_options, "Skydiving"))
        assert decision.status == DecisionStatus.DRAFT
        assert decision.recommendation is None
        assert decision.selected_option is None


class TestDecisionJournal:
    def test_save_invalidates_dashboard_cache(self, in_memory_db, make_decision):
        get_dashboard(in_memory_db, "alice", TimeRange.ALL_TIME)
        cache = DashboardStatsRepository(in_memory_db)
        assert cache.get("alice", "all_time") is not None

        DecisionJournal(in_memory_db).save(make_decision())
        assert cache.get("alice", "all_time") is None

    def test_set_status_and_feedback(self, in_memory_db, make_decision):
        journal = DecisionJournal(in_memory_db)
        decision = journal.save(make_decision())

        journal.set_status(decision.id, "implemented")
        updated = journal.record_feedback(decision.id, 4, followed_recommendation=True, comment="ok")
        assert updated.status == DecisionStatus.IMPLEMENTED
        assert updated.user_feedback.comment == "ok"

    def test_feedback_rating_validated(self, in_memory_db, make_decision):
        journal = DecisionJournal(in_memory_db)
        decision = journal.save(make_decision())
        with pytest.raises(ValueError):
            journal.record_feedback(decision.id, 9, followed_recommendation=False)

    def test_set_status_missing(self, in_memory_db):
        with pytest.raises(KeyError):
            DecisionJournal(in_memory_db).set_status("nope", "archived")


class TestReflectionJournal:
    def test_each_write_recomputes_stats(self, in_memory_db, make_reflection):
        journal = ReflectionJournal(in_memory_db)
        assert journal.get_stats("alice") is None

        first = make_reflection(outcome=ReflectionOutcome.VERY_SATISFIED, would_repeat=True)
        journal.create(first)
        stats = journal.get_stats("alice")
        assert stats.total_reflections == 1
        assert stats.average_satisfaction == pytest.approx(5.0)
        assert stats.would_repeat_percentage == pytest.approx(100.0)

        journal.create(make_reflection(outcome=ReflectionOutcome.VERY_UNSATISFIED))
        assert journal.get_stats("alice").average_satisfaction == pytest.approx(3.0)

        journal.update(first.id, outcome=ReflectionOutcome.NEUTRAL)
        assert journal.get_stats("alice").average_satisfaction == pytest.approx(2.0)

        assert journal.delete(first.id) is True
        stats = journal.get_stats("alice")
        assert stats.total_reflections == 1
        assert stats.would_repeat_percentage == 0.0

    def test_delete_last_leaves_empty_stats(self, in_memory_db, make_reflection):
        journal = ReflectionJournal(in_memory_db)
        reflection = make_reflection()
        journal.create(reflection)
        journal.delete(reflection.id)
        stats = journal.get_stats("alice")
        assert stats is not None
        assert stats.total_reflections == 0

    def test_delete_missing(self, in_memory_db):
        assert ReflectionJournal(in_memory_db).delete("nope") is False

    def test_trend_uses_analytics_config(self, in_memory_db, make_reflection):
        journal = ReflectionJournal(
            in_memory_db, AnalyticsConfig(trend_min_reflections=2, trend_window=1),
        )
        base = datetime(2024, 10, 1)
        journal.create(make_reflection(outcome=ReflectionOutcome.VERY_UNSATISFIED, created_at=base))
        journal.create(make_reflection(
            outcome=ReflectionOutcome.VERY_SATISFIED, created_at=base + timedelta(days=1),
        ))
        assert journal.get_stats("alice").reflection_trend == ReflectionTrend.IMPROVING

    def test_write_drops_dashboard_cache(self, in_memory_db, make_reflection):
        refresh_dashboard(in_memory_db, "alice", TimeRange.WEEK)
        ReflectionJournal(in_memory_db).create(make_reflection())
        assert DashboardStatsRepository(in_memory_db).get("alice", "week") is None


class TestDashboardCache:
    def test_read_through(self, in_memory_db, make_decision, make_reflection):
        DecisionJournal(in_memory_db).save(make_decision(created_at=datetime.now()))
        ReflectionJournal(in_memory_db).create(make_reflection(outcome=ReflectionOutcome.SATISFIED))

        first = get_dashboard(in_memory_db, "alice", "all_time")
        assert first.decision_counts.total == 1
        assert first.satisfaction_metrics.average_satisfaction == pytest.approx(4.0)
        assert first.streaks.current == 1

        # A direct insert bypasses invalidation, so the cached copy is served.
        DecisionJournal(in_memory_db).decisions.create(make_decision(created_at=datetime.now()))
        cached = get_dashboard(in_memory_db, "alice", "all_time")
        assert cached.decision_counts.total == 1

        fresh = refresh_dashboard(in_memory_db, "alice", "all_time")
        assert fresh.decision_counts.total == 2

    def test_as_of_is_computed_not_cached(self, in_memory_db, make_decision):
        DecisionJournal(in_memory_db).save(make_decision(created_at=datetime(2024, 10, 16, 12, 0)))

        same_day = get_dashboard(in_memory_db, "alice", "all_time", datetime(2024, 10, 16, 20, 0))
        assert same_day.streaks.current == 1
        later = get_dashboard(in_memory_db, "alice", "all_time", datetime(2024, 10, 21, 9, 0))
        assert later.streaks.current == 0
        assert later.streaks.longest == 0
        assert DashboardStatsRepository(in_memory_db).get("alice", "all_time") is None

    def test_row_from_earlier_day_is_recomputed(self, in_memory_db, make_decision):
        DecisionJournal(in_memory_db).save(make_decision(created_at=datetime.now()))
        DashboardStatsRepository(in_memory_db).upsert(DashboardStats(
            user_id="alice",
            time_range=TimeRange.ALL_TIME,
            decision_counts=DecisionCounts(total=99),
            last_updated=datetime.now(timezone.utc) - timedelta(days=2),
        ))

        stats = get_dashboard(in_memory_db, "alice", "all_time")
        assert stats.decision_counts.total == 1
        assert stats.streaks.current == 1
        assert DashboardStatsRepository(in_memory_db).get("alice", "all_time").decision_counts.total == 1
