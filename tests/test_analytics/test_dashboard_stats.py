"""Tests for decision_journal/analytics/dashboard.py."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from decision_journal.analytics.dashboard import (
    compute_dashboard_stats,
    filter_by_time_range,
    time_range_cutoff,
)
from decision_journal.models.decision import UserFeedback
from decision_journal.models.reflection import ReflectionStats
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionCategory,
    DecisionStatus,
    DecisionType,
    ReflectionTrend,
    TimeRange,
)

NOW = datetime(2024, 3, 31, 12, 0)


class TestTimeRangeCutoff:
    def test_all_time_has_no_cutoff(self):
        assert time_range_cutoff(TimeRange.ALL_TIME, NOW) is None

    def test_day_and_week(self):
        assert time_range_cutoff("day", NOW) == NOW - timedelta(days=1)
        assert time_range_cutoff("week", NOW) == NOW - timedelta(days=7)

    def test_month_clamps_day(self):
        assert time_range_cutoff(TimeRange.MONTH, NOW) == datetime(2024, 2, 29, 12, 0)

    def test_year(self):
        assert time_range_cutoff(TimeRange.YEAR, NOW) == datetime(2023, 3, 31, 12, 0)

    def test_unknown_range(self):
        with pytest.raises(ValueError):
            time_range_cutoff("decade", NOW)


class TestFilterByTimeRange:
    def test_keeps_items_at_or_after_cutoff(self, make_decision):
        inside = make_decision(created_at=NOW - timedelta(days=7))
        outside = make_decision(created_at=NOW - timedelta(days=7, seconds=1))
        assert filter_by_time_range([inside, outside], "week", NOW) == [inside]

    def test_all_time_keeps_everything(self, make_decision):
        old = make_decision(created_at=datetime(2001, 1, 1))
        assert filter_by_time_range([old], TimeRange.ALL_TIME, NOW) == [old]


class TestComputeDashboardStats:
    def test_empty_history(self):
        stats = compute_dashboard_stats([], None, "alice", TimeRange.WEEK, NOW)
        assert stats.cache_key == "alice_week"
        assert stats.decision_counts.total == 0
        assert stats.decision_counts.by_type == {"quick": 0, "deep": 0}
        assert len(stats.decision_counts.by_category) == len(DecisionCategory)
        assert stats.time_metrics.total_time_spent == 0
        assert stats.satisfaction_metrics.average_satisfaction == 0.0
        assert stats.satisfaction_metrics.trend_direction == ReflectionTrend.STABLE
        assert stats.streaks.current == 0

    def test_counts_and_time_metrics_in_range(self, make_decision):
        decisions = [
            make_decision(created_at=NOW - timedelta(hours=1), time_spent=30,
                          category=DecisionCategory.FOOD),
            make_decision(created_at=NOW - timedelta(days=2), time_spent=90,
                          type=DecisionType.DEEP, status=DecisionStatus.COMPLETED),
            make_decision(created_at=NOW - timedelta(days=3)),
            make_decision(created_at=NOW - timedelta(days=40), time_spent=1000),
        ]
        stats = compute_dashboard_stats(decisions, None, "alice", TimeRange.WEEK, NOW)

        counts = stats.decision_counts
        assert counts.total == 3
        assert counts.by_type == {"quick": 2, "deep": 1}
        assert counts.by_category["food"] == 1
        assert counts.by_status["completed"] == 1
        assert counts.by_status["draft"] == 2

        tm = stats.time_metrics
        assert tm.total_time_spent == 120
        assert tm.average_time_spent == pytest.approx(60.0)
        assert (tm.quickest_decision, tm.longest_decision) == (30, 90)

    def test_streak_uses_full_history(self, make_decision):
        decisions = [make_decision(created_at=NOW - timedelta(days=n, hours=1)) for n in range(3)]
        stats = compute_dashboard_stats(decisions, None, "alice", TimeRange.DAY, NOW)
        assert stats.decision_counts.total == 1
        assert stats.streaks.current == 3
        assert stats.streaks.longest == 3

    def test_satisfaction_from_reflection_stats(self):
        rs = ReflectionStats(
            user_id="alice", average_satisfaction=4.2, reflection_trend=ReflectionTrend.IMPROVING,
        )
        stats = compute_dashboard_stats([], rs, "alice", TimeRange.ALL_TIME, NOW)
        assert stats.satisfaction_metrics.average_satisfaction == pytest.approx(4.2)
        assert stats.satisfaction_metrics.trend_direction == ReflectionTrend.IMPROVING

    def test_percent_followed_counts_quick_decisions_with_feedback(self, make_decision):
        def fb(followed: bool) -> UserFeedback:
            return UserFeedback(satisfaction_rating=4, followed_recommendation=followed)

        decisions = [
            make_decision(created_at=NOW, user_feedback=fb(True)),
            make_decision(created_at=NOW, user_feedback=fb(False)),
            make_decision(created_at=NOW, user_feedback=fb(True)),
            make_decision(created_at=NOW),
            make_decision(created_at=NOW, type=DecisionType.DEEP, user_feedback=fb(False)),
        ]
        stats = compute_dashboard_stats(decisions, None, "alice", TimeRange.ALL_TIME, NOW)
        assert stats.satisfaction_metrics.percent_followed_recommendations == pytest.approx(200 / 3)
