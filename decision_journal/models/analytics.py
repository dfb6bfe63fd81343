"""
Derived analytics models: streaks, activity buckets, dashboard summary.

``StreakResult`` and ``DayBucket`` are ephemeral: recomputed on every query
and never persisted. ``DashboardStats`` is cached per ``(user, time range)``
by ``journal.dashboard``.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from decision_journal.taxonomy.decision_taxonomy import ReflectionTrend, TimeRange
from decision_journal.utils.time_utils import utcnow


class StreakResult(BaseModel):
    """Decision streak summary.

    Attributes:
        current: Consecutive local days with at least one decision, ending
            today (or yesterday, if nothing has been recorded today yet).
        longest: Currently reported equal to ``current``; no historical
            maximum scan is performed.
        this_month: Decisions created in the reference calendar month.
        total: All decisions.
    """

    model_config = ConfigDict(frozen=True)

    current: int = 0
    longest: int = 0
    this_month: int = 0
    total: int = 0


class DayBucket(BaseModel):
    """Decision counts for one local calendar day of the activity chart."""

    model_config = ConfigDict(frozen=True)

    day: date
    day_label: str
    quick_count: int = 0
    deep_count: int = 0
    total: int = 0


class DecisionCounts(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    by_type: dict[str, int] = Field(default_factory=dict)
    by_category: dict[str, int] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)


class TimeMetrics(BaseModel):
    """Time-spent statistics in seconds over decisions that recorded it."""

    model_config = ConfigDict(frozen=True)

    average_time_spent: float = 0.0
    total_time_spent: int = 0
    quickest_decision: int = 0
    longest_decision: int = 0


class SatisfactionMetrics(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_satisfaction: float = 0.0
    trend_direction: ReflectionTrend = ReflectionTrend.STABLE
    percent_followed_recommendations: float = 0.0


class StreakSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    current: int = 0
    longest: int = 0


class DashboardStats(BaseModel):
    """Dashboard summary for one user and time range."""

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    time_range: TimeRange = TimeRange.ALL_TIME
    decision_counts: DecisionCounts = DecisionCounts()
    time_metrics: TimeMetrics = TimeMetrics()
    satisfaction_metrics: SatisfactionMetrics = SatisfactionMetrics()
    streaks: StreakSummary = StreakSummary()
    last_updated: datetime = Field(default_factory=utcnow)

    @property
    def cache_key(self) -> str:
        return f"{self.user_id}_{self.time_range}"


class HistorySummary(BaseModel):
    """Header counts for the decision history view."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    quick: int = 0
    deep: int = 0
    completed: int = 0
    completion_rate: int = 0
    recent: int = 0
