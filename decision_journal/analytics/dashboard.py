"""
Dashboard summary over a user's decisions and cached reflection stats.

Time ranges
-----------
    day      : created within the last 24 hours
    week     : last 7 days
    month    : last calendar month (same day-of-month, clamped)
    year     : last 12 calendar months
    all_time : no cut-off

Only the decision counts, time metrics and followed-recommendation rate are
restricted to the range. Average satisfaction and trend come from the
user's cached ``ReflectionStats`` (all-time), and the streak is computed by
``compute_streak`` over the full decision history.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Protocol, Sequence, TypeVar

from decision_journal.analytics.activity import compute_streak
from decision_journal.models.analytics import (
    DashboardStats,
    DecisionCounts,
    SatisfactionMetrics,
    StreakSummary,
    TimeMetrics,
)
from decision_journal.models.decision import Decision
from decision_journal.models.reflection import ReflectionStats
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionCategory,
    DecisionStatus,
    DecisionType,
    TimeRange,
)
from decision_journal.utils.time_utils import subtract_months, to_local, utcnow

logger = logging.getLogger(__name__)


class _Timestamped(Protocol):
    @property
    def created_at(self) -> datetime: ...


T = TypeVar("T", bound=_Timestamped)


def time_range_cutoff(time_range: TimeRange | str, now: datetime) -> Optional[datetime]:
    """Return the earliest ``created_at`` kept by ``time_range``, or ``None``."""
    time_range = TimeRange(time_range)
    if time_range == TimeRange.DAY:
        return now - timedelta(days=1)
    if time_range == TimeRange.WEEK:
        return now - timedelta(days=7)
    if time_range == TimeRange.MONTH:
        return subtract_months(now, 1)
    if time_range == TimeRange.YEAR:
        return subtract_months(now, 12)
    return None


def filter_by_time_range(
    items: Sequence[T],
    time_range: TimeRange | str,
    now: Optional[datetime] = None,
) -> list[T]:
    """Keep items created at or after the ``time_range`` cut-off.

    Args:
        items: Anything with a ``created_at`` datetime.
        time_range: Look-back window.
        now: Reference time; defaults to the current local time.

    Returns:
        Filtered list, original order preserved.
    """
    reference = to_local(now) if now is not None else datetime.now()
    cutoff = time_range_cutoff(time_range, reference)
    if cutoff is None:
        return list(items)
    return [item for item in items if to_local(item.created_at) >= cutoff]


def _decision_counts(decisions: Sequence[Decision]) -> DecisionCounts:
    by_type = {t.value: 0 for t in DecisionType}
    by_category = {c.value: 0 for c in DecisionCategory}
    by_status = {s.value: 0 for s in DecisionStatus}
    for d in decisions:
        by_type[d.type.value] += 1
        by_category[d.category.value] += 1
        by_status[d.status.value] += 1
    return DecisionCounts(
        total=len(decisions),
        by_type=by_type,
        by_category=by_category,
        by_status=by_status,
    )


def _time_metrics(decisions: Sequence[Decision]) -> TimeMetrics:
    times = [d.time_spent for d in decisions if d.time_spent is not None]
    if not times:
        return TimeMetrics()
    total = sum(times)
    return TimeMetrics(
        average_time_spent=total / len(times),
        total_time_spent=total,
        quickest_decision=min(times),
        longest_decision=max(times),
    )


def _percent_followed(decisions: Sequence[Decision]) -> float:
    with_feedback = [
        d for d in decisions
        if d.type == DecisionType.QUICK and d.user_feedback is not None
    ]
    if not with_feedback:
        return 0.0
    followed = sum(1 for d in with_feedback if d.user_feedback.followed_recommendation)
    return followed / len(with_feedback) * 100


def compute_dashboard_stats(
    decisions: Sequence[Decision],
    reflection_stats: Optional[ReflectionStats],
    user_id: Optional[str] = None,
    time_range: TimeRange | str = TimeRange.ALL_TIME,
    as_of: Optional[datetime] = None,
) -> DashboardStats:
    """Build the dashboard summary for one user and time range.

    Args:
        decisions: The user's full decision history.
        reflection_stats: Cached reflection stats, or ``None`` if the user
            has never reflected.
        user_id: Owner; forms the cache key with ``time_range``.
        time_range: Look-back window for counts and time metrics.
        as_of: Reference time; defaults to now.

    Returns:
        ``DashboardStats``.
    """
    time_range = TimeRange(time_range)
    in_range = filter_by_time_range(decisions, time_range, as_of)

    satisfaction = SatisfactionMetrics(
        average_satisfaction=reflection_stats.average_satisfaction if reflection_stats else 0.0,
        trend_direction=(
            reflection_stats.reflection_trend if reflection_stats else SatisfactionMetrics().trend_direction
        ),
        percent_followed_recommendations=_percent_followed(in_range),
    )

    streak = compute_streak(decisions, as_of)

    logger.debug(
        "Dashboard for %s (%s): %d of %d decisions in range",
        user_id, time_range, len(in_range), len(decisions),
    )
    return DashboardStats(
        user_id=user_id,
        time_range=time_range,
        decision_counts=_decision_counts(in_range),
        time_metrics=_time_metrics(in_range),
        satisfaction_metrics=satisfaction,
        streaks=StreakSummary(current=streak.current, longest=streak.longest),
        last_updated=utcnow(),
    )
