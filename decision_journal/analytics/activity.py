"""
Decision activity analytics: streaks and per-day activity buckets.

All day arithmetic uses the *local* calendar (see ``utils.time_utils``):
a decision made at 23:30 and another at 00:15 the next morning fall on two
different days, even though they are 45 minutes apart.

Streak rules
------------
- Walk backward one local day at a time from the reference day, counting
  days that have at least one decision.
- If the reference day has no decision yet, start the walk from yesterday
  instead, so an unbroken run stays alive until the day fully elapses.
  Nothing today and nothing yesterday → ``current = 0``.
- ``longest`` is reported as ``max(current, current)``, i.e. equal to
  ``current``. No historical maximum scan is performed.

Activity buckets
----------------
``bucket_by_day`` returns exactly ``window_days`` buckets, oldest first,
ending on the reference day; empty days are zero-filled.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Optional, Sequence

from decision_journal.models.analytics import DayBucket, StreakResult
from decision_journal.models.decision import Decision
from decision_journal.taxonomy.decision_taxonomy import DecisionType
from decision_journal.utils.time_utils import (
    date_range,
    day_bounds,
    day_key,
    local_day,
    to_local,
    weekday_label,
)

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7
DEFAULT_RECENT_DAYS = 7


def _reference_time(as_of: Optional[datetime]) -> datetime:
    return to_local(as_of) if as_of is not None else datetime.now()


def compute_streak(
    decisions: Sequence[Decision],
    as_of: Optional[datetime] = None,
) -> StreakResult:
    """Compute the current decision streak and monthly / total counts.

    Args:
        decisions: The user's full decision history, in any order.
        as_of: Reference time; defaults to now (local).

    Returns:
        ``StreakResult``; all zeros for an empty history.
    """
    reference = _reference_time(as_of)
    active_days = {day_key(local_day(d.created_at)) for d in decisions}

    today = reference.date()
    cursor = today
    if day_key(cursor) not in active_days:
        cursor = today - timedelta(days=1)

    current = 0
    while day_key(cursor) in active_days:
        current += 1
        cursor -= timedelta(days=1)

    longest = max(current, current)

    created_days = [local_day(d.created_at) for d in decisions]
    this_month = sum(
        1 for day in created_days if (day.year, day.month) == (today.year, today.month)
    )

    logger.debug(
        "Streak as of %s: current=%d this_month=%d total=%d",
        today, current, this_month, len(decisions),
    )
    return StreakResult(
        current=current,
        longest=longest,
        this_month=this_month,
        total=len(decisions),
    )


def bucket_by_day(
    decisions: Sequence[Decision],
    as_of: Optional[datetime] = None,
    window_days: int = DEFAULT_WINDOW_DAYS,
) -> list[DayBucket]:
    """Count quick / deep decisions per local day over a trailing window.

    Args:
        decisions: The user's decision history.
        as_of: Reference time; its local day is the last bucket.
        window_days: Number of buckets to produce.

    Returns:
        Exactly ``window_days`` ``DayBucket`` objects, oldest first.

    Raises:
        ValueError: If ``window_days < 1``.
    """
    if window_days < 1:
        raise ValueError(f"window_days must be >= 1, got {window_days}.")

    today = _reference_time(as_of).date()
    local_times = [(to_local(d.created_at), d.type) for d in decisions]

    buckets: list[DayBucket] = []
    for day in date_range(today - timedelta(days=window_days - 1), today):
        start, end = day_bounds(day)
        quick = deep = 0
        for created, decision_type in local_times:
            if start <= created < end:
                if decision_type == DecisionType.QUICK:
                    quick += 1
                else:
                    deep += 1
        buckets.append(
            DayBucket(
                day=day,
                day_label=weekday_label(day),
                quick_count=quick,
                deep_count=deep,
                total=quick + deep,
            )
        )
    return buckets


def count_recent(
    decisions: Sequence[Decision],
    as_of: Optional[datetime] = None,
    days: int = DEFAULT_RECENT_DAYS,
) -> int:
    """Count decisions created fewer than ``days`` whole days before ``as_of``.

    Elapsed time is floored to whole days, so with ``days=7`` a decision
    6 days 23 hours old still counts.
    """
    reference = _reference_time(as_of)
    count = 0
    for d in decisions:
        elapsed = (reference - to_local(d.created_at)).total_seconds()
        if math.floor(elapsed / 86400) < days:
            count += 1
    return count
