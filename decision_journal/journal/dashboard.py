"""
Read-through dashboard cache.

The cache holds one ``DashboardStats`` per ``"{user_id}_{time_range}"``,
always computed against the current time. Streaks and the day / week /
month windows move with the clock, so:

  - a cached row written on an earlier local day is treated as a miss;
  - a request with an explicit ``as_of`` is computed on the fly and never
    read from or written to the cache.

``refresh_dashboard`` always recomputes.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from decision_journal.analytics.dashboard import compute_dashboard_stats
from decision_journal.db.repositories.decision_repo import DecisionRepository
from decision_journal.db.repositories.stats_repo import (
    DashboardStatsRepository,
    ReflectionStatsRepository,
)
from decision_journal.models.analytics import DashboardStats
from decision_journal.taxonomy.decision_taxonomy import TimeRange
from decision_journal.utils.time_utils import local_day

logger = logging.getLogger(__name__)


def _compute(
    conn: sqlite3.Connection,
    user_id: str,
    time_range: TimeRange | str,
    as_of: Optional[datetime],
) -> tuple[DashboardStats, int]:
    decisions = DecisionRepository(conn).list_by_user(user_id)
    reflection_stats = ReflectionStatsRepository(conn).get(user_id)
    stats = compute_dashboard_stats(decisions, reflection_stats, user_id, time_range, as_of)
    return stats, len(decisions)


def _is_current(stats: DashboardStats) -> bool:
    return local_day(stats.last_updated) == datetime.now().date()


def refresh_dashboard(
    conn: sqlite3.Connection,
    user_id: str,
    time_range: TimeRange | str = TimeRange.ALL_TIME,
    as_of: Optional[datetime] = None,
) -> DashboardStats:
    """Recompute the dashboard for one user and time range.

    Decisions and reflection stats are fetched first, then the summary is
    computed in memory. Only the current-time view (``as_of=None``) is
    written to the cache.
    """
    stats, n_decisions = _compute(conn, user_id, time_range, as_of)
    if as_of is not None:
        logger.debug("Dashboard %s computed as of %s (not cached).", stats.cache_key, as_of)
        return stats
    DashboardStatsRepository(conn).upsert(stats)
    logger.info("Dashboard cache %s refreshed (%d decisions).", stats.cache_key, n_decisions)
    return stats


def get_dashboard(
    conn: sqlite3.Connection,
    user_id: str,
    time_range: TimeRange | str = TimeRange.ALL_TIME,
    as_of: Optional[datetime] = None,
) -> DashboardStats:
    """Cached dashboard, computed on first access each day."""
    if as_of is not None:
        return refresh_dashboard(conn, user_id, time_range, as_of)

    cached = DashboardStatsRepository(conn).get(user_id, time_range)
    if cached is not None and _is_current(cached):
        logger.debug("Dashboard cache hit: %s", cached.cache_key)
        return cached
    if cached is not None:
        logger.debug("Dashboard cache %s is from an earlier day; recomputing.", cached.cache_key)
    return refresh_dashboard(conn, user_id, time_range)
