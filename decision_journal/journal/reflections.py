"""
Reflection writes with a fully recomputed per-user stats cache.

Every create / update / delete re-reads the user's entire reflection
history, recomputes ``ReflectionStats`` from scratch and overwrites the
cached copy. There is no incremental path, so each write costs O(n) in the
user's reflection count. Two concurrent writers for one user may race;
the cache ends up with whichever recompute was written last.

The user's cached dashboard summaries are dropped on each write too, since
they embed the satisfaction average and trend.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Any, Optional

from decision_journal.analytics.reflection_stats import compute_stats
from decision_journal.config import AnalyticsConfig
from decision_journal.db.repositories.reflection_repo import ReflectionRepository
from decision_journal.db.repositories.stats_repo import (
    DashboardStatsRepository,
    ReflectionStatsRepository,
)
from decision_journal.models.reflection import Reflection, ReflectionStats

logger = logging.getLogger(__name__)


class ReflectionJournal:
    """Reflection CRUD that keeps ``reflection_stats`` in sync.

    Args:
        conn: Open SQLite connection with the schema applied.
        analytics: Trend parameters; defaults to ``AnalyticsConfig()``.
    """

    def __init__(self, conn: sqlite3.Connection, analytics: Optional[AnalyticsConfig] = None) -> None:
        self.reflections = ReflectionRepository(conn)
        self.stats = ReflectionStatsRepository(conn)
        self.dashboard_cache = DashboardStatsRepository(conn)
        self.analytics = analytics or AnalyticsConfig()

    def recompute_stats(self, user_id: str) -> ReflectionStats:
        """Recompute and overwrite the cached stats for ``user_id``."""
        history = self.reflections.list_by_user(user_id)
        stats = compute_stats(
            history,
            user_id=user_id,
            min_reflections=self.analytics.trend_min_reflections,
            window=self.analytics.trend_window,
            threshold=self.analytics.trend_threshold,
        )
        self.stats.upsert(stats)
        self.dashboard_cache.delete_for_user(user_id)
        logger.info(
            "Reflection stats for %s recomputed: %d reflections, avg %.2f, trend %s",
            user_id, stats.total_reflections, stats.average_satisfaction, stats.reflection_trend,
        )
        return stats

    def create(self, reflection: Reflection) -> str:
        reflection_id = self.reflections.create(reflection)
        self.recompute_stats(reflection.user_id)
        return reflection_id

    def update(self, reflection_id: str, **changes: Any) -> Reflection:
        """Update a reflection, then recompute its owner's stats.

        Raises:
            KeyError: If the reflection does not exist.
            ValueError: If an identity field is given.
        """
        updated = self.reflections.update(reflection_id, **changes)
        self.recompute_stats(updated.user_id)
        return updated

    def delete(self, reflection_id: str) -> bool:
        """Delete a reflection; returns ``False`` if it did not exist."""
        removed = self.reflections.delete(reflection_id)
        if removed is None:
            return False
        self.recompute_stats(removed.user_id)
        return True

    def get_stats(self, user_id: str) -> Optional[ReflectionStats]:
        """Cached stats, or ``None`` if the user has never written a reflection."""
        return self.stats.get(user_id)
