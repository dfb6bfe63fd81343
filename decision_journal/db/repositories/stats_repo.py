"""
Repositories for the derived-statistics caches.

Both caches are whole-document overwrites (``INSERT ... ON CONFLICT DO
UPDATE``); there is no partial update path. Concurrent writers for the same
key resolve last-write-wins.
"""

from __future__ import annotations

import logging
from typing import Optional

from decision_journal.db.repositories.base import BaseRepository, from_document, to_document
from decision_journal.models.analytics import DashboardStats
from decision_journal.models.reflection import ReflectionStats
from decision_journal.taxonomy.decision_taxonomy import TimeRange

logger = logging.getLogger(__name__)


class ReflectionStatsRepository(BaseRepository):
    """Per-user ``ReflectionStats`` cache."""

    def upsert(self, stats: ReflectionStats) -> None:
        """Write ``stats`` for ``stats.user_id``, replacing any cached copy.

        Raises:
            ValueError: If ``stats.user_id`` is not set.
        """
        if not stats.user_id:
            raise ValueError("ReflectionStats must carry a user_id to be cached.")
        self.execute(
            """
            INSERT INTO reflection_stats (user_id, last_updated, document)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                last_updated = excluded.last_updated,
                document     = excluded.document;
            """,
            (stats.user_id, stats.last_updated.isoformat(), to_document(stats)),
        )

    def get(self, user_id: str) -> Optional[ReflectionStats]:
        row = self.fetchone("SELECT document FROM reflection_stats WHERE user_id = ?;", (user_id,))
        return from_document(row, ReflectionStats) if row else None


class DashboardStatsRepository(BaseRepository):
    """Per-(user, time range) ``DashboardStats`` cache."""

    def upsert(self, stats: DashboardStats) -> None:
        if not stats.user_id:
            raise ValueError("DashboardStats must carry a user_id to be cached.")
        self.execute(
            """
            INSERT INTO dashboard_stats (id, user_id, time_range, last_updated, document)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                last_updated = excluded.last_updated,
                document     = excluded.document;
            """,
            (
                stats.cache_key,
                stats.user_id,
                stats.time_range.value,
                stats.last_updated.isoformat(),
                to_document(stats),
            ),
        )

    def get(self, user_id: str, time_range: TimeRange | str) -> Optional[DashboardStats]:
        row = self.fetchone(
            "SELECT document FROM dashboard_stats WHERE id = ?;",
            (f"{user_id}_{TimeRange(time_range)}",),
        )
        return from_document(row, DashboardStats) if row else None

    def delete_for_user(self, user_id: str) -> int:
        """Drop every cached time range for ``user_id``; returns rows removed."""
        cursor = self.execute("DELETE FROM dashboard_stats WHERE user_id = ?;", (user_id,))
        return cursor.rowcount
