"""
Repository for ``Decision`` documents.

Decisions are history: after creation only ``MUTABLE_FIELDS`` may change.
``update()`` re-validates the whole document, so model invariants (one
selected option, finalized decisions have >= 2 options) hold after every
write.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from decision_journal.db.repositories.base import (
    BaseRepository,
    from_document,
    to_document,
    to_ts,
)
from decision_journal.models.decision import Decision
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionCategory,
    DecisionStatus,
    DecisionType,
)
from decision_journal.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

MUTABLE_FIELDS: frozenset[str] = frozenset({
    "status",
    "recommendation",
    "recommendation_reasoning",
    "user_feedback",
    "options",
    "time_spent",
})

_INSERT_SQL = """
INSERT INTO decisions (
    id, user_id, type, category, status, created_ts, updated_ts, document
) VALUES (?, ?, ?, ?, ?, ?, ?, ?);
"""


def _params(decision: Decision) -> tuple:
    return (
        decision.id,
        decision.user_id,
        decision.type.value,
        decision.category.value,
        decision.status.value,
        to_ts(decision.created_at),
        to_ts(decision.updated_at),
        to_document(decision),
    )


class DecisionRepository(BaseRepository):
    """CRUD access to the ``decisions`` table."""

    def create(self, decision: Decision) -> str:
        """Insert a decision and return its id.

        Raises:
            sqlite3.IntegrityError: If a decision with the same id exists.
        """
        self.execute(_INSERT_SQL, _params(decision))
        return decision.id

    def create_many(self, decisions: Sequence[Decision]) -> int:
        """Bulk insert; returns the number of rows written."""
        if not decisions:
            return 0
        self.executemany(_INSERT_SQL, [_params(d) for d in decisions])
        return len(decisions)

    def get_by_id(self, decision_id: str) -> Optional[Decision]:
        row = self.fetchone("SELECT document FROM decisions WHERE id = ?;", (decision_id,))
        return from_document(row, Decision) if row else None

    def list_by_user(
        self,
        user_id: str,
        decision_type: Optional[DecisionType | str] = None,
        status: Optional[DecisionStatus | str] = None,
        category: Optional[DecisionCategory | str] = None,
        limit: Optional[int] = None,
    ) -> list[Decision]:
        """List a user's decisions, newest first.

        Args:
            user_id: Owner.
            decision_type: Optional type filter.
            status: Optional status filter.
            category: Optional category filter.
            limit: Maximum rows to return.
        """
        sql = "SELECT document FROM decisions WHERE user_id = ?"
        params: list[Any] = [user_id]
        for column, value in (("type", decision_type), ("status", status), ("category", category)):
            if value is not None:
                sql += f" AND {column} = ?"
                params.append(str(value))
        sql += " ORDER BY created_ts DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [from_document(r, Decision) for r in self.fetchall(sql + ";", tuple(params))]

    def update(self, decision_id: str, **changes: Any) -> Decision:
        """Apply ``changes`` to a stored decision and return the new version.

        Raises:
            ValueError: If a field outside ``MUTABLE_FIELDS`` is given.
            KeyError: If no decision has ``decision_id``.
            pydantic.ValidationError: If the result violates model invariants.
        """
        illegal = set(changes) - MUTABLE_FIELDS
        if illegal:
            raise ValueError(
                f"Cannot update immutable decision field(s): {sorted(illegal)}. "
                f"Mutable fields: {sorted(MUTABLE_FIELDS)}."
            )
        current = self.get_by_id(decision_id)
        if current is None:
            raise KeyError(f"Decision not found: {decision_id}")

        data = current.model_dump()
        data.update(changes)
        data["updated_at"] = utcnow()
        updated = Decision.model_validate(data)

        self.execute(
            """
            UPDATE decisions
            SET status = ?, updated_ts = ?, document = ?
            WHERE id = ?;
            """,
            (updated.status.value, to_ts(updated.updated_at), to_document(updated), decision_id),
        )
        logger.debug("Updated decision %s: %s", decision_id, sorted(changes))
        return updated

    def delete(self, decision_id: str) -> bool:
        """Delete a decision. Returns ``True`` if a row was removed."""
        cursor = self.execute("DELETE FROM decisions WHERE id = ?;", (decision_id,))
        return cursor.rowcount > 0
