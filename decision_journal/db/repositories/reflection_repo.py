"""
Repository for ``Reflection`` documents.
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
from decision_journal.models.reflection import Reflection
from decision_journal.taxonomy.decision_taxonomy import ReflectionOutcome
from decision_journal.utils.time_utils import utcnow

logger = logging.getLogger(__name__)

# Identity fields fixed at creation.
IMMUTABLE_FIELDS: frozenset[str] = frozenset({"id", "user_id", "decision_id", "created_at"})

_INSERT_SQL = """
INSERT INTO reflections (
    id, user_id, decision_id, outcome, created_ts, updated_ts, document
) VALUES (?, ?, ?, ?, ?, ?, ?);
"""


def _params(reflection: Reflection) -> tuple:
    return (
        reflection.id,
        reflection.user_id,
        reflection.decision_id,
        reflection.outcome.value,
        to_ts(reflection.created_at),
        to_ts(reflection.updated_at),
        to_document(reflection),
    )


class ReflectionRepository(BaseRepository):
    """CRUD access to the ``reflections`` table."""

    def create(self, reflection: Reflection) -> str:
        """Insert a reflection and return its id."""
        self.execute(_INSERT_SQL, _params(reflection))
        return reflection.id

    def create_many(self, reflections: Sequence[Reflection]) -> int:
        """Bulk insert; returns the number of rows written."""
        if not reflections:
            return 0
        self.executemany(_INSERT_SQL, [_params(r) for r in reflections])
        return len(reflections)

    def get_by_id(self, reflection_id: str) -> Optional[Reflection]:
        row = self.fetchone("SELECT document FROM reflections WHERE id = ?;", (reflection_id,))
        return from_document(row, Reflection) if row else None

    def list_by_user(
        self,
        user_id: str,
        outcome: Optional[ReflectionOutcome | str] = None,
        limit: Optional[int] = None,
    ) -> list[Reflection]:
        """List a user's reflections, newest first."""
        sql = "SELECT document FROM reflections WHERE user_id = ?"
        params: list[Any] = [user_id]
        if outcome is not None:
            sql += " AND outcome = ?"
            params.append(str(outcome))
        sql += " ORDER BY created_ts DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [from_document(r, Reflection) for r in self.fetchall(sql + ";", tuple(params))]

    def list_by_decision(self, decision_id: str) -> list[Reflection]:
        """All reflections on one decision, newest first."""
        rows = self.fetchall(
            """
            SELECT document FROM reflections
            WHERE decision_id = ?
            ORDER BY created_ts DESC;
            """,
            (decision_id,),
        )
        return [from_document(r, Reflection) for r in rows]

    def update(self, reflection_id: str, **changes: Any) -> Reflection:
        """Apply ``changes`` to a stored reflection and return the new version.

        Raises:
            ValueError: If an identity field is given.
            KeyError: If no reflection has ``reflection_id``.
            pydantic.ValidationError: If the result fails validation.
        """
        illegal = set(changes) & IMMUTABLE_FIELDS
        if illegal:
            raise ValueError(f"Cannot update immutable reflection field(s): {sorted(illegal)}.")
        current = self.get_by_id(reflection_id)
        if current is None:
            raise KeyError(f"Reflection not found: {reflection_id}")

        data = current.model_dump()
        data.update(changes)
        data["updated_at"] = utcnow()
        updated = Reflection.model_validate(data)

        self.execute(
            """
            UPDATE reflections
            SET outcome = ?, updated_ts = ?, document = ?
            WHERE id = ?;
            """,
            (updated.outcome.value, to_ts(updated.updated_at), to_document(updated), reflection_id),
        )
        return updated

    def delete(self, reflection_id: str) -> Optional[Reflection]:
        """Delete a reflection, returning the removed document (or ``None``)."""
        existing = self.get_by_id(reflection_id)
        if existing is None:
            return None
        self.execute("DELETE FROM reflections WHERE id = ?;", (reflection_id,))
        return existing
