"""
Decision writes: saving processed decisions and recording follow-ups.

A processed decision is saved as ``completed`` when the recommendation
matched one of its options, or as ``draft`` on a mismatch so the user can
rephrase and try again. Any decision write drops the owner's cached
dashboard summaries.
"""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional, Sequence

from decision_journal.ai.services import DeepReflectionOutcome, QuickDecisionOutcome
from decision_journal.db.repositories.decision_repo import DecisionRepository
from decision_journal.db.repositories.stats_repo import DashboardStatsRepository
from decision_journal.models.decision import Decision, UserFeedback
from decision_journal.models.recommendation import RecommendationResult
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionCategory,
    DecisionStatus,
)

logger = logging.getLogger(__name__)


def decision_from_result(
    user_id: str,
    title: str,
    category: DecisionCategory | str,
    result: RecommendationResult,
    description: str = "",
    context_factors: Sequence[str] = (),
    gut_feeling: Optional[str] = None,
    time_spent: Optional[int] = None,
    ai_generated: bool = True,
) -> Decision:
    """Build a ``Decision`` from a pipeline result.

    On a mismatch no option is selected, no recommendation is stored and
    the decision stays a draft.
    """
    matched = not result.is_mismatch and len(result.options) >= 2
    return Decision(
        user_id=user_id,
        title=title,
        description=description,
        category=DecisionCategory(category),
        type=result.decision_type,
        status=DecisionStatus.COMPLETED if matched else DecisionStatus.DRAFT,
        options=result.options,
        recommendation=result.recommended_option.text if matched and result.recommended_option else None,
        recommendation_reasoning=result.reasoning if matched else None,
        context_factors=list(context_factors),
        gut_feeling=gut_feeling,
        time_spent=time_spent,
        ai_generated=ai_generated,
    )


class DecisionJournal:
    """Decision persistence for one connection.

    Args:
        conn: Open SQLite connection with the schema applied.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.decisions = DecisionRepository(conn)
        self.dashboard_cache = DashboardStatsRepository(conn)

    def _saved(self, decision: Decision) -> Decision:
        self.decisions.create(decision)
        self.dashboard_cache.delete_for_user(decision.user_id)
        logger.info(
            "Saved %s decision %s (%s, %d options)",
            decision.type, decision.id, decision.status, len(decision.options),
        )
        return decision

    def save(self, decision: Decision) -> Decision:
        return self._saved(decision)

    def save_quick_decision(
        self,
        user_id: str,
        outcome: QuickDecisionOutcome,
        description: str = "",
        gut_feeling: Optional[str] = None,
        time_spent: Optional[int] = None,
    ) -> Decision:
        """Persist a processed quick decision."""
        return self._saved(decision_from_result(
            user_id=user_id,
            title=outcome.extracted.title,
            category=outcome.extracted.category,
            result=outcome.result,
            description=description,
            context_factors=outcome.extracted.context_factors,
            gut_feeling=gut_feeling,
            time_spent=time_spent,
        ))

    def save_deep_decision(
        self,
        user_id: str,
        outcome: DeepReflectionOutcome,
        time_spent: Optional[int] = None,
    ) -> Decision:
        """Persist a processed deep decision."""
        return self._saved(decision_from_result(
            user_id=user_id,
            title=outcome.extracted.title,
            category=outcome.extracted.category,
            result=outcome.result,
            description=outcome.extracted.description,
            time_spent=time_spent,
        ))

    def set_status(self, decision_id: str, status: DecisionStatus | str) -> Decision:
        """Change a decision's status.

        Raises:
            KeyError: If the decision does not exist.
            pydantic.ValidationError: If finalizing a decision with < 2 options.
        """
        updated = self.decisions.update(decision_id, status=DecisionStatus(status))
        self.dashboard_cache.delete_for_user(updated.user_id)
        return updated

    def record_feedback(
        self,
        decision_id: str,
        satisfaction_rating: int,
        followed_recommendation: bool,
        comment: Optional[str] = None,
    ) -> Decision:
        """Attach recommendation feedback to a decision.

        Raises:
            KeyError: If the decision does not exist.
            pydantic.ValidationError: If the rating is outside 1..5.
        """
        feedback = UserFeedback(
            satisfaction_rating=satisfaction_rating,
            followed_recommendation=followed_recommendation,
            comment=comment,
        )
        updated = self.decisions.update(decision_id, user_feedback=feedback)
        self.dashboard_cache.delete_for_user(updated.user_id)
        return updated
