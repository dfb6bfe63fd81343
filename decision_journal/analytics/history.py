"""
Decision history queries: search, filter, sort and header summary.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Optional, Sequence

from decision_journal.analytics.activity import count_recent
from decision_journal.models.analytics import HistorySummary
from decision_journal.models.decision import Decision
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionCategory,
    DecisionStatus,
    DecisionType,
    HistorySort,
)
from decision_journal.utils.time_utils import to_local

RECENT_DAYS = 7


def filter_decisions(
    decisions: Sequence[Decision],
    search: Optional[str] = None,
    category: Optional[DecisionCategory | str] = None,
    status: Optional[DecisionStatus | str] = None,
    decision_type: Optional[DecisionType | str] = None,
    sort: HistorySort | str = HistorySort.NEWEST,
) -> list[Decision]:
    """Filter and order a decision list for the history view.

    Args:
        decisions: Decisions to query.
        search: Case-insensitive substring matched against title and
            description. Blank means no search.
        category: Keep only this category (``None`` = all).
        status: Keep only this status (``None`` = all).
        decision_type: Keep only this type (``None`` = all).
        sort: ``newest`` / ``oldest`` by ``created_at``, or ``title``
            (case-insensitive).

    Returns:
        A new list.
    """
    result = list(decisions)

    if search and search.strip():
        query = search.lower()
        result = [
            d for d in result
            if query in d.title.lower() or query in d.description.lower()
        ]
    if category is not None:
        result = [d for d in result if d.category == DecisionCategory(category)]
    if status is not None:
        result = [d for d in result if d.status == DecisionStatus(status)]
    if decision_type is not None:
        result = [d for d in result if d.type == DecisionType(decision_type)]

    sort = HistorySort(sort)
    if sort == HistorySort.TITLE:
        result.sort(key=lambda d: d.title.casefold())
    else:
        result.sort(
            key=lambda d: to_local(d.created_at),
            reverse=sort == HistorySort.NEWEST,
        )
    return result


def summarize_history(
    decisions: Sequence[Decision],
    as_of: Optional[datetime] = None,
    recent_days: int = RECENT_DAYS,
) -> HistorySummary:
    """Header counts for the history view.

    ``completion_rate`` is the rounded percentage of decisions with status
    ``completed``; ``recent`` counts decisions from the last ``recent_days``
    days (7 by default).
    """
    total = len(decisions)
    completed = sum(1 for d in decisions if d.status == DecisionStatus.COMPLETED)
    return HistorySummary(
        total=total,
        quick=sum(1 for d in decisions if d.type == DecisionType.QUICK),
        deep=sum(1 for d in decisions if d.type == DecisionType.DEEP),
        completed=completed,
        completion_rate=math.floor(completed / total * 100 + 0.5) if total else 0,
        recent=count_recent(decisions, as_of, recent_days),
    )
