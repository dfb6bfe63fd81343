"""
Reflection analytics: satisfaction distribution, averages and trend.

Satisfaction scale
------------------
    very_satisfied=5  satisfied=4  neutral=3  unsatisfied=2  very_unsatisfied=1

Trend classification
--------------------
Only computed once there are at least ``min_reflections`` (5) reflections;
below that the trend is ``stable``.

    recent = the ``window`` (3) most recently created reflections
    older  = the ``window`` (3) least recently created reflections

    mean(recent) > mean(older) + 0.5  → improving
    mean(recent) < mean(older) - 0.5  → declining
    otherwise                         → stable

With 5 reflections the two windows share the middle reflection. That
overlap is accepted as an approximation; the windows are NOT shrunk to
keep them disjoint.

The result is a full recompute over the entire history (O(n)); callers
persist it as a per-user cache and overwrite it on every reflection write.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from datetime import datetime
from typing import Optional, Sequence

from decision_journal.models.reflection import Reflection, ReflectionStats
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionCategory,
    LearningType,
    ReflectionOutcome,
    ReflectionTrend,
    satisfaction_value,
)
from decision_journal.utils.time_utils import to_local, utcnow

logger = logging.getLogger(__name__)

TREND_MIN_REFLECTIONS = 5
TREND_WINDOW = 3
TREND_THRESHOLD = 0.5


def _mean(values: Sequence[int]) -> float:
    return sum(values) / len(values) if values else 0.0


def classify_trend(
    recent_avg: float,
    older_avg: float,
    threshold: float = TREND_THRESHOLD,
) -> ReflectionTrend:
    """Classify recent vs older average satisfaction."""
    if recent_avg > older_avg + threshold:
        return ReflectionTrend.IMPROVING
    if recent_avg < older_avg - threshold:
        return ReflectionTrend.DECLINING
    return ReflectionTrend.STABLE


def compute_trend(
    reflections: Sequence[Reflection],
    min_reflections: int = TREND_MIN_REFLECTIONS,
    window: int = TREND_WINDOW,
    threshold: float = TREND_THRESHOLD,
) -> ReflectionTrend:
    """Trend over ``reflections`` (any order; sorted by ``created_at`` here)."""
    if len(reflections) < min_reflections:
        return ReflectionTrend.STABLE

    newest_first = sorted(reflections, key=lambda r: to_local(r.created_at), reverse=True)
    recent = [satisfaction_value(r.outcome) for r in newest_first[:window]]
    older = [satisfaction_value(r.outcome) for r in newest_first[-window:]]

    recent_avg, older_avg = _mean(recent), _mean(older)
    trend = classify_trend(recent_avg, older_avg, threshold)
    logger.debug(
        "Trend over %d reflections: recent=%.2f older=%.2f → %s",
        len(reflections), recent_avg, older_avg, trend,
    )
    return trend


def compute_stats(
    reflections: Sequence[Reflection],
    user_id: Optional[str] = None,
    now: Optional[datetime] = None,
    min_reflections: int = TREND_MIN_REFLECTIONS,
    window: int = TREND_WINDOW,
    threshold: float = TREND_THRESHOLD,
) -> ReflectionStats:
    """Compute satisfaction statistics over a user's full reflection history.

    Args:
        reflections: All of the user's reflections, in any order.
        user_id: Owner, recorded on the result as the cache key.
        now: Timestamp for ``last_updated``; defaults to ``utcnow()``.
        min_reflections: Minimum history length before a trend is computed.
        window: Reflections per recent / older window.
        threshold: Average delta required to call a trend.

    Returns:
        ``ReflectionStats``. Empty input gives zero counts, zero averages
        and a ``stable`` trend.
    """
    last_updated = now or utcnow()
    if not reflections:
        return ReflectionStats(user_id=user_id, last_updated=last_updated)

    satisfaction_counts = {outcome: 0 for outcome in ReflectionOutcome}
    learnings_by_type = {learning_type: 0 for learning_type in LearningType}
    by_category: dict[DecisionCategory, list[int]] = defaultdict(list)
    values: list[int] = []
    would_repeat = 0

    for reflection in reflections:
        value = satisfaction_value(reflection.outcome)
        values.append(value)
        satisfaction_counts[reflection.outcome] += 1
        by_category[reflection.decision_category].append(value)
        if reflection.would_repeat:
            would_repeat += 1
        for learning in reflection.learnings:
            learnings_by_type[learning.type] += 1

    return ReflectionStats(
        user_id=user_id,
        total_reflections=len(reflections),
        satisfaction_counts=satisfaction_counts,
        average_satisfaction=_mean(values),
        would_repeat_percentage=would_repeat / len(reflections) * 100,
        satisfaction_by_category={cat: _mean(vals) for cat, vals in by_category.items()},
        reflection_trend=compute_trend(reflections, min_reflections, window, threshold),
        learnings_by_type=learnings_by_type,
        last_updated=last_updated,
    )
