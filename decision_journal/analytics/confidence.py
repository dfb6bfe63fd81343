"""
Confidence scoring for a recommended option.

Score formula (pros/cons form)
------------------------------
    total = pros + cons
    total == 0  → 70 (neutral)
    otherwise   → clamp(round(pros / total * 100), floor, 95)

Floors by decision type
-----------------------
    quick : 60   low-stakes choices never show a discouraging number
    deep  : 50   deep reflections may show genuine uncertainty

The values-alignment form clamps an alignment percentage into the same
range. ``round`` is round-half-up here (``0.5 → 1``), not Python's
banker's rounding.

Labels
------
    score >= 85       → "High confidence"
    70 <= score < 85  → "Moderate confidence"
    score < 70        → "Consider carefully"
"""

from __future__ import annotations

import math
from typing import Sequence

from decision_journal.models.decision import Decision
from decision_journal.taxonomy.decision_taxonomy import DecisionType

NEUTRAL_SCORE = 70
UPPER_BOUND = 95
QUICK_FLOOR = 60
DEEP_FLOOR = 50
# Shown for a saved decision that has no selected option.
UNSELECTED_SCORE = 50

HIGH_THRESHOLD = 85
MODERATE_THRESHOLD = 70

HIGH_LABEL = "High confidence"
MODERATE_LABEL = "Moderate confidence"
LOW_LABEL = "Consider carefully"


def _count(value: int | Sequence[str]) -> int:
    return value if isinstance(value, int) else len(value)


def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def floor_for(decision_type: DecisionType | str) -> int:
    """Return the lower clamp bound for ``decision_type``."""
    return QUICK_FLOOR if DecisionType(decision_type) == DecisionType.QUICK else DEEP_FLOOR


def clamp_score(score: float, decision_type: DecisionType | str = DecisionType.DEEP) -> int:
    """Round and clamp a raw percentage into ``[floor, 95]``."""
    return max(floor_for(decision_type), min(UPPER_BOUND, _round_half_up(score)))


def score_from_pros_cons(
    pros: int | Sequence[str],
    cons: int | Sequence[str],
    decision_type: DecisionType | str = DecisionType.DEEP,
) -> int:
    """Confidence percentage from an option's pros/cons shape.

    Args:
        pros: Pro count, or the list of pros.
        cons: Con count, or the list of cons.
        decision_type: Selects the clamp floor (quick 60, deep 50).

    Returns:
        Integer percentage in ``[floor, 95]``; 70 when there are no
        pros or cons at all.
    """
    n_pros = _count(pros)
    total = n_pros + _count(cons)
    if total == 0:
        return NEUTRAL_SCORE
    return clamp_score(n_pros / total * 100, decision_type)


def score_from_alignment(
    alignment_percent: float,
    decision_type: DecisionType | str = DecisionType.DEEP,
) -> int:
    """Confidence percentage from a 0-100 values-alignment figure."""
    return clamp_score(alignment_percent, decision_type)


def confidence_label(score: int) -> str:
    """Qualitative label for a confidence score."""
    if score >= HIGH_THRESHOLD:
        return HIGH_LABEL
    if score >= MODERATE_THRESHOLD:
        return MODERATE_LABEL
    return LOW_LABEL


def decision_confidence(decision: Decision) -> int:
    """Confidence of a saved decision's selected option.

    The detail view scores every saved decision against the 50 floor,
    whatever its type.

    Returns:
        Score in ``[50, 95]``, or 50 when no option is selected.
    """
    option = decision.selected_option
    if option is None:
        return UNSELECTED_SCORE
    return score_from_pros_cons(option.pros, option.cons, DecisionType.DEEP)
