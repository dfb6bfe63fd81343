"""
Decision and reflection taxonomy.

Every enum here is a ``StrEnum`` so values round-trip through JSON documents
and SQLite columns as plain strings.

Satisfaction scale: ``ReflectionOutcome`` levels map onto a fixed numeric
scale via ``SATISFACTION_VALUES`` (very_satisfied=5 ... very_unsatisfied=1).
The mapping is the canonical integrity contract for reflection analytics:
every outcome must have exactly one value and the values must be 5..1.

This module has NO imports from any other ``decision_journal`` package.
"""

from enum import StrEnum


class DecisionType(StrEnum):
    """How much deliberation the user put into a decision."""

    QUICK = "quick"
    """Low-stakes, fast choices: where to eat, what to watch."""

    DEEP = "deep"
    """Guided reflection with values alignment and follow-up questions."""


class DecisionCategory(StrEnum):
    """Life area a decision belongs to."""

    FOOD = "food"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    CAREER = "career"
    EDUCATION = "education"
    RELATIONSHIP = "relationship"
    HEALTH = "health"
    FINANCE = "finance"
    TRAVEL = "travel"
    LIFESTYLE = "lifestyle"
    TECHNOLOGY = "technology"
    OTHER = "other"


class DecisionStatus(StrEnum):
    """Lifecycle status of a decision."""

    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    IMPLEMENTED = "implemented"
    ARCHIVED = "archived"


# Decisions in these states must carry a full option set.
FINALIZED_STATUSES: frozenset[DecisionStatus] = frozenset(
    {DecisionStatus.COMPLETED, DecisionStatus.IMPLEMENTED}
)


class ReflectionOutcome(StrEnum):
    """How satisfied the user was with a decision in hindsight."""

    VERY_SATISFIED = "very_satisfied"
    SATISFIED = "satisfied"
    NEUTRAL = "neutral"
    UNSATISFIED = "unsatisfied"
    VERY_UNSATISFIED = "very_unsatisfied"


SATISFACTION_VALUES: dict[ReflectionOutcome, int] = {
    ReflectionOutcome.VERY_SATISFIED:   5,
    ReflectionOutcome.SATISFIED:        4,
    ReflectionOutcome.NEUTRAL:          3,
    ReflectionOutcome.UNSATISFIED:      2,
    ReflectionOutcome.VERY_UNSATISFIED: 1,
}


def satisfaction_value(outcome: ReflectionOutcome | str) -> int:
    """Return the 5..1 numeric satisfaction value for an outcome.

    Raises:
        ValueError: If ``outcome`` is not a known ``ReflectionOutcome``.
    """
    return SATISFACTION_VALUES[ReflectionOutcome(outcome)]


class LearningType(StrEnum):
    """Kind of lesson captured in a reflection."""

    INSIGHT = "insight"
    PREFERENCE = "preference"
    PATTERN = "pattern"
    IMPROVEMENT = "improvement"


class ReflectionTrend(StrEnum):
    """Direction of recent satisfaction relative to older reflections."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class TimeRange(StrEnum):
    """Dashboard look-back window."""

    ALL_TIME = "all_time"
    YEAR = "year"
    MONTH = "month"
    WEEK = "week"
    DAY = "day"


class HistorySort(StrEnum):
    """Ordering applied to the decision history list."""

    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE = "title"
