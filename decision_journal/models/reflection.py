"""
Reflection and reflection-statistics models.

``Reflection`` is the follow-up record a user writes after living with a
decision. ``ReflectionStats`` is the derived per-user summary, persisted as
a cache keyed by ``user_id`` and fully overwritten whenever the user's
reflections change.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from decision_journal.models.decision import new_id
from decision_journal.taxonomy.decision_taxonomy import (
    DecisionCategory,
    DecisionType,
    LearningType,
    ReflectionOutcome,
    ReflectionTrend,
)
from decision_journal.utils.time_utils import utcnow


class Learning(BaseModel):
    """A single lesson captured in a reflection."""

    model_config = ConfigDict(frozen=True)

    type: LearningType
    description: str


class Reflection(BaseModel):
    """Hindsight record for one decision.

    Attributes:
        id: Document id.
        user_id: Owning user.
        decision_id: The decision being reflected on. Not enforced unique;
            a decision may collect several reflections.
        decision_type: Copied from the decision at reflection time.
        decision_category: Copied from the decision at reflection time;
            drives ``satisfaction_by_category``.
        outcome: Satisfaction level.
        reflection_text: The user's free-text reflection.
        learnings: Zero or more typed lessons.
        would_repeat: Whether the user would make the same choice again.
        improvement_notes: What the user would do differently.
        ai_insights: Optional AI-generated insights.
        created_at: Creation timestamp; defines "recent" vs "older".
        updated_at: Last-modification timestamp.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    user_id: str
    decision_id: str
    decision_type: DecisionType = DecisionType.QUICK
    decision_category: DecisionCategory = DecisionCategory.OTHER
    outcome: ReflectionOutcome
    reflection_text: str = ""
    learnings: list[Learning] = Field(default_factory=list)
    would_repeat: bool = False
    improvement_notes: Optional[str] = None
    ai_insights: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


def _zero_counts() -> dict[ReflectionOutcome, int]:
    return {outcome: 0 for outcome in ReflectionOutcome}


def _zero_learnings() -> dict[LearningType, int]:
    return {learning_type: 0 for learning_type in LearningType}


class ReflectionStats(BaseModel):
    """Aggregate satisfaction statistics over a user's reflections.

    Attributes:
        user_id: Cache key; ``None`` for ad-hoc computations.
        total_reflections: Number of reflections summarised.
        satisfaction_counts: Reflection count per outcome (every outcome
            present, zero-filled).
        average_satisfaction: Mean 5..1 value; 0 when there are none.
        would_repeat_percentage: Share of reflections with
            ``would_repeat=True``, 0-100.
        satisfaction_by_category: Mean 5..1 value per decision category
            that has at least one reflection.
        reflection_trend: Recent-vs-older classification.
        learnings_by_type: Count of learnings per type (zero-filled).
        last_updated: When these stats were computed.
    """

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    total_reflections: int = 0
    satisfaction_counts: dict[ReflectionOutcome, int] = Field(default_factory=_zero_counts)
    average_satisfaction: float = 0.0
    would_repeat_percentage: float = 0.0
    satisfaction_by_category: dict[DecisionCategory, float] = Field(default_factory=dict)
    reflection_trend: ReflectionTrend = ReflectionTrend.STABLE
    learnings_by_type: dict[LearningType, int] = Field(default_factory=_zero_learnings)
    last_updated: datetime = Field(default_factory=utcnow)

    @field_validator("would_repeat_percentage")
    @classmethod
    def validate_percentage(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"would_repeat_percentage must be in [0, 100], got {v}.")
        return v
