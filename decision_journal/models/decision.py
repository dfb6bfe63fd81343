"""
Decision and option models.

A ``Decision`` is a user-recorded choice between two or more ``Option``
objects, optionally carrying an AI recommendation. Decisions are saved once
and then treated as history: only the status, recommendation, feedback and
option-selection fields are ever updated (see ``DecisionRepository.update``).

Invariants enforced at construction:
  - At most one option in a decision has ``selected=True``.
  - A finalized decision (status ``completed`` or ``implemented``) has at
    least two options.

Both models are frozen. Use ``model_copy(update=...)`` to derive a changed
copy, e.g. when the recommendation pipeline marks an option as selected.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from decision_journal.taxonomy.decision_taxonomy import (
    FINALIZED_STATUSES,
    DecisionCategory,
    DecisionStatus,
    DecisionType,
)
from decision_journal.utils.time_utils import utcnow


def new_id() -> str:
    """Return a fresh random identifier string."""
    return uuid.uuid4().hex


class Option(BaseModel):
    """One candidate choice within a decision.

    Attributes:
        id: Option identifier, unique within its decision.
        text: Display text of the option, e.g. ``"Go out"``.
        selected: Whether this option is the chosen / recommended one.
        pros: Supporting points.
        cons: Opposing points.
        values_alignment: Deep decisions only; 0-100 fit with the user's
            stated values.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    text: str
    selected: bool = False
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    values_alignment: Optional[float] = None

    @field_validator("values_alignment")
    @classmethod
    def validate_alignment(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not 0.0 <= v <= 100.0:
            raise ValueError(f"values_alignment must be in [0, 100], got {v}.")
        return v


class UserFeedback(BaseModel):
    """User's rating of a recommendation after acting on it."""

    model_config = ConfigDict(frozen=True)

    satisfaction_rating: int
    followed_recommendation: bool
    comment: Optional[str] = None

    @field_validator("satisfaction_rating")
    @classmethod
    def validate_rating(cls, v: int) -> int:
        if not 1 <= v <= 5:
            raise ValueError(f"satisfaction_rating must be in [1, 5], got {v}.")
        return v


class Decision(BaseModel):
    """A user-recorded choice with candidate options.

    Attributes:
        id: Document id.
        user_id: Owning user.
        title: Short title, e.g. ``"Dinner plans"``.
        description: Free-text description as the user entered it.
        category: Life area.
        type: ``quick`` or ``deep``.
        status: Lifecycle status.
        options: Candidate options (order is significant: the first option
            is the default when a recommendation cannot be matched).
        recommendation: AI recommendation text, if any.
        recommendation_reasoning: AI reasoning text, if any.
        context_factors: Free-text factors the user listed.
        gut_feeling: The user's instinctive preference, if recorded.
        user_feedback: Post-decision feedback on the recommendation.
        time_spent: Seconds spent making the decision.
        tags: Free-form labels.
        ai_generated: True when options came from AI extraction.
        created_at: Creation timestamp.
        updated_at: Last-modification timestamp.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    user_id: str
    title: str
    description: str = ""
    category: DecisionCategory = DecisionCategory.OTHER
    type: DecisionType
    status: DecisionStatus = DecisionStatus.DRAFT
    options: list[Option] = Field(default_factory=list)
    recommendation: Optional[str] = None
    recommendation_reasoning: Optional[str] = None
    context_factors: list[str] = Field(default_factory=list)
    gut_feeling: Optional[str] = None
    user_feedback: Optional[UserFeedback] = None
    time_spent: Optional[int] = None
    tags: list[str] = Field(default_factory=list)
    ai_generated: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("time_spent")
    @classmethod
    def validate_time_spent(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("time_spent must be non-negative.")
        return v

    @model_validator(mode="after")
    def validate_options(self) -> "Decision":
        selected = [o for o in self.options if o.selected]
        if len(selected) > 1:
            raise ValueError(
                f"At most one option may be selected, got {len(selected)} "
                f"({', '.join(o.text for o in selected)})."
            )
        if self.status in FINALIZED_STATUSES and len(self.options) < 2:
            raise ValueError(
                f"A {self.status} decision needs at least 2 options, "
                f"got {len(self.options)}."
            )
        return self

    @property
    def is_finalized(self) -> bool:
        return self.status in FINALIZED_STATUSES

    @property
    def selected_option(self) -> Optional[Option]:
        """The selected option, or ``None`` if nothing is selected."""
        return next((o for o in self.options if o.selected), None)
