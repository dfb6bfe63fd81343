"""
Models for the language-model collaborator boundary.

Structured LLM output is validated into one of two variants:

  ``Parsed[T]``     kind="success"      : ``value`` is a validated ``T``.
  ``ParseFailure``  kind="parse_failure": the raw text and the reason it
                                           could not be validated.

``ExtractionResult`` is the tagged union of the two. Callers branch on
``result.kind`` (or ``isinstance``) and never have to probe for missing
fields on a half-parsed dict.

The ``Extracted*`` models are the schemas the LLM is asked to fill.
"""

from __future__ import annotations

from typing import Generic, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from decision_journal.taxonomy.decision_taxonomy import (
    DecisionCategory,
    LearningType,
    ReflectionOutcome,
)

T = TypeVar("T")


# ── Result variants ────────────────────────────────────────────────────────────


class Parsed(BaseModel, Generic[T]):
    """Successfully validated structured output."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    value: T
    raw_text: str = ""


class ParseFailure(BaseModel):
    """Structured output that could not be parsed or validated."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["parse_failure"] = "parse_failure"
    raw_text: str
    error: str


ExtractionResult = Union[Parsed[T], ParseFailure]


# ── Recommendation output ─────────────────────────────────────────────────────


class AIRecommendation(BaseModel):
    """Free-text recommendation as produced by the AI collaborator.

    Attributes:
        recommendation_text: The option the model recommends, in its words.
        reasoning: Short justification.
        full_analysis: The complete analysis text, when available.
    """

    model_config = ConfigDict(frozen=True)

    recommendation_text: str
    reasoning: str = ""
    full_analysis: Optional[str] = None


class RecommendedOption(BaseModel):
    """Schema for the structured recommendation extraction step."""

    model_config = ConfigDict(frozen=True)

    recommended_option: str
    reasoning: str


# ── Extraction schemas ────────────────────────────────────────────────────────


class ExtractedOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)


class ExtractedDecision(BaseModel):
    """Quick decision extracted from a free-text description."""

    model_config = ConfigDict(frozen=True)

    title: str
    category: DecisionCategory = DecisionCategory.OTHER
    options: list[ExtractedOption]
    context_factors: list[str] = Field(default_factory=list)

    @field_validator("options")
    @classmethod
    def validate_options(cls, v: list[ExtractedOption]) -> list[ExtractedOption]:
        if not v:
            raise ValueError("At least one option must be extracted.")
        return v


class ExtractedDeepOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    values_alignment: float = Field(ge=0.0, le=100.0)


class ExtractedDeepReflection(BaseModel):
    """Deep decision extracted from a free-text description."""

    model_config = ConfigDict(frozen=True)

    title: str
    category: DecisionCategory = DecisionCategory.OTHER
    description: str = ""
    timeframe: Optional[str] = None
    importance: str = ""
    options: list[ExtractedDeepOption] = Field(min_length=2)
    personal_values: list[str] = Field(min_length=1)
    emotional_context: Optional[str] = None
    stakeholders: list[str] = Field(default_factory=list)
    potential_biases: list[str] = Field(default_factory=list)


class ExtractedLearning(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: LearningType
    description: str


class ExtractedLearnings(BaseModel):
    """Outcome and learnings extracted from a reflection text."""

    model_config = ConfigDict(frozen=True)

    outcome: ReflectionOutcome
    would_repeat: bool
    learnings: list[ExtractedLearning] = Field(min_length=1, max_length=3)
    improvement_notes: Optional[str] = None


class ReflectionPrompts(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompts: list[str] = Field(min_length=3, max_length=5)


class DeepAnalysis(BaseModel):
    """Sectioned analysis of a deep decision."""

    model_config = ConfigDict(frozen=True)

    recommendation: str
    reasoning: str
    key_insights: list[str] = Field(default_factory=list)
    cautionary_notes: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
