"""
Recommendation result model.

``RecommendationResult`` is what the recommendation pipeline hands to the
presentation layer: the option set (with the recommended option marked
``selected`` when the match was confident), the confidence score and label,
and an ``is_mismatch`` flag telling the caller to warn the user instead of
highlighting anything.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from decision_journal.models.decision import Option
from decision_journal.taxonomy.decision_taxonomy import DecisionType


class RecommendationResult(BaseModel):
    """UI-ready recommendation.

    Attributes:
        recommended_option: The resolved option; on a mismatch this is the
            low-confidence default and is NOT marked selected.
        options: The option set, with ``selected`` set on the recommended
            option when the match was confident.
        match_method: How the recommendation text was resolved
            (``exact``, ``substring``, ``token_overlap``, ``default``).
        overlap_count: Shared-word count for token-overlap matches.
        is_mismatch: True when the recommendation could not be tied to an
            option with confidence.
        confidence: 50-95 score for the selected option; ``None`` on mismatch.
        confidence_label: Qualitative label; ``None`` on mismatch.
        reasoning: AI reasoning text.
        recommendation_text: The raw AI recommendation text.
        decision_type: Quick or deep; selects the confidence floor.
    """

    model_config = ConfigDict(frozen=True)

    recommended_option: Optional[Option] = None
    options: list[Option] = Field(default_factory=list)
    match_method: str
    overlap_count: int = 0
    is_mismatch: bool
    confidence: Optional[int] = None
    confidence_label: Optional[str] = None
    reasoning: str = ""
    recommendation_text: str = ""
    decision_type: DecisionType = DecisionType.QUICK
