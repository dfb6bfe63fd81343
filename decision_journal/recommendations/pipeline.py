"""
Recommendation pipeline: AI output → UI-ready ``RecommendationResult``.

Steps
-----
1. Resolve ``ai_output.recommendation_text`` against the option list with
   ``match_option`` (exact → substring → token overlap → default).
2. Default match (nothing matched with confidence) → mismatch:
   ``is_mismatch=True``, no option is marked selected, no confidence.
   The caller warns the user and asks them to rephrase.
3. Confident match → copy the option list with ``selected=True`` on the
   resolved option only, then score that option's pros/cons with the
   decision type's clamp floor.

Pure composition over ``text_matcher`` and ``confidence``; the AI output is
an opaque input.
"""

from __future__ import annotations

import logging
from typing import Sequence

from decision_journal.analytics.confidence import confidence_label, score_from_pros_cons
from decision_journal.analytics.text_matcher import MatchMethod, match_option
from decision_journal.models.ai import AIRecommendation
from decision_journal.models.decision import Option
from decision_journal.models.recommendation import RecommendationResult
from decision_journal.taxonomy.decision_taxonomy import DecisionType

logger = logging.getLogger(__name__)


def mark_selected(options: Sequence[Option], option_id: str) -> list[Option]:
    """Copy ``options`` with ``selected`` set on ``option_id`` and cleared elsewhere."""
    return [o.model_copy(update={"selected": o.id == option_id}) for o in options]


def build_result(
    ai_output: AIRecommendation,
    options: Sequence[Option],
    decision_type: DecisionType | str,
) -> RecommendationResult:
    """Reconcile an AI recommendation with the user's options.

    Args:
        ai_output: Recommendation text and reasoning from the AI collaborator.
        options: The decision's options, in display order.
        decision_type: Quick or deep; selects the confidence floor.

    Returns:
        ``RecommendationResult``. ``is_mismatch`` is True when the text could
        not be tied to an option (including an empty option list).
    """
    decision_type = DecisionType(decision_type)
    match = match_option(ai_output.recommendation_text, options)

    if match is None or not match.is_confident:
        logger.warning(
            "Recommendation %r did not match any of %d option(s); flagging mismatch",
            ai_output.recommendation_text, len(options),
        )
        return RecommendationResult(
            recommended_option=match.option if match else None,
            options=list(options),
            match_method=match.method if match else MatchMethod.DEFAULT,
            overlap_count=match.overlap if match else 0,
            is_mismatch=True,
            reasoning=ai_output.reasoning,
            recommendation_text=ai_output.recommendation_text,
            decision_type=decision_type,
        )

    updated = mark_selected(options, match.option.id)
    selected = next(o for o in updated if o.selected)
    score = score_from_pros_cons(selected.pros, selected.cons, decision_type)

    logger.debug(
        "Recommendation resolved to %r via %s (confidence %d)",
        selected.text, match.method, score,
    )
    return RecommendationResult(
        recommended_option=selected,
        options=updated,
        match_method=match.method,
        overlap_count=match.overlap,
        is_mismatch=False,
        confidence=score,
        confidence_label=confidence_label(score),
        reasoning=ai_output.reasoning,
        recommendation_text=ai_output.recommendation_text,
        decision_type=decision_type,
    )
