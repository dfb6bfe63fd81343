"""
Decision assistant: the AI-backed features of the journal.

Quick decisions
---------------
  extract_decision_options  free text → title, category, options, pros/cons
  generate_recommendation   free-text analysis, then a structured pick
                            constrained to the option texts
  process_quick_decision    both of the above + the recommendation pipeline

Deep decisions
--------------
  extract_deep_reflection   free text → options with values alignment
  generate_deep_analysis    sectioned analysis (recommendation, reasoning,
                            insights, cautions, next steps)
  process_deep_reflection   both of the above + the recommendation pipeline
  generate_follow_up_questions

Reflections
-----------
  generate_reflection_prompts, extract_learnings, generate_insights,
  process_reflection

Failure policy
--------------
- Extraction (options, deep data, learnings, prompts) has no sensible
  fallback: parse failures and HTTP errors raise ``AIServiceError``
  chained from the cause.
- The structured recommendation pick falls back to the first option whose
  text appears in the analysis, else the first option.
- Deep analysis falls back to the highest values-alignment option with
  canned guidance; follow-up questions fall back to a fixed list.
Every fallback is logged at WARNING with its cause.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

import httpx

from decision_journal.ai import prompts
from decision_journal.ai.client import BaseLLMClient
from decision_journal.ai.parsing import (
    parse_deep_analysis,
    parse_numbered_questions,
    split_insights,
)
from decision_journal.models.ai import (
    AIRecommendation,
    DeepAnalysis,
    ExtractedDecision,
    ExtractedDeepOption,
    ExtractedDeepReflection,
    ExtractedLearnings,
    ExtractedOption,
    ParseFailure,
    RecommendedOption,
    ReflectionPrompts,
)
from decision_journal.models.decision import Decision, Option
from decision_journal.models.recommendation import RecommendationResult
from decision_journal.recommendations.pipeline import build_result
from decision_journal.taxonomy.decision_taxonomy import DecisionCategory, DecisionType

logger = logging.getLogger(__name__)

DEFAULT_PRO = "Viable option"
DEFAULT_CON = "Consider trade-offs"
FALLBACK_REASONING = "Based on the analysis of your options, this seems to be the best choice."

FALLBACK_DEEP_REASONING = (
    "Based on the values alignment scores and the balance of pros and cons, this option "
    "appears to best align with your stated priorities. Consider reviewing the specific "
    "trade-offs for each option before making your final decision."
)
FALLBACK_KEY_INSIGHTS = (
    "Your personal values should be the primary guide for this decision",
    "Consider both short-term convenience and long-term impact",
    "Stakeholder perspectives can provide valuable insights",
)
FALLBACK_CAUTIONARY_NOTES = (
    "Be aware of how your current emotional state might be influencing your judgment",
    "Consider what you might regret not trying",
)
FALLBACK_NEXT_STEPS = (
    "Sleep on this decision before finalizing",
    "Discuss with a trusted friend or mentor",
    "Write down how you would feel one year from now with each choice",
)
FALLBACK_FOLLOW_UP_QUESTIONS = (
    "What would you advise a close friend in this situation?",
    "How will you feel about this decision in 5 years?",
    "What are you most afraid of with each option?",
    "Who else might be affected by this decision?",
)


class AIServiceError(RuntimeError):
    """An AI feature could not produce a usable result."""


@dataclass
class QuickDecisionOutcome:
    """Everything produced for one quick decision description."""

    extracted: ExtractedDecision
    recommendation: AIRecommendation
    result: RecommendationResult


@dataclass
class DeepReflectionOutcome:
    """Everything produced for one deep decision description."""

    extracted: ExtractedDeepReflection
    analysis: DeepAnalysis
    result: RecommendationResult


@dataclass
class ReflectionAnalysis:
    """Learnings and insights extracted from one reflection text."""

    learnings: ExtractedLearnings
    insights: list[str] = field(default_factory=list)


def options_from_extracted(
    extracted: Sequence[ExtractedOption | ExtractedDeepOption],
) -> list[Option]:
    """Convert extracted options to ``Option`` models (none selected).

    Only deep options carry ``values_alignment``; quick ones map to ``None``.
    """
    return [
        Option(
            text=o.text,
            pros=list(o.pros),
            cons=list(o.cons),
            values_alignment=o.values_alignment if isinstance(o, ExtractedDeepOption) else None,
        )
        for o in extracted
    ]


def fallback_recommendation(analysis: str, option_texts: Sequence[str]) -> str:
    """First option whose text appears in ``analysis``, else the first option."""
    lowered = analysis.lower()
    for text in option_texts:
        if text.lower() in lowered:
            return text
    return option_texts[0]


class DecisionAssistant:
    """AI features over an injected ``BaseLLMClient``.

    Args:
        client: Language-model collaborator.
    """

    def __init__(self, client: BaseLLMClient) -> None:
        self.client = client

    def _extract(self, prompt: str, schema, what: str, model: Optional[str] = None):
        try:
            result = self.client.extract_structured(prompt, schema, model=model)
        except httpx.HTTPError as exc:
            raise AIServiceError(f"Failed to {what}. Please try again.") from exc
        if isinstance(result, ParseFailure):
            raise AIServiceError(
                f"Failed to {what}: the model returned an unusable response ({result.error})."
            )
        return result.value

    # ── Quick decisions ────────────────────────────────────────────────────────

    def extract_decision_options(self, user_input: str) -> ExtractedDecision:
        """Extract a quick decision from a free-text description.

        Options missing pros or cons get a generic placeholder so every
        option can be scored.

        Raises:
            AIServiceError: If extraction fails.
        """
        extracted: ExtractedDecision = self._extract(
            prompts.extract_options_prompt(user_input),
            ExtractedDecision,
            "extract decision options from your input",
            model=self.client.fast_model,
        )
        options = [
            o.model_copy(update={
                "pros": o.pros or [DEFAULT_PRO],
                "cons": o.cons or [DEFAULT_CON],
            })
            for o in extracted.options
        ]
        return extracted.model_copy(update={"options": options})

    def generate_recommendation(
        self,
        title: str,
        options: Sequence[Option],
        context_factors: Sequence[str] = (),
        gut_feeling: Optional[str] = None,
    ) -> AIRecommendation:
        """Recommend one of ``options``.

        Raises:
            ValueError: If ``options`` is empty.
            AIServiceError: If the analysis text cannot be generated.
        """
        if not options:
            raise ValueError("Cannot recommend from an empty option list.")

        try:
            analysis = self.client.generate_text(
                prompts.recommendation_prompt(title, options, context_factors, gut_feeling),
                model=self.client.fast_model,
            )
        except httpx.HTTPError as exc:
            raise AIServiceError("Failed to generate a recommendation. Please try again.") from exc

        option_texts = [o.text for o in options]
        cause: str
        try:
            result = self.client.extract_structured(
                prompts.recommendation_extraction_prompt(analysis, option_texts),
                RecommendedOption,
                model=self.client.fast_model,
            )
        except httpx.HTTPError as exc:
            cause = f"request failed: {exc}"
        else:
            if isinstance(result, ParseFailure):
                cause = result.error
            elif result.value.recommended_option not in option_texts:
                cause = f"{result.value.recommended_option!r} is not one of the options"
            else:
                return AIRecommendation(
                    recommendation_text=result.value.recommended_option,
                    reasoning=result.value.reasoning,
                    full_analysis=analysis,
                )

        logger.warning("Structured recommendation unavailable (%s); using fallback", cause)
        return AIRecommendation(
            recommendation_text=fallback_recommendation(analysis, option_texts),
            reasoning=FALLBACK_REASONING,
            full_analysis=analysis,
        )

    def process_quick_decision(self, user_input: str) -> QuickDecisionOutcome:
        """Extract options, recommend, and reconcile the pick with the options."""
        extracted = self.extract_decision_options(user_input)
        options = options_from_extracted(extracted.options)
        recommendation = self.generate_recommendation(
            extracted.title, options, extracted.context_factors
        )
        result = build_result(recommendation, options, DecisionType.QUICK)
        return QuickDecisionOutcome(
            extracted=extracted, recommendation=recommendation, result=result
        )

    # ── Deep decisions ─────────────────────────────────────────────────────────

    def extract_deep_reflection(self, user_input: str) -> ExtractedDeepReflection:
        """Extract a deep decision (options with values alignment).

        Raises:
            AIServiceError: If extraction fails.
        """
        return self._extract(
            prompts.deep_extraction_prompt(user_input),
            ExtractedDeepReflection,
            "analyze your input",
            model=self.client.fast_model,
        )

    def generate_deep_analysis(self, extracted: ExtractedDeepReflection) -> DeepAnalysis:
        """Sectioned analysis of a deep decision; never raises on LLM failure."""
        option_texts = [o.text for o in extracted.options]
        try:
            text = self.client.generate_text(
                prompts.deep_analysis_prompt(
                    extracted.title,
                    extracted.options,
                    extracted.personal_values,
                    extracted.emotional_context,
                    extracted.stakeholders,
                    extracted.potential_biases,
                ),
                model=self.client.pro_model,
            )
        except (httpx.HTTPError, RuntimeError) as exc:
            logger.warning("Deep analysis failed (%s); using values-alignment fallback", exc)
            # ExtractedDeepReflection.options has min_length=2, so max() has candidates.
            best = max(extracted.options, key=lambda o: o.values_alignment)
            return DeepAnalysis(
                recommendation=best.text,
                reasoning=FALLBACK_DEEP_REASONING,
                key_insights=list(FALLBACK_KEY_INSIGHTS),
                cautionary_notes=list(FALLBACK_CAUTIONARY_NOTES),
                next_steps=list(FALLBACK_NEXT_STEPS),
            )
        return parse_deep_analysis(text, option_texts)

    def process_deep_reflection(self, user_input: str) -> DeepReflectionOutcome:
        """Extract, analyse, and reconcile the recommendation with the options."""
        extracted = self.extract_deep_reflection(user_input)
        analysis = self.generate_deep_analysis(extracted)
        options = options_from_extracted(extracted.options)
        result = build_result(
            AIRecommendation(
                recommendation_text=analysis.recommendation,
                reasoning=analysis.reasoning,
            ),
            options,
            DecisionType.DEEP,
        )
        return DeepReflectionOutcome(extracted=extracted, analysis=analysis, result=result)

    def generate_follow_up_questions(
        self,
        title: str,
        option_texts: Sequence[str],
        current_context: str,
    ) -> list[str]:
        """Up to four follow-up questions; a fixed list if the call fails."""
        try:
            text = self.client.generate_text(
                prompts.follow_up_questions_prompt(title, option_texts, current_context),
                model=self.client.fast_model,
            )
        except (httpx.HTTPError, RuntimeError) as exc:
            logger.warning("Follow-up questions failed (%s); using defaults", exc)
            return list(FALLBACK_FOLLOW_UP_QUESTIONS)
        return parse_numbered_questions(text)

    # ── Reflections ────────────────────────────────────────────────────────────

    def generate_reflection_prompts(self, decision: Decision) -> list[str]:
        """3 (quick) or 5 (deep) reflection questions tailored to ``decision``.

        Raises:
            AIServiceError: If generation fails.
        """
        result: ReflectionPrompts = self._extract(
            prompts.reflection_prompts_prompt(decision),
            ReflectionPrompts,
            "generate reflection prompts",
            model=self.client.pro_model,
        )
        return list(result.prompts)

    def extract_learnings(
        self,
        reflection_text: str,
        decision_category: DecisionCategory | str,
    ) -> ExtractedLearnings:
        """Outcome, would-repeat and 1-3 learnings from a reflection.

        Raises:
            AIServiceError: If extraction fails.
        """
        return self._extract(
            prompts.learnings_prompt(reflection_text, str(decision_category)),
            ExtractedLearnings,
            "extract learnings from your reflection",
            model=self.client.pro_model,
        )

    def generate_insights(
        self,
        reflection_text: str,
        decision_title: str,
        decision_category: DecisionCategory | str,
    ) -> list[str]:
        """2-3 coaching observations on a reflection.

        Raises:
            AIServiceError: If generation fails.
        """
        try:
            text = self.client.generate_text(
                prompts.insights_prompt(reflection_text, decision_title, str(decision_category)),
                model=self.client.pro_model,
            )
        except httpx.HTTPError as exc:
            raise AIServiceError("Failed to generate AI insights. Please try again.") from exc
        return split_insights(text)

    def process_reflection(
        self,
        reflection_text: str,
        decision_category: DecisionCategory | str,
        decision_title: str,
    ) -> ReflectionAnalysis:
        """Learnings plus insights for one reflection text."""
        learnings = self.extract_learnings(reflection_text, decision_category)
        insights = self.generate_insights(reflection_text, decision_title, decision_category)
        return ReflectionAnalysis(learnings=learnings, insights=insights)
