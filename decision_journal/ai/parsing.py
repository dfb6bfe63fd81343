"""
Parsers for language-model output.

Structured output
-----------------
``extract_json`` tries, in order:
  1. the whole response as JSON
  2. a ```json fenced block
  3. any ``` fenced block
  4. the outermost ``{...}`` span embedded in prose

``parse_structured`` runs ``extract_json`` and validates the result against
a pydantic schema, returning ``Parsed`` or ``ParseFailure``. It never raises
on bad model output.

Free-text output
----------------
``parse_deep_analysis`` reads the sectioned deep-analysis format::

    RECOMMENDATION: <option>
    REASONING: <text>
    KEY_INSIGHTS:
    - <insight>
    CAUTIONARY_NOTES:
    - <note>
    NEXT_STEPS:
    - <step>

``parse_numbered_questions`` keeps numbered lines that end in ``?``.
``split_insights`` splits a ``1. ... 2. ...`` list into items.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional, Sequence, TypeVar

from pydantic import BaseModel, ValidationError

from decision_journal.models.ai import DeepAnalysis, ExtractionResult, Parsed, ParseFailure

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

DEFAULT_DEEP_REASONING = "Based on the analysis of your options, values, and circumstances."
MAX_FOLLOW_UP_QUESTIONS = 4

_JSON_FENCE = re.compile(r"```json\s*\n?(.*?)\n?```", re.DOTALL | re.IGNORECASE)
_ANY_FENCE = re.compile(r"```\s*\n?(.*?)\n?```", re.DOTALL)
_LIST_BULLET = re.compile(r"^[-•*]\s*")
_NUMBER_PREFIX = re.compile(r"^\d+\.\s*")
_NUMBERED_SPLIT = re.compile(r"\d+\.\s+")

_SECTIONS = {
    "recommendation": re.compile(r"RECOMMENDATION:\s*(.+?)(?=\nREASONING:|$)", re.IGNORECASE | re.DOTALL),
    "reasoning": re.compile(r"REASONING:\s*(.+?)(?=\nKEY_INSIGHTS:|$)", re.IGNORECASE | re.DOTALL),
    "key_insights": re.compile(r"KEY_INSIGHTS:\s*(.+?)(?=\nCAUTIONARY_NOTES:|$)", re.IGNORECASE | re.DOTALL),
    "cautionary_notes": re.compile(r"CAUTIONARY_NOTES:\s*(.+?)(?=\nNEXT_STEPS:|$)", re.IGNORECASE | re.DOTALL),
    "next_steps": re.compile(r"NEXT_STEPS:\s*(.+?)$", re.IGNORECASE | re.DOTALL),
}


# ── Structured output ─────────────────────────────────────────────────────────


def _try_loads(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return None


def extract_json(response: str) -> Optional[Any]:
    """Extract a JSON value from an LLM response.

    Args:
        response: Raw model output.

    Returns:
        The decoded JSON value, or ``None`` if no strategy succeeds.
    """
    if not response or not response.strip():
        return None
    text = response.strip()

    result = _try_loads(text)
    if result is not None:
        return result

    for pattern in (_JSON_FENCE, _ANY_FENCE):
        match = pattern.search(text)
        if match:
            result = _try_loads(match.group(1).strip())
            if result is not None:
                return result

    start, end = text.find("{"), text.rfind("}")
    if 0 <= start < end:
        result = _try_loads(text[start:end + 1])
        if result is not None:
            return result

    logger.debug("No JSON found in response (%d chars)", len(text))
    return None


def parse_structured(raw_text: str, schema: type[SchemaT]) -> ExtractionResult[SchemaT]:
    """Validate a model response against ``schema``.

    Args:
        raw_text: Raw model output.
        schema: Pydantic model class the output should satisfy.

    Returns:
        ``Parsed`` with the validated instance, or ``ParseFailure``.
    """
    data = extract_json(raw_text)
    if data is None:
        return ParseFailure(raw_text=raw_text or "", error="No JSON object found in response.")
    if not isinstance(data, dict):
        return ParseFailure(
            raw_text=raw_text,
            error=f"Expected a JSON object, got {type(data).__name__}.",
        )
    try:
        value = schema.model_validate(data)
    except ValidationError as exc:
        return ParseFailure(raw_text=raw_text, error=str(exc))
    return Parsed[schema](value=value, raw_text=raw_text)


# ── Free-text output ──────────────────────────────────────────────────────────


def parse_list(block: Optional[str]) -> list[str]:
    """Split a bulleted block into items, dropping bullets and blank lines."""
    if not block:
        return []
    items = (_LIST_BULLET.sub("", line).strip() for line in block.split("\n"))
    return [item for item in items if item]


def parse_deep_analysis(text: str, options: Sequence[str]) -> DeepAnalysis:
    """Parse the sectioned deep-analysis response.

    Missing sections fall back to the first option (recommendation), a
    generic sentence (reasoning) or an empty list.

    Args:
        text: Raw model output.
        options: Option texts, used for the recommendation fallback.
    """
    found = {name: pattern.search(text or "") for name, pattern in _SECTIONS.items()}

    def _section(name: str) -> Optional[str]:
        match = found[name]
        return match.group(1).strip() if match else None

    recommendation = _section("recommendation") or (options[0] if options else "")
    return DeepAnalysis(
        recommendation=recommendation,
        reasoning=_section("reasoning") or DEFAULT_DEEP_REASONING,
        key_insights=parse_list(_section("key_insights")),
        cautionary_notes=parse_list(_section("cautionary_notes")),
        next_steps=parse_list(_section("next_steps")),
    )


def parse_numbered_questions(text: str, limit: int = MAX_FOLLOW_UP_QUESTIONS) -> list[str]:
    """Extract up to ``limit`` questions from a numbered list."""
    questions = []
    for line in (text or "").split("\n"):
        line = _NUMBER_PREFIX.sub("", line).strip()
        if line and line.endswith("?"):
            questions.append(line)
    return questions[:limit]


def split_insights(text: str) -> list[str]:
    """Split ``"1. foo 2. bar"`` into ``["foo", "bar"]``.

    Falls back to ``[text]`` when nothing remains after splitting.
    """
    parts = [p.strip() for p in _NUMBERED_SPLIT.split(text or "")]
    insights = [p for p in parts if p]
    return insights if insights else [text]
