"""
Resolve a free-text AI recommendation back to one of the user's options.

Language models paraphrase. Asked to pick between "Stay home" and "Go out",
a model may answer "go out", "Go out tonight" or "maybe stay at home
tonight". ``resolve_option`` maps any such answer onto a concrete ``Option``.

Resolution passes (first hit wins)
----------------------------------
1. exact          : lowercased option text == lowercased recommendation.
2. substring      : option text contains the recommendation, or vice versa.
3. token_overlap  : count recommendation words longer than 3 characters that
                    appear in the option's whitespace token set; the option
                    with the highest count wins if that count is > 1.
4. default        : options[0], flagged as a low-confidence match.

The default pass means any non-empty option list resolves to *some* option,
so the flow is never blocked. Callers that act on the match (auto-selecting
an option, showing a "Best" badge) must check ``OptionMatch.is_confident``
and treat a default match as a mismatch.

Pure functions, no I/O, never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional, Sequence

from decision_journal.models.decision import Option

logger = logging.getLogger(__name__)

# Words of this length or shorter ("the", "at", "go", "out") carry no signal.
MIN_WORD_LENGTH = 3
# Overlap must exceed this to count as a match.
MIN_OVERLAP = 1


class MatchMethod(StrEnum):
    """Which resolution pass produced the match."""

    EXACT = "exact"
    SUBSTRING = "substring"
    TOKEN_OVERLAP = "token_overlap"
    DEFAULT = "default"


@dataclass(frozen=True)
class OptionMatch:
    """Outcome of matching a recommendation against an option list.

    Attributes:
        option:  The resolved option.
        method:  The pass that produced it.
        overlap: Shared-word count (token_overlap / default passes only).
    """

    option: Option
    method: MatchMethod
    overlap: int = 0

    @property
    def is_confident(self) -> bool:
        """False for the low-confidence first-option default."""
        return self.method != MatchMethod.DEFAULT


def _normalize(text: str) -> str:
    return text.strip().lower()


def _overlap_count(recommendation: str, option_text: str) -> int:
    """Count recommendation words (len > 3) present in the option's tokens."""
    option_tokens = set(option_text.split())
    return sum(
        1
        for word in recommendation.split()
        if len(word) > MIN_WORD_LENGTH and word in option_tokens
    )


def match_option(
    recommendation_text: Optional[str],
    options: Optional[Sequence[Option]],
) -> Optional[OptionMatch]:
    """Resolve ``recommendation_text`` to an option, reporting how.

    Args:
        recommendation_text: Free-text recommendation from the AI.
        options: Candidate options, in display order.

    Returns:
        An ``OptionMatch``, or ``None`` only when ``options`` is empty/None.
    """
    if not options:
        return None

    rec = _normalize(recommendation_text or "")
    if not rec:
        logger.debug("Blank recommendation; defaulting to %r", options[0].text)
        return OptionMatch(option=options[0], method=MatchMethod.DEFAULT)

    normalized = [_normalize(o.text) for o in options]

    for option, text in zip(options, normalized):
        if text == rec:
            return OptionMatch(option=option, method=MatchMethod.EXACT)

    for option, text in zip(options, normalized):
        if text and (rec in text or text in rec):
            return OptionMatch(option=option, method=MatchMethod.SUBSTRING)

    best_index = 0
    best_overlap = 0
    for i, text in enumerate(normalized):
        overlap = _overlap_count(rec, text)
        # Strict > keeps the earliest option on ties.
        if overlap > best_overlap:
            best_index, best_overlap = i, overlap

    if best_overlap > MIN_OVERLAP:
        return OptionMatch(
            option=options[best_index],
            method=MatchMethod.TOKEN_OVERLAP,
            overlap=best_overlap,
        )

    logger.debug(
        "No option matched %r (best overlap %d); defaulting to %r",
        rec, best_overlap, options[0].text,
    )
    return OptionMatch(option=options[0], method=MatchMethod.DEFAULT, overlap=best_overlap)


def resolve_option(
    recommendation_text: Optional[str],
    options: Optional[Sequence[Option]],
) -> Optional[Option]:
    """Resolve ``recommendation_text`` to an option.

    Total on non-empty option lists: returns ``options[0]`` when nothing
    matches. Use ``match_option`` to tell a real match from that default.

    Returns:
        The resolved ``Option``, or ``None`` when ``options`` is empty/None.
    """
    match = match_option(recommendation_text, options)
    return match.option if match is not None else None
