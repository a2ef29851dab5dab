"""
Insight generation - one actionable sentence from quadrant counts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping, Union

from .grade import Quadrant

if TYPE_CHECKING:
    from .summary import AnalyticsSummary

NO_DATA_MESSAGE = "Complete a quiz to see your performance insights."
PERFECT_SCORE_MESSAGE = (
    "Perfect score! Review any questions that took longer than average to build speed."
)
REVISIT_MESSAGE = (
    "Revisit the material before your next attempt: accuracy needs work across the board."
)

QUADRANT_MESSAGES = {
    Quadrant.STRENGTH: "You answered most questions correctly and quickly. Keep it up!",
    Quadrant.NEEDS_SPEED: (
        "You answered correctly but are spending too long. "
        "Try to build familiarity to improve speed."
    ),
    Quadrant.RECKLESS: (
        "You answered quickly but made errors. Slow down and read each question carefully."
    ),
    Quadrant.WEAKNESS: (
        "Most errors came from slow, incorrect answers. "
        "Prioritize understanding the core concepts."
    ),
}

# Ties go to the more problem-indicating quadrant
TIE_PRIORITY = (Quadrant.WEAKNESS, Quadrant.RECKLESS, Quadrant.NEEDS_SPEED, Quadrant.STRENGTH)

_COUNT_KEYS = {
    Quadrant.STRENGTH: "strength_count",
    Quadrant.NEEDS_SPEED: "needs_speed_count",
    Quadrant.RECKLESS: "reckless_count",
    Quadrant.WEAKNESS: "weakness_count",
}


def _counts(summary: Union["AnalyticsSummary", Mapping[str, int]]) -> dict:
    if isinstance(summary, Mapping):
        return {q: max(0, int(summary.get(key, 0) or 0)) for q, key in _COUNT_KEYS.items()}
    return {q: max(0, int(getattr(summary, key, 0) or 0)) for q, key in _COUNT_KEYS.items()}


def dominant_quadrant(summary: Union["AnalyticsSummary", Mapping[str, int]]) -> Quadrant:
    """Quadrant with the highest count, ties broken by TIE_PRIORITY."""
    return _dominant(_counts(summary))


def _dominant(counts: dict) -> Quadrant:
    # max() keeps the first maximum, and TIE_PRIORITY lists the winners first
    return max(TIE_PRIORITY, key=lambda q: counts[q])


def generate_insight(summary: Union["AnalyticsSummary", Mapping[str, int]]) -> str:
    """
    Generate a single recommendation sentence from quadrant counts.

    Args:
        summary: AnalyticsSummary or a mapping with the four ``*_count`` keys

    Returns:
        Non-empty recommendation string
    """
    counts = _counts(summary)

    if not any(counts.values()):
        return NO_DATA_MESSAGE

    if counts[Quadrant.RECKLESS] == 0 and counts[Quadrant.WEAKNESS] == 0:
        return PERFECT_SCORE_MESSAGE

    if counts[Quadrant.STRENGTH] == 0 and counts[Quadrant.NEEDS_SPEED] == 0:
        return REVISIT_MESSAGE

    return QUADRANT_MESSAGES[_dominant(counts)]
