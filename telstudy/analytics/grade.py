"""
Grading and quadrant classification.

Provides:
- Percentage grade from correct/total counts
- Letter-grade banding (A-F)
- Four-quadrant classification of one answered question by speed x correctness
"""

from __future__ import annotations

from enum import Enum

from ..config import config


class Quadrant(str, Enum):
    """Correctness x speed classification of one answered question."""

    STRENGTH = "strength"  # fast + correct
    NEEDS_SPEED = "needs-speed"  # slow + correct
    RECKLESS = "reckless"  # fast + incorrect
    WEAKNESS = "weakness"  # slow + incorrect

    def __str__(self) -> str:
        return self.value


def calculate_grade(correct_count: int, total_count: int) -> float:
    """
    Percentage of correct answers, rounded to 2 decimal places.

    Args:
        correct_count: Number of correctly answered questions
        total_count: Number of answered questions

    Returns:
        Grade in [0, 100]; exactly 0 when total_count is 0

    Example:
        >>> calculate_grade(2, 3)
        66.67
    """
    if total_count <= 0:
        return 0
    return round(correct_count / total_count * 100, 2)


def grade_label(grade: float) -> str:
    """
    Letter grade for a percentage grade.

    Each band includes its lower bound: 90 -> A, 89.99 -> B, 60 -> D, 59.99 -> F.
    """
    for lower_bound, label in config.grades.bands():
        if grade >= lower_bound:
            return label
    return "F"


def classify_question(time_taken_ms: float, is_correct: bool, avg_time_ms: float) -> Quadrant:
    """
    Classify one question into a performance quadrant.

    A question is "fast" when ``time_taken_ms <= avg_time_ms`` (equal counts as fast).
    """
    is_fast = time_taken_ms <= avg_time_ms
    if is_correct:
        return Quadrant.STRENGTH if is_fast else Quadrant.NEEDS_SPEED
    return Quadrant.RECKLESS if is_fast else Quadrant.WEAKNESS
