"""
Post-quiz analytics.

- grade: percentage grade, letter bands, quadrant classification
- summary: data points and aggregate summary from an answer log
- insights: one recommendation sentence from quadrant counts
"""

from .grade import Quadrant, calculate_grade, classify_question, grade_label
from .insights import generate_insight
from .summary import (
    AnalyticsSummary,
    DataPoint,
    SessionAnalytics,
    build_session_analytics,
)

__all__ = [
    "Quadrant",
    "calculate_grade",
    "grade_label",
    "classify_question",
    "generate_insight",
    "AnalyticsSummary",
    "DataPoint",
    "SessionAnalytics",
    "build_session_analytics",
]
