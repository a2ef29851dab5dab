"""
Post-quiz analytics derived from a session's answer log.

Nothing here is persisted: analytics are always recomputed from the
answer records, identically at completion time and on demand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from ..models.quiz_session import AnswerRecord
from .grade import Quadrant, calculate_grade, classify_question, grade_label
from .insights import generate_insight


@dataclass(frozen=True)
class DataPoint:
    """One answered question placed on the speed/correctness chart."""
    question_index: int
    time_taken_ms: int
    is_correct: bool
    quadrant: Quadrant

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_index": self.question_index,
            "time_taken_ms": self.time_taken_ms,
            "is_correct": self.is_correct,
            "quadrant": self.quadrant.value,
        }


@dataclass(frozen=True)
class AnalyticsSummary:
    """
    Aggregate quadrant counts and timing extremes.

    Attributes:
        strength_count: Fast + correct questions
        needs_speed_count: Slow + correct questions
        reckless_count: Fast + incorrect questions
        weakness_count: Slow + incorrect questions
        avg_time_ms: Mean time per question (0 when there are no answers)
        fastest_correct_ms: Minimum time over correct answers, None if none
        slowest_incorrect_ms: Maximum time over incorrect answers, None if none
    """
    strength_count: int = 0
    needs_speed_count: int = 0
    reckless_count: int = 0
    weakness_count: int = 0
    avg_time_ms: float = 0.0
    fastest_correct_ms: Optional[int] = None
    slowest_incorrect_ms: Optional[int] = None

    @property
    def total(self) -> int:
        return self.strength_count + self.needs_speed_count + self.reckless_count + self.weakness_count

    def to_dict(self) -> Dict[str, Any]:
        return {
            "strength_count": self.strength_count,
            "needs_speed_count": self.needs_speed_count,
            "reckless_count": self.reckless_count,
            "weakness_count": self.weakness_count,
            "avg_time_ms": self.avg_time_ms,
            "fastest_correct_ms": self.fastest_correct_ms,
            "slowest_incorrect_ms": self.slowest_incorrect_ms,
        }


@dataclass(frozen=True)
class SessionAnalytics:
    """Everything the results view displays for one session."""
    session_id: str
    grade: float
    grade_label: str
    correct_count: int
    total_count: int
    avg_time_ms: float
    data_points: List[DataPoint] = field(default_factory=list)
    summary: AnalyticsSummary = field(default_factory=AnalyticsSummary)
    insight: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "grade": self.grade,
            "grade_label": self.grade_label,
            "correct_count": self.correct_count,
            "total_count": self.total_count,
            "avg_time_ms": self.avg_time_ms,
            "data_points": [p.to_dict() for p in self.data_points],
            "summary": self.summary.to_dict(),
            "insight": self.insight,
        }


AnswerLike = Union[AnswerRecord, Mapping[str, Any]]


def _normalize(answer: AnswerLike) -> tuple[int, int, bool]:
    if isinstance(answer, AnswerRecord):
        return answer.question_index, int(answer.time_taken_ms), bool(answer.is_correct)
    return (
        int(answer["question_index"]),
        int(answer.get("time_taken_ms") or 0),
        bool(answer["is_correct"]),
    )


def average_time_ms(times_ms: Iterable[float]) -> float:
    """Arithmetic mean of question times (0 when empty)."""
    values = np.asarray(list(times_ms), dtype=float)
    if values.size == 0:
        return 0.0
    return float(values.mean())


def build_data_points(answers: Iterable[AnswerLike], avg_time_ms: float) -> List[DataPoint]:
    """Classify each answer relative to the session average, in question order."""
    rows = sorted((_normalize(a) for a in answers), key=lambda r: r[0])
    return [
        DataPoint(
            question_index=index,
            time_taken_ms=time_ms,
            is_correct=correct,
            quadrant=classify_question(time_ms, correct, avg_time_ms),
        )
        for index, time_ms, correct in rows
    ]


def summarize(data_points: List[DataPoint], avg_time_ms: float) -> AnalyticsSummary:
    """Aggregate quadrant counts and timing extremes."""
    counts = {q: 0 for q in Quadrant}
    for point in data_points:
        counts[point.quadrant] += 1

    correct_times = np.array([p.time_taken_ms for p in data_points if p.is_correct], dtype=float)
    incorrect_times = np.array([p.time_taken_ms for p in data_points if not p.is_correct], dtype=float)

    return AnalyticsSummary(
        strength_count=counts[Quadrant.STRENGTH],
        needs_speed_count=counts[Quadrant.NEEDS_SPEED],
        reckless_count=counts[Quadrant.RECKLESS],
        weakness_count=counts[Quadrant.WEAKNESS],
        avg_time_ms=avg_time_ms,
        fastest_correct_ms=int(correct_times.min()) if correct_times.size else None,
        slowest_incorrect_ms=int(incorrect_times.max()) if incorrect_times.size else None,
    )


def build_session_analytics(
    session_id: str,
    answers: Iterable[AnswerLike],
    stored_grade: Optional[float] = None,
) -> SessionAnalytics:
    """
    Compute analytics for a session from its answer log.

    Args:
        session_id: Session identifier
        answers: AnswerRecords or stored answer rows
            (``question_index``, ``is_correct``, ``time_taken_ms``)
        stored_grade: Grade persisted at completion; recomputed when None

    Returns:
        SessionAnalytics with grade, data points, summary and insight
    """
    answers = list(answers)
    rows = [_normalize(a) for a in answers]
    total_count = len(rows)
    correct_count = sum(1 for _, _, correct in rows if correct)

    grade = stored_grade if stored_grade is not None else calculate_grade(correct_count, total_count)
    avg_time = average_time_ms(time_ms for _, time_ms, _ in rows)
    data_points = build_data_points(answers, avg_time)
    summary = summarize(data_points, avg_time)

    return SessionAnalytics(
        session_id=session_id,
        grade=grade,
        grade_label=grade_label(grade),
        correct_count=correct_count,
        total_count=total_count,
        avg_time_ms=avg_time,
        data_points=data_points,
        summary=summary,
        insight=generate_insight(summary),
    )
