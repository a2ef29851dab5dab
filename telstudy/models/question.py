"""
Question value object.

A question always has exactly four options and one correct option index.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

OPTION_COUNT = 4


@dataclass(frozen=True)
class Question:
    """
    One multiple-choice question of a question set.

    Attributes:
        question_text: Question prompt
        options: Exactly four answer options
        correct_answer_index: Index of the correct option (0-3)
        explanation: Explanation shown after the correct answer is confirmed
    """
    question_text: str
    options: Tuple[str, str, str, str]
    correct_answer_index: int
    explanation: str = ""

    def __post_init__(self):
        if len(self.options) != OPTION_COUNT:
            raise ValueError(
                f"Question must have exactly {OPTION_COUNT} options, got {len(self.options)}"
            )
        if not (0 <= self.correct_answer_index < OPTION_COUNT):
            raise ValueError(
                f"correct_answer_index must be in [0, {OPTION_COUNT - 1}], "
                f"got {self.correct_answer_index}"
            )
        # Normalize lists coming from JSON into an immutable tuple
        object.__setattr__(self, "options", tuple(self.options))

    def is_correct(self, index: int) -> bool:
        return index == self.correct_answer_index

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Question":
        """Build a Question from its JSON representation."""
        return cls(
            question_text=data["question_text"],
            options=tuple(data["options"]),
            correct_answer_index=int(data["correct_answer_index"]),
            explanation=data.get("explanation", ""),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "question_text": self.question_text,
            "options": list(self.options),
            "correct_answer_index": self.correct_answer_index,
            "explanation": self.explanation,
        }


def questions_from_list(items: List[Dict[str, Any]]) -> List[Question]:
    """Convert a parsed question-set file into Question objects."""
    return [Question.from_dict(item) for item in items]
