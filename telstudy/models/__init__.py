"""
Data models for quiz taking.

This module contains core data models:
- Question: One four-option multiple-choice question
- QuizSessionState: Snapshot of one quiz attempt, driven by quiz_reducer
- AnswerRecord: One completed question
"""

from .question import Question, questions_from_list
from .quiz_session import (
    AnswerRecord,
    ConfirmationFailed,
    ConfirmationReceived,
    EnterReview,
    ExitReview,
    ExplanationData,
    NextQuestion,
    QuizSessionState,
    ReviewNext,
    ReviewPrev,
    SelectAnswer,
    create_initial_state,
    quiz_reducer,
    review_record,
)

__all__ = [
    "Question",
    "questions_from_list",
    "QuizSessionState",
    "AnswerRecord",
    "ExplanationData",
    "SelectAnswer",
    "ConfirmationReceived",
    "ConfirmationFailed",
    "NextQuestion",
    "EnterReview",
    "ExitReview",
    "ReviewPrev",
    "ReviewNext",
    "create_initial_state",
    "quiz_reducer",
    "review_record",
]
