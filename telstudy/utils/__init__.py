"""
Utility modules for TelStudy.

This module contains utility functions:
- timer: Elapsed-time clocks for quiz sessions
- validation: JSON Schema validation of question-set files
- persistence: File-backed store for question sets and sessions
"""

from .timer import QuizTimers, Timer
from .validation import (
    QuestionSetValidator,
    ValidationResult,
    validate_question_file,
    validate_question_set,
)
from .persistence import QuizStore, get_store

__all__ = [
    # Timing
    "Timer",
    "QuizTimers",
    # Validation
    "QuestionSetValidator",
    "ValidationResult",
    "validate_question_file",
    "validate_question_set",
    # Persistence
    "QuizStore",
    "get_store",
]
