"""
TelStudy - timed multiple-choice quizzes with post-quiz analytics.

Main entry points:
- QuizService: question sets, sessions, answers, completion, analytics
- QuizRunner: drives one quiz attempt from user events
- quiz_reducer: pure quiz-session state machine
"""

__version__ = "0.1.0"

from .errors import (
    ForbiddenError,
    InternalError,
    NotFoundError,
    RateLimitedError,
    StorageError,
    TelStudyError,
    ValidationError,
)
from .orchestrator import QuizService
from .quiz_runner import QuizRunner

__all__ = [
    "QuizService",
    "QuizRunner",
    "TelStudyError",
    "ValidationError",
    "NotFoundError",
    "ForbiddenError",
    "StorageError",
    "InternalError",
    "RateLimitedError",
]
