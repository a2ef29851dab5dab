"""
Quiz runner - drives one quiz attempt from user events.

Binds the pure quiz reducer to the timers and the QuizService:
- Wrong guesses stay local; the confirming guess submits one answer
- The submitted answer is the earliest wrong guess (first-instinct scoring)
- Completion is best-effort and never blocks leaving the quiz
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterable, Optional

from .models.question import Question
from .models.quiz_session import (
    AnswerRecord,
    ConfirmationFailed,
    ConfirmationReceived,
    EnterReview,
    ExitReview,
    NextQuestion,
    QuizAction,
    QuizSessionState,
    ReviewNext,
    ReviewPrev,
    SelectAnswer,
    create_initial_state,
    quiz_reducer,
    review_record,
)
from .utils.timer import QuizTimers

logger = logging.getLogger(__name__)

KEY_MAP = {"1": 0, "2": 1, "3": 2, "4": 3}


def _wall_clock_ms() -> float:
    return time.time() * 1000.0


class QuizRunner:
    """
    Client-side driver for a single quiz session.

    Usage:
        with QuizRunner.start(service, user_id, set_id) as runner:
            runner.select_option(2)
            runner.next_question()
    """

    def __init__(
        self,
        service,
        user_id: str,
        session_id: str,
        questions: Iterable[Question],
        timers: Optional[QuizTimers] = None,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize the runner.

        Args:
            service: QuizService (or any object with submit_answer/complete_session)
            user_id: Authenticated user
            session_id: Session opened by start_session()
            questions: Ordered questions of the session
            timers: Timer pair (default: new QuizTimers)
            clock: Millisecond timestamp source for state timestamps
        """
        self.service = service
        self.user_id = user_id
        self._clock = clock or _wall_clock_ms
        self.timers = timers or QuizTimers()
        self.state: QuizSessionState = create_initial_state(session_id, questions, now_ms=self._clock())
        self.completion: Optional[Dict[str, Any]] = None

    @classmethod
    def start(cls, service, user_id: str, set_id: str, **kwargs) -> "QuizRunner":
        """Open a session on the service and return a runner for it."""
        started = service.start_session(user_id, set_id)
        return cls(service, user_id, started["session_id"], started["questions"], **kwargs)

    @property
    def session_id(self) -> str:
        return self.state.session_id

    @property
    def current_question(self) -> Optional[Question]:
        return self.state.current_question

    @property
    def review_record(self) -> Optional[AnswerRecord]:
        return review_record(self.state)

    @property
    def disabled(self) -> bool:
        """Whether input should currently be ignored."""
        return self.state.is_submitting or self.state.is_complete

    def dispatch(self, action: QuizAction) -> QuizSessionState:
        self.state = quiz_reducer(self.state, action)
        return self.state

    # ------------------------------------------------------------------
    # Answering
    # ------------------------------------------------------------------

    def select_option(self, index: int) -> QuizSessionState:
        """
        Handle a click on option ``index``.

        Raises:
            Exception: Whatever the answer submission raised; the state is
                reverted so the same selection can be retried
        """
        before = self.state
        question = before.current_question
        if question is None or before.is_submitting or before.show_explanation:
            return before

        confirming = question.is_correct(index)
        elapsed = self.timers.capture_question_time() if confirming else 0
        state = self.dispatch(SelectAnswer(index=index, elapsed_ms=elapsed))
        if not state.is_submitting:
            return state

        try:
            result = self.service.submit_answer(
                self.user_id,
                state.session_id,
                state.current_index,
                state.submission_index,
                state.pending_time_ms,
            )
        except Exception as e:
            logger.warning("Answer confirmation failed for question %d: %s", state.current_index, e)
            self.dispatch(ConfirmationFailed(error=str(e)))
            raise

        return self.dispatch(
            ConfirmationReceived(
                is_correct=result["is_correct"],
                correct_index=result["correct_index"],
                explanation=result.get("explanation", ""),
            )
        )

    def next_question(self) -> Optional[Dict[str, Any]]:
        """
        Advance to the next question, completing the session after the last one.

        Returns:
            The completion payload when this advance finished the quiz and the
            completion call succeeded, else None
        """
        before = self.state
        state = self.dispatch(NextQuestion(timestamp_ms=self._clock()))
        if state is before:
            return None
        if state.is_complete:
            return self._complete()
        self.timers.start_question()
        return None

    def _complete(self) -> Optional[Dict[str, Any]]:
        try:
            self.completion = self.service.complete_session(self.user_id, self.state.session_id)
        except Exception as e:
            # Best-effort: results can be fetched without a stored completion
            logger.warning("Could not mark session %s complete: %s", self.state.session_id, e)
            self.completion = None
        return self.completion

    # ------------------------------------------------------------------
    # Review overlay
    # ------------------------------------------------------------------

    def enter_review(self, index: int) -> QuizSessionState:
        return self.dispatch(EnterReview(index=index))

    def exit_review(self) -> QuizSessionState:
        return self.dispatch(ExitReview())

    def review_prev(self) -> QuizSessionState:
        return self.dispatch(ReviewPrev())

    def review_next(self) -> QuizSessionState:
        return self.dispatch(ReviewNext())

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """
        Keyboard shortcuts: "1"-"4" pick an option, "Enter" advances.

        Returns:
            True if the key was handled
        """
        if self.disabled:
            return False
        if key in KEY_MAP:
            self.select_option(KEY_MAP[key])
            return True
        if key == "Enter":
            self.next_question()
            return True
        return False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self):
        """Stop the timers' refresh threads."""
        self.timers.stop()

    def __enter__(self) -> "QuizRunner":
        self.timers.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False
