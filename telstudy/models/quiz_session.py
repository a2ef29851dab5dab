"""
Quiz Session State Machine - drives a single quiz attempt.

Implements retry-until-correct answering with first-instinct scoring:
- Wrong guesses are tracked locally and never sent to the server
- The confirming (correct) guess triggers one answer submission
- The recorded answer is the earliest wrong guess, if any
- A read-only review overlay lets the user revisit answered questions

Every transition is a pure function ``quiz_reducer(state, action) -> state``.
Invalid actions return the *same* state object (no-op). Time never comes
from a clock inside this module; callers pass timestamps and durations in.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from .question import OPTION_COUNT, Question


@dataclass(frozen=True)
class ExplanationData:
    """Server confirmation shown once the correct answer is chosen."""
    is_correct: bool
    correct_index: int
    explanation_text: str


@dataclass(frozen=True)
class AnswerRecord:
    """
    One completed question.

    Attributes:
        question_index: Zero-based index of the question
        selected_index: Canonical recorded answer (first wrong guess, else the correct one)
        correct_answer_index: Index of the correct option
        is_correct: Whether the canonical answer was correct
        time_taken_ms: Time from question start to the confirming guess
        explanation: Explanation text returned by the server
    """
    question_index: int
    selected_index: int
    correct_answer_index: int
    is_correct: bool
    time_taken_ms: int
    explanation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "question_index": self.question_index,
            "selected_index": self.selected_index,
            "correct_answer_index": self.correct_answer_index,
            "is_correct": self.is_correct,
            "time_taken_ms": self.time_taken_ms,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class QuizSessionState:
    """
    Snapshot of one quiz attempt.

    ``wrong_attempts`` keeps insertion order so the earliest wrong guess is
    ``wrong_attempts[0]``; it never contains duplicates or the correct index.
    """
    session_id: str
    questions: Tuple[Question, ...]
    current_index: int = 0
    selected_answer: Optional[int] = None
    wrong_attempts: Tuple[int, ...] = ()
    show_explanation: bool = False
    explanation_data: Optional[ExplanationData] = None
    is_submitting: bool = False
    answers: Tuple[AnswerRecord, ...] = ()
    review_index: Optional[int] = None
    is_complete: bool = False
    session_start_time: float = 0.0
    question_start_time: float = 0.0
    # Per-question time accumulated by confirming guesses (kept across failed submissions)
    pending_time_ms: int = field(default=0, compare=False)

    @property
    def total_questions(self) -> int:
        return len(self.questions)

    @property
    def current_question(self) -> Optional[Question]:
        if self.is_complete or self.current_index >= len(self.questions):
            return None
        return self.questions[self.current_index]

    @property
    def is_last_question(self) -> bool:
        return self.current_index == len(self.questions) - 1

    @property
    def is_reviewing(self) -> bool:
        return self.review_index is not None

    @property
    def submission_index(self) -> Optional[int]:
        """Index sent to the server: earliest wrong guess, else the confirming guess."""
        if self.wrong_attempts:
            return self.wrong_attempts[0]
        return self.selected_answer

    def is_option_disabled(self, index: int) -> bool:
        """Whether the UI should disable an option for the active question."""
        return self.is_submitting or self.show_explanation or index in self.wrong_attempts


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SelectAnswer:
    """User picked option ``index``; ``elapsed_ms`` is the captured question time."""
    index: int
    elapsed_ms: int = 0


@dataclass(frozen=True)
class ConfirmationReceived:
    """Answer submission succeeded."""
    is_correct: bool
    correct_index: int
    explanation: str = ""


@dataclass(frozen=True)
class ConfirmationFailed:
    """Answer submission failed; the user may retry."""
    error: str = ""


@dataclass(frozen=True)
class NextQuestion:
    """Advance past the current question at ``timestamp_ms``."""
    timestamp_ms: float = 0.0


@dataclass(frozen=True)
class EnterReview:
    index: int


@dataclass(frozen=True)
class ExitReview:
    pass


@dataclass(frozen=True)
class ReviewPrev:
    pass


@dataclass(frozen=True)
class ReviewNext:
    pass


QuizAction = Union[
    SelectAnswer,
    ConfirmationReceived,
    ConfirmationFailed,
    NextQuestion,
    EnterReview,
    ExitReview,
    ReviewPrev,
    ReviewNext,
]


def create_initial_state(
    session_id: str,
    questions: Iterable[Union[Question, Dict[str, Any]]],
    now_ms: float = 0.0,
) -> QuizSessionState:
    """
    Create the state for a new quiz attempt.

    Args:
        session_id: Identifier of the persisted session record
        questions: Ordered questions (Question objects or their dict form)
        now_ms: Session start timestamp in milliseconds

    Returns:
        QuizSessionState positioned on the first question
    """
    parsed = tuple(q if isinstance(q, Question) else Question.from_dict(q) for q in questions)
    return QuizSessionState(
        session_id=session_id,
        questions=parsed,
        is_complete=len(parsed) == 0,
        session_start_time=now_ms,
        question_start_time=now_ms,
    )


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------


def _select_answer(state: QuizSessionState, action: SelectAnswer) -> QuizSessionState:
    question = state.current_question
    if question is None or state.is_submitting or state.show_explanation:
        return state
    if not (0 <= action.index < OPTION_COUNT):
        return state

    if question.is_correct(action.index):
        return replace(
            state,
            selected_answer=action.index,
            is_submitting=True,
            pending_time_ms=state.pending_time_ms + max(0, int(action.elapsed_ms)),
        )

    if action.index in state.wrong_attempts:
        return state
    return replace(state, wrong_attempts=state.wrong_attempts + (action.index,))


def _confirmation_received(
    state: QuizSessionState, action: ConfirmationReceived
) -> QuizSessionState:
    if not state.is_submitting:
        return state

    selected = state.submission_index
    is_correct = selected == action.correct_index
    record = AnswerRecord(
        question_index=state.current_index,
        selected_index=selected,
        correct_answer_index=action.correct_index,
        is_correct=is_correct,
        time_taken_ms=state.pending_time_ms,
        explanation=action.explanation,
    )
    return replace(
        state,
        show_explanation=True,
        is_submitting=False,
        explanation_data=ExplanationData(
            is_correct=is_correct,
            correct_index=action.correct_index,
            explanation_text=action.explanation,
        ),
        answers=state.answers + (record,),
    )


def _confirmation_failed(state: QuizSessionState, action: ConfirmationFailed) -> QuizSessionState:
    if not state.is_submitting:
        return state
    return replace(state, is_submitting=False, selected_answer=None)


def _next_question(state: QuizSessionState, action: NextQuestion) -> QuizSessionState:
    if state.is_complete or not state.show_explanation:
        return state

    cleared = dict(
        selected_answer=None,
        wrong_attempts=(),
        show_explanation=False,
        explanation_data=None,
        review_index=None,
        pending_time_ms=0,
    )
    if state.is_last_question:
        return replace(state, current_index=len(state.questions), is_complete=True, **cleared)
    return replace(
        state,
        current_index=state.current_index + 1,
        question_start_time=action.timestamp_ms,
        **cleared,
    )


def _move_review(state: QuizSessionState, target: int) -> QuizSessionState:
    if state.is_submitting:
        return state
    if not (0 <= target < state.current_index) or target == state.review_index:
        return state
    return replace(state, review_index=target)


def quiz_reducer(state: QuizSessionState, action: QuizAction) -> QuizSessionState:
    """
    Apply one action to the quiz state.

    Args:
        state: Current state
        action: Action to apply

    Returns:
        The new state, or ``state`` itself when the action is not valid now
    """
    if isinstance(action, SelectAnswer):
        return _select_answer(state, action)
    if isinstance(action, ConfirmationReceived):
        return _confirmation_received(state, action)
    if isinstance(action, ConfirmationFailed):
        return _confirmation_failed(state, action)
    if isinstance(action, NextQuestion):
        return _next_question(state, action)
    if isinstance(action, EnterReview):
        return _move_review(state, action.index)
    if isinstance(action, ExitReview):
        if state.review_index is None or state.is_submitting:
            return state
        return replace(state, review_index=None)
    if isinstance(action, ReviewPrev):
        if state.review_index is None:
            return state
        return _move_review(state, state.review_index - 1)
    if isinstance(action, ReviewNext):
        if state.review_index is None:
            return state
        return _move_review(state, state.review_index + 1)
    return state


def review_record(state: QuizSessionState) -> Optional[AnswerRecord]:
    """Answer record of the question under review, if any."""
    if state.review_index is None:
        return None
    return next((a for a in state.answers if a.question_index == state.review_index), None)
