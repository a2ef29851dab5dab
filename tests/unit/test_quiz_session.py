"""
Unit tests for the quiz session state machine.

Tests answer selection, retry-until-correct scoring, confirmation
success/failure, advancing, completion and the review overlay.
"""

import unittest

from telstudy.models.question import Question
from telstudy.models.quiz_session import (
    AnswerRecord,
    ConfirmationFailed,
    ConfirmationReceived,
    EnterReview,
    ExitReview,
    NextQuestion,
    ReviewNext,
    ReviewPrev,
    SelectAnswer,
    create_initial_state,
    quiz_reducer,
    review_record,
)


def make_questions(count=3):
    return [
        Question(
            question_text=f"Q{i}?",
            options=("a", "b", "c", "d"),
            correct_answer_index=i % 4,
            explanation=f"because {i}",
        )
        for i in range(count)
    ]


def confirm(state, correct_index, explanation="because"):
    """Apply a successful confirmation echoing the server's grading."""
    return quiz_reducer(
        state,
        ConfirmationReceived(
            is_correct=state.submission_index == correct_index,
            correct_index=correct_index,
            explanation=explanation,
        ),
    )


def answer_current(state, wrong=(), elapsed_ms=1000):
    """Guess each index in ``wrong`` then the correct one, confirm it."""
    correct = state.current_question.correct_answer_index
    for index in wrong:
        state = quiz_reducer(state, SelectAnswer(index))
    state = quiz_reducer(state, SelectAnswer(correct, elapsed_ms=elapsed_ms))
    return confirm(state, correct)


class TestAnswerRecord(unittest.TestCase):
    """Test AnswerRecord dataclass."""

    def test_answer_record_to_dict(self):
        record = AnswerRecord(
            question_index=2,
            selected_index=1,
            correct_answer_index=3,
            is_correct=False,
            time_taken_ms=4200,
            explanation="x",
        )
        result = record.to_dict()
        self.assertEqual(result["question_index"], 2)
        self.assertEqual(result["selected_index"], 1)
        self.assertFalse(result["is_correct"])
        self.assertEqual(result["time_taken_ms"], 4200)


class TestInitialState(unittest.TestCase):
    """Test create_initial_state."""

    def test_initial_state(self):
        state = create_initial_state("s-1", make_questions(), now_ms=5000)
        self.assertEqual(state.current_index, 0)
        self.assertIsNone(state.selected_answer)
        self.assertEqual(state.wrong_attempts, ())
        self.assertFalse(state.show_explanation)
        self.assertIsNone(state.explanation_data)
        self.assertFalse(state.is_submitting)
        self.assertEqual(state.answers, ())
        self.assertIsNone(state.review_index)
        self.assertFalse(state.is_complete)
        self.assertEqual(state.session_start_time, 5000)
        self.assertEqual(state.question_start_time, 5000)

    def test_accepts_question_dicts(self):
        state = create_initial_state(
            "s-1",
            [{"question_text": "Q", "options": ["a", "b", "c", "d"], "correct_answer_index": 2, "explanation": ""}],
        )
        self.assertIsInstance(state.questions[0], Question)
        self.assertEqual(state.current_question.correct_answer_index, 2)

    def test_empty_question_list_is_complete(self):
        state = create_initial_state("s-1", [])
        self.assertTrue(state.is_complete)
        self.assertIsNone(state.current_question)


class TestSelectAnswer(unittest.TestCase):
    """Test SELECT_ANSWER transitions."""

    def setUp(self):
        self.state = create_initial_state("s-1", make_questions())

    def test_correct_selection_starts_submission(self):
        state = quiz_reducer(self.state, SelectAnswer(0, elapsed_ms=1500))
        self.assertEqual(state.selected_answer, 0)
        self.assertTrue(state.is_submitting)
        self.assertEqual(state.pending_time_ms, 1500)
        self.assertEqual(state.answers, ())

    def test_wrong_selection_is_tracked_without_submitting(self):
        state = quiz_reducer(self.state, SelectAnswer(2))
        self.assertEqual(state.wrong_attempts, (2,))
        self.assertIsNone(state.selected_answer)
        self.assertFalse(state.is_submitting)

    def test_repeated_wrong_selection_is_noop(self):
        state = quiz_reducer(self.state, SelectAnswer(2))
        again = quiz_reducer(state, SelectAnswer(2))
        self.assertIs(again, state)

    def test_wrong_attempts_keep_order(self):
        state = quiz_reducer(self.state, SelectAnswer(3))
        state = quiz_reducer(state, SelectAnswer(1))
        self.assertEqual(state.wrong_attempts, (3, 1))
        self.assertEqual(state.submission_index, 3)

    def test_rejected_while_submitting(self):
        state = quiz_reducer(self.state, SelectAnswer(0))
        self.assertIs(quiz_reducer(state, SelectAnswer(1)), state)
        self.assertIs(quiz_reducer(state, SelectAnswer(0)), state)

    def test_rejected_while_explanation_shown(self):
        state = answer_current(self.state)
        self.assertTrue(state.show_explanation)
        self.assertIs(quiz_reducer(state, SelectAnswer(1)), state)

    def test_out_of_range_index_is_noop(self):
        self.assertIs(quiz_reducer(self.state, SelectAnswer(4)), self.state)
        self.assertIs(quiz_reducer(self.state, SelectAnswer(-1)), self.state)

    def test_option_disabled_after_wrong_guess(self):
        state = quiz_reducer(self.state, SelectAnswer(2))
        self.assertTrue(state.is_option_disabled(2))
        self.assertFalse(state.is_option_disabled(0))


class TestConfirmation(unittest.TestCase):
    """Test confirmation success and failure."""

    def setUp(self):
        self.state = create_initial_state("s-1", make_questions())

    def test_direct_correct_answer_recorded_as_correct(self):
        state = answer_current(self.state, elapsed_ms=2000)
        self.assertEqual(len(state.answers), 1)
        record = state.answers[0]
        self.assertEqual(record.question_index, 0)
        self.assertEqual(record.selected_index, 0)
        self.assertTrue(record.is_correct)
        self.assertEqual(record.time_taken_ms, 2000)
        self.assertTrue(state.show_explanation)
        self.assertFalse(state.is_submitting)
        self.assertTrue(state.explanation_data.is_correct)
        self.assertEqual(state.explanation_data.correct_index, 0)
        self.assertEqual(state.explanation_data.explanation_text, "because")

    def test_wrong_then_right_records_first_wrong_guess(self):
        state = answer_current(self.state, wrong=(2, 3))
        record = state.answers[0]
        self.assertEqual(record.selected_index, 2)
        self.assertEqual(record.correct_answer_index, 0)
        self.assertFalse(record.is_correct)
        self.assertTrue(state.show_explanation)
        self.assertFalse(state.explanation_data.is_correct)

    def test_stale_confirmation_is_noop(self):
        self.assertIs(confirm(self.state, 0), self.state)

    def test_failure_reverts_submission(self):
        state = quiz_reducer(self.state, SelectAnswer(1))
        state = quiz_reducer(state, SelectAnswer(0, elapsed_ms=800))
        failed = quiz_reducer(state, ConfirmationFailed("network down"))
        self.assertFalse(failed.is_submitting)
        self.assertFalse(failed.show_explanation)
        self.assertEqual(failed.answers, ())
        self.assertEqual(failed.wrong_attempts, (1,))

    def test_retry_after_failure_accumulates_time(self):
        state = quiz_reducer(self.state, SelectAnswer(0, elapsed_ms=800))
        state = quiz_reducer(state, ConfirmationFailed())
        state = quiz_reducer(state, SelectAnswer(0, elapsed_ms=300))
        state = confirm(state, 0)
        self.assertEqual(state.answers[0].time_taken_ms, 1100)

    def test_failure_when_not_submitting_is_noop(self):
        self.assertIs(quiz_reducer(self.state, ConfirmationFailed()), self.state)


class TestAdvance(unittest.TestCase):
    """Test NEXT_QUESTION and completion."""

    def setUp(self):
        self.state = create_initial_state("s-1", make_questions(2), now_ms=0)

    def test_next_is_noop_without_explanation(self):
        self.assertIs(quiz_reducer(self.state, NextQuestion(10)), self.state)
        submitting = quiz_reducer(self.state, SelectAnswer(0))
        self.assertIs(quiz_reducer(submitting, NextQuestion(10)), submitting)

    def test_next_clears_question_state(self):
        state = answer_current(self.state, wrong=(1,))
        state = quiz_reducer(state, NextQuestion(timestamp_ms=7000))
        self.assertEqual(state.current_index, 1)
        self.assertIsNone(state.selected_answer)
        self.assertEqual(state.wrong_attempts, ())
        self.assertFalse(state.show_explanation)
        self.assertIsNone(state.explanation_data)
        self.assertIsNone(state.review_index)
        self.assertEqual(state.pending_time_ms, 0)
        self.assertEqual(state.question_start_time, 7000)
        self.assertEqual(len(state.answers), 1)

    def test_advancing_past_last_question_completes_once(self):
        state = answer_current(self.state)
        state = quiz_reducer(state, NextQuestion())
        state = answer_current(state)
        state = quiz_reducer(state, NextQuestion())
        self.assertTrue(state.is_complete)
        self.assertEqual(state.current_index, 2)
        self.assertIsNone(state.current_question)
        self.assertIs(quiz_reducer(state, NextQuestion()), state)
        self.assertIs(quiz_reducer(state, SelectAnswer(0)), state)

    def test_answers_are_in_question_order(self):
        state = answer_current(self.state)
        state = quiz_reducer(state, NextQuestion())
        state = answer_current(state)
        self.assertEqual([a.question_index for a in state.answers], [0, 1])


class TestReview(unittest.TestCase):
    """Test the review overlay."""

    def setUp(self):
        state = create_initial_state("s-1", make_questions(4))
        for wrong in [(), (0,), ()]:
            state = answer_current(state, wrong=wrong)
            state = quiz_reducer(state, NextQuestion())
        self.state = state  # on question 3, three answers recorded

    def test_enter_review_only_for_answered_questions(self):
        self.assertEqual(quiz_reducer(self.state, EnterReview(1)).review_index, 1)
        self.assertIs(quiz_reducer(self.state, EnterReview(3)), self.state)
        self.assertIs(quiz_reducer(self.state, EnterReview(5)), self.state)
        self.assertIs(quiz_reducer(self.state, EnterReview(-1)), self.state)

    def test_review_does_not_touch_progress(self):
        state = quiz_reducer(self.state, SelectAnswer(0))  # wrong for question 3
        reviewing = quiz_reducer(state, EnterReview(0))
        reviewing = quiz_reducer(reviewing, ReviewNext())
        reviewing = quiz_reducer(reviewing, ReviewNext())
        self.assertEqual(reviewing.review_index, 2)
        self.assertEqual(reviewing.current_index, state.current_index)
        self.assertEqual(reviewing.answers, state.answers)
        self.assertEqual(reviewing.wrong_attempts, state.wrong_attempts)

        restored = quiz_reducer(reviewing, ExitReview())
        self.assertIsNone(restored.review_index)
        self.assertEqual(restored, state)

    def test_review_navigation_is_clamped(self):
        first = quiz_reducer(self.state, EnterReview(0))
        self.assertIs(quiz_reducer(first, ReviewPrev()), first)
        last = quiz_reducer(self.state, EnterReview(2))
        self.assertIs(quiz_reducer(last, ReviewNext()), last)
        self.assertEqual(quiz_reducer(last, ReviewPrev()).review_index, 1)

    def test_review_blocked_while_submitting(self):
        submitting = quiz_reducer(self.state, SelectAnswer(3))
        self.assertTrue(submitting.is_submitting)
        self.assertIs(quiz_reducer(submitting, EnterReview(0)), submitting)

        reviewing = quiz_reducer(self.state, EnterReview(1))
        submitting = quiz_reducer(reviewing, SelectAnswer(3))
        self.assertTrue(submitting.is_submitting)
        self.assertEqual(submitting.review_index, 1)
        for action in (EnterReview(0), ExitReview(), ReviewPrev(), ReviewNext()):
            self.assertIs(quiz_reducer(submitting, action), submitting)

    def test_navigation_without_review_is_noop(self):
        self.assertIs(quiz_reducer(self.state, ReviewNext()), self.state)
        self.assertIs(quiz_reducer(self.state, ReviewPrev()), self.state)
        self.assertIs(quiz_reducer(self.state, ExitReview()), self.state)

    def test_review_record(self):
        reviewing = quiz_reducer(self.state, EnterReview(1))
        record = review_record(reviewing)
        self.assertEqual(record.question_index, 1)
        self.assertEqual(record.selected_index, 0)
        self.assertFalse(record.is_correct)
        self.assertIsNone(review_record(self.state))

    def test_advance_clears_review(self):
        state = answer_current(self.state)
        state = quiz_reducer(state, EnterReview(0))
        state = quiz_reducer(state, NextQuestion())
        self.assertTrue(state.is_complete)
        self.assertIsNone(state.review_index)


if __name__ == "__main__":
    unittest.main()
