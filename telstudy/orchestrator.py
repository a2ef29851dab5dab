"""
Quiz orchestration - the request/response boundary behind the API.

Coordinates question-set uploads, quiz sessions, answer submissions,
completion and analytics on top of a QuizStore. The caller's identity
(``user_id``) comes from the external auth provider and is trusted here.

Workflow:
1. upload_question_set() stores a validated question-set file
2. start_session() opens a session and returns its questions
3. submit_answer() records one answer per question
4. complete_session() finalizes the grade (idempotent)
5. fetch_analytics() derives grade, quadrants and insight from the answer log
"""

from __future__ import annotations

import json
import logging
import math
import threading
import time
import uuid
from collections import defaultdict, deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, Dict, List, Optional

from .analytics.grade import calculate_grade
from .analytics.summary import SessionAnalytics, build_session_analytics
from .config import config
from .errors import ForbiddenError, NotFoundError, RateLimitedError, ValidationError
from .models.question import OPTION_COUNT, Question
from .utils.persistence import QuizStore, get_store
from .utils.validation import QuestionSetValidator, get_question_set_validator

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _require_uuid(value: Any, label: str) -> str:
    """Reject malformed identifiers before any lookup."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid {label} format")
    try:
        uuid.UUID(value)
    except ValueError:
        raise ValidationError(f"Invalid {label} format") from None
    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def coerce_time_taken(value: Any) -> int:
    """Non-negative whole milliseconds; anything absent or invalid becomes 0."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if not math.isfinite(value) or value < 0:
        return 0
    return int(round(value))


class QuizService:
    """
    Session orchestration boundary.

    Usage:
        service = QuizService()
        created = service.upload_question_set(user_id, "Biology", "bio.json", raw)
        started = service.start_session(user_id, created["id"])
        result = service.submit_answer(user_id, started["session_id"], 0, 2, 3150)
        service.complete_session(user_id, started["session_id"])
        analytics = service.fetch_analytics(user_id, started["session_id"])
    """

    def __init__(
        self,
        store: Optional[QuizStore] = None,
        validator: Optional[QuestionSetValidator] = None,
        clock: Optional[Callable[[], float]] = None,
        max_uploads_per_window: Optional[int] = None,
        upload_window_seconds: Optional[float] = None,
    ):
        """
        Initialize the service.

        Args:
            store: Backing store (default: global store)
            validator: Question-set validator (default: shared validator)
            clock: Seconds clock used for upload rate limiting (default: time.monotonic)
            max_uploads_per_window: Upload cap per user (default: config.quiz.max_uploads_per_window)
            upload_window_seconds: Sliding window length (default: config.quiz.upload_window_seconds)
        """
        self.store = store or get_store()
        self.validator = validator or get_question_set_validator()
        self._clock = clock or time.monotonic
        if max_uploads_per_window is None:
            max_uploads_per_window = config.quiz.max_uploads_per_window
        if upload_window_seconds is None:
            upload_window_seconds = config.quiz.upload_window_seconds
        self.max_uploads_per_window = max_uploads_per_window
        self.upload_window_seconds = upload_window_seconds

        self._uploads: Dict[str, Deque[float]] = defaultdict(deque)
        self._upload_lock = threading.Lock()

    # ------------------------------------------------------------------
    # Question sets
    # ------------------------------------------------------------------

    def _check_upload_rate(self, user_id: str):
        now = self._clock()
        with self._upload_lock:
            recent = self._uploads[user_id]
            while recent and now - recent[0] >= self.upload_window_seconds:
                recent.popleft()
            if len(recent) >= self.max_uploads_per_window:
                oldest = recent[0] if recent else now
                retry_after = self.upload_window_seconds - (now - oldest)
                logger.warning("Upload rate limit hit for user %s", user_id)
                raise RateLimitedError(
                    f"Upload limit of {self.max_uploads_per_window} per "
                    f"{self.upload_window_seconds:g}s reached",
                    retry_after_seconds=retry_after,
                )
            recent.append(now)

    def upload_question_set(
        self, user_id: str, name: str, filename: str, content: bytes | str
    ) -> Dict[str, Any]:
        """
        Validate and store an uploaded question-set file.

        Args:
            user_id: Owner
            name: Display name of the set
            filename: Original file name (must end in .json)
            content: Raw file content

        Returns:
            Dict with id, name and question_count

        Raises:
            ValidationError: If the name or file is invalid
            RateLimitedError: If the user uploads too often
        """
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("name is required")

        result = self.validator.validate_file(filename, content)
        if not result:
            logger.warning("Rejected question set upload %r: %d error(s)", filename, len(result.errors))
            raise ValidationError("Invalid question set file", errors=result.errors)

        self._check_upload_rate(user_id)

        set_id = str(uuid.uuid4())
        file_path = f"{user_id}/{set_id}.json"
        payload = json.dumps([q.to_dict() for q in result.questions], ensure_ascii=False)
        self.store.put_blob(file_path, payload.encode("utf-8"))

        row = {
            "id": set_id,
            "user_id": user_id,
            "name": name.strip(),
            "file_path": file_path,
            "question_count": len(result.questions),
            "created_at": _now_iso(),
        }
        self.store.insert_question_set(row)
        logger.info("Stored question set %s (%d questions)", set_id, row["question_count"])
        return {"id": set_id, "name": row["name"], "question_count": row["question_count"]}

    def list_question_sets(self, user_id: str) -> List[Dict[str, Any]]:
        """Question sets owned by the user, newest first."""
        return [
            {k: row[k] for k in ("id", "name", "question_count", "created_at")}
            for row in self.store.list_question_sets(user_id)
        ]

    def _owned_question_set(self, user_id: str, set_id: str) -> Dict[str, Any]:
        _require_uuid(set_id, "set_id")
        row = self.store.get_question_set(set_id)
        if row is None:
            raise NotFoundError(f"Question set {set_id} not found")
        if row["user_id"] != user_id:
            raise ForbiddenError(f"Question set {set_id} belongs to another user")
        return row

    def delete_question_set(self, user_id: str, set_id: str):
        """Delete a question set with its file, sessions and answers."""
        row = self._owned_question_set(user_id, set_id)
        self.store.delete_blob(row["file_path"])
        for session in self.store.list_sessions(set_id=set_id):
            self.store.delete_session(session["id"])
        self.store.delete_question_set(set_id)
        logger.info("Deleted question set %s", set_id)

    def _read_questions(self, file_path: str) -> List[Question]:
        raw = self.store.get_blob(file_path)
        try:
            data = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            raise ValidationError("Invalid question set format") from None
        result = self.validator.validate(data)
        if not result:
            raise ValidationError("Invalid question set format", errors=result.errors)
        return result.questions

    def load_questions(self, user_id: str, set_id: str) -> List[Question]:
        """
        Load the ordered questions of a question set.

        Raises:
            NotFoundError: If the set does not exist
            ForbiddenError: If the set belongs to another user
            ValidationError: If the stored file is malformed
        """
        row = self._owned_question_set(user_id, set_id)
        return self._read_questions(row["file_path"])

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def start_session(self, user_id: str, set_id: str) -> Dict[str, Any]:
        """
        Open a new quiz session for a question set.

        Returns:
            Dict with session_id, questions and total
        """
        if not isinstance(set_id, str) or not set_id.strip():
            raise ValidationError("set_id is required")

        row = self._owned_question_set(user_id, set_id)
        questions = self._read_questions(row["file_path"])

        session_id = str(uuid.uuid4())
        self.store.insert_session(
            {
                "id": session_id,
                "user_id": user_id,
                "set_id": row["id"],
                "set_name": row["name"],
                "started_at": _now_iso(),
                "completed_at": None,
                "grade": None,
                "correct_count": None,
                "total_count": None,
                "answers": [],
            }
        )
        logger.info("Started session %s on set %s", session_id, set_id)
        return {"session_id": session_id, "questions": questions, "total": len(questions)}

    def _owned_session(self, user_id: str, session_id: str) -> Dict[str, Any]:
        # Missing and foreign sessions look the same to the caller
        _require_uuid(session_id, "session ID")
        session = self.store.get_session(session_id)
        if session is None or session.get("user_id") != user_id:
            raise NotFoundError(f"Session {session_id} not found")
        return session

    def submit_answer(
        self,
        user_id: str,
        session_id: str,
        question_index: Any,
        answer_index: Any,
        time_taken_ms: Any = None,
    ) -> Dict[str, Any]:
        """
        Record the answer to one question.

        Args:
            user_id: Caller
            session_id: Session identifier
            question_index: Zero-based question index
            answer_index: Chosen option (0-3)
            time_taken_ms: Time spent; coerced to 0 when absent or invalid

        Returns:
            Dict with is_correct, correct_index and explanation

        Raises:
            ValidationError: Out-of-range indices or a repeated answer
            NotFoundError: Unknown session or question set
        """
        if not _is_int(answer_index) or not (0 <= answer_index < OPTION_COUNT):
            raise ValidationError(f"answer_index must be an integer 0-{OPTION_COUNT - 1}")
        if not _is_int(question_index) or question_index < 0:
            raise ValidationError("question_index must be a non-negative integer")
        time_ms = coerce_time_taken(time_taken_ms)

        session = self._owned_session(user_id, session_id)
        if session.get("completed_at"):
            raise ValidationError("Session is already completed")

        question_set = self.store.get_question_set(session["set_id"])
        if question_set is None:
            raise NotFoundError(f"Question set for session {session_id} not found")
        questions = self._read_questions(question_set["file_path"])

        if question_index >= len(questions):
            raise ValidationError("question_index out of range")
        if any(a["question_index"] == question_index for a in session.get("answers", [])):
            raise ValidationError(f"Question {question_index} already answered")

        question = questions[question_index]
        is_correct = question.is_correct(answer_index)
        self.store.insert_answer(
            session_id,
            {
                "question_index": question_index,
                "selected_index": answer_index,
                "correct_answer_index": question.correct_answer_index,
                "is_correct": is_correct,
                "time_taken_ms": time_ms,
            },
        )
        return {
            "is_correct": is_correct,
            "correct_index": question.correct_answer_index,
            "explanation": question.explanation,
        }

    def complete_session(self, user_id: str, session_id: str) -> Dict[str, Any]:
        """
        Finalize a session's grade.

        Idempotent: a completed session returns its stored aggregate.

        Returns:
            Dict with grade, correct_count and total_count
        """
        session = self._owned_session(user_id, session_id)
        if session.get("completed_at"):
            return {
                "grade": session["grade"],
                "correct_count": session["correct_count"],
                "total_count": session["total_count"],
            }

        answers = session.get("answers", [])
        total_count = len(answers)
        correct_count = sum(1 for a in answers if a["is_correct"])
        grade = calculate_grade(correct_count, total_count)

        self.store.update_session(
            session_id,
            completed_at=_now_iso(),
            grade=grade,
            correct_count=correct_count,
            total_count=total_count,
        )
        logger.info("Completed session %s: %s%% (%d/%d)", session_id, grade, correct_count, total_count)
        return {"grade": grade, "correct_count": correct_count, "total_count": total_count}

    def fetch_analytics(self, user_id: str, session_id: str) -> SessionAnalytics:
        """
        Derive analytics from the stored answer log.

        Works before completion too: the grade is then computed from the answers.

        Raises:
            NotFoundError: Unknown session
            ForbiddenError: Session belongs to another user
        """
        _require_uuid(session_id, "session ID")
        session = self.store.get_session(session_id)
        if session is None:
            raise NotFoundError(f"Session {session_id} not found")
        if session.get("user_id") != user_id:
            raise ForbiddenError(f"Session {session_id} belongs to another user")

        return build_session_analytics(
            session_id,
            self.store.list_answers(session_id),
            stored_grade=session.get("grade"),
        )

    def list_history(self, user_id: str) -> List[Dict[str, Any]]:
        """Completed sessions of the user, most recently completed first."""
        completed = [s for s in self.store.list_sessions(user_id=user_id) if s.get("completed_at")]
        completed.sort(key=lambda s: s["completed_at"], reverse=True)
        return [
            {k: s.get(k) for k in ("id", "set_name", "grade", "correct_count", "total_count", "completed_at")}
            for s in completed
        ]
