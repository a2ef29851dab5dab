"""
File-backed storage for question sets, quiz sessions and answers.

Stands in for the external row store + blob store:
- question_sets/<set_id>.json   question-set rows
- blobs/<user_id>/<file>.json   uploaded question-set files
- sessions/<session_id>.json    session rows with their answer log

Rows are plain dicts shaped like the external store's tables.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..config import config
from ..errors import InternalError, StorageError

logger = logging.getLogger(__name__)


class QuizStore:
    """
    Persistence of question-set rows, blobs, session rows and answer rows.

    Features:
    - One JSON file per row, written atomically
    - Thread-safe writes (one lock per store)
    - Missing rows return None; unreadable files raise InternalError/StorageError
    """

    def __init__(self, data_dir: Path | str = None):
        """
        Initialize the store.

        Args:
            data_dir: Root directory (default: config.paths.data_dir)
        """
        root = Path(data_dir) if data_dir else config.paths.data_dir
        self.data_dir = root
        self.question_sets_dir = root / "question_sets"
        self.blobs_dir = root / "blobs"
        self.sessions_dir = root / "sessions"
        for directory in (self.question_sets_dir, self.blobs_dir, self.sessions_dir):
            directory.mkdir(parents=True, exist_ok=True)

        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Low-level helpers
    # ------------------------------------------------------------------

    def _write_json(self, filepath: Path, data: Any):
        filepath.parent.mkdir(parents=True, exist_ok=True)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, filepath)
        except OSError as e:
            logger.error("Failed to write %s: %s", filepath, e)
            raise InternalError(f"Failed to write {filepath.name}: {e}") from e

    def _read_json(self, filepath: Path) -> Optional[Any]:
        if not filepath.exists():
            return None
        try:
            with open(filepath, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to read %s: %s", filepath, e)
            raise InternalError(f"Failed to read {filepath.name}: {e}") from e

    def _list_rows(self, directory: Path) -> List[Dict[str, Any]]:
        rows = []
        for filepath in directory.glob("*.json"):
            row = self._read_json(filepath)
            if row is not None:
                rows.append(row)
        return rows

    # ------------------------------------------------------------------
    # Blobs
    # ------------------------------------------------------------------

    def _blob_path(self, file_path: str) -> Path:
        resolved = (self.blobs_dir / file_path).resolve()
        if self.blobs_dir.resolve() not in resolved.parents:
            raise StorageError(f"Invalid blob path: {file_path}")
        return resolved

    def put_blob(self, file_path: str, content: bytes):
        """Store a blob at a path relative to the blob root."""
        target = self._blob_path(file_path)
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self._lock:
                target.write_bytes(content)
        except OSError as e:
            logger.error("Failed to upload blob %s: %s", file_path, e)
            raise StorageError(f"Failed to upload {file_path}") from e

    def get_blob(self, file_path: str) -> bytes:
        """Download a blob; raises StorageError when it is missing or unreadable."""
        target = self._blob_path(file_path)
        try:
            return target.read_bytes()
        except OSError as e:
            logger.error("Failed to download blob %s: %s", file_path, e)
            raise StorageError(f"Failed to load {file_path}") from e

    def delete_blob(self, file_path: str):
        target = self._blob_path(file_path)
        with self._lock:
            target.unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Question sets
    # ------------------------------------------------------------------

    def insert_question_set(self, row: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            self._write_json(self.question_sets_dir / f"{row['id']}.json", row)
        return row

    def get_question_set(self, set_id: str) -> Optional[Dict[str, Any]]:
        return self._read_json(self.question_sets_dir / f"{set_id}.json")

    def list_question_sets(self, user_id: str) -> List[Dict[str, Any]]:
        """Question sets owned by a user, newest first."""
        rows = [r for r in self._list_rows(self.question_sets_dir) if r.get("user_id") == user_id]
        rows.sort(key=lambda r: r.get("created_at", ""), reverse=True)
        return rows

    def delete_question_set(self, set_id: str):
        with self._lock:
            (self.question_sets_dir / f"{set_id}.json").unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Sessions and answers
    # ------------------------------------------------------------------

    def insert_session(self, row: Dict[str, Any]) -> Dict[str, Any]:
        row.setdefault("answers", [])
        with self._lock:
            self._write_json(self.sessions_dir / f"{row['id']}.json", row)
        return row

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        return self._read_json(self.sessions_dir / f"{session_id}.json")

    def update_session(self, session_id: str, **fields: Any) -> Dict[str, Any]:
        with self._lock:
            row = self.get_session(session_id)
            if row is None:
                raise InternalError(f"Session {session_id} disappeared during update")
            row.update(fields)
            self._write_json(self.sessions_dir / f"{session_id}.json", row)
        return row

    def list_sessions(
        self, user_id: Optional[str] = None, set_id: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        rows = self._list_rows(self.sessions_dir)
        if user_id is not None:
            rows = [r for r in rows if r.get("user_id") == user_id]
        if set_id is not None:
            rows = [r for r in rows if r.get("set_id") == set_id]
        return rows

    def delete_session(self, session_id: str):
        with self._lock:
            (self.sessions_dir / f"{session_id}.json").unlink(missing_ok=True)

    def insert_answer(self, session_id: str, answer: Dict[str, Any]) -> Dict[str, Any]:
        with self._lock:
            row = self.get_session(session_id)
            if row is None:
                raise InternalError(f"Session {session_id} disappeared during insert")
            row.setdefault("answers", []).append(answer)
            self._write_json(self.sessions_dir / f"{session_id}.json", row)
        return answer

    def list_answers(self, session_id: str) -> List[Dict[str, Any]]:
        """Answer rows of a session ordered by question index."""
        row = self.get_session(session_id) or {}
        return sorted(row.get("answers", []), key=lambda a: a["question_index"])


# Global store instance
_store: Optional[QuizStore] = None


def get_store() -> QuizStore:
    """Get or create the global store rooted at config.paths.data_dir."""
    global _store
    if _store is None:
        _store = QuizStore()
    return _store
