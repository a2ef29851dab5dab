"""
Unit tests for the file-backed QuizStore.
"""

import pytest

from telstudy.errors import InternalError, StorageError


class TestBlobs:

    def test_round_trip(self, store):
        store.put_blob("u1/set.json", b"[]")
        assert store.get_blob("u1/set.json") == b"[]"

    def test_missing_blob(self, store):
        with pytest.raises(StorageError):
            store.get_blob("u1/missing.json")

    def test_path_escape_rejected(self, store):
        with pytest.raises(StorageError):
            store.put_blob("../outside.json", b"x")

    def test_delete_missing_is_silent(self, store):
        store.delete_blob("u1/never.json")


class TestRows:

    def test_question_sets_newest_first(self, store):
        store.insert_question_set({"id": "a", "user_id": "u1", "created_at": "2024-01-01T00:00:00"})
        store.insert_question_set({"id": "b", "user_id": "u1", "created_at": "2024-02-01T00:00:00"})
        store.insert_question_set({"id": "c", "user_id": "u2", "created_at": "2024-03-01T00:00:00"})
        assert [r["id"] for r in store.list_question_sets("u1")] == ["b", "a"]

    def test_session_answers_sorted(self, store):
        store.insert_session({"id": "s1", "user_id": "u1", "set_id": "a"})
        store.insert_answer("s1", {"question_index": 2, "is_correct": True, "time_taken_ms": 1})
        store.insert_answer("s1", {"question_index": 0, "is_correct": False, "time_taken_ms": 2})
        assert [a["question_index"] for a in store.list_answers("s1")] == [0, 2]

    def test_update_session(self, store):
        store.insert_session({"id": "s1", "user_id": "u1", "set_id": "a"})
        store.update_session("s1", grade=50.0)
        assert store.get_session("s1")["grade"] == 50.0

    def test_update_missing_session(self, store):
        with pytest.raises(InternalError):
            store.update_session("nope", grade=1)

    def test_list_sessions_filters(self, store):
        store.insert_session({"id": "s1", "user_id": "u1", "set_id": "a"})
        store.insert_session({"id": "s2", "user_id": "u2", "set_id": "a"})
        store.insert_session({"id": "s3", "user_id": "u1", "set_id": "b"})
        assert {s["id"] for s in store.list_sessions(user_id="u1")} == {"s1", "s3"}
        assert {s["id"] for s in store.list_sessions(set_id="a")} == {"s1", "s2"}

    def test_corrupt_row(self, store):
        (store.sessions_dir / "bad.json").write_text("{oops")
        with pytest.raises(InternalError):
            store.get_session("bad")

    def test_missing_row_is_none(self, store):
        assert store.get_session("none") is None
        assert store.get_question_set("none") is None
