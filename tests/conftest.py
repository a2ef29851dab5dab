"""
Shared pytest fixtures and configuration for TelStudy tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import json
import uuid

import pytest

from telstudy.models.question import Question


class FakeClock:
    """Manually advanced clock returning milliseconds (or seconds)."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, amount: float):
        self.now += amount


def make_question_dicts(count: int = 5):
    """Question-set file content with correct answers cycling 0..3."""
    return [
        {
            "question_text": f"Question {i + 1}?",
            "options": [f"Option {i + 1}{letter}" for letter in "ABCD"],
            "correct_answer_index": i % 4,
            "explanation": f"Explanation {i + 1}",
        }
        for i in range(count)
    ]


@pytest.fixture
def question_dicts():
    """
    Fixture providing a valid five-question set.

    Returns:
        list: Question dicts; question i has correct_answer_index i % 4
    """
    return make_question_dicts(5)


@pytest.fixture
def questions(question_dicts):
    """Fixture providing the five-question set as Question objects."""
    return [Question.from_dict(q) for q in question_dicts]


@pytest.fixture
def question_file(question_dicts):
    """Fixture providing the five-question set as raw upload bytes."""
    return json.dumps(question_dicts).encode("utf-8")


@pytest.fixture
def user_id():
    return str(uuid.uuid4())


@pytest.fixture
def other_user_id():
    return str(uuid.uuid4())


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    """Fixture providing an empty file-backed store under tmp_path."""
    from telstudy.utils.persistence import QuizStore

    return QuizStore(data_dir=tmp_path / "data")


@pytest.fixture
def service(store):
    """Fixture providing a QuizService with a manual rate-limit clock."""
    from telstudy.orchestrator import QuizService

    return QuizService(
        store=store,
        clock=FakeClock(),
        max_uploads_per_window=3,
        upload_window_seconds=60,
    )


@pytest.fixture
def uploaded_set(service, user_id, question_file):
    """Fixture providing a stored question set owned by user_id."""
    return service.upload_question_set(user_id, "Sample set", "sample.json", question_file)


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark tests in unit/ directory as unit tests
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Mark tests in integration/ directory as integration tests
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
