from datetime import UTC, datetime

import pytest
from fastapi.testclient import TestClient

from main import create_app
from repository import QuestionStore
from stats import StatisticsEngine


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, iso: str) -> None:
        self.now = datetime.fromisoformat(iso).astimezone(UTC)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 1, 10, 12, 0, tzinfo=UTC))


@pytest.fixture
def store(clock):
    # every store gets its own in-memory database
    return QuestionStore.from_url("sqlite://", clock=clock)


@pytest.fixture
def stats(store):
    return StatisticsEngine(store)


@pytest.fixture
def client(store):
    return TestClient(create_app(store))


@pytest.fixture
def answer(store, clock):
    """Create a fresh question at ``when`` and answer it right or wrong."""

    def _answer(when: str, correct: bool = True) -> int:
        clock.set(when)
        q = store.new_question()
        given = q.expected_answer if correct else q.expected_answer + 1
        store.answer_question(q.id, given)
        return q.id

    return _answer
