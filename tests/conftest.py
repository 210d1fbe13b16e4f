"""Shared fixtures for leetquiz tests."""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import pytest

from leetquiz.errors import DeliveryError
from leetquiz.metrics import MetricsRegistry
from leetquiz.models import Candidate, GeneratedMcq, GeneratedOption, Question
from leetquiz.storage import SqliteQuizStore
from leetquiz.transport import ActionButton, ChatTransport, SentMessage


class RecordingTransport(ChatTransport):
    """In-memory transport that records every call and can be told to fail."""

    def __init__(self) -> None:
        self.sent: List[Tuple[str, Optional[Sequence[Sequence[ActionButton]]]]] = []
        self.edits: List[Tuple[int, int, str]] = []
        self.acks: List[str] = []
        self.fail_send_at: Optional[int] = None
        self.fail_edit = False
        self.fail_ack = False
        self._next_id = 100

    async def send_message(self, text, actions=None) -> SentMessage:
        if self.fail_send_at is not None and len(self.sent) == self.fail_send_at:
            self.fail_send_at = None
            raise DeliveryError("send failed")
        self.sent.append((text, actions))
        self._next_id += 1
        return SentMessage(chat_id=42, message_id=self._next_id)

    async def edit_message(self, chat_id: int, message_id: int, text: str) -> None:
        if self.fail_edit:
            raise DeliveryError("edit failed")
        self.edits.append((chat_id, message_id, text))

    async def acknowledge_action(self, action_id: str) -> None:
        if self.fail_ack:
            raise DeliveryError("ack failed")
        self.acks.append(action_id)

    @property
    def texts(self) -> List[str]:
        return [text for text, _ in self.sent]


def make_mcq(correct_index: int = 1) -> GeneratedMcq:
    contents = [
        "Sort the array and use two pointers",
        "Store each value's index in a hash map and look up the complement",
        "Try every pair with nested loops",
        "Binary search for each complement",
    ]
    return GeneratedMcq(
        question="Which approach finds the pair in a single pass?",
        leetcode_description="Given an array of integers and a target, return indices of the two numbers that add up to the target.",
        options=[
            GeneratedOption(content=content, is_correct=index == correct_index)
            for index, content in enumerate(contents)
        ],
        explanation="A hash map gives O(1) complement lookups, so one pass suffices.",
    )


def make_question(question_id: str = "Q1", correct_index: int = 1) -> Question:
    return Question.from_generated(
        make_mcq(correct_index), source_reference="page-two-sum", question_id=question_id
    )


@pytest.fixture
def two_sum() -> Candidate:
    return Candidate(
        id="page-two-sum",
        name="Two Sum",
        tags="Array, Hash Table",
        difficulty="Medium",
        recently_attempted=True,
    )


@pytest.fixture
def question() -> Question:
    return make_question()


@pytest.fixture
def store(tmp_path) -> SqliteQuizStore:
    quiz_store = SqliteQuizStore(tmp_path / "questions.db")
    yield quiz_store
    quiz_store.close()


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def metrics() -> MetricsRegistry:
    return MetricsRegistry()
