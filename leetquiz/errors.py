"""Error taxonomy shared by the quiz pipeline and the webhook handler."""
from __future__ import annotations


class LeetQuizError(Exception):
    """Base class for all errors raised by leetquiz components."""


class ConfigurationError(LeetQuizError):
    """Required settings are missing or malformed."""


class SourceFetchError(LeetQuizError):
    """The candidate source is unreachable or returned malformed data."""


class GenerationError(LeetQuizError):
    """The model response was missing or did not validate against the MCQ schema."""

    def __init__(self, message: str, reason: str = "unknown") -> None:
        super().__init__(message)
        self.reason = reason


class DeliveryError(LeetQuizError):
    """A chat transport call (send, edit or acknowledge) failed."""


class StoreError(LeetQuizError):
    """The underlying persistence layer failed."""


class DuplicateIdError(StoreError):
    """A question with the same identifier already exists."""

    def __init__(self, question_id: str) -> None:
        super().__init__(f"Question {question_id} already exists")
        self.question_id = question_id


class QuestionNotFoundError(StoreError):
    """An attempt referenced a question identifier that is not stored."""

    def __init__(self, question_id: str) -> None:
        super().__init__(f"Question {question_id} not found")
        self.question_id = question_id


__all__ = [
    "ConfigurationError",
    "DeliveryError",
    "DuplicateIdError",
    "GenerationError",
    "LeetQuizError",
    "QuestionNotFoundError",
    "SourceFetchError",
    "StoreError",
]
