"""Repository interfaces for leetquiz persistent state."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from .models import AnswerResult, Attempt, Question


class QuestionRepository(ABC):
    """Persist generated questions and look them up by identifier."""

    @abstractmethod
    def create_question(self, question: Question) -> None:
        """Persist a new question; raise ``DuplicateIdError`` if the id exists."""

    @abstractmethod
    def get_question(self, question_id: str) -> Optional[Question]:
        """Return the stored question, if present."""


class AttemptRepository(ABC):
    """Append-only log of answers to stored questions."""

    @abstractmethod
    def record_attempt(
        self,
        question_id: str,
        selected_label: str,
        answered_at: Optional[datetime] = None,
    ) -> AnswerResult:
        """Check the question exists, grade the answer and append an attempt atomically."""

    @abstractmethod
    def list_attempts(self, question_id: str) -> List[Attempt]:
        """Return every attempt for a question, oldest first."""

    @abstractmethod
    def get_recent_attempts(
        self, since: Optional[datetime] = None, first_only: bool = False
    ) -> List[Attempt]:
        """Return attempts answered at or after ``since``, oldest first.

        ``first_only`` restricts the result to the earliest attempt per question.
        """


class QuestionArchive(ABC):
    """Write-only fallback record of synthesized questions."""

    @abstractmethod
    def append(self, question: Question) -> None:
        """Append the question to the archive."""


__all__ = ["AttemptRepository", "QuestionArchive", "QuestionRepository"]
