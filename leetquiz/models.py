"""Pydantic models for candidates, generated MCQs, stored questions and attempts."""
from __future__ import annotations

import re
import string
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


OPTION_LABELS = string.ascii_uppercase
MCQ_OPTION_COUNT = 4
# Question ids travel inside callback payloads, so they stay ASCII word characters.
QUESTION_ID_PATTERN = re.compile(r"[0-9A-Za-z_-]+")


def new_question_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Candidate(BaseModel):
    """A previously solved problem fetched from the candidate source."""

    id: str
    name: str
    tags: str = ""
    difficulty: Optional[str] = None
    recently_attempted: bool = False


# Generation schema ---------------------------------------------------------
class GeneratedOption(BaseModel):
    """Option as returned by the model, before a label is assigned."""

    content: str
    is_correct: bool


class GeneratedMcq(BaseModel):
    """Structured output requested from the generation service."""

    question: str = Field(description="The multiple-choice question stem.")
    leetcode_description: str = Field(
        description="A short description of the original coding problem."
    )
    options: List[GeneratedOption] = Field(
        description="Exactly four answer options, exactly one of them correct.",
        min_length=MCQ_OPTION_COUNT,
        max_length=MCQ_OPTION_COUNT,
    )
    explanation: str = Field(description="Why the correct option is correct.")

    @field_validator("options")
    @classmethod
    def validate_single_correct(cls, value: List[GeneratedOption]) -> List[GeneratedOption]:
        correct = sum(1 for option in value if option.is_correct)
        if correct != 1:
            raise ValueError(f"MCQ items require exactly one correct option, got {correct}")
        return value


# Stored entities -----------------------------------------------------------
class QuestionOption(BaseModel):
    """Labelled option persisted with its question."""

    model_config = ConfigDict(frozen=True)

    label: str = Field(pattern=r"^[A-Z]$")
    content: str
    is_correct: bool


class Question(BaseModel):
    """Generated question; immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_question_id)
    source_reference: str = ""
    prompt: str
    question_text: str
    options: List[QuestionOption]
    explanation: str
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("id")
    @classmethod
    def validate_id(cls, value: str) -> str:
        if not QUESTION_ID_PATTERN.fullmatch(value):
            raise ValueError("Question ids may only contain letters, digits, '_' and '-'")
        return value

    @model_validator(mode="after")
    def validate_options(self) -> "Question":
        if len(self.options) < 2:
            raise ValueError("MCQ items require at least two options")
        expected = list(OPTION_LABELS[: len(self.options)])
        if [option.label for option in self.options] != expected:
            raise ValueError("Option labels must be assigned sequentially from 'A'")
        if sum(1 for option in self.options if option.is_correct) != 1:
            raise ValueError("Exactly one option must be marked correct")
        return self

    @property
    def correct_option(self) -> QuestionOption:
        return next(option for option in self.options if option.is_correct)

    def option(self, label: str) -> Optional[QuestionOption]:
        wanted = label.strip().upper()
        return next((option for option in self.options if option.label == wanted), None)

    @classmethod
    def from_generated(
        cls,
        mcq: GeneratedMcq,
        source_reference: str = "",
        question_id: Optional[str] = None,
    ) -> "Question":
        """Assign a fresh identity and positional labels to a generated MCQ."""

        if len(mcq.options) > len(OPTION_LABELS):
            raise ValueError("Too many options to label")
        options = [
            QuestionOption(label=OPTION_LABELS[index], content=option.content, is_correct=option.is_correct)
            for index, option in enumerate(mcq.options)
        ]
        return cls(
            id=question_id or new_question_id(),
            source_reference=source_reference,
            prompt=mcq.leetcode_description,
            question_text=mcq.question,
            options=options,
            explanation=mcq.explanation,
        )


class Attempt(BaseModel):
    """One recorded answer to a question; append-only."""

    model_config = ConfigDict(frozen=True)

    id: int
    question_id: str
    selected_label: str
    is_correct: bool
    answered_at: datetime


class AnswerResult(BaseModel):
    """Outcome of recording an attempt, returned by the store."""

    question: Question
    attempt: Attempt
    first_attempt: bool

    @property
    def is_correct(self) -> bool:
        return self.attempt.is_correct


# Telegram webhook payloads -------------------------------------------------
class TelegramChat(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: int


class TelegramMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message_id: int
    chat: TelegramChat
    text: Optional[str] = None


class TelegramCallbackQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    data: Optional[str] = None
    message: Optional[TelegramMessage] = None


class TelegramUpdate(BaseModel):
    """Subset of a Telegram ``Update`` the webhook cares about."""

    model_config = ConfigDict(extra="ignore")

    update_id: int
    callback_query: Optional[TelegramCallbackQuery] = None


__all__ = [
    "AnswerResult",
    "Attempt",
    "Candidate",
    "GeneratedMcq",
    "GeneratedOption",
    "MCQ_OPTION_COUNT",
    "OPTION_LABELS",
    "Question",
    "QuestionOption",
    "TelegramCallbackQuery",
    "TelegramChat",
    "TelegramMessage",
    "TelegramUpdate",
    "new_question_id",
    "utcnow",
]
