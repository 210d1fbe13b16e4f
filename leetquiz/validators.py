"""Validation utilities for generated questions prior to persistence."""
from __future__ import annotations

import re

from .models import MCQ_OPTION_COUNT, GeneratedMcq


FORBIDDEN_PATTERNS = (
    re.compile(r"\bTODO\b", re.IGNORECASE),
    re.compile(r"\bTBD\b", re.IGNORECASE),
    re.compile(r"lorem ipsum", re.IGNORECASE),
    re.compile(r"\?{3,}"),
)
MAX_OPTION_LENGTH = 1000


class ValidationError(ValueError):
    """Raised when a generated question fails validation."""


def _normalize(text: str) -> str:
    return " ".join(text.lower().split())


def _assert_forbidden_patterns(text: str, context: str) -> None:
    for pattern in FORBIDDEN_PATTERNS:
        if pattern.search(text):
            raise ValidationError(f"Forbidden pattern detected in {context}: '{pattern.pattern}'")


def _assert_non_empty(text: str, context: str) -> None:
    if not text.strip():
        raise ValidationError(f"Generated {context} is empty")


def validate_generated_mcq(mcq: GeneratedMcq) -> None:
    """Validate a generated MCQ for structural and content quality."""

    _assert_non_empty(mcq.question, "question")
    _assert_non_empty(mcq.leetcode_description, "problem description")
    _assert_non_empty(mcq.explanation, "explanation")

    _assert_forbidden_patterns(mcq.question, "question")
    _assert_forbidden_patterns(mcq.leetcode_description, "problem description")
    _assert_forbidden_patterns(mcq.explanation, "explanation")

    if len(mcq.options) != MCQ_OPTION_COUNT:
        raise ValidationError(
            f"MCQ items require exactly {MCQ_OPTION_COUNT} options, got {len(mcq.options)}"
        )
    correct = [option for option in mcq.options if option.is_correct]
    if len(correct) != 1:
        raise ValidationError(f"MCQ items require exactly one correct option, got {len(correct)}")

    seen = set()
    for option in mcq.options:
        _assert_non_empty(option.content, "option")
        _assert_forbidden_patterns(option.content, "option")
        if len(option.content) > MAX_OPTION_LENGTH:
            raise ValidationError("Generated option exceeds the maximum length")
        key = _normalize(option.content)
        if key in seen:
            raise ValidationError(f"Duplicate option detected: {option.content!r}")
        seen.add(key)


__all__ = ["ValidationError", "validate_generated_mcq"]
