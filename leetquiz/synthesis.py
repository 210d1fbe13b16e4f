"""Turns candidate problems into labelled multiple-choice questions via Anthropic."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import anthropic
from anthropic import AsyncAnthropic
from pydantic import ValidationError as SchemaError

from .errors import ConfigurationError, GenerationError
from .metrics import METRICS, MetricsRegistry
from .models import Candidate, GeneratedMcq, Question
from .validators import ValidationError, validate_generated_mcq


logger = logging.getLogger(__name__)

MCQ_TOOL_NAME = "record_mcq"
PROMPT_TEMPLATE = (
    "Leetcode Question: {name}. Tags: {tags}. Generate a MCQ question with 4 options "
    "to test my understanding of the approach of the question."
)


def build_prompt(candidate: Candidate) -> str:
    return PROMPT_TEMPLATE.format(name=candidate.name, tags=candidate.tags or "none")


def mcq_tool() -> Dict[str, Any]:
    return {
        "name": MCQ_TOOL_NAME,
        "description": "Record the generated multiple-choice question.",
        "input_schema": GeneratedMcq.model_json_schema(),
    }


class QuestionSynthesizer:
    """One-shot generation per candidate; a response is either fully valid or discarded."""

    def __init__(
        self,
        client: AsyncAnthropic,
        model: str,
        max_tokens: int = 1024,
        metrics: MetricsRegistry = METRICS,
    ) -> None:
        self._client = client
        self._model = model
        self._max_tokens = max_tokens
        self._metrics = metrics

    @classmethod
    def from_api_key(
        cls,
        api_key: str,
        model: str,
        max_tokens: int = 1024,
        timeout: Optional[float] = 60.0,
    ) -> "QuestionSynthesizer":
        if not api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY not set")
        # Retries belong to the batch driver, not the client.
        client = AsyncAnthropic(api_key=api_key, timeout=timeout, max_retries=0)
        return cls(client, model, max_tokens=max_tokens)

    async def synthesize(self, candidate: Candidate) -> Question:
        self._metrics.record_generation_attempt()
        try:
            mcq = await self._generate(candidate)
        except GenerationError as exc:
            self._metrics.record_generation_failure(exc.reason)
            raise
        question = Question.from_generated(mcq, source_reference=candidate.id)
        self._metrics.record_generation_success()
        logger.info("Synthesized question %s for %r", question.id, candidate.name)
        return question

    async def _generate(self, candidate: Candidate) -> GeneratedMcq:
        try:
            response = await self._client.messages.create(
                model=self._model,
                max_tokens=self._max_tokens,
                tools=[mcq_tool()],
                tool_choice={"type": "tool", "name": MCQ_TOOL_NAME},
                messages=[{"role": "user", "content": build_prompt(candidate)}],
            )
        except anthropic.APIError as exc:
            raise GenerationError(f"Generation request failed: {exc}", reason="api_error") from exc

        payload = next(
            (
                block.input
                for block in response.content
                if getattr(block, "type", None) == "tool_use" and block.name == MCQ_TOOL_NAME
            ),
            None,
        )
        if payload is None:
            raise GenerationError(
                f"No structured output for {candidate.name!r}", reason="missing_output"
            )

        try:
            mcq = GeneratedMcq.model_validate(payload)
            validate_generated_mcq(mcq)
        except (SchemaError, ValidationError) as exc:
            raise GenerationError(
                f"Invalid MCQ for {candidate.name!r}: {exc}", reason="invalid_output"
            ) from exc
        return mcq


__all__ = ["QuestionSynthesizer", "build_prompt", "mcq_tool"]
