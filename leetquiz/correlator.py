"""Matches inbound button presses back to stored questions and records answers."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from telegram.helpers import escape_markdown

from .actions import ActionDecodeFailure, decode_action
from .errors import DeliveryError, QuestionNotFoundError, StoreError
from .metrics import METRICS, MetricsRegistry
from .models import AnswerResult, TelegramCallbackQuery
from .repositories import AttemptRepository
from .streak import StreakCalculator
from .transport import ChatTransport


logger = logging.getLogger(__name__)

FAILURE_MESSAGE = "An error occurred while recording your answer. Please try again."


class CorrelationOutcome(str, Enum):
    CORRECT = "correct"
    INCORRECT = "incorrect"
    MALFORMED = "malformed"
    NOT_FOUND = "not_found"
    FAILED = "failed"


@dataclass(frozen=True)
class InboundAction:
    """Transport-neutral view of a button press."""

    action_id: str
    data: Optional[str]
    chat_id: Optional[int] = None
    message_id: Optional[int] = None
    message_text: Optional[str] = None

    @classmethod
    def from_callback_query(cls, callback: TelegramCallbackQuery) -> "InboundAction":
        message = callback.message
        return cls(
            action_id=callback.id,
            data=callback.data,
            chat_id=message.chat.id if message else None,
            message_id=message.message_id if message else None,
            message_text=message.text if message else None,
        )


def _plural_days(count: int) -> str:
    return "day" if count == 1 else "days"


def render_correct(streak: int, first_attempt: bool) -> str:
    message = f"Correct! 🎉\n\n*Current streak:* {streak} {_plural_days(streak)}"
    if not first_attempt:
        message += "\n\n_Already answered before: only your first answer counts toward the streak._"
    return message


def render_incorrect(result: AnswerResult) -> str:
    question = result.question
    correct = question.correct_option
    selected = question.option(result.attempt.selected_label)
    selected_text = result.attempt.selected_label
    if selected is not None:
        selected_text = f"{selected.label}. {escape_markdown(selected.content, version=1)}"
    return (
        "Incorrect. 😞\n\n"
        f"*Question:*\n{escape_markdown(question.question_text, version=1)}\n\n"
        f"*Your Answer:*\n{selected_text}\n\n"
        f"*Correct Answer:*\n{correct.label}. {escape_markdown(correct.content, version=1)}\n\n"
        f"*Explanation:*\n{escape_markdown(question.explanation, version=1)}"
    )


class AnswerCorrelator:
    """Handles one inbound action end to end without ever raising."""

    def __init__(
        self,
        store: AttemptRepository,
        transport: ChatTransport,
        streaks: StreakCalculator,
        metrics: MetricsRegistry = METRICS,
    ) -> None:
        self._store = store
        self._transport = transport
        self._streaks = streaks
        self._metrics = metrics

    async def handle_inbound_action(self, action: InboundAction) -> CorrelationOutcome:
        # Acknowledge first so the button stops spinning whatever happens next.
        await self._acknowledge(action.action_id)

        decoded = decode_action(action.data)
        if isinstance(decoded, ActionDecodeFailure):
            logger.error("Dropping malformed action %r: %s", decoded.raw, decoded.reason)
            self._metrics.record_rejected_action("malformed")
            return CorrelationOutcome.MALFORMED

        await self._mark_selected(action, decoded.selected_label)

        try:
            result = await asyncio.to_thread(
                self._store.record_attempt, decoded.question_id, decoded.selected_label
            )
        except QuestionNotFoundError:
            logger.warning("Answer for unknown question %s", decoded.question_id)
            self._metrics.record_rejected_action("not_found")
            await self._notify(FAILURE_MESSAGE)
            return CorrelationOutcome.NOT_FOUND
        except StoreError:
            logger.exception("Failed to record answer for question %s", decoded.question_id)
            self._metrics.record_rejected_action("store_error")
            await self._notify(FAILURE_MESSAGE)
            return CorrelationOutcome.FAILED

        self._metrics.record_answer(result.is_correct, result.first_attempt)
        logger.info(
            "Recorded attempt %s for question %s: %s",
            result.attempt.id,
            decoded.question_id,
            "correct" if result.is_correct else "incorrect",
        )

        if result.is_correct:
            try:
                streak = await asyncio.to_thread(
                    self._streaks.current_streak, result.attempt.answered_at
                )
            except StoreError:
                logger.exception("Failed to compute streak after attempt %s", result.attempt.id)
                await self._notify("Correct! 🎉")
                return CorrelationOutcome.CORRECT
            await self._notify(render_correct(streak, result.first_attempt))
            return CorrelationOutcome.CORRECT

        await self._notify(render_incorrect(result))
        return CorrelationOutcome.INCORRECT

    async def _acknowledge(self, action_id: str) -> None:
        try:
            await self._transport.acknowledge_action(action_id)
        except DeliveryError as exc:
            logger.warning("Could not acknowledge action %s: %s", action_id, exc)

    async def _mark_selected(self, action: InboundAction, label: str) -> None:
        if action.chat_id is None or action.message_id is None:
            logger.warning("Action %s has no message to update", action.action_id)
            return
        original = escape_markdown(action.message_text or "", version=1)
        text = f"{original}\n\n*You selected:* {label}"
        try:
            await self._transport.edit_message(action.chat_id, action.message_id, text)
        except DeliveryError as exc:
            logger.warning("Could not update message %s: %s", action.message_id, exc)

    async def _notify(self, text: str) -> None:
        try:
            await self._transport.send_message(text)
        except DeliveryError as exc:
            logger.error("Could not send answer notification: %s", exc)


__all__ = [
    "AnswerCorrelator",
    "CorrelationOutcome",
    "FAILURE_MESSAGE",
    "InboundAction",
    "render_correct",
    "render_incorrect",
]
