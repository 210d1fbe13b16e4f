"""Renders stored questions and pushes them through the chat transport."""
from __future__ import annotations

import asyncio
import logging
from typing import List

from telegram.helpers import escape_markdown

from .actions import encode_action
from .errors import DeliveryError
from .metrics import METRICS, MetricsRegistry
from .models import Question
from .transport import ActionButton, ChatTransport


logger = logging.getLogger(__name__)


def escape(text: str) -> str:
    return escape_markdown(text, version=1)


def render_context(question: Question) -> str:
    return f"*Leetcode Question:*\n{escape(question.prompt)}\n\n"


def render_question(question: Question) -> str:
    options = "\n\n".join(
        f"{option.label}. {escape(option.content)}" for option in question.options
    )
    return f"*Question:*\n{escape(question.question_text)}\n\n*Options:*\n{options}"


def build_actions(question: Question) -> List[List[ActionButton]]:
    """One button per row, each carrying the question id and its option label."""

    return [
        [ActionButton(text=option.label, payload=encode_action(question.id, option.label))]
        for option in question.options
    ]


class DeliveryChannel:
    """Stateless sender: everything needed later travels in the button payloads."""

    def __init__(
        self,
        transport: ChatTransport,
        message_delay: float = 0.5,
        metrics: MetricsRegistry = METRICS,
    ) -> None:
        self._transport = transport
        self._message_delay = message_delay
        self._metrics = metrics

    async def deliver(self, question: Question) -> bool:
        """Send the context message, then the question with its answer buttons.

        Returns ``False`` if either message failed; failures are logged, not raised.
        """

        actions = build_actions(question)
        try:
            await self._transport.send_message(render_context(question))
        except DeliveryError as exc:
            logger.error("Context message for question %s failed: %s", question.id, exc)
            self._metrics.record_delivery(False)
            return False

        # Telegram occasionally drops messages sent in quick succession.
        await asyncio.sleep(self._message_delay)

        try:
            await self._transport.send_message(render_question(question), actions)
        except DeliveryError as exc:
            logger.error("Question message for question %s failed: %s", question.id, exc)
            self._metrics.record_delivery(False)
            return False

        logger.info("Delivered question %s", question.id)
        self._metrics.record_delivery(True)
        return True


__all__ = ["DeliveryChannel", "build_actions", "render_context", "render_question"]
