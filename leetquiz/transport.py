"""Chat transport interface and its Telegram implementation."""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence

from telegram import Bot, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.constants import ParseMode
from telegram.error import TelegramError

from .errors import DeliveryError


@dataclass(frozen=True)
class ActionButton:
    """Selectable action rendered under a message."""

    text: str
    payload: str


@dataclass(frozen=True)
class SentMessage:
    chat_id: int
    message_id: int


class ChatTransport(ABC):
    """Three-operation notification interface used by delivery and correlation."""

    @abstractmethod
    async def send_message(
        self, text: str, actions: Optional[Sequence[Sequence[ActionButton]]] = None
    ) -> SentMessage:
        """Send ``text`` to the configured chat with an optional grid of actions."""

    @abstractmethod
    async def edit_message(self, chat_id: int, message_id: int, text: str) -> None:
        """Replace the text of a previously sent message, dropping its actions."""

    @abstractmethod
    async def acknowledge_action(self, action_id: str) -> None:
        """Tell the transport an inbound action was received."""


def build_keyboard(actions: Sequence[Sequence[ActionButton]]) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        [
            [InlineKeyboardButton(text=button.text, callback_data=button.payload) for button in row]
            for row in actions
        ]
    )


class TelegramTransport(ChatTransport):
    """Talks to the Telegram Bot API for a single chat."""

    def __init__(
        self,
        bot: Bot,
        chat_id: str,
        timeout: float = 10.0,
        parse_mode: Optional[str] = ParseMode.MARKDOWN,
    ) -> None:
        self._bot = bot
        self._chat_id = chat_id
        self._timeout = timeout
        self._parse_mode = parse_mode

    @classmethod
    def from_token(cls, token: str, chat_id: str, timeout: float = 10.0) -> "TelegramTransport":
        return cls(Bot(token=token), chat_id, timeout=timeout)

    async def send_message(
        self, text: str, actions: Optional[Sequence[Sequence[ActionButton]]] = None
    ) -> SentMessage:
        reply_markup = build_keyboard(actions) if actions else None
        try:
            message = await self._bot.send_message(
                chat_id=self._chat_id,
                text=text,
                parse_mode=self._parse_mode,
                reply_markup=reply_markup,
                read_timeout=self._timeout,
                write_timeout=self._timeout,
            )
        except TelegramError as exc:
            raise DeliveryError(f"Failed to send message: {exc}") from exc
        return SentMessage(chat_id=message.chat_id, message_id=message.message_id)

    async def edit_message(self, chat_id: int, message_id: int, text: str) -> None:
        try:
            await self._bot.edit_message_text(
                text=text,
                chat_id=chat_id,
                message_id=message_id,
                parse_mode=self._parse_mode,
                read_timeout=self._timeout,
                write_timeout=self._timeout,
            )
        except TelegramError as exc:
            raise DeliveryError(f"Failed to edit message {message_id}: {exc}") from exc

    async def acknowledge_action(self, action_id: str) -> None:
        try:
            await self._bot.answer_callback_query(
                callback_query_id=action_id,
                read_timeout=self._timeout,
                write_timeout=self._timeout,
            )
        except TelegramError as exc:
            raise DeliveryError(f"Failed to acknowledge callback {action_id}: {exc}") from exc


__all__ = [
    "ActionButton",
    "ChatTransport",
    "SentMessage",
    "TelegramTransport",
    "build_keyboard",
]
