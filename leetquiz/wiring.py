"""Component factories shared by the web app and the command line."""
from __future__ import annotations

from .config import Settings
from .correlator import AnswerCorrelator
from .delivery import DeliveryChannel
from .pipeline import QuizPipeline
from .sources import NotionCandidateSource
from .storage import JsonlQuestionArchive, SqliteQuizStore
from .streak import StreakCalculator
from .synthesis import QuestionSynthesizer
from .transport import TelegramTransport


def build_store(settings: Settings) -> SqliteQuizStore:
    return SqliteQuizStore(settings.database_path)


def build_transport(settings: Settings) -> TelegramTransport:
    settings.require("telegram_token", "telegram_chat_id")
    return TelegramTransport.from_token(
        settings.telegram_token, settings.telegram_chat_id, timeout=settings.transport_timeout
    )


def build_pipeline(settings: Settings, store: SqliteQuizStore) -> QuizPipeline:
    settings.require("notion_token", "notion_database_id", "anthropic_api_key")
    return QuizPipeline(
        source=NotionCandidateSource.from_token(
            settings.notion_token, settings.notion_database_id
        ),
        synthesizer=QuestionSynthesizer.from_api_key(
            settings.anthropic_api_key,
            settings.anthropic_model,
            max_tokens=settings.max_tokens,
            timeout=settings.generation_timeout,
        ),
        store=store,
        archive=JsonlQuestionArchive(settings.archive_path),
        channel=DeliveryChannel(
            build_transport(settings), message_delay=settings.message_delay_seconds
        ),
        sample_size=settings.sample_size,
        difficulty=settings.difficulty,
    )


def build_correlator(settings: Settings, store: SqliteQuizStore) -> AnswerCorrelator:
    return AnswerCorrelator(
        store=store,
        transport=build_transport(settings),
        streaks=StreakCalculator(store, timezone=settings.timezone),
    )


__all__ = ["build_correlator", "build_pipeline", "build_store", "build_transport"]
