"""Runtime configuration assembled from the process environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv

from .errors import ConfigurationError


T = TypeVar("T")


def _parse(env: Mapping[str, str], key: str, default: T, cast: Callable[[str], T]) -> T:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"Invalid value for {key}: {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Explicit configuration handed to every component at construction time."""

    telegram_token: str = ""
    telegram_chat_id: str = ""
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-5"
    max_tokens: int = 1024
    notion_token: str = ""
    notion_database_id: str = ""
    database_path: Path = Path("questions.db")
    archive_path: Path = Path("mcqs.jsonl")
    sample_size: int = 1
    difficulty: str = "Medium"
    message_delay_seconds: float = 0.5
    generation_timeout: float = 60.0
    transport_timeout: float = 10.0
    schedule_at: str = "09:00"
    timezone: Optional[str] = None

    @classmethod
    def from_env(
        cls, env: Optional[Mapping[str, str]] = None, dotenv: bool = True
    ) -> "Settings":
        """Build settings from ``env`` (defaults to ``os.environ`` after loading ``.env``)."""

        if env is None:
            if dotenv:
                load_dotenv()
            env = os.environ

        def text(key: str, default: str = "") -> str:
            return _parse(env, key, default, str)

        settings = cls(
            telegram_token=text("TELEGRAM_BOT_TOKEN"),
            telegram_chat_id=text("TELEGRAM_CHAT_ID"),
            anthropic_api_key=text("ANTHROPIC_API_KEY"),
            anthropic_model=text("LEETQUIZ_MODEL", cls.anthropic_model),
            max_tokens=_parse(env, "LEETQUIZ_MAX_TOKENS", cls.max_tokens, int),
            notion_token=text("NOTION_TOKEN"),
            notion_database_id=text("DATABASE_ID"),
            database_path=_parse(env, "LEETQUIZ_DB_PATH", cls.database_path, Path),
            archive_path=_parse(env, "LEETQUIZ_ARCHIVE_PATH", cls.archive_path, Path),
            sample_size=_parse(env, "LEETQUIZ_SAMPLE_SIZE", cls.sample_size, int),
            difficulty=text("LEETQUIZ_DIFFICULTY", cls.difficulty),
            message_delay_seconds=_parse(
                env, "LEETQUIZ_MESSAGE_DELAY", cls.message_delay_seconds, float
            ),
            generation_timeout=_parse(
                env, "LEETQUIZ_GENERATION_TIMEOUT", cls.generation_timeout, float
            ),
            transport_timeout=_parse(
                env, "LEETQUIZ_TRANSPORT_TIMEOUT", cls.transport_timeout, float
            ),
            schedule_at=text("LEETQUIZ_SCHEDULE_AT", cls.schedule_at),
            timezone=_parse(env, "LEETQUIZ_TIMEZONE", None, str),
        )
        if settings.sample_size < 1:
            raise ConfigurationError("LEETQUIZ_SAMPLE_SIZE must be at least 1")
        return settings

    def require(self, *names: str) -> None:
        """Raise ``ConfigurationError`` if any of the named fields is empty."""

        known = {field.name for field in fields(self)}
        unknown = [name for name in names if name not in known]
        if unknown:
            raise ConfigurationError(f"Unknown settings: {', '.join(unknown)}")
        missing = [name for name in names if not getattr(self, name)]
        if missing:
            raise ConfigurationError(f"Missing required settings: {', '.join(missing)}")


__all__ = ["Settings"]
