"""Daily trigger for the batch pipeline."""
from __future__ import annotations

import asyncio
import functools
import logging
from datetime import time
from typing import Awaitable, Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from .errors import ConfigurationError, LeetQuizError


logger = logging.getLogger(__name__)

DAILY_JOB_ID = "daily-batch"
# A batch that missed its slot (host asleep, event loop busy) still runs if it is this late.
MISFIRE_GRACE_SECONDS = 3600


def parse_time_of_day(value: str) -> time:
    try:
        hours, minutes = value.split(":")
        return time(hour=int(hours), minute=int(minutes))
    except ValueError as exc:
        raise ConfigurationError(f"Expected HH:MM, got {value!r}") from exc


def daily_trigger(at: str = "09:00", timezone: Optional[str] = None) -> CronTrigger:
    """Cron trigger firing once a day at local wall-clock ``at``.

    Without ``timezone`` the host's local zone is used.
    """

    when = parse_time_of_day(at)
    try:
        return CronTrigger(hour=when.hour, minute=when.minute, timezone=timezone)
    except (KeyError, ValueError) as exc:
        raise ConfigurationError(f"Unknown timezone {timezone!r}") from exc


async def run_guarded(job: Callable[[], Awaitable[object]]) -> None:
    try:
        await job()
    except LeetQuizError:
        logger.exception("Scheduled batch failed")


def build_scheduler(
    job: Callable[[], Awaitable[object]],
    at: str = "09:00",
    timezone: Optional[str] = None,
) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        functools.partial(run_guarded, job),
        daily_trigger(at, timezone),
        id=DAILY_JOB_ID,
        coalesce=True,
        max_instances=1,
        misfire_grace_time=MISFIRE_GRACE_SECONDS,
    )
    return scheduler


async def run_daily(
    job: Callable[[], Awaitable[object]],
    at: str = "09:00",
    timezone: Optional[str] = None,
    stop: Optional[asyncio.Event] = None,
) -> None:
    """Run ``job`` every day at ``at`` until ``stop`` is set; a failed run never stops it."""

    scheduler = build_scheduler(job, at, timezone)
    stop = stop or asyncio.Event()
    scheduler.start()
    logger.info("Next batch at %s", scheduler.get_job(DAILY_JOB_ID).next_run_time)
    try:
        await stop.wait()
    finally:
        scheduler.shutdown(wait=False)


__all__ = ["build_scheduler", "daily_trigger", "parse_time_of_day", "run_daily", "run_guarded"]
