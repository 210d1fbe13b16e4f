"""Tests for the daily trigger."""
from __future__ import annotations

import asyncio
from datetime import datetime, time, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
from apscheduler.triggers.cron import CronTrigger

from leetquiz.errors import ConfigurationError, SourceFetchError
from leetquiz.scheduler import (
    DAILY_JOB_ID,
    build_scheduler,
    daily_trigger,
    parse_time_of_day,
    run_daily,
    run_guarded,
)


def test_parse_time_of_day():
    assert parse_time_of_day("07:30") == time(7, 30)
    with pytest.raises(ConfigurationError):
        parse_time_of_day("7pm")


def test_trigger_fires_later_today():
    now = datetime(2026, 3, 1, 8, 0, tzinfo=timezone.utc)

    fire = daily_trigger("09:00", "UTC").get_next_fire_time(None, now)

    assert fire.astimezone(timezone.utc) == datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)


def test_trigger_rolls_over_to_tomorrow():
    now = datetime(2026, 3, 1, 9, 0, 1, tzinfo=timezone.utc)

    fire = daily_trigger("09:00", "UTC").get_next_fire_time(None, now)

    assert fire.astimezone(timezone.utc) == datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def test_trigger_keeps_wall_clock_time_across_dst_change():
    zoneinfo = pytest.importorskip("zoneinfo")
    try:
        new_york = zoneinfo.ZoneInfo("America/New_York")
    except zoneinfo.ZoneInfoNotFoundError:
        pytest.skip("tz database not available")
    # Clocks spring forward overnight into 8 March 2026.
    now = datetime(2026, 3, 7, 10, 0, tzinfo=new_york)

    fire = daily_trigger("09:00", "America/New_York").get_next_fire_time(None, now)

    assert (fire.year, fire.month, fire.day, fire.hour, fire.minute) == (2026, 3, 8, 9, 0)
    assert fire.utcoffset() == timedelta(hours=-4)
    assert fire.astimezone(timezone.utc) - now.astimezone(timezone.utc) == timedelta(hours=22)


def test_unknown_timezone_is_a_configuration_error():
    with pytest.raises(ConfigurationError):
        daily_trigger("09:00", "Mars/Olympus_Mons")


def test_scheduler_registers_one_daily_job():
    scheduler = build_scheduler(AsyncMock(), at="06:45", timezone="UTC")

    jobs = scheduler.get_jobs()

    assert [job.id for job in jobs] == [DAILY_JOB_ID]
    assert isinstance(jobs[0].trigger, CronTrigger)


def test_failed_run_is_logged_not_raised(caplog):
    job = AsyncMock(side_effect=SourceFetchError("down"))

    asyncio.run(run_guarded(job))

    job.assert_awaited_once()
    assert "Scheduled batch failed" in caplog.text


def test_run_daily_stops_when_asked():
    job = AsyncMock()

    async def scenario():
        stop = asyncio.Event()
        stop.set()
        await run_daily(job, at="09:00", timezone="UTC", stop=stop)

    asyncio.run(scenario())

    job.assert_not_awaited()
