"""Daily practice streak derived from the recorded attempt history."""
from __future__ import annotations

from datetime import date, datetime, timedelta, tzinfo
from typing import Iterable, Optional, Set, Union
from zoneinfo import ZoneInfo

from .repositories import AttemptRepository


def compute_streak(days: Iterable[date], as_of: date) -> int:
    """Count consecutive calendar days ending at ``as_of`` that appear in ``days``."""

    present: Set[date] = set(days)
    streak = 0
    current = as_of
    while current in present:
        streak += 1
        current -= timedelta(days=1)
    return streak


class StreakCalculator:
    """Computes the current streak from attempts on every request.

    Only the first attempt at each question counts, so answering the same
    question again (or a duplicate callback) can never extend a streak.
    """

    def __init__(self, attempts: AttemptRepository, timezone: Optional[str] = None) -> None:
        self._attempts = attempts
        self._tz: Optional[tzinfo] = ZoneInfo(timezone) if timezone else None

    def local_date(self, moment: datetime) -> date:
        if self._tz is not None:
            return moment.astimezone(self._tz).date()
        return moment.astimezone().date()

    def current_streak(self, as_of: Union[datetime, date, None] = None) -> int:
        if as_of is None:
            as_of = datetime.now().astimezone()
        as_of_date = self.local_date(as_of) if isinstance(as_of, datetime) else as_of

        days = {
            self.local_date(attempt.answered_at)
            for attempt in self._attempts.get_recent_attempts(first_only=True)
            if attempt.is_correct
        }
        return compute_streak((day for day in days if day <= as_of_date), as_of_date)


__all__ = ["StreakCalculator", "compute_streak"]
