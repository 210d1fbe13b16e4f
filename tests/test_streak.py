"""Tests for streak computation over recorded attempts."""
from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from leetquiz.streak import StreakCalculator, compute_streak

from conftest import make_question


def local(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour).astimezone()


@pytest.fixture
def calculator(store):
    for index in range(1, 6):
        store.create_question(make_question(f"Q{index}"))
    return StreakCalculator(store)


def test_compute_streak_counts_back_from_as_of():
    days = [date(2026, 3, 1), date(2026, 3, 2), date(2026, 3, 3)]

    assert compute_streak(days, date(2026, 3, 3)) == 3
    assert compute_streak(days, date(2026, 3, 4)) == 0


def test_no_attempts_means_zero(calculator):
    assert calculator.current_streak(local(2026, 3, 1)) == 0


def test_wrong_answers_do_not_count(store, calculator):
    store.record_attempt("Q1", "A", answered_at=local(2026, 3, 1))

    assert calculator.current_streak(local(2026, 3, 1)) == 0


def test_gap_day_resets_streak(store, calculator):
    store.record_attempt("Q1", "B", answered_at=local(2026, 3, 1))
    store.record_attempt("Q2", "B", answered_at=local(2026, 3, 2))
    store.record_attempt("Q3", "B", answered_at=local(2026, 3, 4))

    assert calculator.current_streak(local(2026, 3, 4)) == 1
    assert calculator.current_streak(local(2026, 3, 2)) == 2


def test_consecutive_days_accumulate(store, calculator):
    store.record_attempt("Q1", "B", answered_at=local(2026, 3, 1))
    store.record_attempt("Q2", "b", answered_at=local(2026, 3, 2))
    store.record_attempt("Q3", "B", answered_at=local(2026, 3, 3, hour=23))

    assert calculator.current_streak(date(2026, 3, 3)) == 3


def test_streak_is_zero_when_today_has_no_correct_answer(store, calculator):
    store.record_attempt("Q1", "B", answered_at=local(2026, 3, 1))

    assert calculator.current_streak(local(2026, 3, 2)) == 0


def test_later_attempts_at_same_question_do_not_extend_streak(store, calculator):
    store.record_attempt("Q1", "A", answered_at=local(2026, 3, 1))
    store.record_attempt("Q1", "B", answered_at=local(2026, 3, 1, hour=13))
    store.record_attempt("Q2", "B", answered_at=local(2026, 3, 2))
    store.record_attempt("Q2", "B", answered_at=local(2026, 3, 3))

    assert calculator.current_streak(local(2026, 3, 2)) == 1
    assert calculator.current_streak(local(2026, 3, 3)) == 0


def test_multiple_correct_answers_on_one_day_count_once(store, calculator):
    store.record_attempt("Q1", "B", answered_at=local(2026, 3, 1, hour=9))
    store.record_attempt("Q2", "B", answered_at=local(2026, 3, 1, hour=18))

    assert calculator.current_streak(local(2026, 3, 1)) == 1


def test_days_follow_configured_timezone(store):
    zoneinfo = pytest.importorskip("zoneinfo")
    try:
        zoneinfo.ZoneInfo("Asia/Tokyo")
    except zoneinfo.ZoneInfoNotFoundError:
        pytest.skip("tz database not available")
    store.create_question(make_question("Q1"))
    store.create_question(make_question("Q2"))
    calculator = StreakCalculator(store, timezone="Asia/Tokyo")
    # 20:00 UTC on 1 March is 05:00 on 2 March in Tokyo.
    store.record_attempt("Q1", "B", answered_at=datetime(2026, 3, 1, 20, tzinfo=timezone.utc))
    store.record_attempt("Q2", "B", answered_at=datetime(2026, 3, 3, 1, tzinfo=timezone.utc))

    assert calculator.current_streak(date(2026, 3, 3)) == 2
