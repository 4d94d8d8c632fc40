"""Unit tests for the reporting windows."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from django.utils import timezone
from freezegun import freeze_time

from modules.core.periods import (
    Period,
    in_period,
    period_start,
    seconds_until_next_day,
    shift_months,
)

pytestmark = pytest.mark.unit


def _local(*args) -> datetime:
    return timezone.make_aware(datetime(*args))


class TestShiftMonths:
    def test_clamps_to_end_of_shorter_month(self):
        assert shift_months(_local(2023, 3, 31, 10), -1) == _local(2023, 2, 28, 10)

    def test_clamps_to_leap_day(self):
        assert shift_months(_local(2024, 3, 31), -1) == _local(2024, 2, 29)

    def test_crosses_year_boundary(self):
        assert shift_months(_local(2024, 2, 15), -3) == _local(2023, 11, 15)

    def test_twelve_months_back_from_leap_day(self):
        assert shift_months(_local(2024, 2, 29), -12) == _local(2023, 2, 28)


class TestPeriodStart:
    def test_all_has_no_lower_bound(self):
        assert period_start(Period.ALL) is None

    def test_today_starts_at_local_midnight(self):
        now = _local(2024, 5, 10, 15, 30)
        start = period_start(Period.TODAY, now)
        assert start == _local(2024, 5, 10)

    def test_week_is_seven_days(self):
        now = _local(2024, 5, 10, 12)
        assert period_start(Period.WEEK, now) == now - timedelta(days=7)

    def test_three_months_uses_calendar(self):
        now = _local(2024, 5, 31, 12)
        assert period_start(Period.THREE_MONTHS, now) == _local(2024, 2, 29, 12)


class TestInPeriod:
    def test_yesterday_is_outside_today(self):
        now = _local(2024, 5, 10, 0, 30)
        yesterday = _local(2024, 5, 9, 23, 50)
        assert not in_period(yesterday, Period.TODAY, now)
        assert in_period(yesterday, Period.WEEK, now)

    def test_same_local_day_is_today(self):
        now = _local(2024, 5, 10, 23, 59)
        assert in_period(_local(2024, 5, 10, 0, 1), Period.TODAY, now)

    def test_month_window_bound_is_inclusive(self):
        now = _local(2024, 3, 31, 12)
        assert in_period(_local(2024, 2, 29, 12), Period.MONTH, now)
        assert not in_period(_local(2024, 2, 29, 11, 59), Period.MONTH, now)

    def test_all_accepts_anything(self):
        assert in_period(_local(2001, 1, 1), Period.ALL)

    def test_year_excludes_older_orders(self):
        now = _local(2024, 6, 1)
        assert not in_period(_local(2023, 5, 31), Period.YEAR, now)
        assert in_period(_local(2023, 6, 2), Period.YEAR, now)


class TestDefaultClock:
    # 2024-05-10 08:00 UTC is 10:00 in Europe/Paris.
    @freeze_time("2024-05-10 08:00:00")
    def test_today_uses_current_local_date(self):
        assert period_start(Period.TODAY) == _local(2024, 5, 10)
        assert in_period(_local(2024, 5, 10, 0, 5), Period.TODAY)
        assert not in_period(_local(2024, 5, 9, 23, 55), Period.TODAY)

    @freeze_time("2024-03-31 10:00:00")
    def test_month_uses_current_time(self):
        assert period_start(Period.MONTH) == _local(2024, 2, 29, 12)


class TestSecondsUntilNextDay:
    def test_counts_down_to_local_midnight(self):
        assert seconds_until_next_day(_local(2024, 5, 10, 23, 58)) == 120

    def test_short_day_when_clocks_spring_forward(self):
        assert seconds_until_next_day(_local(2024, 3, 31)) == 23 * 3600

    def test_long_day_when_clocks_fall_back(self):
        assert seconds_until_next_day(_local(2024, 10, 27)) == 25 * 3600

    @freeze_time("2024-05-10 21:59:30")
    def test_defaults_to_current_time(self):
        assert seconds_until_next_day() == 30
