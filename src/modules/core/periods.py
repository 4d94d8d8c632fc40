"""Calendar-aware reporting windows.

``today`` means "created on the current local calendar date".  The other
windows are rolling: ``created_at >= now - <span>``, where month and year
spans are subtracted on the calendar (clamping the day to the target
month's length, e.g. 31 March - 1 month = 28/29 February) rather than as a
fixed number of days.
"""

from __future__ import annotations

import calendar
import math
from datetime import datetime, time, timedelta
from datetime import timezone as dt_timezone
from enum import StrEnum
from typing import Optional

from django.utils import timezone


class Period(StrEnum):
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    THREE_MONTHS = "3months"
    YEAR = "year"
    ALL = "all"


_MONTH_SPANS = {
    Period.MONTH: 1,
    Period.THREE_MONTHS: 3,
    Period.YEAR: 12,
}


def shift_months(moment: datetime, months: int) -> datetime:
    """Move *moment* by *months* calendar months, clamping the day."""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def period_start(period: Period, now: Optional[datetime] = None) -> Optional[datetime]:
    """Lower bound (inclusive) of *period*; ``None`` for ``all``."""
    now = timezone.localtime(now or timezone.now())
    if period == Period.ALL:
        return None
    if period == Period.TODAY:
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == Period.WEEK:
        return now - timedelta(days=7)
    return shift_months(now, -_MONTH_SPANS[period])


def in_period(created_at: datetime, period: Period, now: Optional[datetime] = None) -> bool:
    """``True`` when *created_at* falls inside *period* relative to *now*."""
    if period == Period.ALL:
        return True
    now = now or timezone.now()
    if period == Period.TODAY:
        return timezone.localdate(created_at) == timezone.localdate(now)
    return created_at >= period_start(period, now)


def seconds_until_next_day(now: Optional[datetime] = None) -> int:
    """Whole seconds from *now* until the next local midnight (at least 1)."""
    now = (now or timezone.now()).astimezone(dt_timezone.utc)
    tomorrow = timezone.localdate(now) + timedelta(days=1)
    midnight = timezone.make_aware(datetime.combine(tomorrow, time.min))
    return max(1, math.ceil((midnight - now).total_seconds()))
