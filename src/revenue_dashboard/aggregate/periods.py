"""Period bucket keys for goals and summaries.

A bucket key names one tracking period:

- daily:   ``YYYY-MM-DD``
- weekly:  ``YYYY-Www``
- monthly: ``YYYY-MM``
- yearly:  ``YYYY``

Weekly numbering is NOT ISO-8601. The week of a day is
``ceil((days_since_jan1 + weekday_of_jan1 + 1) / 7)`` with weekdays counted
Sunday=0 .. Saturday=6, restarting every calendar year. Stored weekly goal
periods were generated with this formula, so it must not be "corrected".
When a goal is created, `current_bucket` feeds the formula the fractional
days elapsed at the creation instant rather than whole days.
The inverse (`bucket_range`) maps week ``n`` to the seven days starting at
``Jan 1 + (n - 1) * 7``, which can disagree with `resolve_bucket` near week
edges; both are kept exactly as stored data expects.
"""

from __future__ import annotations

import calendar
import math
import re
from datetime import date, datetime, timedelta
from typing import Callable

from revenue_dashboard.models import Granularity

_WEEK_KEY = re.compile(r"^(\d{4})-W(\d{1,2})$")
_MONTH_KEY = re.compile(r"^(\d{4})-(\d{2})$")
_YEAR_KEY = re.compile(r"^(\d{4})$")


def _week_of(days_since_jan1: float, jan1: date) -> int:
    # Sunday=0 .. Saturday=6
    jan1_weekday = (jan1.weekday() + 1) % 7
    return math.ceil((days_since_jan1 + jan1_weekday + 1) / 7)


def week_number(day: date) -> int:
    """Return the week-of-year used in weekly bucket keys (see module notes)."""
    jan1 = date(day.year, 1, 1)
    return _week_of((day - jan1).days, jan1)


def _daily_key(day: date) -> str:
    return day.isoformat()


def _weekly_key(day: date) -> str:
    return f"{day.year}-W{week_number(day):02d}"


def _monthly_key(day: date) -> str:
    return f"{day.year}-{day.month:02d}"


def _yearly_key(day: date) -> str:
    return f"{day.year}"


_RESOLVERS: dict[Granularity, Callable[[date], str]] = {
    Granularity.DAILY: _daily_key,
    Granularity.WEEKLY: _weekly_key,
    Granularity.MONTHLY: _monthly_key,
    Granularity.YEARLY: _yearly_key,
}


def resolve_bucket(day: date, granularity: Granularity) -> str:
    """Return the bucket key containing `day` for `granularity`.

    Args:
        day: Calendar day to bucket.
        granularity: Tracking period.

    Returns:
        Canonical bucket key string.
    """
    return _RESOLVERS[Granularity(granularity)](day)


def current_bucket(granularity: Granularity, now: datetime) -> str:
    """Return the bucket key a goal created at `now` is assigned to.

    Weekly keys count the time since midnight on Jan 1 in fractional days,
    so any moment after midnight on a Saturday already resolves to the
    following week. Existing weekly goal periods were assigned this way.
    """
    granularity = Granularity(granularity)
    if granularity is Granularity.WEEKLY:
        jan1 = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
        days = (now - jan1).total_seconds() / 86400
        return f"{now.year}-W{_week_of(days, jan1.date()):02d}"
    return resolve_bucket(now.date(), granularity)


def parse_week_key(key: str) -> tuple[int, int]:
    """Split a weekly key into ``(year, week)``.

    Raises:
        ValueError: if `key` is not of the form ``YYYY-Www``.
    """
    m = _WEEK_KEY.match(key)
    if m is None:
        raise ValueError(f"Invalid weekly bucket key: {key!r}")
    year, week = int(m.group(1)), int(m.group(2))
    if not 1 <= week <= 54:
        raise ValueError(f"Week out of range in bucket key: {key!r}")
    return year, week


def bucket_range(key: str, granularity: Granularity) -> tuple[date, date]:
    """Return the inclusive ``(start, end)`` days covered by a bucket key.

    Raises:
        ValueError: if `key` does not match the format of `granularity`.
    """
    granularity = Granularity(granularity)

    if granularity is Granularity.DAILY:
        day = date.fromisoformat(key)
        if day.isoformat() != key:
            raise ValueError(f"Invalid daily bucket key: {key!r}")
        return day, day

    if granularity is Granularity.WEEKLY:
        year, week = parse_week_key(key)
        start = date(year, 1, 1) + timedelta(days=(week - 1) * 7)
        return start, start + timedelta(days=6)

    if granularity is Granularity.MONTHLY:
        m = _MONTH_KEY.match(key)
        if m is None or not 1 <= int(m.group(2)) <= 12:
            raise ValueError(f"Invalid monthly bucket key: {key!r}")
        year, month = int(m.group(1)), int(m.group(2))
        last = calendar.monthrange(year, month)[1]
        return date(year, month, 1), date(year, month, last)

    m = _YEAR_KEY.match(key)
    if m is None:
        raise ValueError(f"Invalid yearly bucket key: {key!r}")
    year = int(m.group(1))
    return date(year, 1, 1), date(year, 12, 31)


def in_bucket(day: date, key: str, granularity: Granularity) -> bool:
    """Return True when `day` belongs to the bucket `key`.

    Daily buckets match the ISO date exactly and monthly/yearly buckets match
    it as a prefix. Weekly keys cannot be prefix matched, so the day is tested
    against the inclusive `bucket_range` instead.
    """
    granularity = Granularity(granularity)
    iso = day.isoformat()

    if granularity is Granularity.DAILY:
        return iso == key
    if granularity is Granularity.WEEKLY:
        start, end = bucket_range(key, granularity)
        return start <= day <= end
    return iso.startswith(key)


def describe_bucket(key: str, granularity: Granularity) -> str:
    """Human readable label for a bucket key, e.g. ``Week 09, 2024``."""
    granularity = Granularity(granularity)

    if granularity is Granularity.DAILY:
        return date.fromisoformat(key).strftime("%d %b %Y")
    if granularity is Granularity.WEEKLY:
        year, week = parse_week_key(key)
        return f"Week {week:02d}, {year}"
    if granularity is Granularity.MONTHLY:
        start, _ = bucket_range(key, granularity)
        return start.strftime("%B %Y")
    return key


def week_start(day: date, first_weekday: int = calendar.SUNDAY) -> date:
    """Return the first day of the week containing `day`.

    Args:
        day: Any day of the week.
        first_weekday: ``calendar.SUNDAY`` (summary tiles) or
            ``calendar.MONDAY`` (performance view).
    """
    return day - timedelta(days=(day.weekday() - first_weekday) % 7)


def previous_month_key(day: date) -> str:
    """Return the ``YYYY-MM`` key of the calendar month before `day`'s month."""
    last_of_previous = day.replace(day=1) - timedelta(days=1)
    return _monthly_key(last_of_previous)
