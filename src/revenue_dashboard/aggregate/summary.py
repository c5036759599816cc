"""Summary tiles and period-over-period growth.

All functions are pure recomputations over the collections passed in and the
`now` instant; nothing is cached between calls.

Growth policy: ``(current - previous) / previous * 100``, and 0 whenever the
previous value is 0 (so a move from nothing to something reports 0 %).
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

from revenue_dashboard.aggregate.periods import previous_month_key, resolve_bucket, week_start
from revenue_dashboard.models import (
    Call,
    CallStats,
    CallStatus,
    GoalProgress,
    Granularity,
    PerformanceMetrics,
    PeriodComparison,
    RevenueEntry,
    SummaryStats,
)


def growth(current: float, previous: float) -> float:
    """Percent change from `previous` to `current`, 0 when `previous` is 0."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100.0


def _total(entries: Iterable[RevenueEntry]) -> float:
    return float(sum(e.amount for e in entries))


def _in_month(day: date, month_key: str) -> bool:
    return day.isoformat().startswith(month_key)


def _month_revenue(entries: Iterable[RevenueEntry], month_key: str) -> float:
    return _total(e for e in entries if _in_month(e.date, month_key))


def _range_revenue(entries: Iterable[RevenueEntry], start: date, end: date) -> float:
    """Revenue for days in the half-open range ``[start, end)``."""
    return _total(e for e in entries if start <= e.date < end)


def _month_calls(calls: Iterable[Call], month_key: str) -> list[Call]:
    return [c for c in calls if _in_month(c.date, month_key)]


def conversion_rate(calls: Sequence[Call]) -> float:
    """Converted calls per completed call, as a percentage (0 without completed calls)."""
    completed = sum(1 for c in calls if c.status is CallStatus.COMPLETED)
    if completed == 0:
        return 0.0
    conversions = sum(1 for c in calls if c.is_converted)
    return conversions / completed * 100.0


def compute_summary(
    now: datetime,
    entries: Sequence[RevenueEntry],
    calls: Sequence[Call],
    *,
    filtered_entries: Sequence[RevenueEntry] | None = None,
    progress: Sequence[GoalProgress] | None = None,
) -> SummaryStats:
    """Compute the dashboard summary tiles.

    "Current" revenue values (totals, this month, this week) come from
    `filtered_entries` when given, i.e. whatever the display filters leave.
    "Previous" baselines (last month, last week) always come from the full
    `entries` collection, so changing filters never moves the baseline.

    Weeks are Sunday-aligned. Conversion rates are computed over the full
    `calls` collection for the current and previous calendar months.

    Args:
        now: Reference instant.
        entries: Full revenue entry collection.
        calls: Full call collection.
        filtered_entries: Entries remaining after display filters.
        progress: Goal progress rows used for the goal counters.
    """
    today = now.date()
    current = list(entries if filtered_entries is None else filtered_entries)

    this_month_key = resolve_bucket(today, Granularity.MONTHLY)
    last_month_key = previous_month_key(today)
    this_month = _month_revenue(current, this_month_key)
    last_month = _month_revenue(entries, last_month_key)

    start = week_start(today, calendar.SUNDAY)
    this_week = _range_revenue(current, start, start + timedelta(days=7))
    last_week = _range_revenue(entries, start - timedelta(days=7), start)

    this_month_calls = _month_calls(calls, this_month_key)
    last_month_calls = _month_calls(calls, last_month_key)
    current_rate = conversion_rate(this_month_calls)
    last_rate = conversion_rate(last_month_calls)

    rows = list(progress or [])

    return SummaryStats(
        total_revenue=_total(current),
        total_entries=len(current),
        this_month_revenue=this_month,
        last_month_revenue=last_month,
        monthly_growth=growth(this_month, last_month),
        this_week_revenue=this_week,
        last_week_revenue=last_week,
        weekly_growth=growth(this_week, last_week),
        current_conversion_rate=current_rate,
        last_conversion_rate=last_rate,
        conversion_growth=growth(current_rate, last_rate),
        current_month_conversions=sum(1 for c in this_month_calls if c.is_converted),
        completed_goals=sum(1 for p in rows if p.is_completed),
        total_goals=len(rows),
    )


def compute_performance(
    now: datetime,
    entries: Sequence[RevenueEntry],
    calls: Sequence[Call],
) -> PerformanceMetrics:
    """Month and week comparisons for the performance & growth view.

    Unlike the summary tiles, weeks here start on Monday and no display
    filters apply.
    """
    today = now.date()
    this_month_key = resolve_bucket(today, Granularity.MONTHLY)
    last_month_key = previous_month_key(today)

    this_month = _month_revenue(entries, this_month_key)
    last_month = _month_revenue(entries, last_month_key)

    start = week_start(today, calendar.MONDAY)
    this_week = _range_revenue(entries, start, start + timedelta(days=7))
    last_week = _range_revenue(entries, start - timedelta(days=7), start)

    this_calls = _month_calls(calls, this_month_key)
    last_calls = _month_calls(calls, last_month_key)
    this_rate = conversion_rate(this_calls)
    last_rate = conversion_rate(last_calls)

    return PerformanceMetrics(
        revenue_month=PeriodComparison(
            current=this_month, previous=last_month, growth=growth(this_month, last_month)
        ),
        revenue_week=PeriodComparison(
            current=this_week, previous=last_week, growth=growth(this_week, last_week)
        ),
        calls_month=PeriodComparison(
            current=len(this_calls),
            previous=len(last_calls),
            growth=growth(len(this_calls), len(last_calls)),
        ),
        conversion_month=PeriodComparison(
            current=this_rate, previous=last_rate, growth=growth(this_rate, last_rate)
        ),
    )


def compute_call_stats(calls: Sequence[Call]) -> CallStats:
    """Counters for the calls view.

    Show rate is completed / (completed + no-show). Conversion rate counts
    converted *completed* calls over calls that either completed or are
    waiting on payment.
    """
    completed = [c for c in calls if c.status is CallStatus.COMPLETED]
    no_show = [c for c in calls if c.status is CallStatus.NO_SHOW]
    happened = len(completed) + len(no_show)
    eligible = sum(
        1 for c in calls if c.status in (CallStatus.COMPLETED, CallStatus.HASNT_PAID_YET)
    )
    converted = [c for c in calls if c.is_converted]
    converted_completed = sum(1 for c in completed if c.is_converted)

    return CallStats(
        total_calls=len(calls),
        completed_calls=len(completed),
        no_show_calls=len(no_show),
        show_rate=len(completed) / happened * 100.0 if happened else 0.0,
        conversions=len(converted),
        conversion_rate=converted_completed / eligible * 100.0 if eligible else 0.0,
        total_revenue=float(sum(c.conversion_amount for c in converted)),
    )
