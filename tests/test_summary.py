from __future__ import annotations

from datetime import datetime

import pytest

from revenue_dashboard.aggregate.progress import compute_all_progress
from revenue_dashboard.aggregate.summary import (
    compute_call_stats,
    compute_performance,
    compute_summary,
    conversion_rate,
    growth,
)
from revenue_dashboard.models import CallStatus, Granularity

NOW = datetime(2024, 2, 10, 12, 0)  # Saturday


def test_growth_policy() -> None:
    assert growth(200, 100) == pytest.approx(100.0)
    assert growth(50, 100) == pytest.approx(-50.0)
    assert growth(0, 0) == 0
    assert growth(500, 0) == 0


def test_month_over_month_revenue(make_entry) -> None:
    entries = [make_entry("2024-01-05", 100), make_entry("2024-02-05", 200)]
    s = compute_summary(NOW, entries, [])
    assert s.this_month_revenue == 200
    assert s.last_month_revenue == 100
    assert s.monthly_growth == pytest.approx(100.0)
    assert s.total_revenue == 300
    assert s.total_entries == 2


def test_growth_is_zero_when_previous_month_empty(make_entry) -> None:
    s = compute_summary(NOW, [make_entry("2024-02-01", 900)], [])
    assert s.last_month_revenue == 0
    assert s.monthly_growth == 0


def test_january_compares_with_previous_december(make_entry) -> None:
    entries = [make_entry("2023-12-20", 50), make_entry("2024-01-03", 75)]
    s = compute_summary(datetime(2024, 1, 15), entries, [])
    assert s.last_month_revenue == 50
    assert s.monthly_growth == pytest.approx(50.0)


def test_weeks_are_sunday_aligned(make_entry) -> None:
    entries = [
        make_entry("2024-02-03", 40),   # Saturday, last week
        make_entry("2024-01-28", 60),   # Sunday, last week
        make_entry("2024-02-04", 30),   # Sunday, this week
        make_entry("2024-02-10", 70),   # Saturday, this week
        make_entry("2024-02-11", 999),  # next week
        make_entry("2024-01-27", 999),  # two weeks ago
    ]
    s = compute_summary(NOW, entries, [])
    assert s.this_week_revenue == 100
    assert s.last_week_revenue == 100
    assert s.weekly_growth == 0


def test_baselines_ignore_display_filters(make_entry) -> None:
    jan = make_entry("2024-01-10", 100, category="whop")
    feb_whop = make_entry("2024-02-05", 300, category="whop")
    feb_other = make_entry("2024-02-06", 100, category="consulting")
    last_week = make_entry("2024-02-01", 80, category="consulting")
    entries = [jan, feb_whop, feb_other, last_week]

    s = compute_summary(NOW, entries, [], filtered_entries=[feb_whop])
    assert s.this_month_revenue == 300
    assert s.last_month_revenue == 100
    assert s.monthly_growth == pytest.approx(200.0)
    assert s.this_week_revenue == 300
    assert s.last_week_revenue == 80
    assert s.total_revenue == 300
    assert s.total_entries == 1


def test_conversion_rate_growth(make_call) -> None:
    calls = [
        make_call("2024-02-01", is_converted=True, conversion_amount=100),
        make_call("2024-02-02"),
        make_call("2024-02-03", CallStatus.SCHEDULED),
        make_call("2024-01-05", is_converted=True, conversion_amount=10),
        make_call("2024-01-06"),
        make_call("2024-01-07"),
        make_call("2024-01-08"),
    ]
    s = compute_summary(NOW, [], calls)
    assert s.current_conversion_rate == pytest.approx(50.0)
    assert s.last_conversion_rate == pytest.approx(25.0)
    assert s.conversion_growth == pytest.approx(100.0)
    assert s.current_month_conversions == 1


def test_conversion_rate_without_completed_calls(make_call) -> None:
    calls = [make_call("2024-02-01", CallStatus.NO_SHOW), make_call("2024-02-02", CallStatus.CANCELLED)]
    assert conversion_rate(calls) == 0
    assert compute_summary(NOW, [], calls).conversion_growth == 0


def test_goal_counters(make_entry, make_goal) -> None:
    entries = [make_entry("2024-02-05", 200)]
    goals = [make_goal(Granularity.MONTHLY, "2024-02", 150), make_goal(Granularity.MONTHLY, "2024-01", 150)]
    s = compute_summary(NOW, entries, [], progress=compute_all_progress(goals, entries))
    assert s.completed_goals == 1
    assert s.total_goals == 2


def test_performance_uses_monday_weeks_and_call_volume(make_entry, make_call) -> None:
    entries = [
        make_entry("2024-02-04", 50),   # Sunday: previous Monday-week
        make_entry("2024-02-05", 150),  # Monday
        make_entry("2024-01-20", 100),
    ]
    calls = [make_call("2024-02-01"), make_call("2024-02-02"), make_call("2024-01-02")]
    p = compute_performance(NOW, entries, calls)
    assert p.revenue_week.current == 150
    assert p.revenue_week.previous == 50
    assert p.revenue_week.growth == pytest.approx(200.0)
    assert p.revenue_month.current == 200
    assert p.revenue_month.previous == 100
    assert p.calls_month.current == 2
    assert p.calls_month.previous == 1
    assert p.calls_month.growth == pytest.approx(100.0)


def test_call_stats(make_call) -> None:
    calls = [
        make_call("2024-02-01", is_converted=True, conversion_amount=300),
        make_call("2024-02-02"),
        make_call("2024-02-03", CallStatus.NO_SHOW),
        make_call("2024-02-04", CallStatus.HASNT_PAID_YET, is_converted=True, conversion_amount=200),
        make_call("2024-02-05", CallStatus.SCHEDULED),
    ]
    stats = compute_call_stats(calls)
    assert stats.total_calls == 5
    assert stats.completed_calls == 2
    assert stats.no_show_calls == 1
    assert stats.show_rate == pytest.approx(200 / 3)
    assert stats.conversions == 2
    assert stats.conversion_rate == pytest.approx(100 / 3)
    assert stats.total_revenue == 500


def test_call_stats_empty() -> None:
    stats = compute_call_stats([])
    assert stats.show_rate == 0
    assert stats.conversion_rate == 0
