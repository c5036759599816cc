from __future__ import annotations

from datetime import date, datetime, time, timezone
from typing import Any, Callable

import pytest

from revenue_dashboard.models import Call, CallStatus, Goal, Granularity, RevenueEntry

CREATED = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def make_entry() -> Callable[..., RevenueEntry]:
    counter = {"n": 0}

    def _make(day: str, amount: float, **kw: Any) -> RevenueEntry:
        counter["n"] += 1
        return RevenueEntry(
            id=kw.pop("id", f"e{counter['n']}"),
            date=date.fromisoformat(day),
            amount=amount,
            created_at=CREATED,
            **kw,
        )

    return _make


@pytest.fixture
def make_call() -> Callable[..., Call]:
    counter = {"n": 0}

    def _make(day: str, status: CallStatus = CallStatus.COMPLETED, **kw: Any) -> Call:
        counter["n"] += 1
        return Call(
            id=kw.pop("id", f"c{counter['n']}"),
            client_name=kw.pop("client_name", "Jane Doe"),
            date=date.fromisoformat(day),
            time=time(14, 30),
            duration=kw.pop("duration", 30),
            status=status,
            created_at=CREATED,
            **kw,
        )

    return _make


@pytest.fixture
def make_goal() -> Callable[..., Goal]:
    def _make(type_: Granularity, period: str, target: float, **kw: Any) -> Goal:
        return Goal(
            id=kw.pop("id", f"g-{period}"),
            type=type_,
            period=period,
            target_amount=target,
            created_at=CREATED,
            **kw,
        )

    return _make
