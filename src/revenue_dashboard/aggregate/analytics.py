"""Analytics tables for the trend and breakdown views.

Functions in this module turn the in-memory collections into small pandas
DataFrames ready for charting or tabular display.

Expectations:
- Input: sequences of `RevenueEntry` / `Call` models (already filtered if the
  caller applies display filters).
- Outputs: DataFrames with the columns documented on each function; periods
  with no data are present with zero values.
"""
from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Sequence

import numpy as np
import pandas as pd

from revenue_dashboard.categories import DEFAULT_REVENUE_CATEGORIES, Category
from revenue_dashboard.models import Call, RevenueEntry

ENTRY_COLUMNS = ["id", "date", "day", "month", "weekday", "amount", "category", "description"]
WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]


def entries_frame(entries: Iterable[RevenueEntry]) -> pd.DataFrame:
    """Return one row per entry.

    Columns: `id`, `date`, `day` (ISO string), `month` (``YYYY-MM``),
    `weekday` (Sunday=0), `amount`, `category`, `description`.
    """
    rows = [
        {
            "id": e.id,
            "date": e.date,
            "day": e.date.isoformat(),
            "month": e.date.isoformat()[:7],
            "weekday": (e.date.weekday() + 1) % 7,
            "amount": e.amount,
            "category": e.category,
            "description": e.description,
        }
        for e in entries
    ]
    df = pd.DataFrame(rows, columns=ENTRY_COLUMNS)
    df["amount"] = df["amount"].astype(float)
    return df


def daily_trend(
    now: datetime,
    entries: Sequence[RevenueEntry],
    calls: Sequence[Call],
    days: int = 30,
) -> pd.DataFrame:
    """Per-day revenue and call volume for the last `days` days (today included).

    Returns:
        DataFrame with columns `day` (ISO string), `revenue`, `calls`,
        oldest day first.
    """
    today = now.date()
    keys = [(today - timedelta(days=i)).isoformat() for i in range(days - 1, -1, -1)]

    df = entries_frame(entries)
    revenue = df.groupby("day")["amount"].sum().reindex(keys, fill_value=0.0)

    call_days = pd.Series([c.date.isoformat() for c in calls], dtype=object)
    call_counts = call_days.value_counts().reindex(keys, fill_value=0)

    return pd.DataFrame(
        {
            "day": keys,
            "revenue": revenue.to_numpy(dtype=float),
            "calls": call_counts.to_numpy(dtype=int),
        }
    )


def monthly_trend(now: datetime, entries: Sequence[RevenueEntry], months: int = 6) -> pd.DataFrame:
    """Revenue total and entry count for the last `months` calendar months.

    Returns:
        DataFrame with columns `month` (``YYYY-MM``), `total`, `count`,
        oldest month first.
    """
    keys = list(
        pd.period_range(end=pd.Period(now.date(), freq="M"), periods=months, freq="M").strftime("%Y-%m")
    )

    df = entries_frame(entries)
    grouped = (
        df.groupby("month")["amount"]
        .agg(["sum", "size"])
        .reindex(keys, fill_value=0)
    )

    return pd.DataFrame(
        {
            "month": keys,
            "total": grouped["sum"].to_numpy(dtype=float),
            "count": grouped["size"].to_numpy(dtype=int),
        }
    )


def category_breakdown(
    entries: Sequence[RevenueEntry],
    categories: Sequence[Category] = DEFAULT_REVENUE_CATEGORIES,
) -> pd.DataFrame:
    """Revenue per category.

    `percentage` is the category's share of the number of entries (not of
    revenue). Categories with no revenue are dropped.

    Returns:
        DataFrame with columns `id`, `name`, `color`, `total`, `count`,
        `percentage`.
    """
    df = entries_frame(entries)
    n = len(df)
    grouped = df.groupby("category")["amount"].agg(["sum", "size"])

    rows = []
    for c in categories:
        if c.id in grouped.index:
            total = float(grouped.loc[c.id, "sum"])
            count = int(grouped.loc[c.id, "size"])
        else:
            total, count = 0.0, 0
        rows.append(
            {
                "id": c.id,
                "name": c.name,
                "color": c.color,
                "total": total,
                "count": count,
                "percentage": count / n * 100.0 if n else 0.0,
            }
        )

    out = pd.DataFrame(rows, columns=["id", "name", "color", "total", "count", "percentage"])
    return out[out["total"] > 0].reset_index(drop=True)


def day_of_week_breakdown(entries: Sequence[RevenueEntry]) -> pd.DataFrame:
    """Total, count and average entry amount per weekday, Sunday first.

    Returns:
        DataFrame with columns `day`, `total`, `count`, `average`.
    """
    df = entries_frame(entries)
    grouped = (
        df.groupby("weekday")["amount"]
        .agg(["sum", "size"])
        .reindex(range(7), fill_value=0)
    )

    total = grouped["sum"].to_numpy(dtype=float)
    count = grouped["size"].to_numpy(dtype=int)
    average = np.divide(total, count, out=np.zeros_like(total), where=count > 0)

    return pd.DataFrame(
        {
            "day": WEEKDAY_NAMES,
            "total": total,
            "count": count,
            "average": average,
        }
    )
