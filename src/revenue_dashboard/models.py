"""Pydantic models for the stored collections and the derived dashboard views.

Stored records (`RevenueEntry`, `Call`, `Goal`) are serialized with camelCase
aliases so collections written by earlier versions of the dashboard load
unchanged. Derived models (`GoalProgress`, `SummaryStats`, ...) are never
persisted; they are recomputed on every read.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Granularity(str, Enum):
    """Tracking period of a goal."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class GoalType(str, Enum):
    REVENUE = "revenue"
    CLIENTS = "clients"


class CallType(str, Enum):
    CALL = "call"
    MEETING = "meeting"
    CONSULTATION = "consultation"


class CallStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"
    HASNT_PAID_YET = "hasn't paid yet"


class StoredRecord(BaseModel):
    """Base for records kept in the persisted collections.

    Unknown keys (display-only fields such as ``categoryColor``) are dropped
    on load.
    """
    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_record(self) -> dict:
        """Return the JSON-safe, camelCase form written to the repository."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class RevenueEntry(StoredRecord):
    """A dated amount of revenue.

    Attributes:
        id: Opaque identifier (``revenue-<call id>`` for call conversions).
        date: Calendar day the revenue belongs to.
        amount: Non-negative monetary amount.
        category: Optional category id (see ``DEFAULT_REVENUE_CATEGORIES``).
        description: Optional free text.
        created_at: Creation timestamp.
    """
    id: str
    date: dt.date
    amount: float = Field(..., ge=0)
    category: str | None = None
    description: str | None = None
    created_at: dt.datetime


class Call(StoredRecord):
    """A sales call, meeting or consultation with a client."""
    id: str
    client_name: str
    email: str | None = None
    phone: str | None = None
    call_type: CallType = CallType.CALL
    date: dt.date
    time: dt.time
    duration: int = Field(..., gt=0)
    notes: str | None = None
    status: CallStatus = CallStatus.SCHEDULED
    is_converted: bool = False
    conversion_amount: float = Field(0.0, ge=0)
    created_at: dt.datetime


class Goal(StoredRecord):
    """A revenue or client target for one period bucket.

    `period` holds the bucket key matching `type`: ``YYYY-MM-DD`` for daily,
    ``YYYY-Www`` for weekly, ``YYYY-MM`` for monthly and ``YYYY`` for yearly.
    A key that does not fit `type` is rejected at validation time.
    """
    id: str
    type: Granularity
    period: str
    target_amount: float = Field(..., gt=0)
    goal_type: GoalType = GoalType.REVENUE
    description: str | None = None
    category: str | None = None
    created_at: dt.datetime

    @model_validator(mode="after")
    def _check_period(self) -> Goal:
        # periods imports this module
        from revenue_dashboard.aggregate.periods import bucket_range

        bucket_range(self.period, self.type)
        return self


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------

class GoalProgress(BaseModel):
    """Progress of a goal against the entries in its bucket."""
    goal: Goal
    current_amount: float
    progress_percentage: float
    is_completed: bool

    @property
    def display_percentage(self) -> float:
        """Progress capped at 100 for progress bars."""
        return min(self.progress_percentage, 100.0)


class GoalCompletion(BaseModel):
    total: int
    completed: int
    completion_rate: float


class PeriodComparison(BaseModel):
    """A current value, its baseline and the growth between them."""
    current: float
    previous: float
    growth: float


class SummaryStats(BaseModel):
    """Values behind the dashboard summary tiles."""
    total_revenue: float
    total_entries: int
    this_month_revenue: float
    last_month_revenue: float
    monthly_growth: float
    this_week_revenue: float
    last_week_revenue: float
    weekly_growth: float
    current_conversion_rate: float
    last_conversion_rate: float
    conversion_growth: float
    current_month_conversions: int
    completed_goals: int = 0
    total_goals: int = 0


class PerformanceMetrics(BaseModel):
    revenue_month: PeriodComparison
    revenue_week: PeriodComparison
    calls_month: PeriodComparison
    conversion_month: PeriodComparison


class CallStats(BaseModel):
    total_calls: int
    completed_calls: int
    no_show_calls: int
    show_rate: float
    conversions: int
    conversion_rate: float
    total_revenue: float


class FilterCriteria(BaseModel):
    """Display filters applied to revenue entries.

    Every criterion is optional; an empty `FilterCriteria` keeps all entries.
    """
    model_config = ConfigDict(extra="forbid")
    date_from: dt.date | None = None
    date_to: dt.date | None = None
    categories: list[str] = Field(default_factory=list)
    amount_min: float | None = None
    amount_max: float | None = None
    search_term: str | None = None
