"""Static reference data: revenue categories and goal templates.

Category ids are what `RevenueEntry.category` stores. ``calls`` is reserved
for entries derived from converted calls.
"""

from __future__ import annotations

from dataclasses import dataclass

from revenue_dashboard.models import GoalType, Granularity

CALLS_CATEGORY = "calls"


@dataclass(frozen=True)
class Category:
    """A revenue category shown in breakdowns and filters."""
    id: str
    name: str
    color: str
    description: str = ""


@dataclass(frozen=True)
class GoalTemplate:
    """Preset used to create a goal for the current period."""
    id: str
    name: str
    description: str
    type: Granularity
    target_amount: float
    goal_type: GoalType = GoalType.REVENUE


DEFAULT_REVENUE_CATEGORIES: tuple[Category, ...] = (
    Category(CALLS_CATEGORY, "Calls", "hsl(142, 76%, 36%)", "Revenue from sales calls and consultations"),
    Category("stan-store", "Stan Store", "hsl(262, 83%, 58%)", "Sales from Stan Store platform"),
    Category("whop", "Whop", "hsl(32, 95%, 44%)", "Sales from Whop marketplace"),
    Category("consulting", "Consulting", "hsl(221, 83%, 53%)", "Consulting and advisory services"),
    Category("subscription", "Subscription", "hsl(173, 58%, 39%)", "Recurring subscription income"),
    Category("freelance", "Freelance", "hsl(195, 100%, 50%)", "Freelance project work"),
    Category("investment", "Investment", "hsl(120, 60%, 50%)", "Investment returns and dividends"),
    Category("other", "Other", "hsl(215, 20%, 65%)", "Other revenue sources"),
)

GOAL_TEMPLATES: tuple[GoalTemplate, ...] = (
    GoalTemplate("monthly_revenue_5k", "£5K Monthly Revenue",
                 "Achieve £5,000 in total revenue this month", Granularity.MONTHLY, 5000),
    GoalTemplate("weekly_sales_1k", "£1K Weekly Sales",
                 "Generate £1,000 in sales this week", Granularity.WEEKLY, 1000),
    GoalTemplate("daily_target_200", "£200 Daily Target",
                 "Earn £200 in revenue today", Granularity.DAILY, 200),
    GoalTemplate("yearly_growth_50k", "£50K Annual Goal",
                 "Reach £50,000 in total revenue this year", Granularity.YEARLY, 50000),
    GoalTemplate("monthly_clients_10", "10 New Clients Monthly",
                 "Acquire 10 new clients this month", Granularity.MONTHLY, 10, GoalType.CLIENTS),
    GoalTemplate("weekly_clients_3", "3 New Clients Weekly",
                 "Gain 3 new clients this week", Granularity.WEEKLY, 3, GoalType.CLIENTS),
    GoalTemplate("yearly_clients_100", "100 New Clients Yearly",
                 "Reach 100 new clients this year", Granularity.YEARLY, 100, GoalType.CLIENTS),
)


def get_goal_template(template_id: str) -> GoalTemplate:
    """Return the goal template with id `template_id`.

    Raises:
        KeyError: if no template has that id.
    """
    for t in GOAL_TEMPLATES:
        if t.id == template_id:
            return t
    raise KeyError(f"Unknown goal template: {template_id}")
