"""Display filters for revenue entries."""

from __future__ import annotations

from typing import Iterable

from revenue_dashboard.models import FilterCriteria, RevenueEntry


def matches(entry: RevenueEntry, criteria: FilterCriteria) -> bool:
    """Return True when `entry` passes every criterion that is set.

    Entries without a category pass the category filter, and entries without
    a description pass the search filter.
    """
    if criteria.date_from is not None and entry.date < criteria.date_from:
        return False
    if criteria.date_to is not None and entry.date > criteria.date_to:
        return False

    if criteria.categories and entry.category and entry.category not in criteria.categories:
        return False

    if criteria.amount_min is not None and entry.amount < criteria.amount_min:
        return False
    if criteria.amount_max is not None and entry.amount > criteria.amount_max:
        return False

    if (
        criteria.search_term
        and entry.description
        and criteria.search_term.lower() not in entry.description.lower()
    ):
        return False

    return True


def apply_filters(
    entries: Iterable[RevenueEntry],
    criteria: FilterCriteria | None,
) -> list[RevenueEntry]:
    """Return the entries passing `criteria`, keeping their order."""
    if criteria is None:
        return list(entries)
    return [e for e in entries if matches(e, criteria)]
