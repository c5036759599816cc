"""Goal progress: how much of a goal's target its bucket has accumulated."""

from __future__ import annotations

from typing import Iterable, Sequence

from revenue_dashboard.aggregate.periods import in_bucket
from revenue_dashboard.models import Goal, GoalCompletion, GoalProgress, RevenueEntry


def entries_for_goal(goal: Goal, entries: Iterable[RevenueEntry]) -> list[RevenueEntry]:
    """Return the entries whose date falls in `goal.period`."""
    return [e for e in entries if in_bucket(e.date, goal.period, goal.type)]


def compute_progress(goal: Goal, entries: Iterable[RevenueEntry]) -> GoalProgress:
    """Compute progress of `goal` against `entries`.

    `progress_percentage` is reported uncapped (use
    `GoalProgress.display_percentage` for a 0-100 bar) and is 0 when the
    target is 0. A goal is completed once the accumulated amount reaches the
    target; equality counts as completed.

    Client goals are measured with the same amount sum as revenue goals.
    """
    current = float(sum(e.amount for e in entries_for_goal(goal, entries)))

    if goal.target_amount:
        pct = current / goal.target_amount * 100.0
    else:
        pct = 0.0

    return GoalProgress(
        goal=goal,
        current_amount=current,
        progress_percentage=pct,
        is_completed=current >= goal.target_amount,
    )


def compute_all_progress(
    goals: Iterable[Goal],
    entries: Sequence[RevenueEntry],
) -> list[GoalProgress]:
    """Progress for every goal, in the order the goals are given."""
    return [compute_progress(g, entries) for g in goals]


def goal_completion(goals: Sequence[Goal], entries: Sequence[RevenueEntry]) -> GoalCompletion:
    """Count completed goals and the completion rate (0 without goals)."""
    completed = sum(1 for p in compute_all_progress(goals, entries) if p.is_completed)
    total = len(goals)
    return GoalCompletion(
        total=total,
        completed=completed,
        completion_rate=completed / total * 100.0 if total else 0.0,
    )
