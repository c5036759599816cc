"""Command-line interface for the revenue dashboard store and reports.

Report subcommands (`summary`, `goals`, `performance`, `calls-stats`,
`trend`, `breakdown`, `check`) print JSON; mutating subcommands change the
configured store. Each command is implemented as a `cmd_*` function that
accepts an argparse namespace and the open `DataStore`.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
import uuid
from datetime import date, datetime, time
from typing import Any, Callable

from revenue_dashboard.aggregate.analytics import (
    category_breakdown,
    daily_trend,
    day_of_week_breakdown,
    monthly_trend,
)
from revenue_dashboard.aggregate.filters import apply_filters
from revenue_dashboard.aggregate.periods import current_bucket, describe_bucket
from revenue_dashboard.aggregate.progress import compute_all_progress
from revenue_dashboard.aggregate.summary import (
    compute_call_stats,
    compute_performance,
    compute_summary,
)
from revenue_dashboard.categories import get_goal_template
from revenue_dashboard.config import get_settings
from revenue_dashboard.logging_config import configure_logging
from revenue_dashboard.models import (
    Call,
    CallStatus,
    CallType,
    FilterCriteria,
    Goal,
    GoalType,
    Granularity,
    RevenueEntry,
)
from revenue_dashboard.repository import build_repository
from revenue_dashboard.store import DataStore

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _emit(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _now(args: argparse.Namespace) -> datetime:
    """Reference instant: ``--now`` when given, else local wall-clock time."""
    if getattr(args, "now", None):
        return datetime.fromisoformat(args.now)
    return datetime.now()


def _new_id() -> str:
    return str(uuid.uuid4())


def _criteria(args: argparse.Namespace) -> FilterCriteria:
    return FilterCriteria(
        date_from=args.date_from,
        date_to=args.date_to,
        categories=args.category or [],
        amount_min=args.min_amount,
        amount_max=args.max_amount,
        search_term=args.search,
    )


# --------------------------------------------------
# REPORTS
# --------------------------------------------------
def cmd_summary(args: argparse.Namespace, store: DataStore) -> None:
    """Print the summary tiles for the entries left by the display filters."""
    snap = store.snapshot()
    filtered = apply_filters(snap.entries, _criteria(args))
    progress = compute_all_progress(snap.goals, filtered)
    stats = compute_summary(
        _now(args),
        snap.entries,
        snap.calls,
        filtered_entries=filtered,
        progress=progress,
    )
    _emit(stats.model_dump(mode="json"))


def cmd_goals(_: argparse.Namespace, store: DataStore) -> None:
    """Print progress for every goal."""
    snap = store.snapshot()
    rows = []
    for p in compute_all_progress(snap.goals, snap.entries):
        rows.append(
            {
                "id": p.goal.id,
                "type": p.goal.type.value,
                "goal_type": p.goal.goal_type.value,
                "period": p.goal.period,
                "label": describe_bucket(p.goal.period, p.goal.type),
                "current_amount": p.current_amount,
                "target_amount": p.goal.target_amount,
                "progress_percentage": round(p.display_percentage, 1),
                "is_completed": p.is_completed,
            }
        )
    _emit(rows)


def cmd_performance(args: argparse.Namespace, store: DataStore) -> None:
    snap = store.snapshot()
    _emit(compute_performance(_now(args), snap.entries, snap.calls).model_dump(mode="json"))


def cmd_calls_stats(_: argparse.Namespace, store: DataStore) -> None:
    _emit(compute_call_stats(store.calls).model_dump(mode="json"))


def cmd_trend(args: argparse.Namespace, store: DataStore) -> None:
    """Print the daily (revenue and calls) or monthly revenue trend."""
    snap = store.snapshot()
    if args.by == "month":
        df = monthly_trend(_now(args), snap.entries, months=args.months)
    else:
        df = daily_trend(_now(args), snap.entries, snap.calls, days=args.days)
    _emit(json.loads(df.to_json(orient="records")))


def cmd_breakdown(args: argparse.Namespace, store: DataStore) -> None:
    if args.by == "weekday":
        df = day_of_week_breakdown(store.entries)
    else:
        df = category_breakdown(store.entries)
    _emit(json.loads(df.to_json(orient="records")))


def cmd_check(_: argparse.Namespace, store: DataStore) -> None:
    issues = store.find_inconsistencies()
    _emit([vars(i) for i in issues])
    if issues:
        raise SystemExit(1)


def cmd_repair(_: argparse.Namespace, store: DataStore) -> None:
    _emit([vars(i) for i in store.repair()])


# --------------------------------------------------
# MUTATIONS
# --------------------------------------------------
def cmd_add_entry(args: argparse.Namespace, store: DataStore) -> None:
    entry = RevenueEntry(
        id=_new_id(),
        date=args.date or date.today(),
        amount=args.amount,
        category=args.category,
        description=args.description,
        created_at=store.clock(),
    )
    store.add_entry(entry)
    _emit(entry.to_record())


def cmd_delete_entry(args: argparse.Namespace, store: DataStore) -> None:
    store.delete_entry(args.id)


def cmd_add_goal(args: argparse.Namespace, store: DataStore) -> None:
    """Create a goal from flags or from a template, for the current period by default."""
    if args.template:
        t = get_goal_template(args.template)
        granularity, target, goal_type = t.type, t.target_amount, t.goal_type
        description = args.description or t.description
    else:
        if args.type is None or args.target is None:
            raise SystemExit("add-goal needs --type and --target (or --template)")
        granularity, target = Granularity(args.type), args.target
        goal_type = GoalType(args.goal_type)
        description = args.description

    goal = Goal(
        id=_new_id(),
        type=granularity,
        period=args.period or current_bucket(granularity, _now(args)),
        target_amount=target,
        goal_type=goal_type,
        description=description,
        created_at=store.clock(),
    )
    store.add_goal(goal)
    _emit(goal.to_record())


def cmd_delete_goal(args: argparse.Namespace, store: DataStore) -> None:
    store.delete_goal(args.id)


def cmd_add_call(args: argparse.Namespace, store: DataStore) -> None:
    call = Call(
        id=_new_id(),
        client_name=args.client,
        email=args.email,
        phone=args.phone,
        call_type=CallType(args.call_type),
        date=args.date,
        time=args.time,
        duration=args.duration,
        notes=args.notes,
        status=CallStatus(args.status),
        created_at=store.clock(),
    )
    store.add_call(call)
    _emit(call.to_record())


def cmd_convert_call(args: argparse.Namespace, store: DataStore) -> None:
    _emit(store.convert_call(args.id, args.amount).to_record())


def cmd_revert_call(args: argparse.Namespace, store: DataStore) -> None:
    _emit(store.revert_call(args.id).to_record())


def cmd_delete_call(args: argparse.Namespace, store: DataStore) -> None:
    store.delete_call(args.id)


COMMANDS: dict[str, Callable[[argparse.Namespace, DataStore], None]] = {
    "summary": cmd_summary,
    "goals": cmd_goals,
    "performance": cmd_performance,
    "calls-stats": cmd_calls_stats,
    "trend": cmd_trend,
    "breakdown": cmd_breakdown,
    "check": cmd_check,
    "repair": cmd_repair,
    "add-entry": cmd_add_entry,
    "delete-entry": cmd_delete_entry,
    "add-goal": cmd_add_goal,
    "delete-goal": cmd_delete_goal,
    "add-call": cmd_add_call,
    "convert-call": cmd_convert_call,
    "revert-call": cmd_revert_call,
    "delete-call": cmd_delete_call,
}


# --------------------------------------------------
# CLI
# --------------------------------------------------
def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI."""
    p = argparse.ArgumentParser(prog="revenue_dashboard")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_summary = sub.add_parser("summary")
    p_summary.add_argument("--now")
    p_summary.add_argument("--from", dest="date_from", type=date.fromisoformat)
    p_summary.add_argument("--to", dest="date_to", type=date.fromisoformat)
    p_summary.add_argument("--category", action="append")
    p_summary.add_argument("--min-amount", type=float)
    p_summary.add_argument("--max-amount", type=float)
    p_summary.add_argument("--search")

    sub.add_parser("goals")
    sub.add_parser("performance").add_argument("--now")
    sub.add_parser("calls-stats")

    p_trend = sub.add_parser("trend")
    p_trend.add_argument("--now")
    p_trend.add_argument("--by", choices=["day", "month"], default="day")
    p_trend.add_argument("--days", type=int, default=30)
    p_trend.add_argument("--months", type=int, default=6)

    sub.add_parser("breakdown").add_argument(
        "--by", choices=["category", "weekday"], default="category"
    )
    sub.add_parser("check")
    sub.add_parser("repair")

    p_entry = sub.add_parser("add-entry")
    p_entry.add_argument("--amount", type=float, required=True)
    p_entry.add_argument("--date", type=date.fromisoformat)
    p_entry.add_argument("--category")
    p_entry.add_argument("--description")

    sub.add_parser("delete-entry").add_argument("id")

    p_goal = sub.add_parser("add-goal")
    p_goal.add_argument("--type", choices=[g.value for g in Granularity])
    p_goal.add_argument("--target", type=float)
    p_goal.add_argument("--goal-type", choices=[g.value for g in GoalType], default="revenue")
    p_goal.add_argument("--period")
    p_goal.add_argument("--template")
    p_goal.add_argument("--description")
    p_goal.add_argument("--now")

    sub.add_parser("delete-goal").add_argument("id")

    p_call = sub.add_parser("add-call")
    p_call.add_argument("--client", required=True)
    p_call.add_argument("--date", type=date.fromisoformat, required=True)
    p_call.add_argument("--time", type=time.fromisoformat, required=True)
    p_call.add_argument("--duration", type=int, default=30)
    p_call.add_argument("--call-type", choices=[c.value for c in CallType], default="call")
    p_call.add_argument("--status", choices=[s.value for s in CallStatus], default="scheduled")
    p_call.add_argument("--email")
    p_call.add_argument("--phone")
    p_call.add_argument("--notes")

    p_convert = sub.add_parser("convert-call")
    p_convert.add_argument("id")
    p_convert.add_argument("--amount", type=float, required=True)

    sub.add_parser("revert-call").add_argument("id")
    sub.add_parser("delete-call").add_argument("id")

    return p


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse args, configure logging, open the store and dispatch."""
    args = build_parser().parse_args(argv)

    s = get_settings()
    configure_logging(s.log_path, s.log_level, stream=sys.stderr)

    log.debug("Running command %s", args.cmd)
    store = DataStore(build_repository(s))
    COMMANDS[args.cmd](args, store)


if __name__ == "__main__":
    main()
