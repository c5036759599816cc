"""In-memory store mirroring the persisted collections.

`DataStore` loads the three collections once, keeps them in memory (newest
first) and rewrites the affected collection on every mutation. Aggregations
never touch the store directly: callers pass `snapshot()` contents to the
pure functions in `revenue_dashboard.aggregate`.

Call conversions touch two collections. They are written in a fixed order so
that a failure between the two writes always leaves a state that
`find_inconsistencies` reports and `repair` fixes:

- convert: entries first, then calls (a crash leaves an orphaned entry);
- revert / delete call: calls first, then entries (a crash leaves an orphaned
  entry as well).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Iterable, TypeVar

from revenue_dashboard.conversion import (
    DERIVED_ENTRY_PREFIX,
    ConversionResult,
    DeltaAction,
    EntryDelta,
    convert_call,
    derived_entry,
    derived_entry_id,
    revert_call,
    sync_call,
)
from revenue_dashboard.models import Call, Goal, RevenueEntry, StoredRecord
from revenue_dashboard.repository import CALLS, ENTRIES, GOALS, Repository

log = logging.getLogger(__name__)

R = TypeVar("R", bound=StoredRecord)


class RecordNotFoundError(KeyError):
    """Raised when an update or delete names an id that is not stored."""


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the collections at one point in time."""
    entries: tuple[RevenueEntry, ...]
    goals: tuple[Goal, ...]
    calls: tuple[Call, ...]


@dataclass(frozen=True)
class Inconsistency:
    """A broken link between a call and its derived revenue entry.

    Attributes:
        kind: ``orphaned_entry`` (derived entry without a converted call),
            ``missing_entry`` (converted call without entry) or
            ``mismatched_entry`` (entry amount/date differ from the call).
        call_id: Call concerned.
        entry_id: Derived entry id.
    """
    kind: str
    call_id: str
    entry_id: str


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _index_of(items: list[R], record_id: str) -> int:
    for i, item in enumerate(items):
        if item.id == record_id:
            return i
    return -1


class DataStore:
    """Revenue entries, goals and calls backed by a `Repository`."""

    def __init__(self, repository: Repository, clock: Callable[[], datetime] = _utcnow) -> None:
        self.repository = repository
        self.clock = clock
        self._entries = [RevenueEntry.model_validate(r) for r in repository.load(ENTRIES)]
        self._goals = [Goal.model_validate(r) for r in repository.load(GOALS)]
        self._calls = [Call.model_validate(r) for r in repository.load(CALLS)]
        log.info(
            "Loaded store: entries=%d goals=%d calls=%d",
            len(self._entries),
            len(self._goals),
            len(self._calls),
        )

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def entries(self) -> list[RevenueEntry]:
        return list(self._entries)

    @property
    def goals(self) -> list[Goal]:
        return list(self._goals)

    @property
    def calls(self) -> list[Call]:
        return list(self._calls)

    def snapshot(self) -> Snapshot:
        return Snapshot(tuple(self._entries), tuple(self._goals), tuple(self._calls))

    def get_call(self, call_id: str) -> Call:
        i = _index_of(self._calls, call_id)
        if i < 0:
            raise RecordNotFoundError(call_id)
        return self._calls[i]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def _write(self, name: str, items: Iterable[StoredRecord]) -> None:
        self.repository.save(name, [m.to_record() for m in items])

    def _commit_entries(self, entries: list[RevenueEntry]) -> None:
        self._write(ENTRIES, entries)
        self._entries = entries

    def _commit_goals(self, goals: list[Goal]) -> None:
        self._write(GOALS, goals)
        self._goals = goals

    def _commit_calls(self, calls: list[Call]) -> None:
        self._write(CALLS, calls)
        self._calls = calls

    @staticmethod
    def _with_added(items: list[R], item: R) -> list[R]:
        if _index_of(items, item.id) >= 0:
            raise ValueError(f"Duplicate id: {item.id}")
        return [item, *items]

    @staticmethod
    def _with_replaced(items: list[R], item: R) -> list[R]:
        i = _index_of(items, item.id)
        if i < 0:
            raise RecordNotFoundError(item.id)
        out = list(items)
        out[i] = item
        return out

    @staticmethod
    def _without(items: list[R], record_id: str) -> list[R]:
        i = _index_of(items, record_id)
        if i < 0:
            raise RecordNotFoundError(record_id)
        return items[:i] + items[i + 1:]

    # ------------------------------------------------------------------
    # Revenue entries
    # ------------------------------------------------------------------
    def add_entry(self, entry: RevenueEntry) -> RevenueEntry:
        self._commit_entries(self._with_added(self._entries, entry))
        log.info("Added revenue entry %s (%.2f on %s)", entry.id, entry.amount, entry.date)
        return entry

    def update_entry(self, entry: RevenueEntry) -> RevenueEntry:
        self._commit_entries(self._with_replaced(self._entries, entry))
        log.info("Updated revenue entry %s", entry.id)
        return entry

    def delete_entry(self, entry_id: str) -> None:
        self._commit_entries(self._without(self._entries, entry_id))
        log.info("Deleted revenue entry %s", entry_id)

    # ------------------------------------------------------------------
    # Goals (add/delete only)
    # ------------------------------------------------------------------
    def add_goal(self, goal: Goal) -> Goal:
        self._commit_goals(self._with_added(self._goals, goal))
        log.info("Added %s goal %s for %s", goal.type.value, goal.id, goal.period)
        return goal

    def delete_goal(self, goal_id: str) -> None:
        self._commit_goals(self._without(self._goals, goal_id))
        log.info("Deleted goal %s", goal_id)

    # ------------------------------------------------------------------
    # Calls
    # ------------------------------------------------------------------
    def _apply(self, result: ConversionResult, calls: list[Call]) -> Call:
        """Write `calls` (already holding `result.call`) and the entry delta in order."""
        delta = result.delta

        if delta.action is DeltaAction.INSERT:
            self._commit_entries(self._with_entry(delta))
            self._commit_calls(calls)
        elif delta.action is DeltaAction.DELETE:
            self._commit_calls(calls)
            if _index_of(self._entries, delta.entry_id) >= 0:
                self._commit_entries(self._without(self._entries, delta.entry_id))
        else:
            self._commit_calls(calls)
        return result.call

    def _with_entry(self, delta: EntryDelta) -> list[RevenueEntry]:
        if delta.entry is None:
            raise ValueError(f"Insert delta for {delta.entry_id} carries no entry")
        if _index_of(self._entries, delta.entry_id) >= 0:
            return self._with_replaced(self._entries, delta.entry)
        return self._with_added(self._entries, delta.entry)

    def add_call(self, call: Call) -> Call:
        """Store a new call; a call added as converted gets its entry too."""
        result = sync_call(None, call, self.clock())
        saved = self._apply(result, self._with_added(self._calls, result.call))
        log.info("Added call %s with %s", call.id, call.client_name)
        return saved

    def update_call(self, call: Call) -> Call:
        """Replace a stored call, keeping its derived entry in step."""
        previous = self.get_call(call.id)
        result = sync_call(previous, call, self.clock())
        saved = self._apply(result, self._with_replaced(self._calls, result.call))
        log.info("Updated call %s", call.id)
        return saved

    def convert_call(self, call_id: str, amount: float) -> Call:
        """Mark a call converted for `amount` and add/replace its revenue entry."""
        result = convert_call(self.get_call(call_id), amount, self.clock())
        saved = self._apply(result, self._with_replaced(self._calls, result.call))
        log.info("Converted call %s for %.2f", call_id, amount)
        return saved

    def revert_call(self, call_id: str) -> Call:
        """Undo a conversion and remove exactly the call's derived entry."""
        result = revert_call(self.get_call(call_id))
        saved = self._apply(result, self._with_replaced(self._calls, result.call))
        log.info("Reverted conversion of call %s", call_id)
        return saved

    def delete_call(self, call_id: str) -> None:
        """Delete a call and its derived entry, if any."""
        self._commit_calls(self._without(self._calls, call_id))
        entry_id = derived_entry_id(call_id)
        if _index_of(self._entries, entry_id) >= 0:
            self._commit_entries(self._without(self._entries, entry_id))
        log.info("Deleted call %s", call_id)

    # ------------------------------------------------------------------
    # Consistency
    # ------------------------------------------------------------------
    def find_inconsistencies(self) -> list[Inconsistency]:
        """Report calls and derived entries that are out of step."""
        found: list[Inconsistency] = []
        entries = {e.id: e for e in self._entries}
        calls = {c.id: c for c in self._calls}

        for call in self._calls:
            if not call.is_converted:
                continue
            entry_id = derived_entry_id(call.id)
            entry = entries.get(entry_id)
            if entry is None:
                found.append(Inconsistency("missing_entry", call.id, entry_id))
            elif entry.amount != call.conversion_amount or entry.date != call.date:
                found.append(Inconsistency("mismatched_entry", call.id, entry_id))

        for entry in self._entries:
            if not entry.id.startswith(DERIVED_ENTRY_PREFIX):
                continue
            call_id = entry.id[len(DERIVED_ENTRY_PREFIX):]
            call = calls.get(call_id)
            if call is None or not call.is_converted:
                found.append(Inconsistency("orphaned_entry", call_id, entry.id))

        for issue in found:
            log.warning("Inconsistent conversion: %s call=%s entry=%s", issue.kind, issue.call_id, issue.entry_id)
        return found

    def repair(self) -> list[Inconsistency]:
        """Fix every reported inconsistency from the call side.

        Orphaned entries are removed; missing or mismatched entries are
        rebuilt from their converted call.
        """
        issues = self.find_inconsistencies()
        if not issues:
            return []

        entries = list(self._entries)
        now = self.clock()
        for issue in issues:
            i = _index_of(entries, issue.entry_id)
            if issue.kind == "orphaned_entry":
                entries.pop(i)
                continue
            rebuilt = derived_entry(self.get_call(issue.call_id), now)
            if i >= 0:
                entries[i] = rebuilt
            else:
                entries.insert(0, rebuilt)

        self._commit_entries(entries)
        log.info("Repaired %d conversion inconsistencies", len(issues))
        return issues
