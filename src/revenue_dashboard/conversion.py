"""Call conversion: keeping a converted call and its revenue entry in step.

A converted call is mirrored by a derived `RevenueEntry` with id
``revenue-<call id>``, category ``calls``, the call's date and the conversion
amount. The functions here are pure: they return the updated call together
with the change to apply to the entry collection, and the caller
(`DataStore`) writes both.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from revenue_dashboard.categories import CALLS_CATEGORY
from revenue_dashboard.models import Call, RevenueEntry

log = logging.getLogger(__name__)

DERIVED_ENTRY_PREFIX = "revenue-"


class DeltaAction(str, Enum):
    INSERT = "insert"
    DELETE = "delete"
    NONE = "none"


@dataclass(frozen=True)
class EntryDelta:
    """Change to the revenue entry collection.

    Attributes:
        action: ``insert`` (add or replace `entry`), ``delete`` (remove
            `entry_id`) or ``none``.
        entry_id: Id of the derived entry concerned.
        entry: The entry to insert, for ``insert`` deltas.
    """
    action: DeltaAction
    entry_id: str
    entry: RevenueEntry | None = None


@dataclass(frozen=True)
class ConversionResult:
    """Updated call plus the entry change that must be written with it."""
    call: Call
    delta: EntryDelta


def derived_entry_id(call_id: str) -> str:
    """Return the id of the revenue entry mirroring call `call_id`."""
    return f"{DERIVED_ENTRY_PREFIX}{call_id}"


def derived_entry(call: Call, now: datetime) -> RevenueEntry:
    """Build the revenue entry for a converted `call`."""
    return RevenueEntry(
        id=derived_entry_id(call.id),
        date=call.date,
        amount=call.conversion_amount,
        category=CALLS_CATEGORY,
        description=f"Conversion from {call.call_type.value}: {call.client_name}",
        created_at=now,
    )


def convert_call(call: Call, amount: float, now: datetime) -> ConversionResult:
    """Mark `call` as converted for `amount`.

    Converting an already converted call replaces its derived entry, so the
    entry amount always equals the call's conversion amount.

    Raises:
        ValueError: if `amount` is negative.
    """
    if amount < 0:
        raise ValueError(f"Conversion amount must be >= 0, got {amount}")

    updated = call.model_copy(update={"is_converted": True, "conversion_amount": float(amount)})
    entry = derived_entry(updated, now)
    log.debug("Converting call %s for %.2f", call.id, amount)
    return ConversionResult(updated, EntryDelta(DeltaAction.INSERT, entry.id, entry))


def revert_call(call: Call) -> ConversionResult:
    """Mark `call` as not converted and drop its derived entry."""
    updated = call.model_copy(update={"is_converted": False})
    log.debug("Reverting conversion of call %s", call.id)
    return ConversionResult(updated, EntryDelta(DeltaAction.DELETE, derived_entry_id(call.id)))


def sync_call(previous: Call | None, updated: Call, now: datetime) -> ConversionResult:
    """Translate a generic call edit into the matching entry change.

    - converted after the edit: insert/replace the derived entry;
    - converted before but not after: delete the derived entry;
    - otherwise: no entry change.
    """
    if updated.is_converted:
        return convert_call(updated, updated.conversion_amount, now)
    if previous is not None and previous.is_converted:
        return revert_call(updated)
    return ConversionResult(updated, EntryDelta(DeltaAction.NONE, derived_entry_id(updated.id)))
