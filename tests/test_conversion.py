from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from revenue_dashboard.conversion import (
    DeltaAction,
    convert_call,
    derived_entry_id,
    revert_call,
    sync_call,
)
from revenue_dashboard.models import CallType

NOW = datetime(2024, 3, 2, 9, 0, tzinfo=timezone.utc)


def test_convert_builds_derived_entry(make_call) -> None:
    call = make_call("2024-03-01", id="abc", client_name="Sam", call_type=CallType.CONSULTATION)
    result = convert_call(call, 50, NOW)

    assert result.call.is_converted is True
    assert result.call.conversion_amount == 50
    assert call.is_converted is False

    assert result.delta.action is DeltaAction.INSERT
    entry = result.delta.entry
    assert entry is not None
    assert entry.id == "revenue-abc"
    assert entry.amount == 50
    assert entry.category == "calls"
    assert entry.date == date(2024, 3, 1)
    assert entry.description == "Conversion from consultation: Sam"
    assert entry.created_at == NOW


def test_revert_deletes_exactly_the_derived_entry(make_call) -> None:
    call = make_call("2024-03-01", id="abc", is_converted=True, conversion_amount=50)
    result = revert_call(call)
    assert result.call.is_converted is False
    assert result.delta.action is DeltaAction.DELETE
    assert result.delta.entry_id == derived_entry_id("abc") == "revenue-abc"
    assert result.delta.entry is None


def test_negative_conversion_amount_is_rejected(make_call) -> None:
    with pytest.raises(ValueError):
        convert_call(make_call("2024-03-01"), -1, NOW)


def test_sync_call_transitions(make_call) -> None:
    plain = make_call("2024-03-01", id="x")
    converted = plain.model_copy(update={"is_converted": True, "conversion_amount": 75.0})

    assert sync_call(None, plain, NOW).delta.action is DeltaAction.NONE
    assert sync_call(plain, plain, NOW).delta.action is DeltaAction.NONE

    up = sync_call(plain, converted, NOW)
    assert up.delta.action is DeltaAction.INSERT
    assert up.delta.entry is not None and up.delta.entry.amount == 75

    down = sync_call(converted, plain, NOW)
    assert down.delta.action is DeltaAction.DELETE
    assert down.delta.entry_id == "revenue-x"


def test_sync_call_refreshes_amount_of_converted_call(make_call) -> None:
    before = make_call("2024-03-01", id="x", is_converted=True, conversion_amount=75)
    after = before.model_copy(update={"conversion_amount": 90.0})
    result = sync_call(before, after, NOW)
    assert result.delta.action is DeltaAction.INSERT
    assert result.delta.entry is not None and result.delta.entry.amount == 90
