from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from revenue_dashboard.cli import main
from revenue_dashboard.repository import CALLS, ENTRIES, GOALS, JsonFileRepository


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    monkeypatch.setenv("STORAGE_BACKEND", "json")
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.delenv("LOG_PATH", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    return tmp_path


def _run(capsys: pytest.CaptureFixture[str], *argv: str):
    main(list(argv))
    out = capsys.readouterr().out
    return json.loads(out) if out.strip() else None


def test_convert_flow_and_summary(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(capsys, "add-entry", "--amount", "100", "--date", "2024-03-05", "--category", "whop")
    call = _run(
        capsys,
        "add-call", "--client", "Sam", "--date", "2024-03-08", "--time", "10:00",
        "--status", "completed",
    )
    converted = _run(capsys, "convert-call", call["id"], "--amount", "250")
    assert converted["isConverted"] is True

    repo = JsonFileRepository(data_dir)
    assert {r["id"] for r in repo.load(ENTRIES)} >= {f"revenue-{call['id']}"}

    summary = _run(capsys, "summary", "--now", "2024-03-10T12:00:00")
    assert summary["total_revenue"] == 350
    assert summary["this_month_revenue"] == 350
    assert summary["current_conversion_rate"] == 100
    assert summary["current_month_conversions"] == 1

    filtered = _run(capsys, "summary", "--now", "2024-03-10T12:00:00", "--category", "whop")
    assert filtered["total_revenue"] == 100

    assert _run(capsys, "check") == []

    _run(capsys, "revert-call", call["id"])
    assert [r["id"] for r in repo.load(ENTRIES)] != []
    assert all(not r["id"].startswith("revenue-") for r in repo.load(ENTRIES))
    assert repo.load(CALLS)[0]["isConverted"] is False


def test_add_goal_defaults_to_current_period(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    goal = _run(capsys, "add-goal", "--type", "weekly", "--target", "500", "--now", "2024-03-01T09:00:00")
    assert goal["period"] == "2024-W09"

    _run(capsys, "add-entry", "--amount", "600", "--date", "2024-02-27")
    rows = _run(capsys, "goals")
    assert rows[0]["label"] == "Week 09, 2024"
    assert rows[0]["progress_percentage"] == 100
    assert rows[0]["is_completed"] is True


def test_add_goal_from_template(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    goal = _run(capsys, "add-goal", "--template", "monthly_revenue_5k", "--now", "2024-03-15T09:00:00")
    assert goal["type"] == "monthly"
    assert goal["period"] == "2024-03"
    assert goal["targetAmount"] == 5000


def test_check_exits_non_zero_on_orphans(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    repo = JsonFileRepository(data_dir)
    repo.save(
        ENTRIES,
        [{"id": "revenue-ghost", "date": "2024-03-01", "amount": 10, "category": "calls",
          "createdAt": "2024-03-01T00:00:00Z"}],
    )
    with pytest.raises(SystemExit) as exc:
        main(["check"])
    assert exc.value.code == 1
    issues = json.loads(capsys.readouterr().out)
    assert issues == [{"kind": "orphaned_entry", "call_id": "ghost", "entry_id": "revenue-ghost"}]

    _run(capsys, "repair")
    assert repo.load(ENTRIES) == []


def test_trend_and_breakdown_views(data_dir: Path, capsys: pytest.CaptureFixture[str]) -> None:
    _run(capsys, "add-entry", "--amount", "100", "--date", "2024-03-10", "--category", "whop")
    _run(capsys, "add-entry", "--amount", "40", "--date", "2024-01-15", "--category", "whop")

    months = _run(capsys, "trend", "--by", "month", "--months", "3", "--now", "2024-03-20T08:00:00")
    assert [m["month"] for m in months] == ["2024-01", "2024-02", "2024-03"]
    assert [m["total"] for m in months] == [40, 0, 100]

    days = _run(capsys, "trend", "--days", "7", "--now", "2024-03-10T08:00:00")
    assert len(days) == 7
    assert days[-1] == {"day": "2024-03-10", "revenue": 100, "calls": 0}

    weekdays = _run(capsys, "breakdown", "--by", "weekday")
    assert weekdays[0]["day"] == "Sun"
    assert weekdays[0]["total"] == 100
    assert weekdays[1]["total"] == 40

    categories = _run(capsys, "breakdown")
    assert [c["id"] for c in categories] == ["whop"]


def test_add_goal_rejects_period_of_wrong_shape(data_dir: Path) -> None:
    with pytest.raises(ValidationError):
        main(["add-goal", "--type", "weekly", "--target", "500", "--period", "2024-09"])
    assert JsonFileRepository(data_dir).load(GOALS) == []
