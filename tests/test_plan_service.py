"""Tests for study plan week/day task lookup."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from server.services import plan_service
from server.services.records import iso

# 2024-01-03 is a Wednesday.
NOW = datetime(2024, 1, 3, 10, 0, tzinfo=timezone.utc)


def _plan(created, completed=(), custom=()):
    return {
        "id": "p1",
        "createdAt": iso(created),
        "completedTasks": list(completed),
        "customTasks": list(custom),
        "generatedPlan": {"weeks": [
            {"week": 1, "days": [{"day": "Wednesday", "tasks": [{"activity": "w1"}]}]},
            {"week": 2, "days": [{"day": "Wednesday", "tasks": [{"activity": "w2a"}, {"activity": "w2b"}]}]},
        ]},
    }


def test_current_week_never_below_one():
    assert plan_service.current_week(iso(NOW), NOW) == 1
    assert plan_service.current_week(iso(NOW - timedelta(days=1)), NOW) == 1
    assert plan_service.current_week(iso(NOW - timedelta(days=8)), NOW) == 2


def test_todays_tasks_for_new_plan_use_week_one():
    data = plan_service.todays_tasks(_plan(NOW - timedelta(hours=1)), NOW)
    assert data["currentWeek"] == 1
    assert data["dayName"] == "Wednesday"
    assert [t["activity"] for t in data["tasks"]] == ["w1"]
    assert data["tasks"][0]["id"] == "1-Wednesday-0"


def test_completed_flags_and_custom_tasks():
    plan = _plan(
        NOW - timedelta(days=8),
        completed=["2-Wednesday-1"],
        custom=[
            {"id": "c1", "date": "2024-01-03", "activity": "mine"},
            {"id": "c2", "date": "2024-01-04", "activity": "tomorrow"},
        ],
    )
    data = plan_service.todays_tasks(plan, NOW)
    assert [t.get("completed") for t in data["tasks"][:2]] == [False, True]
    assert data["tasks"][2]["isCustom"] is True
    assert len(data["tasks"]) == 3


def test_task_id_format():
    assert plan_service.task_id(3, "Friday", 2) == "3-Friday-2"


def test_loosely_shaped_plan_entries_are_skipped():
    plan = _plan(NOW - timedelta(hours=1))
    plan["generatedPlan"] = {"weeks": [
        "Week 1: algebra",
        {"week": 1, "days": [
            "Wednesday: rest",
            {"day": "Wednesday", "tasks": ["read a passage", {"activity": "drill"}]},
        ]},
    ]}
    data = plan_service.todays_tasks(plan, NOW)
    assert [t["activity"] for t in data["tasks"]] == ["drill"]
    assert data["tasks"][0]["id"] == "1-Wednesday-1"


def test_non_object_plan_shapes_yield_no_tasks():
    for generated in ("just text", {"weeks": "all of them"}, {"weeks": [{"week": 1, "days": {"Wednesday": []}}]}):
        plan = _plan(NOW - timedelta(hours=1))
        plan["generatedPlan"] = generated
        assert plan_service.todays_tasks(plan, NOW)["tasks"] == []
