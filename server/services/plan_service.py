"""Study plan schedule lookups."""

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from server.services.records import parse_iso

WEEK_SECONDS = 7 * 24 * 60 * 60

DEFAULT_PLAN_PARAMS = {
    "hoursPerDay": 2,
    "daysPerWeek": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
    "weakSubjects": [],
    "strongSubjects": [],
    "learningStyle": "Visual",
    "timePreference": ["Evening"],
}


def task_id(week: Any, day: Any, index: Any) -> str:
    return f"{week}-{day}-{index}"


def current_week(created_at: str, now: datetime) -> int:
    """1-based plan week: ceil(elapsed / 7 days), never below 1."""
    created = parse_iso(created_at) or now
    elapsed = (now - created).total_seconds()
    return max(1, math.ceil(elapsed / WEEK_SECONDS))


def _find(items: Any, key: str, value: Any) -> Optional[Dict[str, Any]]:
    """First dict in ``items`` whose ``key`` equals ``value``; non-dict entries are skipped."""
    if not isinstance(items, list):
        return None
    return next((x for x in items if isinstance(x, dict) and x.get(key) == value), None)


def todays_tasks(plan: Dict[str, Any], now: datetime) -> Dict[str, Any]:
    """Generated tasks for today's weekday in the current week, then today's custom tasks."""
    week = current_week(plan.get("createdAt"), now)
    day_name = now.strftime("%A")
    completed = set(plan.get("completedTasks") or [])

    tasks: List[Dict[str, Any]] = []
    generated = plan.get("generatedPlan")
    weeks = generated.get("weeks") if isinstance(generated, dict) else None
    week_data = _find(weeks, "week", week)
    day_data = _find(week_data.get("days"), "day", day_name) if week_data else None
    if day_data and isinstance(day_data.get("tasks"), list):
        for i, task in enumerate(day_data["tasks"]):
            if not isinstance(task, dict):
                continue
            tid = task_id(week, day_name, i)
            tasks.append({**task, "id": tid, "completed": tid in completed})

    today = now.date().isoformat()
    tasks.extend(
        {**t, "isCustom": True}
        for t in plan.get("customTasks") or []
        if t.get("date") == today
    )
    return {
        "tasks": tasks,
        "hasPlan": True,
        "planId": plan["id"],
        "currentWeek": week,
        "dayName": day_name,
    }
