"""Progress analytics derived from completed quizzes, tests and the activity log."""

from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from server.services.records import parse_iso
from server.services.scoring import estimated_score, round_half_up

STRENGTH_MIN = 80
WEAKNESS_MAX = 60


def _ts(value: Any) -> float:
    dt = parse_iso(value)
    return dt.timestamp() if dt else 0.0


def score_history(quizzes: List[Dict[str, Any]], tests: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    history = [
        {
            "date": q.get("completedAt"),
            "subject": q.get("subject"),
            "score": (q.get("score") or {}).get("percentage"),
            "type": "quiz",
        }
        for q in quizzes
    ]
    history.extend(
        {
            "date": t.get("completedAt"),
            "subject": "Full Test",
            "score": t.get("compositeScore"),
            "type": "test",
            "compositeScore": t.get("compositeScore"),
        }
        for t in tests
    )
    history.sort(key=lambda h: _ts(h["date"]))
    return history


def study_by_day(activity_log: List[Dict[str, Any]], now: datetime, days: int = 30) -> Dict[str, int]:
    """Activity count per weekday name over the last ``days`` days."""
    since = now - timedelta(days=days)
    counts: Dict[str, int] = {}
    for entry in activity_log:
        when = parse_iso(entry.get("timestamp"))
        if when is None or when < since:
            continue
        name = when.strftime("%A")
        counts[name] = counts.get(name, 0) + 1
    return counts


def topic_scores(quizzes: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    totals: Dict[str, List[int]] = {}
    for q in quizzes:
        score = q.get("score") or {}
        bucket = totals.setdefault(q.get("topic") or "General", [0, 0])
        bucket[0] += score.get("correct", 0)
        bucket[1] += score.get("total", 0)
    rows = [
        {
            "topic": topic,
            "accuracy": round_half_up(correct / total * 100),
            "questionsAttempted": total,
        }
        for topic, (correct, total) in totals.items()
        if total
    ]
    rows.sort(key=lambda r: r["accuracy"], reverse=True)
    return rows


def build_analytics(
    progress: Optional[Dict[str, Any]],
    stats: Dict[str, Any],
    quizzes: List[Dict[str, Any]],
    tests: List[Dict[str, Any]],
    now: datetime,
) -> Dict[str, Any]:
    progress = progress or {}
    quizzes = sorted(quizzes, key=lambda q: _ts(q.get("completedAt")))
    tests = sorted(tests, key=lambda t: _ts(t.get("completedAt")))
    topics = topic_scores(quizzes)
    log = progress.get("activityLog") or []
    return {
        "scoreHistory": score_history(quizzes, tests),
        "estimatedScore": estimated_score(tests, progress.get("subjects")),
        "subjects": progress.get("subjects") or {},
        "testScores": progress.get("testScores") or [],
        "studyByDay": study_by_day(log, now),
        "topicScores": topics,
        "strengths": [t for t in topics if t["accuracy"] >= STRENGTH_MIN][:5],
        "weaknesses": [t for t in topics if t["accuracy"] < WEAKNESS_MAX][:5],
        "stats": stats,
        "recentActivity": log[:20],
    }
