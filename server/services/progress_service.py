"""
User statistics and progress bookkeeping.

Stats live on the user record (``users`` collection); subject aggregates,
test scores and the activity log live in the user's ``progress`` record.
Each helper is an independent store update: a failure between two of them
leaves well-formed records with stale aggregates.
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Iterable, List, Optional

from docstore import DocumentStore, where
from server.services.records import ACTIVITY_LOG_LIMIT, default_stats, iso, parse_iso, utc_now
from server.services.scoring import round_half_up

logger = logging.getLogger("act_tutor")

# achievement id -> condition on stats
_THRESHOLDS: Dict[str, Callable[[Dict[str, Any]], bool]] = {
    "first_lesson": lambda s: s.get("lessonsCompleted", 0) >= 1,
    "quiz_master": lambda s: s.get("quizzesTaken", 0) >= 10,
    "perfect_score": lambda s: s.get("perfectQuizzes", 0) >= 1,
    "perfectionist": lambda s: s.get("perfectQuizzes", 0) >= 5,
    "test_taker": lambda s: s.get("testsTaken", 0) >= 1,
    "week_warrior": lambda s: s.get("streak", 0) >= 7,
    "month_master": lambda s: s.get("streak", 0) >= 30,
    "essay_writer": lambda s: s.get("essaysGraded", 0) >= 5,
    "flashcard_fan": lambda s: s.get("flashcardsReviewed", 0) >= 100,
}


# ---- pure rules ----

def apply_level_ups(stats: Dict[str, Any]) -> None:
    """Level rises while xp has reached level * 100."""
    while stats["xp"] >= stats["level"] * 100:
        stats["level"] += 1


def touch_streak(stats: Dict[str, Any], now: datetime) -> bool:
    """
    Calendar-day streak (UTC). Same day: unchanged. Previous day: +1.
    Otherwise: reset to 1. Returns True if stats changed.
    """
    last = parse_iso(stats.get("lastStudyDate"))
    today = now.date()
    if last is not None and last.date() == today:
        return False
    if last is not None and last.date() == today - timedelta(days=1):
        stats["streak"] = stats.get("streak", 0) + 1
    else:
        stats["streak"] = 1
    stats["lastStudyDate"] = iso(now)
    return True


def evaluate_achievements(stats: Dict[str, Any], extra: Iterable[str] = ()) -> List[str]:
    """Append newly earned achievement ids to stats; return them."""
    earned = stats.setdefault("achievements", [])
    new = []
    candidates = [a for a, cond in _THRESHOLDS.items() if cond(stats)] + list(extra)
    for achievement in candidates:
        if achievement not in earned and achievement not in new:
            new.append(achievement)
    earned.extend(new)
    return new


def merged_stats(user: Dict[str, Any]) -> Dict[str, Any]:
    """User stats with any missing counters filled in."""
    stats = default_stats()
    stats.update(user.get("stats") or {})
    stats["achievements"] = list(stats.get("achievements") or [])
    return stats


# ---- store updates ----

async def update_stats(
    store: DocumentStore,
    user_id: str,
    *,
    xp: int = 0,
    counters: Optional[Dict[str, int]] = None,
    achievements: Iterable[str] = (),
    streak: bool = False,
    study_minutes: int = 0,
) -> Optional[Dict[str, Any]]:
    """Apply XP, counter increments, streak and achievements to the user's stats."""
    user = await store.find_one("users", where(id=user_id))
    if user is None:
        return None
    stats = merged_stats(user)
    stats["xp"] += xp
    for key, inc in (counters or {}).items():
        stats[key] = stats.get(key, 0) + inc
    stats["totalStudyTime"] += study_minutes
    if streak:
        touch_streak(stats, utc_now())
    apply_level_ups(stats)
    new = evaluate_achievements(stats, achievements)
    if new:
        logger.info("User %s earned achievements: %s", user_id, ", ".join(new))
    await store.update("users", where(id=user_id), {"stats": stats})
    return stats


async def log_activity(
    store: DocumentStore,
    user_id: str,
    entry: Dict[str, Any],
    **progress_changes: Any,
) -> Optional[Dict[str, Any]]:
    """Prepend an activity entry (log capped) and merge any other progress fields."""
    progress = await store.find_one("progress", where(userId=user_id))
    if progress is None:
        return None
    log = [{**entry, "timestamp": iso(utc_now())}] + list(progress.get("activityLog") or [])
    changes = {"activityLog": log[:ACTIVITY_LOG_LIMIT], **progress_changes}
    return await store.update("progress", where(userId=user_id), changes)


async def record_quiz(store: DocumentStore, user_id: str, quiz: Dict[str, Any], score: Dict[str, int]) -> Optional[int]:
    """Update the subject aggregate and log the quiz; returns the subject accuracy, if tracked."""
    progress = await store.find_one("progress", where(userId=user_id))
    if progress is None:
        return None
    accuracy = None
    subjects = dict(progress.get("subjects") or {})
    key = str(quiz.get("subject", "")).lower()
    if key in subjects and "totalQuestions" in subjects[key]:
        agg = dict(subjects[key])
        agg["quizzesTaken"] += 1
        agg["correctAnswers"] += score["correct"]
        agg["totalQuestions"] += score["total"]
        if agg["totalQuestions"]:
            agg["score"] = round_half_up(agg["correctAnswers"] / agg["totalQuestions"] * 100)
        subjects[key] = agg
        accuracy = agg["score"]
    await log_activity(
        store,
        user_id,
        {
            "type": "quiz_completed",
            "subject": quiz.get("subject"),
            "topic": quiz.get("topic"),
            "quizId": quiz["id"],
            "score": score["percentage"],
        },
        subjects=subjects,
    )
    return accuracy


async def record_test(store: DocumentStore, user_id: str, test_id: str, composite: int, section_scores: Dict[str, int]) -> None:
    progress = await store.find_one("progress", where(userId=user_id))
    if progress is None:
        return
    test_scores = list(progress.get("testScores") or [])
    test_scores.append({
        "testId": test_id,
        "compositeScore": composite,
        "sectionScores": section_scores,
        "date": iso(utc_now()),
    })
    await log_activity(
        store,
        user_id,
        {"type": "test_completed", "testId": test_id, "compositeScore": composite},
        testScores=test_scores,
    )


async def record_essay(store: DocumentStore, user_id: str, essay_id: str, overall: float) -> None:
    progress = await store.find_one("progress", where(userId=user_id))
    if progress is None:
        return
    subjects = dict(progress.get("subjects") or {})
    writing = dict(subjects.get("writing") or {"essays": 0, "averageScore": 0})
    writing["essays"] += 1
    writing["averageScore"] = (writing["averageScore"] * (writing["essays"] - 1) + overall) / writing["essays"]
    subjects["writing"] = writing
    await log_activity(
        store,
        user_id,
        {"type": "essay_graded", "essayId": essay_id, "score": overall},
        subjects=subjects,
    )
