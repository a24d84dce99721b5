"""Tests for XP levels, streaks and achievements."""

import asyncio
import sys
import tempfile
from datetime import datetime, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from docstore import DocumentStore, where
from server.services import progress_service
from server.services.records import ACTIVITY_LOG_LIMIT, default_stats, iso, new_progress, new_user


def _at(day, hour=12):
    return datetime(2024, 3, day, hour, 0, tzinfo=timezone.utc)


def test_level_up_loops_over_thresholds():
    stats = default_stats()
    stats["xp"] = 350
    progress_service.apply_level_ups(stats)
    # 350 >= 100 (->2) >= 200 (->3) >= 300 (->4); 350 < 400
    assert stats["level"] == 4


def test_streak_same_day_unchanged():
    stats = default_stats()
    stats.update(streak=3, lastStudyDate=iso(_at(10, 1)))
    assert progress_service.touch_streak(stats, _at(10, 23)) is False
    assert stats["streak"] == 3


def test_streak_next_day_increments_and_gap_resets():
    stats = default_stats()
    stats.update(streak=3, lastStudyDate=iso(_at(10, 23)))
    assert progress_service.touch_streak(stats, _at(11, 0)) is True
    assert stats["streak"] == 4
    assert stats["lastStudyDate"] == iso(_at(11, 0))

    assert progress_service.touch_streak(stats, _at(14)) is True
    assert stats["streak"] == 1


def test_first_streak_starts_at_one():
    stats = default_stats()
    progress_service.touch_streak(stats, _at(1))
    assert stats["streak"] == 1


def test_achievements_awarded_once():
    stats = default_stats()
    stats.update(lessonsCompleted=1, perfectQuizzes=1)
    new = progress_service.evaluate_achievements(stats, ["speed_demon"])
    assert set(new) == {"first_lesson", "perfect_score", "speed_demon"}
    assert progress_service.evaluate_achievements(stats, ["speed_demon"]) == []
    assert sorted(stats["achievements"]) == sorted(new)


def test_update_stats_and_activity_log_cap():
    with tempfile.TemporaryDirectory() as tmp:
        store = DocumentStore(Path(tmp))
        user = new_user("alice", "a@example.com", "hash")
        asyncio.run(store.insert("users", user))
        asyncio.run(store.insert("progress", new_progress(user["id"])))

        stats = asyncio.run(progress_service.update_stats(
            store, user["id"], xp=120, counters={"quizzesTaken": 1}
        ))
        assert stats["level"] == 2
        assert stats["quizzesTaken"] == 1

        async def log_many():
            for i in range(ACTIVITY_LOG_LIMIT + 5):
                await progress_service.log_activity(store, user["id"], {"type": "t", "i": i})

        asyncio.run(log_many())
        progress = asyncio.run(store.find_one("progress", where(userId=user["id"])))
        assert len(progress["activityLog"]) == ACTIVITY_LOG_LIMIT
        assert progress["activityLog"][0]["i"] == ACTIVITY_LOG_LIMIT + 4


def test_update_stats_unknown_user_is_noop():
    with tempfile.TemporaryDirectory() as tmp:
        store = DocumentStore(Path(tmp))
        assert asyncio.run(progress_service.update_stats(store, "nobody", xp=10)) is None
        assert not (Path(tmp) / "users.json").exists()
