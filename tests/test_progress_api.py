"""Tests for /api/progress."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fastapi.testclient import TestClient

from docstore import where
from server.app import app


def test_requires_login(settings):
    r = TestClient(app).get("/api/progress")
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_summary(client):
    data = client.get("/api/progress").json()["data"]
    assert set(data["progress"]["subjects"]) == {"english", "math", "reading", "science", "writing"}
    assert data["stats"]["level"] == 1
    assert data["stats"]["xp"] == 0


def test_study_time_updates_streak_and_log(client):
    r = client.post("/api/progress/study-time", json={"minutes": 25, "subject": "Math"})
    stats = r.json()["data"]["stats"]
    assert stats["totalStudyTime"] == 25
    assert stats["streak"] == 1
    # same day again: streak unchanged
    stats = client.post("/api/progress/study-time", json={"minutes": 5}).json()["data"]["stats"]
    assert stats["totalStudyTime"] == 30
    assert stats["streak"] == 1

    data = client.get("/api/progress/activity", params={"limit": 1}).json()["data"]
    assert data["total"] == 2
    assert data["totalPages"] == 2
    assert data["activities"][0]["minutes"] == 5
    assert data["activities"][0]["type"] == "study_session"


def test_activity_empty(client):
    r = client.get("/api/progress/activity")
    assert r.json()["message"] == "No activity"
    assert r.json()["data"]["activities"] == []
    assert r.json()["data"]["totalPages"] == 0


def test_analytics_from_completed_quizzes(client, store):
    uid = client.user["id"]
    for i, pct in enumerate((90, 40)):
        asyncio.run(store.insert("quizzes", {
            "id": f"q{i}",
            "userId": uid,
            "subject": "Math",
            "topic": "Algebra" if i == 0 else "Geometry",
            "status": "completed",
            "completedAt": f"2026-01-0{i + 1}T10:00:00.000Z",
            "score": {"correct": pct // 10, "total": 10, "percentage": pct},
        }))
    asyncio.run(store.insert("quizzes", {"id": "draft", "userId": uid, "status": "not_started"}))

    data = client.get("/api/progress/analytics").json()["data"]
    assert [h["score"] for h in data["scoreHistory"]] == [90, 40]
    assert [t["topic"] for t in data["strengths"]] == ["Algebra"]
    assert [t["topic"] for t in data["weaknesses"]] == ["Geometry"]


def test_achievements_catalog(client, store):
    asyncio.run(store.update("users", where(id=client.user["id"]), {
        "stats": {"achievements": ["first_lesson"], "xp": 0, "level": 1},
    }))
    data = client.get("/api/progress/achievements").json()["data"]
    assert data["total"] == 13
    assert data["earned"] == 1
    earned = [a["id"] for a in data["achievements"] if a["earned"]]
    assert earned == ["first_lesson"]


def test_export_has_no_password(client, gateway):
    client.post("/api/chat/conversations", json={"title": "Mine"})
    data = client.get("/api/progress/export").json()["data"]
    assert data["user"]["username"] == "alice"
    assert "password" not in data["user"]
    assert [c["title"] for c in data["chats"]] == ["Mine"]
    assert data["quizzes"] == []
    assert data["progress"]["userId"] == client.user["id"]
