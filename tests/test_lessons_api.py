"""Tests for /api/lessons with a fake AI gateway."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fastapi.testclient import TestClient

from docstore import where
from server.app import app
from server.services.ai import AIGatewayError

LESSON_TEXT = "# Quadratics\n\nA quadratic equation has the form ax^2 + bx + c = 0."


def _generate(client, **overrides):
    body = {"subject": "Math", "topic": "Quadratic Equations", "difficulty": "Intermediate"}
    body.update(overrides)
    return client.post("/api/lessons/generate", json=body)


def test_requires_login(settings):
    r = TestClient(app).get("/api/lessons")
    assert r.status_code == 401


def test_generate_lesson_awards_xp_and_logs_activity(client, gateway, store):
    gateway.replies = [LESSON_TEXT]
    r = _generate(client)
    assert r.status_code == 201
    lesson = r.json()["data"]["lesson"]
    assert lesson["content"] == LESSON_TEXT
    assert lesson["title"] == "Math: Quadratic Equations"
    assert lesson["focusAreas"] == ["Concepts", "Examples", "Practice Problems"]
    assert gateway.calls[0]["max_tokens"] == 8192

    user = asyncio.run(store.find_one("users", where(id=client.user["id"])))
    assert user["stats"]["xp"] == 50
    assert user["stats"]["lessonsCompleted"] == 1
    assert "first_lesson" in user["stats"]["achievements"]

    progress = asyncio.run(store.find_one("progress", where(userId=client.user["id"])))
    assert progress["activityLog"][0]["type"] == "lesson_generated"
    assert progress["activityLog"][0]["lessonId"] == lesson["id"]


def test_generate_requires_topic(client, gateway):
    r = client.post("/api/lessons/generate", json={"subject": "Math"})
    assert r.status_code == 400
    assert gateway.calls == []


def test_unknown_model_is_validation_error(client, gateway):
    r = _generate(client, model="gpt-99")
    assert r.status_code == 400
    assert r.json()["message"] == "Validation error"
    assert gateway.calls == []


def test_list_filter_search_sort_and_paginate(client, gateway):
    gateway.replies = [LESSON_TEXT]
    for topic in ("Algebra", "Commas", "Geometry"):
        subject = "English" if topic == "Commas" else "Math"
        assert _generate(client, subject=subject, topic=topic).status_code == 201

    data = client.get("/api/lessons", params={"subject": "Math", "sort": "title"}).json()["data"]
    assert [l["topic"] for l in data["items"]] == ["Algebra", "Geometry"]
    assert data["total"] == 2

    data = client.get("/api/lessons", params={"search": "COMMA"}).json()["data"]
    assert [l["topic"] for l in data["items"]] == ["Commas"]

    data = client.get("/api/lessons", params={"limit": 2, "page": 2, "sort": "oldest"}).json()["data"]
    assert [l["topic"] for l in data["items"]] == ["Geometry"]
    assert data["totalPages"] == 2


def test_update_delete_and_bulk_delete(client, gateway):
    gateway.replies = [LESSON_TEXT]
    ids = [_generate(client, topic=t).json()["data"]["lesson"]["id"] for t in ("A", "B", "C")]

    r = client.put(f"/api/lessons/{ids[0]}", json={"favorite": True, "notes": "review"})
    assert r.status_code == 200
    assert r.json()["data"]["lesson"]["favorite"] is True

    favs = client.get("/api/lessons", params={"favorite": "true"}).json()["data"]
    assert [l["id"] for l in favs["items"]] == [ids[0]]

    assert client.delete(f"/api/lessons/{ids[0]}").status_code == 200
    assert client.get(f"/api/lessons/{ids[0]}").status_code == 404

    r = client.post("/api/lessons/bulk-delete", json={"ids": ids})
    assert r.json()["data"]["deletedCount"] == 2
    assert client.get("/api/lessons").json()["data"]["total"] == 0


def test_other_users_lessons_are_invisible(make_client, gateway):
    alice = make_client("alice")
    bob = make_client("bob")
    gateway.replies = [LESSON_TEXT]
    lesson_id = _generate(alice).json()["data"]["lesson"]["id"]

    assert bob.get(f"/api/lessons/{lesson_id}").status_code == 404
    assert bob.put(f"/api/lessons/{lesson_id}", json={"favorite": True}).status_code == 404
    assert bob.delete(f"/api/lessons/{lesson_id}").status_code == 404
    assert bob.get("/api/lessons").json()["data"]["items"] == []
    assert alice.get(f"/api/lessons/{lesson_id}").status_code == 200


def test_topics_and_models(client):
    topics = client.get("/api/lessons/topics").json()["data"]["topics"]
    assert "Quadratic Equations" in topics["math"]
    models = client.get("/api/lessons/models").json()["data"]["models"]
    assert any(m["key"] == "deepseek-v3" for m in models)


def test_ai_failure_is_generic_500(client, gateway):
    gateway.error = AIGatewayError(kind="api_error", message="upstream exploded")
    r = _generate(client)
    assert r.status_code == 500
    body = r.json()
    assert body["message"] == "AI service error"
    assert "upstream exploded" not in str(body)
