"""Tests for /api/essays: drafting and AI grading."""

import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from docstore import where

GRADING = {
    "scores": {
        "ideasAndAnalysis": 4,
        "developmentAndSupport": 4,
        "organization": 3,
        "languageUse": 4,
        "overall": 8,
    },
    "feedback": {"ideasAndAnalysis": "Clear thesis."},
    "strengths": ["Structure"],
    "improvements": ["Examples"],
}


def _words(n):
    return " ".join(f"word{i}" for i in range(n))


def test_prompt_library(client):
    prompts = client.get("/api/essays/prompts").json()["data"]["prompts"]
    assert [p["id"] for p in prompts] == ["education-1", "society-1", "environment-1"]


def test_create_from_library_prompt_and_autosave(client):
    r = client.post("/api/essays", json={"promptId": "society-1", "timed": True})
    assert r.status_code == 201
    essay = r.json()["data"]["essay"]
    assert essay["prompt"]["topic"] == "Social Media Impact"
    assert essay["timeLimit"] == 40
    assert essay["status"] == "draft"

    r = client.put(f"/api/essays/{essay['id']}", json={"content": "  one two   three ", "timeSpent": 30})
    saved = r.json()["data"]["essay"]
    assert saved["wordCount"] == 3
    assert saved["timeSpent"] == 30


def test_short_essay_rejected_without_ai_call(client, gateway):
    essay = client.post("/api/essays", json={"customPrompt": "Is homework useful?"}).json()["data"]["essay"]
    r = client.post(f"/api/essays/{essay['id']}/submit", json={"content": _words(49)})
    assert r.status_code == 400
    assert r.json()["message"] == "Essay too short"
    assert gateway.calls == []


def test_submit_grades_and_updates_writing_average(client, gateway, store):
    gateway.replies = ["```json\n" + json.dumps(GRADING) + "\n```"]
    essay = client.post("/api/essays", json={"promptId": "education-1"}).json()["data"]["essay"]

    r = client.post(f"/api/essays/{essay['id']}/submit", json={"content": _words(60), "timeSpent": 1200})
    assert r.status_code == 200
    data = r.json()["data"]
    assert data["essay"]["status"] == "graded"
    assert data["essay"]["wordCount"] == 60
    assert data["grading"]["scores"]["overall"] == 8

    sent = gateway.calls[0]["messages"][1]["content"]
    assert "Technology in Education" in sent
    assert "Perspective Two" in sent

    progress = asyncio.run(store.find_one("progress", where(userId=client.user["id"])))
    assert progress["subjects"]["writing"] == {"essays": 1, "averageScore": 8}
    assert progress["activityLog"][0]["type"] == "essay_graded"
    stats = asyncio.run(store.find_one("users", where(id=client.user["id"])))["stats"]
    assert stats["essaysGraded"] == 1

    second = client.post("/api/essays", json={"customPrompt": "Topic"}).json()["data"]["essay"]
    gateway.replies = [json.dumps({**GRADING, "scores": {**GRADING["scores"], "overall": 11}})]
    client.post(f"/api/essays/{second['id']}/submit", json={"content": _words(55)})
    progress = asyncio.run(store.find_one("progress", where(userId=client.user["id"])))
    assert progress["subjects"]["writing"]["averageScore"] == 9.5

    graded = client.get("/api/essays", params={"graded": "true"}).json()["data"]
    assert graded["total"] == 2
    assert client.get("/api/essays", params={"graded": "false"}).json()["data"]["total"] == 0


def test_regrade_replaces_grading(client, gateway):
    gateway.replies = [json.dumps(GRADING)]
    essay = client.post("/api/essays", json={"customPrompt": "Topic"}).json()["data"]["essay"]
    client.post(f"/api/essays/{essay['id']}/submit", json={"content": _words(80)})

    gateway.replies = [json.dumps({**GRADING, "scores": {**GRADING["scores"], "overall": 10}})]
    r = client.post(f"/api/essays/{essay['id']}/regrade", json={"model": "kimi-k2"})
    assert r.status_code == 200
    assert r.json()["data"]["grading"]["scores"]["overall"] == 10
    assert gateway.calls[-1]["model"] == "kimi-k2"


def test_grading_without_overall_is_ai_error(client, gateway):
    gateway.replies = [json.dumps({"scores": {}, "feedback": {}})]
    essay = client.post("/api/essays", json={"customPrompt": "Topic"}).json()["data"]["essay"]
    r = client.post(f"/api/essays/{essay['id']}/submit", json={"content": _words(60)})
    assert r.status_code == 500
    assert client.get(f"/api/essays/{essay['id']}").json()["data"]["essay"]["status"] == "draft"


def test_generate_prompt_and_delete(client, gateway):
    gateway.replies = [json.dumps({
        "topic": "Remote Work",
        "introduction": "Many jobs moved online.",
        "perspectives": [{"name": "Perspective One", "description": "Good."}],
        "instructions": "Evaluate.",
    })]
    r = client.post("/api/essays/prompts/generate", json={"category": "Work"})
    assert r.json()["data"]["prompt"]["topic"] == "Remote Work"

    essay = client.post("/api/essays", json={"customPrompt": "Topic"}).json()["data"]["essay"]
    assert client.delete(f"/api/essays/{essay['id']}").status_code == 200
    assert client.get(f"/api/essays/{essay['id']}").status_code == 404
