"""Tests for /api/quizzes: generate, take, grade, retry."""

import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from docstore import where


def _questions(n):
    return [
        {
            "question": f"Question {i}?",
            "options": {"A": "a", "B": "b", "C": "c", "D": "d"},
            "correctAnswer": "A",
            "explanation": "Because.",
            "topic": "Algebra",
        }
        for i in range(n)
    ]


def _generate(client, gateway, n=5, **overrides):
    gateway.replies = ["Here is your quiz:\n" + json.dumps(_questions(n))]
    body = {"subject": "Math", "topic": "Algebra", "numQuestions": n}
    body.update(overrides)
    r = client.post("/api/quizzes/generate", json=body)
    assert r.status_code == 201, r.text
    return r.json()["data"]["quiz"]


def test_generate_assigns_ids_and_clamps_count(client, gateway):
    quiz = _generate(client, gateway, n=5, numQuestions=2, timed=True)
    assert quiz["status"] == "not_started"
    assert len({q["id"] for q in quiz["questions"]}) == 5
    assert [q["number"] for q in quiz["questions"]] == [1, 2, 3, 4, 5]
    assert all(q["userAnswer"] is None and q["flagged"] is False for q in quiz["questions"])
    # asked for 2, clamped to 5; 2 minutes per question
    assert quiz["timeLimit"] == 10
    assert "Generate 5 multiple-choice questions" in gateway.calls[0]["messages"][1]["content"]


def test_model_supplied_ids_are_replaced(client, gateway):
    questions = [{**q, "id": i + 1} for i, q in enumerate(_questions(5))]
    gateway.replies = [json.dumps(questions)]
    r = client.post("/api/quizzes/generate", json={"subject": "Math", "topic": "Algebra"})
    quiz = r.json()["data"]["quiz"]
    ids = [q["id"] for q in quiz["questions"]]
    assert all(isinstance(i, str) for i in ids)
    assert len(set(ids)) == 5
    assert not set(ids) & {str(n) for n in range(1, 6)}

    answers = {q["id"]: "A" for q in quiz["questions"]}
    score = client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": answers}).json()["data"]["score"]
    assert score == {"correct": 5, "incorrect": 0, "skipped": 0, "total": 5, "percentage": 100}


def test_generate_with_no_questions_is_ai_error(client, gateway):
    gateway.replies = ["[]"]
    r = client.post("/api/quizzes/generate", json={"subject": "Math", "topic": "Algebra"})
    assert r.status_code == 500
    assert r.json()["message"] == "AI service error"


def test_submit_grades_and_updates_progress(client, gateway, store):
    quiz = _generate(client, gateway, n=5)
    qs = quiz["questions"]

    assert client.post(f"/api/quizzes/{quiz['id']}/start").json()["data"]["quiz"]["status"] == "in_progress"

    r = client.put(f"/api/quizzes/{quiz['id']}/answers", json={
        "answers": {qs[0]["id"]: "A"},
        "flagged": {qs[1]["id"]: True},
    })
    assert r.status_code == 200
    assert r.json()["data"]["quiz"]["questions"][1]["flagged"] is True

    assert client.get(f"/api/quizzes/{quiz['id']}/results").status_code == 400

    r = client.post(f"/api/quizzes/{quiz['id']}/submit", json={
        "answers": {qs[1]["id"]: "A", qs[2]["id"]: "B"},
        "timeSpent": 600,
    })
    assert r.status_code == 200
    score = r.json()["data"]["score"]
    assert score == {"correct": 2, "incorrect": 1, "skipped": 2, "total": 5, "percentage": 40}

    user = asyncio.run(store.find_one("users", where(id=client.user["id"])))
    assert user["stats"]["xp"] == 25 + 4 * 5
    assert user["stats"]["quizzesTaken"] == 1
    assert "speed_demon" not in user["stats"]["achievements"]

    progress = asyncio.run(store.find_one("progress", where(userId=client.user["id"])))
    assert progress["subjects"]["math"]["correctAnswers"] == 2
    assert progress["subjects"]["math"]["totalQuestions"] == 5
    assert progress["subjects"]["math"]["score"] == 40
    assert progress["activityLog"][0]["type"] == "quiz_completed"

    results = client.get(f"/api/quizzes/{quiz['id']}/results").json()["data"]
    assert [q["status"] for q in results["questions"]] == ["correct", "correct", "incorrect", "skipped", "skipped"]


def test_completed_quiz_rejects_changes(client, gateway):
    quiz = _generate(client, gateway)
    client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": {}})
    assert client.post(f"/api/quizzes/{quiz['id']}/start").status_code == 400
    assert client.put(f"/api/quizzes/{quiz['id']}/answers", json={"answers": {}}).status_code == 400
    assert client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": {}}).status_code == 400


def test_perfect_fast_quiz_earns_achievements(client, gateway, store):
    quiz = _generate(client, gateway)
    answers = {q["id"]: "A" for q in quiz["questions"]}
    r = client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": answers, "timeSpent": 120})
    assert r.json()["data"]["score"]["percentage"] == 100

    stats = asyncio.run(store.find_one("users", where(id=client.user["id"])))["stats"]
    assert stats["xp"] == 75
    assert stats["perfectQuizzes"] == 1
    for achievement in ("perfect_score", "speed_demon", "subject_expert"):
        assert achievement in stats["achievements"]


def test_retry_creates_fresh_copy(client, gateway):
    quiz = _generate(client, gateway)
    client.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": {quiz["questions"][0]["id"]: "A"}})

    r = client.post(f"/api/quizzes/{quiz['id']}/retry")
    assert r.status_code == 201
    copy = r.json()["data"]["quiz"]
    assert copy["id"] != quiz["id"]
    assert copy["status"] == "not_started"
    assert copy["score"] is None
    assert all(q["userAnswer"] is None and "status" not in q for q in copy["questions"])

    listing = client.get("/api/quizzes").json()["data"]
    assert listing["total"] == 2
    assert listing["items"][0]["id"] == copy["id"]
    assert client.get("/api/quizzes", params={"status": "completed"}).json()["data"]["total"] == 1


def test_delete_and_ownership(make_client, gateway):
    alice = make_client("alice")
    bob = make_client("bob")
    quiz = _generate(alice, gateway)
    assert bob.get(f"/api/quizzes/{quiz['id']}").status_code == 404
    assert bob.post(f"/api/quizzes/{quiz['id']}/submit", json={"answers": {}}).status_code == 404
    assert alice.delete(f"/api/quizzes/{quiz['id']}").status_code == 200
    assert alice.get(f"/api/quizzes/{quiz['id']}").status_code == 404
