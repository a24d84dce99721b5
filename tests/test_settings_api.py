"""Tests for /api/settings and account deletion."""

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from fastapi.testclient import TestClient

from docstore import where
from server.app import app
from server.auth import SESSION_COOKIE

PASSWORD = "password123"

USER_DATA = (
    "progress",
    "lessons",
    "quizzes",
    "tests",
    "chat_history",
    "study_plans",
    "essays",
    "flashcards",
)


def test_get_and_update_settings(client):
    settings = client.get("/api/settings").json()["data"]["settings"]
    assert settings["theme"] == "light"
    r = client.put("/api/settings", json={"theme": "dark", "fontSize": "large"})
    updated = r.json()["data"]["settings"]
    assert updated["theme"] == "dark"
    assert updated["fontSize"] == "large"
    assert updated["notifications"] is True
    assert client.get("/api/settings").json()["data"]["settings"]["theme"] == "dark"


def test_timezones(client):
    zones = client.get("/api/settings/timezones").json()["data"]["timezones"]
    assert "America/New_York" in zones


def test_delete_account_wrong_password(client, store):
    r = client.request("DELETE", "/api/settings/account", json={"password": "wrong-password"})
    assert r.status_code == 400
    assert r.json()["message"] == "Invalid password"
    assert asyncio.run(store.find_one("users", where(id=client.user["id"]))) is not None


def test_delete_account_cascades(make_client, store):
    alice = make_client("alice")
    bob = make_client("bob")
    for c in (alice, bob):
        c.post("/api/flashcards", json={"title": "Deck"})
        c.post("/api/chat/conversations", json={})
        for name in ("lessons", "quizzes", "tests", "essays", "study_plans"):
            asyncio.run(store.insert(name, {"id": f"{name}-{c.user['id']}", "userId": c.user["id"]}))

    token = alice.cookies.get(SESSION_COOKIE)
    r = alice.request("DELETE", "/api/settings/account", json={"password": PASSWORD})
    assert r.status_code == 200

    aid, bid = alice.user["id"], bob.user["id"]
    assert asyncio.run(store.find_one("users", where(id=aid))) is None
    for name in USER_DATA:
        assert asyncio.run(store.find_many(name, where(userId=aid))) == []
        assert len(asyncio.run(store.find_many(name, where(userId=bid)))) == 1

    stale = TestClient(app, cookies={SESSION_COOKIE: token})
    assert stale.get("/api/settings").status_code == 401
    assert bob.get("/api/settings").status_code == 200
