"""Shared fixtures: isolated data dir + SQLite file per test, fake AI gateway."""

import os
import sys
import tempfile
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

# Must be set before server.ratelimit is imported.
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest
from fastapi.testclient import TestClient

from server.app import app
from server.config import Settings
from server.db.session import init_db, reset_engine
from server.dependencies import get_gateway, get_settings, get_store, reset_store
from server.services.ai import FakeGateway

PASSWORD = "password123"


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def settings(gateway):
    reset_engine()
    reset_store()
    with tempfile.TemporaryDirectory() as tmp:
        s = Settings(
            data_dir=Path(tmp) / "data",
            database_url=f"sqlite:///{Path(tmp) / 'test.db'}",
            environment="development",
        )
        init_db(s)
        app.dependency_overrides[get_settings] = lambda: s
        app.dependency_overrides[get_gateway] = lambda: gateway
        try:
            yield s
        finally:
            app.dependency_overrides.clear()
            reset_engine()
            reset_store()


@pytest.fixture
def store(settings):
    return get_store(settings)


@pytest.fixture
def make_client(settings):
    """Factory: a TestClient holding the session cookie of a freshly registered user."""
    def _make(username="alice", email=None):
        client = TestClient(app)
        r = client.post("/api/auth/register", json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": PASSWORD,
        })
        assert r.status_code == 201, r.text
        client.user = r.json()["data"]["user"]
        return client
    return _make


@pytest.fixture
def client(make_client):
    return make_client()
