"""Tests for the AI gateway against a mocked chat-completions endpoint."""

import asyncio
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import httpx
import pytest

from server.services.ai import MODELS, AIGateway, AIGatewayError, FakeGateway, list_models, resolve_model
from server.services.ai.generators import generate_quiz, generate_test_section

URL = "https://ai.example.test/v1/chat/completions"
MESSAGES = [{"role": "user", "content": "hi"}]


class Recorder:
    """httpx MockTransport handler that counts calls and returns a canned response."""

    def __init__(self, status=200, body=None, exc=None):
        self.status = status
        self.body = body if body is not None else {"choices": [{"message": {"content": "hello"}}]}
        self.exc = exc
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return httpx.Response(self.status, json=self.body)


def _gateway(handler, api_key="sk-test"):
    return AIGateway(api_key, URL, timeout_s=5, transport=httpx.MockTransport(handler))


def test_chat_posts_resolved_model_and_returns_content():
    rec = Recorder()
    reply = asyncio.run(_gateway(rec).chat("deepseek-v3", MESSAGES, max_tokens=123))
    assert reply == "hello"
    assert len(rec.requests) == 1
    req = rec.requests[0]
    assert req.headers["Authorization"] == "Bearer sk-test"
    payload = json.loads(req.content)
    assert payload["model"] == MODELS["deepseek-v3"]["id"]
    assert payload["messages"] == MESSAGES
    assert payload["max_tokens"] == 123
    assert payload["temperature"] == 0.7


def test_default_model_used_when_none():
    rec = Recorder()
    asyncio.run(_gateway(rec).chat(None, MESSAGES))
    assert json.loads(rec.requests[0].content)["model"] == MODELS["deepseek-v3"]["id"]


def test_unknown_model_makes_no_request():
    rec = Recorder()
    with pytest.raises(AIGatewayError) as info:
        asyncio.run(_gateway(rec).chat("gpt-99", MESSAGES))
    assert info.value.kind == "unknown_model"
    assert rec.requests == []


def test_missing_key_makes_no_request():
    rec = Recorder()
    with pytest.raises(AIGatewayError) as info:
        asyncio.run(_gateway(rec, api_key=None).chat("deepseek-v3", MESSAGES))
    assert info.value.kind == "missing_credential"
    assert rec.requests == []


def test_non_200_uses_remote_error_message():
    rec = Recorder(status=429, body={"error": {"message": "Slow down"}})
    with pytest.raises(AIGatewayError) as info:
        asyncio.run(_gateway(rec).chat("deepseek-v3", MESSAGES))
    assert info.value.kind == "api_error"
    assert info.value.message == "Slow down"


def test_non_200_without_message_reports_status():
    rec = Recorder(status=502, body={"oops": True})
    with pytest.raises(AIGatewayError) as info:
        asyncio.run(_gateway(rec).chat("deepseek-v3", MESSAGES))
    assert info.value.message == "API error: 502"


def test_bad_shape_is_invalid_response():
    for body in ({"choices": []}, {"choices": [{"message": {}}]}, {"nothing": 1}):
        rec = Recorder(body=body)
        with pytest.raises(AIGatewayError) as info:
            asyncio.run(_gateway(rec).chat("deepseek-v3", MESSAGES))
        assert info.value.kind == "invalid_response"
        assert info.value.message == "Invalid API response format"


def test_undecodable_body_is_invalid_response():
    def handler(request):
        return httpx.Response(200, content=b'{"choices": "\xff\xfe"}', headers={"content-type": "application/json"})

    with pytest.raises(AIGatewayError) as info:
        asyncio.run(_gateway(handler).chat("deepseek-v3", MESSAGES))
    assert info.value.kind == "invalid_response"


def test_timeout_and_transport_errors():
    rec = Recorder(exc=httpx.ReadTimeout("too slow"))
    with pytest.raises(AIGatewayError) as info:
        asyncio.run(_gateway(rec).chat("deepseek-v3", MESSAGES))
    assert info.value.kind == "timeout"

    rec = Recorder(exc=httpx.ConnectError("refused"))
    with pytest.raises(AIGatewayError) as info:
        asyncio.run(_gateway(rec).chat("deepseek-v3", MESSAGES))
    assert info.value.kind == "transport_error"


def test_model_catalog():
    keys = [m["key"] for m in list_models()]
    assert "deepseek-v3" in keys and len(keys) == len(MODELS) == 13
    assert resolve_model("kimi-k2") == "moonshotai/kimi-k2-thinking"


def test_generate_quiz_extracts_array_from_prose():
    fake = FakeGateway(['Sure! Here you go:\n[{"question": "2+2?", "correctAnswer": "B"}]\nGood luck.'])
    questions = asyncio.run(generate_quiz(fake, "Math", "Arithmetic", 5, "Beginner"))
    assert questions == [{"question": "2+2?", "correctAnswer": "B"}]
    assert fake.calls[0]["max_tokens"] == 8192


def test_generate_quiz_parse_failure():
    fake = FakeGateway(["I cannot help with that."])
    with pytest.raises(AIGatewayError) as info:
        asyncio.run(generate_quiz(fake, "Math", "Arithmetic", 5, "Beginner"))
    assert info.value.kind == "parse_error"


def test_generate_test_section_rejects_unknown_section_before_calling():
    fake = FakeGateway(['{"passages": []}'])
    with pytest.raises(ValueError):
        asyncio.run(generate_test_section(fake, "history", 5))
    assert fake.calls == []
