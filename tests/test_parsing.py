"""Tests for JSON extraction from model replies."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from server.services.ai import extract_json


def test_object_inside_code_fence():
    text = 'Here is the plan:\n```json\n{"summary": "ok", "weeks": []}\n```'
    result = extract_json(text, "object")
    assert result.ok
    assert result.value == {"summary": "ok", "weeks": []}


def test_array_with_surrounding_prose():
    result = extract_json('Cards: [{"front": "a", "back": "b"}] done', "array")
    assert result.ok and result.value == [{"front": "a", "back": "b"}]


def test_whole_text_fallback():
    assert extract_json("[1, 2]", "array").value == [1, 2]


def test_wrong_container_type_fails():
    result = extract_json('{"a": 1}', "array")
    assert not result.ok
    assert "array" in result.reason


def test_empty_and_invalid():
    assert extract_json("", "object").reason == "empty response"
    assert extract_json("   ", "array").reason == "empty response"
    result = extract_json("{not: valid}", "object")
    assert not result.ok and result.reason.startswith("invalid JSON")


def test_unknown_expect_rejected():
    with pytest.raises(ValueError):
        extract_json("{}", "string")
