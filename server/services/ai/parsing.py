"""Locate and parse JSON embedded in model output."""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional

_ARRAY_RE = re.compile(r"\[[\s\S]*\]")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


@dataclass
class ParseResult:
    ok: bool
    value: Any = None
    reason: Optional[str] = None


def extract_json(text: str, expect: str = "object") -> ParseResult:
    """
    Parse the first-to-last bracket span of the expected kind, else the whole text.

    expect: "array" or "object". A parsed value of the other kind is a failure.
    """
    if expect not in ("array", "object"):
        raise ValueError(f"expect must be 'array' or 'object', got {expect!r}")
    if not isinstance(text, str) or not text.strip():
        return ParseResult(ok=False, reason="empty response")

    pattern = _ARRAY_RE if expect == "array" else _OBJECT_RE
    match = pattern.search(text)
    candidate = match.group(0) if match else text
    try:
        value = json.loads(candidate)
    except json.JSONDecodeError as e:
        return ParseResult(ok=False, reason=f"invalid JSON: {e.msg}")

    wanted = list if expect == "array" else dict
    if not isinstance(value, wanted):
        return ParseResult(ok=False, reason=f"expected a JSON {expect}")
    return ParseResult(ok=True, value=value)
