"""AI gateway: one chat-completions call per request to the configured provider."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger("act_tutor.ai")

# key -> (provider model id, display name)
MODELS: Dict[str, Dict[str, str]] = {
    "deepseek-v3": {"id": "deepseek/deepseek-v3.2:thinking", "name": "DeepSeek V3.2 (Recommended)"},
    "glm-4-7": {"id": "zai-org/glm-4.7:thinking", "name": "GLM 4.7 Thinking"},
    "llama-3-1-405b": {"id": "Meta-Llama-3-1-405B-Instruct-FP8", "name": "Llama 3.1 Large"},
    "llama-4-maverick": {"id": "llama-4-maverick", "name": "Llama 4 Maverick"},
    "llama-3-3-70b": {"id": "llama-3.3-70b", "name": "Llama 3.3 (70B)"},
    "minimax-m2": {"id": "minimax/minimax-m2.1", "name": "MiniMax M2.1"},
    "mistral-large": {"id": "mistralai/mistral-large-3-675b-instruct-2512", "name": "Mistral Large 3"},
    "mistral-small": {"id": "mistral-small-31", "name": "Mistral Small 3.1 (24B)"},
    "glm-4-5-air": {"id": "glm-4.5-air", "name": "GLM 4.5 Air"},
    "gpt-oss-120b": {"id": "gpt-oss-120b", "name": "GPT OSS 120B"},
    "gpt-oss-20b": {"id": "gpt-oss-20b", "name": "GPT OSS 20B"},
    "mimo-v2": {"id": "mimo-v2-flash-thinking", "name": "Xiaomi MIMO V2 Flash Thinking"},
    "kimi-k2": {"id": "moonshotai/kimi-k2-thinking", "name": "Kimi K2 Thinking"},
}

Message = Dict[str, str]


@dataclass(eq=False)
class AIGatewayError(Exception):
    """Structured gateway failure. Details are for logs, not for clients."""
    kind: str  # unknown_model | missing_credential | timeout | transport_error | api_error | invalid_response | parse_error
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


def list_models() -> List[Dict[str, str]]:
    return [{"key": key, "id": m["id"], "name": m["name"]} for key, m in MODELS.items()]


def resolve_model(model_key: str) -> str:
    """Provider model id for a key. Raises AIGatewayError(unknown_model)."""
    model = MODELS.get(model_key)
    if model is None:
        raise AIGatewayError(kind="unknown_model", message=f"Invalid model key: {model_key}")
    return model["id"]


class ChatGateway(ABC):
    """Abstract chat gateway. Routes depend on this, tests swap in FakeGateway."""

    default_model: str = "deepseek-v3"

    @abstractmethod
    async def chat(
        self,
        model_key: Optional[str],
        messages: List[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> str:
        """Return the assistant text of the first completion, or raise AIGatewayError."""
        ...


class AIGateway(ChatGateway):
    """OpenAI-compatible chat completions over HTTPS (httpx)."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        *,
        timeout_s: float = 300.0,
        default_model: str = "deepseek-v3",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.timeout_s = timeout_s
        self.default_model = default_model
        self.transport = transport

    async def chat(
        self,
        model_key: Optional[str],
        messages: List[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> str:
        model_id = resolve_model(model_key or self.default_model)
        if not self.api_key:
            raise AIGatewayError(kind="missing_credential", message="NANO_API_KEY is not set")

        payload = {
            "model": model_id,
            "messages": messages,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"}
        logger.debug("AI request model=%s messages=%d max_tokens=%d", model_id, len(messages), max_tokens)
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s, transport=self.transport) as client:
                resp = await client.post(self.base_url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise AIGatewayError(kind="timeout", message="API request timed out", details={"error": str(e)})
        except httpx.TransportError as e:
            raise AIGatewayError(kind="transport_error", message="API request failed", details={"error": str(e)})

        try:
            data = resp.json()
        except ValueError:
            data = None

        if resp.status_code != 200:
            remote = None
            if isinstance(data, dict) and isinstance(data.get("error"), dict):
                remote = data["error"].get("message")
            raise AIGatewayError(
                kind="api_error",
                message=remote or f"API error: {resp.status_code}",
                details={"status": resp.status_code, "body": resp.text[:200]},
            )

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            content = None
        if not isinstance(content, str):
            raise AIGatewayError(
                kind="invalid_response",
                message="Invalid API response format",
                details={"body": resp.text[:200]},
            )
        return content


class FakeGateway(ChatGateway):
    """Test double: returns canned replies in order and records every call."""

    def __init__(self, replies: Optional[List[str]] = None, error: Optional[AIGatewayError] = None):
        self.replies = list(replies or [])
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def chat(
        self,
        model_key: Optional[str],
        messages: List[Message],
        *,
        temperature: float = 0.7,
        max_tokens: int = 4096,
    ) -> str:
        resolve_model(model_key or self.default_model)
        self.calls.append({"model": model_key, "messages": messages, "max_tokens": max_tokens})
        if self.error:
            raise self.error
        if not self.replies:
            return ""
        if len(self.replies) == 1:
            return self.replies[0]
        return self.replies.pop(0)
