"""AI gateway to the hosted chat-completions API, plus prompt-driven generators."""

from server.services.ai.gateway import (
    MODELS,
    AIGateway,
    AIGatewayError,
    ChatGateway,
    FakeGateway,
    list_models,
    resolve_model,
)
from server.services.ai.parsing import ParseResult, extract_json

__all__ = [
    "MODELS",
    "AIGateway",
    "AIGatewayError",
    "ChatGateway",
    "FakeGateway",
    "ParseResult",
    "extract_json",
    "list_models",
    "resolve_model",
]
