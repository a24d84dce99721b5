"""Tutor conversations."""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends

from docstore import DocumentStore, where
from server.auth import get_current_user_id
from server.catalog import CHAT_PROMPTS
from server.dependencies import get_gateway, get_store
from server.envelope import bad_request, envelope, not_found
from server.schemas import ConversationCreateRequest, ConversationUpdateRequest, MessageRequest, ModelChoice
from server.services.ai import ChatGateway
from server.services.ai.generators import chat_with_tutor
from server.services.records import new_id, now_iso

router = APIRouter(prefix="/api/chat", tags=["chat"])

CONTEXT_MESSAGES = 10
DEFAULT_TITLE = "New Conversation"
TITLE_LENGTH = 50


def _context(messages: List[Dict[str, Any]]):
    return [{"role": m["role"], "content": m["content"]} for m in messages[-CONTEXT_MESSAGES:]]


def _summary(conversation: Dict[str, Any]) -> Dict[str, Any]:
    messages = conversation.get("messages") or []
    return {
        "id": conversation["id"],
        "title": conversation.get("title"),
        "lastMessage": (messages[-1].get("content") or "")[:100] if messages else "",
        "messageCount": len(messages),
        "model": conversation.get("model"),
        "pinned": conversation.get("pinned", False),
        "createdAt": conversation.get("createdAt"),
        "updatedAt": conversation.get("updatedAt"),
    }


async def _owned(store: DocumentStore, conversation_id: str, user_id: str) -> Dict[str, Any]:
    conversation = await store.find_one("chat_history", where(id=conversation_id, userId=user_id))
    if conversation is None:
        raise not_found("Conversation")
    return conversation


@router.get("/conversations")
async def list_conversations(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    conversations = await store.find_many("chat_history", where(userId=user_id))
    conversations.sort(key=lambda c: c.get("updatedAt") or "", reverse=True)
    return envelope({"conversations": [_summary(c) for c in conversations]}, "Conversations retrieved")


@router.get("/conversations/{conversation_id}")
async def get_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    conversation = await _owned(store, conversation_id, user_id)
    return envelope({"conversation": conversation}, "Conversation retrieved")


@router.post("/conversations", status_code=201)
async def create_conversation(
    body: ConversationCreateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    ts = now_iso()
    conversation = {
        "id": new_id(),
        "userId": user_id,
        "title": body.title or DEFAULT_TITLE,
        "model": body.model or gateway.default_model,
        "messages": [],
        "pinned": False,
        "createdAt": ts,
        "updatedAt": ts,
    }
    await store.insert("chat_history", conversation)
    return envelope({"conversation": conversation}, "Conversation created")


@router.post("/conversations/{conversation_id}/messages")
async def send_message(
    conversation_id: str,
    body: MessageRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    content = body.content.strip()
    if not content:
        raise bad_request("Message content is required")
    conversation = await _owned(store, conversation_id, user_id)

    messages = list(conversation.get("messages") or [])
    user_message = {"id": new_id(), "role": "user", "content": content, "timestamp": now_iso()}
    messages.append(user_message)

    model = body.model or conversation.get("model") or gateway.default_model
    reply = await chat_with_tutor(gateway, _context(messages), model)
    ai_message = {"id": new_id(), "role": "assistant", "content": reply, "model": model, "timestamp": now_iso()}
    messages.append(ai_message)

    changes: Dict[str, Any] = {"messages": messages, "updatedAt": now_iso()}
    if len(messages) == 2 and conversation.get("title") == DEFAULT_TITLE:
        changes["title"] = content[:TITLE_LENGTH] + ("..." if len(content) > TITLE_LENGTH else "")
    if body.model:
        changes["model"] = body.model
    conversation = await store.update("chat_history", where(id=conversation_id, userId=user_id), changes)
    if conversation is None:
        raise not_found("Conversation")
    return envelope(
        {
            "userMessage": user_message,
            "aiMessage": ai_message,
            "conversation": {
                "id": conversation["id"],
                "title": conversation["title"],
                "messageCount": len(messages),
            },
        },
        "Message sent",
    )


@router.post("/conversations/{conversation_id}/regenerate")
async def regenerate(
    conversation_id: str,
    body: Optional[ModelChoice] = None,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    conversation = await _owned(store, conversation_id, user_id)
    messages = list(conversation.get("messages") or [])
    if not messages:
        raise bad_request("No messages to regenerate")
    if messages[-1].get("role") == "assistant":
        messages.pop()

    model = (body.model if body else None) or conversation.get("model") or gateway.default_model
    reply = await chat_with_tutor(gateway, _context(messages), model)
    ai_message = {
        "id": new_id(),
        "role": "assistant",
        "content": reply,
        "model": model,
        "regenerated": True,
        "timestamp": now_iso(),
    }
    messages.append(ai_message)
    saved = await store.update("chat_history", where(id=conversation_id, userId=user_id), {
        "messages": messages,
        "updatedAt": now_iso(),
    })
    if saved is None:
        raise not_found("Conversation")
    return envelope({"aiMessage": ai_message}, "Response regenerated")


@router.put("/conversations/{conversation_id}")
async def update_conversation(
    conversation_id: str,
    body: ConversationUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    changes["updatedAt"] = now_iso()
    conversation = await store.update("chat_history", where(id=conversation_id, userId=user_id), changes)
    if conversation is None:
        raise not_found("Conversation")
    return envelope({"conversation": conversation}, "Conversation updated")


@router.delete("/conversations/{conversation_id}/messages/{message_id}")
async def delete_message(
    conversation_id: str,
    message_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    conversation = await _owned(store, conversation_id, user_id)
    messages = list(conversation.get("messages") or [])
    kept = [m for m in messages if m.get("id") != message_id]
    if len(kept) == len(messages):
        raise not_found("Message")
    await store.update("chat_history", where(id=conversation_id, userId=user_id), {
        "messages": kept,
        "updatedAt": now_iso(),
    })
    return envelope({}, "Message deleted")


@router.delete("/conversations/{conversation_id}")
async def delete_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    if not await store.remove("chat_history", where(id=conversation_id, userId=user_id)):
        raise not_found("Conversation")
    return envelope({}, "Conversation deleted")


@router.post("/conversations/{conversation_id}/clear")
async def clear_conversation(
    conversation_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    conversation = await store.update(
        "chat_history",
        where(id=conversation_id, userId=user_id),
        {"messages": [], "updatedAt": now_iso()},
    )
    if conversation is None:
        raise not_found("Conversation")
    return envelope({"conversation": conversation}, "Conversation cleared")


@router.get("/prompts")
def prompts():
    return envelope({"prompts": CHAT_PROMPTS}, "Prompts retrieved")
