"""Lesson generation, listing and bookkeeping."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from docstore import DocumentStore, SortSpec, where
from server.auth import get_current_user_id
from server.catalog import ACT_TOPICS
from server.dependencies import get_gateway, get_store
from server.envelope import bad_request, envelope, not_found
from server.schemas import BulkDeleteRequest, LessonGenerateRequest, LessonUpdateRequest
from server.services import progress_service
from server.services.ai import ChatGateway, list_models
from server.services.ai.generators import generate_lesson
from server.services.records import new_id, now_iso

router = APIRouter(prefix="/api/lessons", tags=["lessons"])

SORTS = {
    "newest": SortSpec("createdAt", "desc"),
    "oldest": SortSpec("createdAt", "asc"),
    "title": SortSpec("title", "asc"),
}
DEFAULT_FOCUS = ["Concepts", "Examples", "Practice Problems"]


@router.get("")
async def list_lessons(
    subject: Optional[str] = None,
    topic: Optional[str] = None,
    difficulty: Optional[str] = None,
    completed: Optional[bool] = None,
    favorite: Optional[bool] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    page: int = Query(1),
    limit: int = Query(12, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    f = where(userId=user_id)
    if subject:
        f = f.eq("subject", subject)
    if topic:
        f = f.eq("topic", topic)
    if difficulty:
        f = f.eq("difficulty", difficulty)
    if completed is not None:
        f = f.eq("completed", completed)
    if favorite is not None:
        f = f.eq("favorite", favorite)
    if search:
        f = f.search(("title", "content", "topic"), search)
    result = await store.paginate("lessons", f, page, limit, SORTS.get(sort or ""))
    return envelope(result.to_dict(), "Lessons retrieved")


@router.get("/topics")
def topics():
    return envelope({"topics": ACT_TOPICS}, "Topics retrieved")


@router.get("/models")
def models():
    return envelope({"models": list_models()}, "Models retrieved")


@router.get("/{lesson_id}")
async def get_lesson(
    lesson_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    lesson = await store.find_one("lessons", where(id=lesson_id, userId=user_id))
    if lesson is None:
        raise not_found("Lesson")
    return envelope({"lesson": lesson}, "Lesson retrieved")


@router.post("/generate", status_code=201)
async def generate(
    body: LessonGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    topic = body.customTopic or body.topic
    if not topic:
        raise bad_request("Validation error", "Topic is required")
    difficulty = body.difficulty or "Intermediate"
    length = body.length or "Medium"
    focus = body.focusAreas or list(DEFAULT_FOCUS)
    model = body.model or gateway.default_model

    content = await generate_lesson(gateway, body.subject, topic, difficulty, length, focus, model)

    ts = now_iso()
    lesson = {
        "id": new_id(),
        "userId": user_id,
        "title": f"{body.subject}: {topic}",
        "subject": body.subject,
        "topic": topic,
        "difficulty": difficulty,
        "length": length,
        "focusAreas": focus,
        "content": content,
        "notes": "",
        "completed": False,
        "favorite": False,
        "model": model,
        "createdAt": ts,
        "updatedAt": ts,
    }
    await store.insert("lessons", lesson)
    await progress_service.update_stats(store, user_id, xp=50, counters={"lessonsCompleted": 1})
    await progress_service.log_activity(store, user_id, {
        "type": "lesson_generated",
        "subject": body.subject,
        "topic": topic,
        "lessonId": lesson["id"],
    })
    return envelope({"lesson": lesson}, "Lesson generated successfully")


@router.put("/{lesson_id}")
async def update_lesson(
    lesson_id: str,
    body: LessonUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    changes["updatedAt"] = now_iso()
    lesson = await store.update("lessons", where(id=lesson_id, userId=user_id), changes)
    if lesson is None:
        raise not_found("Lesson")
    return envelope({"lesson": lesson}, "Lesson updated")


@router.delete("/{lesson_id}")
async def delete_lesson(
    lesson_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    if not await store.remove("lessons", where(id=lesson_id, userId=user_id)):
        raise not_found("Lesson")
    return envelope({}, "Lesson deleted")


@router.post("/bulk-delete")
async def bulk_delete(
    body: BulkDeleteRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    deleted = await store.remove_many("lessons", where(userId=user_id).isin("id", body.ids))
    return envelope({"deletedCount": deleted}, f"{deleted} lessons deleted")
