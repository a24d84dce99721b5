"""Progress summary, analytics, activity log, achievements and data export."""

import math

from fastapi import APIRouter, Depends, Query

from docstore import DocumentStore, where
from server.auth import get_current_user_id
from server.catalog import ACHIEVEMENTS
from server.dependencies import get_store
from server.envelope import envelope, not_found
from server.schemas import StudyTimeRequest
from server.services import analytics_service, progress_service
from server.services.records import now_iso, public_user, utc_now

router = APIRouter(prefix="/api/progress", tags=["progress"])

EARLY_BIRD_BEFORE = 8
NIGHT_OWL_FROM = 22


def _user_stats(user):
    return progress_service.merged_stats(user) if user else {}


@router.get("")
async def summary(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    progress = await store.find_one("progress", where(userId=user_id))
    if progress is None:
        raise not_found("Progress")
    user = await store.find_one("users", where(id=user_id))
    return envelope({"progress": progress, "stats": _user_stats(user)}, "Progress retrieved")


@router.get("/analytics")
async def analytics(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    progress = await store.find_one("progress", where(userId=user_id))
    user = await store.find_one("users", where(id=user_id))
    quizzes = await store.find_many("quizzes", where(userId=user_id, status="completed"))
    tests = await store.find_many("tests", where(userId=user_id, status="completed"))
    data = analytics_service.build_analytics(progress, _user_stats(user), quizzes, tests, utc_now())
    return envelope(data, "Analytics retrieved")


@router.get("/activity")
async def activity(
    page: int = Query(1),
    limit: int = Query(20, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    progress = await store.find_one("progress", where(userId=user_id))
    log = (progress or {}).get("activityLog") or []
    start = (page - 1) * limit
    items = log[start:start + limit] if page >= 1 else []
    return envelope(
        {
            "activities": items,
            "total": len(log),
            "page": page,
            "totalPages": math.ceil(len(log) / limit),
        },
        "Activity retrieved" if log else "No activity",
    )


@router.post("/study-time")
async def log_study_time(
    body: StudyTimeRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    hour = utc_now().hour
    extra = []
    if hour < EARLY_BIRD_BEFORE:
        extra.append("early_bird")
    elif hour >= NIGHT_OWL_FROM:
        extra.append("night_owl")
    stats = await progress_service.update_stats(
        store,
        user_id,
        streak=True,
        study_minutes=body.minutes,
        achievements=extra,
    )
    await progress_service.log_activity(store, user_id, {
        "type": "study_session",
        "minutes": body.minutes,
        "subject": body.subject,
        "activity": body.activity,
    })
    return envelope({"stats": stats}, "Study time logged")


@router.get("/achievements")
async def achievements(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    user = await store.find_one("users", where(id=user_id))
    earned_ids = set(_user_stats(user).get("achievements") or [])
    items = [{**a, "earned": a["id"] in earned_ids} for a in ACHIEVEMENTS]
    return envelope(
        {
            "achievements": items,
            "earned": sum(1 for a in items if a["earned"]),
            "total": len(items),
        },
        "Achievements retrieved",
    )


@router.get("/export")
async def export(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    user = await store.find_one("users", where(id=user_id))
    mine = where(userId=user_id)
    data = {
        "exportedAt": now_iso(),
        "user": public_user(user) if user else None,
        "progress": await store.find_one("progress", mine),
        "lessons": await store.find_many("lessons", mine),
        "quizzes": await store.find_many("quizzes", mine),
        "tests": await store.find_many("tests", mine),
        "chats": await store.find_many("chat_history", mine),
        "studyPlans": await store.find_many("study_plans", mine),
        "essays": await store.find_many("essays", mine),
        "flashcards": await store.find_many("flashcards", mine),
    }
    return envelope(data, "Data exported")
