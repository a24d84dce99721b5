"""Quiz generation, taking and grading."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from docstore import DocumentStore, SortSpec, where
from server.auth import get_current_user_id
from server.dependencies import get_gateway, get_store
from server.envelope import ApiError, envelope, not_found
from server.schemas import QuizAnswersRequest, QuizGenerateRequest, QuizSubmitRequest
from server.services import progress_service, scoring
from server.services.ai import AIGatewayError, ChatGateway
from server.services.ai.generators import generate_quiz
from server.services.records import new_id, now_iso

router = APIRouter(prefix="/api/quizzes", tags=["quizzes"])

MIN_QUESTIONS = 5
MAX_QUESTIONS = 30
SPEED_DEMON_SECONDS = 5 * 60


async def _owned(store: DocumentStore, quiz_id: str, user_id: str) -> Dict[str, Any]:
    quiz = await store.find_one("quizzes", where(id=quiz_id, userId=user_id))
    if quiz is None:
        raise not_found("Quiz")
    return quiz


def _reject_completed(quiz: Dict[str, Any], detail: str) -> None:
    if quiz.get("status") == "completed":
        raise ApiError(400, "Quiz already completed", [detail])


@router.get("")
async def list_quizzes(
    subject: Optional[str] = None,
    status: Optional[str] = None,
    page: int = Query(1),
    limit: int = Query(12, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    f = where(userId=user_id)
    if subject:
        f = f.eq("subject", subject)
    if status:
        f = f.eq("status", status)
    result = await store.paginate("quizzes", f, page, limit, SortSpec("createdAt", "desc"))
    return envelope(result.to_dict(), "Quizzes retrieved")


@router.get("/{quiz_id}")
async def get_quiz(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return envelope({"quiz": await _owned(store, quiz_id, user_id)}, "Quiz retrieved")


@router.post("/generate", status_code=201)
async def generate(
    body: QuizGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    topic = body.customTopic or body.topic or "General"
    count = min(max(body.numQuestions or 10, MIN_QUESTIONS), MAX_QUESTIONS)
    difficulty = body.difficulty or "Intermediate"
    model = body.model or gateway.default_model

    raw = await generate_quiz(gateway, body.subject, topic, count, difficulty, model)
    questions = [
        {"number": i + 1, **q, "id": new_id(), "userAnswer": None, "flagged": False}
        for i, q in enumerate(q for q in raw if isinstance(q, dict))
    ]
    if not questions:
        raise AIGatewayError(kind="parse_error", message="AI response contained no quiz questions")

    ts = now_iso()
    quiz = {
        "id": new_id(),
        "userId": user_id,
        "title": f"{body.subject}: {topic} Quiz",
        "subject": body.subject,
        "topic": topic,
        "difficulty": difficulty,
        "timed": body.timed,
        "timeLimit": (body.timeLimit or count * 2) if body.timed else None,
        "questions": questions,
        "status": "not_started",
        "score": None,
        "answers": {},
        "startedAt": None,
        "completedAt": None,
        "timeSpent": None,
        "model": model,
        "createdAt": ts,
        "updatedAt": ts,
    }
    await store.insert("quizzes", quiz)
    return envelope({"quiz": quiz}, "Quiz generated successfully")


@router.post("/{quiz_id}/start")
async def start(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    quiz = await _owned(store, quiz_id, user_id)
    _reject_completed(quiz, "This quiz has already been completed")
    ts = now_iso()
    quiz = await store.update("quizzes", where(id=quiz_id, userId=user_id), {
        "status": "in_progress",
        "startedAt": quiz.get("startedAt") or ts,
        "updatedAt": ts,
    })
    return envelope({"quiz": quiz}, "Quiz started")


@router.put("/{quiz_id}/answers")
async def save_answers(
    quiz_id: str,
    body: QuizAnswersRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    quiz = await _owned(store, quiz_id, user_id)
    _reject_completed(quiz, "Cannot update answers for a completed quiz")
    changes: Dict[str, Any] = {
        "answers": {**(quiz.get("answers") or {}), **body.answers},
        "updatedAt": now_iso(),
    }
    if body.flagged:
        changes["questions"] = [
            {**q, "flagged": body.flagged.get(q["id"], q.get("flagged", False))}
            for q in quiz["questions"]
        ]
    quiz = await store.update("quizzes", where(id=quiz_id, userId=user_id), changes)
    return envelope({"quiz": quiz}, "Answers saved")


@router.post("/{quiz_id}/submit")
async def submit(
    quiz_id: str,
    body: QuizSubmitRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    quiz = await _owned(store, quiz_id, user_id)
    _reject_completed(quiz, "This quiz has already been completed")

    answers = {**(quiz.get("answers") or {}), **body.answers}
    graded, score = scoring.grade_quiz(quiz["questions"], answers)
    ts = now_iso()
    quiz = await store.update("quizzes", where(id=quiz_id, userId=user_id), {
        "status": "completed",
        "answers": answers,
        "questions": graded,
        "score": score,
        "timeSpent": body.timeSpent,
        "completedAt": ts,
        "updatedAt": ts,
    })

    accuracy = await progress_service.record_quiz(store, user_id, quiz, score)
    extra = []
    if accuracy is not None and accuracy >= 90:
        extra.append("subject_expert")
    if body.timeSpent is not None and body.timeSpent < SPEED_DEMON_SECONDS:
        extra.append("speed_demon")
    perfect = score["total"] > 0 and score["percentage"] == 100
    await progress_service.update_stats(
        store,
        user_id,
        xp=scoring.quiz_xp(score["percentage"]),
        counters={"quizzesTaken": 1, "perfectQuizzes": 1 if perfect else 0},
        achievements=extra,
    )
    return envelope({"quiz": quiz, "score": score}, "Quiz submitted successfully")


@router.get("/{quiz_id}/results")
async def results(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    quiz = await _owned(store, quiz_id, user_id)
    if quiz.get("status") != "completed":
        raise ApiError(400, "Quiz not completed", ["Complete the quiz to see results"])
    return envelope(
        {"quiz": quiz, "score": quiz["score"], "questions": quiz["questions"]},
        "Results retrieved",
    )


@router.post("/{quiz_id}/retry", status_code=201)
async def retry(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    original = await _owned(store, quiz_id, user_id)
    ts = now_iso()
    copy = {
        **original,
        "id": new_id(),
        "status": "not_started",
        "score": None,
        "answers": {},
        "startedAt": None,
        "completedAt": None,
        "timeSpent": None,
        "questions": [
            {**{k: v for k, v in q.items() if k != "status"}, "userAnswer": None, "flagged": False}
            for q in original["questions"]
        ],
        "createdAt": ts,
        "updatedAt": ts,
    }
    await store.insert("quizzes", copy)
    return envelope({"quiz": copy}, "Quiz retry created")


@router.delete("/{quiz_id}")
async def delete_quiz(
    quiz_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    if not await store.remove("quizzes", where(id=quiz_id, userId=user_id)):
        raise not_found("Quiz")
    return envelope({}, "Quiz deleted")
