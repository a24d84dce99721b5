"""ACT Writing essays: drafting, AI grading and the prompt library."""

from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends, Query

from docstore import DocumentStore, SortSpec, where
from server.auth import get_current_user_id
from server.catalog import ESSAY_PROMPTS
from server.dependencies import get_gateway, get_store
from server.envelope import ApiError, envelope, not_found
from server.schemas import (
    EssayCreateRequest,
    EssayPromptGenerateRequest,
    EssaySubmitRequest,
    EssayUpdateRequest,
    ModelChoice,
)
from server.services import progress_service
from server.services.ai import AIGatewayError, ChatGateway
from server.services.ai.generators import generate_essay_prompt, grade_essay
from server.services.records import new_id, now_iso
from server.services.scoring import word_count

router = APIRouter(prefix="/api/essays", tags=["essays"])

MIN_WORDS = 50
DEFAULT_TIME_LIMIT = 40


def prompt_text(prompt: Union[Dict[str, Any], str, None]) -> str:
    """Flatten a structured prompt (topic, introduction, perspectives, instructions) into text."""
    if not prompt:
        return ""
    if isinstance(prompt, str):
        return prompt
    parts = [prompt.get("topic"), prompt.get("introduction")]
    for p in prompt.get("perspectives") or []:
        if isinstance(p, dict):
            parts.append(f"{p.get('name', 'Perspective')}: {p.get('description', '')}")
    parts.append(prompt.get("instructions"))
    return "\n\n".join(str(p) for p in parts if p)


def _overall(grading: Dict[str, Any]) -> float:
    overall = (grading.get("scores") or {}).get("overall")
    if isinstance(overall, bool) or not isinstance(overall, (int, float)):
        raise AIGatewayError(
            kind="parse_error",
            message="Essay grading has no numeric overall score",
            details={"scores": grading.get("scores")},
        )
    return float(overall)


async def _owned(store: DocumentStore, essay_id: str, user_id: str) -> Dict[str, Any]:
    essay = await store.find_one("essays", where(id=essay_id, userId=user_id))
    if essay is None:
        raise not_found("Essay")
    return essay


@router.get("")
async def list_essays(
    graded: Optional[bool] = None,
    page: int = Query(1),
    limit: int = Query(12, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    def pred(e):
        if e.get("userId") != user_id:
            return False
        return graded is None or bool(e.get("grading")) == graded

    result = await store.paginate("essays", pred, page, limit, SortSpec("createdAt", "desc"))
    return envelope(result.to_dict(), "Essays retrieved")


@router.get("/prompts")
def prompts():
    return envelope({"prompts": ESSAY_PROMPTS}, "Prompts retrieved")


@router.post("/prompts/generate")
async def generate_prompt(
    body: EssayPromptGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    gateway: ChatGateway = Depends(get_gateway),
):
    prompt = await generate_essay_prompt(gateway, body.category, body.model or gateway.default_model)
    return envelope({"prompt": prompt}, "Prompt generated")


@router.get("/{essay_id}")
async def get_essay(
    essay_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return envelope({"essay": await _owned(store, essay_id, user_id)}, "Essay retrieved")


@router.post("", status_code=201)
async def create_essay(
    body: EssayCreateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    prompt = body.prompt or body.customPrompt
    if not prompt and body.promptId:
        prompt = next((p for p in ESSAY_PROMPTS if p["id"] == body.promptId), None)
    ts = now_iso()
    essay = {
        "id": new_id(),
        "userId": user_id,
        "prompt": prompt,
        "promptId": body.promptId,
        "content": "",
        "wordCount": 0,
        "timed": body.timed,
        "timeLimit": (body.timeLimit or DEFAULT_TIME_LIMIT) if body.timed else None,
        "timeSpent": 0,
        "status": "draft",
        "grading": None,
        "createdAt": ts,
        "updatedAt": ts,
    }
    await store.insert("essays", essay)
    return envelope({"essay": essay}, "Essay created")


@router.put("/{essay_id}")
async def save_essay(
    essay_id: str,
    body: EssayUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    await _owned(store, essay_id, user_id)
    changes: Dict[str, Any] = {"updatedAt": now_iso()}
    if body.content is not None:
        changes["content"] = body.content
        changes["wordCount"] = word_count(body.content)
    if body.timeSpent is not None:
        changes["timeSpent"] = body.timeSpent
    essay = await store.update("essays", where(id=essay_id, userId=user_id), changes)
    return envelope({"essay": essay}, "Essay saved")


@router.post("/{essay_id}/submit")
async def submit_essay(
    essay_id: str,
    body: EssaySubmitRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    essay = await _owned(store, essay_id, user_id)
    content = body.content if body.content else essay.get("content") or ""
    words = word_count(content)
    if words < MIN_WORDS:
        raise ApiError(400, "Essay too short", [f"Please write at least {MIN_WORDS} words before submitting"])

    submitted_at = now_iso()
    grading = await grade_essay(gateway, prompt_text(essay.get("prompt")), content, body.model or gateway.default_model)
    overall = _overall(grading)
    ts = now_iso()
    changes = {
        "content": content,
        "wordCount": words,
        "status": "graded",
        "grading": grading,
        "submittedAt": submitted_at,
        "gradedAt": ts,
        "updatedAt": ts,
    }
    if body.timeSpent:
        changes["timeSpent"] = body.timeSpent
    essay = await store.update("essays", where(id=essay_id, userId=user_id), changes)

    await progress_service.record_essay(store, user_id, essay_id, overall)
    await progress_service.update_stats(store, user_id, counters={"essaysGraded": 1})
    return envelope({"essay": essay, "grading": grading}, "Essay submitted and graded")


@router.post("/{essay_id}/regrade")
async def regrade_essay(
    essay_id: str,
    body: Optional[ModelChoice] = None,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    essay = await _owned(store, essay_id, user_id)
    model = (body.model if body else None) or gateway.default_model
    grading = await grade_essay(gateway, prompt_text(essay.get("prompt")), essay.get("content") or "", model)
    _overall(grading)
    ts = now_iso()
    essay = await store.update("essays", where(id=essay_id, userId=user_id), {
        "grading": grading,
        "gradedAt": ts,
        "updatedAt": ts,
    })
    return envelope({"essay": essay, "grading": grading}, "Essay re-graded")


@router.delete("/{essay_id}")
async def delete_essay(
    essay_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    if not await store.remove("essays", where(id=essay_id, userId=user_id)):
        raise not_found("Essay")
    return envelope({}, "Essay deleted")
