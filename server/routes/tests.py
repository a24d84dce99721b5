"""Practice tests: multi-section ACT simulations scored on the 1-36 scale."""

import copy
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from docstore import DocumentStore, SortSpec, where
from server.auth import get_current_user_id
from server.catalog import MAX_GENERATED_QUESTIONS, SECTION_CONFIG, SECTION_ORDER
from server.dependencies import get_gateway, get_store
from server.envelope import ApiError, bad_request, envelope, not_found
from server.schemas import PracticeTestGenerateRequest, SectionAnswersRequest, SectionCompleteRequest
from server.services import progress_service, scoring
from server.services.ai import ChatGateway
from server.services.ai.generators import generate_test_section
from server.services.records import new_id, now_iso

router = APIRouter(prefix="/api/tests", tags=["tests"])


async def _owned(store: DocumentStore, test_id: str, user_id: str) -> Dict[str, Any]:
    test = await store.find_one("tests", where(id=test_id, userId=user_id))
    if test is None:
        raise not_found("Test")
    return test


def _section(test: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = (test.get("sections") or {}).get(name)
    if section is None:
        raise ApiError(400, "Invalid section", [f"This test has no {name} section"])
    return section


def _assign_question_ids(generated: Dict[str, Any]) -> Dict[str, Any]:
    passages = []
    for passage in generated.get("passages") or []:
        if not isinstance(passage, dict):
            continue
        questions = [
            {**q, "id": new_id()}
            for q in passage.get("questions") or []
            if isinstance(q, dict)
        ]
        passages.append({**passage, "questions": questions})
    return {**generated, "passages": passages}


@router.get("")
async def list_tests(
    status: Optional[str] = None,
    page: int = Query(1),
    limit: int = Query(12, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    f = where(userId=user_id)
    if status:
        f = f.eq("status", status)
    result = await store.paginate("tests", f, page, limit, SortSpec("createdAt", "desc"))
    return envelope(result.to_dict(), "Tests retrieved")


@router.get("/sections")
def sections():
    return envelope({"sections": SECTION_CONFIG}, "Sections retrieved")


@router.get("/{test_id}")
async def get_test(
    test_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return envelope({"test": await _owned(store, test_id, user_id)}, "Test retrieved")


@router.post("/generate", status_code=201)
async def generate(
    body: PracticeTestGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    order = list(SECTION_ORDER) if body.fullTest else scoring.ordered_sections(body.sections or [])
    if not order:
        raise bad_request("Validation error", "At least one section is required")
    model = body.model or gateway.default_model

    generated_sections: Dict[str, Any] = {}
    for name in order:
        config = SECTION_CONFIG[name]
        count = min(config["questions"], MAX_GENERATED_QUESTIONS)
        try:
            generated = await generate_test_section(gateway, name, count, model)
        except ValueError as e:
            raise bad_request("Invalid section", str(e))
        generated_sections[name] = {
            **config,
            **_assign_question_ids(generated),
            "status": "not_started",
            "answers": {},
            "startedAt": None,
            "completedAt": None,
            "timeSpent": None,
            "score": None,
        }

    ts = now_iso()
    title = (
        "Full ACT Practice Test"
        if body.fullTest
        else "ACT " + " + ".join(SECTION_CONFIG[s]["name"] for s in order)
    )
    test = {
        "id": new_id(),
        "userId": user_id,
        "title": title,
        "type": "full" if body.fullTest else "section",
        "sections": generated_sections,
        "sectionOrder": order,
        "currentSection": order[0],
        "totalTime": sum(SECTION_CONFIG[s]["time"] for s in order),
        "status": "not_started",
        "scores": None,
        "compositeScore": None,
        "percentile": None,
        "startedAt": None,
        "completedAt": None,
        "model": model,
        "createdAt": ts,
        "updatedAt": ts,
    }
    await store.insert("tests", test)
    return envelope({"test": test}, "Practice test generated successfully")


@router.post("/{test_id}/start")
async def start(
    test_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    test = await _owned(store, test_id, user_id)
    if test.get("status") == "completed":
        raise ApiError(400, "Test already completed", ["This test has already been completed"])
    ts = now_iso()
    sections = copy.deepcopy(test["sections"])
    first = sections[test["sectionOrder"][0]]
    if first.get("status") == "not_started":
        first["status"] = "in_progress"
        first["startedAt"] = ts
    test = await store.update("tests", where(id=test_id, userId=user_id), {
        "status": "in_progress",
        "startedAt": test.get("startedAt") or ts,
        "sections": sections,
        "updatedAt": ts,
    })
    return envelope({"test": test}, "Test started")


@router.put("/{test_id}/section/{section}/answers")
async def save_section_answers(
    test_id: str,
    section: str,
    body: SectionAnswersRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    test = await _owned(store, test_id, user_id)
    _section(test, section)
    sections = copy.deepcopy(test["sections"])
    sections[section]["answers"] = {**(sections[section].get("answers") or {}), **body.answers}
    await store.update("tests", where(id=test_id, userId=user_id), {
        "sections": sections,
        "updatedAt": now_iso(),
    })
    return envelope({"section": sections[section]}, "Answers saved")


@router.post("/{test_id}/section/{section}/complete")
async def complete_section(
    test_id: str,
    section: str,
    body: SectionCompleteRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    test = await _owned(store, test_id, user_id)
    _section(test, section)
    ts = now_iso()
    sections = copy.deepcopy(test["sections"])
    current = sections[section]
    answers = {**(current.get("answers") or {}), **body.answers}
    current.update({
        "answers": answers,
        "status": "completed",
        "completedAt": ts,
        "timeSpent": body.timeSpent,
        "score": scoring.score_section(current, answers),
    })

    order = test["sectionOrder"]
    next_section = None
    current_section = test.get("currentSection")
    index = order.index(section) if section in order else len(order) - 1
    if index < len(order) - 1:
        next_section = order[index + 1]
        current_section = next_section
        if sections[next_section].get("status") == "not_started":
            sections[next_section]["status"] = "in_progress"
            sections[next_section]["startedAt"] = ts

    test = await store.update("tests", where(id=test_id, userId=user_id), {
        "sections": sections,
        "currentSection": current_section,
        "updatedAt": ts,
    })
    return envelope(
        {"test": test, "sectionScore": current["score"], "nextSection": next_section},
        "Section completed",
    )


@router.post("/{test_id}/submit")
async def submit(
    test_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    test = await _owned(store, test_id, user_id)
    if test.get("status") == "completed":
        raise ApiError(400, "Test already completed", ["This test has already been submitted"])

    section_scores, composite = scoring.composite_score(test["sectionOrder"], test["sections"])
    pct = scoring.percentile(composite)
    ts = now_iso()
    test = await store.update("tests", where(id=test_id, userId=user_id), {
        "status": "completed",
        "scores": section_scores,
        "compositeScore": composite,
        "percentile": pct,
        "completedAt": ts,
        "updatedAt": ts,
    })

    await progress_service.update_stats(store, user_id, xp=200, counters={"testsTaken": 1})
    await progress_service.record_test(store, user_id, test_id, composite, section_scores)
    return envelope(
        {"test": test, "compositeScore": composite, "sectionScores": section_scores, "percentile": pct},
        "Test submitted successfully",
    )


@router.get("/{test_id}/results")
async def results(
    test_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    test = await _owned(store, test_id, user_id)
    if test.get("status") != "completed":
        raise ApiError(400, "Test not completed", ["Complete the test to see results"])
    return envelope(
        {
            "test": test,
            "compositeScore": test["compositeScore"],
            "sectionScores": test["scores"],
            "percentile": test["percentile"],
        },
        "Results retrieved",
    )


@router.delete("/{test_id}")
async def delete_test(
    test_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    if not await store.remove("tests", where(id=test_id, userId=user_id)):
        raise not_found("Test")
    return envelope({}, "Test deleted")
