"""AI-generated study plans, today's tasks and custom tasks."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from docstore import DocumentStore, where
from server.auth import get_current_user_id
from server.dependencies import get_gateway, get_store
from server.envelope import envelope, not_found
from server.schemas import (
    CompleteTaskRequest,
    CustomTaskRequest,
    CustomTaskUpdateRequest,
    PlanGenerateRequest,
    PlanUpdateRequest,
)
from server.services import plan_service, progress_service
from server.services.ai import ChatGateway
from server.services.ai.generators import generate_study_plan
from server.services.records import new_id, now_iso, utc_now

router = APIRouter(prefix="/api/study-plans", tags=["study-plans"])

TASK_XP = 10


async def _owned(store: DocumentStore, plan_id: str, user_id: str) -> Dict[str, Any]:
    plan = await store.find_one("study_plans", where(id=plan_id, userId=user_id))
    if plan is None:
        raise not_found("Study plan")
    return plan


def _task_index(plan: Dict[str, Any], task_id: str) -> int:
    for i, task in enumerate(plan.get("customTasks") or []):
        if task.get("id") == task_id:
            return i
    raise not_found("Task")


async def _save_tasks(store: DocumentStore, plan_id: str, user_id: str, tasks) -> None:
    await store.update("study_plans", where(id=plan_id, userId=user_id), {
        "customTasks": tasks,
        "updatedAt": now_iso(),
    })


@router.get("")
async def list_plans(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    plans = await store.find_many("study_plans", where(userId=user_id))
    plans.sort(key=lambda p: p.get("createdAt") or "", reverse=True)
    return envelope({"plans": plans}, "Study plans retrieved")


@router.get("/today")
async def today(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    plan = await store.find_one("study_plans", where(userId=user_id, active=True))
    if plan is None:
        return envelope({"tasks": [], "hasPlan": False}, "No active study plan")
    return envelope(plan_service.todays_tasks(plan, utc_now()), "Today's tasks retrieved")


@router.get("/{plan_id}")
async def get_plan(
    plan_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    return envelope({"plan": await _owned(store, plan_id, user_id)}, "Study plan retrieved")


@router.post("/generate", status_code=201)
async def generate(
    body: PlanGenerateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    gateway: ChatGateway = Depends(get_gateway),
):
    params = body.model_dump(exclude={"model"})
    for key, default in plan_service.DEFAULT_PLAN_PARAMS.items():
        if not params.get(key):
            params[key] = default
    model = body.model or gateway.default_model
    generated = await generate_study_plan(gateway, params, model)

    ts = now_iso()
    plan = {
        "id": new_id(),
        "userId": user_id,
        "title": f"Study Plan for {body.targetScore} Target",
        **params,
        "generatedPlan": generated,
        "completedTasks": [],
        "customTasks": [],
        "active": True,
        "model": model,
        "createdAt": ts,
        "updatedAt": ts,
    }
    await store.insert("study_plans", plan)
    return envelope({"plan": plan}, "Study plan generated successfully")


@router.post("/{plan_id}/complete-task")
async def complete_task(
    plan_id: str,
    body: CompleteTaskRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    plan = await _owned(store, plan_id, user_id)
    tid = plan_service.task_id(body.week, body.day, body.taskIndex)
    completed = list(plan.get("completedTasks") or [])
    newly_completed = tid not in completed
    if newly_completed:
        completed.append(tid)
    await store.update("study_plans", where(id=plan_id, userId=user_id), {
        "completedTasks": completed,
        "updatedAt": now_iso(),
    })
    if newly_completed:
        await progress_service.update_stats(store, user_id, xp=TASK_XP)
    return envelope({"completedTasks": completed}, "Task completed")


@router.post("/{plan_id}/tasks", status_code=201)
async def add_task(
    plan_id: str,
    body: CustomTaskRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    plan = await _owned(store, plan_id, user_id)
    task = {
        "id": new_id(),
        **body.model_dump(),
        "completed": False,
        "createdAt": now_iso(),
    }
    await _save_tasks(store, plan_id, user_id, list(plan.get("customTasks") or []) + [task])
    return envelope({"task": task}, "Task added")


@router.put("/{plan_id}/tasks/{task_id}")
async def update_task(
    plan_id: str,
    task_id: str,
    body: CustomTaskUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    plan = await _owned(store, plan_id, user_id)
    index = _task_index(plan, task_id)
    tasks = list(plan["customTasks"])
    tasks[index] = {**tasks[index], **body.model_dump(exclude_unset=True)}
    await _save_tasks(store, plan_id, user_id, tasks)
    return envelope({"task": tasks[index]}, "Task updated")


@router.delete("/{plan_id}/tasks/{task_id}")
async def delete_task(
    plan_id: str,
    task_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    plan = await _owned(store, plan_id, user_id)
    tasks = [t for t in plan.get("customTasks") or [] if t.get("id") != task_id]
    await _save_tasks(store, plan_id, user_id, tasks)
    return envelope({}, "Task deleted")


@router.put("/{plan_id}")
async def update_plan(
    plan_id: str,
    body: PlanUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    changes = {k: v for k, v in body.model_dump(exclude_unset=True).items() if v is not None}
    changes["updatedAt"] = now_iso()
    plan = await store.update("study_plans", where(id=plan_id, userId=user_id), changes)
    if plan is None:
        raise not_found("Study plan")
    return envelope({"plan": plan}, "Study plan updated")


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: str,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    if not await store.remove("study_plans", where(id=plan_id, userId=user_id)):
        raise not_found("Study plan")
    return envelope({}, "Study plan deleted")
