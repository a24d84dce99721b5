"""User settings and account deletion."""

import logging

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session as DBSession

from docstore import DocumentStore, where
from server.auth import SESSION_COOKIE, get_current_user_id, get_db_session
from server.catalog import DEFAULT_USER_SETTINGS, TIMEZONES, USER_COLLECTIONS
from server.dependencies import get_store
from server.envelope import ApiError, envelope, not_found
from server.schemas import DeleteAccountRequest, SettingsUpdateRequest
from server.services import auth_service
from server.services.records import now_iso

logger = logging.getLogger("act_tutor.auth")

router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("")
async def get_user_settings(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    user = await store.find_one("users", where(id=user_id))
    if user is None:
        raise not_found("User")
    return envelope({"settings": user.get("settings") or dict(DEFAULT_USER_SETTINGS)}, "Settings retrieved")


@router.put("")
async def update_user_settings(
    body: SettingsUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    user = await store.find_one("users", where(id=user_id))
    if user is None:
        raise not_found("User")
    settings = {**(user.get("settings") or DEFAULT_USER_SETTINGS), **body.model_dump(exclude_unset=True)}
    await store.update("users", where(id=user_id), {"settings": settings, "updatedAt": now_iso()})
    return envelope({"settings": settings}, "Settings updated")


@router.get("/timezones")
def timezones():
    return envelope({"timezones": TIMEZONES}, "Timezones retrieved")


@router.delete("/account")
async def delete_account(
    body: DeleteAccountRequest,
    response: Response,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
    db: DBSession = Depends(get_db_session),
):
    user = await store.find_one("users", where(id=user_id))
    if user is None:
        raise not_found("User")
    if not auth_service.verify_password(body.password, user.get("password")):
        raise ApiError(400, "Invalid password", ["Password is incorrect"])

    await store.remove("users", where(id=user_id))
    for name in USER_COLLECTIONS:
        await store.remove_many(name, where(userId=user_id))
    auth_service.delete_user_sessions(db, user_id)
    db.commit()
    response.delete_cookie(SESSION_COOKIE)
    logger.info("Deleted account %s", user_id)
    return envelope({}, "Account deleted successfully")
