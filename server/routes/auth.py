"""Registration, login and profile routes."""

import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, Response
from sqlalchemy.orm import Session as DBSession

from docstore import DocumentStore, where
from server.auth import SESSION_COOKIE, get_current_user_id, get_db_session
from server.config import Settings
from server.dependencies import get_settings, get_store
from server.envelope import ApiError, envelope, not_found
from server.schemas import LoginRequest, PasswordChangeRequest, ProfileUpdateRequest, RegisterRequest
from server.services import auth_service
from server.services.progress_service import merged_stats, touch_streak
from server.services.records import new_progress, new_user, now_iso, public_user, utc_now

logger = logging.getLogger("act_tutor.auth")

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _set_session_cookie(response: Response, token: str, ttl_hours: int, settings: Settings) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        max_age=ttl_hours * 60 * 60,
        httponly=True,
        secure=settings.production,
        samesite="lax",
    )


@router.post("/register", status_code=201)
async def register(
    body: RegisterRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_store),
    db: DBSession = Depends(get_db_session),
):
    email = body.email.strip()
    username = body.username.strip()
    existing = await store.find_one("users", lambda u: u.get("email") == email or u.get("username") == username)
    if existing:
        raise ApiError(400, "User already exists", ["A user with this email or username already exists"])

    user = new_user(username, email, auth_service.hash_password(body.password), body.name)
    await store.insert("users", user)
    await store.insert("progress", new_progress(user["id"]))

    token = auth_service.create_session(db, user["id"], settings.session_ttl_hours)
    db.commit()
    _set_session_cookie(response, token, settings.session_ttl_hours, settings)
    logger.info("Registered user %s", user["id"])
    return envelope({"user": public_user(user)}, "Registration successful")


@router.post("/login")
async def login(
    body: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_settings),
    store: DocumentStore = Depends(get_store),
    db: DBSession = Depends(get_db_session),
):
    login_name = body.email.strip()
    user = await store.find_one("users", lambda u: u.get("email") == login_name or u.get("username") == login_name)
    if not user or not auth_service.verify_password(body.password, user.get("password")):
        raise ApiError(401, "Invalid credentials", ["Invalid email or password"])

    stats = merged_stats(user)
    if touch_streak(stats, utc_now()):
        user = await store.update("users", where(id=user["id"]), {"stats": stats}) or user

    ttl = settings.remember_ttl_hours if body.remember else settings.session_ttl_hours
    token = auth_service.create_session(db, user["id"], ttl)
    db.commit()
    _set_session_cookie(response, token, ttl, settings)
    return envelope({"user": public_user(user)}, "Login successful")


@router.post("/logout")
def logout(
    response: Response,
    act_session: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    db: DBSession = Depends(get_db_session),
):
    if act_session:
        auth_service.logout_session(db, act_session)
        db.commit()
    response.delete_cookie(SESSION_COOKIE)
    return envelope({}, "Logout successful")


@router.get("/me")
async def me(
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    user = await store.find_one("users", where(id=user_id))
    if user is None:
        raise ApiError(401, "User not found", ["User session is invalid"])
    return envelope({"user": public_user(user)}, "User retrieved")


@router.put("/profile")
async def update_profile(
    body: ProfileUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    changes = {"updatedAt": now_iso()}
    if body.name:
        changes["name"] = body.name
    if body.bio is not None:
        changes["bio"] = body.bio
    if body.email:
        email = body.email.strip()
        taken = await store.find_one("users", lambda u: u.get("email") == email and u.get("id") != user_id)
        if taken:
            raise ApiError(400, "Email already in use", ["This email is already associated with another account"])
        changes["email"] = email
    user = await store.update("users", where(id=user_id), changes)
    if user is None:
        raise not_found("User")
    return envelope({"user": public_user(user)}, "Profile updated")


@router.put("/password")
async def change_password(
    body: PasswordChangeRequest,
    user_id: str = Depends(get_current_user_id),
    store: DocumentStore = Depends(get_store),
):
    user = await store.find_one("users", where(id=user_id))
    if user is None:
        raise not_found("User")
    if not auth_service.verify_password(body.currentPassword, user.get("password")):
        raise ApiError(400, "Invalid password", ["Current password is incorrect"])
    await store.update("users", where(id=user_id), {
        "password": auth_service.hash_password(body.newPassword),
        "updatedAt": now_iso(),
    })
    return envelope({}, "Password changed successfully")
