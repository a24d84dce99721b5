"""Auth dependency: extract session from cookie, resolve the caller's user id."""

from typing import Optional

from fastapi import Cookie, Depends
from sqlalchemy.orm import Session as DBSession

from server.config import Settings
from server.db.session import get_session_factory
from server.dependencies import get_settings
from server.envelope import ApiError
from server.services import auth_service

SESSION_COOKIE = "act_session"


def get_db_session(settings: Settings = Depends(get_settings)):
    factory = get_session_factory(settings)
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_current_user_id_optional(
    act_session: Optional[str] = Cookie(None, alias=SESSION_COOKIE),
    db: DBSession = Depends(get_db_session),
) -> Optional[str]:
    """Return the caller's user id or None if not authenticated."""
    if not act_session:
        return None
    return auth_service.get_user_id_by_session(db, act_session)


def get_current_user_id(
    user_id: Optional[str] = Depends(get_current_user_id_optional),
) -> str:
    """Require an authenticated caller. Raises 401 if not logged in."""
    if user_id is None:
        raise ApiError(401, "Authentication required", ["Please log in to access this resource"])
    return user_id
