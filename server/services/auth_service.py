"""Authentication service: password hashing and server-side login sessions."""

import hashlib
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError
from sqlalchemy.orm import Session as DBSession

from server.db.models import Session

logger = logging.getLogger("act_tutor.auth")

ph = PasswordHasher()


def hash_token(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


def hash_password(password: str) -> str:
    return ph.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        return False
    try:
        ph.verify(password_hash, password)
        return True
    except (VerificationError, InvalidHashError):
        return False


def create_session(db: DBSession, user_id: str, ttl_hours: int = 24 * 7) -> str:
    """Create session, return raw token (to set in cookie)."""
    token = secrets.token_urlsafe(32)
    expires = datetime.now(timezone.utc) + timedelta(hours=ttl_hours)
    sess = Session(
        user_id=user_id,
        token_hash=hash_token(token),
        expires_at=expires,
    )
    db.add(sess)
    db.flush()
    return token


def get_user_id_by_session(db: DBSession, token: str) -> Optional[str]:
    """Return the user id of a valid, unexpired session token, else None."""
    if not token:
        return None
    h = hash_token(token)
    sess = db.query(Session).filter(
        Session.token_hash == h,
        Session.expires_at > datetime.now(timezone.utc),
    ).first()
    if not sess:
        return None
    return sess.user_id


def logout_session(db: DBSession, token: str) -> bool:
    """Delete session by token. Returns True if found."""
    if not token:
        return False
    h = hash_token(token)
    deleted = db.query(Session).filter(Session.token_hash == h).delete()
    return deleted > 0


def delete_user_sessions(db: DBSession, user_id: str) -> int:
    """Delete every session of a user (account deletion)."""
    deleted = db.query(Session).filter(Session.user_id == user_id).delete()
    logger.info("Deleted %d session(s) for user %s", deleted, user_id)
    return deleted
