"""Record constructors and small helpers shared by the route modules."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import uuid4

from server.catalog import DEFAULT_USER_SETTINGS

SUBJECTS = ("english", "math", "reading", "science")
ACTIVITY_LOG_LIMIT = 100


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def now_iso() -> str:
    return iso(utc_now())


def parse_iso(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed). None if unparseable."""
    if not isinstance(value, str) or not value:
        return None
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def new_id() -> str:
    return str(uuid4())


def default_stats() -> Dict[str, Any]:
    return {
        "xp": 0,
        "level": 1,
        "streak": 0,
        "lastStudyDate": None,
        "lessonsCompleted": 0,
        "quizzesTaken": 0,
        "perfectQuizzes": 0,
        "testsTaken": 0,
        "essaysGraded": 0,
        "flashcardsReviewed": 0,
        "totalStudyTime": 0,
        "achievements": [],
    }


def new_user(username: str, email: str, password_hash: str, name: Optional[str] = None) -> Dict[str, Any]:
    ts = now_iso()
    return {
        "id": new_id(),
        "username": username,
        "email": email,
        "password": password_hash,
        "name": name or username,
        "avatar": None,
        "bio": "",
        "createdAt": ts,
        "updatedAt": ts,
        "settings": dict(DEFAULT_USER_SETTINGS),
        "stats": default_stats(),
    }


def new_progress(user_id: str) -> Dict[str, Any]:
    subjects: Dict[str, Any] = {
        s: {"score": 0, "quizzesTaken": 0, "correctAnswers": 0, "totalQuestions": 0}
        for s in SUBJECTS
    }
    subjects["writing"] = {"essays": 0, "averageScore": 0}
    return {
        "id": new_id(),
        "userId": user_id,
        "subjects": subjects,
        "testScores": [],
        "activityLog": [],
        "createdAt": now_iso(),
    }


def public_user(user: Dict[str, Any]) -> Dict[str, Any]:
    """User record without the password hash."""
    return {k: v for k, v in user.items() if k != "password"}
