"""Database layer: SQLAlchemy session table and engine management."""

from server.db.models import Base, Session
from server.db.session import init_db

__all__ = [
    "Base",
    "Session",
    "init_db",
]
