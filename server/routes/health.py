from fastapi import APIRouter

from server.envelope import envelope
from server.services.records import now_iso

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health():
    """Liveness check. No store, no database."""
    return envelope({"status": "healthy", "timestamp": now_iso()}, "Server is running")
