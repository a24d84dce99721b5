"""FastAPI dependency factories."""

import sys
from functools import lru_cache
from pathlib import Path

_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import Depends

from docstore import DocumentStore
from server.config import Settings
from server.services.ai import AIGateway, ChatGateway

# Process-wide store cache (keyed by settings identity for override support).
# One store per data directory keeps a single lock registry per process.
_store: DocumentStore | None = None
_store_settings_id: object | None = None


@lru_cache()
def get_settings() -> Settings:
    """Singleton Settings -- override via app.dependency_overrides in tests."""
    return Settings()


def get_store(settings: Settings = Depends(get_settings)) -> DocumentStore:
    """Process-wide DocumentStore for the configured data directory."""
    global _store, _store_settings_id
    # Recreate if settings were overridden (e.g. in tests)
    if _store is None or _store_settings_id is not settings:
        _store = DocumentStore(settings.data_dir)
        _store_settings_id = settings
    return _store


def get_gateway(settings: Settings = Depends(get_settings)) -> ChatGateway:
    """AI gateway built from settings; replace with FakeGateway in tests."""
    return AIGateway(
        settings.ai_api_key,
        settings.ai_api_url,
        timeout_s=settings.ai_timeout_s,
        default_model=settings.ai_default_model,
    )


def reset_store() -> None:
    """Drop the cached store (for tests)."""
    global _store, _store_settings_id
    _store = None
    _store_settings_id = None
