"""Configuration for the ACT Tutor API server."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

DEFAULT_AI_API_URL = "https://nano-gpt.com/api/v1/chat/completions"


@dataclass
class Settings:
    """
    Paths, credentials and limits the server needs.

    Defaults resolve relative to the project root.
    Every field is overridable at construction for testing; fields left as
    None are filled from the environment.
    """
    data_dir: Optional[Path] = None
    database_url: Optional[str] = None
    environment: Optional[str] = None
    cors_origins: Optional[List[str]] = None

    # AI gateway (OpenAI-compatible chat completions endpoint)
    ai_api_key: Optional[str] = None
    ai_api_url: Optional[str] = None
    ai_timeout_s: float = 300.0
    ai_default_model: str = "deepseek-v3"

    # Request rate limiting on /api routes
    rate_limit: str = "100/15minutes"
    rate_limit_enabled: bool = True

    session_ttl_hours: int = 24 * 7
    remember_ttl_hours: int = 24 * 30

    def __post_init__(self):
        project_root = Path(__file__).resolve().parent.parent

        if self.data_dir is None:
            env_dir = os.environ.get("DATA_DIR")
            self.data_dir = Path(env_dir) if env_dir else project_root / "data"
        self.data_dir = Path(self.data_dir)

        if self.database_url is None:
            self.database_url = os.environ.get("DATABASE_URL", "sqlite:///./act_tutor.db")
        if self.environment is None:
            self.environment = os.environ.get("APP_ENV", "development")
        if self.cors_origins is None:
            raw = os.environ.get("CORS_ORIGINS", "http://localhost:3000")
            self.cors_origins = [o.strip() for o in raw.split(",") if o.strip()]

        if self.ai_api_key is None:
            self.ai_api_key = os.environ.get("NANO_API_KEY") or None
        if self.ai_api_url is None:
            self.ai_api_url = os.environ.get("NANO_API_URL", DEFAULT_AI_API_URL)
        try:
            if v := os.environ.get("AI_TIMEOUT_S"):
                self.ai_timeout_s = float(v)
        except ValueError:
            pass
        if os.environ.get("AI_DEFAULT_MODEL"):
            self.ai_default_model = os.environ["AI_DEFAULT_MODEL"]

        if os.environ.get("RATE_LIMIT"):
            self.rate_limit = os.environ["RATE_LIMIT"]
        if os.environ.get("RATE_LIMIT_ENABLED", "").lower() in ("0", "false", "no"):
            self.rate_limit_enabled = False

    @property
    def production(self) -> bool:
        return self.environment == "production"
