"""FastAPI application for the ACT Tutor API."""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

_project_root = str(Path(__file__).resolve().parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from server.__version__ import __version__
from server.db.session import init_db
from server.dependencies import get_settings
from server.errors import install_error_handlers
from server.ratelimit import limiter, rate_limit_exceeded_handler
from server.routes import ROUTERS
from server.services.records import now_iso

logger = logging.getLogger("act_tutor")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the data directory and the sessions table; nothing else is loaded up front."""
    settings = get_settings()
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    init_db(settings)
    logger.info("[%s] Startup: data_dir=%s env=%s", now_iso(), settings.data_dir, settings.environment)
    if not settings.ai_api_key:
        logger.warning("NANO_API_KEY is not set; AI features will fail until it is configured")
    yield
    logger.info("[%s] Shutdown: complete", now_iso())


app = FastAPI(title="ACT Tutor", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

install_error_handlers(app)

for router in ROUTERS:
    app.include_router(router)
