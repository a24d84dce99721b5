"""Process-wide request rate limiting for /api routes (slowapi)."""

from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from server.dependencies import get_settings
from server.envelope import envelope

_settings = get_settings()

limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[_settings.rate_limit],
    enabled=_settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    # Called synchronously from SlowAPIMiddleware.
    return JSONResponse(
        status_code=429,
        content=envelope(None, "Too many requests, please try again later.", success=False),
    )
