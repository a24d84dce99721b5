"""Exception handlers mapping failures onto the response envelope."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from server.dependencies import get_settings
from server.envelope import ApiError, envelope
from server.services.ai import AIGatewayError

logger = logging.getLogger("act_tutor")


def _error(status_code: int, message: str, errors=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(None, message, errors, success=False),
        headers=headers,
    )


def _field_name(loc) -> str:
    parts = [str(p) for p in loc if p not in ("body", "query", "path")]
    return ".".join(parts) or "body"


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return _error(exc.status_code, exc.message, exc.errors)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [f"{_field_name(e.get('loc', ()))}: {e.get('msg', 'invalid')}" for e in exc.errors()]
    return _error(400, "Validation error", errors)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if exc.status_code == 404:
        return _error(404, "Not found")
    if exc.status_code == 401:
        return _error(401, "Authentication required", ["Please log in to access this resource"])
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def ai_error_handler(request: Request, exc: AIGatewayError) -> JSONResponse:
    if exc.kind == "unknown_model":
        return _error(400, "Validation error", [exc.message])
    logger.warning("AI gateway failure on %s %s: kind=%s message=%s details=%s",
                   request.method, request.url.path, exc.kind, exc.message, exc.details)
    return _error(500, "AI service error", ["The AI service could not complete the request. Please try again."])


async def storage_error_handler(request: Request, exc: OSError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return _error(500, "Storage error", ["Could not save your changes. Please try again."])


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    settings = request.app.dependency_overrides.get(get_settings, get_settings)()
    if settings.production:
        return _error(500, "Internal server error")
    return _error(500, "Internal server error", [str(exc)])


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(AIGatewayError, ai_error_handler)
    app.add_exception_handler(OSError, storage_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
