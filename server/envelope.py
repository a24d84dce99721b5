"""Uniform response envelope: {success, data, message, errors}."""

from typing import Any, Dict, List, Optional


class ApiError(Exception):
    """A request failure that maps directly onto an error envelope."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.errors = list(errors or [])


def envelope(data: Any = None, message: str = "", errors: Optional[List[str]] = None, success: bool = True) -> Dict[str, Any]:
    return {
        "success": success,
        "data": {} if data is None else data,
        "message": message,
        "errors": list(errors or []),
    }


def not_found(what: str) -> ApiError:
    return ApiError(404, f"{what} not found")


def bad_request(message: str, *errors: str) -> ApiError:
    return ApiError(400, message, list(errors) or [message])
