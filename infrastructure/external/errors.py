"""
Error types raised by the backend API client.

Every failure talking to the REST backend surfaces as one `ApiError` subclass
carrying a single normalized, user-displayable message.
"""

from typing import Any, Dict, Optional


DEFAULT_STATUS_MESSAGES = {
    400: "Invalid request",
    401: "Unauthorized - please log in again",
    403: "You do not have permission to perform this action",
    404: "Resource not found",
    409: "Conflict with the current state of the resource",
    422: "Validation failed",
    429: "Too many requests, please try again later",
    500: "Internal server error",
    502: "Bad gateway",
    503: "Service unavailable",
    504: "Gateway timeout",
}


class ApiError(Exception):
    """Base class for backend API failures"""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 payload: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}

    def __str__(self) -> str:
        return self.message


class NetworkError(ApiError):
    """The request could not complete: connection refused, DNS failure, timeout"""


class UnauthorizedError(ApiError):
    """401 - missing, expired or rejected bearer token"""


class ForbiddenError(ApiError):
    """403"""


class NotFoundError(ApiError):
    """404"""


class ValidationError(ApiError):
    """400 / 422"""


class ServerError(ApiError):
    """5xx"""


def normalize_error_message(status_code: Optional[int], payload: Any = None,
                            fallback: str = "An unexpected error occurred") -> str:
    """
    Pick the message to show the user for a failed response

    The server's own `message` (or `error`) field wins; otherwise a default
    for the status code is used.
    """
    if isinstance(payload, dict):
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()

    if status_code is not None:
        if status_code in DEFAULT_STATUS_MESSAGES:
            return DEFAULT_STATUS_MESSAGES[status_code]
        if status_code >= 500:
            return DEFAULT_STATUS_MESSAGES[500]
        return f"Request failed with status {status_code}"

    return fallback


def error_for_status(status_code: int, payload: Any = None) -> ApiError:
    """Build the ApiError subclass matching an HTTP status"""
    message = normalize_error_message(status_code, payload)
    body = payload if isinstance(payload, dict) else None

    if status_code == 401:
        return UnauthorizedError(message, status_code, body)
    if status_code == 403:
        return ForbiddenError(message, status_code, body)
    if status_code == 404:
        return NotFoundError(message, status_code, body)
    if status_code in (400, 422):
        return ValidationError(message, status_code, body)
    if status_code >= 500:
        return ServerError(message, status_code, body)
    return ApiError(message, status_code, body)


def is_authorization_error(error: BaseException) -> bool:
    """True when the error means the session itself was rejected"""
    if isinstance(error, UnauthorizedError):
        return True
    if getattr(error, "status_code", None) == 401:
        return True
    message = str(error).lower()
    return "401" in message or "unauthorized" in message
