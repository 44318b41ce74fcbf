"""
Error taxonomy for LaunchLog.

Services raise these; the API layer turns them into JSON responses with the
matching status code. BackendUnavailableError never reaches a client - the
resilient store absorbs it and serves the call from the in-memory mirror.
"""

import logging
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class LaunchLogError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)


class ValidationError(LaunchLogError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request"

    def __init__(self, message: Optional[str] = None, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class DuplicateUserError(LaunchLogError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "User already exists"


class InvalidCredentialsError(LaunchLogError):
    # Same message for unknown email and wrong password - no account enumeration
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class MissingTokenError(LaunchLogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Access token required"


class InvalidTokenError(LaunchLogError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Invalid or expired token"


class ForbiddenError(LaunchLogError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Admin access required"


class NotFoundError(LaunchLogError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Not found"


class BackendUnavailableError(LaunchLogError):
    """Durable store could not be reached or refused a write."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    message = "Storage backend unavailable"


async def launchlog_error_handler(request: Request, exc: LaunchLogError) -> JSONResponse:
    content: Dict[str, Any] = {"error": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        content["errors"] = exc.errors
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Body shape problems are client errors, reported as 400 like other validation failures
    errors = [
        {"field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": errors})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    # Log the details, return nothing internal to the caller
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the LaunchLog error mapping to an app"""
    app.add_exception_handler(LaunchLogError, launchlog_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
