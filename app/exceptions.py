# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized exception handling for the API.
#
# Services raise the typed exceptions below; the handlers at the bottom turn
# them into the uniform error envelope:
#   {"success": false, "error": "<CODE>", "message": "...", "suggestion": ...}
#
# Errors should tell HOW to fix, not just WHAT failed - but never leak
# internals (stack traces, secrets) to the caller.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from lib.document_store import DuplicateKeyError, StorageError, StorageTimeoutError

logger = logging.getLogger(__name__)


class CollabException(Exception):
    """
    Base exception for the Collab Platform API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "COLLAB_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to the error envelope."""
        result: dict[str, Any] = {
            "success": False,
            "error": self.code,
            "message": self.message,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Client Errors
# =============================================================================

class InputValidationError(CollabException):
    """Malformed or out-of-enum input. Always client-caused, never retried."""

    def __init__(self, message: str, details: dict[str, Any] | None = None, suggestion: str | None = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


def invalid_choice(field: str, value: Any, allowed: list[str]) -> InputValidationError:
    """Validation error for a value outside its allowed set."""
    return InputValidationError(
        message=f"Invalid {field}. Must be one of: {', '.join(allowed)}",
        details={"field": field, "value": value, "allowed": allowed},
    )


class UnauthenticatedError(CollabException):
    """No usable identity was presented."""

    def __init__(self, message: str = "Authentication required", code: str = "UNAUTHENTICATED"):
        super().__init__(
            message=message,
            code=code,
            status_code=401,
            suggestion="Send 'Authorization: Bearer <token>' or sign in as admin",
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidAdminCodeError(UnauthenticatedError):
    """Admin code exchange failed."""

    def __init__(self):
        super().__init__(message="Invalid admin code", code="INVALID_ADMIN_CODE")


class ForbiddenError(CollabException):
    """Identity present but its role is insufficient."""

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message=message, code="FORBIDDEN", status_code=403)


class TooManyAttemptsError(CollabException):
    """Admin code exchange is locked out for this caller."""

    def __init__(self, retry_after_seconds: int):
        retry_after_seconds = max(int(retry_after_seconds), 1)
        super().__init__(
            message="Too many attempts. Please try again later.",
            code="TOO_MANY_ATTEMPTS",
            status_code=429,
            suggestion=f"Wait {retry_after_seconds} seconds before trying again",
            details={"retry_after_seconds": retry_after_seconds},
            headers={"Retry-After": str(retry_after_seconds)},
        )


# =============================================================================
# Not Found
# =============================================================================

class NotFoundError(CollabException):
    """Entity absent, or the caller may not see it."""

    def __init__(self, message: str, code: str = "NOT_FOUND", details: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, status_code=404, details=details)


class ProjectNotFoundError(NotFoundError):
    def __init__(self, project_id: str):
        super().__init__(
            message="Project not found",
            code="PROJECT_NOT_FOUND",
            details={"project_id": project_id},
        )


class ApplicationNotFoundError(NotFoundError):
    def __init__(self, application_id: str):
        super().__init__(
            message="Application not found",
            code="APPLICATION_NOT_FOUND",
            details={"application_id": application_id},
        )


class TaskNotFoundError(NotFoundError):
    """
    Raised both when a task does not exist and when it belongs to someone
    else, so the two cases look identical to the caller.
    """

    def __init__(self, task_id: str):
        super().__init__(
            message="Task not found or you do not have permission",
            code="TASK_NOT_FOUND",
            details={"task_id": task_id},
        )


class ModificationNotFoundError(NotFoundError):
    def __init__(self, modification_id: str):
        super().__init__(
            message="Modification request not found",
            code="MODIFICATION_NOT_FOUND",
            details={"modification_id": modification_id},
        )


class UserNotFoundError(NotFoundError):
    def __init__(self, email: str):
        super().__init__(
            message="User not found",
            code="USER_NOT_FOUND",
            details={"email": email},
        )


# =============================================================================
# State and Conflict Errors
# =============================================================================

class InvalidStateError(CollabException):
    """The entity is not in a state that allows this operation."""

    def __init__(
        self,
        message: str,
        code: str = "INVALID_STATE",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=message,
            code=code,
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


class ProjectNotOpenError(InvalidStateError):
    def __init__(self, project_id: str, status: str):
        super().__init__(
            message="Project is not open for applications",
            suggestion="Applications are accepted only while the project status is OPEN",
            details={"project_id": project_id, "status": status},
        )


class ProjectTransitionError(InvalidStateError):
    def __init__(self, project_id: str, current: str, requested: str):
        super().__init__(
            message=f"Cannot move project from {current} to {requested}",
            suggestion="Project status only moves forward: COMING_SOON -> OPEN -> IN_PROGRESS -> COMPLETED",
            details={"project_id": project_id, "current": current, "requested": requested},
        )


class TaskStateError(InvalidStateError):
    def __init__(self, task_id: str, message: str, status: str):
        super().__init__(
            message=message,
            details={"task_id": task_id, "status": status},
        )


class ConflictError(CollabException):
    """A uniqueness rule or a concurrent change prevents the write."""

    def __init__(self, message: str, code: str = "CONFLICT", details: dict[str, Any] | None = None, suggestion: str | None = None):
        super().__init__(
            message=message,
            code=code,
            status_code=409,
            suggestion=suggestion,
            details=details,
        )


class DuplicateApplicationError(ConflictError):
    def __init__(self, project_id: str):
        super().__init__(
            message="You already have a pending application for this project",
            code="DUPLICATE_APPLICATION",
            suggestion="Wait for the pending application to be reviewed",
            details={"project_id": project_id},
        )


class AlreadyDecidedError(ConflictError):
    """A terminal decision cannot be replaced by a different one."""

    def __init__(self, entity: str, entity_id: str, current: str, requested: str):
        super().__init__(
            message=f"{entity} has already been {current.lower()}",
            code="ALREADY_DECIDED",
            details={"id": entity_id, "current": current, "requested": requested},
        )


# =============================================================================
# Availability
# =============================================================================

class ServiceUnavailableError(CollabException):
    def __init__(self, message: str, suggestion: str | None = None):
        super().__init__(
            message=message,
            code="UNAVAILABLE",
            status_code=503,
            suggestion=suggestion,
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def collab_exception_handler(
    request: Request,
    exc: CollabException
) -> JSONResponse:
    """Convert CollabException to the error envelope."""
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def storage_exception_handler(
    request: Request,
    exc: StorageError
) -> JSONResponse:
    """
    Storage failures are retryable by the caller; the backend detail stays
    in the logs.
    """
    logger.error(f"Storage error on {request.method} {request.url.path}: {exc}")
    if isinstance(exc, DuplicateKeyError):
        return JSONResponse(
            status_code=409,
            content={"success": False, "error": "CONFLICT", "message": "A record with these values already exists"},
        )
    if isinstance(exc, StorageTimeoutError):
        status_code, code = 504, "TIMEOUT"
    else:
        status_code, code = 503, "UNAVAILABLE"
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": code,
            "message": "The storage service is temporarily unavailable",
            "suggestion": "Retry the request with backoff",
        },
    )


async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """
    Handle request validation errors raised by FastAPI/Pydantic.

    Reported as 400 with the offending field locations.
    """
    fields = [
        ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": "VALIDATION_ERROR",
            "message": "Invalid request",
            "details": {"fields": fields},
        },
    )
