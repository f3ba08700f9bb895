"""
Name: Typed Application Exceptions

Responsibilities:
  - Define the error taxonomy shared by identity, domain and application code
  - Attach a stable error_code and an error_id for log correlation

Collaborators:
  - api/exception_handlers.py: maps these exceptions to HTTP responses
  - domain/access_policy.py: DenyReason carried by Forbidden

Notes:
  - Raised at the point of detection, never retried
  - Messages are safe to show to clients (no secrets, no SQL)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import uuid4


@dataclass(frozen=True)
class ErrorResponse:
    """R: Minimal error shape for logging and non-HTTP callers."""

    error_code: str
    message: str
    error_id: str

    def to_dict(self) -> dict:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "error_id": self.error_id,
        }


class TaskDeskError(Exception):
    """R: Base class for all internal errors."""

    error_code: str = "TASKDESK_ERROR"

    def __init__(
        self,
        message: str,
        error_id: str | None = None,
        original_error: Exception | None = None,
    ):
        self.message = message
        self.error_id = error_id or str(uuid4())
        self.original_error = original_error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error_code=self.error_code, message=self.message, error_id=self.error_id
        )


class ValidationError(TaskDeskError):
    """Malformed or missing input."""

    error_code: str = "VALIDATION_ERROR"


class Unauthenticated(TaskDeskError):
    """Missing, invalid or expired credential."""

    error_code: str = "UNAUTHORIZED"


class DenyReason(str, Enum):
    """R: Why the authorization policy denied an action."""

    INSUFFICIENT_ROLE = "insufficient_role"
    NOT_OWNER = "not_owner"
    SELF_DELETE_BLOCKED = "self_delete_blocked"


class Forbidden(TaskDeskError):
    """Authenticated but not allowed. Carries the policy's deny reason."""

    error_code: str = "FORBIDDEN"

    def __init__(self, message: str, reason: DenyReason, **kwargs):
        super().__init__(message, **kwargs)
        self.reason = reason


class NotFound(TaskDeskError):
    """Referenced resource does not exist."""

    error_code: str = "NOT_FOUND"

    def __init__(self, resource: str, identifier: object, **kwargs):
        super().__init__(f"{resource} not found", **kwargs)
        self.resource = resource
        self.identifier = identifier


class Conflict(TaskDeskError):
    """Uniqueness violation (e.g. duplicate email)."""

    error_code: str = "CONFLICT"


class DatabaseError(TaskDeskError):
    """Database failures (connection, query, timeout, pool)."""

    error_code: str = "DATABASE_ERROR"
