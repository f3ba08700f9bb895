"""
Standardized error response catalog for API consistency.
All HTTP error responses share one envelope: {"error", "code", "status"}.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    """Application error codes for client-side handling."""

    # 4xx Client Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    BAD_REQUEST = "BAD_REQUEST"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # 5xx Server Errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class ErrorBody(BaseModel):
    """Error envelope returned by every failing endpoint."""

    error: str
    code: ErrorCode
    status: int
    request_id: str | None = None
    errors: list[dict[str, Any]] | None = None


# R: Reusable OpenAPI response entries
OPENAPI_ERROR_RESPONSES = {
    "400": {"description": "Bad Request", "model": ErrorBody},
    "401": {"description": "Unauthorized", "model": ErrorBody},
    "403": {"description": "Forbidden", "model": ErrorBody},
    "404": {"description": "Not Found", "model": ErrorBody},
    "409": {"description": "Conflict", "model": ErrorBody},
}


class AppHTTPException(HTTPException):
    """
    R: HTTPException with a stable ErrorCode and optional field errors.
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail)
        self.code = code
        self.errors = errors


# ---------------------------------------------------------------------------
# Error factories
# ---------------------------------------------------------------------------
def validation_error(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(400, ErrorCode.VALIDATION_ERROR, detail, errors)


def bad_request(detail: str) -> AppHTTPException:
    return AppHTTPException(400, ErrorCode.BAD_REQUEST, detail)


def not_found(detail: str) -> AppHTTPException:
    return AppHTTPException(404, ErrorCode.NOT_FOUND, detail)


def conflict(detail: str) -> AppHTTPException:
    return AppHTTPException(409, ErrorCode.CONFLICT, detail)


def unauthorized(detail: str = "Authentication required") -> AppHTTPException:
    return AppHTTPException(401, ErrorCode.UNAUTHORIZED, detail)


def forbidden(detail: str = "Access denied") -> AppHTTPException:
    return AppHTTPException(403, ErrorCode.FORBIDDEN, detail)


def internal_error(detail: str = "Internal Server Error") -> AppHTTPException:
    return AppHTTPException(500, ErrorCode.INTERNAL_ERROR, detail)


def database_error(detail: str = "Database operation failed") -> AppHTTPException:
    return AppHTTPException(503, ErrorCode.DATABASE_ERROR, detail)


# ---------------------------------------------------------------------------
# FastAPI handler
# ---------------------------------------------------------------------------
async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    """R: Render AppHTTPException as the standard error envelope."""
    request_id = getattr(getattr(request, "state", None), "request_id", None)

    body = ErrorBody(
        error=str(exc.detail),
        code=exc.code,
        status=exc.status_code,
        request_id=request_id,
        errors=exc.errors or None,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(mode="json", exclude_none=True),
        headers=getattr(exc, "headers", None),
    )
