"""
Name: Exception Handlers

Responsibilities:
  - Translate typed application exceptions into the standard error envelope
  - Map request validation errors to 400
  - Log errors with request_id and error_id correlation
  - Hide internals of unhandled errors in production

Collaborators:
  - crosscutting.error_responses: error factories, app_exception_handler
  - crosscutting.exceptions: TaskDeskError and subclasses
  - crosscutting.config.get_settings (detail level)

Notes:
  - A blocked self-delete is a 400 (bad request), not a 403
"""

from __future__ import annotations

from typing import Callable

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    bad_request,
    conflict,
    database_error,
    forbidden,
    internal_error,
    not_found,
    unauthorized,
    validation_error,
)
from ..crosscutting.exceptions import (
    Conflict,
    DatabaseError,
    DenyReason,
    Forbidden,
    NotFound,
    TaskDeskError,
    Unauthenticated,
    ValidationError,
)
from ..crosscutting.logger import logger

_HTTP_STATUS_CODES = {
    400: ErrorCode.BAD_REQUEST,
    401: ErrorCode.UNAUTHORIZED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    409: ErrorCode.CONFLICT,
}


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def _respond(
    request: Request,
    *,
    exc: TaskDeskError,
    make: Callable[[str], AppHTTPException],
) -> JSONResponse:
    app_exc = make(exc.message)
    log = logger.error if app_exc.status_code >= 500 else logger.info
    summary = exc.to_response()
    log(
        "Request failed",
        extra={
            "error_code": summary.error_code,
            "error_id": summary.error_id,
            "detail": summary.message,
            "code": app_exc.code.value,
            "status_code": app_exc.status_code,
        },
    )
    return await app_exception_handler(request, app_exc)


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    return await _respond(request, exc=exc, make=validation_error)


async def unauthenticated_handler(
    request: Request, exc: Unauthenticated
) -> JSONResponse:
    return await _respond(request, exc=exc, make=unauthorized)


async def forbidden_handler(request: Request, exc: Forbidden) -> JSONResponse:
    if exc.reason == DenyReason.SELF_DELETE_BLOCKED:
        return await _respond(request, exc=exc, make=bad_request)
    return await _respond(request, exc=exc, make=forbidden)


async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return await _respond(request, exc=exc, make=not_found)


async def conflict_handler(request: Request, exc: Conflict) -> JSONResponse:
    return await _respond(request, exc=exc, make=conflict)


async def database_error_handler(
    request: Request, exc: DatabaseError
) -> JSONResponse:
    return await _respond(request, exc=exc, make=database_error)


async def taskdesk_error_handler(
    request: Request, exc: TaskDeskError
) -> JSONResponse:
    return await _respond(request, exc=exc, make=internal_error)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """R: Malformed bodies, params or unknown fields -> 400."""
    errors = [
        {
            "loc": [str(part) for part in err.get("loc", ())],
            "msg": err.get("msg", ""),
            "type": err.get("type", ""),
        }
        for err in exc.errors()
    ]
    detail = errors[0]["msg"] if errors else "Invalid request"
    logger.info(
        "Request validation failed",
        extra={"errors": errors, "request_id": _request_id_from(request)},
    )
    return await app_exception_handler(request, validation_error(detail, errors))


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """R: Framework-raised errors (unknown route, wrong method) in the same envelope."""
    code = _HTTP_STATUS_CODES.get(
        exc.status_code,
        ErrorCode.INTERNAL_ERROR if exc.status_code >= 500 else ErrorCode.BAD_REQUEST,
    )
    app_exc = AppHTTPException(
        status_code=exc.status_code, code=code, detail=str(exc.detail)
    )
    app_exc.headers = getattr(exc, "headers", None)
    return await app_exception_handler(request, app_exc)


async def unhandled_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    R: Fallback for untyped exceptions.

    Full stack trace in the log, generic message in production.
    """
    settings = get_settings()

    logger.error(
        "Unhandled exception",
        exc_info=True,
        extra={"request_id": _request_id_from(request), "error": str(exc)},
    )

    detail = "Internal Server Error" if settings.is_production() else str(exc)
    return await app_exception_handler(request, internal_error(detail))


def register_exception_handlers(app) -> None:
    """
    Register handlers on a FastAPI app.

    Specific subclasses first; the bare Exception fallback last.
    """
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(Unauthenticated, unauthenticated_handler)
    app.add_exception_handler(Forbidden, forbidden_handler)
    app.add_exception_handler(NotFound, not_found_handler)
    app.add_exception_handler(Conflict, conflict_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
    app.add_exception_handler(TaskDeskError, taskdesk_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
