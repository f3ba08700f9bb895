"""
Name: Error Envelope Tests

Responsibilities:
  - Factory status codes and error codes
  - Rendering of AppHTTPException into {error, code, status, request_id?}
"""

import asyncio
import json
from types import SimpleNamespace

import pytest

from taskdesk.crosscutting.error_responses import (
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

pytestmark = pytest.mark.unit


@pytest.mark.parametrize(
    "exc,status,code",
    [
        (validation_error("bad"), 400, ErrorCode.VALIDATION_ERROR),
        (bad_request("bad"), 400, ErrorCode.BAD_REQUEST),
        (unauthorized(), 401, ErrorCode.UNAUTHORIZED),
        (forbidden(), 403, ErrorCode.FORBIDDEN),
        (not_found("Task not found"), 404, ErrorCode.NOT_FOUND),
        (conflict("dup"), 409, ErrorCode.CONFLICT),
        (internal_error(), 500, ErrorCode.INTERNAL_ERROR),
        (database_error(), 503, ErrorCode.DATABASE_ERROR),
    ],
)
def test_factories(exc, status, code):
    assert exc.status_code == status
    assert exc.code == code


async def _render(exc, request_id=None):
    request = SimpleNamespace(state=SimpleNamespace(request_id=request_id))
    response = await app_exception_handler(request, exc)
    return response.status_code, json.loads(response.body)


def test_envelope_without_request_id():
    status, body = asyncio.run(_render(unauthorized("Invalid credentials")))

    assert status == 401
    assert body == {
        "error": "Invalid credentials",
        "code": "UNAUTHORIZED",
        "status": 401,
    }


def test_envelope_includes_request_id_and_field_errors():
    errors = [{"loc": ["body", "title"], "msg": "required", "type": "missing"}]
    status, body = asyncio.run(
        _render(validation_error("required", errors), request_id="req-1")
    )

    assert status == 400
    assert body["request_id"] == "req-1"
    assert body["errors"] == errors
