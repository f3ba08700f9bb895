"""
Name: HTTP Middleware

Responsibilities:
  - Generate and propagate request_id (UUID)
  - Set request context for logging
  - Add X-Request-Id response header
  - Log request completion with latency

Collaborators:
  - context.py: ContextVars for request-scoped data
  - crosscutting/logger.py: Structured logging

Constraints:
  - Must wrap every route (added last so it runs first)
  - Must clear context after response
"""

import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..context import clear_context, http_method_var, http_path_var, request_id_var
from .logger import logger

REQUEST_ID_HEADER = "X-Request-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    R: Middleware that establishes request context and logs the outcome.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        # R: Reuse a caller-supplied id so traces can span services
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())

        request_id_var.set(request_id)
        http_method_var.set(request.method)
        http_path_var.set(request.url.path)
        request.state.request_id = request_id

        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            latency_seconds = time.perf_counter() - start_time

            response.headers[REQUEST_ID_HEADER] = request_id
            logger.info(
                "request completed",
                extra={
                    "status_code": response.status_code,
                    "latency_ms": round(latency_seconds * 1000, 2),
                },
            )
            return response

        except Exception as exc:
            latency_seconds = time.perf_counter() - start_time
            logger.exception(
                "request failed",
                extra={
                    "latency_ms": round(latency_seconds * 1000, 2),
                    "error": str(exc),
                },
            )
            raise

        finally:
            clear_context()
