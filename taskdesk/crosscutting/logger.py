"""
Name: Structured Logger Configuration

Responsibilities:
  - Configure JSON-structured logging
  - Automatically include request context (request_id, method, path)
  - Redact sensitive fields (passwords, tokens, authorization headers)
  - Include stack traces for exceptions

Collaborators:
  - context.py: Request-scoped context vars
  - crosscutting/config.py: log level and format

Notes:
  - Import as: from taskdesk.crosscutting.logger import logger
"""

import json
import logging
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

# R: LogRecord attributes that are not "extra" fields
_INTERNAL_LOGRECORD_KEYS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "stack_info",
    "exc_info",
    "exc_text",
    "thread",
    "threadName",
    "taskName",
    "message",
}

REDACTED = "***REDACTED***"


class JSONFormatter(logging.Formatter):
    """
    R: Format logs as JSON with automatic context enrichment.

    Includes:
      - timestamp (ISO 8601), level, logger, message
      - module, function, line
      - request_id, method, path (from context)
      - exception stack trace (if present)
      - extra fields from log call (sensitive keys redacted)
    """

    SENSITIVE_KEYS = {
        "password",
        "password_hash",
        "secret",
        "token",
        "access_token",
        "authorization",
        "jwt_secret",
        "smtp_password",
    }

    def _sanitize(self, key: str, value: Any) -> Any:
        if key.lower() in self.SENSITIVE_KEYS:
            return REDACTED
        if isinstance(value, dict):
            return {str(k): self._sanitize(str(k), v) for k, v in value.items()}
        return value

    def format(self, record: logging.LogRecord) -> str:
        log_obj: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        # R: Request context (imported lazily to avoid circular imports)
        from ..context import get_context_dict

        ctx = get_context_dict()
        if ctx:
            log_obj.update(ctx)

        for key, value in record.__dict__.items():
            if key in _INTERNAL_LOGRECORD_KEYS:
                continue
            log_obj[key] = self._sanitize(key, value)

        if record.exc_info:
            log_obj["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "stacktrace": traceback.format_exception(*record.exc_info),
            }

        return json.dumps(log_obj, default=str)


def setup_logger(name: str = "taskdesk") -> logging.Logger:
    """
    R: Configure and return structured logger.

    Respects LOG_LEVEL / LOG_JSON from Settings when they can be loaded.
    """
    log = logging.getLogger(name)

    level = "INFO"
    use_json = True
    try:
        from .config import get_settings

        settings = get_settings()
        level = (settings.log_level or "INFO").upper()
        use_json = settings.log_json
    except ValueError:
        # R: Invalid settings surface later, at startup validation.
        pass

    log.setLevel(getattr(logging, level, logging.INFO))

    # R: Avoid duplicate handlers on reimport
    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter()
            if use_json
            else logging.Formatter("%(levelname)s %(name)s %(message)s")
        )
        log.addHandler(handler)

    return log


# R: Global logger instance
logger = setup_logger()
