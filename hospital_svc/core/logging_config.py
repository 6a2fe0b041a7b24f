"""
Structured JSON logging with per-request context.

Every log line emitted while a request is being served carries the request id
(set by LoggingMiddleware) and, once the bearer token has been verified, the
caller's user id and role (set by core.auth). Clinical audit questions such as
"who dispensed this prescription" can then be answered from the log stream
alone.

Log line (JSON):
{
    "timestamp": "2026-03-02T08:15:00.123Z",
    "level": "INFO",
    "logger": "services.prescription_service",
    "message": "Prescription 12 marked dispensed",
    "request_id": "1f3a9c2e",
    "user_id": 7,
    "role": "pharmacist",
    "extra": {"prescription_id": 12}
}

Usage:
    from core.logging_config import setup_logging
    setup_logging()                         # once, at startup

    logger.info("Stock adjusted", extra={"item_id": 42, "status": "low"})
"""

import json
import logging
import os
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from core.config import LOG_JSON, LOG_LEVEL

# =============================================================================
# REQUEST CONTEXT
# =============================================================================

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
_caller: ContextVar[Optional[Tuple[int, str]]] = ContextVar("caller", default=None)


def get_request_id() -> Optional[str]:
    return _request_id.get()


def set_request_id(request_id: str) -> None:
    _request_id.set(request_id)


def bind_caller(user_id: int, role: str) -> None:
    """Attach the authenticated caller to every log line for the rest of the request."""
    _caller.set((user_id, role))


def get_caller() -> Optional[Tuple[int, str]]:
    return _caller.get()


def clear_request_context() -> None:
    """Forget the request id and caller (end of request)."""
    _request_id.set(None)
    _caller.set(None)


# =============================================================================
# JSON FORMATTER
# =============================================================================

# Attributes every LogRecord has; anything else came in through extra=
_RECORD_ATTRS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per line, timestamped from the record itself (UTC)."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: Dict[str, Any] = {
            "timestamp": created.strftime("%Y-%m-%dT%H:%M:%S.") + f"{created.microsecond // 1000:03d}Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        caller = get_caller()
        if caller:
            entry["user_id"], entry["role"] = caller

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        extra = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if extra:
            entry["extra"] = extra

        return json.dumps(entry, default=str, ensure_ascii=False)


class _TextFormatter(logging.Formatter):
    """Human-readable lines for local runs, with the caller appended when known."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        caller = get_caller()
        if caller:
            line += f" [user={caller[0]} role={caller[1]}]"
        return line


# =============================================================================
# SETUP
# =============================================================================

# Application packages whose loggers route through the root handler
APP_LOGGERS = ("core", "api", "services", "repositories")


def setup_logging(level: Optional[str] = None, json_format: Optional[bool] = None) -> None:
    """
    Configure root logging for the service.

    Args:
        level: Log level; defaults to HOSPITAL_SVC_LOG_LEVEL.
        json_format: JSON (True) or text (False); defaults to HOSPITAL_SVC_LOG_FORMAT.

    The LOG_LEVEL and LOG_FORMAT environment variables override both, so an
    operator can turn on DEBUG for a single run without touching .env.
    """
    level = os.environ.get("LOG_LEVEL", level or LOG_LEVEL).upper()
    if "LOG_FORMAT" in os.environ:
        json_format = os.environ["LOG_FORMAT"].lower() == "json"
    elif json_format is None:
        json_format = LOG_JSON

    handler = logging.StreamHandler(sys.stdout)
    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(_TextFormatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = [handler]

    for name in APP_LOGGERS:
        app_logger = logging.getLogger(name)
        app_logger.setLevel(level)
        app_logger.handlers = []
        app_logger.propagate = True

    # LoggingMiddleware already logs every request; uvicorn's access log would duplicate it
    for name in ("uvicorn", "uvicorn.error"):
        logging.getLogger(name).handlers = []
        logging.getLogger(name).propagate = True
    logging.getLogger("uvicorn.access").disabled = True

    logging.getLogger(__name__).info(
        "Logging configured",
        extra={"level": level, "format": "json" if json_format else "text"}
    )
