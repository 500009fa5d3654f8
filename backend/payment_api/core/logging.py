"""Structured logging for the payment API.

Every record is rendered as one JSON line. Records emitted by the error
translator (those carrying ``error_id``) get their error fields grouped
under an ``error`` object so failures can be searched by code or id
without knowing which extras each call site attached.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Mapping
from contextvars import ContextVar, Token
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Final

REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
REQUEST_ID_CTX: Final[ContextVar[str | None]] = ContextVar("request_id", default=None)

# Attributes every LogRecord has, whatever the interpreter version adds.
_RECORD_ATTRS: Final[frozenset[str]] = frozenset(vars(logging.makeLogRecord({}))) | {
    "message",
    "asctime",
    "request_id",
}

ERROR_FIELDS: Final[tuple[str, ...]] = ("error_id", "error_code", "error_message")

_LOGGING_CONFIGURED: bool = False


class JsonLogFormatter(logging.Formatter):
    """Render a record as a single JSON object.

    Formatting happens before the handler takes its lock to write, and the
    output never contains a newline, so lines from concurrent requests do
    not interleave.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = get_request_id()
        if request_id:
            entry["request_id"] = request_id

        extras = {
            key: normalize_log_value(value)
            for key, value in record.__dict__.items()
            if key not in _RECORD_ATTRS and not key.startswith("_") and value is not None
        }
        if "error_id" in extras:
            entry["error"] = {field: extras.pop(field) for field in ERROR_FIELDS if field in extras}
        entry.update(extras)

        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info).replace("\n", " | ")
        if record.stack_info:
            entry["stack"] = self.formatStack(record.stack_info).replace("\n", " | ")

        return json.dumps(entry, ensure_ascii=True, separators=(",", ":"))


def normalize_log_value(value: object) -> object:
    """Convert an extra into a JSON-safe value without losing monetary scale."""

    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(key): normalize_log_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [normalize_log_value(item) for item in value]
    return str(value)


def configure_logging(level_name: str) -> None:
    """Install the JSON formatter on the root logger once per process."""

    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(JsonLogFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(resolve_level(level_name))

    # SQLAlchemy echoes every statement at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

    logging.captureWarnings(True)
    _LOGGING_CONFIGURED = True


def resolve_level(level_name: str) -> int:
    level_value = logging.getLevelName(str(level_name).strip().upper())
    return level_value if isinstance(level_value, int) else logging.INFO


def bind_request_id(request_id: str) -> Token[str | None]:
    return REQUEST_ID_CTX.set(request_id)


def get_request_id() -> str | None:
    return REQUEST_ID_CTX.get()


def reset_request_id(token: Token[str | None]) -> None:
    REQUEST_ID_CTX.reset(token)


__all__ = [
    "ERROR_FIELDS",
    "JsonLogFormatter",
    "REQUEST_ID_HEADER",
    "bind_request_id",
    "configure_logging",
    "get_request_id",
    "normalize_log_value",
    "reset_request_id",
    "resolve_level",
]
