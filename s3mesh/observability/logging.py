"""
Structured Logging for Provider Calls

One JSON object per record, carrying the fields that identify an object
access (``reference``, ``connection``, ``operation``) next to the message.

Provides:
- JsonFormatter: JSON lines with keyword and context fields
- StructuredLogger: keyword-field logging plus ``failure()`` for S3MeshError
- log_context: request-scoped fields via ContextVar
- setup_logging / setup_logging_from_config: root handler installation

Library modules only create loggers; handlers belong to the application.
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Iterator, Optional, TextIO

if TYPE_CHECKING:
    from s3mesh.core.config import ObservabilityConfig
    from s3mesh.core.errors import S3MeshError


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50

    @classmethod
    def from_name(cls, name: str) -> LogLevel:
        return cls[name.strip().upper()]


_log_context: ContextVar[dict[str, Any]] = ContextVar("s3mesh_log_context", default={})

# Attributes present on every logging.LogRecord
_STANDARD_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime", "taskName"}

_PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

_QUIET_LOGGERS = ("botocore", "boto3", "s3transfer", "urllib3", "asyncio")


@contextmanager
def log_context(**fields: Any) -> Iterator[dict[str, Any]]:
    """Attach ``fields`` to every record logged inside the block."""
    token = _log_context.set({**_log_context.get(), **fields})
    try:
        yield _log_context.get()
    finally:
        _log_context.reset(token)


class JsonFormatter(logging.Formatter):
    """
    Render records as single-line JSON.

    Field precedence, lowest first: context fields, then ``extra`` fields
    of the call. The fixed keys ``@timestamp``, ``level``, ``logger`` and
    ``message`` always win.
    """

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = dict(_log_context.get())
        data.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS
        )
        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)

        data["@timestamp"] = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).isoformat()
        data["level"] = record.levelname
        data["logger"] = record.name
        data["message"] = record.getMessage()
        return json.dumps(data, default=str)


def error_fields(error: S3MeshError) -> dict[str, Any]:
    """Flatten an S3MeshError into log fields."""
    fields: dict[str, Any] = {
        "error_code": error.code.name,
        "error_id": error.error_id,
        "error": error.message,
    }
    if error.cause is not None:
        fields["cause"] = f"{type(error.cause).__name__}: {error.cause}"
    return fields


class StructuredLogger:
    """
    Thin wrapper that turns keyword arguments into ``extra`` fields.

    Usage:
        logger = StructuredLogger(__name__)
        logger.debug("Content cache miss", reference=str(ref))

        with StructuredLogger.context(connection="prod"):
            logger.failure("Upstream call failed", err, operation="GetObject")

    Levels come from the logging configuration; the wrapper never sets one.
    """

    __slots__ = ("_logger", "_bound")

    def __init__(self, name: str, **bound: Any) -> None:
        self._logger = logging.getLogger(name)
        self._bound = bound

    @property
    def name(self) -> str:
        return self._logger.name

    def bind(self, **fields: Any) -> StructuredLogger:
        """Logger with the same name and additional fixed fields."""
        return StructuredLogger(self._logger.name, **{**self._bound, **fields})

    def debug(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.DEBUG, message, fields)

    def info(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.INFO, message, fields)

    def warning(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.WARNING, message, fields)

    def error(self, message: str, **fields: Any) -> None:
        self._emit(LogLevel.ERROR, message, fields)

    def failure(
        self,
        message: str,
        error: S3MeshError,
        level: LogLevel = LogLevel.WARNING,
        **fields: Any,
    ) -> None:
        """Log ``error`` with its code, id and cause as fields."""
        self._emit(level, message, {**error_fields(error), **fields})

    def _emit(self, level: LogLevel, message: str, fields: dict[str, Any]) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, message, extra={**self._bound, **fields})

    context = staticmethod(log_context)


def setup_logging(
    level: LogLevel = LogLevel.INFO,
    json_output: bool = True,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """
    Replace the root handlers with a single stream handler.

    Args:
        level: Minimum level for the root logger and the handler
        json_output: JSON lines when true, a pipe-separated text format otherwise
        stream: Output stream (default: stderr)

    Returns:
        The installed handler.
    """
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(_PLAIN_FORMAT))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, LogLevel.WARNING))
    return handler


def setup_logging_from_config(
    config: ObservabilityConfig,
    stream: Optional[TextIO] = None,
) -> logging.Handler:
    """``setup_logging`` driven by ``ObservabilityConfig``."""
    return setup_logging(
        level=LogLevel.from_name(config.log_level),
        json_output=config.log_json,
        stream=stream,
    )
