"""
Observability module: structured logging.
"""

from s3mesh.observability.logging import (
    JsonFormatter,
    LogLevel,
    StructuredLogger,
    error_fields,
    log_context,
    setup_logging,
    setup_logging_from_config,
)

__all__ = [
    "JsonFormatter",
    "LogLevel",
    "StructuredLogger",
    "error_fields",
    "log_context",
    "setup_logging",
    "setup_logging_from_config",
]
