"""
Logging utilities for safe structured logging.

Provides helpers that turn arbitrary pipeline values (id lists, vectors,
stats dicts) into bounded log fields.

Dependencies: logging (stdlib)
System role: Logging helper functions
"""

import logging
from typing import Any
from uuid import UUID

from knowledge_context.observability.correlation import get_correlation_id


def safe_log_value(value: Any, max_length: int = 500) -> str:
    """
    Safely convert any value to a string for logging.

    Collections are summarized by size so embedding vectors and large id
    lists never end up verbatim in the log stream.

    Args:
        value: Value to convert
        max_length: Maximum length before truncating

    Returns:
        str: Safe string representation
    """
    try:
        if value is None:
            return "None"
        if isinstance(value, str):
            val_str = value
        elif isinstance(value, UUID):
            val_str = str(value)
        elif isinstance(value, float):
            val_str = f"{value:.4f}"
        elif isinstance(value, (list, tuple, set)):
            val_str = f"{type(value).__name__}({len(value)} items)"
        elif isinstance(value, dict):
            val_str = f"dict({len(value)} keys)"
        else:
            val_str = str(value)

        if len(val_str) > max_length:
            return val_str[:max_length] + f"... (truncated, {len(val_str)} total)"
        return val_str
    except Exception as e:
        return f"<unable to log: {type(e).__name__}>"


def _context_fields(context: dict[str, Any]) -> dict[str, str]:
    fields = {key: safe_log_value(val) for key, val in context.items()}
    fields.setdefault("request_correlation_id", get_correlation_id() or "-")
    return fields


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    **context,
) -> None:
    """
    Log a message with structured context, safely converting all values.

    Args:
        logger: Logger instance
        level: Log level (logging.INFO, etc.)
        message: Log message
        **context: Context dict with arbitrary key-value pairs
    """
    logger.log(level, message, extra=_context_fields(context))


def log_exception_with_context(
    logger: logging.Logger,
    message: str,
    exc: Exception,
    level: int = logging.ERROR,
    **context,
) -> None:
    """
    Log an exception with full context and stack trace.

    Args:
        logger: Logger instance
        message: Log message
        exc: Exception instance
        level: Log level, WARNING for degraded-but-handled failures
        **context: Additional context dict
    """
    fields = _context_fields(context)
    fields.update({
        "error_type": type(exc).__name__,
        "error_msg": str(exc),
    })
    logger.log(level, message, exc_info=exc, extra=fields)
