"""Logging helpers that keep database and connection details out of production logs."""

import logging
import re
from functools import lru_cache
from uuid import UUID

from rbac_core.config import get_settings

_CONNECTION_URL = re.compile(r"(postgresql|sqlite)(\+\w+)?://[^\s]+")
_SQL_PARAMETERS = re.compile(r"\[parameters: .*?\]", re.DOTALL)
_SQL_STATEMENT = re.compile(r"\[SQL: .*?\]", re.DOTALL)
_MAX_MESSAGE_LENGTH = 200


@lru_cache(maxsize=1)
def is_debug_mode() -> bool:
    """Check if application is running in debug mode."""
    return get_settings().debug


def sanitize_exception_message(error: Exception) -> str:
    """Strip SQL text, bound parameters and connection URLs from an error message.

    SQLAlchemy errors embed the failing statement and its parameters,
    which can carry user and department identifiers.
    """
    error_msg = str(error)
    error_msg = _SQL_STATEMENT.sub("[SQL]", error_msg)
    error_msg = _SQL_PARAMETERS.sub("[PARAMETERS]", error_msg)
    error_msg = _CONNECTION_URL.sub("[URL]", error_msg)
    error_msg = " ".join(error_msg.split())

    if len(error_msg) > _MAX_MESSAGE_LENGTH:
        error_msg = error_msg[: _MAX_MESSAGE_LENGTH - 3] + "..."
    return error_msg


def _format(message: str, error: Exception | None) -> str:
    if error is None:
        return message
    detail = str(error) if is_debug_mode() else sanitize_exception_message(error)
    return f"{message}: {detail}"


def log_error(logger: logging.Logger, message: str, error: Exception | None = None) -> None:
    """Log an error; the traceback is included only in debug mode."""
    logger.error(_format(message, error), exc_info=error is not None and is_debug_mode())


def log_warning(logger: logging.Logger, message: str, error: Exception | None = None) -> None:
    """Log a warning with the error detail sanitized outside debug mode."""
    logger.warning(_format(message, error))


def log_access_denied(
    logger: logging.Logger,
    user_id: UUID,
    code: str,
    reason: str | None,
    department_id: UUID | None = None,
) -> None:
    """Record a denied check at debug level."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    context = f" in department {department_id}" if department_id else ""
    logger.debug(f"Access denied for user {user_id} on {code}{context}: {reason}")
