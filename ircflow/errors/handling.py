from __future__ import annotations

from typing import Any

from ..logging_config import log_structured_error
from .internal import (
    ChannelClosedError,
    ConfigError,
    InternalError,
    NetworkError,
    ParsingError,
)


def log_error(message: str, error: Exception, context: dict[str, Any] | None = None) -> None:
    """Logs an error message with the associated exception details.

    The exception is mapped to a coarse category so that transport, protocol
    and configuration failures are easy to tell apart in the log stream.

    Args:
        message: A descriptive message about the error context.
        error: The exception instance to be logged.
        context: Optional additional context data for debugging.
    """
    error_type = "unknown"
    if isinstance(error, NetworkError | OSError):
        error_type = "network"
    elif isinstance(error, ParsingError):
        error_type = "parsing"
    elif isinstance(error, ChannelClosedError):
        error_type = "channel"
    elif isinstance(error, ConfigError):
        error_type = "config"
    elif isinstance(error, InternalError):
        error_type = "internal"

    log_structured_error(
        error_type=error_type,
        message=f"{message}: {str(error)}",
        exception=error,
        context=context,
    )
