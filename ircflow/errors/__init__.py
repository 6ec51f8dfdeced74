"""Error hierarchy and error logging helpers."""

from .handling import log_error  # noqa: F401
from .internal import (  # noqa: F401
    ChannelClosedError,
    ConfigError,
    InternalError,
    NetworkError,
    ParsingError,
)

__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "ChannelClosedError",
    "ConfigError",
    "log_error",
]
