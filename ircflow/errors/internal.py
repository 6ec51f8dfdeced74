"""Centralized internal error hierarchy.

These exceptions provide semantic categories for the client engine. Raw
socket and decoding errors are wrapped at the connection boundary so callers
only ever see this hierarchy.

Classes:
  InternalError        – Base for all internal errors.
  NetworkError         – Connect, read or write failures on the TCP stream.
  ParsingError         – A protocol line that does not parse.
  ChannelClosedError   – An event was offered to a closed event channel.
  ConfigError          – Missing or malformed configuration file.
"""

from __future__ import annotations

from collections.abc import Mapping


class InternalError(Exception):
    """Base class for all internal errors with metadata support.

    Attributes:
        data: Dictionary containing arbitrary structured context data.

    Args:
        message: Descriptive error message.
        data: Optional mapping of additional context data.
    """

    data: dict[str, object]

    def __init__(
        self, message: str, *, data: Mapping[str, object] | None = None
    ) -> None:
        super().__init__(message)
        # Copy into a plain dict to avoid unexpected mutations from caller.
        self.data = dict(data) if data else {}


class NetworkError(InternalError):
    """Exception raised for transport layer errors.

    Covers connect failures, write failures and reads that exhausted their
    retries.
    """


class ParsingError(InternalError):
    """Exception raised when a raw line is not a protocol message.

    The offending line is kept in ``data["line"]``.
    """


class ChannelClosedError(InternalError):
    """Exception raised when the event channel no longer accepts events."""


class ConfigError(InternalError):
    """Exception raised for a missing or unreadable configuration file."""


__all__ = [
    "InternalError",
    "NetworkError",
    "ParsingError",
    "ChannelClosedError",
    "ConfigError",
]
