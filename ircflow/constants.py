"""
Configuration constants for the ircflow client engine

This module contains the tunables used by the connection pipeline.
Each constant can be overridden by setting an environment variable with the same name.
"""

import os


def _get_env_int(name: str, default: int) -> int:
    """Retrieve an integer value from an environment variable.

    Attempts to parse the environment variable as an integer. If the variable
    is not set or cannot be parsed, prints a warning and returns the default value.

    Args:
        name: The name of the environment variable to read.
        default: The default integer value to return if parsing fails.

    Returns:
        The parsed integer value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return int(value)
        except ValueError:
            print(
                f"Warning: Invalid integer value for {name}='{value}', using default {default}"
            )
    return default


def _get_env_float(name: str, default: float) -> float:
    """Retrieve a float value from an environment variable.

    Args:
        name: The name of the environment variable to read.
        default: The default float value to return if parsing fails.

    Returns:
        The parsed float value from the environment, or the default if unavailable.
    """
    value = os.getenv(name)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            print(
                f"Warning: Invalid float value for {name}='{value}', using default {default}"
            )
    return default


# Reader retry/backoff
READ_RETRY_LIMIT = _get_env_int(
    "READ_RETRY_LIMIT", 5
)  # Failed reads tolerated in a row before the pipeline aborts
READ_RETRY_BASE_DELAY = _get_env_float(
    "READ_RETRY_BASE_DELAY", 5.0
)  # First backoff sleep in seconds, doubled on every further failure

# Connection
DEFAULT_PORT = _get_env_int("DEFAULT_PORT", 6667)
CONNECT_TIMEOUT = _get_env_float(
    "CONNECT_TIMEOUT", 30.0
)  # Seconds allowed for the TCP connect
READ_LINE_LIMIT = _get_env_int(
    "READ_LINE_LIMIT", 65536
)  # StreamReader buffer limit; longer lines count as read errors

# Config file
DEFAULT_CONFIG_FILE = os.getenv("IRCFLOW_CONF_FILE", "ircflow.conf")
