"""Configuration file loading."""

from __future__ import annotations

import json
import logging
import os
from typing import Any

from ..constants import DEFAULT_CONFIG_FILE
from ..errors.internal import ConfigError
from ..logs.logger import logger
from .model import IRCConfig


def load_config(path: str | os.PathLike[str] | None = None) -> IRCConfig:
    """Load and validate the connection configuration from a JSON file.

    Args:
        path: Config file path; defaults to ``IRCFLOW_CONF_FILE`` or ``ircflow.conf``.

    Returns:
        The validated IRCConfig.

    Raises:
        ConfigError: If the file is missing, unreadable or not a JSON object.
        pydantic.ValidationError: If the values do not validate.
    """
    config_file = str(path or os.environ.get("IRCFLOW_CONF_FILE", DEFAULT_CONFIG_FILE))
    try:
        with open(config_file, encoding="utf-8") as f:
            data: Any = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(
            f"config file not found: {config_file}", data={"path": config_file}
        ) from e
    except (OSError, ValueError) as e:
        raise ConfigError(
            f"config file unreadable: {config_file}: {e}", data={"path": config_file}
        ) from e
    if not isinstance(data, dict):
        raise ConfigError(
            f"config file must hold a JSON object: {config_file}",
            data={"path": config_file},
        )
    config = IRCConfig.model_validate(data)
    logger.log_event(
        "config",
        "loaded",
        level=logging.DEBUG,
        path=config_file,
        host=config.host,
        channels=len(config.channels),
    )
    return config
