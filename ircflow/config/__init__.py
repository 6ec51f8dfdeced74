"""Connection configuration: pydantic model and JSON file loader."""

from .loader import load_config  # noqa: F401
from .model import IRCConfig  # noqa: F401

__all__ = ["IRCConfig", "load_config"]
