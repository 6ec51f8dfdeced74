#!/usr/bin/env python3
"""
Command line entry point: connect, register and log traffic until closed
"""

import asyncio
import logging
import signal
import sys

from pydantic import ValidationError

from .config import load_config
from .errors.handling import log_error
from .errors.internal import ConfigError
from .irc.client import IRCClient
from .irc.message import Message
from .logging_config import LoggerConfigurator
from .logs.logger import logger


def _log_message(message: Message) -> None:
    logger.log_event("chat", "message", human=message.raw, code=message.code)


async def main(config_path: str | None = None) -> int:
    """Load the configuration and run one client until the connection ends.

    Returns:
        Process exit status.
    """
    try:
        config = load_config(config_path)
    except (ConfigError, ValidationError) as e:
        log_error("Invalid configuration", e)
        return 1

    client = IRCClient(config)
    if not await client.connect():
        return 1

    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []
    for sig, why in ((signal.SIGINT, "interrupted"), (signal.SIGTERM, "terminated")):
        try:
            loop.add_signal_handler(sig, client.stop, why)
        except (NotImplementedError, RuntimeError):
            # Not available here; Ctrl-C will cancel the task instead.
            continue
        installed.append(sig)

    try:
        reason = await client.run(_log_message)
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)
    logging.info(f"✅ Connection closed: {reason}")
    return 0


def run() -> None:
    """Synchronous entry point for the application."""
    LoggerConfigurator().configure()
    config_path = sys.argv[1] if len(sys.argv) > 1 else None
    try:
        sys.exit(asyncio.run(main(config_path)))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    run()
