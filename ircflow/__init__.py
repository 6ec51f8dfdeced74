"""ircflow: asyncio client engine for the IRC wire protocol."""

__version__ = "0.1.0"
