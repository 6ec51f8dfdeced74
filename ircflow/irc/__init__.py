"""IRC subsystem package.

Contains the message and CTCP codecs, channel rosters, the registration
handshake, the connection pipeline and the client that drives them.
"""

from .client import IRCClient  # noqa: F401
from .connection import IRCReader, IRCWriter, ServerConnection  # noqa: F401
from .ctcp import CtcpRequest, combine_msg, extract, extract_msg  # noqa: F401
from .events import Abort, EventChannel, Recv, Send  # noqa: F401
from .info import ClientInfo, RegistrationState  # noqa: F401
from .message import Direction, Message, Source, parse, serialize  # noqa: F401
from .registration import RegistrationHandshake  # noqa: F401
from .roster import ChannelRoster  # noqa: F401

__all__ = [
    "Abort",
    "ChannelRoster",
    "ClientInfo",
    "CtcpRequest",
    "Direction",
    "EventChannel",
    "IRCClient",
    "IRCReader",
    "IRCWriter",
    "Message",
    "Recv",
    "RegistrationHandshake",
    "RegistrationState",
    "Send",
    "ServerConnection",
    "Source",
    "combine_msg",
    "extract",
    "extract_msg",
    "parse",
    "serialize",
]
