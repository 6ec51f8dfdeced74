"""Per-connection client identity and membership state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from .roster import ChannelRoster


class RegistrationState(Enum):
    UNREGISTERED = auto()
    REGISTERED = auto()


@dataclass(slots=True)
class ClientInfo:
    """State owned by the dispatch loop.

    Attributes:
        nick: Current nickname, follows server-confirmed NICK changes.
        user: Username sent in the USER command.
        realname: Real name sent in the USER command.
        autojoin: Channels joined, in order, once the server welcomes us.
        channels: Channels we are currently in.
        roster: Member nicknames per channel.
        state: Registration handshake state.
    """

    nick: str
    user: str
    realname: str
    autojoin: tuple[str, ...] = ()
    channels: set[str] = field(default_factory=set)
    roster: ChannelRoster = field(default_factory=ChannelRoster)
    state: RegistrationState = RegistrationState.UNREGISTERED

    @property
    def registered(self) -> bool:
        return self.state is RegistrationState.REGISTERED

    def leave(self, channel: str) -> None:
        """Forget a channel entirely: membership and roster."""
        self.roster.drop(channel)
        self.channels.discard(channel)
