"""Registration handshake and membership bookkeeping driven by inbound codes."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..logs.logger import logger
from .info import ClientInfo, RegistrationState
from .message import Message, nick_of, pong

# Numerics that mean we are not (or no longer) in the named channel
CHANNEL_ERROR_CODES = ("403", "405", "437", "471", "473", "474", "475", "476")
# Channel membership prefixes that may precede a nick in a NAMES reply
MEMBERSHIP_PREFIXES = "@+%&~"

Handler = Callable[[Message, ClientInfo], list[Message]]


class RegistrationHandshake:
    """Applies the side effects of an inbound message to ClientInfo.

    Every handler returns the messages that must be sent in response, in
    order. The registration state lives on ``ClientInfo.state`` and moves
    from UNREGISTERED to REGISTERED exactly once, on the first NOTICE.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {
            "PING": self._on_ping,
            "NOTICE": self._on_notice,
            "001": self._on_welcome,
            "353": self._on_names_reply,
            "366": self._on_names_end,
            "NICK": self._on_nick,
            "JOIN": self._on_join,
            "PART": self._on_part,
            "KICK": self._on_kick,
            "QUIT": self._on_quit,
        }
        for code in CHANNEL_ERROR_CODES:
            self._handlers[code] = self._on_channel_error

    def update(self, message: Message, info: ClientInfo) -> list[Message]:
        handler = self._handlers.get(message.code)
        if handler is None:
            return []
        return handler(message, info)

    @staticmethod
    def _on_ping(message: Message, info: ClientInfo) -> list[Message]:
        return [pong(message)]

    @staticmethod
    def _on_notice(message: Message, info: ClientInfo) -> list[Message]:
        if info.state is not RegistrationState.UNREGISTERED:
            return []
        info.state = RegistrationState.REGISTERED
        logger.log_event("irc", "register", user=info.nick, realname=info.realname)
        return [
            Message.new("NICK", info.nick),
            Message.new("USER", f"{info.user} * * :{info.realname}"),
        ]

    @staticmethod
    def _on_welcome(message: Message, info: ClientInfo) -> list[Message]:
        logger.log_event("irc", "welcome", user=info.nick, channels=len(info.autojoin))
        return [Message.new("JOIN", channel) for channel in info.autojoin]

    @staticmethod
    def _on_names_reply(message: Message, info: ClientInfo) -> list[Message]:
        names = message.trailing()
        if names is None:
            return []
        info.roster.prep(
            " ".join(name.lstrip(MEMBERSHIP_PREFIXES) for name in names.split())
        )
        return []

    @staticmethod
    def _on_names_end(message: Message, info: ClientInfo) -> list[Message]:
        channel = message.param(2)
        if channel:
            info.roster.commit(channel)
        return []

    @staticmethod
    def _on_nick(message: Message, info: ClientInfo) -> list[Message]:
        old = nick_of(message)
        new = message.param(1)
        if not old or not new:
            return []
        info.roster.rename(old, new)
        if old == info.nick:
            info.nick = new
            logger.log_event("irc", "nick_changed", user=new, old_nick=old)
        return []

    @staticmethod
    def _on_join(message: Message, info: ClientInfo) -> list[Message]:
        nick = nick_of(message)
        channel = message.param(1)
        if not nick or not channel:
            return []
        if nick == info.nick:
            if channel not in info.channels:
                info.channels.add(channel)
                info.roster.ensure(channel)
                logger.log_event("irc", "joined", user=info.nick, channel=channel)
        else:
            info.roster.add(channel, nick)
        return []

    @staticmethod
    def _on_part(message: Message, info: ClientInfo) -> list[Message]:
        nick = nick_of(message)
        channel = message.param(1)
        if not nick or not channel:
            return []
        if nick == info.nick:
            info.leave(channel)
            logger.log_event("irc", "parted", user=info.nick, channel=channel)
        else:
            info.roster.remove(channel, nick)
        return []

    @staticmethod
    def _on_kick(message: Message, info: ClientInfo) -> list[Message]:
        channel = message.param(1)
        kicked = message.param(2)
        if not channel or not kicked:
            return []
        if kicked == info.nick:
            info.leave(channel)
            logger.log_event(
                "irc", "kicked", level=logging.WARNING, user=info.nick, channel=channel
            )
        else:
            info.roster.remove(channel, kicked)
        return []

    @staticmethod
    def _on_quit(message: Message, info: ClientInfo) -> list[Message]:
        nick = nick_of(message)
        if not nick or nick == info.nick:
            return []
        left = info.roster.forget(nick)
        if left:
            logger.log_event(
                "roster",
                "quit",
                level=logging.DEBUG,
                nick=nick,
                channels=", ".join(left),
                reason=message.trailing() or "",
            )
        return []

    @staticmethod
    def _on_channel_error(message: Message, info: ClientInfo) -> list[Message]:
        channel = message.param(2)
        if not channel:
            return []
        logger.log_event(
            "irc",
            "channel_error",
            level=logging.WARNING,
            user=info.nick,
            channel=channel,
            code=message.code,
            reason=message.trailing() or "",
        )
        info.leave(channel)
        return []
