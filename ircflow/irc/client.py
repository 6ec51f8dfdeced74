"""Client orchestration: dispatch loop, registration side effects, outgoing API."""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any

from ..config.model import IRCConfig
from ..errors.handling import log_error
from ..errors.internal import NetworkError, ParsingError
from ..logs.logger import logger
from .connection import ServerConnection
from .ctcp import CtcpRequest, combine_msg, low_level_dequote
from .events import Abort, EventChannel, Recv, Send
from .info import ClientInfo
from .message import Message, parse
from .registration import RegistrationHandshake

MessageHandler = Callable[[Message], Any | Awaitable[Any]]


class IRCClient:
    """IRC client for one server connection.

    The dispatch loop is the only consumer of the event channel. It owns
    ``info`` and the writer; every outgoing line, whether produced by a
    protocol side effect or by the caller, travels through the channel as a
    Send event so that writes keep their order.
    """

    def __init__(self, config: IRCConfig, connection: ServerConnection | None = None) -> None:
        self.config = config
        self.connection = connection or ServerConnection(
            config.host, config.port, config.password, encoding=config.encoding
        )
        self.info = ClientInfo(
            nick=config.nick,
            user=config.user,
            realname=config.realname,
            autojoin=tuple(config.channels),
        )
        self.handshake = RegistrationHandshake()
        self.last_error: Exception | None = None
        self.abort_reason: str | None = None
        self._consumed = False

    @property
    def channel(self) -> EventChannel:
        return self.connection.channel

    async def connect(self) -> bool:
        """Open the connection and start the reader; False when it fails."""
        try:
            await self.connection.open()
        except NetworkError as e:
            self.last_error = e
            log_error("IRC connect failed", e, context={"nick": self.info.nick})
            return False
        self.connection.start_reader()
        return True

    async def messages(self) -> AsyncIterator[Message]:
        """Run the dispatch loop, yielding inbound messages in receipt order.

        The iterator ends after an Abort, from the reader or from ``stop``.
        It can only be consumed once.
        """
        if self._consumed:
            raise RuntimeError("dispatch loop already consumed")
        self._consumed = True
        try:
            while True:
                event = await self.channel.recv()
                if isinstance(event, Send):
                    await self._handle_send(event.line)
                elif isinstance(event, Recv):
                    message = await self._handle_recv(event.line)
                    if message is not None:
                        yield message
                elif isinstance(event, Abort):
                    self.abort_reason = event.reason
                    logger.log_event(
                        "irc", "abort", level=logging.WARNING, user=self.info.nick,
                        reason=event.reason,
                    )
                    await self._flush_sends()
                    break
        finally:
            await self._close()

    async def run(self, handler: MessageHandler | None = None) -> str | None:
        """Consume ``messages`` feeding each one to ``handler``.

        Handler exceptions are logged and never stop the loop. Returns the
        abort reason.
        """
        async for message in self.messages():
            if handler is None:
                continue
            try:
                result = handler(message)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:  # noqa: BLE001
                logger.log_event(
                    "irc",
                    "message_handler_error",
                    level=logging.ERROR,
                    user=self.info.nick,
                    error=str(e),
                    error_type=type(e).__name__,
                )
        return self.abort_reason

    def stop(self, reason: str = "client stop requested") -> bool:
        return self.channel.send(Abort(reason))

    def send_raw(self, line: str) -> bool:
        return self.channel.send(Send(line))

    def send_message(self, message: Message) -> bool:
        return self.send_raw(message.raw)

    def send(self, code: str, params: str = "") -> bool:
        return self.send_message(Message.new(code, params))

    def join(self, channel: str, key: str | None = None) -> bool:
        return self.send("JOIN", f"{channel} {key}" if key else channel)

    def part(self, channel: str, reason: str | None = None) -> bool:
        return self.send("PART", f"{channel} :{reason}" if reason else channel)

    def privmsg(self, target: str, text: str) -> bool:
        return self.send("PRIVMSG", f"{target} :{text}")

    def notice(self, target: str, text: str) -> bool:
        return self.send("NOTICE", f"{target} :{text}")

    def action(self, target: str, text: str) -> bool:
        return self.ctcp(target, "ACTION", text)

    def ctcp(self, target: str, command: str, params: str = "") -> bool:
        message = combine_msg(
            Message.new("PRIVMSG", f"{target} :"), [CtcpRequest(command, params)]
        )
        return self.send_message(message)

    def ctcp_reply(self, target: str, command: str, params: str = "") -> bool:
        message = combine_msg(
            Message.new("NOTICE", f"{target} :"), [CtcpRequest(command, params)]
        )
        return self.send_message(message)

    async def _handle_send(self, line: str) -> None:
        writer = self.connection.writer
        if writer is None:
            logger.log_event("irc", "send_not_connected", level=logging.WARNING, line=line)
            return
        try:
            await writer.write_line(line)
        except NetworkError as e:
            self.last_error = e
            log_error("IRC write failed", e, context={"nick": self.info.nick})
            return
        logger.log_event("irc", "send", level=logging.DEBUG, user=self.info.nick, line=line)

    async def _handle_recv(self, line: str) -> Message | None:
        logger.log_event("irc", "recv", level=logging.DEBUG, user=self.info.nick, line=line)
        try:
            message = parse(low_level_dequote(line), terminated=False)
        except ParsingError as e:
            log_error("Dropping unparsable line", e, context={"line": line})
            return None
        for reply in self.handshake.update(message, self.info):
            self.send_message(reply)
        return message

    async def _flush_sends(self) -> None:
        # Replies queued before the abort still go out ahead of QUIT
        for event in self.channel.drain():
            if isinstance(event, Send):
                await self._handle_send(event.line)

    async def _close(self) -> None:
        writer = self.connection.writer
        if writer is not None:
            try:
                await writer.write_line("QUIT")
            except NetworkError as e:
                self.last_error = e
                logger.log_event(
                    "irc", "quit_failed", level=logging.DEBUG, user=self.info.nick,
                    error=str(e),
                )
        self.channel.close()
        await self.connection.close()
