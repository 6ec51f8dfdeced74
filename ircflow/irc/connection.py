"""TCP connection, reader loop with retry/backoff, and line writer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..constants import (
    CONNECT_TIMEOUT,
    READ_LINE_LIMIT,
    READ_RETRY_BASE_DELAY,
    READ_RETRY_LIMIT,
)
from ..errors.handling import log_error
from ..errors.internal import NetworkError
from ..logs.logger import logger
from .ctcp import low_level_quote
from .events import Abort, EventChannel, Recv, Send
from .message import strip_terminator

SleepFunc = Callable[[float], Awaitable[None]]


class IRCReader:
    """Reads lines from the read half of the stream and produces Recv events.

    Read errors are retried with exponential backoff; a fresh backoff
    sequence starts for every line, so one good read resets the delay.
    End-of-stream is final. Whatever ends the loop, an Abort event is
    emitted last.
    """

    def __init__(
        self,
        stream: asyncio.StreamReader,
        channel: EventChannel,
        *,
        encoding: str = "utf-8",
        retry_limit: int = READ_RETRY_LIMIT,
        base_delay: float = READ_RETRY_BASE_DELAY,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self.stream = stream
        self.channel = channel
        self.encoding = encoding
        self.retry_limit = retry_limit
        self.base_delay = base_delay
        self._sleep = sleep

    async def run(self) -> str:
        reason = "reader stopped"
        logger.log_event("irc", "reader_start", level=logging.DEBUG)
        try:
            while True:
                line = await self._read_line()
                if line is None:
                    reason = "connection closed by peer"
                    logger.log_event("irc", "reader_eof")
                    break
                self.channel.send(Recv(line))
        except asyncio.CancelledError:
            reason = "reader cancelled"
            raise
        except (OSError, ValueError) as e:
            reason = f"read failed after {self.retry_limit} retries: {e}"
            log_error(
                "IRC read failed",
                NetworkError(reason),
                context={"retries": self.retry_limit},
            )
        finally:
            if not self.channel.closed:
                self.channel.send(Abort(reason))
            logger.log_event("irc", "reader_stop", level=logging.DEBUG, reason=reason)
        return reason

    async def _read_line(self) -> str | None:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.retry_limit + 1),
            wait=wait_exponential(multiplier=self.base_delay),
            retry=retry_if_exception_type((OSError, ValueError)),
            before_sleep=self._log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        data = b""
        async for attempt in retrying:
            with attempt:
                data = await self.stream.readline()
        if not data:
            return None
        return strip_terminator(data.decode(self.encoding, errors="replace"))

    @staticmethod
    def _log_retry(retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        logger.log_event(
            "irc",
            "read_retry",
            level=logging.WARNING,
            attempt=retry_state.attempt_number,
            delay=delay,
            error=str(error),
        )


class IRCWriter:
    """Owns the write half of the stream; quotes and terminates each line."""

    def __init__(self, stream: asyncio.StreamWriter, *, encoding: str = "utf-8") -> None:
        self.stream = stream
        self.encoding = encoding

    async def write_line(self, line: str) -> None:
        data = f"{low_level_quote(line)}\r\n".encode(self.encoding, errors="replace")
        try:
            self.stream.write(data)
            await self.stream.drain()
        except OSError as e:
            raise NetworkError(f"write failed: {e}", data={"line": line}) from e

    async def close(self) -> None:
        if self.stream.is_closing():
            return
        self.stream.close()
        try:
            await self.stream.wait_closed()
        except OSError as e:
            logger.log_event(
                "irc", "writer_close_error", level=logging.DEBUG, error=str(e)
            )


class ServerConnection:
    """A single server connection and the event channel it feeds.

    ``open`` connects and splits the stream into an IRCReader and an
    IRCWriter. When a password is configured a PASS line is queued before
    anything else.
    """

    def __init__(
        self,
        host: str,
        port: int,
        password: str | None = None,
        *,
        encoding: str = "utf-8",
        channel: EventChannel | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.password = password
        self.encoding = encoding
        self.channel = channel or EventChannel()
        self.reader: IRCReader | None = None
        self.writer: IRCWriter | None = None
        self._reader_task: asyncio.Task[str] | None = None

    async def open(self, timeout: float = CONNECT_TIMEOUT) -> None:
        logger.log_event("irc", "connect_start", server=self.host, port=self.port)
        try:
            stream_reader, stream_writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port, limit=READ_LINE_LIMIT),
                timeout=timeout,
            )
        except (OSError, TimeoutError) as e:
            raise NetworkError(
                f"could not connect to {self.host}:{self.port}: {e or type(e).__name__}",
                data={"host": self.host, "port": self.port},
            ) from e
        self.attach(stream_reader, stream_writer)
        logger.log_event("irc", "connected", server=self.host, port=self.port)

    def attach(
        self,
        stream_reader: asyncio.StreamReader,
        stream_writer: asyncio.StreamWriter,
        **reader_options: object,
    ) -> None:
        """Take ownership of an already open stream pair."""
        if self.password:
            self.channel.send(Send(f"PASS {self.password}"))
        self.reader = IRCReader(
            stream_reader, self.channel, encoding=self.encoding, **reader_options  # type: ignore[arg-type]
        )
        self.writer = IRCWriter(stream_writer, encoding=self.encoding)

    def start_reader(self) -> asyncio.Task[str]:
        if self.reader is None:
            raise NetworkError("connection is not open")
        self._reader_task = asyncio.create_task(
            self.reader.run(), name=f"irc-reader-{self.host}:{self.port}"
        )
        return self._reader_task

    async def close(self) -> None:
        task = self._reader_task
        self._reader_task = None
        if task is not None:
            if not task.done():
                task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:  # noqa: BLE001
                log_error(
                    "IRC reader failed", e, context={"host": self.host, "port": self.port}
                )
        if self.writer is not None:
            await self.writer.close()
        logger.log_event("irc", "disconnected", server=self.host, port=self.port)
