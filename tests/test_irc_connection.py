from __future__ import annotations

import asyncio
from unittest.mock import patch

import pytest

from ircflow.errors.internal import ChannelClosedError, NetworkError
from ircflow.irc.connection import IRCReader, IRCWriter, ServerConnection
from ircflow.irc.events import Abort, EventChannel, Recv, Send
from tests.fixtures.streams import FakeStreamReader, FakeStreamWriter


class SleepRecorder:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def _events(channel: EventChannel):
    return channel.drain()


@pytest.mark.asyncio
async def test_reader_delivers_lines_then_aborts_on_eof():
    channel = EventChannel()
    stream = FakeStreamReader(b"PING a\r\n", b":srv 001 me :hi\n")
    reason = await IRCReader(stream, channel).run()
    assert reason == "connection closed by peer"
    assert _events(channel) == [
        Recv("PING a"),
        Recv(":srv 001 me :hi"),
        Abort("connection closed by peer"),
    ]


@pytest.mark.asyncio
async def test_reader_eof_is_not_retried():
    channel = EventChannel()
    sleep = SleepRecorder()
    stream = FakeStreamReader()
    await IRCReader(stream, channel, sleep=sleep).run()
    assert stream.calls == 1
    assert sleep.delays == []


@pytest.mark.asyncio
async def test_reader_backoff_sequence_then_abort():
    channel = EventChannel()
    sleep = SleepRecorder()
    stream = FakeStreamReader(*(OSError("boom") for _ in range(10)))
    reason = await IRCReader(stream, channel, sleep=sleep).run()
    assert sleep.delays == [5, 10, 20, 40, 80]
    assert stream.calls == 6
    events = _events(channel)
    assert len(events) == 1
    assert isinstance(events[0], Abort)
    assert "5 retries" in reason


@pytest.mark.asyncio
async def test_reader_success_resets_backoff():
    channel = EventChannel()
    sleep = SleepRecorder()
    stream = FakeStreamReader(
        OSError("one"),
        OSError("two"),
        b"PING ok\r\n",
        ConnectionResetError("three"),
        b"PING again\r\n",
    )
    await IRCReader(stream, channel, sleep=sleep).run()
    assert sleep.delays == [5, 10, 5]
    assert _events(channel) == [
        Recv("PING ok"),
        Recv("PING again"),
        Abort("connection closed by peer"),
    ]


@pytest.mark.asyncio
async def test_reader_decodes_invalid_bytes_with_replacement():
    channel = EventChannel()
    await IRCReader(FakeStreamReader(b"PRIVMSG #c :\xff\r\n"), channel).run()
    first = _events(channel)[0]
    assert first == Recv("PRIVMSG #c :�")


@pytest.mark.asyncio
async def test_writer_quotes_and_terminates_lines():
    stream = FakeStreamWriter()
    writer = IRCWriter(stream)
    await writer.write_line("PRIVMSG #c :a\nb")
    assert bytes(stream.buffer) == b"PRIVMSG #c :a\x14nb\r\n"


@pytest.mark.asyncio
async def test_writer_wraps_os_errors():
    stream = FakeStreamWriter()
    stream.fail_with = BrokenPipeError("gone")
    with pytest.raises(NetworkError) as exc_info:
        await IRCWriter(stream).write_line("QUIT")
    assert exc_info.value.data["line"] == "QUIT"


@pytest.mark.asyncio
async def test_attach_preseeds_pass_when_password_configured():
    conn = ServerConnection("irc.example.net", 6667, "s3cret")
    conn.attach(FakeStreamReader(), FakeStreamWriter())
    assert conn.channel.drain() == [Send("PASS s3cret")]

    no_pass = ServerConnection("irc.example.net", 6667)
    no_pass.attach(FakeStreamReader(), FakeStreamWriter())
    assert no_pass.channel.drain() == []


@pytest.mark.asyncio
async def test_open_failure_raises_network_error():
    conn = ServerConnection("irc.invalid", 6667)
    with patch(
        "ircflow.irc.connection.asyncio.open_connection",
        side_effect=ConnectionRefusedError("refused"),
    ):
        with pytest.raises(NetworkError) as exc_info:
            await conn.open(timeout=1)
    assert exc_info.value.data == {"host": "irc.invalid", "port": 6667}
    assert conn.reader is None


@pytest.mark.asyncio
async def test_open_success_and_close_cancels_reader():
    stream_reader = FakeStreamReader()
    stream_writer = FakeStreamWriter()

    async def fake_open(host, port, limit):
        return stream_reader, stream_writer

    conn = ServerConnection("irc.example.net", 6667)
    with patch("ircflow.irc.connection.asyncio.open_connection", side_effect=fake_open):
        await conn.open()

    # A reader that never returns until cancelled
    async def blocked() -> bytes:
        await asyncio.Event().wait()
        return b""

    stream_reader.readline = blocked  # type: ignore[method-assign]
    task = conn.start_reader()
    await asyncio.sleep(0)
    conn.channel.close()
    await conn.close()
    assert task.cancelled()
    assert stream_writer.closed


@pytest.mark.asyncio
async def test_close_collects_reader_that_crashed(caplog):
    conn = ServerConnection("irc.example.net", 6667)
    conn.attach(FakeStreamReader(RuntimeError("boom")), FakeStreamWriter())
    task = conn.start_reader()
    await asyncio.sleep(0.01)
    assert task.done()
    assert isinstance(conn.channel.drain()[-1], Abort)
    await conn.close()
    assert any(
        r.getMessage().startswith("[UNKNOWN] IRC reader failed: boom")
        for r in caplog.records
    )


@pytest.mark.asyncio
async def test_closed_channel_refuses_events(caplog):
    channel = EventChannel()
    channel.close()
    with pytest.raises(ChannelClosedError) as exc_info:
        channel.put(Send("PING x"))
    assert exc_info.value.data == {"event": "Send"}
    assert channel.send(Recv("PING x")) is False
    assert channel.drain() == []
    assert any(
        r.getMessage().startswith("[CHANNEL] Dropping event") for r in caplog.records
    )
