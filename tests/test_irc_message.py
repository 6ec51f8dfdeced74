from __future__ import annotations

import pytest

from ircflow.errors.internal import ParsingError
from ircflow.irc.message import (
    NO_SOURCE,
    Direction,
    Message,
    Source,
    is_message,
    is_public,
    nick_of,
    parse,
    pong,
    serialize,
    strip_terminator,
    target,
)


def test_parse_full_line_keeps_raw_verbatim():
    line = ":tester!u@h PRIVMSG #chan :Hello there  world"
    msg = parse(line + "\r\n")
    assert msg.direction is Direction.INCOMING
    assert msg.source == Source("tester!u@h")
    assert msg.code == "PRIVMSG"
    assert msg.params == "#chan :Hello there  world"
    assert msg.raw == line


def test_parse_without_prefix():
    msg = parse("PING server.example")
    assert msg.source is not None
    assert not msg.source.is_sender
    assert msg.code == "PING"
    assert msg.params == "server.example"


def test_parse_accepts_bare_newline_and_code_only():
    msg = parse("QUIT\n")
    assert msg.code == "QUIT"
    assert msg.params == ""
    assert msg.raw == "QUIT"


def test_parse_trims_one_terminator_only():
    assert parse("PRIVMSG #c :a\r\r\n").trailing() == "a\r"
    assert parse("PRIVMSG #c :a\r\n", terminated=False).trailing() == "a\r\n"
    assert strip_terminator("x\n\n") == "x\n"
    assert strip_terminator("x") == "x"


@pytest.mark.parametrize("line", ["", "   ", "\r\n", ":prefix.only"])
def test_parse_rejects_lines_without_code(line):
    with pytest.raises(ParsingError) as exc_info:
        parse(line)
    assert "line" in exc_info.value.data


def test_param_is_one_based_and_trailing_consumes_rest():
    msg = parse(":srv 353 alice = #chan :@op +voice plain")
    assert msg.param(1) == "alice"
    assert msg.param(2) == "="
    assert msg.param(3) == "#chan"
    assert msg.param(4) == "@op +voice plain"
    assert msg.param(5) is None
    assert msg.param(0) is None


def test_trailing_uses_first_colon_at_token_start():
    msg = parse(":srv NOTICE #chan a:b :time is 12:30")
    assert msg.trailing() == "time is 12:30"
    assert msg.param(2) == "a:b"
    assert parse("JOIN #x").trailing() is None


def test_serialize_with_and_without_source():
    assert serialize(Source("me!u@h"), "PRIVMSG", "#c :hi") == ":me!u@h PRIVMSG #c :hi"
    assert serialize(NO_SOURCE, "NICK", "alice") == "NICK alice"
    assert serialize(NO_SOURCE, "QUIT", "") == "QUIT"


@pytest.mark.parametrize(
    "source,code,params",
    [
        (NO_SOURCE, "PING", ":irc.example.net"),
        (Source("nick!user@host"), "PRIVMSG", "#chan :hello  spaced :colons"),
        (Source("irc.example.net"), "001", "alice :Welcome to the network"),
        (NO_SOURCE, "QUIT", ""),
    ],
)
def test_parse_serialize_round_trip(source, code, params):
    raw = serialize(source, code, params)
    parsed = parse(raw)
    assert parsed.raw == raw
    assert (parsed.source, parsed.code, parsed.params) == (source, code, params)


def test_new_message_is_outgoing_with_derived_raw():
    msg = Message.new("JOIN", "#x")
    assert msg.direction is Direction.OUTGOING
    assert msg.raw == "JOIN #x"
    assert str(msg) == "JOIN #x"


def test_pong_echoes_params_unchanged():
    ping = parse("PING :irc.example.net extra")
    reply = pong(ping)
    assert reply.code == "PONG"
    assert reply.params == ping.params
    assert reply.raw == "PONG :irc.example.net extra"
    assert reply.direction is Direction.OUTGOING


def test_nick_of_requires_user_host_prefix():
    assert nick_of(parse(":bob!u@h JOIN #x")) == "bob"
    assert nick_of(parse(":irc.example.net NOTICE * :hi")) is None
    assert nick_of(parse("PING x")) is None
    assert nick_of(parse(":!u@h JOIN #x")) is None
    assert parse(":bob!u@h JOIN #x").nick == "bob"


def test_target_by_command():
    assert target(parse(":a!u@h PRIVMSG #chan :hi")) == "#chan"
    assert target(parse(":a!u@h JOIN :#chan")) == "#chan"
    assert target(parse(":a!u@h KICK #chan bob :bye")) == "bob"
    assert target(parse("PING server.example")) == "server.example"
    assert target(parse(":srv 001 alice :Welcome")) is None
    assert parse(":a!u@h TOPIC #t :new").target == "#t"


def test_is_message_and_is_public():
    public = parse(":a!u@h PRIVMSG #chan :hi")
    private = parse(":a!u@h NOTICE alice :psst")
    other = parse(":a!u@h JOIN #chan")
    assert is_message(public) and is_public(public)
    assert is_message(private) and not is_public(private)
    assert not is_message(other) and not is_public(other)
