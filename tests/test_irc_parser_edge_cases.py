from __future__ import annotations

import pytest

from ircflow.errors.internal import ParsingError
from ircflow.irc.message import parse


def test_parse_malformed_missing_spaces():  # type: ignore[no-untyped-def]
    raw = ":nick!user@hostPRIVMSG#chan:hello"  # missing space before command
    # A prefix with nothing after it carries no command token
    with pytest.raises(ParsingError) as exc_info:
        parse(raw)
    assert exc_info.value.data["line"] == raw


def test_parse_numeric_with_empty_trailing():  # type: ignore[no-untyped-def]
    msg = parse(":srv 353 alice = #chan :")
    assert msg.code == "353"
    assert msg.trailing() == ""
    assert msg.param(4) == ""


def test_parse_keeps_trailing_whitespace_in_params():  # type: ignore[no-untyped-def]
    msg = parse(":a!u@h PRIVMSG #c :padded   \r\n")
    assert msg.trailing() == "padded   "
    assert msg.raw == ":a!u@h PRIVMSG #c :padded   "


def test_parse_tab_separated_tokens():  # type: ignore[no-untyped-def]
    msg = parse("PING\tserver.example")
    assert msg.code == "PING"
    assert msg.params == "server.example"


def test_param_beyond_trailing_is_none():  # type: ignore[no-untyped-def]
    msg = parse(":a!u@h PRIVMSG #c :one two three")
    assert msg.param(2) == "one two three"
    assert msg.param(3) is None
    assert msg.tokens() == ["#c", "one two three"]


def test_server_prefix_has_no_nick():  # type: ignore[no-untyped-def]
    msg = parse(":irc.example.net 001 alice :Welcome")
    assert msg.source.prefix == "irc.example.net"
    assert msg.nick is None


def test_parse_tolerates_leading_whitespace():  # type: ignore[no-untyped-def]
    msg = parse("  :srv.example PING :token")
    assert msg.source.prefix == "srv.example"
    assert msg.code == "PING"
    assert msg.trailing() == "token"
    assert msg.raw == "  :srv.example PING :token"
    assert parse("\tQUIT").code == "QUIT"
