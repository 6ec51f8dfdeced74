"""IRC message parsing and serialization."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum, auto

from ..errors.internal import ParsingError

_LINE_RE = re.compile(r"^\s*(?::(\S+)\s+)?(\S+)(?:\s+(.*))?$", re.DOTALL)
_PARAM_RE = re.compile(r"(?<!\S)(:.*|\S+)", re.DOTALL)
_TRAILING_RE = re.compile(r"(?:^|\s):(.*)$", re.DOTALL)

# Commands whose first parameter is the conventional target
_TARGET_FIRST = frozenset(
    {
        "JOIN",
        "PART",
        "MODE",
        "TOPIC",
        "INVITE",
        "PRIVMSG",
        "NOTICE",
        "WHOIS",
        "WHOWAS",
        "KILL",
        "PING",
        "PONG",
        "SUMMON",
        "ISON",
    }
)
_TARGET_SECOND = frozenset({"KICK"})


class Direction(Enum):
    INCOMING = auto()
    OUTGOING = auto()


@dataclass(frozen=True, slots=True)
class Source:
    """Origin of a message; ``prefix`` is None when the line carried none."""

    prefix: str | None = None

    @property
    def is_sender(self) -> bool:
        return self.prefix is not None


NO_SOURCE = Source()


def serialize(source: Source, code: str, params: str) -> str:
    """Build the wire form (without CRLF) of a message."""
    body = f"{code} {params}" if params else code
    if source.prefix is not None:
        return f":{source.prefix} {body}"
    return body


@dataclass(frozen=True, slots=True)
class Message:
    direction: Direction
    source: Source
    code: str
    params: str
    raw: str = field(default="")

    @classmethod
    def new(cls, code: str, params: str = "", source: Source = NO_SOURCE) -> Message:
        """Create an outgoing message whose raw line is derived from its parts."""
        return cls(
            direction=Direction.OUTGOING,
            source=source,
            code=code,
            params=params,
            raw=serialize(source, code, params),
        )

    def tokens(self) -> list[str]:
        """All positional parameters; a trailing parameter keeps its spaces."""
        out: list[str] = []
        for token in _PARAM_RE.findall(self.params):
            if token.startswith(":"):
                out.append(token[1:])
                break
            out.append(token)
        return out

    def param(self, n: int) -> str | None:
        """Return the n-th (1-based) parameter or None when absent."""
        if n < 1:
            return None
        tokens = self.tokens()
        if n > len(tokens):
            return None
        return tokens[n - 1]

    def trailing(self) -> str | None:
        """Return the ``:``-prefixed final parameter without its colon."""
        match = _TRAILING_RE.search(self.params)
        if match is None:
            return None
        return match.group(1)

    @property
    def nick(self) -> str | None:
        return nick_of(self)

    @property
    def target(self) -> str | None:
        return target(self)

    def __str__(self) -> str:
        return self.raw


def strip_terminator(line: str) -> str:
    """Remove one wire line terminator, ``\\r\\n`` or a bare ``\\n``."""
    if line.endswith("\r\n"):
        return line[:-2]
    if line.endswith("\n"):
        return line[:-1]
    return line


def parse(line: str, *, terminated: bool = True) -> Message:
    """Parse one protocol line into an incoming Message.

    With ``terminated`` the line may still carry its wire terminator, which
    is excluded from ``raw``. Pass ``terminated=False`` for a line that was
    already trimmed and then dequoted, so a decoded CR/LF at the end stays
    part of the message. Raises ParsingError for blank or prefix-only lines.
    """
    raw = strip_terminator(line) if terminated else line
    match = _LINE_RE.match(raw)
    if match is None or match.group(2).startswith(":"):
        raise ParsingError("not an IRC message", data={"line": raw})
    prefix, code, params = match.groups()
    return Message(
        direction=Direction.INCOMING,
        source=Source(prefix),
        code=code,
        params=params or "",
        raw=raw,
    )


def pong(message: Message) -> Message:
    """Answer a PING by echoing its parameters unchanged."""
    return Message.new("PONG", message.params)


def nick_of(message: Message) -> str | None:
    """Nickname part of a ``nick!user@host`` prefix."""
    prefix = message.source.prefix
    if not prefix or "!" not in prefix:
        return None
    nick, _, rest = prefix.partition("!")
    if not nick or not rest:
        return None
    return nick


def target(message: Message) -> str | None:
    if message.code in _TARGET_FIRST:
        return message.param(1)
    if message.code in _TARGET_SECOND:
        return message.param(2)
    return None


def is_message(message: Message) -> bool:
    return message.code in ("PRIVMSG", "NOTICE")


def is_public(message: Message) -> bool:
    if not is_message(message):
        return False
    dest = target(message)
    return dest is not None and dest.startswith("#")
