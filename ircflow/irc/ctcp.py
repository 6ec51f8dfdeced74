"""CTCP quoting layers and tagged request extraction.

Two independent substitution tables are involved:

* the low-level (M-QUOTE) table makes NUL, CR, LF and the quote character
  itself safe for a line-oriented transport and is applied to whole lines;
* the CTCP (X-QUOTE) table escapes the tag delimiter and backslash inside a
  tagged segment.

Each table is applied in a single left-to-right pass so that the
self-escaping entry never interacts with the others.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace

from .message import Message, is_message, serialize

X_DELIM = "\x01"
M_QUOTE = "\x14"
X_QUOTE = "\\"

_M_QUOTE_MAP = {
    M_QUOTE: M_QUOTE + M_QUOTE,
    "\x00": M_QUOTE + "0",
    "\n": M_QUOTE + "n",
    "\r": M_QUOTE + "r",
}
_M_DEQUOTE_MAP = {v: k for k, v in _M_QUOTE_MAP.items()}

_X_QUOTE_MAP = {
    X_DELIM: X_QUOTE + "a",
    X_QUOTE: X_QUOTE + X_QUOTE,
}
_X_DEQUOTE_MAP = {v: k for k, v in _X_QUOTE_MAP.items()}


def _table_pattern(keys: list[str]) -> re.Pattern[str]:
    # Longest keys first so escape pairs win over their single-char prefix
    ordered = sorted(keys, key=len, reverse=True)
    return re.compile("|".join(re.escape(k) for k in ordered))


_M_QUOTE_RE = _table_pattern(list(_M_QUOTE_MAP))
_M_DEQUOTE_RE = _table_pattern(list(_M_DEQUOTE_MAP))
_X_QUOTE_RE = _table_pattern(list(_X_QUOTE_MAP))
_X_DEQUOTE_RE = _table_pattern(list(_X_DEQUOTE_MAP))


def low_level_quote(text: str) -> str:
    return _M_QUOTE_RE.sub(lambda m: _M_QUOTE_MAP[m.group(0)], text)


def low_level_dequote(text: str) -> str:
    """Reverse low_level_quote; an unknown escape pair is left as is."""
    return _M_DEQUOTE_RE.sub(lambda m: _M_DEQUOTE_MAP[m.group(0)], text)


def ctcp_quote(text: str) -> str:
    return _X_QUOTE_RE.sub(lambda m: _X_QUOTE_MAP[m.group(0)], text)


def ctcp_dequote(text: str) -> str:
    return _X_DEQUOTE_RE.sub(lambda m: _X_DEQUOTE_MAP[m.group(0)], text)


def tag(text: str) -> str:
    return f"{X_DELIM}{text}{X_DELIM}"


@dataclass(frozen=True, slots=True)
class CtcpRequest:
    command: str
    params: str = ""

    @classmethod
    def from_body(cls, body: str) -> CtcpRequest:
        """Split a tag body on its first space into command and params."""
        command, _, params = ctcp_dequote(body).partition(" ")
        return cls(command=command, params=params)

    def body(self) -> str:
        text = f"{self.command} {self.params}" if self.params else self.command
        return ctcp_quote(text)

    def to_tag(self) -> str:
        return tag(self.body())

    def __str__(self) -> str:
        return self.to_tag()


def extract(text: str) -> tuple[str, list[CtcpRequest]]:
    """Separate plain text from delimiter-wrapped CTCP requests.

    Requests are returned in order of appearance. An unterminated tag is
    kept verbatim, opening delimiter included, at the end of the remainder.
    """
    remainder: list[str] = []
    requests: list[CtcpRequest] = []
    segment: list[str] = []
    inside = False
    for char in text:
        if char == X_DELIM:
            if inside:
                requests.append(CtcpRequest.from_body("".join(segment)))
                segment.clear()
            inside = not inside
            continue
        if inside:
            segment.append(char)
        else:
            remainder.append(char)
    if inside:
        remainder.append(X_DELIM)
        remainder.extend(segment)
    return "".join(remainder), requests


def get_tag(text: str, name: str) -> CtcpRequest | None:
    _, requests = extract(text)
    for request in requests:
        if request.command == name:
            return request
    return None


def has_tag(text: str, name: str) -> bool:
    return get_tag(text, name) is not None


def _with_body(message: Message, body: str) -> Message:
    dest = message.param(1) or ""
    params = f"{dest} :{body}"
    return replace(
        message, params=params, raw=serialize(message.source, message.code, params)
    )


def extract_msg(message: Message) -> tuple[Message, list[CtcpRequest]]:
    """Pull CTCP requests out of a PRIVMSG/NOTICE body.

    Returns the message with its body reduced to the plain-text remainder,
    plus the requests. Any other command comes back unchanged with no
    requests.
    """
    if not is_message(message):
        return message, []
    body = message.trailing()
    if body is None:
        body = message.param(2) or ""
    remainder, requests = extract(body)
    if not requests:
        return message, []
    return _with_body(message, remainder), requests


def combine_msg(message: Message, requests: list[CtcpRequest]) -> Message:
    """Append tagged requests to a PRIVMSG/NOTICE body; other commands pass through."""
    if not is_message(message) or not requests:
        return message
    body = message.trailing()
    if body is None:
        body = message.param(2) or ""
    tags = "".join(request.to_tag() for request in requests)
    return _with_body(message, body + tags)
