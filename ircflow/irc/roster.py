"""Per-channel member rosters built from NAMES replies and JOIN/PART traffic."""

from __future__ import annotations

import logging

from ..logs.logger import logger


class ChannelRoster:
    """Maps channel names to the set of nicknames known to be present.

    NAMES replies arrive in several 353 lines followed by one 366; the names
    are staged with :meth:`prep` and swapped in as a whole by :meth:`commit`.
    """

    def __init__(self) -> None:
        self._names: dict[str, set[str]] = {}
        self._pending: list[str] = []

    def prep(self, names: str) -> None:
        self._pending.extend(name for name in names.split() if name)

    def commit(self, channel: str) -> None:
        # Build the new entry first, then swap it in with a single assignment
        members = set(self._pending)
        self._pending = []
        self._names[channel] = members
        logger.log_event(
            "roster", "commit", level=logging.DEBUG, channel=channel, count=len(members)
        )

    def get(self, channel: str) -> set[str] | None:
        members = self._names.get(channel)
        return set(members) if members is not None else None

    def ensure(self, channel: str) -> None:
        """Create an empty entry unless one already exists."""
        self._names.setdefault(channel, set())

    def add(self, channel: str, nick: str) -> None:
        members = self._names.setdefault(channel, set())
        if nick in members:
            logger.log_event(
                "roster", "add_duplicate", level=logging.DEBUG, channel=channel, nick=nick
            )
            return
        members.add(nick)
        logger.log_event("roster", "add", level=logging.DEBUG, channel=channel, nick=nick)

    def remove(self, channel: str, nick: str) -> None:
        members = self._names.get(channel)
        if members is None or nick not in members:
            logger.log_event(
                "roster", "remove_absent", level=logging.DEBUG, channel=channel, nick=nick
            )
            return
        members.discard(nick)
        logger.log_event(
            "roster", "remove", level=logging.DEBUG, channel=channel, nick=nick
        )

    def drop(self, channel: str) -> None:
        if self._names.pop(channel, None) is None:
            logger.log_event(
                "roster", "drop_missing", level=logging.WARNING, channel=channel
            )
            return
        logger.log_event("roster", "drop", level=logging.DEBUG, channel=channel)

    def rename(self, old: str, new: str) -> None:
        """Replace a nickname in every roster that contains it."""
        for members in self._names.values():
            if old in members:
                members.discard(old)
                members.add(new)

    def forget(self, nick: str) -> list[str]:
        """Remove a nickname from every roster; returns the channels it left."""
        left = []
        for channel, members in self._names.items():
            if nick in members:
                members.discard(nick)
                left.append(channel)
        return left
