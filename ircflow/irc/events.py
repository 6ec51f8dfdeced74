"""Connection events and the single-consumer channel that carries them."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from ..errors.handling import log_error
from ..errors.internal import ChannelClosedError


@dataclass(frozen=True, slots=True)
class Send:
    line: str


@dataclass(frozen=True, slots=True)
class Recv:
    line: str


@dataclass(frozen=True, slots=True)
class Abort:
    reason: str


ConnEvent = Send | Recv | Abort


class EventChannel:
    """FIFO of ConnEvent values with many producers and one consumer.

    Once closed, ``put`` raises ChannelClosedError. ``send`` is the
    forgiving form used by producers: the refusal is logged and reported
    through the return value.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[ConnEvent] = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def put(self, event: ConnEvent) -> None:
        if self._closed:
            raise ChannelClosedError(
                "event channel closed", data={"event": type(event).__name__}
            )
        self._queue.put_nowait(event)

    def send(self, event: ConnEvent) -> bool:
        try:
            self.put(event)
        except ChannelClosedError as e:
            log_error("Dropping event", e, context=e.data)
            return False
        return True

    async def recv(self) -> ConnEvent:
        return await self._queue.get()

    def drain(self) -> list[ConnEvent]:
        """Remove and return every queued event without waiting."""
        events: list[ConnEvent] = []
        while not self._queue.empty():
            events.append(self._queue.get_nowait())
        return events

    def close(self) -> None:
        self._closed = True
