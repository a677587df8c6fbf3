from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol

TickCallback = Callable[[], None]


class Ticker(Protocol):
    """Schedules one callback at a time, one interval ahead."""

    @property
    def active(self) -> bool: ...

    def schedule(self, callback: TickCallback) -> None: ...

    def cancel(self) -> None: ...


class AsyncioTicker:
    """Countdown driver backed by ``loop.call_later``.

    Scheduling always cancels the pending handle first, so a ticker never has
    more than one callback in flight.
    """

    def __init__(
        self,
        interval: float = 1.0,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.interval = interval
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def active(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: TickCallback) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.interval, self._fire, callback)

    def _fire(self, callback: TickCallback) -> None:
        self._handle = None
        callback()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
