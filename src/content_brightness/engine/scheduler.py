"""Timers on the control loop.

The animator and training session only need "call me later" and "call me
every N seconds"; both are expressed over ``asyncio`` so every callback runs
on the same thread as event handling.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...

    def call_repeating(
        self, interval: float, callback: Callable[[], None]
    ) -> TimerHandle: ...


class _RepeatingHandle:
    """``call_later`` を再スケジュールして周期実行する."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ) -> None:
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle = loop.call_later(interval, self._run)

    def _run(self) -> None:
        if self._cancelled:
            return
        self._callback()
        # the callback may have cancelled us
        if not self._cancelled:
            self._handle = self._loop.call_later(self._interval, self._run)

    def cancel(self) -> None:
        self._cancelled = True
        self._handle.cancel()


class LoopScheduler:
    """Scheduler backed by an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        return self.loop.call_later(delay, callback)

    def call_repeating(
        self, interval: float, callback: Callable[[], None]
    ) -> TimerHandle:
        return _RepeatingHandle(self.loop, interval, callback)
