"""Bounded queue between event sources and the control loop.

Watchers live on their own threads and call :meth:`EventChannel.publish_threadsafe`;
the consumer task hands events to the orchestrator one at a time in arrival
order.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from content_brightness.logger import logger
from content_brightness.model.models import KeyPress, TriggerEvent, TriggerReason

log = logger.getChild("channel")

Event = TriggerEvent | KeyPress


class EventChannel:
    def __init__(
        self,
        dispatch: Callable[[Event], object],
        *,
        maxsize: int = 64,
        settle_delays: dict[TriggerReason, float] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._dispatch = dispatch
        self._maxsize = maxsize
        self._settle_delays = settle_delays or {}
        self._clock = clock
        self._queue: asyncio.Queue[Event] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._consumer: asyncio.Task[None] | None = None
        self._delayed: set[asyncio.TimerHandle] = set()
        self.overflowed = 0

    @property
    def running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    def start(self) -> None:
        """Start consuming on the running loop."""
        self._loop = asyncio.get_running_loop()
        self._queue = asyncio.Queue(maxsize=self._maxsize)
        self._consumer = self._loop.create_task(self._consume())

    async def stop(self) -> None:
        for handle in self._delayed:
            handle.cancel()
        self._delayed.clear()
        if self._consumer is None:
            return
        self._consumer.cancel()
        try:
            await self._consumer
        except asyncio.CancelledError:
            pass
        self._consumer = None

    def _put(self, event: Event) -> None:
        if self._queue is None:
            msg = "channel is not started"
            raise RuntimeError(msg)
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            self.overflowed += 1
            log.warning("event queue full, dropping %s", event)

    def publish(self, event: Event) -> None:
        """Queue an event from the control loop, after its settle delay.

        Tab navigation keys wait as long as the tab change they stand for.
        """
        trigger = event if isinstance(event, TriggerEvent) else event.as_trigger()
        delay = 0.0
        if trigger is not None:
            delay = self._settle_delays.get(trigger.reason, 0.0)
        if delay > 0 and self._loop is not None:
            handle: asyncio.TimerHandle

            def release() -> None:
                self._delayed.discard(handle)
                self._put(event)

            handle = self._loop.call_later(delay, release)
            self._delayed.add(handle)
        else:
            self._put(event)

    def publish_threadsafe(self, event: Event) -> None:
        """Queue an event from any thread."""
        if self._loop is None:
            msg = "channel is not started"
            raise RuntimeError(msg)
        self._loop.call_soon_threadsafe(self.publish, event)

    def trigger(self, reason: TriggerReason) -> None:
        self.publish_threadsafe(TriggerEvent(reason, self._clock()))

    async def _consume(self) -> None:
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            try:
                self._dispatch(event)
            except Exception as e:  # keep consuming after a bad event
                log.error("event dispatch error (%s): %s", event, e, exc_info=True)
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued event has been dispatched."""
        if self._queue is not None:
            await self._queue.join()
