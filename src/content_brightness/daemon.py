"""Wire collaborators, the event channel and the orchestrator together."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Protocol

from content_brightness.config import Settings
from content_brightness.drivers.base import BrightnessDriver
from content_brightness.engine.channel import Event, EventChannel
from content_brightness.engine.orchestrator import ControlOrchestrator, LumaSource
from content_brightness.engine.scheduler import LoopScheduler, Scheduler
from content_brightness.logger import logger
from content_brightness.model.models import (
    KeyEvent,
    KeyPress,
    TriggerEvent,
    TriggerReason,
)

log = logger.getChild("daemon")


class EventSource(Protocol):
    def start(self) -> None: ...

    def stop(self) -> None: ...


@dataclass
class Watchers:
    """Event sources with a ``start``/``stop`` lifecycle."""

    sources: list[EventSource] = field(default_factory=list)

    def start(self) -> None:
        for source in self.sources:
            source.start()

    def stop(self) -> None:
        for source in reversed(self.sources):
            source.stop()


class BrightnessDaemon:
    """Own one orchestrator and the channel feeding it."""

    def __init__(
        self,
        settings: Settings,
        driver: BrightnessDriver,
        sampler: LumaSource,
        *,
        scheduler: Scheduler | None = None,
        watchers: Watchers | None = None,
    ) -> None:
        self.settings = settings
        self.orchestrator = ControlOrchestrator(
            driver, sampler, scheduler or LoopScheduler(), settings
        )
        self.channel = EventChannel(
            self.dispatch,
            maxsize=settings.queue_size,
            settle_delays=settings.settle_delays,
        )
        self.watchers = watchers or Watchers()

    def dispatch(self, event: Event) -> None:
        if isinstance(event, KeyPress):
            self.orchestrator.handle_key(event)
        else:
            self.orchestrator.handle_trigger(event)

    def emit_trigger(self, reason: TriggerReason) -> None:
        """Thread-safe entry point for watchers."""
        self.channel.publish_threadsafe(TriggerEvent(reason, time.monotonic()))

    def emit_key(self, key: KeyEvent) -> None:
        """Thread-safe entry point for key hooks."""
        self.channel.publish_threadsafe(KeyPress(key, time.monotonic()))

    @property
    def running(self) -> bool:
        return self.channel.running

    async def start(self) -> None:
        self.channel.start()
        self.watchers.start()
        log.info("App started (interactive training mode)")
        self.channel.publish(TriggerEvent(TriggerReason.BOOTUP, time.monotonic()))

    async def stop(self) -> None:
        self.watchers.stop()
        await self.channel.stop()
        self.orchestrator.shutdown()
        log.info("stopped")


def create_daemon(settings: Settings) -> BrightnessDaemon:
    """Build a daemon around the real screen, backlight and input hooks."""
    from content_brightness.drivers.brightness import ScreenBrightnessDriver
    from content_brightness.watchers.active_window import ActiveWindowWatcher
    from content_brightness.watchers.keys import KeyListener
    from content_brightness.watchers.screen_capture import LumaSampler

    sampler = LumaSampler(capture_size=settings.capture_size)
    daemon = BrightnessDaemon(settings, ScreenBrightnessDriver(), sampler.sample_async)
    daemon.watchers.sources.extend(
        [
            ActiveWindowWatcher(daemon.emit_trigger, interval=settings.poll_interval),
            KeyListener(daemon.emit_key),
        ]
    )
    return daemon
