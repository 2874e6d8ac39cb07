import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field

from content_brightness.errors import BrightnessDriverError


class FakeClock:
    """手動で進める単調時計."""

    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@dataclass
class _Handle:
    when: float
    callback: Callable[[], None]
    interval: float | None = None
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose timers only fire when the test advances the clock."""

    def __init__(self, clock: FakeClock) -> None:
        self.clock = clock
        self._handles: list[_Handle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _Handle:
        handle = _Handle(self.clock.now + delay, callback)
        self._handles.append(handle)
        return handle

    def call_repeating(self, interval: float, callback: Callable[[], None]) -> _Handle:
        handle = _Handle(self.clock.now + interval, callback, interval)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> list[_Handle]:
        return [h for h in self._handles if not h.cancelled]

    def advance(self, seconds: float) -> None:
        end = self.clock.now + seconds
        while True:
            due = [h for h in self.pending if h.when <= end + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.clock.now = max(self.clock.now, handle.when)
            if handle.interval is None:
                self._handles.remove(handle)
            else:
                handle.when += handle.interval
            handle.callback()
        self.clock.now = end


@dataclass
class FakeDriver:
    """ハードウェア輝度のフェイク."""

    level: float = 0.6
    writes: list[float] = field(default_factory=list)
    fail_get: bool = False
    fail_set: bool = False

    def get(self) -> float:
        if self.fail_get:
            msg = "get rejected"
            raise BrightnessDriverError(msg)
        return self.level

    def set(self, level: float) -> None:
        if self.fail_set:
            msg = "set rejected"
            raise BrightnessDriverError(msg)
        self.level = level
        self.writes.append(level)


class FakeSampler:
    """Async luma source returning queued values (or raising queued errors)."""

    def __init__(self, *values: float | None | Exception) -> None:
        self.values = list(values)
        self.calls = 0
        self.gate: asyncio.Event | None = None
        self.on_call: Callable[[], None] | None = None

    async def __call__(self) -> float | None:
        self.calls += 1
        if self.on_call is not None:
            self.on_call()
        if self.gate is not None:
            await self.gate.wait()
        value = self.values.pop(0) if len(self.values) > 1 else self.values[0]
        if isinstance(value, Exception):
            raise value
        return value


