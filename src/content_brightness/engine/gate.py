import time
from collections.abc import Callable

from content_brightness.logger import logger
from content_brightness.model.models import TriggerEvent, TriggerReason

log = logger.getChild("gate")


class DebounceGate:
    """Drop triggers that arrive too close together.

    Title changes are debounced against the previous title change first,
    then every trigger is throttled against the last admitted one.
    """

    def __init__(
        self,
        interval: float = 0.5,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval = interval
        self._clock = clock
        self._last_admitted: float | None = None
        self._last_title_change: float | None = None
        self.admitted = 0
        self.dropped = 0

    def _too_soon(self, last: float | None, now: float) -> bool:
        return last is not None and now - last < self.interval

    def admit(self, event: TriggerEvent) -> bool:
        now = self._clock()

        if event.reason is TriggerReason.TITLE_CHANGE:
            if self._too_soon(self._last_title_change, now):
                self.dropped += 1
                log.debug("title change debounced")
                return False
            self._last_title_change = now

        if self._too_soon(self._last_admitted, now):
            self.dropped += 1
            log.debug("throttled %s", event.reason.value)
            return False

        self._last_admitted = now
        self.admitted += 1
        return True
