from collections.abc import Callable

from content_brightness.drivers.base import BrightnessDriver
from content_brightness.engine.scheduler import Scheduler, TimerHandle
from content_brightness.errors import BrightnessDriverError
from content_brightness.logger import logger

log = logger.getChild("animator")


class MotionAnimator:
    """Ease hardware brightness toward a target, one tick at a time.

    Each tick closes ``ease_factor`` of the remaining distance, so the
    motion never overshoots. Once within ``threshold`` the target is
    written exactly and ``on_settled`` is called.
    """

    def __init__(
        self,
        driver: BrightnessDriver,
        scheduler: Scheduler,
        *,
        tick_interval: float = 0.02,
        ease_factor: float = 0.1,
        threshold: float = 0.003,
        on_settled: Callable[[float], None] | None = None,
        on_failed: Callable[[BrightnessDriverError], None] | None = None,
    ) -> None:
        self._driver = driver
        self._scheduler = scheduler
        self.tick_interval = tick_interval
        self.ease_factor = ease_factor
        self.threshold = threshold
        self.on_settled = on_settled
        self.on_failed = on_failed

        self.target: float | None = None
        self.reference: float | None = None
        self._timer: TimerHandle | None = None

    @property
    def active(self) -> bool:
        return self._timer is not None

    def start(self, target: float) -> None:
        """Start easing toward ``target``; retarget in place if already moving.

        Raises:
            BrightnessDriverError: the starting level could not be read.

        """
        self.target = target
        if self.active:
            log.debug("retarget -> %.3f (ref %.3f)", target, self.reference)
            return
        self.reference = self._driver.get()
        self._timer = self._scheduler.call_repeating(self.tick_interval, self.tick)
        log.debug("animation start %.3f -> %.3f", self.reference, target)

    def _stop(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancel(self) -> float | None:
        """Stop where we are. Returns the last written level (None when idle)."""
        if not self.active:
            return None
        self._stop()
        log.info("animation cancelled at %.3f", self.reference)
        return self.reference

    def tick(self) -> None:
        if self.target is None or self.reference is None or not self.active:
            return
        try:
            diff = self.target - self.reference
            if abs(diff) < self.threshold:
                self._driver.set(self.target)
                self.reference = self.target
                self._stop()
                if self.on_settled is not None:
                    self.on_settled(self.target)
                return
            self.reference += diff * self.ease_factor
            self._driver.set(self.reference)
        except BrightnessDriverError as e:
            self._stop()
            log.exception("brightness write failed during animation")
            if self.on_failed is not None:
                self.on_failed(e)
