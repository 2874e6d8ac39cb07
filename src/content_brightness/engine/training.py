from collections.abc import Callable

from content_brightness.drivers.base import BrightnessDriver
from content_brightness.engine.learner import TargetLearner
from content_brightness.engine.scheduler import Scheduler, TimerHandle
from content_brightness.errors import BrightnessDriverError
from content_brightness.logger import logger

log = logger.getChild("training")


class TrainingSession:
    """ユーザーの手動調整が落ち着くのを待ってから学習結果を確定する."""

    def __init__(
        self,
        driver: BrightnessDriver,
        learner: TargetLearner,
        scheduler: Scheduler,
        *,
        delay: float = 5.0,
        on_committed: Callable[[float], None] | None = None,
        on_failed: Callable[[BrightnessDriverError], None] | None = None,
    ) -> None:
        self._driver = driver
        self._learner = learner
        self._scheduler = scheduler
        self.delay = delay
        self.on_committed = on_committed
        self.on_failed = on_failed

        self.observed_luma: float | None = None
        self._timer: TimerHandle | None = None

    @property
    def active(self) -> bool:
        return self._timer is not None

    def start(self, observed_luma: float) -> None:
        """Open (or extend) the capture window.

        A session that is already running keeps the luma it started with;
        only the deadline moves.
        """
        if self._timer is not None:
            self._timer.cancel()
        else:
            self.observed_luma = observed_luma
            log.info("TRAINING: capturing adjustments (luma %.2f)", observed_luma)
        self._timer = self._scheduler.call_later(self.delay, self.commit_now)

    def cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.observed_luma = None

    def commit_now(self) -> float | None:
        """Learn the current hardware level. No-op unless a session is open."""
        if self._timer is None or self.observed_luma is None:
            return None
        observed = self.observed_luma
        self.cancel()

        try:
            final_hw = self._driver.get()
        except BrightnessDriverError as e:
            log.exception("could not read brightness to commit training")
            if self.on_failed is not None:
                self.on_failed(e)
            return None

        self._learner.commit(observed, final_hw)
        if self.on_committed is not None:
            self.on_committed(final_hw)
        return final_hw
