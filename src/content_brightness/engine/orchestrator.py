"""Top-level control state machine.

Every method here runs on the control loop. The only suspension point is
the luma sample; its result is evaluated against whatever state is current
when it comes back.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

from content_brightness.config import Settings
from content_brightness.drivers.base import BrightnessDriver
from content_brightness.engine.animator import MotionAnimator
from content_brightness.engine.gate import DebounceGate
from content_brightness.engine.learner import TargetLearner
from content_brightness.engine.scheduler import Scheduler
from content_brightness.engine.training import TrainingSession
from content_brightness.errors import (
    BrightnessDriverError,
    InvariantViolation,
    LumaSampleError,
)
from content_brightness.logger import logger
from content_brightness.model.models import (
    Animating,
    ControlState,
    EngineSnapshot,
    Idle,
    KeyEvent,
    KeyPress,
    Training,
    TriggerEvent,
)

log = logger.getChild("orchestrator")

LumaSource = Callable[[], Awaitable[float | None]]

UNKNOWN_LUMA = 0.5


class ControlOrchestrator:
    """Turn gated triggers and key presses into animation or training."""

    def __init__(
        self,
        driver: BrightnessDriver,
        sampler: LumaSource,
        scheduler: Scheduler,
        settings: Settings | None = None,
        *,
        learner: TargetLearner | None = None,
        gate: DebounceGate | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.settings = settings or Settings()
        self._driver = driver
        self._sampler = sampler
        self._clock = clock

        self.learner = learner or TargetLearner(
            self.settings.light_target, self.settings.dark_target
        )
        self.gate = gate or DebounceGate(self.settings.debounce_interval, clock)
        self.animator = MotionAnimator(
            driver,
            scheduler,
            tick_interval=self.settings.tick_interval,
            ease_factor=self.settings.ease_factor,
            threshold=self.settings.animation_threshold,
            on_settled=self._on_settled,
            on_failed=self._on_driver_failure,
        )
        self.training = TrainingSession(
            driver,
            self.learner,
            scheduler,
            delay=self.settings.training_delay,
            on_committed=self._on_committed,
            on_failed=self._on_driver_failure,
        )

        self.state: ControlState = Idle()
        self.last_luma = UNKNOWN_LUMA
        self.sample_in_flight = False
        self._tasks: set[asyncio.Task[None]] = set()

        try:
            level = driver.get()
        except BrightnessDriverError:
            log.exception("could not read initial brightness")
            self.current_target = UNKNOWN_LUMA
            self.last_settled_hw: float | None = None
        else:
            self.current_target = level
            self.last_settled_hw = level

    # ------------------------------------------------------------------
    # state bookkeeping

    def _set_state(self, state: ControlState) -> None:
        if state != self.state:
            log.debug("state %s -> %s", self.state.name, state.name)
        self.state = state
        if __debug__:
            self._check_invariants()

    def _check_invariants(self) -> None:
        if self.animator.active and self.training.active:
            msg = "animation and training timers are both active"
            raise InvariantViolation(msg)
        if isinstance(self.state, Animating) != self.animator.active:
            msg = f"state {self.state.name} disagrees with animation timer"
            raise InvariantViolation(msg)
        if isinstance(self.state, Training) != self.training.active:
            msg = f"state {self.state.name} disagrees with training timer"
            raise InvariantViolation(msg)

    def _on_settled(self, level: float) -> None:
        self.last_settled_hw = level
        self._set_state(Idle())

    def _on_committed(self, level: float) -> None:
        self.last_settled_hw = level
        self.current_target = level
        self._set_state(Idle())

    def _on_driver_failure(self, error: BrightnessDriverError) -> None:
        log.error("driver failure, returning to idle: %s", error)
        self.animator.cancel()
        self.training.cancel()
        self._set_state(Idle())

    # ------------------------------------------------------------------
    # triggers

    def handle_trigger(self, event: TriggerEvent) -> asyncio.Task[None] | None:
        """Gate a trigger and start a sample cycle for it.

        Returns the sampling task, or None if the trigger was dropped.
        """
        if not self.gate.admit(event):
            return None

        # pending training is resolved before the new cycle reads the model
        if isinstance(self.state, Training):
            self.training.commit_now()

        if self.sample_in_flight:
            log.debug("[%s] sample already in flight", event.reason.value)
            return None

        self.sample_in_flight = True
        task = asyncio.get_running_loop().create_task(self._sample_cycle(event))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _sample_cycle(self, event: TriggerEvent) -> None:
        try:
            luma = await self._sampler()
        except LumaSampleError as e:
            log.warning("[%s] luma sample failed: %s", event.reason.value, e)
            luma = None
        except Exception:
            log.exception("[%s] unexpected luma sampler error", event.reason.value)
            luma = None
        finally:
            self.sample_in_flight = False

        if luma is None:
            log.warning("[%s] no luma sample, event dropped", event.reason.value)
            return
        self.evaluate(luma, event)

    def evaluate(self, luma: float, event: TriggerEvent) -> None:
        """Compare the learned target for ``luma`` with the current one."""
        self.last_luma = luma
        if isinstance(self.state, Training):
            log.debug("[%s] training in progress, sample ignored", event.reason.value)
            return

        goal = self.learner.target_for(luma)
        if abs(goal - self.current_target) <= self.settings.target_tolerance:
            return

        log.info(
            "[%s] Luma: %.2f -> Target: %.2f", event.reason.value.upper(), luma, goal
        )
        try:
            self.animator.start(goal)
        except BrightnessDriverError as e:
            self._on_driver_failure(e)
            return
        self.current_target = goal
        self._set_state(Animating(goal))

    # ------------------------------------------------------------------
    # keys

    def handle_key(self, press: KeyPress) -> asyncio.Task[None] | None:
        trigger = press.as_trigger()
        if trigger is not None:
            return self.handle_trigger(trigger)
        if press.key is KeyEvent.BRIGHTNESS_KEY_PRESSED:
            self.on_brightness_key()
        return None

    def on_brightness_key(self) -> None:
        """Manual input wins: stop any motion and start learning."""
        if self.animator.active:
            log.info("brightness key detected, stopping animation")
            self.animator.cancel()
            self._set_state(Idle())

        try:
            self.last_settled_hw = self._driver.get()
        except BrightnessDriverError as e:
            self._on_driver_failure(e)
            return

        started_at = (
            self.state.started_at
            if isinstance(self.state, Training)
            else self._clock()
        )
        self.training.start(self.last_luma)
        observed = self.training.observed_luma
        self._set_state(
            Training(
                started_at=started_at,
                observed_luma=self.last_luma if observed is None else observed,
            )
        )

    # ------------------------------------------------------------------

    async def drain(self) -> None:
        """Wait for outstanding sample cycles."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def shutdown(self) -> None:
        """Stop both timers without learning anything."""
        self.animator.cancel()
        self.training.cancel()
        for task in list(self._tasks):
            task.cancel()
        self._set_state(Idle())

    def snapshot(self) -> EngineSnapshot:
        state = self.state
        return {
            "state": state.name,
            "animating_target": state.target if isinstance(state, Animating) else None,
            "training_luma": (
                state.observed_luma if isinstance(state, Training) else None
            ),
            "current_target": self.current_target,
            "last_settled_hw": self.last_settled_hw,
            "last_luma": self.last_luma,
            "sample_in_flight": self.sample_in_flight,
            "targets": self.learner.snapshot(),
            "admitted": self.gate.admitted,
            "dropped": self.gate.dropped,
        }
