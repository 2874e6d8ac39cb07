from unittest.mock import Mock

import pytest
from fakes import FakeDriver, ManualScheduler

from content_brightness.engine.animator import MotionAnimator

TICK = 0.02


@pytest.fixture
def animator(driver: FakeDriver, scheduler: ManualScheduler) -> MotionAnimator:
    return MotionAnimator(driver, scheduler, tick_interval=TICK, on_settled=Mock())


class TestMotionAnimator:
    """指数イージングによる輝度アニメーションのテスト"""

    @pytest.mark.parametrize(
        ("start", "target"),
        [(0.6, 0.45), (0.0, 1.0), (1.0, 0.0), (0.2, 0.25), (0.9, 0.897)],
    )
    def test_converges_monotonically(
        self,
        driver: FakeDriver,
        scheduler: ManualScheduler,
        animator: MotionAnimator,
        start: float,
        target: float,
    ) -> None:
        # Given: 任意の開始値と目標値
        driver.level = start
        animator.start(target)

        # When: 収束するまでティックを進める
        ticks = 0
        while animator.active and ticks < 200:
            scheduler.advance(TICK)
            ticks += 1

        # Then: 有限回で目標値ちょうどに到達し、距離は単調に減少する
        assert not animator.active
        assert ticks <= 100
        assert driver.writes[-1] == target
        distances = [abs(target - w) for w in driver.writes]
        assert all(b < a for a, b in zip(distances, distances[1:]))
        animator.on_settled.assert_called_once_with(target)

    def test_first_step_is_ten_percent(
        self, driver: FakeDriver, scheduler: ManualScheduler, animator: MotionAnimator
    ) -> None:
        driver.level = 0.6
        animator.start(0.4)
        scheduler.advance(TICK)
        assert driver.writes == [pytest.approx(0.58)]

    def test_retarget_keeps_reference(
        self, driver: FakeDriver, scheduler: ManualScheduler, animator: MotionAnimator
    ) -> None:
        driver.level = 0.6
        animator.start(0.4)
        scheduler.advance(TICK * 3)
        ref = animator.reference

        # hardware drifted externally; a retarget must not re-read it
        driver.level = 0.1
        animator.start(1.0)

        assert animator.reference == ref
        assert animator.target == 1.0
        assert len(scheduler.pending) == 1

    def test_start_when_idle_reads_hardware(
        self, driver: FakeDriver, animator: MotionAnimator
    ) -> None:
        driver.level = 0.33
        animator.start(0.5)
        assert animator.reference == 0.33

    def test_cancel_leaves_last_written_value(
        self, driver: FakeDriver, scheduler: ManualScheduler, animator: MotionAnimator
    ) -> None:
        driver.level = 0.6
        animator.start(0.45)
        scheduler.advance(TICK * 2)
        written = driver.level

        assert animator.cancel() == pytest.approx(written)
        scheduler.advance(1.0)

        assert driver.level == written
        assert not animator.active
        animator.on_settled.assert_not_called()

    def test_cancel_when_idle_returns_none(self, animator: MotionAnimator) -> None:
        assert animator.cancel() is None

    def test_driver_failure_stops_animation(
        self, driver: FakeDriver, scheduler: ManualScheduler
    ) -> None:
        on_failed = Mock()
        animator = MotionAnimator(driver, scheduler, on_failed=on_failed)
        animator.start(0.2)
        driver.fail_set = True

        scheduler.advance(TICK)

        assert not animator.active
        on_failed.assert_called_once()
        assert scheduler.pending == []
