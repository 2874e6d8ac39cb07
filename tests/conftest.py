from collections.abc import Callable

import pytest
from fakes import FakeClock, FakeDriver, FakeSampler, ManualScheduler

from content_brightness.config import Settings
from content_brightness.engine.orchestrator import ControlOrchestrator
from content_brightness.errors import LumaSampleError


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def scheduler(clock: FakeClock) -> ManualScheduler:
    return ManualScheduler(clock)


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver(level=0.6)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def make_orchestrator(
    driver: FakeDriver,
    scheduler: ManualScheduler,
    clock: FakeClock,
    settings: Settings,
) -> Callable[..., ControlOrchestrator]:
    def _make(sampler: FakeSampler) -> ControlOrchestrator:
        return ControlOrchestrator(driver, sampler, scheduler, settings, clock=clock)

    return _make


@pytest.fixture
def sampling_error() -> LumaSampleError:
    return LumaSampleError("screen recording permission denied")
