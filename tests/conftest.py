import os

# The demo app builds itself at import time from the environment
os.environ.setdefault("POWERCLOCK_ENV", "testing")

import pytest

from powerclock import ApplicationConfig, Environment, MemoryRepo, set_clock, set_config


@pytest.fixture(autouse=True)
def isolated_state():
    """Every test starts with an empty entity store, no clock and testing config."""
    MemoryRepo().clear()
    set_clock(None)
    set_config(ApplicationConfig.for_environment(Environment.TESTING))
    yield
    MemoryRepo().clear()
    set_clock(None)
    set_config(None)


class FakeTime:
    """Manually advanced time source."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_time():
    return FakeTime()
