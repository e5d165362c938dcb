"""
Shared fixtures — manual clock, in-memory map, and catalog locations.
"""

import pytest

from footprintmap.locations import LOCATIONS
from footprintmap.mapstate import MapState
from footprintmap.models import CameraState
from footprintmap.scheduling import TickScheduler


class ManualClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def advance_scheduler(scheduler: TickScheduler, clock: ManualClock, until: float) -> int:
    """Jump the clock deadline by deadline up to `until`, dispatching timers as they fall due."""
    ran = 0
    while True:
        deadline = scheduler.next_deadline()
        if deadline is None or deadline > until:
            break
        clock.now = max(clock.now, deadline)
        ran += scheduler.run_due()
    clock.now = max(clock.now, until)
    ran += scheduler.run_due()
    return ran


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return TickScheduler(clock)


@pytest.fixture
def run_until(scheduler, clock):
    """run_until(t) advances the manual clock to t, firing every timer due on the way."""

    def _run(until: float) -> int:
        return advance_scheduler(scheduler, clock, until)

    return _run


@pytest.fixture
def default_camera():
    return CameraState(center=(-115.0, 40.0), zoom=4.0)


@pytest.fixture
def map_state(default_camera):
    return MapState(camera=default_camera)


@pytest.fixture
def lubbock():
    """First catalog entry, -101.8504 33.59076."""
    return LOCATIONS[0]


@pytest.fixture
def fresno():
    return next(loc for loc in LOCATIONS if loc.lng == -119.7164)
