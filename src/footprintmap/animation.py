"""Day-stepping animation driver.

States::

    STOPPED ──start──▶ STARTING ──style ready──▶ RUNNING ──crossing──▶ RELOADING
       ▲                  │                        │  ▲                    │
       └──────stop────────┴─────────stop───────────┘  └──mark_reloaded()───┘

Each tick advances the simulated date by one day, asks the boundary detector
whether the attached sources still hold that date, and either updates the
style filters in place or hands the date to the host for a source swap.
Cancellation is cooperative: every scheduled callback carries the session's
token and checks it first. A tick already running when stop() is called
finishes its step but schedules nothing further.
"""

import enum
import itertools
import logging
import math
from collections.abc import Callable

from footprintmap.boundary import map_needs_reload
from footprintmap.constants import (
    ANIMATION_DELAY,
    LOCATION_ZOOM,
    START_DATE,
    START_DELAY,
    START_DRIFT_DEGREES,
    START_ZOOM_TOLERANCE,
    STYLE_POLL_DELAY,
    TICK_DRIFT_DEGREES,
    TICK_ZOOM_TOLERANCE,
)
from footprintmap.dates import (
    InvalidDateError,
    clamp_to_range,
    parse_compact_date,
    step_date,
    to_compact_date,
)
from footprintmap.layers import LayerOrchestrator
from footprintmap.mapstate import MapHandle
from footprintmap.models import AnimationSession, CancellationToken, Location, Thresholds
from footprintmap.scheduling import Scheduler

logger = logging.getLogger(__name__)


class AnimationState(enum.Enum):
    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    RELOADING = "reloading"


def _drift(map_handle: MapHandle, location: Location) -> tuple[float, float]:
    camera = map_handle.get_camera()
    distance = math.hypot(camera.center[0] - location.lng, camera.center[1] - location.lat)
    return distance, abs(camera.zoom - LOCATION_ZOOM)


class AnimationDriver:
    """Self-rescheduling day stepper bound to one map and one scheduler.

    Args:
        map_ref: Returns the live map, or None once it has been torn down.
        scheduler: Anything with call_later(delay, callback, *args) → handle.
        orchestrator: Applies filter-only updates on non-crossing ticks.
        thresholds: Shared, mutable filter thresholds.
        on_date: Receives every published YYYYMMDD date. When the driver is
            RELOADING the host is expected to swap sources and then call
            mark_reloaded().
    """

    def __init__(
        self,
        map_ref: Callable[[], MapHandle | None],
        scheduler: Scheduler,
        orchestrator: LayerOrchestrator,
        thresholds: Thresholds,
        on_date: Callable[[str], None],
        tick_delay: float = ANIMATION_DELAY,
        style_poll_delay: float = STYLE_POLL_DELAY,
        start_delay: float = START_DELAY,
    ) -> None:
        self._map_ref = map_ref
        self._scheduler = scheduler
        self._orchestrator = orchestrator
        self.thresholds = thresholds
        self._on_date = on_date
        self.tick_delay = tick_delay
        self.style_poll_delay = style_poll_delay
        self.start_delay = start_delay

        self.state = AnimationState.STOPPED
        self.session: AnimationSession | None = None
        self.current_date = to_compact_date(START_DATE)
        self._generations = itertools.count(1)

    @property
    def is_running(self) -> bool:
        return self.state is not AnimationState.STOPPED

    # --- lifecycle ---

    def start(self, location: Location | None, value: str) -> bool:
        """Begin a new session at `value`. Returns False without a location."""
        if location is None:
            logger.debug("Animation start ignored: no location selected")
            return False

        self.stop()
        try:
            current = clamp_to_range(parse_compact_date(value))
        except InvalidDateError:
            logger.warning("Animation start date %r is malformed, using start of range", value)
            current = START_DATE
        self.current_date = to_compact_date(current)

        token = CancellationToken(generation=next(self._generations))
        self.session = AnimationSession(location=location, token=token)
        self.state = AnimationState.STARTING
        logger.info(
            "Animation session %d starting at %s for %s",
            token.generation,
            self.current_date,
            location.name,
        )
        self._schedule(self.start_delay, self._await_style, token)
        return True

    def stop(self) -> None:
        """Cancel the session. Idempotent."""
        session = self.session
        if session is not None:
            session.token.cancel()
            if session.pending is not None:
                session.pending.cancel()
            logger.info(
                "Animation session %d stopped after %d ticks (%d reloads)",
                session.token.generation,
                session.ticks,
                session.reloads,
            )
        self.session = None
        self.state = AnimationState.STOPPED

    def teardown(self) -> None:
        self.stop()

    def mark_reloaded(self) -> None:
        """The host finished swapping sources for the published date."""
        if self.state is AnimationState.RELOADING:
            self.state = AnimationState.RUNNING

    # --- scheduled steps ---

    def _schedule(
        self,
        delay: float,
        step: Callable[[CancellationToken], None],
        token: CancellationToken,
    ) -> None:
        if token.cancelled or self.session is None:
            return
        self.session.pending = self._scheduler.call_later(delay, step, token)

    def _live(self, token: CancellationToken) -> bool:
        return not token.cancelled and self.session is not None and self.session.token is token

    def _await_style(self, token: CancellationToken) -> None:
        if not self._live(token):
            return
        map_handle = self._map_ref()
        if map_handle is None:
            logger.info("Map gone before animation could start")
            self.stop()
            return
        if not map_handle.is_style_loaded():
            self._schedule(self.style_poll_delay, self._await_style, token)
            return

        self.state = AnimationState.RUNNING
        location = self.session.location
        distance, zoom_delta = _drift(map_handle, location)
        if distance > START_DRIFT_DEGREES or zoom_delta > START_ZOOM_TOLERANCE:
            map_handle.fly_to(
                center=[location.lng, location.lat],
                zoom=LOCATION_ZOOM,
                duration=1000,
                essential=True,
            )
        self._tick(token)

    def _tick(self, token: CancellationToken) -> None:
        if not self._live(token):
            return
        map_handle = self._map_ref()
        if map_handle is None:
            logger.info("Map torn down, ending animation session %d", token.generation)
            self.stop()
            return

        session = self.session
        delay = self.tick_delay
        try:
            if map_handle.is_style_loaded():
                self._step(map_handle, session)
            else:
                delay = self.style_poll_delay
        except Exception:
            session.errors += 1
            logger.exception("Animation tick failed at %s", self.current_date)

        self._schedule(delay, self._tick, token)

    def _step(self, map_handle: MapHandle, session: AnimationSession) -> None:
        self.current_date = to_compact_date(step_date(parse_compact_date(self.current_date)))
        session.ticks += 1
        location = session.location

        if map_needs_reload(map_handle, self.current_date, location):
            session.reloads += 1
            self.state = AnimationState.RELOADING
            logger.info("Partition boundary at %s, requesting reload", self.current_date)
            self._on_date(self.current_date)
            return

        self._orchestrator.update_filters(self.current_date, self.thresholds)
        logger.debug("Tick %d → %s", session.ticks, self.current_date)
        self._on_date(self.current_date)

        distance, zoom_delta = _drift(map_handle, location)
        if distance > TICK_DRIFT_DEGREES or zoom_delta > TICK_ZOOM_TOLERANCE:
            map_handle.ease_to(
                center=[location.lng, location.lat],
                zoom=LOCATION_ZOOM,
                duration=300,
            )
