"""Map controller — the glue between UI events and the map, orchestrator, and animation driver.

Every handler runs to completion on the caller's thread, and the animation
driver's callbacks only run inside run_pending(), so handlers and ticks never
interleave mid-step.
"""

import logging
from collections.abc import Callable
from typing import Literal

from footprintmap.animation import AnimationDriver, AnimationState
from footprintmap.boundary import map_needs_reload
from footprintmap.constants import DEFAULT_DATE, DEFAULT_TIMESTAMP, LOCATION_ZOOM
from footprintmap.dates import normalize_initial_timestamp
from footprintmap.layers import LayerOrchestrator, adjust_threshold
from footprintmap.mapstate import MapState
from footprintmap.models import (
    CameraState,
    DatasetKind,
    LayerType,
    LoadedLayerState,
    Location,
    Thresholds,
)
from footprintmap.scheduling import TickScheduler

logger = logging.getLogger(__name__)


class MapController:
    """Owns the map view state for one user session."""

    def __init__(
        self,
        default_camera: CameraState,
        timestamp: str = DEFAULT_TIMESTAMP,
        map_state: MapState | None = None,
        scheduler: TickScheduler | None = None,
        thresholds: Thresholds | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self.default_camera = default_camera
        self.map: MapState | None = map_state or MapState(camera=default_camera)
        if scheduler is None:
            scheduler = TickScheduler(clock) if clock is not None else TickScheduler()
        self.scheduler = scheduler
        self.thresholds = thresholds or Thresholds()
        self.orchestrator = LayerOrchestrator(self._get_map)
        self.driver = AnimationDriver(
            self._get_map,
            self.scheduler,
            self.orchestrator,
            self.thresholds,
            on_date=self._on_animation_date,
        )

        self.current_date = normalize_initial_timestamp(timestamp)
        self.selected_location: Location | None = None
        self.layer_type: LayerType = "footprint"
        self.reload_count = 0

    def _get_map(self) -> MapState | None:
        return self.map

    @property
    def is_playing(self) -> bool:
        return self.driver.is_running

    @property
    def loaded_layers(self) -> dict[DatasetKind, LoadedLayerState]:
        return dict(self.orchestrator.loaded)

    # --- layers ---

    def _reload_layers(
        self, preserve_camera: bool = False, on_loaded: Callable[[], None] | None = None
    ) -> None:
        if self.selected_location is None:
            return
        self.reload_count += 1
        self.orchestrator.load_location_layers(
            self.selected_location,
            self.current_date,
            self.layer_type,
            self.thresholds,
            preserve_camera=preserve_camera,
            on_loaded=on_loaded,
        )

    # --- UI events ---

    def select_location(self, location: Location) -> None:
        """Pick a site: stop animation, restart at the first date, fly there, and load its layers."""
        self.driver.stop()
        self.current_date = DEFAULT_DATE
        self.selected_location = location
        if self.map is not None:
            self.map.fly_to(
                center=[location.lng, location.lat],
                zoom=LOCATION_ZOOM,
                essential=True,
                speed=1.8,
                curve=1,
            )
        logger.info("Selected %s", location.name)
        self._reload_layers()

    def clear_location(self) -> None:
        """Back to the overview: drop dataset layers and return to the default view."""
        self.driver.stop()
        self.orchestrator.clear()
        if self.map is not None:
            self.map.fly_to(**self.default_camera.as_options(), duration=1000)
        self.selected_location = None

    def change_date(self, value: str) -> None:
        """User-driven date change. Swaps sources only when the partition changes."""
        if self.is_playing:
            self.driver.stop()
        self.current_date = value
        if self.map is None or self.selected_location is None:
            return
        if map_needs_reload(self.map, value, self.selected_location):
            logger.info("Date change to %s requires part change, reloading data", value)
            self._reload_layers()
            return
        self.orchestrator.update_filters(value, self.thresholds)

    def set_layer_type(self, layer_type: LayerType) -> None:
        if layer_type == self.layer_type:
            return
        self.layer_type = layer_type
        self._reload_layers(preserve_camera=self.is_playing)

    def adjust_threshold(
        self, kind: DatasetKind, direction: Literal["increase", "decrease"]
    ) -> float:
        """Double or halve one dataset's threshold and refilter in place."""
        if kind == "footprint":
            self.thresholds.footprint = adjust_threshold(self.thresholds.footprint, direction)
            value = self.thresholds.footprint
        else:
            self.thresholds.pm25 = adjust_threshold(self.thresholds.pm25, direction)
            value = self.thresholds.pm25
        self.orchestrator.update_filters(self.current_date, self.thresholds)
        return value

    def toggle_animation(self) -> bool:
        """Play/pause. Returns whether the animation is now playing."""
        if self.is_playing:
            self.driver.stop()
            return False
        return self.driver.start(self.selected_location, self.current_date)

    def run_pending(self) -> int:
        """Fire due animation timers. Call periodically from the host loop."""
        return self.scheduler.run_due()

    def teardown(self) -> None:
        """Stop all work and drop the map. Pending callbacks become no-ops."""
        self.driver.teardown()
        self.scheduler.cancel_all()
        self.orchestrator.clear()
        self.map = None

    # --- animation callbacks ---

    def _on_animation_date(self, value: str) -> None:
        self.current_date = value
        if self.driver.state is AnimationState.RELOADING:
            self._reload_layers(preserve_camera=True, on_loaded=self.driver.mark_reloaded)
