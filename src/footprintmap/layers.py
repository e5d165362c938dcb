"""Layer/source orchestration — turns resolver output into map sources and styled layers."""

import logging
from collections.abc import Callable
from typing import Any, Literal

from footprintmap.boundary import LAYER_IDS
from footprintmap.constants import (
    FOOTPRINT_SCALE,
    FOOTPRINT_SOURCE_ID,
    PM25_SCALE,
    PM25_SOURCE_ID,
    TILESET_NAMESPACE,
)
from footprintmap.dates import to_filter_date
from footprintmap.mapstate import MapHandle
from footprintmap.models import (
    DATASET_KINDS,
    DatasetKind,
    LayerType,
    LoadedLayerState,
    Location,
    Thresholds,
)
from footprintmap.partitions import partition_for, tileset_for

logger = logging.getLogger(__name__)

MapRef = Callable[[], MapHandle | None]

_SOURCE_IDS: dict[DatasetKind, str] = {"footprint": FOOTPRINT_SOURCE_ID, "pm25": PM25_SOURCE_ID}
_METRIC_FIELDS: dict[DatasetKind, str] = {"footprint": "value", "pm25": "pm25_value"}

# (value, colour) stops for the circle-color ramps
FOOTPRINT_STOPS: tuple[tuple[float, str], ...] = (
    (1e-7, FOOTPRINT_SCALE[0]),
    (1e-5, FOOTPRINT_SCALE[0]),
    (1e-4, FOOTPRINT_SCALE[0]),
    (1e-3, FOOTPRINT_SCALE[1]),
    (1e-2, FOOTPRINT_SCALE[2]),
    (1e-1, FOOTPRINT_SCALE[3]),
    (5e-1, FOOTPRINT_SCALE[4]),
    (8e-1, FOOTPRINT_SCALE[5]),
)
PM25_STOPS: tuple[tuple[float, str], ...] = (
    (0, PM25_SCALE[0]),
    (12, PM25_SCALE[1]),
    (35, PM25_SCALE[2]),
    (55, PM25_SCALE[3]),
    (75, PM25_SCALE[4]),
    (100, PM25_SCALE[5]),
)


def layer_kinds(layer_type: LayerType) -> tuple[DatasetKind, ...]:
    if layer_type == "combined":
        return DATASET_KINDS
    return (layer_type,)


def metric_filter(kind: DatasetKind, value: str, threshold: float) -> list[Any]:
    """Style filter: metric > threshold AND date == YYYY-MM-DD."""
    return [
        "all",
        [">", ["get", _METRIC_FIELDS[kind]], threshold],
        ["==", ["get", "date"], to_filter_date(value)],
    ]


def footprint_filter(value: str, threshold: float) -> list[Any]:
    return metric_filter("footprint", value, threshold)


def pm25_filter(value: str, threshold: float) -> list[Any]:
    return metric_filter("pm25", value, threshold)


def legend_stops(kind: DatasetKind) -> tuple[tuple[float, str], ...]:
    return FOOTPRINT_STOPS if kind == "footprint" else PM25_STOPS


def _color_ramp(kind: DatasetKind) -> list[Any]:
    ramp: list[Any] = ["interpolate", ["linear"], ["get", _METRIC_FIELDS[kind]]]
    for value, color in legend_stops(kind):
        ramp += [value, color]
    return ramp


def _paint(kind: DatasetKind) -> dict[str, Any]:
    if kind == "footprint":
        return {
            "circle-radius": [
                "interpolate", ["exponential", 2], ["zoom"],
                3, 30, 4, 25, 5, 20, 6, 18, 7, 15, 8, 12,
            ],
            "circle-color": _color_ramp(kind),
            "circle-opacity": 0.9,
            "circle-blur": 1.2,
            "circle-stroke-width": 0,
        }
    return {
        "circle-radius": ["interpolate", ["linear"], ["zoom"], 3, 8, 5, 12, 8, 16, 12, 14],
        "circle-color": _color_ramp(kind),
        "circle-opacity": 0.95,
        "circle-blur": 0.3,
        "circle-stroke-width": 1.5,
        "circle-stroke-color": "rgba(10, 10, 10, 0.8)",
    }


def adjust_threshold(value: float, direction: Literal["increase", "decrease"]) -> float:
    """Thresholds move geometrically: double or halve."""
    return value * 2 if direction == "increase" else value / 2


class LayerOrchestrator:
    """Adds, swaps, and filters the dataset layers on the live map.

    The map can be torn down between scheduled callbacks, so every operation
    re-reads it through map_ref and does nothing when it is gone.
    """

    def __init__(self, map_ref: MapRef, namespace: str = TILESET_NAMESPACE) -> None:
        self._map_ref = map_ref
        self.namespace = namespace
        self.loaded: dict[DatasetKind, LoadedLayerState] = {}
        # Deferred load waiting on the style: (map it was registered on, listener)
        self._pending_load: tuple[MapHandle, Callable[[], None]] | None = None

    def load_location_layers(
        self,
        location: Location,
        value: str,
        layer_type: LayerType,
        thresholds: Thresholds,
        preserve_camera: bool = False,
        on_loaded: Callable[[], None] | None = None,
    ) -> bool:
        """Replace dataset layers with the partitions holding `value`.

        Returns True when the layers were attached now, False when the map is
        gone or the load was deferred until the style finishes loading.
        """
        map_handle = self._map_ref()
        if map_handle is None:
            return False

        if not map_handle.is_style_loaded():
            logger.debug("Style not loaded, deferring layer load for %s", location.name)
            self._cancel_pending_load()

            def _on_style_load() -> None:
                self._pending_load = None
                self.load_location_layers(
                    location, value, layer_type, thresholds, preserve_camera, on_loaded
                )

            map_handle.once("style.load", _on_style_load)
            self._pending_load = (map_handle, _on_style_load)
            return False

        saved_camera = map_handle.get_camera()
        self.clear()

        for kind in layer_kinds(layer_type):
            self._attach(map_handle, kind, location, value, thresholds)

        if preserve_camera:
            map_handle.jump_to(**saved_camera.as_options())

        if on_loaded is not None:
            on_loaded()
        return True

    def _attach(
        self,
        map_handle: MapHandle,
        kind: DatasetKind,
        location: Location,
        value: str,
        thresholds: Thresholds,
    ) -> None:
        part = partition_for(kind, value, location)
        tileset_id, source_layer = tileset_for(kind, location, part, self.namespace)
        layer_id = LAYER_IDS[kind]
        source_id = _SOURCE_IDS[kind]

        map_handle.add_source(source_id, {"type": "vector", "url": f"mapbox://{tileset_id}"})
        map_handle.add_layer(
            {
                "id": layer_id,
                "type": "circle",
                "source": source_id,
                "source-layer": source_layer,
                "paint": _paint(kind),
                "layout": {"visibility": "visible"},
                "filter": metric_filter(kind, value, thresholds.for_kind(kind)),
                "metadata": {"partition": part},
            }
        )
        self.loaded[kind] = LoadedLayerState(
            kind=kind,
            layer_id=layer_id,
            source_id=source_id,
            tileset_id=tileset_id,
            source_layer=source_layer,
            partition=part,
        )
        logger.info("Loaded %s p%d from %s (%s)", kind, part, tileset_id, source_layer)

    def update_filters(self, value: str, thresholds: Thresholds) -> None:
        """Filter-only update for every attached dataset layer."""
        map_handle = self._map_ref()
        if map_handle is None:
            return
        for kind in DATASET_KINDS:
            layer_id = LAYER_IDS[kind]
            if map_handle.get_layer(layer_id) is not None:
                map_handle.set_filter(
                    layer_id, metric_filter(kind, value, thresholds.for_kind(kind))
                )

    def set_visibility(self, layer_type: LayerType) -> None:
        map_handle = self._map_ref()
        if map_handle is None:
            return
        shown = layer_kinds(layer_type)
        for kind in DATASET_KINDS:
            layer_id = LAYER_IDS[kind]
            if map_handle.get_layer(layer_id) is not None:
                visibility = "visible" if kind in shown else "none"
                map_handle.set_layout_property(layer_id, "visibility", visibility)

    def clear(self) -> None:
        """Drop any deferred load, then remove both dataset layers and their sources."""
        self._cancel_pending_load()
        map_handle = self._map_ref()
        self.loaded.clear()
        if map_handle is None:
            return
        for kind in DATASET_KINDS:
            if map_handle.get_layer(LAYER_IDS[kind]) is not None:
                map_handle.remove_layer(LAYER_IDS[kind])
        for kind in DATASET_KINDS:
            if map_handle.get_source(_SOURCE_IDS[kind]) is not None:
                map_handle.remove_source(_SOURCE_IDS[kind])

    def _cancel_pending_load(self) -> None:
        if self._pending_load is None:
            return
        map_handle, listener = self._pending_load
        self._pending_load = None
        map_handle.off("style.load", listener)
        logger.debug("Cancelled deferred layer load")
