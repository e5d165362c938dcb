"""Mapping-engine handle.

`MapHandle` is the subset of the Mapbox GL map API the core drives.
`MapState` implements it in memory: it records sources, layers, filters,
layout properties, and camera so `renderers.mapbox_gl` can serialise them
into a live Mapbox GL page. Errors mirror Mapbox GL's (duplicate ids and
unknown layers raise).
"""

import copy
import logging
from collections.abc import Callable
from typing import Any, Protocol

from footprintmap.models import CameraState

logger = logging.getLogger(__name__)


class MapStateError(Exception):
    """Invalid source/layer operation on the map."""


class MapHandle(Protocol):
    def add_source(self, source_id: str, spec: dict[str, Any]) -> None: ...

    def remove_source(self, source_id: str) -> None: ...

    def get_source(self, source_id: str) -> dict[str, Any] | None: ...

    def add_layer(self, spec: dict[str, Any]) -> None: ...

    def remove_layer(self, layer_id: str) -> None: ...

    def get_layer(self, layer_id: str) -> dict[str, Any] | None: ...

    def set_filter(self, layer_id: str, expression: list[Any]) -> None: ...

    def set_layout_property(self, layer_id: str, name: str, value: Any) -> None: ...

    def fly_to(self, **options: Any) -> None: ...

    def ease_to(self, **options: Any) -> None: ...

    def jump_to(self, **options: Any) -> None: ...

    def get_camera(self) -> CameraState: ...

    def is_style_loaded(self) -> bool: ...

    def once(self, event: str, callback: Callable[[], None]) -> None: ...

    def off(self, event: str, callback: Callable[[], None]) -> None: ...


class MapState:
    """In-memory MapHandle backing the rendered Mapbox GL page."""

    def __init__(self, camera: CameraState, style_loaded: bool = True) -> None:
        self.sources: dict[str, dict[str, Any]] = {}
        self.layers: dict[str, dict[str, Any]] = {}  # Insertion order = draw order
        self.camera = camera
        self.last_transition: tuple[str, dict[str, Any]] | None = None
        self._style_loaded = style_loaded
        self._once: dict[str, list[Callable[[], None]]] = {}

    # --- sources ---

    def add_source(self, source_id: str, spec: dict[str, Any]) -> None:
        if source_id in self.sources:
            raise MapStateError(f"There is already a source with ID {source_id!r}")
        self.sources[source_id] = dict(spec)

    def remove_source(self, source_id: str) -> None:
        if source_id not in self.sources:
            raise MapStateError(f"There is no source with ID {source_id!r}")
        for layer in self.layers.values():
            if layer.get("source") == source_id:
                raise MapStateError(
                    f"Source {source_id!r} cannot be removed while layer "
                    f"{layer['id']!r} is using it"
                )
        del self.sources[source_id]

    def get_source(self, source_id: str) -> dict[str, Any] | None:
        return self.sources.get(source_id)

    # --- layers ---

    def add_layer(self, spec: dict[str, Any]) -> None:
        layer_id = spec["id"]
        if layer_id in self.layers:
            raise MapStateError(f"Layer with id {layer_id!r} already exists")
        source = spec.get("source")
        if source is not None and source not in self.sources:
            raise MapStateError(f"Source {source!r} not found for layer {layer_id!r}")
        self.layers[layer_id] = copy.deepcopy(spec)

    def remove_layer(self, layer_id: str) -> None:
        if layer_id not in self.layers:
            raise MapStateError(f"Layer {layer_id!r} does not exist")
        del self.layers[layer_id]

    def get_layer(self, layer_id: str) -> dict[str, Any] | None:
        return self.layers.get(layer_id)

    def set_filter(self, layer_id: str, expression: list[Any]) -> None:
        layer = self._require_layer(layer_id)
        layer["filter"] = copy.deepcopy(expression)

    def set_layout_property(self, layer_id: str, name: str, value: Any) -> None:
        layer = self._require_layer(layer_id)
        layer.setdefault("layout", {})[name] = value

    def _require_layer(self, layer_id: str) -> dict[str, Any]:
        layer = self.layers.get(layer_id)
        if layer is None:
            raise MapStateError(f"Layer {layer_id!r} does not exist")
        return layer

    # --- camera ---

    def fly_to(self, **options: Any) -> None:
        self._move("fly", options)

    def ease_to(self, **options: Any) -> None:
        self._move("ease", options)

    def jump_to(self, **options: Any) -> None:
        self._move("jump", options)

    def _move(self, kind: str, options: dict[str, Any]) -> None:
        center = options.get("center", self.camera.center)
        self.camera = CameraState(
            center=(float(center[0]), float(center[1])),
            zoom=float(options.get("zoom", self.camera.zoom)),
            bearing=float(options.get("bearing", self.camera.bearing)),
            pitch=float(options.get("pitch", self.camera.pitch)),
        )
        self.last_transition = (kind, dict(options))

    def get_camera(self) -> CameraState:
        return self.camera

    # --- style lifecycle ---

    def is_style_loaded(self) -> bool:
        return self._style_loaded

    def once(self, event: str, callback: Callable[[], None]) -> None:
        self._once.setdefault(event, []).append(callback)

    def off(self, event: str, callback: Callable[[], None]) -> None:
        listeners = self._once.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def mark_style_loaded(self) -> None:
        """Flag the style as ready and fire pending one-shot 'style.load' listeners."""
        self._style_loaded = True
        listeners = self._once.pop("style.load", [])
        for callback in listeners:
            callback()

    def mark_style_unloaded(self) -> None:
        self._style_loaded = False
