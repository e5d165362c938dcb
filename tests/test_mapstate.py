"""
In-memory map handle tests.
"""

import pytest

from footprintmap.mapstate import MapState, MapStateError
from footprintmap.models import CameraState

_SOURCE = {"type": "vector", "url": "mapbox://demo.tiles"}
_LAYER = {"id": "dots", "type": "circle", "source": "src", "source-layer": "part1"}


class TestSourcesAndLayers:

    def test_add_and_get(self, map_state):
        map_state.add_source("src", _SOURCE)
        map_state.add_layer(_LAYER)
        assert map_state.get_source("src")["url"] == "mapbox://demo.tiles"
        assert map_state.get_layer("dots")["source-layer"] == "part1"

    def test_duplicate_source(self, map_state):
        map_state.add_source("src", _SOURCE)
        with pytest.raises(MapStateError):
            map_state.add_source("src", _SOURCE)

    def test_layer_needs_source(self, map_state):
        with pytest.raises(MapStateError):
            map_state.add_layer(_LAYER)

    def test_source_in_use_cannot_be_removed(self, map_state):
        map_state.add_source("src", _SOURCE)
        map_state.add_layer(_LAYER)
        with pytest.raises(MapStateError):
            map_state.remove_source("src")
        map_state.remove_layer("dots")
        map_state.remove_source("src")
        assert map_state.get_source("src") is None

    def test_remove_unknown(self, map_state):
        with pytest.raises(MapStateError):
            map_state.remove_layer("dots")
        with pytest.raises(MapStateError):
            map_state.remove_source("src")

    def test_layer_spec_is_copied(self, map_state):
        map_state.add_source("src", _SOURCE)
        spec = {**_LAYER, "layout": {"visibility": "visible"}}
        map_state.add_layer(spec)
        spec["layout"]["visibility"] = "none"
        assert map_state.get_layer("dots")["layout"]["visibility"] == "visible"

    def test_filter_and_layout(self, map_state):
        map_state.add_source("src", _SOURCE)
        map_state.add_layer(_LAYER)
        map_state.set_filter("dots", ["==", ["get", "date"], "2016-08-01"])
        map_state.set_layout_property("dots", "visibility", "none")
        layer = map_state.get_layer("dots")
        assert layer["filter"] == ["==", ["get", "date"], "2016-08-01"]
        assert layer["layout"] == {"visibility": "none"}

    def test_filter_unknown_layer(self, map_state):
        with pytest.raises(MapStateError):
            map_state.set_filter("dots", ["all"])


class TestCamera:

    def test_fly_to_updates_camera(self, map_state):
        map_state.fly_to(center=[-101.8504, 33.59076], zoom=4, speed=1.8)
        assert map_state.get_camera() == CameraState(center=(-101.8504, 33.59076), zoom=4.0)
        kind, options = map_state.last_transition
        assert kind == "fly"
        assert options["speed"] == 1.8

    def test_partial_options_keep_the_rest(self, map_state):
        map_state.ease_to(zoom=5)
        camera = map_state.get_camera()
        assert camera.center == (-115.0, 40.0)
        assert camera.zoom == 5.0
        assert map_state.last_transition[0] == "ease"


class TestStyleLifecycle:

    def test_once_fires_on_load_only_once(self, default_camera):
        map_state = MapState(camera=default_camera, style_loaded=False)
        calls = []
        map_state.once("style.load", lambda: calls.append(1))
        assert not map_state.is_style_loaded()
        map_state.mark_style_loaded()
        map_state.mark_style_unloaded()
        map_state.mark_style_loaded()
        assert calls == [1]
        assert map_state.is_style_loaded()

    def test_off_removes_listener(self, default_camera):
        map_state = MapState(camera=default_camera, style_loaded=False)
        calls = []

        def listener():
            calls.append(1)

        map_state.once("style.load", listener)
        map_state.off("style.load", listener)
        map_state.mark_style_loaded()
        assert calls == []
