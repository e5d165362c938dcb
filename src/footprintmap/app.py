"""Footprint Map — Streamlit app for animating footprint and PM2.5 layers."""

import logging

import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

load_dotenv()

from footprintmap.config import ConfigError, load_config  # noqa: E402
from footprintmap.constants import (  # noqa: E402
    ANIMATION_DELAY,
    DEFAULT_TIMESTAMP,
    END_DATE,
    START_DATE,
)
from footprintmap.controller import MapController  # noqa: E402
from footprintmap.dates import (  # noqa: E402
    InvalidDateError,
    parse_compact_date,
    to_compact_date,
    to_display_date,
)
from footprintmap.layers import layer_kinds, legend_stops  # noqa: E402
from footprintmap.locations import LOCATIONS, find_location  # noqa: E402
from footprintmap.models import CameraState, DatasetKind  # noqa: E402
from footprintmap.renderers.mapbox_gl import render_mapbox_html  # noqa: E402
from footprintmap.renderers.plotly_timeline import render_partition_timeline  # noqa: E402
from footprintmap.tilejson import (  # noqa: E402
    RateLimitExceeded,
    TilesetLookupError,
    fetch_tilejson,
)

st.set_page_config(
    page_title="Footprint Map",
    page_icon="🛰",
    layout="wide",
)

try:
    config = load_config()
except ConfigError as exc:
    st.error(str(exc))
    st.stop()

logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

_NO_LOCATION = "— overview —"
_LAYER_LABELS = {"footprint": "Footprint", "pm25": "PM2.5", "combined": "Combined"}
_KIND_LABELS: dict[DatasetKind, str] = {"footprint": "Footprint", "pm25": "PM2.5"}

# --- Session state initialization ---

if "controller" not in st.session_state:
    st.session_state.controller = MapController(
        default_camera=CameraState(center=config.default_center, zoom=config.default_zoom),
        timestamp=st.query_params.get("timestamp", DEFAULT_TIMESTAMP),
    )
if "tileset_report" not in st.session_state:
    st.session_state.tileset_report = None

controller: MapController = st.session_state.controller


# --- Widget callbacks (run before the script reruns) ---


def _on_location_change() -> None:
    name = st.session_state.location_picker
    location = find_location(name)
    if location is None:
        controller.clear_location()
    else:
        controller.select_location(location)
    st.session_state.tileset_report = None


def _on_layer_type_change() -> None:
    controller.set_layer_type(st.session_state.layer_type_picker)
    st.session_state.tileset_report = None


def _on_date_change() -> None:
    picked = st.session_state.date_picker
    if picked is not None:
        controller.change_date(to_compact_date(picked))


def _on_back() -> None:
    controller.clear_location()
    st.session_state.tileset_report = None


def _check_tilesets() -> None:
    report: list[tuple[str, str]] = []
    for state in controller.loaded_layers.values():
        try:
            tilejson = fetch_tilejson(state.tileset_id, config.access_token)
        except RateLimitExceeded as exc:
            report.append((state.tileset_id, str(exc)))
            break
        except TilesetLookupError as exc:
            logger.warning("Tileset check failed: %s", exc)
            report.append((state.tileset_id, f"error: {exc}"))
            continue
        if tilejson is None:
            report.append((state.tileset_id, "missing"))
        else:
            layers = [layer["id"] for layer in tilejson.get("vector_layers", [])]
            found = state.source_layer in layers
            report.append(
                (state.tileset_id, f"ok, source-layer {state.source_layer} "
                 + ("present" if found else "NOT FOUND"))
            )
    st.session_state.tileset_report = report


# --- Sidebar controls ---

# Keep widget values in step with the controller, which the animation also moves
selected_name = controller.selected_location.name if controller.selected_location else _NO_LOCATION
st.session_state.location_picker = selected_name
st.session_state.layer_type_picker = controller.layer_type
try:
    st.session_state.date_picker = parse_compact_date(controller.current_date)
except InvalidDateError:
    st.session_state.date_picker = START_DATE

with st.sidebar:
    st.header("Footprint Map")
    st.selectbox(
        "Location",
        [_NO_LOCATION] + [loc.name for loc in LOCATIONS],
        key="location_picker",
        on_change=_on_location_change,
    )
    st.radio(
        "Layer",
        list(_LAYER_LABELS),
        format_func=_LAYER_LABELS.__getitem__,
        key="layer_type_picker",
        on_change=_on_layer_type_change,
        horizontal=True,
    )
    st.date_input(
        "Date",
        min_value=START_DATE,
        max_value=END_DATE,
        key="date_picker",
        on_change=_on_date_change,
        disabled=controller.is_playing,
    )

    play_col, back_col = st.columns(2)
    play_col.button(
        "Pause" if controller.is_playing else "Play",
        on_click=controller.toggle_animation,
        disabled=controller.selected_location is None,
        use_container_width=True,
    )
    back_col.button(
        "Back",
        on_click=_on_back,
        disabled=controller.selected_location is None,
        use_container_width=True,
    )

    st.subheader("Thresholds")
    for kind in layer_kinds(controller.layer_type):
        minus_col, value_col, plus_col = st.columns([1, 3, 1])
        minus_col.button(
            "−", key=f"{kind}_decrease", on_click=controller.adjust_threshold,
            args=(kind, "decrease"),
        )
        value_col.markdown(f"{_KIND_LABELS[kind]} &gt; `{controller.thresholds.for_kind(kind):.3g}`")
        plus_col.button(
            "+", key=f"{kind}_increase", on_click=controller.adjust_threshold,
            args=(kind, "increase"),
        )

    st.subheader("Legend")
    for kind in layer_kinds(controller.layer_type):
        swatches = "".join(
            f'<span style="display:inline-block;width:18px;height:12px;background:{color}" '
            f'title="{value:g}"></span>'
            for value, color in legend_stops(kind)
        )
        st.markdown(f"{_KIND_LABELS[kind]}<br>{swatches}", unsafe_allow_html=True)


# --- Map view ---
# While playing, the fragment re-runs on the tick interval and dispatches due timers.


@st.fragment(run_every=ANIMATION_DELAY if controller.is_playing else None)
def _map_view() -> None:
    controller.run_pending()
    st.markdown(f"### {to_display_date(controller.current_date)}")
    if controller.selected_location is None:
        st.caption("Pick a location to load its layers.")
    if controller.map is not None:
        components.html(
            render_mapbox_html(
                controller.map,
                config,
                LOCATIONS,
                selected=controller.selected_location,
                current_date=controller.current_date,
            ),
            height=660,
        )


_map_view()

with st.expander("Partition timeline"):
    st.plotly_chart(
        render_partition_timeline(controller.current_date), use_container_width=True
    )

with st.expander("Tileset check"):
    loaded = controller.loaded_layers
    if not loaded:
        st.caption("No layers loaded.")
    else:
        for state in loaded.values():
            st.text(f"{state.kind}: {state.tileset_id} / {state.source_layer} (p{state.partition})")
        st.button("Check tilesets", on_click=_check_tilesets)
    if st.session_state.tileset_report:
        for tileset_id, status in st.session_state.tileset_report:
            st.text(f"{tileset_id}: {status}")
