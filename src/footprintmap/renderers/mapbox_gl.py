"""Mapbox GL JS renderer.

Produces a self-contained HTML string for st.components.v1.html(). The page
replays a MapState: it creates the map at the recorded camera, adds every
source and layer (with filters, layout, and metadata) once the style has
loaded, and then, after a short delay to let the first paint finish, drops one
marker per catalog location.
"""

from __future__ import annotations

import json

from footprintmap.config import MapboxConfig
from footprintmap.constants import (
    MARKER_ACTIVE,
    MARKER_INACTIVE,
    MARKER_SETUP_DELAY,
    MAX_ZOOM,
    MIN_ZOOM,
)
from footprintmap.dates import to_display_date
from footprintmap.mapstate import MapState
from footprintmap.models import Location

MAPBOX_GL_VERSION = "v3.9.4"


def _marker_payload(
    locations: tuple[Location, ...] | list[Location], selected: Location | None
) -> list[dict[str, object]]:
    return [
        {
            "lng": loc.lng,
            "lat": loc.lat,
            "name": loc.name,
            "selected": selected is not None
            and loc.lng == selected.lng
            and loc.lat == selected.lat,
        }
        for loc in locations
    ]


def render_mapbox_html(
    map_state: MapState,
    config: MapboxConfig,
    locations: tuple[Location, ...] | list[Location],
    selected: Location | None = None,
    current_date: str | None = None,
    height: int = 640,
) -> str:
    """Return an HTML page that draws `map_state` with Mapbox GL JS.

    Args:
        map_state: Sources, layers, and camera to replay.
        config: Access token and style URL.
        locations: Catalog locations to mark.
        selected: Highlighted location, if any.
        current_date: YYYYMMDD shown in the date badge; hidden if None.
        height: Map height in pixels.

    Returns:
        HTML string suitable for st.components.v1.html().
    """
    camera = map_state.get_camera()
    payload = {
        "token": config.access_token,
        "style": config.style_url,
        "camera": camera.as_options(),
        "minZoom": MIN_ZOOM,
        "maxZoom": MAX_ZOOM,
        "sources": map_state.sources,
        "layers": list(map_state.layers.values()),
        "markers": _marker_payload(locations, selected),
        "markerDelayMs": int(MARKER_SETUP_DELAY * 1000),
        "colors": {"active": MARKER_ACTIVE, "inactive": MARKER_INACTIVE},
    }
    # </script> inside a JSON string would end the script block early
    data_json = json.dumps(payload).replace("</", "<\\/")
    badge = (
        f'<div id="fm-date">{to_display_date(current_date)}</div>' if current_date else ""
    )

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8"/>
<link href="https://api.mapbox.com/mapbox-gl-js/{MAPBOX_GL_VERSION}/mapbox-gl.css" rel="stylesheet"/>
<script src="https://api.mapbox.com/mapbox-gl-js/{MAPBOX_GL_VERSION}/mapbox-gl.js"></script>
<style>
  html, body {{ margin: 0; padding: 0; }}
  #fm-map {{ position: relative; width: 100%; height: {height}px; }}
  #fm-date {{
    position: absolute; top: 12px; left: 12px; z-index: 5;
    padding: 4px 10px; border-radius: 6px;
    background: rgba(255, 255, 255, 0.9); color: #751d0c;
    font: 600 14px/1.4 sans-serif;
  }}
  .fm-marker {{
    width: 14px; height: 14px; border-radius: 50%;
    border: 2px solid var(--fm-color); background: transparent; cursor: pointer;
  }}
  .fm-marker.selected {{ background: var(--fm-color); }}
</style>
</head>
<body>
<div id="fm-map">{badge}</div>
<script>
(function () {{
  var data = {data_json};
  mapboxgl.accessToken = data.token;
  var map = new mapboxgl.Map({{
    container: "fm-map",
    style: data.style,
    center: data.camera.center,
    zoom: data.camera.zoom,
    bearing: data.camera.bearing,
    pitch: data.camera.pitch,
    minZoom: data.minZoom,
    maxZoom: data.maxZoom,
    fadeDuration: 0
  }});

  map.on("load", function () {{
    Object.keys(data.sources).forEach(function (id) {{
      if (!map.getSource(id)) map.addSource(id, data.sources[id]);
    }});
    data.layers.forEach(function (layer) {{
      if (!map.getLayer(layer.id)) map.addLayer(layer);
    }});
    setTimeout(function () {{
      data.markers.forEach(function (m) {{
        var el = document.createElement("div");
        el.className = "fm-marker" + (m.selected ? " selected" : "");
        el.title = m.name;
        el.style.setProperty(
          "--fm-color", m.selected ? data.colors.active : data.colors.inactive
        );
        new mapboxgl.Marker({{ element: el, anchor: "center" }})
          .setLngLat([m.lng, m.lat])
          .addTo(map);
      }});
    }}, data.markerDelayMs);
  }});
}})();
</script>
</body>
</html>
"""
