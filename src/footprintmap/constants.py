"""Map, animation, and styling constants shared across the app."""

from datetime import date

# --- Date domain ---
START_DATE = date(2016, 8, 1)
END_DATE = date(2020, 10, 1)
DEFAULT_DATE = "20160801"
DEFAULT_DISPLAY_DATE = "08/01/2016"
DEFAULT_FILTER_DATE = "2016-08-01"
DEFAULT_TIMESTAMP = "08-25-2016 00:00"
FINAL_YEAR = 2020

# --- Scheduling (seconds) ---
ANIMATION_DELAY = 1.0
STYLE_POLL_DELAY = 0.1
START_DELAY = 0.05
MARKER_SETUP_DELAY = 0.1

# --- Camera ---
LOCATION_ZOOM = 4
MIN_ZOOM = 4
MAX_ZOOM = 6.1
START_DRIFT_DEGREES = 0.1
START_ZOOM_TOLERANCE = 0.5
TICK_DRIFT_DEGREES = 0.2
TICK_ZOOM_TOLERANCE = 1

# --- Thresholds ---
DEFAULT_FOOTPRINT_THRESHOLD = 1e-7
DEFAULT_PM25_THRESHOLD = 0.0

# --- Layer / source ids ---
FOOTPRINT_LAYER_ID = "footprint-layer"
PM25_LAYER_ID = "pm25-layer"
FOOTPRINT_SOURCE_ID = "footprint-data"
PM25_SOURCE_ID = "pm25-data"

# --- Tile provider ---
TILESET_NAMESPACE = "pkulandh"

# --- Colour ramps ---
FOOTPRINT_SCALE = (
    "#FFE6E0",
    "#FFCDC4",
    "#F7A597",
    "#EE7D6A",
    "#D6553E",
    "#B32D16",
)
PM25_SCALE = (
    "#4ade80",
    "#22d3ee",
    "#fbbf24",
    "#fb923c",
    "#ef4444",
    "#dc2626",
)
MARKER_ACTIVE = "#751d0c"
MARKER_INACTIVE = "#C85450"
