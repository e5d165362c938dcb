"""Environment-driven configuration. Call `load_dotenv()` before `load_config()`."""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_STYLE_URL = "mapbox://styles/pkulandh/cm9iyi6qq00jo01rce7xjcfay"


class ConfigError(Exception):
    """A required setting is missing or unusable."""


@dataclass(frozen=True)
class MapboxConfig:
    access_token: str
    style_url: str = DEFAULT_STYLE_URL
    default_center: tuple[float, float] = (-115.0, 40.0)  # (lng, lat)
    default_zoom: float = 4.0
    log_level: str = "INFO"


def _optional(key: str, default: str) -> str:
    value = os.environ.get(key)
    if value is None or not value.strip():
        logger.warning("Environment variable %s is not defined, using %s", key, default)
        return default
    return value.strip()


def _optional_float(key: str, default: float) -> float:
    raw = _optional(key, str(default))
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc


def load_config() -> MapboxConfig:
    """Read settings from the process environment.

    Raises:
        ConfigError: MAPBOX_TOKEN is missing or blank, or a numeric setting
            does not parse.
    """
    token = os.environ.get("MAPBOX_TOKEN", "").strip()
    if not token:
        raise ConfigError("Required environment variable MAPBOX_TOKEN is not defined or empty")

    return MapboxConfig(
        access_token=token,
        style_url=_optional("MAPBOX_STYLE", DEFAULT_STYLE_URL),
        default_center=(
            _optional_float("MAPBOX_CENTER_LNG", -115.0),
            _optional_float("MAPBOX_CENTER_LAT", 40.0),
        ),
        default_zoom=_optional_float("MAPBOX_ZOOM", 4.0),
        log_level=_optional("FOOTPRINTMAP_LOG_LEVEL", "INFO").upper(),
    )
