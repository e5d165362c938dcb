"""Data model definitions — catalog sites, partition assignments, map layers, and animation sessions."""

from dataclasses import dataclass
from typing import Any, Literal

from footprintmap.constants import (
    DEFAULT_FOOTPRINT_THRESHOLD,
    DEFAULT_PM25_THRESHOLD,
)

DatasetKind = Literal["footprint", "pm25"]
LayerType = Literal["footprint", "pm25", "combined"]

DATASET_KINDS: tuple[DatasetKind, ...] = ("footprint", "pm25")


@dataclass(frozen=True)
class Location:
    """A monitoring site from the fixed catalog."""

    lng: float  # Longitude (signed decimal degrees)
    lat: float  # Latitude (signed decimal degrees)
    name: str  # Display name ("33.59076°N, 101.8504°W")
    tileset_id: str  # Footprint part-1 tileset identifier
    layer_name: str = "part1"  # Footprint part-1 source-layer
    has_time_series: bool = True


@dataclass(frozen=True)
class PartitionAssignment:
    """Active partition per dataset for one date. Recomputed, never stored."""

    footprint: int  # 1..8
    convolved: int  # 1..3

    def for_kind(self, kind: DatasetKind) -> int:
        return self.footprint if kind == "footprint" else self.convolved


@dataclass(frozen=True)
class LoadedLayerState:
    """A source/layer pair currently attached to the live map."""

    kind: DatasetKind
    layer_id: str
    source_id: str
    tileset_id: str
    source_layer: str
    partition: int


@dataclass(frozen=True)
class CameraState:
    """Map camera. center is (lng, lat)."""

    center: tuple[float, float]
    zoom: float
    bearing: float = 0.0
    pitch: float = 0.0

    def as_options(self) -> dict[str, Any]:
        return {
            "center": list(self.center),
            "zoom": self.zoom,
            "bearing": self.bearing,
            "pitch": self.pitch,
        }


@dataclass
class Thresholds:
    """Filter thresholds shared by the controller and the animation driver."""

    footprint: float = DEFAULT_FOOTPRINT_THRESHOLD
    pm25: float = DEFAULT_PM25_THRESHOLD

    def for_kind(self, kind: DatasetKind) -> float:
        return self.footprint if kind == "footprint" else self.pm25


@dataclass
class CancellationToken:
    """Cooperative cancellation flag. A new token is issued for every session."""

    generation: int
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class AnimationSession:
    """One play-through of the day-stepping loop for a single location."""

    location: Location
    token: CancellationToken
    pending: Any = None  # TimerHandle of the next scheduled callback
    ticks: int = 0
    reloads: int = 0
    errors: int = 0
