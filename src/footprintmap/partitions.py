"""Temporal tileset partition resolver.

Tile datasets were pre-split into "parts" at hand-picked dates, separately for
the footprint and the convolved (PM2.5) data. Each table below lists the first
date of every part in ascending order; a date belongs to the last entry whose
start is on or before it. Dates before the first entry are part 1.

The identifier formatters address real pre-built tilesets, so their string
rules (sign stripping, decimal point handling, truncation) must not drift.
"""

import logging
import math
from bisect import bisect_right
from collections.abc import Callable

from footprintmap.constants import TILESET_NAMESPACE
from footprintmap.models import DatasetKind, Location, PartitionAssignment

logger = logging.getLogger(__name__)

Breakpoints = tuple[tuple[tuple[int, int, int], int], ...]

FOOTPRINT_BREAKPOINTS: Breakpoints = (
    ((2016, 8, 1), 1),
    ((2016, 9, 8), 2),
    ((2017, 8, 15), 3),
    ((2017, 9, 22), 4),
    ((2018, 8, 29), 5),
    ((2019, 8, 5), 6),
    ((2019, 9, 12), 7),
    ((2020, 8, 19), 8),
)

CONVOLVED_BREAKPOINTS: Breakpoints = (
    ((2016, 8, 1), 1),
    ((2017, 9, 9), 2),
    ((2019, 8, 22), 3),
)


def _split_date(value: str | None, kind: str) -> tuple[int, int, int] | None:
    if not value:
        logger.warning("Null or empty date string provided for %s part", kind)
        return None
    if len(value) != 8:
        logger.warning("Invalid date format for determining %s part: %r", kind, value)
        return None
    try:
        return int(value[0:4]), int(value[4:6]), int(value[6:8])
    except ValueError:
        logger.warning("Non-numeric date for determining %s part: %r", kind, value)
        return None


def _lookup(table: Breakpoints, ymd: tuple[int, int, int]) -> int:
    starts = [start for start, _ in table]
    idx = bisect_right(starts, ymd) - 1
    if idx < 0:
        return table[0][1]
    return table[idx][1]


def footprint_partition(value: str | None, location: Location | None = None) -> int:
    """Footprint part number (1..8) for a YYYYMMDD date. Malformed input is part 1."""
    ymd = _split_date(value, "footprint")
    if ymd is None:
        return 1
    return _lookup(FOOTPRINT_BREAKPOINTS, ymd)


def convolved_partition(value: str | None, location: Location | None = None) -> int:
    """Convolved/PM2.5 part number (1..3) for a YYYYMMDD date. Malformed input is part 1."""
    ymd = _split_date(value, "convolved")
    if ymd is None:
        return 1
    return _lookup(CONVOLVED_BREAKPOINTS, ymd)


def footprint_part(value: str | None, location: Location | None = None) -> str:
    return f"p{footprint_partition(value, location)}"


def convolved_part(value: str | None, location: Location | None = None) -> str:
    return f"p{convolved_partition(value, location)}"


def part_number(label: str) -> int:
    """'p3' → 3."""
    return int(label[1:])


def part_function(
    kind: DatasetKind, location: Location | None = None
) -> Callable[[str | None, Location | None], int]:
    """Partition resolver for a dataset kind at a location.

    All catalog locations share the same breakpoint tables.
    """
    return footprint_partition if kind == "footprint" else convolved_partition


def partition_for(
    kind: DatasetKind, value: str | None, location: Location | None = None
) -> int:
    return part_function(kind, location)(value, location)


def assign_partitions(
    value: str | None, location: Location | None = None
) -> PartitionAssignment:
    return PartitionAssignment(
        footprint=footprint_partition(value, location),
        convolved=convolved_partition(value, location),
    )


# --- Identifier formatters ---


def format_coordinate(value: float) -> str:
    """Shortest round-trip decimal text, integers without a trailing '.0'."""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return repr(value)


def footprint_tileset_id(
    lng: float, lat: float, part: int, namespace: str = TILESET_NAMESPACE
) -> str:
    """pkulandh._101_8504_33_59076_f_16_20_p1"""
    lng_text = format_coordinate(abs(lng)).replace(".", "_", 1)
    lat_text = format_coordinate(lat).replace(".", "_", 1)
    return f"{namespace}._{lng_text}_{lat_text}_f_16_20_p{part}"


def footprint_source_layer(part: int) -> str:
    return f"part{part}"


def convolved_tileset_id(
    lng: float, lat: float, part: int, namespace: str = TILESET_NAMESPACE
) -> str:
    """pkulandh.c-101_335_p1: longitude floored, latitude cut to three characters."""
    lng_int = math.floor(abs(lng))
    lat_digits = format_coordinate(lat).replace(".", "", 1)[:3]
    return f"{namespace}.c-{lng_int}_{lat_digits}_p{part}"


def convolved_source_layer(lng: float, lat: float, part: int) -> str:
    """convolved_1018504_3359076_20162020_p1"""
    lng_text = format_coordinate(abs(lng)).replace(".", "", 1)
    lat_text = format_coordinate(lat).replace(".", "", 1)
    return f"convolved_{lng_text}_{lat_text}_20162020_p{part}"


def tileset_for(
    kind: DatasetKind,
    location: Location,
    part: int,
    namespace: str = TILESET_NAMESPACE,
) -> tuple[str, str]:
    """Return (tileset_id, source_layer) for a dataset kind, location and part."""
    if kind == "footprint":
        return (
            footprint_tileset_id(location.lng, location.lat, part, namespace),
            footprint_source_layer(part),
        )
    return (
        convolved_tileset_id(location.lng, location.lat, part, namespace),
        convolved_source_layer(location.lng, location.lat, part),
    )
