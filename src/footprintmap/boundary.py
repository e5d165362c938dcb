"""Boundary-change detection: does moving to a new date need a source swap?

A style filter can only select features that exist in the attached source. When
the new date lives in a different partition, the source has to be replaced
first; otherwise a cheap filter update is enough.
"""

import logging
import re

from footprintmap.constants import FOOTPRINT_LAYER_ID, PM25_LAYER_ID
from footprintmap.mapstate import MapHandle
from footprintmap.models import DatasetKind, Location
from footprintmap.partitions import partition_for

logger = logging.getLogger(__name__)

LAYER_IDS: dict[DatasetKind, str] = {
    "footprint": FOOTPRINT_LAYER_ID,
    "pm25": PM25_LAYER_ID,
}

_TRAILING_DIGITS = re.compile(r"(\d+)$")


def part_from_source_layer(name: str | None) -> int | None:
    """Partition number encoded in a source-layer name.

    'convolved_..._20162020_p2' → 2 (text after the last '_p');
    'part3' → 3 (trailing digits). None when nothing parses.
    """
    if not name:
        return None
    if "_p" in name:
        suffix = name[name.rindex("_p") + 2 :]
        return int(suffix) if suffix.isdigit() else None
    match = _TRAILING_DIGITS.search(name)
    return int(match.group(1)) if match else None


def needs_reload(
    loaded_source_layer: str | None,
    candidate_date: str,
    location: Location | None,
    kind: DatasetKind,
) -> bool:
    """True iff candidate_date resolves to a different part than the loaded one."""
    current = part_from_source_layer(loaded_source_layer)
    candidate = partition_for(kind, candidate_date, location)
    return current != candidate


def loaded_partition(map_handle: MapHandle, layer_id: str) -> int | None:
    """Partition of an attached layer: recorded metadata first, then the source-layer name."""
    layer = map_handle.get_layer(layer_id)
    if layer is None:
        return None
    recorded = (layer.get("metadata") or {}).get("partition")
    if isinstance(recorded, int):
        return recorded
    return part_from_source_layer(layer.get("source-layer"))


def map_needs_reload(
    map_handle: MapHandle, candidate_date: str, location: Location | None
) -> bool:
    """Check every attached dataset layer against candidate_date.

    Footprint and PM2.5 are split on different dates, so in combined mode
    either one alone can force a reload. No attached dataset layer also
    counts as needing a (first) load.
    """
    attached = False
    for kind, layer_id in LAYER_IDS.items():
        if map_handle.get_layer(layer_id) is None:
            continue
        attached = True
        current = loaded_partition(map_handle, layer_id)
        candidate = partition_for(kind, candidate_date, location)
        if current != candidate:
            logger.info(
                "%s partition change p%s → p%s at %s", kind, current, candidate, candidate_date
            )
            return True
    return not attached
