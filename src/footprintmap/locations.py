"""Fixed catalog of the 32 monitoring locations."""

from footprintmap.models import Location
from footprintmap.partitions import (
    footprint_source_layer,
    footprint_tileset_id,
    format_coordinate,
)

# "lng lat" pairs, west to east
_LOCATION_STRINGS: tuple[str, ...] = (
    "-101.8504 33.59076",
    "-104.8286 38.84801",
    "-104.9876 39.75118",
    "-105.0797 40.57129",
    "-105.2634 40.0211",
    "-106.5012 31.76829",
    "-106.5852 35.1343",
    "-110.9823 32.29515",
    "-111.8722 40.73639",
    "-112.0958 33.50383",
    "-115.0529 36.0487",
    "-116.2703 43.63611",
    "-116.541 33.85275",
    "-117.1497 32.70149",
    "-117.3255 34.51096",
    "-117.331 33.67649",
    "-117.4263 47.69978",
    "-118.1305 34.66974",
    "-118.5284 34.38344",
    "-119.0626 35.35661",
    "-119.1432 34.25239",
    "-119.2042 46.21835",
    "-119.7164 36.81945",
    "-119.8077 39.52508",
    "-120.9942 37.64216",
    "-121.265 38.74643",
    "-121.2685 37.95074",
    "-121.8949 37.3485",
    "-122.3086 47.56824",
    "-122.7102 38.4435",
    "-122.8164 45.47019",
    "-123.0837 44.02631",
)


def location_name(lng: float, lat: float) -> str:
    return f"{format_coordinate(lat)}°N, {format_coordinate(abs(lng))}°W"


def parse_location(text: str) -> Location:
    """Build a Location from a "lng lat" string."""
    lng_text, lat_text = text.split()
    lng = float(lng_text)
    lat = float(lat_text)
    return Location(
        lng=lng,
        lat=lat,
        name=location_name(lng, lat),
        tileset_id=footprint_tileset_id(lng, lat, 1),
        layer_name=footprint_source_layer(1),
    )


LOCATIONS: tuple[Location, ...] = tuple(parse_location(s) for s in _LOCATION_STRINGS)


def find_location(name: str) -> Location | None:
    """Look up a catalog location by display name."""
    for location in LOCATIONS:
        if location.name == name:
            return location
    return None
