"""
Location catalog tests.
"""

from footprintmap.locations import LOCATIONS, find_location, location_name, parse_location


def test_catalog_size_and_uniqueness():
    assert len(LOCATIONS) == 32
    assert len({(loc.lng, loc.lat) for loc in LOCATIONS}) == 32
    assert len({loc.name for loc in LOCATIONS}) == 32


def test_catalog_is_western_us():
    for loc in LOCATIONS:
        assert -125 < loc.lng < -100
        assert 30 < loc.lat < 50
        assert loc.has_time_series


def test_parse_location():
    loc = parse_location("-101.8504 33.59076")
    assert loc.lng == -101.8504
    assert loc.lat == 33.59076
    assert loc.name == "33.59076°N, 101.8504°W"
    assert loc.tileset_id == "pkulandh._101_8504_33_59076_f_16_20_p1"
    assert loc.layer_name == "part1"


def test_location_name_drops_sign():
    assert location_name(-122.3086, 47.56824) == "47.56824°N, 122.3086°W"


def test_find_location():
    assert find_location("40.0211°N, 105.2634°W").lng == -105.2634
    assert find_location("nowhere") is None
