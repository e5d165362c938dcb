"""
Partition resolver and identifier formatter tests.
"""

import pytest

from footprintmap.dates import iter_animation_dates, to_compact_date
from footprintmap.partitions import (
    CONVOLVED_BREAKPOINTS,
    FOOTPRINT_BREAKPOINTS,
    assign_partitions,
    convolved_part,
    convolved_partition,
    convolved_source_layer,
    convolved_tileset_id,
    footprint_part,
    footprint_partition,
    footprint_source_layer,
    footprint_tileset_id,
    format_coordinate,
    part_number,
    partition_for,
    tileset_for,
)


class TestFootprintPartition:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("20160801", 1),
            ("20160907", 1),
            ("20160908", 2),
            ("20170814", 2),
            ("20170815", 3),
            ("20170921", 3),
            ("20170922", 4),
            ("20180828", 4),
            ("20180829", 5),
            ("20190804", 5),
            ("20190805", 6),
            ("20190911", 6),
            ("20190912", 7),
            ("20200818", 7),
            ("20200819", 8),
            ("20201001", 8),
        ],
    )
    def test_breakpoints(self, value, expected):
        assert footprint_partition(value) == expected

    def test_before_range_is_part_one(self):
        assert footprint_partition("20150101") == 1

    @pytest.mark.parametrize("value", [None, "", "abc", "2016", "2016081", "2016abcd"])
    def test_malformed_is_part_one(self, value):
        assert footprint_partition(value) == 1

    def test_label(self):
        assert footprint_part("20190912") == "p7"
        assert part_number("p7") == 7


class TestConvolvedPartition:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("20160801", 1),
            ("20170908", 1),
            ("20170909", 2),
            ("20190821", 2),
            ("20190822", 3),
            ("20201001", 3),
        ],
    )
    def test_breakpoints(self, value, expected):
        assert convolved_partition(value) == expected

    def test_label(self):
        assert convolved_part("20180901") == "p2"

    @pytest.mark.parametrize("value", [None, "", "abc", "x", "2016081"])
    def test_malformed_is_part_one(self, value):
        assert convolved_partition(value) == 1


class TestResolverProperties:

    def test_monotonic_over_animation_domain(self):
        prev_fp = prev_cv = 0
        for day in iter_animation_dates():
            parts = assign_partitions(to_compact_date(day))
            assert parts.footprint >= prev_fp
            assert parts.convolved >= prev_cv
            prev_fp, prev_cv = parts.footprint, parts.convolved
        assert (prev_fp, prev_cv) == (8, 3)

    def test_tables_ascending(self):
        for table in (FOOTPRINT_BREAKPOINTS, CONVOLVED_BREAKPOINTS):
            starts = [start for start, _ in table]
            parts = [part for _, part in table]
            assert starts == sorted(starts)
            assert parts == list(range(1, len(table) + 1))

    def test_ranges_in_bounds(self):
        for day in iter_animation_dates():
            value = to_compact_date(day)
            assert 1 <= footprint_partition(value) <= 8
            assert 1 <= convolved_partition(value) <= 3

    def test_partition_for_dispatches_by_kind(self, lubbock):
        assert partition_for("footprint", "20190912", lubbock) == 7
        assert partition_for("pm25", "20190912", lubbock) == 3


class TestFormatters:

    def test_format_coordinate(self):
        assert format_coordinate(33.59076) == "33.59076"
        assert format_coordinate(-115.0) == "-115"
        assert format_coordinate(40.0211) == "40.0211"

    def test_footprint_tileset_id(self):
        assert footprint_tileset_id(-101.8504, 33.59076, 1) == "pkulandh._101_8504_33_59076_f_16_20_p1"

    def test_footprint_source_layer(self):
        assert footprint_source_layer(4) == "part4"

    def test_convolved_tileset_id(self):
        assert convolved_tileset_id(-101.8504, 33.59076, 1) == "pkulandh.c-101_335_p1"

    def test_convolved_tileset_id_floors_longitude(self):
        assert convolved_tileset_id(-119.7164, 36.81945, 3) == "pkulandh.c-119_368_p3"

    def test_convolved_source_layer(self):
        assert (
            convolved_source_layer(-101.8504, 33.59076, 1)
            == "convolved_1018504_3359076_20162020_p1"
        )

    def test_custom_namespace(self):
        assert footprint_tileset_id(-116.541, 33.85275, 2, "demo") == "demo._116_541_33_85275_f_16_20_p2"

    def test_tileset_for(self, lubbock):
        assert tileset_for("footprint", lubbock, 2) == (
            "pkulandh._101_8504_33_59076_f_16_20_p2",
            "part2",
        )
        assert tileset_for("pm25", lubbock, 2) == (
            "pkulandh.c-101_335_p2",
            "convolved_1018504_3359076_20162020_p2",
        )
