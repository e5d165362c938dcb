"""
Date codec and animation stepping tests.
"""

from datetime import date

import pytest

from footprintmap.constants import END_DATE, START_DATE
from footprintmap.dates import (
    InvalidDateError,
    clamp_to_range,
    iter_animation_dates,
    normalize_initial_timestamp,
    parse_compact_date,
    step_compact_date,
    step_date,
    to_display_date,
    to_filter_date,
)


class TestFormatters:

    def test_display_date(self):
        assert to_display_date("20170915") == "09/15/2017"

    @pytest.mark.parametrize("value", [None, "", "2017091", "2017-09-15"])
    def test_display_date_fallback(self, value):
        assert to_display_date(value) == "08/01/2016"

    def test_filter_date(self):
        assert to_filter_date("20160808") == "2016-08-08"

    def test_filter_date_passes_hyphenated_through(self):
        assert to_filter_date("2018-09-01") == "2018-09-01"

    @pytest.mark.parametrize("value", [None, "", "2016", "2016/08/08"])
    def test_filter_date_fallback(self, value):
        assert to_filter_date(value) == "2016-08-01"

    def test_fallback_logs_warning(self, caplog):
        with caplog.at_level("WARNING"):
            to_filter_date("nope")
        assert "Invalid date format" in caplog.text


class TestInitialTimestamp:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("08-25-2016 00:00", "20160825"),
            ("09-01-2018", "20180901"),
            ("8-25 00:00", "20160825"),
            ("20170910", "20170910"),
        ],
    )
    def test_accepted_shapes(self, value, expected):
        assert normalize_initial_timestamp(value) == expected

    @pytest.mark.parametrize("value", [None, "", "garbage"])
    def test_fallback(self, value):
        assert normalize_initial_timestamp(value) == "20160801"


class TestParse:

    def test_parse(self):
        assert parse_compact_date("20190822") == date(2019, 8, 22)

    @pytest.mark.parametrize("value", ["", "2019082", "2019-8-22", "20190230"])
    def test_rejects_malformed(self, value):
        with pytest.raises(InvalidDateError):
            parse_compact_date(value)


class TestStepping:

    def test_plain_day(self):
        assert step_date(date(2016, 8, 1)) == date(2016, 8, 2)

    def test_month_rollover(self):
        assert step_date(date(2016, 8, 31)) == date(2016, 9, 1)

    @pytest.mark.parametrize("year", [2016, 2017, 2018, 2019])
    def test_season_end_jumps_to_next_august(self, year):
        assert step_date(date(year, 9, 30)) == date(year + 1, 8, 1)

    def test_final_year_reaches_october_first(self):
        assert step_date(date(2020, 9, 30)) == date(2020, 10, 1)

    def test_end_wraps_to_start(self):
        assert step_date(END_DATE) == START_DATE

    def test_clamp(self):
        assert clamp_to_range(date(2015, 1, 1)) == START_DATE
        assert clamp_to_range(date(2021, 1, 1)) == START_DATE
        assert clamp_to_range(date(2018, 9, 3)) == date(2018, 9, 3)

    def test_step_compact(self):
        assert step_compact_date("20170930") == "20180801"

    def test_step_compact_malformed_restarts(self):
        assert step_compact_date("bad") == "20160802"


class TestAnimationDomain:

    def test_every_step_stays_in_season(self):
        dates = list(iter_animation_dates())
        assert dates[0] == START_DATE
        assert dates[-1] == END_DATE
        for day in dates[:-1]:
            assert day.month in (8, 9)
            assert START_DATE <= day <= END_DATE

    def test_domain_size(self):
        # Five August–September seasons of 61 days, plus October 1, 2020
        assert len(list(iter_animation_dates())) == 5 * 61 + 1
