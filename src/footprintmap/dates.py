"""Date codec — compact YYYYMMDD, display, and filter-query forms, plus animation stepping.

Every public formatter fails soft: malformed input logs a warning and yields a
documented fallback constant instead of raising.
"""

import logging
from collections.abc import Iterator
from datetime import date, datetime, timedelta

from footprintmap.constants import (
    DEFAULT_DATE,
    DEFAULT_DISPLAY_DATE,
    DEFAULT_FILTER_DATE,
    END_DATE,
    FINAL_YEAR,
    START_DATE,
)

logger = logging.getLogger(__name__)


class InvalidDateError(ValueError):
    """Input is not a valid compact YYYYMMDD date."""


def parse_compact_date(value: str) -> date:
    """Strictly parse a YYYYMMDD string.

    Raises:
        InvalidDateError: On wrong length, non-digits, or an impossible date.
    """
    if not value or len(value) != 8 or not value.isdigit():
        raise InvalidDateError(f"Expected YYYYMMDD, got {value!r}")
    try:
        return datetime.strptime(value, "%Y%m%d").date()
    except ValueError as exc:
        raise InvalidDateError(f"Not a calendar date: {value!r}") from exc


def to_compact_date(value: date) -> str:
    return value.strftime("%Y%m%d")


def to_display_date(value: str | None) -> str:
    """YYYYMMDD → MM/DD/YYYY. Falls back to 08/01/2016."""
    if not value:
        logger.warning("Null or empty date string provided to to_display_date")
        return DEFAULT_DISPLAY_DATE
    if len(value) != 8:
        logger.warning("Invalid date format in to_display_date: %r", value)
        return DEFAULT_DISPLAY_DATE
    return f"{value[4:6]}/{value[6:8]}/{value[0:4]}"


def to_filter_date(value: str | None) -> str:
    """YYYYMMDD (or already-hyphenated YYYY-MM-DD) → YYYY-MM-DD.

    Falls back to 2016-08-01 on anything else.
    """
    if not value:
        logger.warning("Null or empty date string provided to to_filter_date")
        return DEFAULT_FILTER_DATE
    if "-" in value and len(value) == 10:
        return value
    if len(value) == 8:
        return f"{value[0:4]}-{value[4:6]}-{value[6:8]}"
    logger.warning("Invalid date format in to_filter_date: %r", value)
    return DEFAULT_FILTER_DATE


def normalize_initial_timestamp(value: str | None) -> str:
    """Normalize an initial timestamp to YYYYMMDD.

    Accepted shapes:
      - "20160825"            compact, passed through
      - "08-25-2016 00:00"    MM-DD-YYYY with optional time
      - "8-25 00:00"          MM-DD, year defaults to 2016

    Anything else yields 20160801.
    """
    if not value:
        logger.warning("Null or empty timestamp provided")
        return DEFAULT_DATE

    if len(value) == 8 and "-" not in value and " " not in value:
        return value

    parts = value.split(" ")[0].split("-")
    if len(parts) == 3:
        return f"{parts[2]}{parts[0]}{parts[1]}"
    if len(parts) == 2:
        return f"2016{parts[0].zfill(2)}{parts[1].zfill(2)}"

    logger.warning("Unrecognized timestamp %r, using %s", value, DEFAULT_DATE)
    return DEFAULT_DATE


def clamp_to_range(value: date) -> date:
    """Dates outside START_DATE..END_DATE restart at START_DATE."""
    if value < START_DATE or value > END_DATE:
        return START_DATE
    return value


def step_date(value: date) -> date:
    """Advance one simulated day.

    Past END_DATE wraps to START_DATE. Landing in October of any year before
    the final year jumps to August 1 of the next year; October 1 of the final
    year is the terminal date.
    """
    nxt = value + timedelta(days=1)
    if nxt > END_DATE:
        nxt = START_DATE
    if nxt.month == 10 and nxt.year < FINAL_YEAR:
        nxt = date(nxt.year + 1, 8, 1)
    return nxt


def step_compact_date(value: str) -> str:
    """step_date on YYYYMMDD strings. Malformed input restarts at the start date."""
    try:
        current = clamp_to_range(parse_compact_date(value))
    except InvalidDateError:
        logger.warning("Cannot step malformed date %r, restarting", value)
        current = START_DATE
    return to_compact_date(step_date(current))


def iter_animation_dates() -> Iterator[date]:
    """Yield every date the animation visits, START_DATE through END_DATE."""
    current = START_DATE
    while True:
        yield current
        if current == END_DATE:
            return
        current = step_date(current)
