"""
Opening-hours parser: free-text weekly schedule -> weekly availability grid.

The schedule text is the authoritative source, for example::

    "Mon-Fri: 9 AM - 6 PM, Sat: 10 AM - 4 PM"

Comma-separated clauses, each ``<day-spec>: <time-range>``. A day-spec is a
single abbreviation or an inclusive ``Start-End`` range in Mon..Sun order.
The grid holds 13 one-hour buckets per weekday, bucket ``i`` covering
``[8 + i, 9 + i)``. Malformed clauses are skipped, never raised.

Usage:
    grid = parse_opening_hours("Mon-Fri: 9 AM - 6 PM")
    assert grid["Mon"][1]        # 09:00 bucket
    assert not grid["Mon"][10]   # 18:00 bucket, end hour is exclusive
"""

import logging
import re
from typing import Iterator, Optional

from booking_engine.utils import WEEKDAY_ABBREVIATIONS

logger = logging.getLogger(__name__)

WEEKDAYS = WEEKDAY_ABBREVIATIONS
FIRST_BUCKET_HOUR = 8
BUCKET_COUNT = 13
BUCKET_HOURS = tuple(FIRST_BUCKET_HOUR + i for i in range(BUCKET_COUNT))

CLOSED_TOKEN = "closed"

WeeklyAvailabilityGrid = dict[str, tuple[bool, ...]]

_CLAUSE_RE = re.compile(r"([A-Za-z\-]+):\s*(.+)")
_TIME_RANGE_RE = re.compile(r"(\d+)\s*(AM|PM)\s*-\s*(\d+)\s*(AM|PM)", re.IGNORECASE)


def expand_day_spec(day_spec: str) -> frozenset[int]:
    """
    Resolve a day-spec to the set of weekday indices it covers (Mon=0).

    ``"Mon-Fri"`` covers 0..4 inclusive. A range whose start comes after its
    end (``"Fri-Mon"``) or that names an unknown day covers nothing. Without a
    ``-`` the first canonical abbreviation contained in the token wins, so
    ``"Saturday"`` resolves to Sat.
    """
    if "-" in day_spec:
        start, _, end = day_spec.partition("-")
        start, end = start.strip(), end.split("-")[0].strip()
        if start not in WEEKDAYS or end not in WEEKDAYS:
            return frozenset()
        return frozenset(range(WEEKDAYS.index(start), WEEKDAYS.index(end) + 1))

    for index, day in enumerate(WEEKDAYS):
        if day in day_spec:
            return frozenset({index})
    return frozenset()


def to_24_hour(hour: int, meridiem: str) -> int:
    """Convert a 12-hour clock hour to 24-hour (12 AM -> 0, 12 PM -> 12)."""
    meridiem = meridiem.upper()
    if meridiem == "PM" and hour != 12:
        return hour + 12
    if meridiem == "AM" and hour == 12:
        return 0
    return hour


def parse_time_range(text: str) -> Optional[tuple[int, int]]:
    """Parse ``"9 AM - 6 PM"`` into ``(9, 18)``. Returns None if it doesn't match."""
    match = _TIME_RANGE_RE.search(text)
    if not match:
        return None
    start_hour, start_period, end_hour, end_period = match.groups()
    return to_24_hour(int(start_hour), start_period), to_24_hour(int(end_hour), end_period)


def iter_clauses(text: str) -> Iterator[tuple[str, str]]:
    """Yield ``(day_spec, time_part)`` for every well-formed clause."""
    for part in (p.strip() for p in text.split(",")):
        match = _CLAUSE_RE.search(part)
        if not match:
            logger.debug("Skipping unrecognised schedule clause: %r", part)
            continue
        yield match.group(1), match.group(2)


def is_closed_text(text: Optional[str]) -> bool:
    """True for absent/empty text or the literal ``closed`` in any casing."""
    return not text or text.strip().lower() == CLOSED_TOKEN


def empty_grid() -> WeeklyAvailabilityGrid:
    return {day: (False,) * BUCKET_COUNT for day in WEEKDAYS}


def parse_opening_hours(text: Optional[str]) -> WeeklyAvailabilityGrid:
    """
    Build the weekly availability grid for a schedule text.

    Every weekday key is present. A bucket is open when
    ``start_hour <= bucket_hour < end_hour`` for any clause targeting its day;
    clauses only ever open buckets, never close them.
    """
    if is_closed_text(text):
        return empty_grid()

    open_buckets: dict[str, list[bool]] = {day: [False] * BUCKET_COUNT for day in WEEKDAYS}

    for day_spec, time_part in iter_clauses(text):
        target_days = [WEEKDAYS[i] for i in sorted(expand_day_spec(day_spec))]
        if not target_days:
            logger.debug("Day-spec %r matched no weekday", day_spec)

        for sub_range in (t.strip() for t in time_part.split(",")):
            hours = parse_time_range(sub_range)
            if hours is None:
                logger.debug("Skipping unrecognised time range: %r", sub_range)
                continue
            start_hour, end_hour = hours
            for day in target_days:
                for idx, bucket_hour in enumerate(BUCKET_HOURS):
                    if start_hour <= bucket_hour < end_hour:
                        open_buckets[day][idx] = True

    return {day: tuple(buckets) for day, buckets in open_buckets.items()}


def open_hours(grid: WeeklyAvailabilityGrid, weekday: str) -> list[int]:
    """Clock hours whose bucket is open on ``weekday``."""
    return [hour for hour, is_open in zip(BUCKET_HOURS, grid[weekday]) if is_open]


def _format_hour(hour: int) -> str:
    if hour in (0, 24):
        return "12 AM"
    if hour < 12:
        return f"{hour} AM"
    if hour == 12:
        return "12 PM"
    return f"{hour - 12} PM"


def _contiguous_ranges(buckets: tuple[bool, ...]) -> list[tuple[int, int]]:
    ranges: list[tuple[int, int]] = []
    start: Optional[int] = None
    for hour, is_open in zip(BUCKET_HOURS, buckets):
        if is_open and start is None:
            start = hour
        elif not is_open and start is not None:
            ranges.append((start, hour))
            start = None
    if start is not None:
        ranges.append((start, BUCKET_HOURS[-1] + 1))
    return ranges


def format_opening_hours(grid: WeeklyAvailabilityGrid) -> str:
    """
    Serialise a grid back to schedule text.

    Consecutive weekdays with identical hours share a ``Start-End`` day-spec;
    a day with split hours gets one clause per range. Closed days are omitted,
    and a grid with no open bucket at all becomes ``"closed"``.
    """
    clauses: list[str] = []
    index = 0
    while index < len(WEEKDAYS):
        buckets = grid[WEEKDAYS[index]]
        run_end = index
        while run_end + 1 < len(WEEKDAYS) and grid[WEEKDAYS[run_end + 1]] == buckets:
            run_end += 1

        if any(buckets):
            if run_end == index:
                day_spec = WEEKDAYS[index]
            else:
                day_spec = f"{WEEKDAYS[index]}-{WEEKDAYS[run_end]}"
            for start, end in _contiguous_ranges(buckets):
                clauses.append(f"{day_spec}: {_format_hour(start)} - {_format_hour(end)}")
        index = run_end + 1

    return ", ".join(clauses) if clauses else CLOSED_TOKEN
