"""
Date-level availability checks against the opening-hours text.

Two distinct rules live here:

- ``is_open_on_date`` is the day-level check used before fetching slots. It
  fails open (no schedule configured means bookable) and only looks at
  day-specs, never at hours.
- ``is_date_disabled`` is the calendar-picker rule. It uses the parsed grid,
  so a day whose clause has an unparseable time range is open at the day
  level yet disabled in the picker.
"""

import logging
from datetime import date
from typing import Optional, Union

from booking_engine.schedule.opening_hours import (
    expand_day_spec,
    iter_clauses,
    open_hours,
    parse_opening_hours,
)
from booking_engine.utils import to_date, weekday_abbr

logger = logging.getLogger(__name__)

CLOSED_DAY_MESSAGE = "Sorry, we are closed on this day. Please select another date."


def is_open_on_date(schedule_text: Optional[str], day: Union[date, str]) -> bool:
    """True if any clause's day-spec covers the weekday of ``day``."""
    if not schedule_text:
        return True

    weekday = to_date(day).weekday()
    for day_spec, _ in iter_clauses(schedule_text):
        if weekday in expand_day_spec(day_spec):
            return True

    logger.debug("No schedule clause covers %s", weekday_abbr(day))
    return False


def is_date_disabled(
    day: Union[date, str],
    schedule_text: Optional[str],
    today: Optional[date] = None,
) -> bool:
    """
    Calendar-picker exclusion rule.

    A date is disabled when it lies before ``today`` or, if a schedule is
    configured, when its weekday has no open bucket in the parsed grid.
    """
    day = to_date(day)
    today = today or date.today()
    if day < today:
        return True
    if not schedule_text:
        return False
    grid = parse_opening_hours(schedule_text)
    return not any(grid[weekday_abbr(day)])


def hours_within_schedule(schedule_text: Optional[str], day: Union[date, str]) -> list[str]:
    """``HH:00`` start times of the open buckets on the weekday of ``day``."""
    if not schedule_text:
        return []
    grid = parse_opening_hours(schedule_text)
    return [f"{hour:02d}:00" for hour in open_hours(grid, weekday_abbr(day))]
