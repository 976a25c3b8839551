from booking_engine.schedule.availability import (
    CLOSED_DAY_MESSAGE,
    hours_within_schedule,
    is_date_disabled,
    is_open_on_date,
)
from booking_engine.schedule.opening_hours import (
    WEEKDAYS,
    WeeklyAvailabilityGrid,
    expand_day_spec,
    format_opening_hours,
    parse_opening_hours,
)

__all__ = [
    "CLOSED_DAY_MESSAGE",
    "WEEKDAYS",
    "WeeklyAvailabilityGrid",
    "expand_day_spec",
    "format_opening_hours",
    "hours_within_schedule",
    "is_date_disabled",
    "is_open_on_date",
    "parse_opening_hours",
]
