"""
Command-line entry point for inspecting schedules and the scheduling backend.

Usage:
    python main.py grid --hours "Mon-Fri: 9 AM - 6 PM, Sat: 10 AM - 4 PM"
    python main.py check 2025-03-15 --hours "Mon-Fri: 9 AM - 6 PM"
    python main.py slots 2025-03-17 --stylist "Anna"
    python main.py services --duration "Wash & cut=45"
"""

import argparse
import asyncio
import logging
import sys

from booking_engine.config import settings
from booking_engine.schedule.availability import (
    CLOSED_DAY_MESSAGE,
    hours_within_schedule,
    is_date_disabled,
    is_open_on_date,
)
from booking_engine.schedule.opening_hours import (
    BUCKET_HOURS,
    format_opening_hours,
    parse_opening_hours,
)
from booking_engine.tools.scheduling_backend import SchedulingBackend
from booking_engine.tools.services import build_service_menu
from booking_engine.utils import to_date

logger = logging.getLogger(__name__)


def _print_grid(hours: str) -> None:
    grid = parse_opening_hours(hours)
    header = "     " + " ".join(f"{h:02d}" for h in BUCKET_HOURS)
    sys.stdout.write(header + "\n")
    for day, buckets in grid.items():
        cells = " ".join(" #" if is_open else " ." for is_open in buckets)
        sys.stdout.write(f"{day}  {cells}\n")
    sys.stdout.write(f"\nNormalised: {format_opening_hours(grid)}\n")


def _print_check(day: str, hours: str) -> None:
    open_day = is_open_on_date(hours, day)
    in_hours = ", ".join(hours_within_schedule(hours, day)) or "-"
    sys.stdout.write(f"Open (day-level):    {open_day}\n")
    sys.stdout.write(f"Disabled in picker:  {is_date_disabled(day, hours)}\n")
    sys.stdout.write(f"Hours in schedule:   {in_hours}\n")
    if not open_day:
        sys.stdout.write(CLOSED_DAY_MESSAGE + "\n")


def _parse_durations(entries: list[str]) -> dict[str, int]:
    durations = {}
    for entry in entries:
        name, sep, minutes = entry.rpartition("=")
        if not sep or not name.strip() or not minutes.strip().isdigit():
            raise ValueError(f"Invalid duration: {entry!r} (expected NAME=MINUTES)")
        durations[name.strip()] = int(minutes)
    return durations


def _print_services(durations: dict[str, int]) -> None:
    for category, labels in build_service_menu(durations).items():
        sys.stdout.write(f"{category}\n")
        for label in labels:
            sys.stdout.write(f"  {label}\n")


async def _print_slots(day: str, stylist: str, base_url: str) -> None:
    async with SchedulingBackend(base_url=base_url) as backend:
        result = await backend.fetch_slots(day, stylist or None)
    suffix = " (fallback)" if result.fallback else ""
    sys.stdout.write(f"{', '.join(result.slots) or result.error or 'No slots'}{suffix}\n")


def main() -> None:
    parser = argparse.ArgumentParser(
        description=f"Inspect opening hours and availability for {settings.business.name}."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    grid_cmd = sub.add_parser("grid", help="Print the weekly availability grid.")
    grid_cmd.add_argument("--hours", required=True, help="Opening-hours text.")

    check_cmd = sub.add_parser("check", help="Check whether a date is bookable.")
    check_cmd.add_argument("date", help="Date as YYYY-MM-DD.")
    check_cmd.add_argument("--hours", default="", help="Opening-hours text (empty = always open).")

    slots_cmd = sub.add_parser("slots", help="Query the scheduling backend for slots.")
    slots_cmd.add_argument("date", help="Date as YYYY-MM-DD.")
    slots_cmd.add_argument("--stylist", default="", help="Stylist name.")
    slots_cmd.add_argument(
        "--base-url",
        default=settings.backend.base_url,
        help="Scheduling backend base URL.",
    )

    services_cmd = sub.add_parser("services", help="List the service menu.")
    services_cmd.add_argument(
        "--duration",
        action="append",
        default=[],
        help="Price-list duration as NAME=MINUTES (repeatable).",
    )

    args = parser.parse_args()

    if getattr(args, "date", None):
        try:
            to_date(args.date)
        except ValueError:
            logger.error("Invalid date: %s (expected YYYY-MM-DD)", args.date)
            sys.exit(1)

    if args.command == "grid":
        _print_grid(args.hours)
    elif args.command == "check":
        _print_check(args.date, args.hours)
    elif args.command == "services":
        try:
            durations = _parse_durations(args.duration)
        except ValueError as exc:
            logger.error("%s", exc)
            sys.exit(1)
        _print_services(durations)
    else:
        asyncio.run(_print_slots(args.date, args.stylist, args.base_url))


if __name__ == "__main__":
    main()
