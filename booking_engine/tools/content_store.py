"""
Content-store access for the booking engine.

The store is row-oriented: named tables of dict rows with simple
select/upsert/delete. ``InMemoryContentStore`` backs tests and the CLI; in
production the same loaders run against a hosted table store.

Tables read here:

- ``site_settings``: ``{"key", "value"}`` rows, ``opening_hours`` among them
- ``price_list``: ``{"item_name", "duration_minutes", ...}``
- ``stylist_calendars``: ``{"id", "stylist_name", "role", "image_url", "calendar_id"}``
"""

import copy
import logging
from typing import Any, Optional, Protocol

from booking_engine.config import settings
from booking_engine.schemas.booking_schema import Stylist

logger = logging.getLogger(__name__)

Row = dict[str, Any]

SETTINGS_TABLE = "site_settings"
PRICE_LIST_TABLE = "price_list"
STYLISTS_TABLE = "stylist_calendars"
OPENING_HOURS_KEY = "opening_hours"


class ContentStore(Protocol):
    def select(self, table: str) -> list[Row]: ...

    def get_setting(self, key: str) -> Optional[str]: ...


class InMemoryContentStore:
    """Dict-of-lists table store."""

    def __init__(self, tables: Optional[dict[str, list[Row]]] = None) -> None:
        self._tables: dict[str, list[Row]] = copy.deepcopy(tables) if tables else {}

    def select(self, table: str) -> list[Row]:
        return [dict(row) for row in self._tables.get(table, [])]

    def get_setting(self, key: str) -> Optional[str]:
        for row in self._tables.get(SETTINGS_TABLE, []):
            if row.get("key") == key:
                return row.get("value")
        return None

    def upsert(self, table: str, row: Row, key: str = "id") -> Row:
        """Insert ``row`` or replace the existing row sharing its ``key`` value."""
        rows = self._tables.setdefault(table, [])
        for i, existing in enumerate(rows):
            if key in row and existing.get(key) == row[key]:
                rows[i] = dict(row)
                return rows[i]
        rows.append(dict(row))
        return rows[-1]

    def delete(self, table: str, **match: Any) -> int:
        """Delete rows whose fields equal every ``match`` item. Returns the count removed."""
        rows = self._tables.get(table, [])
        kept = [r for r in rows if not all(r.get(k) == v for k, v in match.items())]
        removed = len(rows) - len(kept)
        self._tables[table] = kept
        return removed

    def reset(self) -> None:
        """Drop all tables. Used by test fixtures for isolation."""
        self._tables.clear()


def load_opening_hours(store: ContentStore) -> Optional[str]:
    """Schedule text, or None when unset (bookings then always allowed)."""
    value = store.get_setting(OPENING_HOURS_KEY)
    if not value:
        logger.info("No opening hours configured, every date is bookable")
        return None
    return value


def load_service_durations(store: ContentStore) -> dict[str, int]:
    """Map price-list item name -> duration in minutes (missing or zero -> default)."""
    default = settings.business.default_service_duration
    return {
        row["item_name"]: row.get("duration_minutes") or default
        for row in store.select(PRICE_LIST_TABLE)
        if row.get("item_name")
    }


def load_stylists(store: ContentStore) -> list[Stylist]:
    stylists = []
    for row in store.select(STYLISTS_TABLE):
        if not row.get("stylist_name"):
            continue
        stylists.append(Stylist(
            id=str(row["id"]) if row.get("id") is not None else None,
            name=row["stylist_name"],
            role=row.get("role") or "",
            img=row.get("image_url") or settings.business.placeholder_image,
            calendar_id=row.get("calendar_id"),
        ))
    return stylists
