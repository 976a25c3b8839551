"""Salon service catalog and service duration lookup."""

import logging
from typing import Mapping, Optional

from booking_engine.config import settings
from booking_engine.utils import format_duration

logger = logging.getLogger(__name__)

SERVICE_CATEGORIES: dict[str, list[str]] = {
    "CUT & STYLING": ["Wash cut & blowdry", "Wash & cut", "Wash & blowdry", "Styling", "Hair Up"],
    "COLOURING": [
        "T-section highlights",
        "Half head highlights",
        "Full head highlights",
        "Balyage",
        "Full head tint",
    ],
    "TREATMENTS": ["Keratin blowdry", "Hair Botox", "Olaplex"],
}


def get_all_services() -> list[str]:
    """Every bookable service name, in menu order."""
    return [item for items in SERVICE_CATEGORIES.values() for item in items]


def get_category(service: str) -> Optional[str]:
    for title, items in SERVICE_CATEGORIES.items():
        if service in items:
            return title
    return None


def get_service_duration(durations: Mapping[str, int], service: str) -> int:
    """Duration in minutes for ``service``; unknown or zero entries use the default."""
    duration = durations.get(service)
    if not duration:
        logger.debug("No duration for %r, using default", service)
        return settings.business.default_service_duration
    return duration


def describe_service(durations: Mapping[str, int], service: str) -> str:
    """Menu label such as ``"Wash & cut (1h)"``; no suffix without a price-list entry."""
    if service in durations and durations[service]:
        return f"{service} ({format_duration(durations[service])})"
    return service


def build_service_menu(durations: Mapping[str, int]) -> dict[str, list[str]]:
    """
    Menu labels grouped by category, in catalog order.

    Price-list entries missing from the catalog are listed under ``"OTHER"``
    so a service added in the content store is still bookable.
    """
    menu = {
        title: [describe_service(durations, item) for item in items]
        for title, items in SERVICE_CATEGORIES.items()
    }
    catalog = set(get_all_services())
    extras = [name for name in durations if name not in catalog]
    if extras:
        menu["OTHER"] = [describe_service(durations, name) for name in extras]
    return menu
