"""Shared test fixtures and helpers."""

import json
import random
from typing import Optional

import httpx
import pytest

from booking_engine.schemas.booking_schema import Stylist
from booking_engine.tools.content_store import InMemoryContentStore
from booking_engine.tools.scheduling_backend import SchedulingBackend
from booking_engine.wizard.booking_wizard import BookingWizard
from booking_engine.wizard.state_machine import WizardState

WEEKLY_HOURS = "Mon-Fri: 9 AM - 6 PM, Sat: 10 AM - 4 PM"

# 2025-03-15 is a Saturday
SATURDAY = "2025-03-15"
SUNDAY = "2025-03-16"
MONDAY = "2025-03-17"
TUESDAY = "2025-03-18"

STYLISTS = [
    Stylist(id="1", name="Anna", role="Senior Stylist", calendar_id="cal-anna"),
    Stylist(id="2", name="Ben", role="Colourist", calendar_id="cal-ben"),
]


class FakeBackend:
    """Scripted scheduling backend served through ``httpx.MockTransport``."""

    def __init__(
        self,
        slots_by_date: Optional[dict[str, list[str]]] = None,
        availability_status: int = 200,
        book_status: int = 200,
        book_body: Optional[dict] = None,
        raise_on: Optional[str] = None,
    ) -> None:
        self.slots_by_date = slots_by_date or {}
        self.availability_status = availability_status
        self.book_status = book_status
        self.book_body = book_body if book_body is not None else {"success": True}
        self.raise_on = raise_on
        self.requests: list[httpx.Request] = []

    @property
    def booked_payloads(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests if r.method == "POST"]

    @property
    def availability_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_on and request.url.path == self.raise_on:
            raise httpx.ConnectError("backend unreachable", request=request)

        if request.url.path == "/api/availability":
            if self.availability_status != 200:
                return httpx.Response(self.availability_status)
            day = request.url.params.get("date")
            return httpx.Response(200, json={"slots": self.slots_by_date.get(day, [])})

        if request.url.path == "/api/book":
            if self.book_status != 200:
                return httpx.Response(self.book_status)
            return httpx.Response(200, json=self.book_body)

        return httpx.Response(404)

    def client(self) -> SchedulingBackend:
        http = httpx.AsyncClient(
            transport=httpx.MockTransport(self.handler),
            base_url="http://backend.test",
        )
        return SchedulingBackend(client=http)


@pytest.fixture
def fake_backend():
    return FakeBackend(slots_by_date={
        MONDAY: ["09:00", "10:00", "14:00"],
        TUESDAY: ["11:00", "15:00"],
        SATURDAY: ["10:00", "11:00"],
    })


@pytest.fixture
def wizard(fake_backend):
    return BookingWizard(
        fake_backend.client(),
        stylists=STYLISTS,
        service_durations={"Wash & cut": 45, "Full head tint": 120},
        opening_hours=WEEKLY_HOURS,
        rng=random.Random(7),
        fallback_delay_sec=0,
        session_id="BOOK-test",
    )


@pytest.fixture
def state():
    return WizardState()


@pytest.fixture
def content_store():
    return InMemoryContentStore({
        "site_settings": [
            {"key": "opening_hours", "value": WEEKLY_HOURS},
            {"key": "hero_title", "value": "Welcome"},
        ],
        "price_list": [
            {"id": 1, "item_name": "Wash & cut", "duration_minutes": 45},
            {"id": 2, "item_name": "Full head tint", "duration_minutes": 120},
            {"id": 3, "item_name": "Styling", "duration_minutes": None},
        ],
        "stylist_calendars": [
            {"id": 1, "stylist_name": "Anna", "role": "Senior Stylist",
             "image_url": "/anna.jpg", "calendar_id": "cal-anna"},
            {"id": 2, "stylist_name": "Ben", "role": "Colourist",
             "image_url": None, "calendar_id": "cal-ben"},
        ],
    })


async def advance_to_datetime(wizard: BookingWizard, service: str = "Wash & cut") -> None:
    """Skip the stylist, pick a service and move to the date/time step."""
    wizard.skip_stylist()
    wizard.select_service(service)
    await wizard.next_step()


async def advance_to_contact(
    wizard: BookingWizard, day: str = MONDAY, time: str = "10:00"
) -> None:
    await advance_to_datetime(wizard)
    await wizard.select_date(day)
    wizard.select_time(time)
    await wizard.next_step()
