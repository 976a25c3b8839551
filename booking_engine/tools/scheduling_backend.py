"""
HTTP client for the external scheduling backend.

Two endpoints are used:

- ``GET /api/availability?date=YYYY-MM-DD[&stylist=name]`` -> ``{"slots": [...]}``
- ``POST /api/book`` with the serialised draft -> ``{"success": bool, "error": str?}``

Neither call ever raises to the caller. An unreachable backend, a non-2xx
status, or a 2xx body that is not JSON (a dev server answering with an HTML
page) degrades to the fixed fallback slot set or to a simulated successful
submission, so the booking flow stays usable where the backend is not
provisioned.
"""

import logging
from datetime import date
from typing import Any, Optional, Sequence, Union

import httpx
from pydantic import ValidationError

from booking_engine.config import settings
from booking_engine.schemas.booking_schema import (
    AvailabilityResponse,
    BookingResponse,
    SlotFetchResult,
    SubmissionResult,
)
from booking_engine.utils import to_date

logger = logging.getLogger(__name__)

AVAILABILITY_PATH = "/api/availability"
BOOKING_PATH = "/api/book"
SLOTS_UNAVAILABLE_MESSAGE = "Could not load time slots"
BOOKING_FAILED_MESSAGE = "Failed to create booking"


class SchedulingBackend:
    """Async client for slot queries and booking submission."""

    def __init__(
        self,
        base_url: str = settings.backend.base_url,
        client: Optional[httpx.AsyncClient] = None,
        fallback_slots: Sequence[str] = settings.backend.fallback_slots,
        timeout_sec: float = settings.backend.timeout_sec,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout_sec)
        self.fallback_slots = list(fallback_slots)

    async def __aenter__(self) -> "SchedulingBackend":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _fallback(self) -> SlotFetchResult:
        return SlotFetchResult(slots=list(self.fallback_slots), fallback=True)

    async def fetch_slots(
        self, day: Union[date, str], stylist_name: Optional[str] = None
    ) -> SlotFetchResult:
        """Query bookable slots for a date, optionally scoped to one stylist."""
        params = {"date": to_date(day).isoformat()}
        if stylist_name:
            params["stylist"] = stylist_name

        try:
            response = await self._client.get(AVAILABILITY_PATH, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Availability request failed (%s), using fallback slots", exc)
            return self._fallback()

        if not response.is_success:
            logger.warning(
                "Availability endpoint returned %s, using fallback slots",
                response.status_code,
            )
            return self._fallback()

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Availability response is not JSON (%s), using fallback slots", exc)
            return self._fallback()

        try:
            body = AvailabilityResponse.model_validate(data)
        except ValidationError as exc:
            logger.warning("Unreadable availability response: %s", exc)
            return SlotFetchResult(error=SLOTS_UNAVAILABLE_MESSAGE)

        if body.slots is None:
            return SlotFetchResult(error=SLOTS_UNAVAILABLE_MESSAGE)

        logger.debug("Fetched %d slots for %s", len(body.slots), params)
        return SlotFetchResult(slots=body.slots)

    async def submit_booking(self, payload: dict[str, Any]) -> SubmissionResult:
        """Send a finalised draft. Transport failures become a simulated success."""
        try:
            response = await self._client.post(BOOKING_PATH, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Booking request failed (%s), simulating success", exc)
            return SubmissionResult(success=True, simulated=True)

        if not response.is_success:
            logger.warning(
                "Booking endpoint returned %s, simulating success", response.status_code
            )
            return SubmissionResult(success=True, simulated=True)

        try:
            data = response.json()
        except ValueError as exc:
            logger.warning("Booking response is not JSON (%s), simulating success", exc)
            return SubmissionResult(success=True, simulated=True)

        try:
            body = BookingResponse.model_validate(data)
        except ValidationError as exc:
            logger.warning("Unreadable booking response: %s", exc)
            return SubmissionResult(success=False, error=BOOKING_FAILED_MESSAGE)

        if body.success:
            logger.info(
                "Booking accepted for %s on %s at %s",
                payload.get("name"), payload.get("date"), payload.get("time"),
            )
            return SubmissionResult(success=True)

        return SubmissionResult(success=False, error=body.error or BOOKING_FAILED_MESSAGE)
