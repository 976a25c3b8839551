"""Booking draft, stylist and scheduling-backend wire models."""

from pydantic import BaseModel, Field
from typing import Any, Optional


class Stylist(BaseModel):
    """A bookable stylist as listed in the content store."""
    id: Optional[str] = None
    name: str
    role: str = ""
    img: str = "/placeholder.png"
    calendar_id: Optional[str] = None


class BookingDraft(BaseModel):
    """
    In-progress booking selection owned by one wizard instance.

    Serialised as-is for ``POST /api/book``.
    """
    stylist: Optional[Stylist] = None
    service: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    duration_minutes: Optional[int] = None
    name: str = ""
    email: str = ""
    phone: str = ""

    @property
    def stylist_name(self) -> Optional[str]:
        return self.stylist.name if self.stylist else None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class AvailabilityResponse(BaseModel):
    """Body of ``GET /api/availability``."""
    slots: Optional[list[str]] = None


class BookingResponse(BaseModel):
    """Body of ``POST /api/book``."""
    success: bool = False
    error: Optional[str] = None


class SlotFetchResult(BaseModel):
    """Outcome of a slot query, including whether the fallback set was used."""
    slots: list[str] = Field(default_factory=list)
    fallback: bool = False
    error: Optional[str] = None


class SubmissionResult(BaseModel):
    """Outcome of a booking submission."""
    success: bool
    simulated: bool = False
    error: Optional[str] = None
