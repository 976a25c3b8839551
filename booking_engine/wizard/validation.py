"""Field validators backing the wizard's step gates."""

from datetime import datetime

from booking_engine.schemas.booking_schema import BookingDraft

CONTACT_FIELDS = ("name", "email", "phone")


def validate_date(value: str) -> bool:
    """Validate date is in YYYY-MM-DD format."""
    try:
        datetime.strptime(value.strip(), "%Y-%m-%d")
        return True
    except ValueError:
        return False


def validate_time(value: str) -> bool:
    """Validate time is in HH:MM format."""
    try:
        datetime.strptime(value.strip(), "%H:%M")
        return True
    except ValueError:
        return False


def has_service(draft: BookingDraft) -> bool:
    return bool(draft.service)


def has_date_and_time(draft: BookingDraft) -> bool:
    return bool(draft.date and draft.time)


def contact_is_complete(draft: BookingDraft) -> bool:
    """A name plus at least one way to reach the customer."""
    return bool(draft.name.strip()) and bool(draft.email.strip() or draft.phone.strip())


def missing_contact_fields(draft: BookingDraft) -> list[str]:
    missing = []
    if not draft.name.strip():
        missing.append("name")
    if not (draft.email.strip() or draft.phone.strip()):
        missing.append("email or phone")
    return missing
