"""
Booking wizard state machine: stylist -> service -> date/time -> contact -> success.

The whole wizard is a frozen ``WizardState`` plus a pure ``reduce`` function.
Every user action and every async completion is an action dataclass; step
changes go through an explicit transition table with guards, so an action
that isn't allowed from the current step simply leaves the state unchanged.

Usage:
    state = WizardState()
    state = reduce(state, SkipStylist())
    state = reduce(state, NextStep())          # no service yet: still SERVICE
    state = reduce(state, SelectService("Wash & cut", 45))
    state = reduce(state, NextStep())
    assert state.step == WizardStep.DATETIME
"""

import logging
from dataclasses import dataclass, field, replace
from enum import Enum, IntEnum
from typing import Callable, Optional, Union

from booking_engine.schemas.booking_schema import BookingDraft, Stylist
from booking_engine.wizard.validation import (
    CONTACT_FIELDS,
    contact_is_complete,
    has_date_and_time,
    has_service,
    validate_date,
    validate_time,
)

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    """Wizard steps, numbered as shown to the customer."""
    STYLIST = 1
    SERVICE = 2
    DATETIME = 3
    CONTACT = 4
    SUCCESS = 5


class WizardTrigger(str, Enum):
    """Events that move the wizard between steps."""
    STYLIST_CHOSEN = "stylist_chosen"
    STYLIST_SKIPPED = "stylist_skipped"
    SERVICE_CONFIRMED = "service_confirmed"
    SLOT_CONFIRMED = "slot_confirmed"
    BOOKING_CONFIRMED = "booking_confirmed"
    GO_BACK = "go_back"
    BOOK_ANOTHER = "book_another"


@dataclass(frozen=True)
class WizardState:
    """Everything one booking attempt knows, replaced wholesale on each action."""
    step: WizardStep = WizardStep.STYLIST
    draft: BookingDraft = field(default_factory=BookingDraft)
    slots: tuple[str, ...] = ()
    slots_for: Optional[tuple[str, Optional[str]]] = None
    slots_loading: bool = False
    slot_request_id: int = 0
    message: Optional[str] = None
    submitting: bool = False

    @property
    def slot_key(self) -> Optional[tuple[str, Optional[str]]]:
        """(date, stylist) the current draft needs slots for."""
        if not self.draft.date:
            return None
        return self.draft.date, self.draft.stylist_name


def _slot_ready(state: WizardState) -> bool:
    # The chosen time must come from slots loaded for the current date and stylist.
    return (
        has_date_and_time(state.draft)
        and not state.slots_loading
        and state.slots_for == state.slot_key
    )


def _service_ready(state: WizardState) -> bool:
    return has_service(state.draft)


def _contact_ready(state: WizardState) -> bool:
    return contact_is_complete(state.draft)


def _submission_in_flight(state: WizardState) -> bool:
    return state.submitting


@dataclass(frozen=True)
class Transition:
    """A single valid step transition."""
    from_step: WizardStep
    to_step: WizardStep
    trigger: WizardTrigger
    guard: Optional[Callable[[WizardState], bool]] = None


TRANSITIONS: list[Transition] = [
    # --- Stylist ---
    Transition(WizardStep.STYLIST, WizardStep.SERVICE, WizardTrigger.STYLIST_CHOSEN),
    Transition(WizardStep.STYLIST, WizardStep.SERVICE, WizardTrigger.STYLIST_SKIPPED),

    # --- Forward gates ---
    Transition(WizardStep.SERVICE, WizardStep.DATETIME,
               WizardTrigger.SERVICE_CONFIRMED, _service_ready),
    Transition(WizardStep.DATETIME, WizardStep.CONTACT,
               WizardTrigger.SLOT_CONFIRMED, _slot_ready),
    # Contact details were checked when the submission started.
    Transition(WizardStep.CONTACT, WizardStep.SUCCESS,
               WizardTrigger.BOOKING_CONFIRMED, _submission_in_flight),

    # --- Back navigation, never validated ---
    Transition(WizardStep.SERVICE, WizardStep.STYLIST, WizardTrigger.GO_BACK),
    Transition(WizardStep.DATETIME, WizardStep.SERVICE, WizardTrigger.GO_BACK),
    Transition(WizardStep.CONTACT, WizardStep.DATETIME, WizardTrigger.GO_BACK),

    # --- Restart ---
    Transition(WizardStep.SUCCESS, WizardStep.STYLIST, WizardTrigger.BOOK_ANOTHER),
]

_NEXT_TRIGGERS = {
    WizardStep.STYLIST: WizardTrigger.STYLIST_SKIPPED,
    WizardStep.SERVICE: WizardTrigger.SERVICE_CONFIRMED,
    WizardStep.DATETIME: WizardTrigger.SLOT_CONFIRMED,
}


# --- Actions ---

@dataclass(frozen=True)
class SelectStylist:
    stylist: Stylist


@dataclass(frozen=True)
class SkipStylist:
    pass


@dataclass(frozen=True)
class SelectService:
    service: str
    duration_minutes: int


@dataclass(frozen=True)
class NextStep:
    pass


@dataclass(frozen=True)
class PrevStep:
    pass


@dataclass(frozen=True)
class SelectDate:
    date: str


@dataclass(frozen=True)
class SelectTime:
    time: str


@dataclass(frozen=True)
class EditContact:
    field: str
    value: str


@dataclass(frozen=True)
class SlotFetchStarted:
    request_id: int


@dataclass(frozen=True)
class SlotsLoaded:
    """Result of a slot fetch, keyed to the draft it was issued for."""
    request_id: int
    date: str
    stylist_name: Optional[str]
    slots: tuple[str, ...] = ()
    message: Optional[str] = None


@dataclass(frozen=True)
class SubmissionStarted:
    pass


@dataclass(frozen=True)
class SubmissionSucceeded:
    pass


@dataclass(frozen=True)
class SubmissionFailed:
    error: str


@dataclass(frozen=True)
class BookAnother:
    pass


WizardAction = Union[
    SelectStylist, SkipStylist, SelectService, NextStep, PrevStep, SelectDate,
    SelectTime, EditContact, SlotFetchStarted, SlotsLoaded, SubmissionStarted,
    SubmissionSucceeded, SubmissionFailed, BookAnother,
]


def valid_triggers(step: WizardStep) -> list[WizardTrigger]:
    """Return all triggers defined from ``step``, ignoring guards."""
    return [t.trigger for t in TRANSITIONS if t.from_step == step]


def fire(state: WizardState, trigger: WizardTrigger) -> WizardState:
    """
    Apply a step transition if one exists and its guard passes.

    Returns the state unchanged otherwise.
    """
    for t in TRANSITIONS:
        if t.from_step != state.step or t.trigger != trigger:
            continue
        if t.guard is not None and not t.guard(state):
            logger.debug("Guard blocked %s from step %s", trigger.value, state.step.name)
            return state
        logger.debug(
            "Wizard transition: %s -> %s (trigger: %s)",
            state.step.name, t.to_step.name, trigger.value,
        )
        return replace(state, step=t.to_step)

    logger.debug("No transition from step %s with trigger %s", state.step.name, trigger.value)
    return state


def _edit_draft(state: WizardState, **changes) -> WizardState:
    return replace(state, draft=state.draft.model_copy(update=changes))


# Customer actions that would change the draft or step under a pending booking.
_FROZEN_WHILE_SUBMITTING = (
    SelectStylist, SkipStylist, SelectService, NextStep, PrevStep,
    SelectDate, SelectTime, EditContact,
)


def reduce(state: WizardState, action: WizardAction) -> WizardState:
    """Pure reducer: the next wizard state for ``action``."""
    if state.submitting and isinstance(action, _FROZEN_WHILE_SUBMITTING):
        logger.debug("Ignoring %s while a booking is being submitted", type(action).__name__)
        return state

    if isinstance(action, SelectStylist):
        updated = _edit_draft(state, stylist=action.stylist)
        if state.step == WizardStep.STYLIST:
            return fire(updated, WizardTrigger.STYLIST_CHOSEN)
        if state.step in (WizardStep.DATETIME, WizardStep.CONTACT):
            return updated
        return state

    if isinstance(action, SkipStylist):
        if state.step != WizardStep.STYLIST:
            return state
        return fire(state, WizardTrigger.STYLIST_SKIPPED)

    if isinstance(action, SelectService):
        if state.step != WizardStep.SERVICE or not action.service:
            return state
        return _edit_draft(
            state, service=action.service, duration_minutes=action.duration_minutes
        )

    if isinstance(action, NextStep):
        trigger = _NEXT_TRIGGERS.get(state.step)
        return fire(state, trigger) if trigger else state

    if isinstance(action, PrevStep):
        return fire(state, WizardTrigger.GO_BACK)

    if isinstance(action, SelectDate):
        if state.step != WizardStep.DATETIME or not validate_date(action.date):
            return state
        updated = _edit_draft(state, date=action.date.strip(), time=None)
        return replace(updated, slots=(), slots_for=None, message=None)

    if isinstance(action, SelectTime):
        if state.step != WizardStep.DATETIME or not state.draft.date:
            return state
        if not validate_time(action.time):
            return state
        return _edit_draft(state, time=action.time.strip())

    if isinstance(action, EditContact):
        if action.field not in CONTACT_FIELDS:
            raise ValueError(f"Unknown contact field: {action.field}")
        return _edit_draft(state, **{action.field: action.value})

    if isinstance(action, SlotFetchStarted):
        return replace(
            state, slots_loading=True, slot_request_id=action.request_id, message=None
        )

    if isinstance(action, SlotsLoaded):
        if action.request_id != state.slot_request_id:
            logger.debug(
                "Discarding slots from request %d (latest is %d)",
                action.request_id, state.slot_request_id,
            )
            return state
        key = (action.date, action.stylist_name)
        if key != state.slot_key:
            logger.debug("Discarding slots for %s, draft has moved to %s", key, state.slot_key)
            return replace(state, slots_loading=False)
        return replace(
            state,
            slots=tuple(action.slots),
            slots_for=key,
            slots_loading=False,
            message=action.message,
        )

    if isinstance(action, SubmissionStarted):
        if state.step != WizardStep.CONTACT or state.submitting or not _contact_ready(state):
            return state
        return replace(state, submitting=True, message=None)

    if isinstance(action, SubmissionSucceeded):
        return replace(fire(state, WizardTrigger.BOOKING_CONFIRMED), submitting=False)

    if isinstance(action, SubmissionFailed):
        return replace(state, submitting=False, message=action.error)

    if isinstance(action, BookAnother):
        if state.step != WizardStep.SUCCESS:
            return state
        restarted = fire(state, WizardTrigger.BOOK_ANOTHER)
        return WizardState(step=restarted.step, slot_request_id=state.slot_request_id)

    raise TypeError(f"Unsupported wizard action: {action!r}")
