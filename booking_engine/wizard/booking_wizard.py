"""
Async controller around the booking wizard reducer.

One ``BookingWizard`` per customer session owns the ``WizardState`` and is the
only thing that mutates it. The two async boundaries, slot fetch and booking
submission, live here; everything else is a synchronous dispatch.

Slot fetches are never cancelled. Each one carries a request id and the
(date, stylist) key it was issued for, and the reducer only commits the
result of the latest issued request whose key still matches the draft.
"""

import asyncio
import itertools
import logging
import random
import uuid
from datetime import date
from typing import Mapping, Optional, Sequence, Union

from booking_engine.config import settings
from booking_engine.logging_context import session_scope
from booking_engine.schedule.availability import (
    CLOSED_DAY_MESSAGE,
    hours_within_schedule,
    is_date_disabled,
    is_open_on_date,
)
from booking_engine.schemas.booking_schema import Stylist, SubmissionResult
from booking_engine.tools.content_store import (
    ContentStore,
    load_opening_hours,
    load_service_durations,
    load_stylists,
)
from booking_engine.tools.scheduling_backend import SchedulingBackend
from booking_engine.tools.services import (
    build_service_menu,
    get_category,
    get_service_duration,
)
from booking_engine.utils import to_date
from booking_engine.wizard.state_machine import (
    BookAnother,
    EditContact,
    NextStep,
    PrevStep,
    SelectDate,
    SelectService,
    SelectStylist,
    SelectTime,
    SkipStylist,
    SlotFetchStarted,
    SlotsLoaded,
    SubmissionFailed,
    SubmissionStarted,
    SubmissionSucceeded,
    WizardAction,
    WizardState,
    WizardStep,
    reduce,
)
from booking_engine.wizard.validation import contact_is_complete, missing_contact_fields

logger = logging.getLogger(__name__)


class BookingWizard:
    """
    Drives one booking attempt from stylist choice to confirmation.

    Args:
        backend: Scheduling backend client for slots and submission.
        stylists: Stylists offered in step 1, also the pool for random
            assignment when the customer skips that step.
        service_durations: Price-list durations by service name.
        opening_hours: Schedule text, or None for "always open".
        rng: Random source for stylist assignment.
        fallback_delay_sec: Pause before a simulated success is shown.
    """

    def __init__(
        self,
        backend: SchedulingBackend,
        stylists: Sequence[Stylist] = (),
        service_durations: Optional[Mapping[str, int]] = None,
        opening_hours: Optional[str] = None,
        rng: Optional[random.Random] = None,
        fallback_delay_sec: float = settings.backend.simulated_success_delay_sec,
        session_id: Optional[str] = None,
    ) -> None:
        self._backend = backend
        self.stylists = list(stylists)
        self.service_durations = dict(service_durations or {})
        self.opening_hours = opening_hours
        self._rng = rng or random.Random()
        self._fallback_delay_sec = fallback_delay_sec
        self.session_id = session_id or f"BOOK-{uuid.uuid4().hex[:8]}"

        self.state = WizardState()
        self._trace: list[WizardStep] = [self.state.step]
        self._request_ids = itertools.count(1)
        self._issued_key: Optional[tuple[str, Optional[str]]] = None

    @classmethod
    def from_content_store(
        cls, store: ContentStore, backend: SchedulingBackend, **kwargs
    ) -> "BookingWizard":
        """Build a wizard from the stylists, price list and hours in ``store``."""
        return cls(
            backend,
            stylists=load_stylists(store),
            service_durations=load_service_durations(store),
            opening_hours=load_opening_hours(store),
            **kwargs,
        )

    @property
    def step(self) -> WizardStep:
        return self.state.step

    def get_step_trace(self) -> list[int]:
        """Return ordered list of step numbers visited."""
        return [int(step) for step in self._trace]

    def dispatch(self, action: WizardAction) -> WizardState:
        """Apply ``action`` through the reducer and record any step change."""
        previous = self.state
        with session_scope(self.session_id):
            self.state = reduce(previous, action)
            if self.state.step != previous.step:
                self._trace.append(self.state.step)
                logger.info("Booking step %d -> %d", previous.step, self.state.step)
        return self.state

    # --- Step 1 ---

    async def select_stylist(self, stylist: Stylist) -> WizardState:
        """Record a stylist; with a date already chosen, refetch slots for them."""
        self.dispatch(SelectStylist(stylist))
        await self._refresh_slots_if_needed()
        return self.state

    def skip_stylist(self) -> WizardState:
        return self.dispatch(SkipStylist())

    # --- Step 2 ---

    def service_menu(self) -> dict[str, list[str]]:
        """Catalog and price-list services with their duration labels."""
        return build_service_menu(self.service_durations)

    def select_service(self, service: str) -> WizardState:
        if get_category(service) is None and service not in self.service_durations:
            logger.warning("Service %r is not on the menu", service)
        duration = get_service_duration(self.service_durations, service)
        return self.dispatch(SelectService(service, duration))

    # --- Step 3 ---

    def is_date_selectable(self, day: Union[date, str], today: Optional[date] = None) -> bool:
        """Calendar-picker rule: not in the past and not a closed weekday."""
        return not is_date_disabled(day, self.opening_hours, today=today)

    def hours_for(self, day: Union[date, str]) -> list[str]:
        return hours_within_schedule(self.opening_hours, day)

    async def select_date(self, day: Union[date, str]) -> WizardState:
        """Record a date (clearing any chosen time) and fetch its slots."""
        self.dispatch(SelectDate(to_date(day).isoformat()))
        await self._refresh_slots_if_needed()
        return self.state

    def select_time(self, time: str) -> WizardState:
        return self.dispatch(SelectTime(time))

    # --- Step 4 ---

    def edit_contact(self, field: str, value: str) -> WizardState:
        return self.dispatch(EditContact(field, value))

    async def submit(self) -> Optional[SubmissionResult]:
        """
        Send the draft to the scheduling backend.

        Returns None without contacting the backend when the wizard isn't on
        the contact step, is already submitting, or the contact details are
        incomplete.
        """
        state = self.state
        if state.step != WizardStep.CONTACT or state.submitting:
            return None

        with session_scope(self.session_id):
            if not contact_is_complete(state.draft):
                logger.info(
                    "Submission blocked, missing %s",
                    ", ".join(missing_contact_fields(state.draft)),
                )
                return None

            if state.draft.stylist is None and self.stylists:
                assigned = self._rng.choice(self.stylists)
                logger.info("No stylist chosen, assigning %s", assigned.name)
                self.dispatch(SelectStylist(assigned))

            self.dispatch(SubmissionStarted())
            result = await self._backend.submit_booking(self.state.draft.to_payload())

            if result.simulated:
                await asyncio.sleep(self._fallback_delay_sec)

            if result.success:
                self.dispatch(SubmissionSucceeded())
            else:
                logger.info("Backend rejected booking: %s", result.error)
                self.dispatch(SubmissionFailed(result.error or ""))
            return result

    # --- Navigation ---

    async def next_step(self) -> WizardState:
        self.dispatch(NextStep())
        await self._refresh_slots_if_needed()
        return self.state

    def prev_step(self) -> WizardState:
        return self.dispatch(PrevStep())

    def book_another(self) -> WizardState:
        previous = self.state.step
        self.dispatch(BookAnother())
        if self.state.step != previous:
            self._issued_key = None
        return self.state

    # --- Slots ---

    async def _refresh_slots_if_needed(self) -> None:
        state = self.state
        key = state.slot_key
        if key is None or state.submitting:
            return
        if state.step not in (WizardStep.DATETIME, WizardStep.CONTACT):
            return
        if state.slots_for == key:
            return
        if state.slots_loading and self._issued_key == key:
            return
        await self._refresh_slots(key)

    async def _refresh_slots(self, key: tuple[str, Optional[str]]) -> None:
        day, stylist_name = key
        request_id = next(self._request_ids)
        self._issued_key = key
        self.dispatch(SlotFetchStarted(request_id))

        with session_scope(self.session_id):
            if not is_open_on_date(self.opening_hours, day):
                logger.info("Closed on %s, skipping slot fetch", day)
                result_slots, message = (), CLOSED_DAY_MESSAGE
            else:
                result = await self._backend.fetch_slots(day, stylist_name)
                result_slots, message = tuple(result.slots), result.error
            self.dispatch(SlotsLoaded(request_id, day, stylist_name, result_slots, message))
