"""Tests for the booking wizard reducer."""

import pytest

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
    WizardState,
    WizardStep,
    WizardTrigger,
    fire,
    reduce,
    valid_triggers,
)
from tests.conftest import MONDAY, STYLISTS, TUESDAY


def _run(state, *actions):
    for action in actions:
        state = reduce(state, action)
    return state


def _at_datetime(state):
    return _run(state, SkipStylist(), SelectService("Wash & cut", 45), NextStep())


def _at_contact(state):
    return _run(
        _at_datetime(state),
        SelectDate(MONDAY),
        SlotFetchStarted(1),
        SlotsLoaded(1, MONDAY, None, ("09:00", "10:00")),
        SelectTime("10:00"),
        NextStep(),
    )


class TestInitialState:
    def test_starts_on_stylist_step(self, state):
        assert state.step == WizardStep.STYLIST

    def test_draft_starts_empty(self, state):
        draft = state.draft
        assert draft.stylist is None
        assert draft.service is None
        assert draft.date is None
        assert (draft.name, draft.email, draft.phone) == ("", "", "")

    def test_reducer_does_not_mutate_input(self, state):
        reduce(state, SkipStylist())
        assert state.step == WizardStep.STYLIST


class TestStylistStep:
    def test_select_stylist_records_and_advances(self, state):
        new = reduce(state, SelectStylist(STYLISTS[0]))
        assert new.step == WizardStep.SERVICE
        assert new.draft.stylist_name == "Anna"

    def test_skip_leaves_stylist_unset(self, state):
        new = reduce(state, SkipStylist())
        assert new.step == WizardStep.SERVICE
        assert new.draft.stylist is None

    def test_next_from_stylist_is_skip(self, state):
        assert reduce(state, NextStep()).step == WizardStep.SERVICE

    def test_skip_outside_stylist_step_ignored(self, state):
        on_service = reduce(state, SkipStylist())
        assert reduce(on_service, SkipStylist()) is on_service


class TestServiceStep:
    def test_cannot_advance_without_service(self, state):
        on_service = reduce(state, SkipStylist())
        assert reduce(on_service, NextStep()).step == WizardStep.SERVICE

    def test_select_service_does_not_advance(self, state):
        new = _run(state, SkipStylist(), SelectService("Full head tint", 120))
        assert new.step == WizardStep.SERVICE
        assert new.draft.service == "Full head tint"
        assert new.draft.duration_minutes == 120

    def test_select_then_advance(self, state):
        assert _at_datetime(state).step == WizardStep.DATETIME

    def test_empty_service_ignored(self, state):
        new = _run(state, SkipStylist(), SelectService("", 60))
        assert new.draft.service is None


class TestDateTimeStep:
    def test_new_date_clears_time(self, state):
        new = _run(_at_datetime(state), SelectDate(MONDAY), SelectTime("10:00"))
        assert new.draft.time == "10:00"
        new = reduce(new, SelectDate(TUESDAY))
        assert new.draft.date == TUESDAY
        assert new.draft.time is None

    def test_invalid_date_ignored(self, state):
        on_datetime = _at_datetime(state)
        assert reduce(on_datetime, SelectDate("next tuesday")) is on_datetime

    def test_time_requires_date(self, state):
        on_datetime = _at_datetime(state)
        assert reduce(on_datetime, SelectTime("10:00")).draft.time is None

    def test_cannot_advance_without_time(self, state):
        new = _run(_at_datetime(state), SelectDate(MONDAY), NextStep())
        assert new.step == WizardStep.DATETIME

    def test_cannot_advance_while_slots_loading(self, state):
        new = _run(
            _at_datetime(state),
            SelectDate(MONDAY),
            SelectTime("10:00"),
            SlotFetchStarted(1),
            NextStep(),
        )
        assert new.step == WizardStep.DATETIME

    def test_advance_with_date_and_time(self, state):
        assert _at_contact(state).step == WizardStep.CONTACT

    def test_stylist_change_on_datetime_keeps_step(self, state):
        new = reduce(_at_datetime(state), SelectStylist(STYLISTS[1]))
        assert new.step == WizardStep.DATETIME
        assert new.draft.stylist_name == "Ben"

    def test_cannot_advance_before_slots_loaded(self, state):
        new = _run(_at_datetime(state), SelectDate(MONDAY), SelectTime("10:00"), NextStep())
        assert new.step == WizardStep.DATETIME

    def test_stylist_change_needs_slots_for_that_stylist(self, state):
        changed = reduce(_at_contact(state), SelectStylist(STYLISTS[1]))
        assert changed.step == WizardStep.CONTACT
        assert changed.slots_for != changed.slot_key
        back = _run(changed, PrevStep(), NextStep())
        assert back.step == WizardStep.DATETIME
        reloaded = _run(
            back,
            SlotFetchStarted(2),
            SlotsLoaded(2, MONDAY, "Ben", ("10:00",)),
            NextStep(),
        )
        assert reloaded.step == WizardStep.CONTACT


class TestSlotResults:
    def test_matching_result_committed(self, state):
        new = _run(
            _at_datetime(state),
            SelectDate(MONDAY),
            SlotFetchStarted(1),
            SlotsLoaded(1, MONDAY, None, ("09:00", "10:00")),
        )
        assert new.slots == ("09:00", "10:00")
        assert not new.slots_loading

    def test_stale_request_discarded(self, state):
        new = _run(
            _at_datetime(state),
            SelectDate(MONDAY),
            SlotFetchStarted(1),
            SelectDate(TUESDAY),
            SlotFetchStarted(2),
            SlotsLoaded(2, TUESDAY, None, ("11:00",)),
            SlotsLoaded(1, MONDAY, None, ("09:00",)),
        )
        assert new.slots == ("11:00",)
        assert new.draft.date == TUESDAY

    def test_result_for_old_key_discarded(self, state):
        new = _run(
            _at_datetime(state),
            SelectDate(MONDAY),
            SlotFetchStarted(1),
            SelectDate(TUESDAY),
            SlotsLoaded(1, MONDAY, None, ("09:00",)),
        )
        assert new.slots == ()
        assert not new.slots_loading

    def test_closed_message_recorded(self, state):
        new = _run(
            _at_datetime(state),
            SelectDate(MONDAY),
            SlotFetchStarted(1),
            SlotsLoaded(1, MONDAY, None, (), "Closed"),
        )
        assert new.message == "Closed"


class TestContactStep:
    def test_edit_contact(self, state):
        new = reduce(_at_contact(state), EditContact("phone", "0412345678"))
        assert new.draft.phone == "0412345678"

    def test_unknown_contact_field_rejected(self, state):
        with pytest.raises(ValueError, match="Unknown contact field"):
            reduce(_at_contact(state), EditContact("address", "1 Main St"))

    def test_next_does_not_submit(self, state):
        new = _run(_at_contact(state), EditContact("name", "Jo"), NextStep())
        assert new.step == WizardStep.CONTACT

    def test_submission_blocked_without_reachable_contact(self, state):
        on_contact = _run(_at_contact(state), EditContact("name", "Jo"))
        assert not reduce(on_contact, SubmissionStarted()).submitting

    def test_submission_blocked_without_name(self, state):
        on_contact = _run(_at_contact(state), EditContact("email", "jo@example.com"))
        assert not reduce(on_contact, SubmissionStarted()).submitting

    def test_success_with_name_and_phone(self, state):
        new = _run(
            _at_contact(state),
            EditContact("name", "Jo"),
            EditContact("phone", "0412345678"),
            SubmissionStarted(),
            SubmissionSucceeded(),
        )
        assert new.step == WizardStep.SUCCESS
        assert not new.submitting

    def test_failure_stays_on_contact(self, state):
        new = _run(
            _at_contact(state),
            EditContact("name", "Jo"),
            EditContact("email", "jo@example.com"),
            SubmissionStarted(),
            SubmissionFailed("Slot taken"),
        )
        assert new.step == WizardStep.CONTACT
        assert new.message == "Slot taken"


class TestPendingSubmission:
    def _submitting(self, state):
        return _run(
            _at_contact(state),
            EditContact("name", "Jo"),
            EditContact("phone", "0412345678"),
            SubmissionStarted(),
        )

    @pytest.mark.parametrize("action", [
        PrevStep(),
        NextStep(),
        EditContact("phone", ""),
        SelectStylist(STYLISTS[0]),
        SelectDate(TUESDAY),
        SelectTime("09:00"),
    ])
    def test_customer_actions_ignored(self, state, action):
        submitting = self._submitting(state)
        assert reduce(submitting, action) is submitting

    def test_second_submission_ignored(self, state):
        submitting = self._submitting(state)
        assert reduce(submitting, SubmissionStarted()) is submitting

    def test_success_after_ignored_edits(self, state):
        done = _run(
            self._submitting(state),
            PrevStep(),
            EditContact("name", ""),
            SubmissionSucceeded(),
        )
        assert done.step == WizardStep.SUCCESS
        assert not done.submitting

    def test_success_without_pending_submission_ignored(self, state):
        on_contact = _run(
            _at_contact(state),
            EditContact("name", "Jo"),
            EditContact("phone", "0412345678"),
        )
        assert reduce(on_contact, SubmissionSucceeded()).step == WizardStep.CONTACT


class TestBackNavigation:
    def test_back_keeps_later_data(self, state):
        on_contact = _run(_at_contact(state), EditContact("name", "Jo"))
        back = _run(on_contact, PrevStep(), PrevStep())
        assert back.step == WizardStep.SERVICE
        assert back.draft.date == MONDAY
        assert back.draft.time == "10:00"
        assert back.draft.name == "Jo"

    def test_back_from_first_step_ignored(self, state):
        assert reduce(state, PrevStep()) is state


class TestBookAnother:
    def test_resets_draft(self, state):
        done = _run(
            _at_contact(state),
            EditContact("name", "Jo"),
            EditContact("phone", "0412345678"),
            SubmissionStarted(),
            SubmissionSucceeded(),
        )
        restarted = reduce(done, BookAnother())
        assert restarted.step == WizardStep.STYLIST
        assert restarted.draft.service is None
        assert restarted.draft.name == ""

    def test_only_from_success(self, state):
        on_service = reduce(state, SkipStylist())
        assert reduce(on_service, BookAnother()) is on_service


class TestTransitionTable:
    def test_valid_triggers_from_stylist(self):
        assert set(valid_triggers(WizardStep.STYLIST)) == {
            WizardTrigger.STYLIST_CHOSEN,
            WizardTrigger.STYLIST_SKIPPED,
        }

    def test_success_only_restarts(self):
        assert valid_triggers(WizardStep.SUCCESS) == [WizardTrigger.BOOK_ANOTHER]

    def test_fire_undefined_trigger_is_noop(self):
        state = WizardState()
        assert fire(state, WizardTrigger.GO_BACK) is state

    def test_unsupported_action(self, state):
        with pytest.raises(TypeError):
            reduce(state, object())
