from booking_engine.wizard.booking_wizard import BookingWizard
from booking_engine.wizard.state_machine import (
    WizardState,
    WizardStep,
    WizardTrigger,
    reduce,
)

__all__ = [
    "BookingWizard",
    "WizardState",
    "WizardStep",
    "WizardTrigger",
    "reduce",
]
