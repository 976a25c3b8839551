"""Appointment-booking availability engine for a hair salon."""

__version__ = "0.1.0"
