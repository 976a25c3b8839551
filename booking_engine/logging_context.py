"""
Session-scoped logging for booking attempts.

Each ``BookingWizard`` runs its reducer dispatches and backend calls inside
``session_scope``, so every record emitted meanwhile, from any module, carries
that wizard's session id. ``configure_logging`` installs the root format and
puts ``SessionIdFilter`` on the root handlers, which is what makes
``%(session_id)s`` safe to use in the format.

Usage:
    configure_logging("INFO")
    with session_scope("BOOK-1a2b3c4d"):
        logger.info("Fetching slots")
    # 2025-03-17 09:00:00 [BOOK-1a2b3c4d] [booking_engine.x] INFO: Fetching slots
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

NO_SESSION = "-"
LOG_FORMAT = "%(asctime)s [%(session_id)s] [%(name)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION)


def get_session_id() -> str:
    return _session_id.get()


@contextmanager
def session_scope(session_id: str) -> Iterator[str]:
    """Tag records logged inside the block with ``session_id``."""
    token = _session_id.set(session_id)
    try:
        yield session_id
    finally:
        _session_id.reset(token)


class SessionIdFilter(logging.Filter):
    """Adds ``session_id`` to records that don't already have one."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id"):
            record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def configure_logging(level: str = "INFO") -> None:
    """Set up root logging with the session id in every line."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
            handler.addFilter(SessionIdFilter())
