"""Correlation ID logging context for tracing one call across webhook turns.

Each voice webhook sets the call SID as correlation ID before touching the
dialog; the web handoff sets a short token prefix instead. Every record that
passes through a handler carrying ``CallIdFilter`` gets ``call_id`` attached.

Usage:
    from phone_booking.logging_context import get_call_logger, set_call_id

    set_call_id("CA1234")
    logger = get_call_logger(__name__)
    logger.info("Processing turn")  # → [CA1234] Processing turn
"""

import logging
from contextvars import ContextVar

_call_id: ContextVar[str] = ContextVar("call_id", default="-")


def set_call_id(call_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _call_id.set(call_id or "-")


def get_call_id() -> str:
    """Retrieve the current correlation ID."""
    return _call_id.get()


class CallIdFilter(logging.Filter):
    """Injects call_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.call_id = _call_id.get()  # type: ignore[attr-defined]
        return True


def install_call_id_filter(logger: logging.Logger) -> None:
    """Attach a CallIdFilter to every handler of ``logger``."""
    for handler in logger.handlers:
        if not any(isinstance(f, CallIdFilter) for f in handler.filters):
            handler.addFilter(CallIdFilter())


def get_call_logger(name: str) -> logging.Logger:
    """Return a logger with the CallIdFilter attached.

    The filter adds ``call_id`` to each record so formatters can
    include ``%(call_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CallIdFilter) for f in logger.filters):
        logger.addFilter(CallIdFilter())
    return logger
