"""Request ID logging context for tracing a request across modules.

HTTP middleware sets a request id at the start of every request; a
logging filter copies it onto each record so formatters can include
``%(request_id)s``. Records emitted outside a request carry ``-``.

Usage:
    from booking_engine.logging_context import set_request_id

    set_request_id("req-abc123")
    logger.info("Claiming slot")  # -> [req-abc123] Claiming slot
"""

import logging
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("request_id", default="-")


def set_request_id(request_id: str) -> None:
    """Set the correlation ID for the current context."""
    _request_id.set(request_id)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = _request_id.get()  # type: ignore[attr-defined]
        return True


def install_request_id_filter() -> None:
    """Attach a RequestIdFilter to every root handler that lacks one.

    Handler-level filters see records from all loggers, so any module
    using ``logging.getLogger(__name__)`` gets the request id for free.
    """
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
