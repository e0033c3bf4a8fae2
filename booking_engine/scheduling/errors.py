"""Typed failures raised by the scheduling engine.

Every rejected claim, query or transition surfaces as one of these, each
with a stable ``reason`` code that the HTTP layer passes to clients.
"""

from typing import Optional


class SchedulingError(Exception):
    """Base class for all scheduling engine errors."""

    reason = "scheduling_error"

    def __init__(self, message: str, reason: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if reason is not None:
            self.reason = reason


class InvalidScheduleError(SchedulingError):
    """Malformed availability input (bad window, duration or lead time)."""

    reason = "invalid_schedule"


class InvalidQueryError(SchedulingError):
    """A slot query with an unusable date range."""

    reason = "invalid_query"


class SlotUnavailableError(SchedulingError):
    """The requested slot is taken, closed, or outside working hours."""

    reason = "slot_unavailable"


class CapacityExceededError(SchedulingError):
    """The provider's daily order cap is reached for that date."""

    reason = "capacity_exceeded"


class LeadTimeViolationError(SchedulingError):
    """The slot starts sooner than the provider's minimum advance booking time."""

    reason = "lead_time_violation"

    def __init__(self, message: str, min_advance_hours: int) -> None:
        super().__init__(message)
        self.min_advance_hours = min_advance_hours


class InvalidTransitionError(SchedulingError):
    """Raised when a booking transition is not valid from its current status."""

    reason = "invalid_transition"


class ProviderNotFoundError(SchedulingError, LookupError):
    reason = "provider_not_found"


class BookingNotFoundError(SchedulingError, LookupError):
    reason = "booking_not_found"
