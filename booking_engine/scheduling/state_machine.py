"""
Finite state machine for booking lifecycle control.

Defines the four booking statuses and the explicit transitions between
them. Every status change goes through ``transition``, so side effects on
the provider (freed counters, completion totals, ratings) happen exactly
once and in the same atomic unit as the status change.

Usage:
    sm = BookingStateMachine(ledger, providers)
    sm.start(booking_id)
    sm.complete(booking_id, rating=5)
    assert ledger.get(booking_id).status == BookingStatus.COMPLETED
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Callable, Optional

from booking_engine.config import settings
from booking_engine.scheduling.errors import InvalidTransitionError
from booking_engine.scheduling.ledger import BookingLedger
from booking_engine.schemas.booking_schema import Booking, BookingStatus, TERMINAL_STATUSES
from booking_engine.stores.provider_store import ProviderStore
from booking_engine.utils import local_now

logger = logging.getLogger(__name__)


class TransitionTrigger(str, Enum):
    """Events that cause booking status changes."""
    START = "start"
    COMPLETE = "complete"
    CANCEL = "cancel"


@dataclass
class Transition:
    """A single valid status transition."""
    from_status: BookingStatus
    to_status: BookingStatus
    trigger: TransitionTrigger


class BookingStateMachine:
    """
    Deterministic lifecycle for bookings held in a ledger.

    Every transition must be explicitly defined. Anything else is rejected
    with an error listing the triggers allowed from the current status.
    """

    TRANSITIONS: list[Transition] = [
        Transition(BookingStatus.SCHEDULED, BookingStatus.IN_PROGRESS, TransitionTrigger.START),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.COMPLETED, TransitionTrigger.COMPLETE),
        Transition(BookingStatus.SCHEDULED, BookingStatus.CANCELLED, TransitionTrigger.CANCEL),
        Transition(BookingStatus.IN_PROGRESS, BookingStatus.CANCELLED, TransitionTrigger.CANCEL),
    ]

    def __init__(
        self,
        ledger: BookingLedger,
        providers: ProviderStore,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._ledger = ledger
        self._providers = providers
        self._clock = clock or (lambda: local_now(settings.scheduling.timezone))

    def _today(self) -> date:
        return self._clock().date()

    def transition(
        self,
        booking_id: int,
        trigger: TransitionTrigger,
        rating: Optional[int] = None,
        reason: Optional[str] = None,
    ) -> Booking:
        """
        Execute a status transition.

        Args:
            booking_id: The booking to move.
            trigger: The event triggering the transition.
            rating: Customer rating folded into the provider's mean on completion.
            reason: Free-text cancellation reason, appended to the booking notes.

        Returns:
            The updated booking.

        Raises:
            BookingNotFoundError: Unknown booking.
            InvalidTransitionError: If no valid transition exists.
        """
        booking = self._ledger.get(booking_id)
        with self._ledger.lock_for(booking.provider_id):
            current = booking.status
            for t in self.TRANSITIONS:
                if t.from_status == current and t.trigger == trigger:
                    if trigger == TransitionTrigger.COMPLETE:
                        self._providers.record_completion(booking.provider_id, rating)
                    elif trigger == TransitionTrigger.CANCEL:
                        if reason:
                            booking.notes = f"{booking.notes}\n{reason}" if booking.notes else reason
                        if booking.counted_on == self._today():
                            self._providers.decrement_daily_orders(booking.provider_id)

                    self._ledger.set_status(booking, t.to_status, trigger=trigger.value)
                    logger.info(
                        "Booking %s: %s -> %s (trigger: %s)",
                        booking.reference, current.value, t.to_status.value, trigger.value,
                    )
                    return booking

        valid = [t.value for t in self.get_valid_triggers(current)]
        logger.warning(
            "Rejected %s on booking %s in status %s",
            trigger.value, booking.reference, current.value,
        )
        raise InvalidTransitionError(
            f"No valid transition from '{current.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def start(self, booking_id: int) -> Booking:
        return self.transition(booking_id, TransitionTrigger.START)

    def complete(self, booking_id: int, rating: Optional[int] = None) -> Booking:
        if rating is not None and not 1 <= rating <= 5:
            raise ValueError(f"rating must be between 1 and 5, got {rating}")
        return self.transition(booking_id, TransitionTrigger.COMPLETE, rating=rating)

    def cancel(self, booking_id: int, reason: Optional[str] = None) -> Booking:
        return self.transition(booking_id, TransitionTrigger.CANCEL, reason=reason)

    def get_valid_triggers(self, status: BookingStatus) -> list[TransitionTrigger]:
        """Return all triggers valid from the given status."""
        return [t.trigger for t in self.TRANSITIONS if t.from_status == status]

    @staticmethod
    def is_terminal(status: BookingStatus) -> bool:
        return status in TERMINAL_STATUSES
