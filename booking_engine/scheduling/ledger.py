"""
In-memory booking ledger: the authoritative record of occupied provider time.

In production this sits on a database table with a unique index on
(provider_id, service_date, start_time) for active bookings; here the same
guarantee comes from a per-provider lock around a compare-and-insert.

Each provider has its own re-entrant lock, so callers can hold
``lock_for(provider_id)`` across a capacity check, the insert, and a
provider counter update, making the whole claim one atomic unit.
"""

import itertools
import logging
import threading
import uuid
from datetime import date, datetime, time, timezone
from typing import Iterable, Optional

from booking_engine.scheduling.errors import BookingNotFoundError, SlotUnavailableError
from booking_engine.scheduling.slot_generator import TimeWindow
from booking_engine.schemas.booking_schema import (
    ACTIVE_STATUSES,
    Booking,
    BookingStatus,
    StatusEntry,
)
from booking_engine.utils import slot_label

logger = logging.getLogger(__name__)


def overlaps(candidate, occupied: Iterable) -> bool:
    """Half-open overlap: [s1, e1) and [s2, e2) overlap iff s1 < e2 and s2 < e1."""
    return any(candidate.start < other.end and other.start < candidate.end for other in occupied)


class BookingLedger:
    """Bookings per provider with atomic claim semantics."""

    def __init__(self) -> None:
        self._bookings: dict[int, Booking] = {}
        self._by_provider: dict[int, list[Booking]] = {}
        self._active_keys: dict[tuple[int, date, time], int] = {}
        self._locks: dict[int, threading.RLock] = {}
        self._locks_guard = threading.Lock()
        self._ids = itertools.count(1)

    def lock_for(self, provider_id: int) -> threading.RLock:
        """The re-entrant lock guarding one provider's bookings."""
        with self._locks_guard:
            lock = self._locks.get(provider_id)
            if lock is None:
                lock = threading.RLock()
                self._locks[provider_id] = lock
            return lock

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def occupied_slots(self, provider_id: int, day: date) -> set[TimeWindow]:
        """Windows held by scheduled or in-progress bookings on that date."""
        with self.lock_for(provider_id):
            return {
                TimeWindow(b.start_time, b.end_time)
                for b in self._by_provider.get(provider_id, [])
                if b.service_date == day and b.status in ACTIVE_STATUSES
            }

    @staticmethod
    def overlaps(candidate, occupied: Iterable) -> bool:
        return overlaps(candidate, occupied)

    def daily_count(self, provider_id: int, day: date) -> int:
        """Non-cancelled bookings for that provider and date."""
        with self.lock_for(provider_id):
            return sum(
                1
                for b in self._by_provider.get(provider_id, [])
                if b.service_date == day and b.status != BookingStatus.CANCELLED
            )

    def get(self, booking_id: int) -> Booking:
        booking = self._bookings.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found.")
        return booking

    def for_provider_range(
        self,
        provider_id: int,
        from_date: date,
        to_date: date,
        status: Optional[BookingStatus] = None,
    ) -> list[Booking]:
        """Bookings in the inclusive date range, ordered by date then start time."""
        with self.lock_for(provider_id):
            rows = [
                b
                for b in self._by_provider.get(provider_id, [])
                if from_date <= b.service_date <= to_date
                and (status is None or b.status == status)
            ]
        return sorted(rows, key=lambda b: (b.service_date, b.start_time))

    def for_order(self, order_ref: str) -> list[Booking]:
        return [b for b in list(self._bookings.values()) if b.order_ref == order_ref]

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def insert_if_free(
        self,
        provider_id: int,
        service_date: date,
        start: time,
        end: time,
        order_ref: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Insert a scheduled booking unless the window is already taken.

        The uniqueness and overlap checks and the insert happen under the
        provider's lock, so two racing callers can never both succeed.

        Raises:
            SlotUnavailableError: If an active booking holds the same start
                time or overlaps the window.
        """
        with self.lock_for(provider_id):
            key = (provider_id, service_date, start)
            candidate = TimeWindow(start, end)
            if key in self._active_keys or overlaps(
                candidate, self.occupied_slots(provider_id, service_date)
            ):
                raise SlotUnavailableError(
                    f"{service_date.isoformat()} {slot_label(start, end)} is already booked.",
                    reason="slot_taken",
                )

            now = datetime.now(timezone.utc)
            booking = Booking(
                id=next(self._ids),
                reference=f"SCH-{uuid.uuid4().hex[:6].upper()}",
                provider_id=provider_id,
                order_ref=order_ref,
                service_date=service_date,
                start_time=start,
                end_time=end,
                status=BookingStatus.SCHEDULED,
                notes=notes,
                created_at=now,
                updated_at=now,
                history=[StatusEntry(status=BookingStatus.SCHEDULED, changed_at=now)],
            )
            self._bookings[booking.id] = booking
            self._by_provider.setdefault(provider_id, []).append(booking)
            self._active_keys[key] = booking.id

        logger.info(
            "Booking %s inserted for provider %s on %s at %s",
            booking.reference, provider_id, service_date, booking.time_slot,
        )
        return booking

    def set_status(
        self, booking: Booking, status: BookingStatus, trigger: Optional[str] = None
    ) -> Booking:
        """Record a status change and keep the active-slot index in step."""
        with self.lock_for(booking.provider_id):
            key = (booking.provider_id, booking.service_date, booking.start_time)
            now = datetime.now(timezone.utc)
            booking.status = status
            booking.updated_at = now
            booking.history.append(StatusEntry(status=status, changed_at=now, trigger=trigger))
            if status in ACTIVE_STATUSES:
                self._active_keys[key] = booking.id
            elif self._active_keys.get(key) == booking.id:
                del self._active_keys[key]
        return booking

    def reset(self) -> None:
        """Clear all bookings. Used by test fixtures for isolation."""
        with self._locks_guard:
            self._bookings.clear()
            self._by_provider.clear()
            self._active_keys.clear()
            self._ids = itertools.count(1)
