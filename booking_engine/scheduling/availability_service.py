"""
Free-slot queries and atomic slot claims for service providers.

This is the boundary used by checkout and the admin back-office:

    service = AvailabilityService(providers, ledger)
    slots = service.get_free_slots(provider_id, date(2026, 10, 19), date(2026, 10, 25))
    booking = service.claim_slot(provider_id, slots[0].date, slots[0].start, slots[0].end)

Claims are all-or-nothing. The capacity check, the overlap check, the
insert and the provider's daily counter update all run under the
provider's ledger lock.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Optional

from booking_engine.config import SchedulingConfig, settings
from booking_engine.scheduling.availability_model import AvailabilityModel
from booking_engine.scheduling.errors import (
    CapacityExceededError,
    InvalidQueryError,
    InvalidScheduleError,
    SchedulingError,
    SlotUnavailableError,
    LeadTimeViolationError,
)
from booking_engine.scheduling.ledger import BookingLedger, overlaps
from booking_engine.scheduling.slot_generator import Slot, TimeWindow, generate_range
from booking_engine.schemas.booking_schema import Booking
from booking_engine.schemas.provider_schema import ServiceProvider
from booking_engine.stores.provider_store import ProviderStore
from booking_engine.utils import add_minutes, local_now, slot_label

logger = logging.getLogger(__name__)


@dataclass
class SlotCheck:
    """Outcome of a non-mutating slot check."""
    available: bool
    reason: Optional[str] = None
    message: str = ""


class AvailabilityService:
    """Computes free slots and claims them without double-booking."""

    def __init__(
        self,
        providers: ProviderStore,
        ledger: BookingLedger,
        clock: Optional[Callable[[], datetime]] = None,
        config: SchedulingConfig = settings.scheduling,
    ) -> None:
        self._providers = providers
        self._ledger = ledger
        self._config = config
        self._clock = clock or (lambda: local_now(config.timezone))

    # ------------------------------------------------------------------ #
    # Clock
    # ------------------------------------------------------------------ #

    def now(self) -> datetime:
        current = self._clock()
        if current.tzinfo is None:
            current = current.replace(tzinfo=local_now(self._config.timezone).tzinfo)
        return current

    def today(self) -> date:
        return self.now().date()

    def _slot_start(self, day: date, start: time) -> datetime:
        return datetime.combine(day, start, tzinfo=self.now().tzinfo)

    def _earliest_start(self, provider: ServiceProvider) -> datetime:
        return self.now() + timedelta(hours=provider.min_advance_booking_hours)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_free_slots(
        self, provider_id: int, from_date: date, to_date: Optional[date] = None
    ) -> list[Slot]:
        """
        Bookable slots for a provider between two dates inclusive.

        Generated slots minus occupied windows, minus slots starting before
        now + the provider's lead time, minus whole dates already at the
        daily cap. Providers that are inactive or offline have no slots.

        Raises:
            ProviderNotFoundError: Unknown provider.
            InvalidQueryError: to_date before from_date, or range too long.
        """
        to_date = to_date or from_date
        if to_date < from_date:
            raise InvalidQueryError(
                f"end date {to_date.isoformat()} is before start date {from_date.isoformat()}"
            )
        span = (to_date - from_date).days + 1
        if span > self._config.max_query_days:
            raise InvalidQueryError(
                f"Date range of {span} days exceeds the maximum of {self._config.max_query_days}"
            )

        provider = self._providers.get(provider_id)
        if not provider.is_bookable():
            logger.debug("Provider %s is not bookable; no free slots", provider_id)
            return []

        model = AvailabilityModel.from_provider(provider)
        earliest = self._earliest_start(provider)
        occupied_by_day: dict[date, set[TimeWindow]] = {}
        capped_days: dict[date, bool] = {}

        free: list[Slot] = []
        for slot in generate_range(model, from_date, to_date):
            if self._slot_start(slot.date, slot.start) < earliest:
                continue
            if slot.date not in capped_days:
                capped_days[slot.date] = (
                    self._ledger.daily_count(provider_id, slot.date) >= provider.max_daily_orders
                )
                occupied_by_day[slot.date] = self._ledger.occupied_slots(provider_id, slot.date)
            if capped_days[slot.date]:
                continue
            if overlaps(slot.window, occupied_by_day[slot.date]):
                continue
            free.append(slot)

        logger.debug(
            "Provider %s: %d free slots between %s and %s",
            provider_id, len(free), from_date, to_date,
        )
        return free

    def check_slot(
        self,
        provider_id: int,
        service_date: date,
        start: time,
        end: Optional[time] = None,
    ) -> SlotCheck:
        """Report whether a claim for this slot would succeed right now, without claiming."""
        try:
            provider, end = self._validate_request(provider_id, service_date, start, end)
            with self._ledger.lock_for(provider_id):
                self._check_ledger(provider, service_date, start, end)
        except (InvalidScheduleError, SlotUnavailableError, CapacityExceededError,
                LeadTimeViolationError) as exc:
            return SlotCheck(available=False, reason=exc.reason, message=exc.message)
        return SlotCheck(
            available=True,
            message=f"{service_date.isoformat()} {slot_label(start, end)} is available.",
        )

    # ------------------------------------------------------------------ #
    # Claims
    # ------------------------------------------------------------------ #

    def claim_slot(
        self,
        provider_id: int,
        service_date: date,
        start: time,
        end: Optional[time] = None,
        order_ref: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Booking:
        """
        Atomically book a slot for a provider.

        ``end`` defaults to start + the provider's service duration.

        Returns:
            The new booking, status ``scheduled``.

        Raises:
            ProviderNotFoundError: Unknown provider.
            InvalidScheduleError: start is not before end.
            SlotUnavailableError: Taken, closed, outside hours, or provider offline.
            LeadTimeViolationError: Starts sooner than the provider's lead time.
            CapacityExceededError: The provider's daily cap is reached for the date.
        """
        try:
            provider, end = self._validate_request(provider_id, service_date, start, end)
            with self._ledger.lock_for(provider_id):
                self._check_ledger(provider, service_date, start, end)
                booking = self._ledger.insert_if_free(
                    provider_id, service_date, start, end, order_ref=order_ref, notes=notes,
                )
                if service_date == self.today():
                    self._providers.increment_daily_orders(provider_id)
                    booking.counted_on = service_date
        except SchedulingError as exc:
            logger.warning(
                "Claim rejected for provider %s on %s at %s: %s",
                provider_id, service_date, start, exc.reason,
            )
            raise

        logger.info(
            "Slot claimed: provider %s %s %s (order %s) -> %s",
            provider_id, service_date, booking.time_slot, order_ref, booking.reference,
        )
        return booking

    def _validate_request(
        self,
        provider_id: int,
        service_date: date,
        start: time,
        end: Optional[time],
    ) -> tuple[ServiceProvider, time]:
        """Checks that do not depend on the ledger."""
        provider = self._providers.get(provider_id)
        if end is None:
            try:
                end = add_minutes(start, provider.avg_service_duration)
            except ValueError as exc:
                raise InvalidScheduleError(str(exc)) from None
        if start >= end:
            raise InvalidScheduleError(
                f"Slot start {start.strftime('%H:%M')} must be before end {end.strftime('%H:%M')}"
            )

        if not provider.is_bookable():
            raise SlotUnavailableError(
                f"{provider.display_name} is not taking bookings.",
                reason="provider_unavailable",
            )

        day = AvailabilityModel.from_provider(provider).is_open(service_date)
        if day is None:
            raise SlotUnavailableError(
                f"{provider.display_name} does not work on {service_date.strftime('%A')}s.",
                reason="day_closed",
            )
        if start < day.start or end > day.end:
            raise SlotUnavailableError(
                f"{slot_label(start, end)} is outside working hours "
                f"{slot_label(day.start, day.end)}.",
                reason="outside_working_hours",
            )

        if self._slot_start(service_date, start) < self._earliest_start(provider):
            raise LeadTimeViolationError(
                f"Bookings need at least {provider.min_advance_booking_hours} hours' notice.",
                min_advance_hours=provider.min_advance_booking_hours,
            )
        return provider, end

    def _check_ledger(
        self, provider: ServiceProvider, service_date: date, start: time, end: time
    ) -> None:
        """Capacity then occupancy. Caller must hold the provider's ledger lock."""
        if self._ledger.daily_count(provider.id, service_date) >= provider.max_daily_orders:
            raise CapacityExceededError(
                f"{provider.display_name} is fully booked on {service_date.isoformat()} "
                f"({provider.max_daily_orders} orders per day)."
            )
        occupied = self._ledger.occupied_slots(provider.id, service_date)
        if overlaps(TimeWindow(start, end), occupied):
            raise SlotUnavailableError(
                f"{service_date.isoformat()} {slot_label(start, end)} is already booked.",
                reason="slot_taken",
            )

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    def configure_working_hours(
        self,
        provider_id: int,
        entries: list[dict],
        avg_service_duration: int,
        min_advance_booking_hours: int,
    ) -> ServiceProvider:
        """Validate and store a provider's weekly availability.

        Raises:
            InvalidScheduleError: If any day, duration or lead time is invalid.
        """
        self._providers.get(provider_id)
        model = AvailabilityModel.from_payload(
            entries, avg_service_duration, min_advance_booking_hours
        )
        return self._providers.set_availability(provider_id, model)
