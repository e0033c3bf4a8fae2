"""
Per-provider schedule summaries for the admin back-office.

Groups a provider's bookings by date and reports status counts plus
booked versus open minutes across the requested range.
"""

import logging
from dataclasses import dataclass, field
from datetime import date

from booking_engine.scheduling.availability_model import AvailabilityModel
from booking_engine.schemas.booking_schema import Booking, BookingStatus
from booking_engine.schemas.provider_schema import ServiceProvider
from booking_engine.utils import format_time, iter_dates, minutes_between

logger = logging.getLogger(__name__)


@dataclass
class DaySummary:
    """Bookings and capacity for one calendar date."""

    date: date
    working: bool = False
    open_minutes: int = 0
    booked_minutes: int = 0
    bookings: list[Booking] = field(default_factory=list)

    @property
    def utilisation(self) -> float:
        return self.booked_minutes / self.open_minutes if self.open_minutes else 0.0


@dataclass
class ScheduleSummary:
    """A provider's schedule across a date range."""

    provider_id: int
    from_date: date
    to_date: date
    days: list[DaySummary] = field(default_factory=list)
    status_counts: dict[str, int] = field(default_factory=dict)

    @property
    def open_minutes(self) -> int:
        return sum(d.open_minutes for d in self.days)

    @property
    def booked_minutes(self) -> int:
        return sum(d.booked_minutes for d in self.days)

    @property
    def utilisation(self) -> float:
        return self.booked_minutes / self.open_minutes if self.open_minutes else 0.0

    def to_dict(self) -> dict:
        return {
            "provider_id": self.provider_id,
            "start_date": self.from_date.isoformat(),
            "end_date": self.to_date.isoformat(),
            "status_counts": dict(self.status_counts),
            "open_minutes": self.open_minutes,
            "booked_minutes": self.booked_minutes,
            "utilisation": round(self.utilisation, 3),
            "days": [
                {
                    "date": d.date.isoformat(),
                    "working": d.working,
                    "open_minutes": d.open_minutes,
                    "booked_minutes": d.booked_minutes,
                    "utilisation": round(d.utilisation, 3),
                    "bookings": [
                        {
                            "id": b.id,
                            "reference": b.reference,
                            "order_ref": b.order_ref,
                            "start_time": format_time(b.start_time),
                            "end_time": format_time(b.end_time),
                            "time_slot": b.time_slot,
                            "status": b.status.value,
                        }
                        for b in d.bookings
                    ],
                }
                for d in self.days
            ],
        }


def build(
    provider: ServiceProvider,
    bookings: list[Booking],
    from_date: date,
    to_date: date,
) -> ScheduleSummary:
    """
    Summarise a provider's bookings between two dates inclusive.

    Cancelled bookings are listed and counted but hold no minutes.
    """
    model = AvailabilityModel.from_provider(provider)
    summary = ScheduleSummary(
        provider_id=provider.id,
        from_date=from_date,
        to_date=to_date,
        status_counts={s.value: 0 for s in BookingStatus},
    )

    by_date: dict[date, list[Booking]] = {}
    for booking in bookings:
        if from_date <= booking.service_date <= to_date:
            by_date.setdefault(booking.service_date, []).append(booking)

    for day in iter_dates(from_date, to_date):
        schedule = model.is_open(day)
        day_bookings = sorted(by_date.get(day, []), key=lambda b: b.start_time)
        summary.days.append(
            DaySummary(
                date=day,
                working=schedule is not None,
                open_minutes=minutes_between(schedule.start, schedule.end) if schedule else 0,
                booked_minutes=sum(
                    b.duration_minutes for b in day_bookings
                    if b.status != BookingStatus.CANCELLED
                ),
                bookings=day_bookings,
            )
        )
        for b in day_bookings:
            summary.status_counts[b.status.value] += 1

    logger.debug(
        "Schedule for provider %s %s..%s: %d bookings",
        provider.id, from_date, to_date, sum(summary.status_counts.values()),
    )
    return summary
