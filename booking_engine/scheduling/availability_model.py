"""
Validated weekly availability for a single provider.

Holds the per-weekday windows plus the two global scheduling parameters
(average service duration and minimum advance booking lead time). The
set of working days is always derived from the per-day flags.

Usage:
    model = AvailabilityModel.from_provider(provider)
    model.validate()
    day = model.is_open(date(2026, 10, 19))   # DaySchedule or None
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

from booking_engine.config import settings
from booking_engine.scheduling.errors import InvalidScheduleError
from booking_engine.schemas.provider_schema import DaySchedule, ServiceProvider
from booking_engine.utils import WEEKDAYS, format_time, parse_time, weekday_name

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailabilityModel:
    """A provider's recurring weekly capacity."""

    working_hours: dict[str, DaySchedule] = field(default_factory=dict)
    avg_service_duration: int = settings.scheduling.default_service_duration
    min_advance_booking_hours: int = settings.scheduling.default_min_advance_hours

    @property
    def working_days(self) -> list[str]:
        return [d for d in WEEKDAYS if d in self.working_hours and self.working_hours[d].available]

    def validate(self) -> None:
        """
        Check every invariant of the weekly schedule.

        Raises:
            InvalidScheduleError: On an unknown weekday, an enabled day with
                start >= end, or duration / lead time out of bounds.
        """
        bounds = settings.scheduling
        unknown = sorted(set(self.working_hours) - set(WEEKDAYS))
        if unknown:
            raise InvalidScheduleError(f"Unknown weekday(s): {', '.join(unknown)}")

        for day in WEEKDAYS:
            schedule = self.working_hours.get(day)
            if schedule is None or not schedule.available:
                continue
            if schedule.start >= schedule.end:
                raise InvalidScheduleError(
                    f"{day.capitalize()}: start {format_time(schedule.start)} "
                    f"must be before end {format_time(schedule.end)}"
                )

        if not bounds.min_service_duration <= self.avg_service_duration <= bounds.max_service_duration:
            raise InvalidScheduleError(
                f"Service duration must be between {bounds.min_service_duration} and "
                f"{bounds.max_service_duration} minutes, got {self.avg_service_duration}"
            )
        if not bounds.min_advance_hours <= self.min_advance_booking_hours <= bounds.max_advance_hours:
            raise InvalidScheduleError(
                f"Minimum advance booking must be between {bounds.min_advance_hours} and "
                f"{bounds.max_advance_hours} hours, got {self.min_advance_booking_hours}"
            )

    def is_open(self, day: date) -> Optional[DaySchedule]:
        """Resolve a calendar date to its weekday window, or None when closed."""
        schedule = self.working_hours.get(weekday_name(day))
        if schedule is None or not schedule.available:
            return None
        return schedule

    @classmethod
    def from_provider(cls, provider: ServiceProvider) -> "AvailabilityModel":
        return cls(
            working_hours=dict(provider.effective_working_hours()),
            avg_service_duration=provider.avg_service_duration,
            min_advance_booking_hours=provider.min_advance_booking_hours,
        )

    @classmethod
    def from_payload(
        cls,
        entries: list[dict],
        avg_service_duration: int,
        min_advance_booking_hours: int,
    ) -> "AvailabilityModel":
        """
        Build a model from the admin form's list of ``{day, available, start, end}``.

        Days missing from the list are closed. Duplicate days and unparsable
        times are rejected. The result is validated before it is returned.
        """
        hours: dict[str, DaySchedule] = {}
        for entry in entries:
            day = str(entry.get("day", "")).strip().lower()
            if day in hours:
                raise InvalidScheduleError(f"Duplicate entry for {day}")
            available = bool(entry.get("available", False))
            try:
                start = parse_time(entry.get("start") or settings.scheduling.default_day_start)
                end = parse_time(entry.get("end") or settings.scheduling.default_day_end)
            except ValueError as exc:
                raise InvalidScheduleError(f"{day or 'unknown day'}: {exc}") from None
            hours[day] = DaySchedule(available=available, start=start, end=end)

        for day in WEEKDAYS:
            if day not in hours:
                hours[day] = DaySchedule(
                    available=False,
                    start=parse_time(settings.scheduling.default_day_start),
                    end=parse_time(settings.scheduling.default_day_end),
                )

        model = cls(
            working_hours=hours,
            avg_service_duration=avg_service_duration,
            min_advance_booking_hours=min_advance_booking_hours,
        )
        model.validate()
        logger.debug("Availability parsed: working days %s", model.working_days)
        return model
