"""
Discrete slot generation from a weekly availability model.

Slots are contiguous, non-overlapping windows of the service duration
starting at the day's opening time. A trailing remainder shorter than
the duration is dropped, so no slot ever ends after closing time.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Iterator

from booking_engine.scheduling.availability_model import AvailabilityModel
from booking_engine.schemas.provider_schema import DaySchedule
from booking_engine.utils import add_minutes, iter_dates, slot_label


@dataclass(frozen=True)
class TimeWindow:
    """A half-open [start, end) interval within one day."""
    start: time
    end: time


@dataclass(frozen=True)
class Slot:
    """A computed candidate booking window. Never persisted."""
    date: date
    start: time
    end: time

    @property
    def window(self) -> TimeWindow:
        return TimeWindow(self.start, self.end)

    @property
    def label(self) -> str:
        return slot_label(self.start, self.end)


def generate(day_schedule: DaySchedule, duration: int) -> Iterator[TimeWindow]:
    """Lazily yield back-to-back windows of ``duration`` minutes inside the day."""
    if duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")
    if not day_schedule.available:
        return

    current = day_schedule.start
    while current < day_schedule.end:
        try:
            slot_end = add_minutes(current, duration)
        except ValueError:
            return
        if slot_end > day_schedule.end:
            return
        yield TimeWindow(current, slot_end)
        current = slot_end


class SlotRange:
    """
    Finite, restartable sequence of slots for a date range.

    Each iteration walks the range afresh from ``from_date``; there is no
    state carried between iterations.
    """

    def __init__(self, model: AvailabilityModel, from_date: date, to_date: date) -> None:
        self.model = model
        self.from_date = from_date
        self.to_date = to_date

    def __iter__(self) -> Iterator[Slot]:
        for day in iter_dates(self.from_date, self.to_date):
            schedule = self.model.is_open(day)
            if schedule is None:
                continue
            for window in generate(schedule, self.model.avg_service_duration):
                yield Slot(day, window.start, window.end)


def generate_range(model: AvailabilityModel, from_date: date, to_date: date) -> SlotRange:
    """Slots for every open day from from_date to to_date inclusive."""
    return SlotRange(model, from_date, to_date)
