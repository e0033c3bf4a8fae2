"""Booking records and slot/booking API models."""

from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from booking_engine.utils import minutes_between, slot_label


class BookingStatus(str, Enum):
    """Lifecycle status of a provider booking."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = frozenset({BookingStatus.SCHEDULED, BookingStatus.IN_PROGRESS})
TERMINAL_STATUSES = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})


class StatusEntry(BaseModel):
    """Recorded history entry for a status change."""
    status: BookingStatus
    changed_at: datetime
    trigger: Optional[str] = None


class Booking(BaseModel):
    """A provider assigned to a time window on a date, optionally for an order."""

    id: int
    reference: str
    provider_id: int
    order_ref: Optional[str] = None
    service_date: date
    start_time: time
    end_time: time
    status: BookingStatus = BookingStatus.SCHEDULED
    notes: Optional[str] = None
    # Day whose provider counter this booking incremented, if any.
    counted_on: Optional[date] = None
    created_at: datetime
    updated_at: datetime
    history: list[StatusEntry] = Field(default_factory=list)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def time_slot(self) -> str:
        return slot_label(self.start_time, self.end_time)

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def duration_minutes(self) -> int:
        return minutes_between(self.start_time, self.end_time)


class SlotResponse(BaseModel):
    """A free slot as returned to checkout clients."""
    date: date
    start_time: str
    end_time: str
    time_slot: str


class AvailableSlotsRequest(BaseModel):
    """Slots for one provider, or for the best providers in a city or area."""
    provider_id: Optional[int] = None
    city_id: Optional[int] = None
    area_id: Optional[int] = None
    start_date: date
    end_date: Optional[date] = None


class ProviderSlots(BaseModel):
    provider_id: int
    name: str
    rating: float
    slots: list[SlotResponse] = Field(default_factory=list)


class AvailableSlotsResponse(BaseModel):
    success: bool = True
    provider_id: Optional[int] = None
    start_date: date
    end_date: date
    slots: list[SlotResponse] = Field(default_factory=list)
    available_providers: list[ProviderSlots] = Field(default_factory=list)


class CheckAvailabilityRequest(BaseModel):
    provider_id: int
    service_date: date
    start_time: time
    end_time: Optional[time] = None


class CheckAvailabilityResponse(BaseModel):
    available: bool
    reason: Optional[str] = None
    message: str = ""


class BookSlotRequest(BaseModel):
    """Claim a slot for an order."""
    provider_id: int
    service_date: date
    start_time: time
    end_time: Optional[time] = None
    order_ref: Optional[str] = None
    notes: Optional[str] = None


class CompleteBookingRequest(BaseModel):
    rating: Optional[int] = Field(default=None, ge=1, le=5)


class CancelBookingRequest(BaseModel):
    reason: Optional[str] = None


class CalculateCostRequest(BaseModel):
    service_ids: list[int] = Field(default_factory=list)
    product_ids: list[int] = Field(default_factory=list)
