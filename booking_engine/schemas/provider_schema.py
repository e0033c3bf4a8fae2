"""Service provider records and admin request models."""

from datetime import datetime, time
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, computed_field

from booking_engine.config import settings
from booking_engine.utils import WEEKDAYS, parse_time


class AvailabilityStatus(str, Enum):
    """Coarse provider availability indicator, distinct from slot availability."""
    AVAILABLE = "available"
    BUSY = "busy"
    OFFLINE = "offline"


class ExperienceLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    EXPERT = "expert"


class DaySchedule(BaseModel):
    """Working window for one weekday. start/end are ignored when not available."""
    available: bool = True
    start: time
    end: time


def default_working_hours() -> dict[str, DaySchedule]:
    """Every weekday open over the configured default window."""
    start = parse_time(settings.scheduling.default_day_start)
    end = parse_time(settings.scheduling.default_day_end)
    return {day: DaySchedule(available=True, start=start, end=end) for day in WEEKDAYS}


class ServiceAssignment(BaseModel):
    """A service the provider is able to perform."""
    service_id: int
    custom_price: Optional[float] = Field(default=None, ge=0)
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    is_active: bool = True


class ServiceProvider(BaseModel):
    """Installer or delivery provider bookable against orders."""

    id: int
    user_id: Optional[int] = None
    business_name: Optional[str] = None
    description: Optional[str] = None
    category: str = "installer"
    city_id: Optional[int] = None
    area_id: Optional[int] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    service_charge: float = 0.0
    availability_status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    working_hours: Optional[dict[str, DaySchedule]] = None
    avg_service_duration: int = settings.scheduling.default_service_duration
    min_advance_booking_hours: int = settings.scheduling.default_min_advance_hours
    max_daily_orders: int = settings.scheduling.default_max_daily_orders
    daily_orders_count: int = 0
    total_orders_completed: int = 0
    rating: float = 0.0
    total_reviews: int = 0
    is_active: bool = True
    is_verified: bool = False
    verified_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    services: list[ServiceAssignment] = Field(default_factory=list)

    def effective_working_hours(self) -> dict[str, DaySchedule]:
        """Configured hours, or the default week if never configured."""
        if self.working_hours is None:
            return default_working_hours()
        return self.working_hours

    @computed_field  # type: ignore[prop-decorator]
    @property
    def working_days(self) -> list[str]:
        """Weekdays with available=True, in calendar order. Always derived."""
        hours = self.effective_working_hours()
        return [day for day in WEEKDAYS if day in hours and hours[day].available]

    @property
    def display_name(self) -> str:
        return self.business_name or f"Provider #{self.id}"

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def is_bookable(self) -> bool:
        """Whether slot queries and claims may target this provider at all."""
        return (
            self.is_active
            and not self.is_deleted
            and self.availability_status != AvailabilityStatus.OFFLINE
        )

    def is_available(self) -> bool:
        """Eligible for automatic assignment right now."""
        return (
            self.is_active
            and not self.is_deleted
            and self.is_verified
            and self.availability_status == AvailabilityStatus.AVAILABLE
            and self.daily_orders_count < self.max_daily_orders
        )


class ProviderCreate(BaseModel):
    """Admin request to register a provider."""
    user_id: Optional[int] = None
    business_name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    category: str = "installer"
    city_id: Optional[int] = None
    area_id: Optional[int] = None
    contact_number: Optional[str] = Field(default=None, max_length=255)
    email: Optional[str] = Field(default=None, max_length=255)
    service_charge: float = Field(default=0.0, ge=0)
    max_daily_orders: int = Field(
        default=settings.scheduling.default_max_daily_orders,
        ge=1,
        le=settings.scheduling.max_daily_orders_limit,
    )
    is_active: bool = True
    is_verified: bool = False


class ProviderUpdate(BaseModel):
    """Partial admin update. Scheduling fields go through the working-hours endpoint."""
    business_name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    category: Optional[str] = None
    city_id: Optional[int] = None
    area_id: Optional[int] = None
    contact_number: Optional[str] = None
    email: Optional[str] = None
    service_charge: Optional[float] = Field(default=None, ge=0)
    max_daily_orders: Optional[int] = Field(
        default=None, ge=1, le=settings.scheduling.max_daily_orders_limit
    )
    availability_status: Optional[AvailabilityStatus] = None


class WorkingHoursEntry(BaseModel):
    """One row of the admin working-hours form."""
    day: str
    available: bool = False
    start: str = settings.scheduling.default_day_start
    end: str = settings.scheduling.default_day_end


class WorkingHoursUpdate(BaseModel):
    """Payload of PUT /admin/service-management/{id}/working-hours.

    ``working_days`` is accepted for compatibility with the admin form but
    ignored; it is always recomputed from ``working_hours``.
    """
    working_hours: list[WorkingHoursEntry]
    working_days: Optional[list[str]] = None
    avg_service_duration: int
    min_advance_booking_hours: int


class ServicesUpdate(BaseModel):
    services: list[ServiceAssignment] = Field(default_factory=list)


class ReassignRequest(BaseModel):
    """Move an order from one provider to another, or to the best available one."""
    old_provider_id: int
    new_provider_id: Optional[int] = None
    city_id: Optional[int] = None
    area_id: Optional[int] = None
    category: Optional[str] = None
