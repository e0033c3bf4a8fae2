"""Shared test fixtures and helpers."""

from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from booking_engine.scheduling.availability_service import AvailabilityService
from booking_engine.scheduling.ledger import BookingLedger
from booking_engine.scheduling.state_machine import BookingStateMachine
from booking_engine.schemas.provider_schema import ProviderCreate, ServiceProvider
from booking_engine.stores import service_catalog
from booking_engine.stores.provider_store import ProviderStore

LONDON = ZoneInfo("Europe/London")

# Wednesday 14 October 2026, 10:00 local.
WEDNESDAY_MORNING = datetime(2026, 10, 14, 10, 0, tzinfo=LONDON)
NEXT_MONDAY = date(2026, 10, 19)
NEXT_SATURDAY = date(2026, 10, 24)

WEEKDAY_HOURS = [
    {"day": day, "available": True, "start": "09:00", "end": "18:00"}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
]


class FixedClock:
    """Callable clock returning a settable aware datetime."""

    def __init__(self, now: datetime) -> None:
        self.current = now

    def __call__(self) -> datetime:
        return self.current

    def set(self, now: datetime) -> None:
        self.current = now

    def advance(self, **kwargs) -> None:
        self.current += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FixedClock(WEDNESDAY_MORNING)


@pytest.fixture
def providers():
    return ProviderStore()


@pytest.fixture
def ledger():
    return BookingLedger()


@pytest.fixture
def service(providers, ledger, clock):
    return AvailabilityService(providers, ledger, clock=clock)


@pytest.fixture
def machine(ledger, providers, clock):
    return BookingStateMachine(ledger, providers, clock=clock)


@pytest.fixture
def catalog():
    service_catalog.reset()
    yield service_catalog
    service_catalog.reset()


def make_provider(providers: ProviderStore, **overrides) -> ServiceProvider:
    """Helper to register a verified provider with sensible defaults."""
    data = {
        "business_name": "Northside Heating",
        "city_id": 1,
        "area_id": 10,
        "is_verified": True,
    }
    data.update(overrides)
    return providers.create(ProviderCreate(**data))


@pytest.fixture
def provider(providers, service):
    """Mon-Fri 09:00-18:00, 60 minute slots, 24 hour lead time, 5 orders a day."""
    created = make_provider(providers)
    service.configure_working_hours(created.id, WEEKDAY_HOURS, 60, 24)
    return providers.get(created.id)
