import logging

from fastapi import HTTPException, Request

from booking_engine.scheduling.assignment import ProviderAssignment
from booking_engine.scheduling.availability_service import AvailabilityService
from booking_engine.scheduling.ledger import BookingLedger
from booking_engine.scheduling.state_machine import BookingStateMachine
from booking_engine.stores.provider_store import ProviderStore

logger = logging.getLogger(__name__)


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        logger.error("Application state '%s' is not initialised", name)
        raise HTTPException(status_code=503, detail="Scheduling service unavailable")
    return value


def get_provider_store(request: Request) -> ProviderStore:
    return _state(request, "providers")


def get_ledger(request: Request) -> BookingLedger:
    return _state(request, "ledger")


def get_availability_service(request: Request) -> AvailabilityService:
    return _state(request, "availability")


def get_state_machine(request: Request) -> BookingStateMachine:
    return _state(request, "state_machine")


def get_assignment(request: Request) -> ProviderAssignment:
    return _state(request, "assignment")
