import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends

from booking_engine.api.dependencies import (
    get_assignment,
    get_availability_service,
    get_ledger,
    get_provider_store,
    get_state_machine,
)
from booking_engine.config import settings
from booking_engine.scheduling import schedule_view
from booking_engine.scheduling.assignment import ProviderAssignment
from booking_engine.scheduling.availability_service import AvailabilityService
from booking_engine.scheduling.errors import InvalidQueryError
from booking_engine.scheduling.ledger import BookingLedger
from booking_engine.scheduling.state_machine import BookingStateMachine
from booking_engine.schemas.booking_schema import (
    Booking,
    CancelBookingRequest,
    CompleteBookingRequest,
)
from booking_engine.schemas.provider_schema import (
    AvailabilityStatus,
    ProviderCreate,
    ProviderUpdate,
    ReassignRequest,
    ServiceProvider,
    ServicesUpdate,
    WorkingHoursUpdate,
)
from booking_engine.stores.provider_store import ProviderStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/service-management", tags=["admin"])


@router.post("", response_model=ServiceProvider, status_code=201)
async def create_provider(body: ProviderCreate, providers: ProviderStore = Depends(get_provider_store)):
    return providers.create(body)


@router.get("", response_model=list[ServiceProvider])
async def list_providers(
    category: Optional[str] = None,
    city_id: Optional[int] = None,
    area_id: Optional[int] = None,
    status: Optional[AvailabilityStatus] = None,
    active_only: bool = False,
    providers: ProviderStore = Depends(get_provider_store),
):
    return providers.find(
        category=category, city_id=city_id, area_id=area_id, status=status, active_only=active_only
    )


@router.post("/reset-daily-orders")
async def reset_all_daily_orders(providers: ProviderStore = Depends(get_provider_store)):
    count = providers.reset_all_daily_orders()
    return {"success": True, "reset": count}


@router.get("/available", response_model=list[ServiceProvider])
async def available_providers(
    city_id: Optional[int] = None,
    area_id: Optional[int] = None,
    category: Optional[str] = None,
    assignment: ProviderAssignment = Depends(get_assignment),
):
    return assignment.available_providers(city_id=city_id, area_id=area_id, category=category)


@router.post("/auto-assign")
async def auto_assign(
    city_id: int,
    area_id: Optional[int] = None,
    category: Optional[str] = None,
    assignment: ProviderAssignment = Depends(get_assignment),
):
    provider = assignment.auto_assign(city_id, area_id=area_id, category=category)
    return {"success": provider is not None, "provider": provider}


@router.post("/reassign")
async def reassign(body: ReassignRequest, assignment: ProviderAssignment = Depends(get_assignment)):
    provider = assignment.reassign(
        body.old_provider_id,
        new_provider_id=body.new_provider_id,
        city_id=body.city_id,
        area_id=body.area_id,
        category=body.category,
    )
    return {"success": provider is not None, "provider": provider}


# --------------------------------------------------------------------------- #
# Booking lifecycle
# --------------------------------------------------------------------------- #

@router.get("/bookings/{booking_id}", response_model=Booking)
async def get_booking(booking_id: int, ledger: BookingLedger = Depends(get_ledger)):
    return ledger.get(booking_id)


@router.post("/bookings/{booking_id}/start", response_model=Booking)
async def start_booking(booking_id: int, machine: BookingStateMachine = Depends(get_state_machine)):
    return machine.start(booking_id)


@router.post("/bookings/{booking_id}/complete", response_model=Booking)
async def complete_booking(
    booking_id: int,
    body: Optional[CompleteBookingRequest] = None,
    machine: BookingStateMachine = Depends(get_state_machine),
):
    return machine.complete(booking_id, rating=body.rating if body else None)


@router.post("/bookings/{booking_id}/cancel", response_model=Booking)
async def cancel_booking(
    booking_id: int,
    body: Optional[CancelBookingRequest] = None,
    machine: BookingStateMachine = Depends(get_state_machine),
):
    return machine.cancel(booking_id, reason=body.reason if body else None)


# --------------------------------------------------------------------------- #
# Single provider
# --------------------------------------------------------------------------- #

@router.get("/{provider_id}", response_model=ServiceProvider)
async def get_provider(provider_id: int, providers: ProviderStore = Depends(get_provider_store)):
    return providers.get(provider_id)


@router.put("/{provider_id}", response_model=ServiceProvider)
async def update_provider(
    provider_id: int,
    body: ProviderUpdate,
    providers: ProviderStore = Depends(get_provider_store),
):
    return providers.update(provider_id, body)


@router.delete("/{provider_id}")
async def delete_provider(provider_id: int, providers: ProviderStore = Depends(get_provider_store)):
    providers.delete(provider_id)
    return {"success": True, "message": f"Service provider {provider_id} deleted."}


@router.put("/{provider_id}/working-hours", response_model=ServiceProvider)
async def update_working_hours(
    provider_id: int,
    body: WorkingHoursUpdate,
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.configure_working_hours(
        provider_id,
        [entry.model_dump() for entry in body.working_hours],
        body.avg_service_duration,
        body.min_advance_booking_hours,
    )


@router.get("/{provider_id}/schedule")
async def get_schedule(
    provider_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    providers: ProviderStore = Depends(get_provider_store),
    ledger: BookingLedger = Depends(get_ledger),
    service: AvailabilityService = Depends(get_availability_service),
):
    provider = providers.get(provider_id)
    start_date = start_date or service.today()
    end_date = end_date or start_date + timedelta(days=6)
    if end_date < start_date:
        raise InvalidQueryError("end_date must not be before start_date")
    if (end_date - start_date).days + 1 > settings.scheduling.max_query_days:
        raise InvalidQueryError(
            f"Schedule range exceeds {settings.scheduling.max_query_days} days"
        )
    bookings = ledger.for_provider_range(provider_id, start_date, end_date)
    return schedule_view.build(provider, bookings, start_date, end_date).to_dict()


@router.put("/{provider_id}/services", response_model=ServiceProvider)
async def update_services(
    provider_id: int,
    body: ServicesUpdate,
    providers: ProviderStore = Depends(get_provider_store),
):
    return providers.assign_services(provider_id, body.services)


@router.post("/{provider_id}/toggle-status", response_model=ServiceProvider)
async def toggle_status(provider_id: int, providers: ProviderStore = Depends(get_provider_store)):
    return providers.toggle_active(provider_id)


@router.post("/{provider_id}/verify", response_model=ServiceProvider)
async def verify_provider(provider_id: int, providers: ProviderStore = Depends(get_provider_store)):
    return providers.verify(provider_id)


@router.post("/{provider_id}/assign", response_model=ServiceProvider)
async def assign_provider(provider_id: int, assignment: ProviderAssignment = Depends(get_assignment)):
    return assignment.assign(provider_id)


@router.post("/{provider_id}/reset-daily-orders", response_model=ServiceProvider)
async def reset_daily_orders(provider_id: int, providers: ProviderStore = Depends(get_provider_store)):
    return providers.reset_daily_orders(provider_id)
