import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from booking_engine.api.dependencies import (
    get_assignment,
    get_availability_service,
    get_provider_store,
)
from booking_engine.scheduling.assignment import ProviderAssignment
from booking_engine.scheduling.availability_service import AvailabilityService
from booking_engine.scheduling.errors import InvalidQueryError
from booking_engine.scheduling.slot_generator import Slot
from booking_engine.schemas.booking_schema import (
    AvailableSlotsRequest,
    AvailableSlotsResponse,
    BookSlotRequest,
    Booking,
    CalculateCostRequest,
    CheckAvailabilityRequest,
    CheckAvailabilityResponse,
    ProviderSlots,
    SlotResponse,
)
from booking_engine.schemas.provider_schema import ServiceProvider
from booking_engine.stores import service_catalog
from booking_engine.stores.provider_store import ProviderStore
from booking_engine.utils import format_time

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/services", tags=["services"])

# Providers offered when checkout asks by location instead of by provider.
NEARBY_PROVIDER_LIMIT = 3


def _slot_models(slots: list[Slot]) -> list[SlotResponse]:
    return [
        SlotResponse(
            date=s.date,
            start_time=format_time(s.start),
            end_time=format_time(s.end),
            time_slot=s.label,
        )
        for s in slots
    ]


def _slots_response(
    service: AvailabilityService,
    assignment: ProviderAssignment,
    body: AvailableSlotsRequest,
) -> AvailableSlotsResponse:
    end_date = body.end_date or body.start_date
    if body.provider_id is not None:
        slots = service.get_free_slots(body.provider_id, body.start_date, end_date)
        return AvailableSlotsResponse(
            provider_id=body.provider_id,
            start_date=body.start_date,
            end_date=end_date,
            slots=_slot_models(slots),
        )

    if body.city_id is None:
        raise InvalidQueryError("Either provider_id or city_id is required")
    candidates = assignment.available_providers(city_id=body.city_id, area_id=body.area_id)
    offers = []
    for provider in candidates[:NEARBY_PROVIDER_LIMIT]:
        slots = service.get_free_slots(provider.id, body.start_date, end_date)
        if slots:
            offers.append(ProviderSlots(
                provider_id=provider.id,
                name=provider.display_name,
                rating=provider.rating,
                slots=_slot_models(slots),
            ))
    logger.debug(
        "Slots by location city=%s area=%s: %d of %d providers have openings",
        body.city_id, body.area_id, len(offers), len(candidates),
    )
    return AvailableSlotsResponse(
        start_date=body.start_date, end_date=end_date, available_providers=offers
    )


@router.get("/product/{product_id}")
async def get_product_services(product_id: int):
    services = service_catalog.services_for_product(product_id)
    return {"success": True, "product_id": product_id, "services": services}


@router.post("/check-availability", response_model=CheckAvailabilityResponse)
async def check_availability(
    body: CheckAvailabilityRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    result = service.check_slot(body.provider_id, body.service_date, body.start_time, body.end_time)
    return CheckAvailabilityResponse(
        available=result.available, reason=result.reason, message=result.message
    )


@router.get("/available-slots", response_model=AvailableSlotsResponse)
async def get_available_slots(
    start_date: date,
    end_date: Optional[date] = None,
    provider_id: Optional[int] = None,
    city_id: Optional[int] = None,
    area_id: Optional[int] = None,
    service: AvailabilityService = Depends(get_availability_service),
    assignment: ProviderAssignment = Depends(get_assignment),
):
    body = AvailableSlotsRequest(
        provider_id=provider_id,
        city_id=city_id,
        area_id=area_id,
        start_date=start_date,
        end_date=end_date,
    )
    return _slots_response(service, assignment, body)


@router.post("/available-slots", response_model=AvailableSlotsResponse)
async def post_available_slots(
    body: AvailableSlotsRequest,
    service: AvailabilityService = Depends(get_availability_service),
    assignment: ProviderAssignment = Depends(get_assignment),
):
    return _slots_response(service, assignment, body)


@router.post("/book", response_model=Booking, status_code=201)
async def book_slot(
    body: BookSlotRequest,
    service: AvailabilityService = Depends(get_availability_service),
):
    return service.claim_slot(
        body.provider_id,
        body.service_date,
        body.start_time,
        body.end_time,
        order_ref=body.order_ref,
        notes=body.notes,
    )


@router.get("/providers/{provider_id}", response_model=ServiceProvider)
async def get_provider(provider_id: int, providers: ProviderStore = Depends(get_provider_store)):
    return providers.get(provider_id)


@router.post("/calculate-cost")
async def calculate_cost(body: CalculateCostRequest):
    try:
        result = service_catalog.calculate_cost(body.service_ids, body.product_ids)
    except KeyError as exc:
        logger.warning("Cost calculation failed: %s", exc)
        raise HTTPException(status_code=404, detail=str(exc.args[0])) from None
    return {"success": True, **result}
