"""
FastAPI application exposing the booking engine.

    app = create_app()
    uvicorn.run(app, host=settings.server.host, port=settings.server.port)

The engine objects live on ``app.state`` and are reached through the
dependencies in ``booking_engine.api.dependencies``.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from booking_engine.api.background import daily_reset_loop
from booking_engine.api.routers import admin_router, services_router
from booking_engine.config import AppConfig, settings
from booking_engine.logging_context import set_request_id
from booking_engine.scheduling.assignment import ProviderAssignment
from booking_engine.scheduling.availability_service import AvailabilityService
from booking_engine.scheduling.errors import (
    BookingNotFoundError,
    CapacityExceededError,
    InvalidQueryError,
    InvalidScheduleError,
    InvalidTransitionError,
    LeadTimeViolationError,
    ProviderNotFoundError,
    SchedulingError,
    SlotUnavailableError,
)
from booking_engine.scheduling.ledger import BookingLedger
from booking_engine.scheduling.state_machine import BookingStateMachine
from booking_engine.stores.provider_store import ProviderStore

logger = logging.getLogger(__name__)

ERROR_STATUS: dict[type, int] = {
    InvalidScheduleError: 422,
    InvalidQueryError: 422,
    LeadTimeViolationError: 422,
    SlotUnavailableError: 409,
    CapacityExceededError: 409,
    InvalidTransitionError: 409,
    ProviderNotFoundError: 404,
    BookingNotFoundError: 404,
}


def status_for(exc: SchedulingError) -> int:
    for error_type, status in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: AppConfig = app.state.config
    app.state.daily_reset = asyncio.create_task(
        daily_reset_loop(app.state.providers, config.scheduling.timezone)
    )
    logger.info("%s started", config.app_name)
    try:
        yield
    finally:
        task = app.state.daily_reset
        if task and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)
        app.state.daily_reset = None
        logger.info("%s stopped", config.app_name)


def create_app(
    providers: Optional[ProviderStore] = None,
    ledger: Optional[BookingLedger] = None,
    clock: Optional[Callable[[], datetime]] = None,
    config: AppConfig = settings,
) -> FastAPI:
    """Build the application around a provider store and ledger (fresh ones by default)."""
    app = FastAPI(title=config.app_name, lifespan=lifespan)

    providers = providers or ProviderStore()
    ledger = ledger or BookingLedger()
    app.state.config = config
    app.state.providers = providers
    app.state.ledger = ledger
    app.state.availability = AvailabilityService(
        providers, ledger, clock=clock, config=config.scheduling
    )
    app.state.state_machine = BookingStateMachine(ledger, providers, clock=clock)
    app.state.assignment = ProviderAssignment(providers)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.server.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        set_request_id(request_id)
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(SchedulingError)
    async def scheduling_error_handler(request: Request, exc: SchedulingError):
        status = status_for(exc)
        logger.warning(
            "%s %s -> %d %s: %s",
            request.method, request.url.path, status, exc.reason, exc.message,
        )
        return JSONResponse(
            status_code=status,
            content={"detail": exc.message, "reason": exc.reason},
        )

    app.include_router(services_router.router)
    app.include_router(admin_router.router)

    @app.get("/status")
    async def check_status():
        return {"status": "success", "message": f"{config.app_name} is running"}

    return app
