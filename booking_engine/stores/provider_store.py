"""
In-memory service provider registry.

In production, this would be the service_providers table behind the
admin back-office. Counter operations mirror the back-office rules:
reaching the daily cap flips a provider to busy, and a reset or a freed
order puts a busy provider back to available.
"""

import itertools
import logging
import threading
from datetime import datetime, timezone
from typing import Optional

from booking_engine.scheduling.availability_model import AvailabilityModel
from booking_engine.scheduling.errors import ProviderNotFoundError
from booking_engine.schemas.provider_schema import (
    AvailabilityStatus,
    ProviderCreate,
    ProviderUpdate,
    ServiceAssignment,
    ServiceProvider,
)

logger = logging.getLogger(__name__)


class ProviderStore:
    """Provider records plus their daily and lifetime counters."""

    def __init__(self) -> None:
        self._providers: dict[int, ServiceProvider] = {}
        self._lock = threading.RLock()
        self._ids = itertools.count(1)

    # ------------------------------------------------------------------ #
    # CRUD
    # ------------------------------------------------------------------ #

    def create(self, data: ProviderCreate) -> ServiceProvider:
        with self._lock:
            provider = ServiceProvider(
                id=next(self._ids),
                availability_status=AvailabilityStatus.AVAILABLE,
                daily_orders_count=0,
                verified_at=datetime.now(timezone.utc) if data.is_verified else None,
                **data.model_dump(),
            )
            self._providers[provider.id] = provider
        logger.info("Provider created: %s (%s)", provider.id, provider.display_name)
        return provider

    def get(self, provider_id: int) -> ServiceProvider:
        """Fetch a live provider.

        Raises:
            ProviderNotFoundError: If the id is unknown or soft-deleted.
        """
        provider = self._providers.get(provider_id)
        if provider is None or provider.is_deleted:
            raise ProviderNotFoundError(f"Service provider {provider_id} not found.")
        return provider

    def find(
        self,
        category: Optional[str] = None,
        city_id: Optional[int] = None,
        area_id: Optional[int] = None,
        status: Optional[AvailabilityStatus] = None,
        active_only: bool = False,
    ) -> list[ServiceProvider]:
        with self._lock:
            providers = [p for p in self._providers.values() if not p.is_deleted]
        return [
            p
            for p in providers
            if (category is None or p.category == category)
            and (city_id is None or p.city_id == city_id)
            and (area_id is None or p.area_id == area_id)
            and (status is None or p.availability_status == status)
            and (not active_only or p.is_active)
        ]

    def update(self, provider_id: int, changes: ProviderUpdate) -> ServiceProvider:
        with self._lock:
            provider = self.get(provider_id)
            for name, value in changes.model_dump(exclude_unset=True).items():
                setattr(provider, name, value)
        logger.info("Provider %s updated", provider_id)
        return provider

    def delete(self, provider_id: int) -> None:
        """Soft delete: the record stays but is hidden from every query."""
        with self._lock:
            provider = self.get(provider_id)
            provider.is_active = False
            provider.deleted_at = datetime.now(timezone.utc)
        logger.info("Provider %s deleted", provider_id)

    def toggle_active(self, provider_id: int) -> ServiceProvider:
        with self._lock:
            provider = self.get(provider_id)
            provider.is_active = not provider.is_active
        logger.info("Provider %s active=%s", provider_id, provider.is_active)
        return provider

    def verify(self, provider_id: int) -> ServiceProvider:
        with self._lock:
            provider = self.get(provider_id)
            provider.is_verified = True
            provider.verified_at = datetime.now(timezone.utc)
        return provider

    def set_availability(self, provider_id: int, model: AvailabilityModel) -> ServiceProvider:
        """Replace working hours, duration and lead time from a validated model."""
        model.validate()
        with self._lock:
            provider = self.get(provider_id)
            provider.working_hours = dict(model.working_hours)
            provider.avg_service_duration = model.avg_service_duration
            provider.min_advance_booking_hours = model.min_advance_booking_hours
        logger.info(
            "Working hours updated for provider %s: days=%s duration=%s lead=%sh",
            provider_id, provider.working_days,
            model.avg_service_duration, model.min_advance_booking_hours,
        )
        return provider

    def assign_services(
        self, provider_id: int, assignments: list[ServiceAssignment]
    ) -> ServiceProvider:
        """Replace the provider's service capabilities. Later duplicates win."""
        unique = {a.service_id: a for a in assignments}
        with self._lock:
            provider = self.get(provider_id)
            provider.services = list(unique.values())
        return provider

    # ------------------------------------------------------------------ #
    # Counters
    # ------------------------------------------------------------------ #

    def increment_daily_orders(self, provider_id: int) -> ServiceProvider:
        with self._lock:
            provider = self.get(provider_id)
            provider.daily_orders_count += 1
            if provider.daily_orders_count >= provider.max_daily_orders:
                provider.availability_status = AvailabilityStatus.BUSY
                logger.info("Provider %s reached daily cap, now busy", provider_id)
        return provider

    def decrement_daily_orders(self, provider_id: int) -> ServiceProvider:
        with self._lock:
            provider = self.get(provider_id)
            if provider.daily_orders_count > 0:
                provider.daily_orders_count -= 1
            if (
                provider.availability_status == AvailabilityStatus.BUSY
                and provider.daily_orders_count < provider.max_daily_orders
            ):
                provider.availability_status = AvailabilityStatus.AVAILABLE
        return provider

    def reset_daily_orders(self, provider_id: int) -> ServiceProvider:
        with self._lock:
            provider = self.get(provider_id)
            provider.daily_orders_count = 0
            provider.availability_status = AvailabilityStatus.AVAILABLE
        logger.info("Daily orders reset for provider %s", provider_id)
        return provider

    def reset_all_daily_orders(self) -> int:
        """The daily job: zero every counter. Offline providers stay offline."""
        count = 0
        with self._lock:
            for provider in self._providers.values():
                if provider.is_deleted:
                    continue
                provider.daily_orders_count = 0
                if provider.availability_status == AvailabilityStatus.BUSY:
                    provider.availability_status = AvailabilityStatus.AVAILABLE
                count += 1
        logger.info("Daily orders reset for %d providers", count)
        return count

    def record_completion(self, provider_id: int, rating: Optional[int] = None) -> ServiceProvider:
        """Count a completed job and fold an optional 1-5 rating into the running mean."""
        with self._lock:
            provider = self.get(provider_id)
            provider.total_orders_completed += 1
            if rating is not None:
                if not 1 <= rating <= 5:
                    raise ValueError(f"rating must be between 1 and 5, got {rating}")
                total = provider.rating * provider.total_reviews + rating
                provider.total_reviews += 1
                provider.rating = round(total / provider.total_reviews, 2)
        return provider

    def reset(self) -> None:
        """Clear all providers. Used by test fixtures for isolation."""
        with self._lock:
            self._providers.clear()
            self._ids = itertools.count(1)
