"""Automatic and manual provider selection for new orders.

Assigning a provider counts against its daily orders, so a provider that
reaches its cap drops out of the available pool until a reassignment, a
reset or the nightly job frees it.
"""

import logging
from typing import Optional

from booking_engine.schemas.provider_schema import ServiceProvider
from booking_engine.stores.provider_store import ProviderStore

logger = logging.getLogger(__name__)


class ProviderAssignment:
    """Picks providers that can take another order today."""

    def __init__(self, providers: ProviderStore) -> None:
        self._providers = providers

    def _eligible(
        self, city_id: Optional[int], area_id: Optional[int], category: Optional[str]
    ) -> list[ServiceProvider]:
        candidates = self._providers.find(category=category, city_id=city_id, area_id=area_id)
        return [p for p in candidates if p.is_available()]

    def available_providers(
        self,
        city_id: Optional[int] = None,
        area_id: Optional[int] = None,
        category: Optional[str] = None,
    ) -> list[ServiceProvider]:
        """Available providers, best rated first, least loaded breaking ties."""
        return sorted(
            self._eligible(city_id, area_id, category),
            key=lambda p: (-p.rating, p.daily_orders_count),
        )

    def assign(self, provider_id: int) -> ServiceProvider:
        """Record an order against a specific provider.

        Raises:
            ProviderNotFoundError: Unknown or deleted provider.
        """
        provider = self._providers.increment_daily_orders(provider_id)
        logger.info(
            "Assigned order to provider %s (%d today)", provider.id, provider.daily_orders_count
        )
        return provider

    def auto_assign(
        self,
        city_id: int,
        area_id: Optional[int] = None,
        category: Optional[str] = None,
    ) -> Optional[ServiceProvider]:
        """
        Choose one provider for an order and record the assignment.

        Tries the exact area first and falls back to the whole city. Within
        a pool the least loaded provider wins, then the best rated.

        Returns:
            The chosen provider, or None when nobody qualifies.
        """
        pools = []
        if area_id is not None:
            pools.append(self._eligible(city_id, area_id, category))
        pools.append(self._eligible(city_id, None, category))

        for pool in pools:
            if pool:
                chosen = min(pool, key=lambda p: (p.daily_orders_count, -p.rating))
                logger.info(
                    "Auto-assigned provider %s for city=%s area=%s",
                    chosen.id, city_id, area_id,
                )
                return self.assign(chosen.id)

        logger.warning("No available provider for city=%s area=%s", city_id, area_id)
        return None

    def reassign(
        self,
        old_provider_id: int,
        new_provider_id: Optional[int] = None,
        city_id: Optional[int] = None,
        area_id: Optional[int] = None,
        category: Optional[str] = None,
    ) -> Optional[ServiceProvider]:
        """
        Move an order away from a provider.

        The old provider gives back one daily order. The order then goes to
        ``new_provider_id`` when given, otherwise through ``auto_assign`` in
        the given city (or the old provider's city).

        Returns:
            The new provider, or None when nobody qualifies.

        Raises:
            ProviderNotFoundError: Unknown old or new provider.
        """
        old = self._providers.get(old_provider_id)
        if new_provider_id is not None:
            self._providers.get(new_provider_id)

        self._providers.decrement_daily_orders(old.id)
        logger.info("Released order from provider %s", old.id)

        if new_provider_id is not None:
            return self.assign(new_provider_id)
        return self.auto_assign(
            city_id if city_id is not None else old.city_id,
            area_id=area_id,
            category=category,
        )
