"""Tests for the provider registry and its counters."""

import pytest
from pydantic import ValidationError

from booking_engine.scheduling.errors import ProviderNotFoundError
from booking_engine.schemas.provider_schema import (
    AvailabilityStatus,
    ExperienceLevel,
    ProviderCreate,
    ProviderUpdate,
    ServiceAssignment,
)
from tests.conftest import make_provider


class TestCrud:
    def test_create_assigns_ids(self, providers):
        first = make_provider(providers)
        second = make_provider(providers, business_name="Southside Gas")
        assert (first.id, second.id) == (1, 2)

    def test_create_defaults(self, providers):
        provider = make_provider(providers)
        assert provider.availability_status == AvailabilityStatus.AVAILABLE
        assert provider.daily_orders_count == 0
        assert provider.max_daily_orders == 5
        assert provider.verified_at is not None

    def test_unverified_has_no_timestamp(self, providers):
        assert make_provider(providers, is_verified=False).verified_at is None

    def test_default_week_is_every_day(self, providers):
        assert len(make_provider(providers).working_days) == 7

    def test_max_daily_orders_bounds(self):
        with pytest.raises(ValidationError):
            ProviderCreate(max_daily_orders=0)
        with pytest.raises(ValidationError):
            ProviderCreate(max_daily_orders=51)

    def test_get_unknown(self, providers):
        with pytest.raises(ProviderNotFoundError):
            providers.get(42)

    def test_update_is_partial(self, providers):
        provider = make_provider(providers)
        providers.update(provider.id, ProviderUpdate(contact_number="07700 900123"))
        refreshed = providers.get(provider.id)
        assert refreshed.contact_number == "07700 900123"
        assert refreshed.business_name == "Northside Heating"

    def test_soft_delete_hides_provider(self, providers):
        provider = make_provider(providers)
        providers.delete(provider.id)
        with pytest.raises(ProviderNotFoundError):
            providers.get(provider.id)
        assert providers.find() == []

    def test_toggle_active(self, providers):
        provider = make_provider(providers)
        assert providers.toggle_active(provider.id).is_active is False
        assert providers.toggle_active(provider.id).is_active is True

    def test_verify(self, providers):
        provider = make_provider(providers, is_verified=False)
        verified = providers.verify(provider.id)
        assert verified.is_verified
        assert verified.verified_at is not None


class TestFind:
    def test_filters(self, providers):
        make_provider(providers, city_id=1, area_id=10)
        make_provider(providers, city_id=1, area_id=11, category="delivery")
        make_provider(providers, city_id=2, area_id=20)
        assert len(providers.find(city_id=1)) == 2
        assert len(providers.find(area_id=11)) == 1
        assert len(providers.find(category="installer")) == 2

    def test_active_only(self, providers):
        provider = make_provider(providers)
        make_provider(providers)
        providers.toggle_active(provider.id)
        assert len(providers.find(active_only=True)) == 1

    def test_status_filter(self, providers):
        provider = make_provider(providers)
        make_provider(providers)
        providers.update(provider.id, ProviderUpdate(availability_status=AvailabilityStatus.OFFLINE))
        assert [p.id for p in providers.find(status=AvailabilityStatus.OFFLINE)] == [provider.id]


class TestServices:
    def test_assign_services(self, providers):
        provider = make_provider(providers)
        providers.assign_services(provider.id, [
            ServiceAssignment(service_id=1, custom_price=380.0, experience_level=ExperienceLevel.EXPERT),
            ServiceAssignment(service_id=2),
        ])
        assert [s.service_id for s in providers.get(provider.id).services] == [1, 2]

    def test_later_duplicate_wins(self, providers):
        provider = make_provider(providers)
        providers.assign_services(provider.id, [
            ServiceAssignment(service_id=1, experience_level=ExperienceLevel.BEGINNER),
            ServiceAssignment(service_id=1, experience_level=ExperienceLevel.EXPERT),
        ])
        services = providers.get(provider.id).services
        assert len(services) == 1
        assert services[0].experience_level == ExperienceLevel.EXPERT

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            ServiceAssignment(service_id=1, custom_price=-1)


class TestCounters:
    def test_increment_flips_busy_at_cap(self, providers):
        provider = make_provider(providers, max_daily_orders=2)
        providers.increment_daily_orders(provider.id)
        assert provider.availability_status == AvailabilityStatus.AVAILABLE
        providers.increment_daily_orders(provider.id)
        assert provider.availability_status == AvailabilityStatus.BUSY

    def test_decrement_floors_at_zero(self, providers):
        provider = make_provider(providers)
        providers.decrement_daily_orders(provider.id)
        assert provider.daily_orders_count == 0

    def test_decrement_frees_busy(self, providers):
        provider = make_provider(providers, max_daily_orders=1)
        providers.increment_daily_orders(provider.id)
        providers.decrement_daily_orders(provider.id)
        assert provider.availability_status == AvailabilityStatus.AVAILABLE

    def test_decrement_stays_busy_while_at_cap(self, providers):
        provider = make_provider(providers, max_daily_orders=1)
        providers.increment_daily_orders(provider.id)
        providers.increment_daily_orders(provider.id)
        providers.decrement_daily_orders(provider.id)
        assert provider.daily_orders_count == 1
        assert provider.availability_status == AvailabilityStatus.BUSY

    def test_reset_one(self, providers):
        provider = make_provider(providers, max_daily_orders=1)
        providers.increment_daily_orders(provider.id)
        providers.reset_daily_orders(provider.id)
        assert provider.daily_orders_count == 0
        assert provider.availability_status == AvailabilityStatus.AVAILABLE

    def test_reset_all_keeps_offline(self, providers):
        busy = make_provider(providers, max_daily_orders=1)
        offline = make_provider(providers)
        providers.increment_daily_orders(busy.id)
        providers.increment_daily_orders(offline.id)
        providers.update(offline.id, ProviderUpdate(availability_status=AvailabilityStatus.OFFLINE))

        assert providers.reset_all_daily_orders() == 2
        assert busy.availability_status == AvailabilityStatus.AVAILABLE
        assert offline.availability_status == AvailabilityStatus.OFFLINE
        assert offline.daily_orders_count == 0

    def test_record_completion_rejects_bad_rating(self, providers):
        provider = make_provider(providers)
        with pytest.raises(ValueError):
            providers.record_completion(provider.id, rating=0)
