"""Tests for product service pricing."""

import pytest


class TestServicesForProduct:
    def test_active_services_in_order(self, catalog):
        services = catalog.services_for_product(1)
        assert [s["id"] for s in services] == [1, 4]

    def test_inactive_service_hidden(self, catalog):
        assert 5 not in [s["id"] for s in catalog.services_for_product(1)]

    def test_unknown_product_is_empty(self, catalog):
        assert catalog.services_for_product(999) == []

    def test_mandatory_flag(self, catalog):
        first = catalog.services_for_product(1)[0]
        assert first["is_mandatory"] is True
        assert first["base_price"] == 399.0


class TestFinalPrice:
    def test_free_service(self, catalog):
        assert catalog.get_final_price(3, 2) == 0.0

    def test_custom_price(self, catalog):
        assert catalog.get_final_price(1, 1) == 399.0

    def test_base_price_without_assignment(self, catalog):
        assert catalog.get_final_price(2, 1) == 89.0

    def test_unknown_service(self, catalog):
        with pytest.raises(KeyError):
            catalog.get_final_price(99, 1)


class TestCalculateCost:
    def test_total_across_pairs(self, catalog):
        result = catalog.calculate_cost([1, 2], [1, 2])
        # service 1: custom 399 on product 1, base 450 on product 2; service 2: base 89 on both
        assert result["total_cost"] == 399.0 + 450.0 + 89.0 + 89.0
        assert len(result["details"]) == 4

    def test_free_line_items(self, catalog):
        result = catalog.calculate_cost([3], [2])
        assert result["total_cost"] == 0.0
        assert result["details"][0]["service_name"] == "Gas Safety Certificate"

    def test_unknown_service(self, catalog):
        with pytest.raises(KeyError):
            catalog.calculate_cost([99], [1])

    def test_empty_request(self, catalog):
        assert catalog.calculate_cost([], [1]) == {"total_cost": 0.0, "details": []}


class TestAssignServiceToProduct:
    def test_new_assignment(self, catalog):
        catalog.assign_service_to_product(3, 2, custom_price=79.0)
        assert catalog.get_final_price(2, 3) == 79.0

    def test_replaces_existing(self, catalog):
        catalog.assign_service_to_product(1, 1, is_free=True)
        assert catalog.get_final_price(1, 1) == 0.0
        assert [s["id"] for s in catalog.services_for_product(1)].count(1) == 1

    def test_reset_restores_seed(self, catalog):
        catalog.assign_service_to_product(1, 1, is_free=True)
        catalog.reset()
        assert catalog.get_final_price(1, 1) == 399.0
