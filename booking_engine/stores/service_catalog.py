"""Product service catalog with base prices and per-product overrides."""

import logging
from typing import Optional, TypedDict

logger = logging.getLogger(__name__)


class ProductServiceAssignment(TypedDict):
    """Links a service to a product with product-specific pricing."""

    service_id: int
    custom_price: Optional[float]
    is_free: bool
    is_mandatory: bool
    sort_order: int


SERVICE_CATALOG: dict[int, dict] = {
    1: {
        "name": "Boiler Installation",
        "description": "Remove the old unit, fit and commission the new boiler, including flue and controls.",
        "type": "installation",
        "price": 450.00,
        "duration_minutes": 240,
        "is_active": True,
    },
    2: {
        "name": "Annual Boiler Service",
        "description": "Full strip-down service, flue gas analysis, and safety checks.",
        "type": "maintenance",
        "price": 89.00,
        "duration_minutes": 60,
        "is_active": True,
    },
    3: {
        "name": "Gas Safety Certificate",
        "description": "Landlord gas safety inspection and CP12 certificate.",
        "type": "inspection",
        "price": 65.00,
        "duration_minutes": 45,
        "is_active": True,
    },
    4: {
        "name": "System Power Flush",
        "description": "Chemical power flush of the heating circuit before a new boiler is fitted.",
        "type": "maintenance",
        "price": 320.00,
        "duration_minutes": 300,
        "is_active": True,
    },
    5: {
        "name": "Old Boiler Disposal",
        "description": "Collection and licensed disposal of the removed unit.",
        "type": "delivery",
        "price": 40.00,
        "duration_minutes": 30,
        "is_active": False,
    },
}

_product_services: dict[int, list[ProductServiceAssignment]] = {}


def _seed() -> None:
    _product_services.clear()
    _product_services[1] = [
        {"service_id": 1, "custom_price": 399.00, "is_free": False, "is_mandatory": True, "sort_order": 1},
        {"service_id": 4, "custom_price": None, "is_free": False, "is_mandatory": False, "sort_order": 2},
        {"service_id": 5, "custom_price": None, "is_free": True, "is_mandatory": False, "sort_order": 3},
    ]
    _product_services[2] = [
        {"service_id": 2, "custom_price": None, "is_free": False, "is_mandatory": False, "sort_order": 1},
        {"service_id": 3, "custom_price": None, "is_free": True, "is_mandatory": False, "sort_order": 2},
    ]


_seed()


def get_service(service_id: int) -> Optional[dict]:
    """Full details for a catalog service, or None."""
    info = SERVICE_CATALOG.get(service_id)
    if info is None:
        return None
    return {"id": service_id, **info}


def _assignment(service_id: int, product_id: int) -> Optional[ProductServiceAssignment]:
    for row in _product_services.get(product_id, []):
        if row["service_id"] == service_id:
            return row
    return None


def get_final_price(service_id: int, product_id: int) -> float:
    """Price of a service when bought with a product: free, custom, or the base price.

    Raises:
        KeyError: If the service is not in the catalog.
    """
    if service_id not in SERVICE_CATALOG:
        raise KeyError(f"Service {service_id} not found")
    row = _assignment(service_id, product_id)
    if row is not None:
        if row["is_free"]:
            return 0.0
        if row["custom_price"] is not None:
            return float(row["custom_price"])
    return float(SERVICE_CATALOG[service_id]["price"])


def services_for_product(product_id: int) -> list[dict]:
    """Active services offered with a product, in display order."""
    rows = sorted(_product_services.get(product_id, []), key=lambda r: r["sort_order"])
    services = []
    for row in rows:
        info = SERVICE_CATALOG.get(row["service_id"])
        if info is None or not info["is_active"]:
            continue
        services.append(
            {
                "id": row["service_id"],
                "name": info["name"],
                "description": info["description"],
                "base_price": get_final_price(row["service_id"], product_id),
                "duration_minutes": info["duration_minutes"],
                "is_active": True,
                "is_mandatory": row["is_mandatory"],
                "is_free": row["is_free"],
            }
        )
    logger.debug("Services fetched for product %s: %d", product_id, len(services))
    return services


def calculate_cost(service_ids: list[int], product_ids: list[int]) -> dict:
    """Total of every (service, product) pair's final price, with a line-item breakdown."""
    details = []
    total = 0.0
    for service_id in service_ids:
        info = SERVICE_CATALOG.get(service_id)
        if info is None:
            raise KeyError(f"Service {service_id} not found")
        for product_id in product_ids:
            price = get_final_price(service_id, product_id)
            total += price
            details.append(
                {
                    "service_id": service_id,
                    "service_name": info["name"],
                    "product_id": product_id,
                    "price": price,
                }
            )
    return {"total_cost": round(total, 2), "details": details}


def assign_service_to_product(
    product_id: int,
    service_id: int,
    custom_price: Optional[float] = None,
    is_free: bool = False,
    is_mandatory: bool = False,
) -> ProductServiceAssignment:
    """Attach (or replace) a service on a product."""
    if service_id not in SERVICE_CATALOG:
        raise KeyError(f"Service {service_id} not found")
    rows = [r for r in _product_services.get(product_id, []) if r["service_id"] != service_id]
    row: ProductServiceAssignment = {
        "service_id": service_id,
        "custom_price": custom_price,
        "is_free": is_free,
        "is_mandatory": is_mandatory,
        "sort_order": len(rows) + 1,
    }
    rows.append(row)
    _product_services[product_id] = rows
    logger.info("Service %s assigned to product %s", service_id, product_id)
    return row


def reset() -> None:
    """Restore the seeded product assignments. Used by test fixtures for isolation."""
    _seed()
