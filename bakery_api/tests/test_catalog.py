"""Unit conversion and recipe costing."""
from decimal import Decimal

import pytest

from src.services.catalog import CatalogService, UnitConversionError, compute_margin, convert_via_base
from src.services.inventory import InventoryService


def test_convert_via_base_unit():
    # 2.5 kg -> g with factors to base g
    assert convert_via_base("2.5", 1000, 1) == Decimal("2500.000000")
    assert convert_via_base(750, 1, 1000) == Decimal("0.750000")


def test_convert_via_base_rejects_zero_factor():
    with pytest.raises(UnitConversionError):
        convert_via_base(1, 1, 0)


def test_margin_percentage():
    assert compute_margin(10, 4) == Decimal("60.00")
    assert compute_margin("3.00", "2.00") == Decimal("33.33")


def test_margin_of_free_item_is_zero():
    assert compute_margin(0, 5) == Decimal("0.00")


# =============================================================================
# SERVICE
# =============================================================================

async def test_convert_with_seeded_units(session, seeded):
    service = CatalogService(session)

    assert await service.convert(500, "g", "kg") == Decimal("0.500000")
    assert await service.convert("1.5", "l", "ml") == Decimal("1500.000000")
    assert await service.convert(3, "pcs", "PCS") == Decimal("3")


async def test_convert_across_unit_types_fails(session, seeded):
    with pytest.raises(UnitConversionError):
        await CatalogService(session).convert(1, "kg", "ml")


async def test_product_cost_from_ingredients(session, seeded):
    flour = await InventoryService(session).create_item(
        {"name": "Flour", "unit": "kg", "opening_stock": 50, "cost_per_unit": Decimal("1.20")}
    )
    butter = await InventoryService(session).create_item(
        {"name": "Butter", "unit": "kg", "opening_stock": 10, "cost_per_unit": Decimal("8.00")}
    )
    catalog = CatalogService(session)
    product = await catalog.save_product(
        {"name": "Croissant", "price": Decimal("2.50"), "unit": "pcs"},
        [
            {"inventory_item_id": flour.id, "quantity": 100, "unit": "g"},
            {"inventory_item_id": butter.id, "quantity": 50, "unit": "g"},
        ],
    )

    result = await catalog.calculate_cost(product.id)

    # 0.1 kg * 1.20 + 0.05 kg * 8.00
    assert result["cost"] == Decimal("0.52")
    assert result["margin"] == Decimal("79.20")
    assert len(result["ingredients"]) == 2

    updated = await catalog.update_cost(product.id)
    assert float(updated.cost) == pytest.approx(0.52)
