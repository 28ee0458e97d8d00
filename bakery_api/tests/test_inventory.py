"""Stock movements and low stock alerts."""
from decimal import Decimal

import pytest

from src.repositories.inventory import InventoryItemRepository
from src.services.base import DomainValidationError, NotFoundError
from src.services.inventory import InventoryService, apply_stock_movement
from src.services.notifications import NotificationService


@pytest.mark.parametrize(
    "type_, quantity, expected",
    [
        ("in", 5, Decimal("15")),
        ("out", 4, Decimal("6")),
        ("adjustment", -10, Decimal("0")),
        ("adjustment", "2.5", Decimal("12.5")),
    ],
)
def test_apply_stock_movement(type_, quantity, expected):
    assert apply_stock_movement(10, type_, quantity) == expected


def test_outbound_movement_cannot_go_negative():
    with pytest.raises(DomainValidationError) as exc:
        apply_stock_movement(3, "out", 5)
    assert exc.value.details == {"current_stock": "3", "requested": "5"}


def test_inbound_quantity_must_be_positive():
    with pytest.raises(DomainValidationError):
        apply_stock_movement(3, "in", 0)


def test_unknown_movement_type():
    with pytest.raises(DomainValidationError):
        apply_stock_movement(3, "transfer", 1)


# =============================================================================
# SERVICE
# =============================================================================

async def test_item_starts_at_opening_stock(session):
    item = await InventoryService(session).create_item({"name": "Sugar", "unit": "kg", "opening_stock": 25})

    assert float(item.current_stock) == 25.0


async def test_inbound_movement_restocks(session):
    service = InventoryService(session)
    item = await service.create_item({"name": "Eggs", "unit": "pcs", "opening_stock": 12})

    txn = await service.post_movement(item.id, type_="in", quantity=24, reason="delivery", cost_per_unit=Decimal("0.25"))

    refreshed = await InventoryItemRepository(session).get(item.id)
    assert txn.type == "in"
    assert float(refreshed.current_stock) == 36.0
    assert float(refreshed.cost_per_unit) == 0.25
    assert refreshed.last_restocked is not None


async def test_movement_on_missing_item(session):
    with pytest.raises(NotFoundError):
        await InventoryService(session).post_movement(404, type_="in", quantity=1)


async def test_low_stock_alerts_managers_once_per_day(session, users):
    service = InventoryService(session)
    item = await service.create_item({"name": "Vanilla", "unit": "ml", "opening_stock": 100, "min_level": 50})

    await service.post_movement(item.id, type_="out", quantity=60)
    await service.post_movement(item.id, type_="out", quantity=10)

    notifications, unread = await NotificationService(session).list_for_user(users["manager"].id)
    low_stock = [n for n in notifications if n.type == "low_stock"]
    assert len(low_stock) == 1
    assert unread == 1

    staff_notifications, _ = await NotificationService(session).list_for_user(users["staff"].id)
    assert staff_notifications == []
