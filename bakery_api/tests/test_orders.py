"""Order numbering, pricing, customer statistics and public order intake."""
import re
from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.services.accounts import AccountService
from src.services.base import DomainValidationError
from src.services.notifications import NotificationService, order_alert_level
from src.services.orders import (
    OrderService,
    build_public_order_notes,
    generate_order_number,
    price_items,
)


def test_staff_order_number():
    assert generate_order_number(now_ms=1700000000123) == "ORD-1700000000123"


def test_public_order_number_has_random_suffix():
    number = generate_order_number("PUB", now_ms=1700000000123, public=True)

    assert re.fullmatch(r"PUB-1700000000123-[A-Z0-9]{5}", number)


def test_price_items_totals():
    priced, total = price_items(
        [
            {"product_id": 1, "quantity": 3, "unit_price": "2.50"},
            {"product_id": None, "quantity": "0.5", "unit_price": 19.99},
        ]
    )

    assert [p["total_price"] for p in priced] == [Decimal("7.50"), Decimal("10.00")]
    assert total == Decimal("17.50")


def test_price_items_rejects_non_positive_quantity():
    with pytest.raises(DomainValidationError):
        price_items([{"quantity": 0, "unit_price": 1}])


def test_public_order_notes():
    notes = build_public_order_notes("12 Baker St", "Ring twice")

    assert notes == "Delivery Address: 12 Baker St\nSpecial Instructions: Ring twice"
    assert build_public_order_notes("12 Baker St", None) == "Delivery Address: 12 Baker St"


@pytest.mark.parametrize(
    "total, attachments, expected",
    [
        (100, False, ("medium", False)),
        (750, False, ("high", False)),
        (1500, False, ("high", True)),
        (20, True, ("medium", True)),
    ],
)
def test_order_alert_level(total, attachments, expected):
    assert order_alert_level(total, attachments) == expected


# =============================================================================
# SERVICE
# =============================================================================

async def test_order_updates_customer_statistics(session):
    customer = await AccountService(session).create("customer", {"name": "Hotel Rio"})
    service = OrderService(session)

    order = await service.create_order(
        {"customer_id": customer.id},
        [{"quantity": 2, "unit_price": Decimal("12.50")}, {"quantity": 1, "unit_price": Decimal("5")}],
    )

    assert order.customer_name == "Hotel Rio"
    assert order.order_number.startswith("ORD-")
    assert float(order.total_amount) == 30.0
    assert len(order.items) == 2

    refreshed = await AccountService(session).get("customer", customer.id)
    assert refreshed.total_orders == 1
    assert float(refreshed.total_spent) == 30.0

    await service.update_order(order.id, {}, [{"quantity": 4, "unit_price": Decimal("12.50")}])
    refreshed = await AccountService(session).get("customer", customer.id)
    assert float(refreshed.total_spent) == 50.0

    await service.delete_order(order.id)
    refreshed = await AccountService(session).get("customer", customer.id)
    assert refreshed.total_orders == 0
    assert float(refreshed.total_spent) == 0.0


async def test_walk_in_order_requires_name(session):
    with pytest.raises(DomainValidationError):
        await OrderService(session).create_order({}, [{"quantity": 1, "unit_price": Decimal("3")}])


async def test_invalid_status_rejected(session):
    with pytest.raises(DomainValidationError):
        await OrderService(session).create_order(
            {"customer_name": "Walk-in", "status": "shipped"}, [{"quantity": 1, "unit_price": Decimal("3")}]
        )


# =============================================================================
# PUBLIC INTAKE
# =============================================================================

async def test_public_order_via_api(client, session, users):
    payload = {
        "customer_name": "Ana",
        "customer_email": "ana@example.com",
        "customer_phone": "555-0101",
        "delivery_date": (date.today() + timedelta(days=2)).isoformat(),
        "delivery_address": "1 Main St",
        "special_instructions": "No nuts",
        "items": [{"quantity": 2, "unit_price": 300}],
    }

    resp = await client.post("/api/v1/public/orders", json=payload)

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["order_number"].startswith("PUB-")
    assert body["total_amount"] == 600.0
    assert body["status"] == "pending"

    notifications, _ = await NotificationService(session).list_for_user(users["manager"].id)
    assert [n.type for n in notifications] == ["new_order"]
    assert notifications[0].priority == "high"
    assert notifications[0].data["order_number"] == body["order_number"]


async def test_public_order_validation_error_envelope(client, seeded):
    resp = await client.post("/api/v1/public/orders", json={"customer_name": "Ana", "items": []})

    assert resp.status_code == 422
    body = resp.json()
    assert body["status"] == 422
    assert body["error"]["type"] == "validation_error"
    assert body["path"] == "/api/v1/public/orders"
