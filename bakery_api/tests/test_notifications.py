"""Notification rules, delivery and read state."""
from datetime import date
from decimal import Decimal

from src.repositories.catalog import ProductRepository
from src.services.notifications import DEFAULT_RULES, NotificationService, merge_rules
from src.services.production import ProductionService


def test_merge_rules_defaults():
    assert merge_rules(None) == DEFAULT_RULES


def test_merge_rules_overlays_known_types_only():
    rules = merge_rules({"low_stock": {"enabled": False}, "birthday": {"enabled": True}, "system": "off"})

    assert rules["low_stock"] == {"enabled": False, "daily_limit": True}
    assert "birthday" not in rules
    assert rules["system"] == DEFAULT_RULES["system"]


def test_merge_rules_does_not_mutate_defaults():
    merge_rules({"new_order": {"enabled": False}})

    assert DEFAULT_RULES["new_order"]["enabled"] is True


# =============================================================================
# SERVICE
# =============================================================================

async def test_disabled_rule_suppresses_notification(session, users):
    service = NotificationService(session)
    manager_id = users["manager"].id

    await service.save_rules(manager_id, {"system": {"enabled": False}})
    created = await service.notify_user(manager_id, type_="system", title="Hello", message="World")

    assert created is None
    items, unread = await service.list_for_user(manager_id)
    assert items == [] and unread == 0


async def test_mark_read(session, users):
    service = NotificationService(session)
    admin_id = users["admin"].id

    first = await service.notify_user(admin_id, type_="system", title="One", message="1")
    await service.notify_user(admin_id, type_="system", title="Two", message="2")
    _, unread = await service.list_for_user(admin_id)
    assert unread == 2

    await service.mark_read(admin_id, first.id)
    _, unread = await service.list_for_user(admin_id)
    assert unread == 1

    assert await service.mark_all_read(admin_id) == 1
    unread_items, unread = await service.list_for_user(admin_id, unread_only=True)
    assert unread_items == [] and unread == 0


async def test_notifications_api_lists_own_items(client, session, users, auth_headers):
    await NotificationService(session).notify_user(users["staff"].id, type_="system", title="Shift", message="Tomorrow 6am")

    resp = await client.get("/api/v1/notifications", headers=auth_headers("staff"))

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["unread_count"] == 1
    assert [n["title"] for n in body["items"]] == ["Shift"]


async def test_scheduling_production_alerts_managers(session, users):
    product = await ProductRepository(session).create({"name": "Sourdough", "price": Decimal("6.50")})
    item = await ProductionService(session).create_item(
        {"product_id": product.id, "quantity": Decimal("40"), "unit": "pcs", "scheduled_date": date(2024, 6, 1)}
    )

    items, _ = await NotificationService(session).list_for_user(users["manager"].id)
    assert [(n.type, n.title) for n in items] == [("production_reminder", "Production scheduled")]
    assert items[0].data["production_schedule_id"] == item.id
    staff_items, _ = await NotificationService(session).list_for_user(users["staff"].id)
    assert staff_items == []
