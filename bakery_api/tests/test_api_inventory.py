"""Inventory, settings and upload endpoints."""
import os

from src.core.settings import get_app_settings


async def _item(client, headers, **overrides):
    payload = {"inv_code": "INV-001", "name": "Flour", "unit": "kg", "opening_stock": 20, "min_level": 5}
    payload.update(overrides)
    return await client.post("/api/v1/inventory/items", json=payload, headers=headers)


async def test_item_lifecycle(client, auth_headers):
    headers = auth_headers("manager")

    created = await _item(client, headers)
    assert created.status_code == 201, created.text
    item = created.json()
    assert item["current_stock"] == 20.0

    duplicate = await _item(client, headers, name="Other flour")
    assert duplicate.status_code == 409

    moved = await client.post(
        "/api/v1/inventory/transactions",
        json={"inventory_item_id": item["id"], "type": "out", "quantity": 16, "reason": "production"},
        headers=headers,
    )
    assert moved.status_code == 201, moved.text

    low = await client.get("/api/v1/inventory/items/low-stock", headers=headers)
    assert [i["name"] for i in low.json()] == ["Flour"]

    history = await client.get(f"/api/v1/inventory/transactions?item_id={item['id']}", headers=headers)
    assert [t["quantity"] for t in history.json()] == [16.0]


async def test_overdraw_is_rejected_with_details(client, auth_headers):
    headers = auth_headers("manager")
    item = (await _item(client, headers, opening_stock=2)).json()

    resp = await client.post(
        "/api/v1/inventory/transactions",
        json={"inventory_item_id": item["id"], "type": "out", "quantity": 3},
        headers=headers,
    )

    assert resp.status_code == 400
    error = resp.json()["error"]
    assert error["message"] == "Insufficient stock"
    assert float(error["details"]["current_stock"]) == 2
    assert float(error["details"]["requested"]) == 3


async def test_staff_cannot_change_inventory(client, auth_headers):
    resp = await _item(client, auth_headers("staff"))

    assert resp.status_code == 403


async def test_public_settings_need_no_login(client, seeded):
    resp = await client.get("/api/v1/settings/public")

    assert resp.status_code == 200
    body = resp.json()
    assert body["companyName"] == "Sweet Treats Bakery"
    assert "taxRate" not in body


async def test_settings_update(client, auth_headers):
    headers = auth_headers("admin")

    resp = await client.put("/api/v1/settings", json={"settings": {"currency": "EUR", "taxRate": 7.5}}, headers=headers)

    assert resp.status_code == 200, resp.text
    assert resp.json()["currency"] == "EUR"
    assert resp.json()["taxRate"] == "7.5"


async def test_image_upload(client, auth_headers):
    resp = await client.post(
        "/api/v1/uploads/images",
        files={"file": ("cake.png", b"\x89PNG\r\n\x1a\nfake", "image/png")},
        headers=auth_headers("staff"),
    )

    assert resp.status_code == 201, resp.text
    body = resp.json()
    assert body["url"].startswith("/uploads/") and body["url"].endswith(".png")
    assert os.path.exists(os.path.join(get_app_settings().UPLOAD_DIR, body["filename"]))


async def test_upload_rejects_other_types(client, auth_headers):
    resp = await client.post(
        "/api/v1/uploads/images",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers("staff"),
    )

    assert resp.status_code == 415
