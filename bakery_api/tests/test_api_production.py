"""Production schedule and order edits over HTTP."""
from datetime import date


async def _product(client, headers, name="Croissant"):
    resp = await client.post("/api/v1/products", json={"name": name, "price": 2.5}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _schedule(client, headers, product_id, **overrides):
    payload = {"product_id": product_id, "quantity": 120, "unit": "pcs", "scheduled_date": "2024-09-02"}
    payload.update(overrides)
    return await client.post("/api/v1/production/schedule", json=payload, headers=headers)


async def test_schedule_lifecycle(client, auth_headers):
    headers = auth_headers("staff")
    product = await _product(client, auth_headers("manager"))

    created = await _schedule(client, headers, product["id"], start_time="05:00:00", end_time="07:30:00")
    assert created.status_code == 201, created.text
    entry = created.json()
    assert (entry["status"], entry["priority"]) == ("pending", "medium")

    resp = await client.put(
        f"/api/v1/production/schedule/{entry['id']}", json={"status": "in_progress", "notes": "Oven 2"}, headers=headers
    )
    assert resp.status_code == 200, resp.text
    assert resp.json()["status"] == "in_progress"

    listed = await client.get("/api/v1/production/schedule?status=in_progress", headers=headers)
    assert [e["id"] for e in listed.json()] == [entry["id"]]
    other_day = await client.get("/api/v1/production/schedule?date=2024-09-03", headers=headers)
    assert other_day.json() == []

    resp = await client.delete(f"/api/v1/production/schedule/{entry['id']}", headers=headers)
    assert resp.status_code == 204
    assert (await client.get(f"/api/v1/production/schedule/{entry['id']}", headers=headers)).status_code == 404


async def test_todays_schedule(client, auth_headers):
    headers = auth_headers("manager")
    product = await _product(client, headers)
    await _schedule(client, headers, product["id"], scheduled_date=date.today().isoformat(), start_time="09:00:00")
    await _schedule(client, headers, product["id"], scheduled_date=date.today().isoformat(), start_time="04:00:00")
    await _schedule(client, headers, product["id"], scheduled_date="2020-01-01")

    today = await client.get("/api/v1/production/schedule/today", headers=headers)

    assert [e["start_time"] for e in today.json()] == ["04:00:00", "09:00:00"]


async def test_schedule_rejects_unknown_product_and_bad_times(client, auth_headers):
    headers = auth_headers("manager")
    product = await _product(client, headers)

    unknown = await _schedule(client, headers, 9999)
    backwards = await _schedule(client, headers, product["id"], start_time="08:00:00", end_time="06:00:00")

    assert unknown.status_code == 404
    assert backwards.status_code == 400


async def test_schedule_rejects_null_quantity(client, auth_headers):
    headers = auth_headers("manager")
    product = await _product(client, headers)
    entry = (await _schedule(client, headers, product["id"])).json()

    resp = await client.put(f"/api/v1/production/schedule/{entry['id']}", json={"quantity": None}, headers=headers)

    assert resp.status_code == 422


async def test_order_customer_name_cannot_be_cleared(client, auth_headers):
    headers = auth_headers("staff")
    created = await client.post(
        "/api/v1/orders",
        json={"customer_name": "Walk-in", "items": [{"quantity": 2, "unit_price": 3.5}]},
        headers=headers,
    )
    assert created.status_code == 201, created.text
    order = created.json()

    resp = await client.put(f"/api/v1/orders/{order['id']}", json={"customer_name": None}, headers=headers)

    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "validation_error"
    fetched = await client.get(f"/api/v1/orders/{order['id']}", headers=headers)
    assert fetched.json()["customer_name"] == "Walk-in"
