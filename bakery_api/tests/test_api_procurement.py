"""Purchases restock inventory."""


async def _flour(client, headers):
    resp = await client.post(
        "/api/v1/inventory/items",
        json={"inv_code": "INV-FL", "name": "Flour", "unit": "kg", "opening_stock": 4, "min_level": 5, "cost_per_unit": 1},
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_purchase_restocks_linked_items(client, auth_headers):
    headers = auth_headers("manager")
    flour = await _flour(client, headers)
    assert flour["last_restocked"] is None
    party = (await client.post("/api/v1/parties", json={"name": "Mill Co"}, headers=headers)).json()

    resp = await client.post(
        "/api/v1/purchases",
        json={
            "party_id": party["id"],
            "purchase_date": "2024-06-01",
            "items": [
                {"inventory_item_id": flour["id"], "quantity": 25, "unit": "kg", "unit_price": 1.2},
                {"quantity": 2, "unit": "pcs", "unit_price": 7.5},
            ],
        },
        headers=headers,
    )

    assert resp.status_code == 201, resp.text
    purchase = resp.json()
    assert purchase["supplier_name"] == "Mill Co"
    assert purchase["total_amount"] == 45.0
    assert sorted(line["total_price"] for line in purchase["items"]) == [15.0, 30.0]

    item = (await client.get(f"/api/v1/inventory/items/{flour['id']}", headers=headers)).json()
    assert item["current_stock"] == 29.0
    assert item["cost_per_unit"] == 1.2
    assert item["last_restocked"] is not None

    history = (await client.get(f"/api/v1/inventory/transactions?item_id={flour['id']}", headers=headers)).json()
    assert [(t["type"], t["quantity"], t["reference"]) for t in history] == [("in", 25.0, f"PUR-{purchase['id']}")]


async def test_purchase_needs_supplier(client, auth_headers):
    resp = await client.post(
        "/api/v1/purchases",
        json={"purchase_date": "2024-06-01", "items": [{"quantity": 1, "unit_price": 3}]},
        headers=auth_headers("manager"),
    )

    assert resp.status_code == 400
    assert "supplier_name" in resp.json()["error"]["message"]


async def test_purchase_for_unknown_item_leaves_nothing_behind(client, auth_headers):
    headers = auth_headers("manager")

    resp = await client.post(
        "/api/v1/purchases",
        json={
            "supplier_name": "Market",
            "purchase_date": "2024-06-01",
            "items": [{"inventory_item_id": 9999, "quantity": 1, "unit_price": 3}],
        },
        headers=headers,
    )

    assert resp.status_code == 404
    assert (await client.get("/api/v1/purchases", headers=headers)).json() == []


async def test_deleting_purchase_keeps_stock(client, auth_headers):
    headers = auth_headers("manager")
    flour = await _flour(client, headers)
    purchase = (
        await client.post(
            "/api/v1/purchases",
            json={
                "supplier_name": "Market",
                "purchase_date": "2024-06-01",
                "items": [{"inventory_item_id": flour["id"], "quantity": 6, "unit_price": 1}],
            },
            headers=headers,
        )
    ).json()

    resp = await client.delete(f"/api/v1/purchases/{purchase['id']}", headers=headers)

    assert resp.status_code == 204
    item = (await client.get(f"/api/v1/inventory/items/{flour['id']}", headers=headers)).json()
    assert item["current_stock"] == 10.0


async def test_staff_cannot_record_purchases(client, auth_headers):
    resp = await client.post(
        "/api/v1/purchases",
        json={"supplier_name": "Market", "purchase_date": "2024-06-01", "items": [{"quantity": 1, "unit_price": 3}]},
        headers=auth_headers("staff"),
    )

    assert resp.status_code == 403
