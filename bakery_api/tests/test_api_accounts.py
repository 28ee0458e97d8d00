"""Customers and parties (suppliers, creditors) over HTTP."""


async def _party(client, headers, **overrides):
    payload = {"name": "Mill Co", "type": "supplier", "contact_person": "Ana", "opening_balance": 250}
    payload.update(overrides)
    resp = await client.post("/api/v1/parties", json=payload, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_party_lifecycle(client, auth_headers):
    headers = auth_headers("manager")
    party = await _party(client, headers)
    assert party["current_balance"] == 250.0

    resp = await client.put(f"/api/v1/parties/{party['id']}", json={"phone": "555-0101"}, headers=headers)
    assert resp.status_code == 200, resp.text
    assert resp.json()["phone"] == "555-0101"
    assert resp.json()["contact_person"] == "Ana"

    fetched = await client.get(f"/api/v1/parties/{party['id']}", headers=headers)
    assert fetched.json()["phone"] == "555-0101"

    resp = await client.delete(f"/api/v1/parties/{party['id']}", headers=headers)
    assert resp.status_code == 204
    missing = await client.get(f"/api/v1/parties/{party['id']}", headers=headers)
    assert missing.status_code == 404


async def test_party_type_filter_includes_both(client, auth_headers):
    headers = auth_headers("manager")
    await _party(client, headers, name="Mill Co", type="supplier")
    await _party(client, headers, name="Bank", type="creditor")
    await _party(client, headers, name="Co-op", type="both")

    suppliers = await client.get("/api/v1/parties?type=supplier", headers=headers)

    assert sorted(p["name"] for p in suppliers.json()) == ["Co-op", "Mill Co"]


async def test_party_opening_balance_change_replays_ledger(client, auth_headers):
    headers = auth_headers("manager")
    party = await _party(client, headers, opening_balance=100)
    resp = await client.post(
        "/api/v1/ledger/transactions",
        json={
            "entity_type": "party",
            "entity_id": party["id"],
            "transaction_date": "2024-05-01",
            "description": "Flour delivery",
            "debit_amount": 80,
            "transaction_type": "purchase",
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    assert resp.json()["running_balance"] == 180.0

    resp = await client.put(f"/api/v1/parties/{party['id']}", json={"opening_balance": 0}, headers=headers)

    assert resp.status_code == 200, resp.text
    assert resp.json()["current_balance"] == 80.0
    ledger = (await client.get(f"/api/v1/ledger/party/{party['id']}", headers=headers)).json()
    assert ledger["opening_balance"] == 0.0
    assert [t["running_balance"] for t in ledger["transactions"]] == [80.0]


async def test_null_party_name_is_rejected(client, auth_headers):
    headers = auth_headers("manager")
    party = await _party(client, headers)

    resp = await client.put(f"/api/v1/parties/{party['id']}", json={"name": None}, headers=headers)

    assert resp.status_code == 422
    assert (await client.get(f"/api/v1/parties/{party['id']}", headers=headers)).json()["name"] == "Mill Co"


async def test_clearing_optional_party_field(client, auth_headers):
    headers = auth_headers("manager")
    party = await _party(client, headers)

    resp = await client.put(f"/api/v1/parties/{party['id']}", json={"contact_person": None}, headers=headers)

    assert resp.status_code == 200, resp.text
    assert resp.json()["contact_person"] is None


async def test_staff_cannot_create_parties(client, auth_headers):
    resp = await client.post("/api/v1/parties", json={"name": "Mill Co"}, headers=auth_headers("staff"))

    assert resp.status_code == 403
