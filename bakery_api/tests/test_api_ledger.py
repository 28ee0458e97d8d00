"""Customer ledgers over HTTP."""


async def _create_customer(client, headers, opening=0):
    resp = await client.post(
        "/api/v1/customers", json={"name": "Green Deli", "opening_balance": opening}, headers=headers
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def _post(client, headers, customer_id, day, debit=0, credit=0, type_="sale"):
    resp = await client.post(
        "/api/v1/ledger/transactions",
        json={
            "entity_type": "customer",
            "entity_id": customer_id,
            "transaction_date": day,
            "description": f"{type_} {day}",
            "debit_amount": debit,
            "credit_amount": credit,
            "transaction_type": type_,
        },
        headers=headers,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def test_customer_ledger_flow(client, auth_headers):
    headers = auth_headers("manager")
    customer = await _create_customer(client, headers, opening=20)
    assert customer["current_balance"] == 20.0

    sale = await _post(client, headers, customer["id"], "2024-04-02", debit=180)
    assert sale["running_balance"] == 200.0
    await _post(client, headers, customer["id"], "2024-04-05", credit=150, type_="payment_received")
    # back-dated posting lands first and shifts later balances
    await _post(client, headers, customer["id"], "2024-04-01", debit=10)

    ledger = (await client.get(f"/api/v1/ledger/customer/{customer['id']}", headers=headers)).json()
    assert [t["running_balance"] for t in ledger["transactions"]] == [30.0, 210.0, 60.0]
    assert ledger["current_balance"] == 60.0

    summary = (await client.get(f"/api/v1/ledger/customer/{customer['id']}/summary", headers=headers)).json()
    assert summary["total_debit"] == 190.0
    assert summary["total_credit"] == 150.0
    assert summary["transaction_count"] == 3

    resp = await client.put(
        f"/api/v1/ledger/transactions/{sale['id']}", json={"debit_amount": 100}, headers=headers
    )
    assert resp.status_code == 200, resp.text
    customer_after = (await client.get(f"/api/v1/customers/{customer['id']}", headers=headers)).json()
    assert customer_after["current_balance"] == -20.0

    resp = await client.delete(f"/api/v1/ledger/transactions/{sale['id']}", headers=headers)
    assert resp.status_code == 204
    customer_after = (await client.get(f"/api/v1/customers/{customer['id']}", headers=headers)).json()
    assert customer_after["current_balance"] == -120.0


async def test_recalculate(client, auth_headers):
    headers = auth_headers("admin")
    customer = await _create_customer(client, headers)
    await _post(client, headers, customer["id"], "2024-01-01", debit=99.99)

    resp = await client.post(f"/api/v1/ledger/customer/{customer['id']}/recalculate", headers=headers)

    assert resp.status_code == 200
    assert resp.json()["details"]["current_balance"] == 99.99


async def test_unknown_entity_type_is_rejected(client, auth_headers):
    headers = auth_headers("admin")

    read = await client.get("/api/v1/ledger/supplier/1", headers=headers)
    posted = await client.post(
        "/api/v1/ledger/transactions",
        json={
            "entity_type": "supplier",
            "entity_id": 1,
            "transaction_date": "2024-01-01",
            "description": "Flour",
            "debit_amount": 10,
            "transaction_type": "purchase",
        },
        headers=headers,
    )

    for resp in (read, posted):
        assert resp.status_code == 400, resp.text
        assert resp.json()["error"]["type"] == "validation_error"


async def test_negative_amounts_are_rejected(client, auth_headers):
    headers = auth_headers("manager")
    customer = await _create_customer(client, headers)

    for field in ("debit_amount", "credit_amount"):
        resp = await client.post(
            "/api/v1/ledger/transactions",
            json={
                "entity_type": "customer",
                "entity_id": customer["id"],
                "transaction_date": "2024-01-01",
                "description": "Refund",
                field: -5,
                "transaction_type": "adjustment",
            },
            headers=headers,
        )
        assert resp.status_code == 422, field


async def test_same_day_postings_keep_entry_order(client, auth_headers):
    headers = auth_headers("manager")
    customer = await _create_customer(client, headers)
    first = await _post(client, headers, customer["id"], "2024-02-10", debit=50)
    second = await _post(client, headers, customer["id"], "2024-02-10", credit=20, type_="payment_received")
    # an earlier day posted last must not reorder the two same-day rows
    await _post(client, headers, customer["id"], "2024-02-09", debit=5)

    ledger = (await client.get(f"/api/v1/ledger/customer/{customer['id']}", headers=headers)).json()

    assert [t["id"] for t in ledger["transactions"]][1:] == [first["id"], second["id"]]
    assert [t["running_balance"] for t in ledger["transactions"]] == [5.0, 55.0, 35.0]


async def test_null_description_is_rejected(client, auth_headers):
    headers = auth_headers("manager")
    customer = await _create_customer(client, headers)
    posting = await _post(client, headers, customer["id"], "2024-03-01", debit=10)

    resp = await client.put(
        f"/api/v1/ledger/transactions/{posting['id']}", json={"description": None}, headers=headers
    )

    assert resp.status_code == 422
    assert resp.json()["error"]["type"] == "validation_error"
    ledger = (await client.get(f"/api/v1/ledger/customer/{customer['id']}", headers=headers)).json()
    assert ledger["transactions"][0]["description"] == "sale 2024-03-01"


async def test_party_ledger_edits_need_party_write(client, auth_headers):
    manager = auth_headers("manager")
    party = (
        await client.post("/api/v1/parties", json={"name": "Mill Co", "opening_balance": 100}, headers=manager)
    ).json()
    posting = (
        await client.post(
            "/api/v1/ledger/transactions",
            json={
                "entity_type": "party",
                "entity_id": party["id"],
                "transaction_date": "2024-03-01",
                "description": "Paid mill",
                "credit_amount": 40,
                "transaction_type": "payment_sent",
            },
            headers=manager,
        )
    ).json()

    # staff can read parties but not write them
    staff = auth_headers("staff")
    edit = await client.put(f"/api/v1/ledger/transactions/{posting['id']}", json={"credit_amount": 90}, headers=staff)
    remove = await client.delete(f"/api/v1/ledger/transactions/{posting['id']}", headers=staff)

    assert edit.status_code == 403
    assert remove.status_code == 403
    ledger = (await client.get(f"/api/v1/ledger/party/{party['id']}", headers=staff)).json()
    assert ledger["current_balance"] == 60.0
    assert [t["credit_amount"] for t in ledger["transactions"]] == [40.0]


async def test_editing_missing_posting_is_not_found(client, auth_headers):
    resp = await client.put("/api/v1/ledger/transactions/9999", json={"debit_amount": 1}, headers=auth_headers("admin"))

    assert resp.status_code == 404


async def test_missing_customer_ledger_is_not_found(client, auth_headers):
    resp = await client.get("/api/v1/ledger/customer/9999", headers=auth_headers("admin"))

    assert resp.status_code == 404
    assert resp.json()["error"]["type"] == "not_found"


async def test_ledger_requires_authentication(client, seeded):
    resp = await client.get("/api/v1/ledger/customer/1")

    assert resp.status_code == 401
