"""File exports built with pandas."""
import io
from datetime import date
from decimal import Decimal

import pandas as pd

from src.services.accounts import AccountService
from src.services.inventory import InventoryService
from src.services.ledger import LedgerService


async def test_inventory_valuation_csv(client, session, auth_headers):
    service = InventoryService(session)
    await service.create_item(
        {"name": "Almonds", "unit": "kg", "opening_stock": 4, "min_level": 5, "cost_per_unit": Decimal("12.5")}
    )
    await service.create_item(
        {"name": "Cocoa", "unit": "kg", "opening_stock": 10, "min_level": 2, "cost_per_unit": Decimal("6")}
    )

    resp = await client.get("/api/v1/reports/inventory-valuation", headers=auth_headers("manager"))

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    assert 'filename="inventory_valuation.csv"' in resp.headers["content-disposition"]
    df = pd.read_csv(io.StringIO(resp.text))
    assert list(df["name"]) == ["Almonds", "Cocoa"]
    assert list(df["valuation"]) == [50.0, 60.0]
    assert list(df["is_low_stock"]) == [True, False]


async def test_ledger_statement_starts_with_opening_balance(client, session, auth_headers):
    customer = await AccountService(session).create("customer", {"name": "Blue Cafe", "opening_balance": 15})
    await LedgerService(session).create_transaction(
        {
            "entity_type": "customer",
            "entity_id": customer.id,
            "transaction_date": date(2024, 2, 1),
            "description": "Wedding cake",
            "debit_amount": 85,
            "credit_amount": 0,
            "transaction_type": "sale",
        }
    )

    resp = await client.get(f"/api/v1/reports/ledger/customer/{customer.id}", headers=auth_headers("admin"))

    assert resp.status_code == 200
    assert 'filename="ledger_customer_blue_cafe.csv"' in resp.headers["content-disposition"]
    df = pd.read_csv(io.StringIO(resp.text))
    assert list(df["description"]) == ["Opening balance", "Wedding cake"]
    assert list(df["balance"]) == [15.0, 100.0]


async def test_pdf_export(client, auth_headers):
    resp = await client.get("/api/v1/reports/sales?format=pdf", headers=auth_headers("manager"))

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    assert resp.content.startswith(b"%PDF")


async def test_reversed_period_is_rejected(client, auth_headers):
    resp = await client.get(
        "/api/v1/reports/sales?start_date=2024-05-10&end_date=2024-05-01", headers=auth_headers("manager")
    )

    assert resp.status_code == 400
    assert resp.json()["error"]["type"] == "validation_error"


async def test_audit_log_export_requires_admin(client, auth_headers):
    resp = await client.get("/api/v1/reports/audit-logs", headers=auth_headers("manager"))

    assert resp.status_code == 403
