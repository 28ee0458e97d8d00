"""Dashboard aggregates."""
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

from src.services.dashboard import summarize_sales


def _order(day, amount):
    return SimpleNamespace(created_at=datetime(2024, 3, day, 10, tzinfo=timezone.utc), total_amount=Decimal(amount))


def test_summarize_sales_fills_every_day():
    orders = [_order(1, "40.00"), _order(1, "10.00"), _order(3, "25.00")]

    summary = summarize_sales(orders, date(2024, 3, 1), date(2024, 3, 3))

    assert summary["total_sales"] == Decimal("75.00")
    assert summary["order_count"] == 3
    assert summary["average_order_value"] == Decimal("25.00")
    assert [(d["date"], d["revenue"], d["orders"]) for d in summary["daily"]] == [
        ("2024-03-01", Decimal("50.00"), 2),
        ("2024-03-02", Decimal("0.00"), 0),
        ("2024-03-03", Decimal("25.00"), 1),
    ]


def test_summarize_sales_without_orders():
    summary = summarize_sales([], date(2024, 3, 1), date(2024, 3, 1))

    assert summary["average_order_value"] == Decimal("0.00")
    assert len(summary["daily"]) == 1


async def test_stats_on_empty_bakery(client, auth_headers):
    resp = await client.get("/api/v1/dashboard/stats", headers=auth_headers("staff"))

    assert resp.status_code == 200, resp.text
    body = resp.json()
    assert body["total_orders"] == 0
    assert body["low_stock_items"] == 0


async def test_sales_analytics_rejects_reversed_range(client, auth_headers):
    resp = await client.get(
        "/api/v1/dashboard/sales-analytics?start_date=2024-03-05&end_date=2024-03-01",
        headers=auth_headers("manager"),
    )

    assert resp.status_code == 400
