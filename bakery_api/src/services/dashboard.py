from __future__ import annotations

import logging
from collections import OrderedDict
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.catalog import Product
from src.db.models.inventory import InventoryItem
from src.db.models.production import ProductionScheduleItem
from src.db.models.sales import Order
from src.repositories.inventory import InventoryItemRepository
from src.repositories.production import ProductionScheduleRepository
from src.repositories.sales import OrderRepository
from src.services.base import BaseService, DomainValidationError, as_utc, money, to_decimal

logger = logging.getLogger(__name__)


def day_bounds(start: date, end: date) -> tuple[datetime, datetime]:
    """UTC datetimes covering whole days start..end inclusive."""
    return (
        datetime.combine(start, time.min, tzinfo=timezone.utc),
        datetime.combine(end + timedelta(days=1), time.min, tzinfo=timezone.utc),
    )


# PUBLIC_INTERFACE
def summarize_sales(orders: list[Order], start: date, end: date) -> dict[str, Any]:
    """
    Aggregate orders into totals and a per-day revenue series.

    Every day of the range appears in the series, with zeros where there
    were no orders.
    """
    series: "OrderedDict[date, dict[str, Any]]" = OrderedDict()
    day = start
    while day <= end:
        series[day] = {"date": day.isoformat(), "revenue": Decimal("0"), "orders": 0}
        day += timedelta(days=1)

    total = Decimal("0")
    for order in orders:
        created = as_utc(order.created_at)
        amount = to_decimal(order.total_amount)
        total += amount
        bucket = series.get(created.date()) if created else None
        if bucket is not None:
            bucket["revenue"] += amount
            bucket["orders"] += 1

    count = len(orders)
    return {
        "start_date": start.isoformat(),
        "end_date": end.isoformat(),
        "total_sales": money(total),
        "order_count": count,
        "average_order_value": money(total / count) if count else Decimal("0.00"),
        "daily": [{**row, "revenue": money(row["revenue"])} for row in series.values()],
    }


class DashboardService(BaseService):
    """Read-only aggregates for the dashboard screens."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.order_repo = OrderRepository(session)
        self.item_repo = InventoryItemRepository(session)
        self.schedule_repo = ProductionScheduleRepository(session)

    async def _scalar(self, stmt) -> Any:
        return (await self.session.execute(stmt)).scalar_one()

    # PUBLIC_INTERFACE
    async def stats(self) -> dict[str, Any]:
        today = date.today()
        start, end = day_bounds(today, today)
        not_cancelled = Order.status != "cancelled"
        return {
            "total_products": int(await self._scalar(select(func.count(Product.id)))),
            "total_orders": int(await self._scalar(select(func.count(Order.id)))),
            "total_revenue": money(
                await self._scalar(select(func.coalesce(func.sum(Order.total_amount), 0)).where(not_cancelled))
            ),
            "low_stock_items": int(
                await self._scalar(
                    select(func.count(InventoryItem.id)).where(
                        InventoryItem.current_stock <= InventoryItem.min_level
                    )
                )
            ),
            "pending_orders": int(
                await self._scalar(select(func.count(Order.id)).where(Order.status == "pending"))
            ),
            "todays_orders": int(
                await self._scalar(
                    select(func.count(Order.id)).where(Order.created_at >= start, Order.created_at < end)
                )
            ),
            "todays_production": int(
                await self._scalar(
                    select(func.count(ProductionScheduleItem.id)).where(
                        ProductionScheduleItem.scheduled_date == today
                    )
                )
            ),
        }

    # PUBLIC_INTERFACE
    async def recent_orders(self, limit: int = 5) -> list[Order]:
        return await self.order_repo.list(limit=limit)

    # PUBLIC_INTERFACE
    async def todays_production(self) -> list[ProductionScheduleItem]:
        return await self.schedule_repo.list_for_day(date.today())

    # PUBLIC_INTERFACE
    async def low_stock(self) -> list[InventoryItem]:
        return await self.item_repo.list_low_stock()

    # PUBLIC_INTERFACE
    async def sales_analytics(self, start: Optional[date] = None, end: Optional[date] = None) -> dict[str, Any]:
        """Sales over [start, end] (defaults to the last 30 days), cancelled orders excluded."""
        end = end or date.today()
        start = start or end - timedelta(days=29)
        if end < start:
            raise DomainValidationError("end_date must not be before start_date")
        lower, upper = day_bounds(start, end)
        orders = await self.order_repo.list_between(lower, upper)
        return summarize_sales(orders, start, end)
