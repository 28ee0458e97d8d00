from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select

from src.db.models.sales import Customer, Order
from .base import CrudRepository


class CustomerRepository(CrudRepository[Customer]):
    """Repository for customers."""

    model = Customer
    default_order = Customer.name

    async def get_for_update(self, customer_id: int) -> Optional[Customer]:
        stmt = (
            select(Customer)
            .where(Customer.id == customer_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)


class OrderRepository(CrudRepository[Order]):
    """Repository for orders (items are loaded eagerly)."""

    model = Order
    default_order = Order.created_at.desc()

    async def list_orders(
        self,
        *,
        status: Optional[str] = None,
        customer_id: Optional[int] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[Order]:
        filters = []
        if status:
            filters.append(Order.status == status)
        if customer_id is not None:
            filters.append(Order.customer_id == customer_id)
        return await self.list(limit=limit, offset=offset, filters=filters)

    async def list_between(self, start: datetime, end: datetime) -> List[Order]:
        """Non-cancelled orders created in [start, end)."""
        stmt = (
            select(Order)
            .where(Order.status != "cancelled", Order.created_at >= start, Order.created_at < end)
            .order_by(Order.created_at)
        )
        res = await self.scalars(stmt)
        return list(res)
