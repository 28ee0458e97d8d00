from __future__ import annotations

from datetime import date
from typing import List, Optional

from sqlalchemy import select

from src.db.models.production import ProductionScheduleItem
from .base import CrudRepository


class ProductionScheduleRepository(CrudRepository[ProductionScheduleItem]):
    """Repository for the production schedule."""

    model = ProductionScheduleItem

    def _ordering(self):
        return ProductionScheduleItem.scheduled_date.desc()

    async def list_schedule(
        self,
        *,
        scheduled_date: Optional[date] = None,
        status: Optional[str] = None,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ProductionScheduleItem]:
        filters = []
        if scheduled_date is not None:
            filters.append(ProductionScheduleItem.scheduled_date == scheduled_date)
        if status:
            filters.append(ProductionScheduleItem.status == status)
        return await self.list(limit=limit, offset=offset, filters=filters)

    async def list_for_day(self, day: date) -> List[ProductionScheduleItem]:
        stmt = (
            select(ProductionScheduleItem)
            .where(ProductionScheduleItem.scheduled_date == day)
            .order_by(ProductionScheduleItem.start_time, ProductionScheduleItem.id)
        )
        res = await self.scalars(stmt)
        return list(res)
