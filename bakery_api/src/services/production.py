from __future__ import annotations

import logging
from datetime import date
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.production import ProductionScheduleItem
from src.repositories.catalog import ProductRepository
from src.repositories.production import ProductionScheduleRepository
from src.schemas.realtime import DashboardEvent
from src.services.base import BaseService, DomainValidationError, NotFoundError
from src.services.notifications import NotificationService
from src.services.realtime import broadcast_manager

logger = logging.getLogger(__name__)

SCHEDULE_STATUSES = ("pending", "in_progress", "completed", "cancelled")
PRIORITIES = ("low", "medium", "high")


class ProductionService(BaseService):
    """
    Domain service for the production schedule.

    Handles orchestrating repository actions and pushing real-time updates to subscribers.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.schedule_repo = ProductionScheduleRepository(session)
        self.product_repo = ProductRepository(session)

    @staticmethod
    def _validate(values: dict[str, Any]) -> None:
        if "status" in values and values["status"] not in SCHEDULE_STATUSES:
            raise DomainValidationError(f"Invalid status '{values['status']}'")
        if "priority" in values and values["priority"] not in PRIORITIES:
            raise DomainValidationError(f"Invalid priority '{values['priority']}'")
        start, end = values.get("start_time"), values.get("end_time")
        if start is not None and end is not None and end <= start:
            raise DomainValidationError("end_time must be after start_time")

    # PUBLIC_INTERFACE
    async def get_item(self, item_id: int) -> ProductionScheduleItem:
        item = await self.schedule_repo.get(item_id)
        if item is None:
            raise NotFoundError(f"Production schedule item {item_id} not found")
        return item

    # PUBLIC_INTERFACE
    async def list_schedule(
        self, *, scheduled_date: Optional[date], status: Optional[str], limit: int, offset: int
    ) -> list[ProductionScheduleItem]:
        return await self.schedule_repo.list_schedule(
            scheduled_date=scheduled_date, status=status, limit=limit, offset=offset
        )

    # PUBLIC_INTERFACE
    async def todays_schedule(self) -> list[ProductionScheduleItem]:
        return await self.schedule_repo.list_for_day(date.today())

    # PUBLIC_INTERFACE
    async def create_item(self, values: dict[str, Any]) -> ProductionScheduleItem:
        """
        Schedule a production run and alert managers.

        Parameters:
            values: validated ProductionScheduleCreate fields
        Returns:
            Created ProductionScheduleItem entity
        """
        self._validate(values)
        product = await self.product_repo.get(values["product_id"])
        if product is None:
            raise NotFoundError(f"Product {values['product_id']} not found")
        created = await self.schedule_repo.create(values)
        created_id = created.id

        try:
            await NotificationService(self.session).notify_production_scheduled(created, product.name)
        except Exception:
            logger.exception("Failed to send production notification after create_item")
            await self.session.rollback()

        await self._publish("production.created", created_id)
        return await self.get_item(created_id)

    # PUBLIC_INTERFACE
    async def update_item(self, item_id: int, values: dict[str, Any]) -> ProductionScheduleItem:
        item = await self.get_item(item_id)
        merged = {
            "start_time": item.start_time,
            "end_time": item.end_time,
            **values,
        }
        self._validate(merged)
        if "product_id" in values and await self.product_repo.get(values["product_id"]) is None:
            raise NotFoundError(f"Product {values['product_id']} not found")
        updated = await self.schedule_repo.update(item, values)
        await self._publish("production.updated", item_id)
        return updated

    # PUBLIC_INTERFACE
    async def delete_item(self, item_id: int) -> None:
        item = await self.get_item(item_id)
        await self.schedule_repo.delete(item)
        await self._publish("production.deleted", item_id)

    async def _publish(self, event: str, item_id: int) -> None:
        try:
            await broadcast_manager.publish_dashboard_event(
                DashboardEvent(event=event, details={"production_schedule_id": item_id})
            )
        except Exception:
            logger.exception("Failed to publish dashboard event %s", event)
