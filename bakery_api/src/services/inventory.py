from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.base import utcnow
from src.db.models.inventory import InventoryItem, InventoryTransaction
from src.db.models.security import User
from src.repositories.inventory import InventoryItemRepository, InventoryTransactionRepository
from src.schemas.realtime import DashboardEvent
from src.services.base import BaseService, DomainValidationError, NotFoundError, to_decimal
from src.services.notifications import NotificationService
from src.services.realtime import broadcast_manager

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = ("in", "out", "adjustment")


# PUBLIC_INTERFACE
def apply_stock_movement(current: Any, type_: str, quantity: Any) -> Decimal:
    """
    Return the stock level after a movement.

    in adds, out subtracts, adjustment applies the signed quantity. Movements
    that would leave negative stock are rejected.
    """
    stock = to_decimal(current)
    qty = to_decimal(quantity)
    if type_ not in TRANSACTION_TYPES:
        raise DomainValidationError(f"Invalid transaction type '{type_}'")
    if type_ in ("in", "out") and qty <= 0:
        raise DomainValidationError("Quantity must be positive for in/out movements")
    if type_ == "in":
        new_stock = stock + qty
    elif type_ == "out":
        new_stock = stock - qty
    else:
        new_stock = stock + qty
    if new_stock < 0:
        raise DomainValidationError(
            "Insufficient stock", details={"current_stock": str(stock), "requested": str(qty)}
        )
    return new_stock


# PUBLIC_INTERFACE
def is_low_stock(item: InventoryItem) -> bool:
    return to_decimal(item.current_stock) <= to_decimal(item.min_level)


class InventoryService(BaseService):
    """Stock movements and low stock alerts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.item_repo = InventoryItemRepository(session)
        self.txn_repo = InventoryTransactionRepository(session)

    # PUBLIC_INTERFACE
    async def create_item(self, values: dict[str, Any]) -> InventoryItem:
        data = dict(values)
        # A new item starts at its opening stock unless told otherwise.
        if data.get("current_stock") is None:
            data["current_stock"] = data.get("opening_stock") or Decimal("0")
        return await self.item_repo.create(data)

    # PUBLIC_INTERFACE
    async def delete_item(self, item_id: int) -> None:
        item = await self.item_repo.get(item_id)
        if item is None:
            raise NotFoundError(f"Inventory item {item_id} not found")
        await self.item_repo.delete_transactions(item_id)
        await self.item_repo.delete(item)

    # PUBLIC_INTERFACE
    async def post_movement(
        self,
        item_id: int,
        *,
        type_: str,
        quantity: Any,
        reason: Optional[str] = None,
        reference: Optional[str] = None,
        user: Optional[User] = None,
        cost_per_unit: Optional[Any] = None,
        commit: bool = True,
    ) -> InventoryTransaction:
        """
        Record a stock movement and update the item's current stock.

        Inbound movements stamp `last_restocked` (and the unit cost when given).
        With commit=True a low stock alert is raised when the item ends at or
        below its minimum level.
        """
        item = await self.item_repo.get_for_update(item_id)
        if item is None:
            raise NotFoundError(f"Inventory item {item_id} not found")
        new_stock = apply_stock_movement(item.current_stock, type_, quantity)
        item.current_stock = new_stock
        if type_ == "in":
            item.last_restocked = utcnow()
            if cost_per_unit is not None:
                item.cost_per_unit = to_decimal(cost_per_unit)
        txn = await self.txn_repo.create(
            {
                "inventory_item_id": item_id,
                "type": type_,
                "quantity": to_decimal(quantity),
                "reason": reason,
                "reference": reference,
                "created_by": user.id if user else None,
            },
            commit=False,
        )
        if commit:
            txn_id = txn.id
            await self.session.commit()
            await self.after_stock_change([item])
            return (await self.txn_repo.get(txn_id))  # type: ignore[return-value]
        return txn

    # PUBLIC_INTERFACE
    async def after_stock_change(self, items: list[InventoryItem]) -> None:
        """Raise low stock alerts and tell dashboards; failures are logged only."""
        item_ids = [i.id for i in items]
        try:
            notifier = NotificationService(self.session)
            for item in items:
                if is_low_stock(item):
                    await notifier.notify_low_stock(item)
        except Exception:
            logger.exception("Failed to raise low stock notification")
            await self.session.rollback()
        try:
            await broadcast_manager.publish_dashboard_event(
                DashboardEvent(event="inventory.changed", details={"item_ids": item_ids})
            )
        except Exception:
            logger.exception("Failed to publish dashboard event after stock change")
