from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, select

from src.db.models.inventory import InventoryCategory, InventoryItem, InventoryTransaction
from .base import CrudRepository


class InventoryCategoryRepository(CrudRepository[InventoryCategory]):
    """Repository for inventory categories."""

    model = InventoryCategory
    default_order = InventoryCategory.name


class InventoryItemRepository(CrudRepository[InventoryItem]):
    """Repository for stocked items."""

    model = InventoryItem
    default_order = InventoryItem.name

    async def get_for_update(self, item_id: int) -> Optional[InventoryItem]:
        stmt = (
            select(InventoryItem)
            .where(InventoryItem.id == item_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)

    async def list_low_stock(self) -> List[InventoryItem]:
        stmt = (
            select(InventoryItem)
            .where(InventoryItem.current_stock <= InventoryItem.min_level)
            .order_by(InventoryItem.name)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def delete_transactions(self, item_id: int) -> None:
        await self.execute(
            delete(InventoryTransaction).where(InventoryTransaction.inventory_item_id == item_id)
        )


class InventoryTransactionRepository(CrudRepository[InventoryTransaction]):
    """Repository for inventory transactions."""

    model = InventoryTransaction

    async def list_transactions(
        self, *, item_id: Optional[int], limit: int, offset: int
    ) -> List[InventoryTransaction]:
        filters = [InventoryTransaction.inventory_item_id == item_id] if item_id else []
        return await self.list(limit=limit, offset=offset, filters=filters)
