from __future__ import annotations

from typing import List, Optional

from sqlalchemy import select

from src.db.models.procurement import Party, Purchase
from .base import CrudRepository


class PartyRepository(CrudRepository[Party]):
    """Repository for suppliers and creditors."""

    model = Party
    default_order = Party.name

    async def list_parties(self, *, type_: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[Party]:
        filters = []
        if type_:
            # "both" parties show up under either filter.
            filters.append(Party.type.in_([type_, "both"]))
        return await self.list(limit=limit, offset=offset, filters=filters)

    async def get_for_update(self, party_id: int) -> Optional[Party]:
        stmt = (
            select(Party)
            .where(Party.id == party_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return await self.scalar_one_or_none(stmt)


class PurchaseRepository(CrudRepository[Purchase]):
    """Repository for purchases (items are loaded eagerly)."""

    model = Purchase
    default_order = Purchase.purchase_date.desc()
