from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import delete, select

from src.db.models.ledger import LedgerTransaction
from .base import CrudRepository


class LedgerRepository(CrudRepository[LedgerTransaction]):
    """Repository for ledger postings of customers and parties."""

    model = LedgerTransaction

    async def list_for_entity(self, entity_type: str, entity_id: int) -> List[LedgerTransaction]:
        """Return the entity's postings in chronological order (date, then id)."""
        stmt = (
            select(LedgerTransaction)
            .where(
                LedgerTransaction.entity_type == entity_type,
                LedgerTransaction.entity_id == entity_id,
            )
            .order_by(LedgerTransaction.transaction_date, LedgerTransaction.id)
            .execution_options(populate_existing=True)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def entity_of(self, transaction_id: int) -> Optional[Tuple[str, int]]:
        """Return (entity_type, entity_id) of a posting without loading it."""
        stmt = select(LedgerTransaction.entity_type, LedgerTransaction.entity_id).where(
            LedgerTransaction.id == transaction_id
        )
        row = (await self.execute(stmt)).first()
        return (row[0], row[1]) if row is not None else None

    async def delete_for_entity(self, entity_type: str, entity_id: int) -> None:
        await self.execute(
            delete(LedgerTransaction).where(
                LedgerTransaction.entity_type == entity_type,
                LedgerTransaction.entity_id == entity_id,
            )
        )
