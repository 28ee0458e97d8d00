from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.procurement import Purchase, PurchaseItem
from src.db.models.security import User
from src.repositories.inventory import InventoryItemRepository
from src.repositories.procurement import PartyRepository, PurchaseRepository
from src.services.base import BaseService, DomainValidationError, NotFoundError, money, to_decimal
from src.services.inventory import InventoryService

logger = logging.getLogger(__name__)


class PurchaseService(BaseService):
    """Purchases from parties; each line restocks its inventory item."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.purchase_repo = PurchaseRepository(session)
        self.party_repo = PartyRepository(session)
        self.item_repo = InventoryItemRepository(session)
        self.inventory = InventoryService(session)

    # PUBLIC_INTERFACE
    async def get_purchase(self, purchase_id: int) -> Purchase:
        purchase = await self.purchase_repo.get(purchase_id)
        if purchase is None:
            raise NotFoundError(f"Purchase {purchase_id} not found")
        return purchase

    # PUBLIC_INTERFACE
    async def create_purchase(
        self, values: dict[str, Any], items: list[dict[str, Any]], *, user: Optional[User] = None
    ) -> Purchase:
        """
        Record a purchase and post an inbound stock movement per line.

        The whole purchase (header, lines, stock movements) commits together.
        """
        if not items:
            raise DomainValidationError("A purchase needs at least one item")
        data = dict(values)
        party_id = data.get("party_id")
        if party_id is not None:
            party = await self.party_repo.get(party_id)
            if party is None:
                raise NotFoundError(f"Party {party_id} not found")
            if not data.get("supplier_name"):
                data["supplier_name"] = party.name
        if not data.get("supplier_name"):
            raise DomainValidationError("supplier_name is required when no party is linked")

        lines: list[PurchaseItem] = []
        total = to_decimal(0)
        for item in items:
            qty = to_decimal(item["quantity"])
            if qty <= 0:
                raise DomainValidationError("Item quantity must be positive")
            unit_price = to_decimal(item["unit_price"])
            line_total = money(qty * unit_price)
            total += line_total
            lines.append(
                PurchaseItem(
                    inventory_item_id=item.get("inventory_item_id"),
                    quantity=qty,
                    unit=item.get("unit"),
                    unit_price=unit_price,
                    total_price=line_total,
                )
            )

        purchase = Purchase(**data, total_amount=money(total), created_by=user.id if user else None, items=lines)
        await self.purchase_repo.add(purchase)
        await self.purchase_repo.flush()

        touched = []
        for line in lines:
            if line.inventory_item_id is None:
                continue
            await self.inventory.post_movement(
                line.inventory_item_id,
                type_="in",
                quantity=line.quantity,
                reason="Purchase",
                reference=f"PUR-{purchase.id}",
                user=user,
                cost_per_unit=line.unit_price,
                commit=False,
            )
            touched.append(line.inventory_item_id)
        purchase_id = purchase.id
        await self.purchase_repo.commit()
        logger.info("Purchase %s recorded (total=%s, items=%d)", purchase_id, purchase.total_amount, len(lines))

        restocked = [i for i in [await self.item_repo.get(item_id) for item_id in touched] if i is not None]
        await self.inventory.after_stock_change(restocked)
        return await self.get_purchase(purchase_id)

    # PUBLIC_INTERFACE
    async def delete_purchase(self, purchase_id: int) -> None:
        """Remove the purchase record. Stock movements already posted stay in the history."""
        purchase = await self.get_purchase(purchase_id)
        await self.purchase_repo.delete(purchase)
