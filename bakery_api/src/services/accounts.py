from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.security import User
from src.repositories.ledger import LedgerRepository
from src.repositories.procurement import PartyRepository
from src.repositories.sales import CustomerRepository
from src.services.audit import AuditService, snapshot
from src.services.base import BaseService, DomainValidationError, NotFoundError, money
from src.services.ledger import LedgerEntity, LedgerService

logger = logging.getLogger(__name__)

PARTY_TYPES = ("supplier", "creditor", "both")


class AccountService(BaseService):
    """
    Customers and parties: the two kinds of ledger-bearing accounts.

    `entity_type` is "customer" or "party", matching ledger postings.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repos = {"customer": CustomerRepository(session), "party": PartyRepository(session)}
        self.ledger = LedgerService(session)
        self.ledger_repo = LedgerRepository(session)
        self.audit = AuditService(session)

    def _repo(self, entity_type: str):
        if entity_type not in self.repos:
            raise DomainValidationError(f"Invalid entity type '{entity_type}'")
        return self.repos[entity_type]

    # PUBLIC_INTERFACE
    async def get(self, entity_type: str, entity_id: int) -> LedgerEntity:
        entity = await self._repo(entity_type).get(entity_id)
        if entity is None:
            raise NotFoundError(f"{entity_type.capitalize()} {entity_id} not found")
        return entity

    # PUBLIC_INTERFACE
    async def create(self, entity_type: str, values: dict[str, Any], *, user: Optional[User] = None) -> LedgerEntity:
        """Create an account whose current balance starts at its opening balance."""
        data = dict(values)
        if entity_type == "party" and data.get("type", "supplier") not in PARTY_TYPES:
            raise DomainValidationError(f"Invalid party type '{data.get('type')}'")
        data["opening_balance"] = money(data.get("opening_balance"))
        data["current_balance"] = data["opening_balance"]
        entity = await self._repo(entity_type).create(data, commit=False)
        await self.audit.record(
            user=user, action="CREATE", resource=entity_type, resource_id=entity.id, new_values=snapshot(entity)
        )
        await self.session.commit()
        return await self.get(entity_type, entity.id)

    # PUBLIC_INTERFACE
    async def update(
        self, entity_type: str, entity_id: int, values: dict[str, Any], *, user: Optional[User] = None
    ) -> LedgerEntity:
        """Update account fields; a changed opening balance replays the ledger."""
        entity = await self.get(entity_type, entity_id)
        data = dict(values)
        if entity_type == "party" and "type" in data and data["type"] not in PARTY_TYPES:
            raise DomainValidationError(f"Invalid party type '{data['type']}'")
        old = snapshot(entity)
        opening = data.pop("opening_balance", None)
        data.pop("current_balance", None)
        await self._repo(entity_type).update(entity, data, commit=False)
        if opening is not None and money(opening) != money(entity.opening_balance):
            await self.ledger.set_opening_balance(entity_type, entity_id, opening, commit=False)
        await self.audit.record(
            user=user,
            action="UPDATE",
            resource=entity_type,
            resource_id=entity_id,
            old_values=old,
            new_values=snapshot(entity),
        )
        await self.session.commit()
        return await self.get(entity_type, entity_id)

    # PUBLIC_INTERFACE
    async def delete(self, entity_type: str, entity_id: int, *, user: Optional[User] = None) -> None:
        """Delete an account together with its ledger postings."""
        entity = await self.get(entity_type, entity_id)
        old = snapshot(entity)
        await self.ledger_repo.delete_for_entity(entity_type, entity_id)
        await self._repo(entity_type).delete(entity, commit=False)
        await self.audit.record(
            user=user, action="DELETE", resource=entity_type, resource_id=entity_id, old_values=old
        )
        await self.session.commit()
