from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.ledger import LedgerTransaction
from src.db.models.procurement import Party
from src.db.models.sales import Customer
from src.db.models.security import User
from src.repositories.ledger import LedgerRepository
from src.repositories.procurement import PartyRepository
from src.repositories.sales import CustomerRepository
from src.services.audit import AuditService, snapshot
from src.services.base import BaseService, DomainValidationError, NotFoundError, money

logger = logging.getLogger(__name__)

ENTITY_TYPES = ("customer", "party")
TRANSACTION_TYPES = ("sale", "purchase", "payment_received", "payment_sent", "adjustment")

LedgerEntity = Union[Customer, Party]
PostingCheck = Callable[[LedgerTransaction], Awaitable[None]]


@dataclass(frozen=True)
class BalanceReplay:
    """Result of replaying a ledger: per-row balances (in input order) and the closing balance."""
    running_balances: list[Decimal]
    closing_balance: Decimal


# PUBLIC_INTERFACE
def compute_running_balances(
    opening_balance: Any, postings: Iterable[tuple[Any, Any]]
) -> BalanceReplay:
    """
    Replay (debit, credit) postings that are already in chronological order.

    balance_k = opening + sum(debit_i - credit_i for i <= k), rounded to cents.
    """
    balance = money(opening_balance)
    balances: list[Decimal] = []
    for debit, credit in postings:
        balance = money(balance + money(debit) - money(credit))
        balances.append(balance)
    return BalanceReplay(running_balances=balances, closing_balance=balance)


class LedgerService(BaseService):
    """
    Customer and party ledgers.

    Every mutation rewrites the running balance of all the entity's postings
    and its current balance in the same transaction. The entity row is locked
    first so concurrent postings for one entity are applied one after another.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.ledger_repo = LedgerRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.party_repo = PartyRepository(session)
        self.audit = AuditService(session)

    @staticmethod
    def check_entity_type(entity_type: str) -> None:
        if entity_type not in ENTITY_TYPES:
            raise DomainValidationError(
                f"Invalid entity type '{entity_type}'. Expected one of: {', '.join(ENTITY_TYPES)}"
            )

    async def _lock_entity(self, entity_type: str, entity_id: int) -> LedgerEntity:
        self.check_entity_type(entity_type)
        if entity_type == "customer":
            entity = await self.customer_repo.get_for_update(entity_id)
        else:
            entity = await self.party_repo.get_for_update(entity_id)
        if entity is None:
            raise NotFoundError(f"{entity_type.capitalize()} {entity_id} not found")
        return entity

    async def _lock_posting(self, transaction_id: int) -> tuple[LedgerEntity, LedgerTransaction]:
        # Lock the owning entity before loading the posting so the values we
        # edit are the ones committed by whoever held the lock last.
        keys = await self.ledger_repo.entity_of(transaction_id)
        if keys is None:
            raise NotFoundError(f"Ledger transaction {transaction_id} not found")
        entity = await self._lock_entity(*keys)
        return entity, await self.get_transaction(transaction_id)

    async def _replay(self, entity: LedgerEntity, entity_type: str) -> Decimal:
        postings = await self.ledger_repo.list_for_entity(entity_type, entity.id)
        replay = compute_running_balances(
            entity.opening_balance,
            ((p.debit_amount, p.credit_amount) for p in postings),
        )
        for posting, balance in zip(postings, replay.running_balances):
            posting.running_balance = balance
        entity.current_balance = replay.closing_balance
        await self.session.flush()
        return replay.closing_balance

    # PUBLIC_INTERFACE
    async def recalculate(self, entity_type: str, entity_id: int, *, commit: bool = True) -> Decimal:
        """Rebuild running balances for one entity from its opening balance."""
        entity = await self._lock_entity(entity_type, entity_id)
        closing = await self._replay(entity, entity_type)
        if commit:
            await self.session.commit()
        logger.info("Recalculated %s %s ledger; balance=%s", entity_type, entity_id, closing)
        return closing

    # PUBLIC_INTERFACE
    async def get_ledger(self, entity_type: str, entity_id: int) -> tuple[LedgerEntity, list[LedgerTransaction]]:
        """Return the entity and its postings in chronological order."""
        self.check_entity_type(entity_type)
        repo = self.customer_repo if entity_type == "customer" else self.party_repo
        entity = await repo.get(entity_id)
        if entity is None:
            raise NotFoundError(f"{entity_type.capitalize()} {entity_id} not found")
        return entity, await self.ledger_repo.list_for_entity(entity_type, entity_id)

    # PUBLIC_INTERFACE
    async def get_transaction(self, transaction_id: int) -> LedgerTransaction:
        txn = await self.ledger_repo.get(transaction_id)
        if txn is None:
            raise NotFoundError(f"Ledger transaction {transaction_id} not found")
        return txn

    # PUBLIC_INTERFACE
    async def create_transaction(
        self, values: dict[str, Any], *, user: Optional[User] = None, commit: bool = True
    ) -> LedgerTransaction:
        """
        Post a debit/credit for a customer or party and rebalance the entity.

        With commit=False the caller owns the transaction (used when an order or
        purchase posts to the ledger as part of its own write).
        """
        entity_type = values["entity_type"]
        entity = await self._lock_entity(entity_type, values["entity_id"])
        if values.get("transaction_type") not in TRANSACTION_TYPES:
            raise DomainValidationError(f"Invalid transaction type '{values.get('transaction_type')}'")

        data = dict(values)
        data["debit_amount"] = money(data.get("debit_amount"))
        data["credit_amount"] = money(data.get("credit_amount"))
        data["running_balance"] = Decimal("0")
        data["created_by"] = user.id if user else None
        txn = await self.ledger_repo.create(data, commit=False)
        await self._replay(entity, entity_type)
        await self.audit.record(
            user=user, action="CREATE", resource="ledger", resource_id=txn.id, new_values=snapshot(txn)
        )
        if commit:
            await self.session.commit()
            return await self.get_transaction(txn.id)
        return txn

    # PUBLIC_INTERFACE
    async def update_transaction(
        self,
        transaction_id: int,
        values: dict[str, Any],
        *,
        user: Optional[User] = None,
        authorize: Optional[PostingCheck] = None,
    ) -> LedgerTransaction:
        """
        Edit a posting (date, amounts, description, ...) and rebalance its entity.

        authorize, when given, is awaited with the locked posting before any
        change is made.
        """
        entity, txn = await self._lock_posting(transaction_id)
        if authorize is not None:
            await authorize(txn)
        old = snapshot(txn)
        data = dict(values)
        if "transaction_type" in data and data["transaction_type"] not in TRANSACTION_TYPES:
            raise DomainValidationError(f"Invalid transaction type '{data['transaction_type']}'")
        for key in ("debit_amount", "credit_amount"):
            if key in data:
                data[key] = money(data[key])
        await self.ledger_repo.update(txn, data, commit=False)
        await self._replay(entity, txn.entity_type)
        await self.audit.record(
            user=user,
            action="UPDATE",
            resource="ledger",
            resource_id=txn.id,
            old_values=old,
            new_values=snapshot(txn),
        )
        await self.session.commit()
        return await self.get_transaction(txn.id)

    # PUBLIC_INTERFACE
    async def delete_transaction(
        self, transaction_id: int, *, user: Optional[User] = None, authorize: Optional[PostingCheck] = None
    ) -> None:
        """Remove a posting and rebalance its entity."""
        entity, txn = await self._lock_posting(transaction_id)
        if authorize is not None:
            await authorize(txn)
        entity_type = txn.entity_type
        old = snapshot(txn)
        await self.ledger_repo.delete(txn, commit=False)
        await self._replay(entity, entity_type)
        await self.audit.record(
            user=user, action="DELETE", resource="ledger", resource_id=transaction_id, old_values=old
        )
        await self.session.commit()

    # PUBLIC_INTERFACE
    async def set_opening_balance(
        self, entity_type: str, entity_id: int, opening_balance: Any, *, commit: bool = True
    ) -> Decimal:
        """Change an entity's opening balance and replay its history."""
        entity = await self._lock_entity(entity_type, entity_id)
        entity.opening_balance = money(opening_balance)
        closing = await self._replay(entity, entity_type)
        if commit:
            await self.session.commit()
        return closing

    # PUBLIC_INTERFACE
    async def summary(self, entity_type: str, entity_id: int) -> dict[str, Any]:
        """Totals for an entity's statement header."""
        entity, postings = await self.get_ledger(entity_type, entity_id)
        total_debit = sum((p.debit_amount for p in postings), Decimal("0"))
        total_credit = sum((p.credit_amount for p in postings), Decimal("0"))
        return {
            "entity_type": entity_type,
            "entity_id": entity.id,
            "name": entity.name,
            "opening_balance": money(entity.opening_balance),
            "total_debit": money(total_debit),
            "total_credit": money(total_credit),
            "current_balance": money(entity.current_balance),
            "transaction_count": len(postings),
        }
