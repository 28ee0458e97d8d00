from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import get_current_active_user
from src.db.models.ledger import LedgerTransaction
from src.db.models.security import User
from src.db.session import get_async_session
from src.schemas.accounts import (
    LedgerSummary,
    LedgerTransactionCreate,
    LedgerTransactionRead,
    LedgerTransactionUpdate,
    LedgerView,
)
from src.schemas.common import MessageResponse
from src.services.audit import AuditService
from src.services.ledger import LedgerService
from src.services.permissions import PermissionService

router = APIRouter(prefix="/ledger", tags=["Ledger"])

# Ledger access follows the permission of the account it belongs to.
_RESOURCE_BY_ENTITY = {"customer": "customers", "party": "parties"}


async def _authorize(session: AsyncSession, user: User, entity_type: str, action: str) -> None:
    LedgerService.check_entity_type(entity_type)
    resource = _RESOURCE_BY_ENTITY[entity_type]
    if not await PermissionService(session).check(user, resource, action):
        await AuditService(session).record_denied(user=user, resource=resource, action=action)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=f"Missing permission {resource}:{action}")


# PUBLIC_INTERFACE
@router.get(
    "/{entity_type}/{entity_id}",
    response_model=LedgerView,
    summary="Get ledger",
    description="Account balances and all postings in chronological order with running balances.",
)
async def get_ledger(
    entity_type: str = Path(..., description="customer or party"),
    entity_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> LedgerView:
    await _authorize(session, user, entity_type, "read")
    entity, postings = await LedgerService(session).get_ledger(entity_type, entity_id)
    return LedgerView(
        entity_type=entity_type,
        entity_id=entity.id,
        name=entity.name,
        opening_balance=entity.opening_balance,
        current_balance=entity.current_balance,
        transactions=[LedgerTransactionRead.model_validate(p) for p in postings],
    )


# PUBLIC_INTERFACE
@router.get("/{entity_type}/{entity_id}/summary", response_model=LedgerSummary, summary="Ledger totals")
async def ledger_summary(
    entity_type: str = Path(..., description="customer or party"),
    entity_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> LedgerSummary:
    await _authorize(session, user, entity_type, "read")
    return LedgerSummary(**await LedgerService(session).summary(entity_type, entity_id))


# PUBLIC_INTERFACE
@router.post(
    "/{entity_type}/{entity_id}/recalculate",
    response_model=MessageResponse,
    summary="Recalculate balances",
    description="Replay the account's postings from its opening balance.",
)
async def recalculate_ledger(
    entity_type: str = Path(..., description="customer or party"),
    entity_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await _authorize(session, user, entity_type, "write")
    balance = await LedgerService(session).recalculate(entity_type, entity_id)
    return MessageResponse(
        message=f"Ledger recalculated; current balance {balance}",
        details={"current_balance": float(balance)},
    )


# PUBLIC_INTERFACE
@router.post(
    "/transactions",
    response_model=LedgerTransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Post ledger transaction",
    description="Debits increase the balance, credits decrease it. Balances are recomputed for the account.",
)
async def create_transaction(
    payload: LedgerTransactionCreate,
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> LedgerTransactionRead:
    await _authorize(session, user, payload.entity_type, "write")
    txn = await LedgerService(session).create_transaction(payload.model_dump(), user=user)
    return LedgerTransactionRead.model_validate(txn)


# PUBLIC_INTERFACE
@router.put("/transactions/{transaction_id}", response_model=LedgerTransactionRead, summary="Edit ledger transaction")
async def update_transaction(
    payload: LedgerTransactionUpdate,
    transaction_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> LedgerTransactionRead:
    async def authorize(txn: LedgerTransaction) -> None:
        await _authorize(session, user, txn.entity_type, "write")

    txn = await LedgerService(session).update_transaction(
        transaction_id, payload.model_dump(exclude_unset=True), user=user, authorize=authorize
    )
    return LedgerTransactionRead.model_validate(txn)


# PUBLIC_INTERFACE
@router.delete(
    "/transactions/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete ledger transaction",
)
async def delete_transaction(
    transaction_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    async def authorize(txn: LedgerTransaction) -> None:
        await _authorize(session, user, txn.entity_type, "write")

    await LedgerService(session).delete_transaction(transaction_id, user=user, authorize=authorize)
