from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.models.security import User
from src.db.session import get_async_session
from src.repositories.procurement import PurchaseRepository
from src.schemas.procurement import PurchaseCreate, PurchaseRead
from src.services.procurement import PurchaseService

router = APIRouter(prefix="/purchases", tags=["Purchases"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[PurchaseRead],
    summary="List purchases",
    description="Return purchases with their lines, newest purchase date first.",
    dependencies=[Depends(require_permission("purchases", "read"))],
)
async def list_purchases(
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[PurchaseRead]:
    items = await PurchaseRepository(session).list(limit=limit, offset=offset)
    return [PurchaseRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/{purchase_id}",
    response_model=PurchaseRead,
    summary="Get purchase",
    dependencies=[Depends(require_permission("purchases", "read"))],
)
async def get_purchase(purchase_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> PurchaseRead:
    return PurchaseRead.model_validate(await PurchaseService(session).get_purchase(purchase_id))


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=PurchaseRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record purchase",
    description="Create a purchase; lines linked to inventory items restock them.",
)
async def create_purchase(
    payload: PurchaseCreate,
    user: User = Depends(require_permission("purchases", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> PurchaseRead:
    values = payload.model_dump(exclude={"items"})
    items = [i.model_dump() for i in payload.items]
    return PurchaseRead.model_validate(await PurchaseService(session).create_purchase(values, items, user=user))


# PUBLIC_INTERFACE
@router.delete(
    "/{purchase_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete purchase",
    description="Remove the purchase record. Stock already received is not reversed.",
    dependencies=[Depends(require_permission("purchases", "write"))],
)
async def delete_purchase(purchase_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await PurchaseService(session).delete_purchase(purchase_id)
