from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.models.security import User
from src.db.session import get_async_session
from src.repositories.sales import OrderRepository
from src.schemas.sales import OrderCreate, OrderRead, OrderUpdate, PublicOrderCreate, PublicOrderReceipt
from src.services.orders import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])
public_router = APIRouter(prefix="/public", tags=["Public"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[OrderRead],
    summary="List orders",
    description="Newest first, optionally filtered by status or customer.",
    dependencies=[Depends(require_permission("orders", "read"))],
)
async def list_orders(
    session: AsyncSession = Depends(get_async_session),
    status_: Optional[str] = Query(None, alias="status", description="Filter by status"),
    customer_id: Optional[int] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[OrderRead]:
    items = await OrderRepository(session).list_orders(
        status=status_, customer_id=customer_id, limit=limit, offset=offset
    )
    return [OrderRead.model_validate(o) for o in items]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=OrderRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create order",
    description="Staff order entry. Line totals and the order total are computed server-side.",
)
async def create_order(
    payload: OrderCreate,
    user: User = Depends(require_permission("orders", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> OrderRead:
    values = payload.model_dump(exclude={"items"})
    items = [i.model_dump() for i in payload.items]
    return OrderRead.model_validate(await OrderService(session).create_order(values, items, user=user))


# PUBLIC_INTERFACE
@router.get(
    "/{order_id}",
    response_model=OrderRead,
    summary="Get order",
    dependencies=[Depends(require_permission("orders", "read"))],
)
async def get_order(order_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> OrderRead:
    return OrderRead.model_validate(await OrderService(session).get_order(order_id))


# PUBLIC_INTERFACE
@router.put(
    "/{order_id}",
    response_model=OrderRead,
    summary="Update order",
    dependencies=[Depends(require_permission("orders", "write"))],
)
async def update_order(
    payload: OrderUpdate,
    order_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> OrderRead:
    values = payload.model_dump(exclude_unset=True, exclude={"items"})
    items = [i.model_dump() for i in payload.items] if payload.items is not None else None
    return OrderRead.model_validate(await OrderService(session).update_order(order_id, values, items))


# PUBLIC_INTERFACE
@router.delete(
    "/{order_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete order",
    dependencies=[Depends(require_permission("orders", "write"))],
)
async def delete_order(order_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await OrderService(session).delete_order(order_id)


# PUBLIC_INTERFACE
@public_router.post(
    "/orders",
    response_model=PublicOrderReceipt,
    status_code=status.HTTP_201_CREATED,
    summary="Place a public order",
    description="Storefront order intake; no authentication required. Managers are notified.",
)
async def create_public_order(
    payload: PublicOrderCreate, session: AsyncSession = Depends(get_async_session)
) -> PublicOrderReceipt:
    data = payload.model_dump()
    data["items"] = [i.model_dump() for i in payload.items]
    order = await OrderService(session).create_public_order(data)
    return PublicOrderReceipt(order_number=order.order_number, total_amount=order.total_amount, status=order.status)
