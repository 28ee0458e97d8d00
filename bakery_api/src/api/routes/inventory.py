from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.models.security import User
from src.db.session import get_async_session
from src.repositories.inventory import (
    InventoryCategoryRepository,
    InventoryItemRepository,
    InventoryTransactionRepository,
)
from src.schemas.inventory import (
    InventoryCategoryCreate,
    InventoryCategoryRead,
    InventoryCategoryUpdate,
    InventoryItemCreate,
    InventoryItemRead,
    InventoryItemUpdate,
    InventoryTransactionCreate,
    InventoryTransactionRead,
)
from src.services.inventory import InventoryService

router = APIRouter(prefix="/inventory", tags=["Inventory"])

read_inventory = require_permission("inventory", "read")
write_inventory = require_permission("inventory", "write")


# PUBLIC_INTERFACE
@router.get(
    "/categories",
    response_model=List[InventoryCategoryRead],
    summary="List inventory categories",
    dependencies=[Depends(read_inventory)],
)
async def list_inventory_categories(
    session: AsyncSession = Depends(get_async_session),
) -> List[InventoryCategoryRead]:
    items = await InventoryCategoryRepository(session).list(limit=1000)
    return [InventoryCategoryRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.post(
    "/categories",
    response_model=InventoryCategoryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create inventory category",
    dependencies=[Depends(write_inventory)],
)
async def create_inventory_category(
    payload: InventoryCategoryCreate, session: AsyncSession = Depends(get_async_session)
) -> InventoryCategoryRead:
    try:
        created = await InventoryCategoryRepository(session).create(payload.model_dump())
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Inventory category already exists")
    return InventoryCategoryRead.model_validate(created)


# PUBLIC_INTERFACE
@router.put(
    "/categories/{category_id}",
    response_model=InventoryCategoryRead,
    summary="Update inventory category",
    dependencies=[Depends(write_inventory)],
)
async def update_inventory_category(
    payload: InventoryCategoryUpdate,
    category_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> InventoryCategoryRead:
    repo = InventoryCategoryRepository(session)
    category = await repo.get(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Inventory category not found")
    updated = await repo.update(category, payload.model_dump(exclude_unset=True))
    return InventoryCategoryRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/categories/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete inventory category",
    dependencies=[Depends(write_inventory)],
)
async def delete_inventory_category(
    category_id: int = Path(...), session: AsyncSession = Depends(get_async_session)
) -> None:
    repo = InventoryCategoryRepository(session)
    category = await repo.get(category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Inventory category not found")
    await repo.delete(category)


# PUBLIC_INTERFACE
@router.get(
    "/items",
    response_model=List[InventoryItemRead],
    summary="List inventory items",
    dependencies=[Depends(read_inventory)],
)
async def list_items(
    session: AsyncSession = Depends(get_async_session),
    category_id: Optional[int] = Query(None, description="Filter by category"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[InventoryItemRead]:
    repo = InventoryItemRepository(session)
    filters = [repo.model.category_id == category_id] if category_id is not None else []
    items = await repo.list(limit=limit, offset=offset, filters=filters)
    return [InventoryItemRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/items/low-stock",
    response_model=List[InventoryItemRead],
    summary="Low stock items",
    description="Items whose current stock is at or below their minimum level.",
    dependencies=[Depends(read_inventory)],
)
async def list_low_stock(session: AsyncSession = Depends(get_async_session)) -> List[InventoryItemRead]:
    items = await InventoryItemRepository(session).list_low_stock()
    return [InventoryItemRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.post(
    "/items",
    response_model=InventoryItemRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create inventory item",
    dependencies=[Depends(write_inventory)],
)
async def create_item(payload: InventoryItemCreate, session: AsyncSession = Depends(get_async_session)) -> InventoryItemRead:
    try:
        created = await InventoryService(session).create_item(payload.model_dump())
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=409, detail="Inventory code already exists")
    return InventoryItemRead.model_validate(created)


# PUBLIC_INTERFACE
@router.get(
    "/items/{item_id}",
    response_model=InventoryItemRead,
    summary="Get inventory item",
    dependencies=[Depends(read_inventory)],
)
async def get_item(item_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> InventoryItemRead:
    item = await InventoryItemRepository(session).get(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    return InventoryItemRead.model_validate(item)


# PUBLIC_INTERFACE
@router.put(
    "/items/{item_id}",
    response_model=InventoryItemRead,
    summary="Update inventory item",
    description="Update item details. Stock levels change through transactions.",
    dependencies=[Depends(write_inventory)],
)
async def update_item(
    payload: InventoryItemUpdate,
    item_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> InventoryItemRead:
    repo = InventoryItemRepository(session)
    item = await repo.get(item_id)
    if not item:
        raise HTTPException(status_code=404, detail="Inventory item not found")
    updated = await repo.update(item, payload.model_dump(exclude_unset=True))
    return InventoryItemRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete inventory item",
    description="Delete the item together with its transaction history.",
    dependencies=[Depends(write_inventory)],
)
async def delete_item(item_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await InventoryService(session).delete_item(item_id)


# PUBLIC_INTERFACE
@router.get(
    "/transactions",
    response_model=List[InventoryTransactionRead],
    summary="List inventory transactions",
    description="List inventory transactions ordered by newest first, optionally for one item.",
    dependencies=[Depends(read_inventory)],
)
async def list_transactions(
    session: AsyncSession = Depends(get_async_session),
    item_id: Optional[int] = Query(None, description="Filter by inventory item"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[InventoryTransactionRead]:
    items = await InventoryTransactionRepository(session).list_transactions(item_id=item_id, limit=limit, offset=offset)
    return [InventoryTransactionRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.post(
    "/transactions",
    response_model=InventoryTransactionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record stock movement",
    description="in adds stock, out removes it (never below zero), adjustment applies a signed quantity.",
)
async def create_transaction(
    payload: InventoryTransactionCreate,
    user: User = Depends(write_inventory),
    session: AsyncSession = Depends(get_async_session),
) -> InventoryTransactionRead:
    txn = await InventoryService(session).post_movement(
        payload.inventory_item_id,
        type_=payload.type,
        quantity=payload.quantity,
        reason=payload.reason,
        reference=payload.reference,
        user=user,
        cost_per_unit=payload.cost_per_unit,
    )
    return InventoryTransactionRead.model_validate(txn)
