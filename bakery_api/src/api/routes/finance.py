from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.models.security import User
from src.db.session import get_async_session
from src.repositories.finance import AssetRepository, ExpenseRepository
from src.schemas.finance import AssetCreate, AssetRead, AssetUpdate, ExpenseCreate, ExpenseRead, ExpenseUpdate

expenses_router = APIRouter(prefix="/expenses", tags=["Expenses"])
assets_router = APIRouter(prefix="/assets", tags=["Assets"])


async def _expense_or_404(repo: ExpenseRepository, expense_id: int):
    expense = await repo.get(expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail="Expense not found")
    return expense


async def _asset_or_404(repo: AssetRepository, asset_id: int):
    asset = await repo.get(asset_id)
    if not asset:
        raise HTTPException(status_code=404, detail="Asset not found")
    return asset


# PUBLIC_INTERFACE
@expenses_router.get(
    "",
    response_model=List[ExpenseRead],
    summary="List expenses",
    description="Newest first, optionally filtered by category and date range.",
    dependencies=[Depends(require_permission("expenses", "read"))],
)
async def list_expenses(
    session: AsyncSession = Depends(get_async_session),
    category: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ExpenseRead]:
    repo = ExpenseRepository(session)
    filters = []
    if category:
        filters.append(repo.model.category == category)
    if start_date:
        filters.append(repo.model.expense_date >= start_date)
    if end_date:
        filters.append(repo.model.expense_date <= end_date)
    items = await repo.list(limit=limit, offset=offset, filters=filters)
    return [ExpenseRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@expenses_router.get(
    "/{expense_id}",
    response_model=ExpenseRead,
    summary="Get expense",
    dependencies=[Depends(require_permission("expenses", "read"))],
)
async def get_expense(expense_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> ExpenseRead:
    return ExpenseRead.model_validate(await _expense_or_404(ExpenseRepository(session), expense_id))


# PUBLIC_INTERFACE
@expenses_router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED, summary="Record expense")
async def create_expense(
    payload: ExpenseCreate,
    user: User = Depends(require_permission("expenses", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> ExpenseRead:
    created = await ExpenseRepository(session).create({**payload.model_dump(), "created_by": user.id})
    return ExpenseRead.model_validate(created)


# PUBLIC_INTERFACE
@expenses_router.put(
    "/{expense_id}",
    response_model=ExpenseRead,
    summary="Update expense",
    dependencies=[Depends(require_permission("expenses", "write"))],
)
async def update_expense(
    payload: ExpenseUpdate,
    expense_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ExpenseRead:
    repo = ExpenseRepository(session)
    expense = await _expense_or_404(repo, expense_id)
    return ExpenseRead.model_validate(await repo.update(expense, payload.model_dump(exclude_unset=True)))


# PUBLIC_INTERFACE
@expenses_router.delete(
    "/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete expense",
    dependencies=[Depends(require_permission("expenses", "write"))],
)
async def delete_expense(expense_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    repo = ExpenseRepository(session)
    await repo.delete(await _expense_or_404(repo, expense_id))


# PUBLIC_INTERFACE
@assets_router.get(
    "",
    response_model=List[AssetRead],
    summary="List assets",
    dependencies=[Depends(require_permission("assets", "read"))],
)
async def list_assets(
    session: AsyncSession = Depends(get_async_session),
    active_only: bool = Query(False),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[AssetRead]:
    repo = AssetRepository(session)
    filters = [repo.model.is_active.is_(True)] if active_only else []
    items = await repo.list(limit=limit, offset=offset, filters=filters)
    return [AssetRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@assets_router.get(
    "/{asset_id}",
    response_model=AssetRead,
    summary="Get asset",
    dependencies=[Depends(require_permission("assets", "read"))],
)
async def get_asset(asset_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> AssetRead:
    return AssetRead.model_validate(await _asset_or_404(AssetRepository(session), asset_id))


# PUBLIC_INTERFACE
@assets_router.post(
    "",
    response_model=AssetRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register asset",
    dependencies=[Depends(require_permission("assets", "write"))],
)
async def create_asset(payload: AssetCreate, session: AsyncSession = Depends(get_async_session)) -> AssetRead:
    return AssetRead.model_validate(await AssetRepository(session).create(payload.model_dump()))


# PUBLIC_INTERFACE
@assets_router.put(
    "/{asset_id}",
    response_model=AssetRead,
    summary="Update asset",
    dependencies=[Depends(require_permission("assets", "write"))],
)
async def update_asset(
    payload: AssetUpdate,
    asset_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> AssetRead:
    repo = AssetRepository(session)
    asset = await _asset_or_404(repo, asset_id)
    return AssetRead.model_validate(await repo.update(asset, payload.model_dump(exclude_unset=True)))


# PUBLIC_INTERFACE
@assets_router.delete(
    "/{asset_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete asset",
    dependencies=[Depends(require_permission("assets", "write"))],
)
async def delete_asset(asset_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    repo = AssetRepository(session)
    await repo.delete(await _asset_or_404(repo, asset_id))
