from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.session import get_async_session
from src.schemas.production import ProductionScheduleCreate, ProductionScheduleRead, ProductionScheduleUpdate
from src.services.production import ProductionService

router = APIRouter(prefix="/production", tags=["Production"])


# PUBLIC_INTERFACE
@router.get(
    "/schedule",
    response_model=List[ProductionScheduleRead],
    summary="List production schedule",
    description="Return schedule entries, newest day first, optionally for one day or status.",
    dependencies=[Depends(require_permission("production", "read"))],
)
async def list_schedule(
    session: AsyncSession = Depends(get_async_session),
    scheduled_date: Optional[date] = Query(None, alias="date", description="Production day"),
    status_: Optional[str] = Query(None, alias="status"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[ProductionScheduleRead]:
    items = await ProductionService(session).list_schedule(
        scheduled_date=scheduled_date, status=status_, limit=limit, offset=offset
    )
    return [ProductionScheduleRead.model_validate(x) for x in items]


# PUBLIC_INTERFACE
@router.get(
    "/schedule/today",
    response_model=List[ProductionScheduleRead],
    summary="Today's production",
    dependencies=[Depends(require_permission("production", "read"))],
)
async def todays_schedule(session: AsyncSession = Depends(get_async_session)) -> List[ProductionScheduleRead]:
    return [ProductionScheduleRead.model_validate(x) for x in await ProductionService(session).todays_schedule()]


# PUBLIC_INTERFACE
@router.get(
    "/schedule/{item_id}",
    response_model=ProductionScheduleRead,
    summary="Get schedule entry",
    dependencies=[Depends(require_permission("production", "read"))],
)
async def get_schedule_item(
    item_id: int = Path(...), session: AsyncSession = Depends(get_async_session)
) -> ProductionScheduleRead:
    return ProductionScheduleRead.model_validate(await ProductionService(session).get_item(item_id))


# PUBLIC_INTERFACE
@router.post(
    "/schedule",
    response_model=ProductionScheduleRead,
    status_code=status.HTTP_201_CREATED,
    summary="Schedule production",
    description="Create a schedule entry. Managers receive a production reminder.",
    dependencies=[Depends(require_permission("production", "write"))],
)
async def create_schedule_item(
    payload: ProductionScheduleCreate, session: AsyncSession = Depends(get_async_session)
) -> ProductionScheduleRead:
    return ProductionScheduleRead.model_validate(await ProductionService(session).create_item(payload.model_dump()))


# PUBLIC_INTERFACE
@router.put(
    "/schedule/{item_id}",
    response_model=ProductionScheduleRead,
    summary="Update schedule entry",
    dependencies=[Depends(require_permission("production", "write"))],
)
async def update_schedule_item(
    payload: ProductionScheduleUpdate,
    item_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> ProductionScheduleRead:
    updated = await ProductionService(session).update_item(item_id, payload.model_dump(exclude_unset=True))
    return ProductionScheduleRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/schedule/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete schedule entry",
    dependencies=[Depends(require_permission("production", "write"))],
)
async def delete_schedule_item(item_id: int = Path(...), session: AsyncSession = Depends(get_async_session)) -> None:
    await ProductionService(session).delete_item(item_id)
