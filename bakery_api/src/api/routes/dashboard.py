from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.session import get_async_session
from src.schemas.dashboard import DashboardStats, SalesAnalytics
from src.schemas.inventory import InventoryItemRead
from src.schemas.production import ProductionScheduleRead
from src.schemas.sales import OrderRead
from src.services.dashboard import DashboardService

router = APIRouter(
    prefix="/dashboard",
    tags=["Dashboard"],
    dependencies=[Depends(require_permission("dashboard", "read"))],
)


# PUBLIC_INTERFACE
@router.get("/stats", response_model=DashboardStats, summary="Dashboard statistics")
async def dashboard_stats(session: AsyncSession = Depends(get_async_session)) -> DashboardStats:
    return DashboardStats(**await DashboardService(session).stats())


# PUBLIC_INTERFACE
@router.get("/recent-orders", response_model=List[OrderRead], summary="Most recent orders")
async def recent_orders(
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(5, ge=1, le=50),
) -> List[OrderRead]:
    return [OrderRead.model_validate(o) for o in await DashboardService(session).recent_orders(limit)]


# PUBLIC_INTERFACE
@router.get("/production-schedule", response_model=List[ProductionScheduleRead], summary="Today's production")
async def todays_production(session: AsyncSession = Depends(get_async_session)) -> List[ProductionScheduleRead]:
    items = await DashboardService(session).todays_production()
    return [ProductionScheduleRead.model_validate(i) for i in items]


# PUBLIC_INTERFACE
@router.get("/low-stock", response_model=List[InventoryItemRead], summary="Items at or below minimum level")
async def low_stock(session: AsyncSession = Depends(get_async_session)) -> List[InventoryItemRead]:
    return [InventoryItemRead.model_validate(i) for i in await DashboardService(session).low_stock()]


# PUBLIC_INTERFACE
@router.get(
    "/sales-analytics",
    response_model=SalesAnalytics,
    summary="Sales analytics",
    description="Totals and a per-day revenue series; defaults to the last 30 days.",
)
async def sales_analytics(
    session: AsyncSession = Depends(get_async_session),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
) -> SalesAnalytics:
    return SalesAnalytics(**await DashboardService(session).sales_analytics(start_date, end_date))
