from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.session import get_async_session
from src.schemas.auth import LoginAnalytics, LoginLogRead
from src.schemas.common import Page
from src.schemas.system import AuditLogRead, SecurityMetrics
from src.services.audit import AuditService

router = APIRouter(
    prefix="/audit",
    tags=["Audit"],
    dependencies=[Depends(require_permission("admin", "read"))],
)


# PUBLIC_INTERFACE
@router.get(
    "/logs",
    response_model=Page[AuditLogRead],
    summary="Audit trail",
    description="Newest first. Filter by user, resource, action, status and time window.",
)
async def list_audit_logs(
    session: AsyncSession = Depends(get_async_session),
    user_id: Optional[int] = Query(None),
    resource: Optional[str] = Query(None),
    action: Optional[str] = Query(None),
    status_: Optional[str] = Query(None, alias="status"),
    start: Optional[datetime] = Query(None),
    end: Optional[datetime] = Query(None),
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> Page[AuditLogRead]:
    items, total = await AuditService(session).list_audit_logs(
        limit=limit,
        offset=offset,
        user_id=user_id,
        resource=resource,
        action=action,
        status=status_,
        start=start,
        end=end,
    )
    return Page[AuditLogRead](
        items=[AuditLogRead.model_validate(x) for x in items], total=total, limit=limit, offset=offset
    )


# PUBLIC_INTERFACE
@router.get("/login-logs", response_model=Page[LoginLogRead], summary="Login attempts")
async def list_login_logs(
    session: AsyncSession = Depends(get_async_session),
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> Page[LoginLogRead]:
    items, total = await AuditService(session).list_login_logs(limit=limit, offset=offset)
    return Page[LoginLogRead](
        items=[LoginLogRead.model_validate(x) for x in items], total=total, limit=limit, offset=offset
    )


# PUBLIC_INTERFACE
@router.get("/login-analytics", response_model=LoginAnalytics, summary="Login analytics")
async def login_analytics(
    session: AsyncSession = Depends(get_async_session),
    days: int = Query(30, ge=1, le=365),
) -> LoginAnalytics:
    return LoginAnalytics(**await AuditService(session).login_analytics(days))


# PUBLIC_INTERFACE
@router.get(
    "/security-metrics",
    response_model=SecurityMetrics,
    summary="Security metrics",
    description="Failed logins, failed operations and distinct active users over the last 24 hours.",
    dependencies=[Depends(require_permission("admin", "write"))],
)
async def security_metrics(session: AsyncSession = Depends(get_async_session)) -> SecurityMetrics:
    return SecurityMetrics(**await AuditService(session).security_metrics())


# PUBLIC_INTERFACE
@router.get(
    "/logs/suspicious",
    response_model=List[AuditLogRead],
    summary="Suspicious activity",
    description="The 20 most recent failed audit entries of the last 24 hours, such as denied permission checks.",
    dependencies=[Depends(require_permission("admin", "write"))],
)
async def suspicious_activity(session: AsyncSession = Depends(get_async_session)) -> List[AuditLogRead]:
    return [AuditLogRead.model_validate(x) for x in await AuditService(session).suspicious_activity()]
