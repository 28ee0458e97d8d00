from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.logging import client_ip_var, correlation_id_var, user_agent_var
from src.core.security import detect_device_type
from src.db.models.security import AuditLog, LoginLog, User
from src.repositories.security import AuditLogRepository, LoginLogRepository
from src.services.base import BaseService

logger = logging.getLogger(__name__)


def _jsonable(values: Optional[dict[str, Any]]) -> Optional[dict[str, Any]]:
    """Make snapshot dicts JSON-serializable (Decimals, dates, enums)."""
    if values is None:
        return None
    out: dict[str, Any] = {}
    for key, value in values.items():
        if key in ("hashed_password", "password"):
            continue
        if isinstance(value, Decimal):
            out[key] = str(value)
        elif hasattr(value, "isoformat"):
            out[key] = value.isoformat()
        elif isinstance(value, Enum):
            out[key] = value.value
        else:
            out[key] = value
    return out


# PUBLIC_INTERFACE
def snapshot(entity: Any) -> dict[str, Any]:
    """Return column values of an ORM instance as a JSON-friendly dict."""
    return _jsonable({c.key: getattr(entity, c.key) for c in entity.__table__.columns}) or {}


class AuditService(BaseService):
    """
    Records audit trail entries and login attempts.

    Entries are added to the caller's session; the caller's commit persists
    them together with the audited change.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.audit_repo = AuditLogRepository(session)
        self.login_repo = LoginLogRepository(session)

    # PUBLIC_INTERFACE
    async def record(
        self,
        *,
        user: Optional[User],
        action: str,
        resource: str,
        resource_id: Any = None,
        details: Optional[dict[str, Any]] = None,
        old_values: Optional[dict[str, Any]] = None,
        new_values: Optional[dict[str, Any]] = None,
        status: str = "success",
    ) -> AuditLog:
        """Stage an audit entry for the current request in the session."""
        entry = AuditLog(
            user_id=user.id if user else None,
            user_email=user.email if user else None,
            action=action,
            resource=resource,
            resource_id=str(resource_id) if resource_id is not None else None,
            details=_jsonable(details),
            old_values=_jsonable(old_values),
            new_values=_jsonable(new_values),
            ip_address=client_ip_var.get(),
            user_agent=user_agent_var.get(),
            status=status,
            correlation_id=correlation_id_var.get(),
        )
        await self.audit_repo.add(entry)
        return entry

    # PUBLIC_INTERFACE
    async def record_denied(self, *, user: User, resource: str, action: str) -> AuditLog:
        """Persist a failed entry for a permission check the user did not pass."""
        entry = await self.record(
            user=user,
            action="ACCESS_DENIED",
            resource=resource,
            details={"permission": f"{resource}:{action}"},
            status="failed",
        )
        await self.audit_repo.commit()
        return entry

    # PUBLIC_INTERFACE
    async def record_login(
        self,
        *,
        email: str,
        user: Optional[User],
        success: bool,
        failure_reason: Optional[str] = None,
    ) -> LoginLog:
        """Persist a login attempt immediately (committed on its own)."""
        user_agent = user_agent_var.get()
        entry = LoginLog(
            user_id=user.id if user else None,
            email=email,
            ip_address=client_ip_var.get(),
            user_agent=user_agent,
            device_type=detect_device_type(user_agent),
            status="success" if success else "failed",
            failure_reason=failure_reason,
        )
        await self.login_repo.add(entry)
        await self.login_repo.commit()
        logger.info("Login %s for %s", entry.status, email)
        return entry

    # PUBLIC_INTERFACE
    async def list_audit_logs(self, *, limit: int, offset: int, **filters: Any) -> tuple[list[AuditLog], int]:
        """Return a page of audit entries and the total count for the filters."""
        clauses = self.audit_repo.build_filters(**filters)
        items = await self.audit_repo.list(limit=limit, offset=offset, filters=clauses)
        total = await self.audit_repo.count(filters=clauses)
        return items, total

    # PUBLIC_INTERFACE
    async def list_login_logs(self, *, limit: int, offset: int) -> tuple[list[LoginLog], int]:
        items = await self.login_repo.list(limit=limit, offset=offset)
        total = await self.login_repo.count()
        return items, total

    # PUBLIC_INTERFACE
    async def login_analytics(self, days: int = 30) -> dict[str, Any]:
        """
        Summarize login attempts over the last `days` days.

        Returns totals, success/failure split, device type distribution and the
        busiest IP addresses.
        """
        since = datetime.now(tz=timezone.utc) - timedelta(days=days)
        logs = await self.login_repo.list_since(since)
        successful = sum(1 for log in logs if log.status == "success")
        devices = Counter(log.device_type or "Unknown" for log in logs)
        ips = Counter(log.ip_address or "unknown" for log in logs)
        return {
            "period_days": days,
            "total_attempts": len(logs),
            "successful": successful,
            "failed": len(logs) - successful,
            "unique_users": len({log.user_id for log in logs if log.user_id is not None}),
            "device_types": [{"device_type": k, "count": v} for k, v in devices.most_common()],
            "top_ip_addresses": [{"ip_address": k, "count": v} for k, v in ips.most_common(10)],
        }

    # PUBLIC_INTERFACE
    async def security_metrics(self, hours: int = 24) -> dict[str, Any]:
        """Failed logins, failed operations and distinct active users in the last `hours` hours."""
        since = datetime.now(tz=timezone.utc) - timedelta(hours=hours)
        failed_logins = await self.login_repo.count(
            filters=[LoginLog.status == "failed", LoginLog.login_time >= since]
        )
        failed_operations = await self.audit_repo.count(
            filters=self.audit_repo.build_filters(status="failed", start=since)
        )
        return {
            "period_hours": hours,
            "failed_logins": failed_logins,
            "failed_operations": failed_operations,
            "active_users": await self.audit_repo.count_users_since(since),
        }

    # PUBLIC_INTERFACE
    async def suspicious_activity(self, hours: int = 24, limit: int = 20) -> list[AuditLog]:
        """Most recent failed audit entries in the window."""
        since = datetime.now(tz=timezone.utc) - timedelta(hours=hours)
        return await self.audit_repo.list(
            limit=limit, filters=self.audit_repo.build_filters(status="failed", start=since)
        )
