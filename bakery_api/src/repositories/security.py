from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import delete, func, select

from src.db.models.security import (
    AuditLog,
    LoginLog,
    Permission,
    RolePermission,
    User,
    UserPermission,
)
from .base import BaseRepository, CrudRepository


class UserRepository(CrudRepository[User]):
    """Repository for application users."""

    model = User

    async def get_user_by_email(self, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        return await self.scalar_one_or_none(stmt)

    async def list_users(self, *, role: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[User]:
        filters = [User.role == role] if role else []
        return await self.list(limit=limit, offset=offset, filters=filters)

    async def list_active_by_roles(self, roles: list[str]) -> List[User]:
        stmt = select(User).where(User.role.in_(roles), User.is_active.is_(True)).order_by(User.id)
        res = await self.scalars(stmt)
        return list(res)


class PermissionRepository(BaseRepository):
    """Repository for permissions and their role/user assignments."""

    async def list_permissions(self) -> List[Permission]:
        stmt = select(Permission).order_by(Permission.resource, Permission.action)
        res = await self.scalars(stmt)
        return list(res)

    async def get_by_name(self, name: str) -> Optional[Permission]:
        stmt = select(Permission).where(Permission.name == name)
        return await self.scalar_one_or_none(stmt)

    async def ensure_permission(self, resource: str, action: str, description: Optional[str] = None) -> Permission:
        name = f"{resource}_{action}"
        perm = await self.get_by_name(name)
        if perm:
            return perm
        perm = Permission(name=name, resource=resource, action=action, description=description)
        await self.add(perm)
        await self.flush()
        return perm

    async def list_role_permissions(self, role: str) -> List[Permission]:
        stmt = (
            select(Permission)
            .join(RolePermission, RolePermission.permission_id == Permission.id)
            .where(RolePermission.role == role)
            .order_by(Permission.id)
        )
        res = await self.scalars(stmt)
        return list(res)

    async def count_role_permissions(self) -> int:
        result = await self.execute(select(func.count(RolePermission.id)))
        return int(result.scalar_one())

    async def replace_role_permissions(self, role: str, permission_ids: list[int]) -> None:
        await self.execute(delete(RolePermission).where(RolePermission.role == role))
        await self.add_all(RolePermission(role=role, permission_id=pid) for pid in permission_ids)
        await self.flush()

    async def list_user_overrides(self, user_id: int) -> List[tuple[Permission, bool]]:
        stmt = (
            select(Permission, UserPermission.granted)
            .join(UserPermission, UserPermission.permission_id == Permission.id)
            .where(UserPermission.user_id == user_id)
            .order_by(Permission.id)
        )
        result = await self.execute(stmt)
        return [(row[0], bool(row[1])) for row in result.all()]

    async def replace_user_overrides(self, user_id: int, overrides: dict[int, bool]) -> None:
        await self.execute(delete(UserPermission).where(UserPermission.user_id == user_id))
        await self.add_all(
            UserPermission(user_id=user_id, permission_id=pid, granted=granted)
            for pid, granted in overrides.items()
        )
        await self.flush()


class LoginLogRepository(CrudRepository[LoginLog]):
    """Repository for login attempts."""

    model = LoginLog
    default_order = LoginLog.login_time.desc()

    async def list_since(self, since: datetime) -> List[LoginLog]:
        stmt = select(LoginLog).where(LoginLog.login_time >= since).order_by(LoginLog.login_time.desc())
        res = await self.scalars(stmt)
        return list(res)


class AuditLogRepository(CrudRepository[AuditLog]):
    """Repository for the audit trail."""

    model = AuditLog
    default_order = AuditLog.timestamp.desc()

    def build_filters(
        self,
        *,
        user_id: Optional[int] = None,
        resource: Optional[str] = None,
        action: Optional[str] = None,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Any]:
        filters: list[Any] = []
        if user_id is not None:
            filters.append(AuditLog.user_id == user_id)
        if resource:
            filters.append(AuditLog.resource == resource)
        if action:
            filters.append(AuditLog.action == action)
        if status:
            filters.append(AuditLog.status == status)
        if start:
            filters.append(AuditLog.timestamp >= start)
        if end:
            filters.append(AuditLog.timestamp <= end)
        return filters

    async def count_users_since(self, since: datetime) -> int:
        stmt = select(func.count(func.distinct(AuditLog.user_id))).where(AuditLog.timestamp >= since)
        return int((await self.execute(stmt)).scalar_one())
