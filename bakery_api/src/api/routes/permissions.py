from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import get_current_active_user, require_permission, require_roles
from src.db.models.security import User
from src.db.session import get_async_session
from src.schemas.auth import UserRead
from src.schemas.permissions import (
    EffectivePermissions,
    PermissionRead,
    RoleChange,
    RolePermissionsRead,
    RolePermissionsUpdate,
    UserOverrideRead,
    UserOverridesUpdate,
)
from src.services.permissions import PermissionService

router = APIRouter(prefix="/permissions", tags=["Permissions"])


def _overrides_to_read(rows) -> List[UserOverrideRead]:
    return [UserOverrideRead(permission=PermissionRead.model_validate(p), granted=g) for p, g in rows]


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[PermissionRead],
    summary="List permissions",
    dependencies=[Depends(require_permission("admin", "read"))],
)
async def list_permissions(session: AsyncSession = Depends(get_async_session)) -> List[PermissionRead]:
    return [PermissionRead.model_validate(p) for p in await PermissionService(session).list_permissions()]


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=EffectivePermissions,
    summary="My permissions",
    description="Permissions held by the current user after role grants and overrides.",
)
async def my_permissions(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> EffectivePermissions:
    resolved = await PermissionService(session).effective_permissions(user)
    return EffectivePermissions(
        user_id=user.id, role=user.role, permissions=[PermissionRead.model_validate(p) for p in resolved]
    )


# PUBLIC_INTERFACE
@router.get(
    "/roles/{role}",
    response_model=RolePermissionsRead,
    summary="Get role permissions",
    dependencies=[Depends(require_permission("admin", "read"))],
)
async def get_role_permissions(
    role: str = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> RolePermissionsRead:
    perms = await PermissionService(session).get_role_permissions(role)
    return RolePermissionsRead(role=role, permissions=[PermissionRead.model_validate(p) for p in perms])


# PUBLIC_INTERFACE
@router.put(
    "/roles/{role}",
    response_model=RolePermissionsRead,
    summary="Replace role permissions",
)
async def set_role_permissions(
    payload: RolePermissionsUpdate,
    role: str = Path(...),
    actor: User = Depends(require_permission("admin", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> RolePermissionsRead:
    perms = await PermissionService(session).set_role_permissions(role, payload.permission_ids, actor=actor)
    return RolePermissionsRead(role=role, permissions=[PermissionRead.model_validate(p) for p in perms])


# PUBLIC_INTERFACE
@router.get(
    "/users/{user_id}",
    response_model=List[UserOverrideRead],
    summary="Get user permission overrides",
    dependencies=[Depends(require_permission("admin", "read"))],
)
async def get_user_overrides(
    user_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> List[UserOverrideRead]:
    return _overrides_to_read(await PermissionService(session).get_user_overrides(user_id))


# PUBLIC_INTERFACE
@router.put(
    "/users/{user_id}",
    response_model=List[UserOverrideRead],
    summary="Replace user permission overrides",
    description="granted=false removes a role permission from the user, granted=true adds one.",
)
async def set_user_overrides(
    payload: UserOverridesUpdate,
    user_id: int = Path(...),
    actor: User = Depends(require_permission("admin", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> List[UserOverrideRead]:
    overrides = {o.permission_id: o.granted for o in payload.overrides}
    rows = await PermissionService(session).set_user_overrides(user_id, overrides, actor=actor)
    return _overrides_to_read(rows)


# PUBLIC_INTERFACE
@router.put(
    "/users/{user_id}/role",
    response_model=UserRead,
    summary="Change user role",
    description="Assign a new role to a user. Super admins only.",
)
async def change_user_role(
    payload: RoleChange,
    user_id: int = Path(...),
    actor: User = Depends(require_roles("super_admin")),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    user = await PermissionService(session).change_role(user_id, payload.role, actor=actor)
    return UserRead.model_validate(user)
