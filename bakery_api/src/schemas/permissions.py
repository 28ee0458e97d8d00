from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class PermissionRead(BaseModel):
    """Permission on a resource (`<resource>_<action>`)."""
    id: int
    name: str
    resource: str
    action: str
    description: Optional[str] = None

    class Config:
        from_attributes = True


class RolePermissionsRead(BaseModel):
    role: str
    permissions: List[PermissionRead] = Field(default_factory=list)


class RolePermissionsUpdate(BaseModel):
    """Full replacement of a role's permission set."""
    permission_ids: List[int] = Field(default_factory=list)


class UserOverride(BaseModel):
    permission_id: int
    granted: bool = True


class UserOverrideRead(BaseModel):
    permission: PermissionRead
    granted: bool


class UserOverridesUpdate(BaseModel):
    """Full replacement of a user's permission overrides."""
    overrides: List[UserOverride] = Field(default_factory=list)


class RoleChange(BaseModel):
    role: str = Field(..., description="New role name")


class EffectivePermissions(BaseModel):
    """Permissions a user holds after role grants and overrides are resolved."""
    user_id: int
    role: str
    permissions: List[PermissionRead] = Field(default_factory=list)
