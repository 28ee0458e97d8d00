from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Protocol, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.security import Permission, User
from src.repositories.security import PermissionRepository, UserRepository
from src.services.audit import AuditService
from src.services.base import BaseService, DomainValidationError, NotFoundError

logger = logging.getLogger(__name__)

ROLES = ("super_admin", "admin", "manager", "supervisor", "marketer", "staff")
ACTIONS = ("read", "write", "read_write")
RESOURCES = (
    "dashboard",
    "products",
    "inventory",
    "orders",
    "production",
    "customers",
    "parties",
    "assets",
    "expenses",
    "sales",
    "purchases",
    "reports",
    "settings",
    "users",
    "staff",
    "admin",
)
# Admins get every permission implicitly except on these resources, which a
# super admin may grant or revoke like for any other role.
RESTRICTED_RESOURCES = frozenset({"super_admin", "staff"})


class PermissionLike(Protocol):
    id: int
    resource: str
    action: str


# PUBLIC_INTERFACE
def resolve_permissions(
    role: str,
    role_permissions: Iterable[PermissionLike],
    user_overrides: Iterable[tuple[PermissionLike, bool]],
    all_permissions: Sequence[PermissionLike],
) -> list[PermissionLike]:
    """
    Compute the effective permission set for a user.

    Precedence:
      1. super_admin holds every permission.
      2. Role-level grants form the base set.
      3. User-level overrides win over role grants for the same permission
         (granted=False removes it, granted=True adds it).
      4. admin additionally holds every permission on non-restricted resources;
         restricted resources follow steps 2-3 only.

    Returns granted permissions ordered by id.
    """
    if role == "super_admin":
        return sorted(all_permissions, key=lambda p: p.id)

    merged: dict[int, tuple[PermissionLike, bool]] = {p.id: (p, True) for p in role_permissions}
    for perm, granted in user_overrides:
        merged[perm.id] = (perm, granted)
    resolved = {pid: perm for pid, (perm, granted) in merged.items() if granted}

    if role == "admin":
        for perm in all_permissions:
            if perm.resource not in RESTRICTED_RESOURCES:
                resolved[perm.id] = perm

    return sorted(resolved.values(), key=lambda p: p.id)


# PUBLIC_INTERFACE
def has_permission(resolved: Iterable[PermissionLike], resource: str, action: str) -> bool:
    """True when a resolved permission covers resource/action (read_write covers both)."""
    return any(
        p.resource == resource and (p.action == action or p.action == "read_write")
        for p in resolved
    )


# PUBLIC_INTERFACE
def default_role_grants(role: str) -> list[tuple[str, str]]:
    """(resource, action) pairs granted to a role on a fresh install."""
    everything = [(r, "read_write") for r in RESOURCES]
    staff_grants = [(r, "read") for r in RESOURCES if r not in ("users", "admin")] + [
        ("orders", "write"),
        ("customers", "write"),
        ("production", "write"),
    ]
    if role in ("super_admin", "admin"):
        return everything
    if role == "manager":
        return [(r, "read_write") for r in RESOURCES if r not in ("users", "admin")]
    if role == "supervisor":
        return staff_grants + [("production", "read_write"), ("inventory", "read_write")]
    if role == "marketer":
        reads = ("dashboard", "products", "customers", "orders", "sales", "reports")
        return [(r, "read") for r in reads] + [("customers", "write")]
    if role == "staff":
        return staff_grants
    return []


class PermissionService(BaseService):
    """Role and user permission management."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.perm_repo = PermissionRepository(session)
        self.user_repo = UserRepository(session)
        self.audit = AuditService(session)

    @staticmethod
    def _check_role(role: str) -> None:
        if role not in ROLES:
            raise DomainValidationError(f"Invalid role '{role}'. Valid roles: {', '.join(ROLES)}")

    # PUBLIC_INTERFACE
    async def list_permissions(self) -> list[Permission]:
        return await self.perm_repo.list_permissions()

    # PUBLIC_INTERFACE
    async def effective_permissions(self, user: User) -> list[Permission]:
        """Resolve the permissions held by a user."""
        all_permissions = await self.perm_repo.list_permissions()
        role_permissions = await self.perm_repo.list_role_permissions(user.role)
        overrides = await self.perm_repo.list_user_overrides(user.id)
        return resolve_permissions(user.role, role_permissions, overrides, all_permissions)  # type: ignore[return-value]

    # PUBLIC_INTERFACE
    async def check(self, user: User, resource: str, action: str) -> bool:
        return has_permission(await self.effective_permissions(user), resource, action)

    # PUBLIC_INTERFACE
    async def get_role_permissions(self, role: str) -> list[Permission]:
        self._check_role(role)
        return await self.perm_repo.list_role_permissions(role)

    async def _validate_permission_ids(self, permission_ids: Iterable[int]) -> set[int]:
        known = {p.id for p in await self.perm_repo.list_permissions()}
        ids = set(permission_ids)
        unknown = sorted(ids - known)
        if unknown:
            raise DomainValidationError("Unknown permission ids", details={"permission_ids": unknown})
        return ids

    # PUBLIC_INTERFACE
    async def set_role_permissions(
        self, role: str, permission_ids: list[int], *, actor: Optional[User] = None
    ) -> list[Permission]:
        """Replace the permission set granted to a role."""
        self._check_role(role)
        ids = await self._validate_permission_ids(permission_ids)
        old = [p.name for p in await self.perm_repo.list_role_permissions(role)]
        await self.perm_repo.replace_role_permissions(role, sorted(ids))
        updated = await self.perm_repo.list_role_permissions(role)
        await self.audit.record(
            user=actor,
            action="UPDATE",
            resource="role_permissions",
            resource_id=role,
            old_values={"permissions": old},
            new_values={"permissions": [p.name for p in updated]},
        )
        await self.session.commit()
        return updated

    # PUBLIC_INTERFACE
    async def get_user_overrides(self, user_id: int) -> list[tuple[Permission, bool]]:
        if await self.user_repo.get(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")
        return await self.perm_repo.list_user_overrides(user_id)

    # PUBLIC_INTERFACE
    async def set_user_overrides(
        self, user_id: int, overrides: dict[int, bool], *, actor: Optional[User] = None
    ) -> list[tuple[Permission, bool]]:
        """Replace a user's permission overrides."""
        if await self.user_repo.get(user_id) is None:
            raise NotFoundError(f"User {user_id} not found")
        await self._validate_permission_ids(overrides.keys())
        await self.perm_repo.replace_user_overrides(user_id, overrides)
        await self.audit.record(
            user=actor,
            action="UPDATE",
            resource="user_permissions",
            resource_id=user_id,
            new_values={"overrides": {str(k): v for k, v in overrides.items()}},
        )
        await self.session.commit()
        return await self.perm_repo.list_user_overrides(user_id)

    # PUBLIC_INTERFACE
    async def change_role(self, user_id: int, role: str, *, actor: Optional[User] = None) -> User:
        """Assign a new role to a user."""
        self._check_role(role)
        user = await self.user_repo.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        old_role = user.role
        await self.user_repo.update(user, {"role": role}, commit=False)
        await self.audit.record(
            user=actor,
            action="UPDATE",
            resource="users",
            resource_id=user_id,
            details={"field": "role"},
            old_values={"role": old_role},
            new_values={"role": role},
        )
        await self.session.commit()
        return (await self.user_repo.get(user_id))  # type: ignore[return-value]

    # PUBLIC_INTERFACE
    async def ensure_defaults(self) -> dict[str, Any]:
        """
        Create every resource/action permission and, on a fresh install, the
        default role grants. Existing role grants are never touched.
        """
        by_key: dict[tuple[str, str], Permission] = {}
        for resource in RESOURCES:
            for action in ACTIONS:
                perm = await self.perm_repo.ensure_permission(
                    resource, action, description=f"{action.replace('_', '/')} access to {resource}"
                )
                by_key[(resource, action)] = perm

        seeded_roles = 0
        if await self.perm_repo.count_role_permissions() == 0:
            for role in ROLES:
                ids = sorted({by_key[key].id for key in default_role_grants(role)})
                await self.perm_repo.replace_role_permissions(role, ids)
                seeded_roles += 1
        await self.session.commit()
        logger.info("Permissions ensured: %d permissions, %d roles seeded", len(by_key), seeded_roles)
        return {"permissions": len(by_key), "roles_seeded": seeded_roles}
