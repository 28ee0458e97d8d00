"""Permission resolution: role grants, user overrides and the admin bypass."""
from dataclasses import dataclass

import pytest

from src.services.base import DomainValidationError
from src.services.permissions import (
    PermissionService,
    default_role_grants,
    has_permission,
    resolve_permissions,
)


@dataclass(frozen=True)
class Perm:
    id: int
    resource: str
    action: str


ALL = [
    Perm(1, "orders", "read"),
    Perm(2, "orders", "write"),
    Perm(3, "inventory", "read_write"),
    Perm(4, "staff", "read"),
    Perm(5, "users", "read_write"),
]


def test_super_admin_holds_everything():
    resolved = resolve_permissions("super_admin", [], [(ALL[0], False)], ALL)

    assert [p.id for p in resolved] == [1, 2, 3, 4, 5]


def test_role_grants_are_the_base_set():
    resolved = resolve_permissions("staff", [ALL[0], ALL[3]], [], ALL)

    assert [p.id for p in resolved] == [1, 4]


def test_user_override_revokes_and_adds():
    resolved = resolve_permissions(
        "staff",
        [ALL[0], ALL[3]],
        [(ALL[3], False), (ALL[1], True)],
        ALL,
    )

    assert [p.id for p in resolved] == [1, 2]


def test_admin_bypass_skips_restricted_resources():
    resolved = resolve_permissions("admin", [], [], ALL)

    # staff is restricted: only granted to admins explicitly
    assert 4 not in [p.id for p in resolved]
    assert {1, 2, 3, 5} <= {p.id for p in resolved}


def test_admin_restricted_resource_follows_grants():
    resolved = resolve_permissions("admin", [ALL[3]], [], ALL)

    assert 4 in [p.id for p in resolved]


def test_read_write_covers_both_actions():
    resolved = [ALL[2]]

    assert has_permission(resolved, "inventory", "read")
    assert has_permission(resolved, "inventory", "write")
    assert not has_permission(resolved, "orders", "read")


def test_default_staff_grants_exclude_user_management():
    grants = default_role_grants("staff")

    assert ("orders", "write") in grants
    assert all(resource not in ("users", "admin") for resource, _ in grants)


# =============================================================================
# SERVICE
# =============================================================================

async def test_seeded_roles_resolve_from_database(session, users):
    service = PermissionService(session)

    assert await service.check(users["manager"], "inventory", "write")
    assert not await service.check(users["manager"], "users", "read")
    assert await service.check(users["staff"], "orders", "write")
    assert not await service.check(users["staff"], "admin", "read")


async def test_user_override_denies_role_grant(session, users):
    service = PermissionService(session)
    staff = users["staff"]
    orders_write = next(
        p for p in await service.list_permissions() if p.resource == "orders" and p.action == "write"
    )

    await service.set_user_overrides(staff.id, {orders_write.id: False})

    assert not await service.check(staff, "orders", "write")
    assert await service.check(staff, "orders", "read")


async def test_change_role_rejects_unknown_role(session, users):
    with pytest.raises(DomainValidationError):
        await PermissionService(session).change_role(users["staff"].id, "baker")
