"""
Database seeding utilities for minimal reference data.

Seeds:
- Resource/action permissions and default role grants
- Default users (superadmin, admin, manager, staff @sweetreats.com)
- Measurement units (g, kg, ml, l, pcs)
- Default application settings (branding, currency)

Every step is idempotent; existing rows are left untouched.

Usage:
  python -m src.db.run_migrations upgrade head
  python -m src.db.seed
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.security import get_password_hash
from src.core.settings import get_app_settings
from src.repositories.catalog import UnitRepository
from src.repositories.security import UserRepository
from src.services.permissions import PermissionService
from src.services.settings import SettingsService
from src.db.session import session_scope

logger = logging.getLogger(__name__)

DEFAULT_USERS: List[Tuple[str, str, str, str]] = [
    ("superadmin@sweetreats.com", "Super", "Admin", "super_admin"),
    ("admin@sweetreats.com", "Admin", "User", "admin"),
    ("manager@sweetreats.com", "Manager", "User", "manager"),
    ("staff@sweetreats.com", "Staff", "User", "staff"),
]

# (name, abbreviation, type, base_unit, conversion_factor to base)
DEFAULT_UNITS: List[Tuple[str, str, str, str, Decimal]] = [
    ("gram", "g", "weight", "g", Decimal("1")),
    ("kilogram", "kg", "weight", "g", Decimal("1000")),
    ("milliliter", "ml", "volume", "ml", Decimal("1")),
    ("liter", "l", "volume", "ml", Decimal("1000")),
    ("pieces", "pcs", "count", "pcs", Decimal("1")),
]


# PUBLIC_INTERFACE
async def seed_all() -> None:
    """
    Seed the database with minimal reference data.

    This function:
      - Ensures permissions and default role grants
      - Creates the default users when missing
      - Seeds measurement units and default settings
    """
    async with session_scope() as session:
        await PermissionService(session).ensure_defaults()
        await _seed_users(session)
        await _seed_units(session)
        await SettingsService(session).ensure_defaults()
    logger.info("Database seeding complete")


async def _seed_users(session: AsyncSession) -> None:
    repo = UserRepository(session)
    password_hash = get_password_hash(get_app_settings().DEFAULT_ADMIN_PASSWORD)
    created = 0
    for email, first_name, last_name, role in DEFAULT_USERS:
        if await repo.get_user_by_email(email):
            continue
        await repo.create(
            {
                "email": email,
                "hashed_password": password_hash,
                "first_name": first_name,
                "last_name": last_name,
                "role": role,
                "is_active": True,
            },
            commit=False,
        )
        created += 1
    await session.commit()
    logger.info("Seeded %d default users", created)


async def _seed_units(session: AsyncSession) -> None:
    repo = UnitRepository(session)
    created = 0
    for name, abbreviation, type_, base_unit, factor in DEFAULT_UNITS:
        if await repo.get_by_symbol(abbreviation):
            continue
        await repo.create(
            {
                "name": name,
                "abbreviation": abbreviation,
                "type": type_,
                "base_unit": base_unit,
                "conversion_factor": factor,
            },
            commit=False,
        )
        created += 1
    await session.commit()
    logger.info("Seeded %d units", created)


if __name__ == "__main__":
    asyncio.run(seed_all())
