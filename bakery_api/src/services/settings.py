from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.security import User
from src.repositories.system import SettingRepository
from src.services.audit import AuditService
from src.services.base import BaseService

logger = logging.getLogger(__name__)

PUBLIC_SETTING_KEYS = ["companyName", "logo", "themeColor", "currency"]
DEFAULT_SETTINGS: dict[str, tuple[str, str]] = {
    "companyName": ("Sweet Treats Bakery", "string"),
    "logo": ("", "string"),
    "themeColor": ("#8B4513", "string"),
    "currency": ("USD", "string"),
    "taxRate": ("0", "number"),
    "lowStockAlerts": ("true", "boolean"),
}


def _infer_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "string"


class SettingsService(BaseService):
    """Application-wide key/value settings."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = SettingRepository(session)
        self.audit = AuditService(session)

    # PUBLIC_INTERFACE
    async def get_all(self) -> dict[str, Optional[str]]:
        return {s.key: s.value for s in await self.repo.list_settings()}

    # PUBLIC_INTERFACE
    async def get_public(self) -> dict[str, Optional[str]]:
        """Branding subset shown before login."""
        return {s.key: s.value for s in await self.repo.list_settings(PUBLIC_SETTING_KEYS)}

    # PUBLIC_INTERFACE
    async def update_many(self, values: dict[str, Any], *, user: Optional[User] = None) -> dict[str, Optional[str]]:
        """Upsert several settings; values are stored as text with an inferred type."""
        previous = await self.get_all()
        for key, value in values.items():
            type_ = _infer_type(value)
            text = None if value is None else (str(value).lower() if type_ == "boolean" else str(value))
            await self.repo.upsert(key, text, type_)
        await self.audit.record(
            user=user,
            action="UPDATE",
            resource="settings",
            old_values={k: previous.get(k) for k in values},
            new_values={k: values[k] for k in values},
        )
        await self.repo.commit()
        logger.info("Settings updated: %s", ", ".join(sorted(values)))
        return await self.get_all()

    # PUBLIC_INTERFACE
    async def ensure_defaults(self) -> None:
        """Insert default settings that are missing; existing values are left alone."""
        existing = await self.get_all()
        for key, (value, type_) in DEFAULT_SETTINGS.items():
            if key not in existing:
                await self.repo.upsert(key, value, type_)
        await self.repo.commit()
