from __future__ import annotations

from typing import Dict, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.models.security import User
from src.db.session import get_async_session
from src.schemas.system import SettingsUpdate
from src.services.settings import SettingsService

router = APIRouter(prefix="/settings", tags=["Settings"])


# PUBLIC_INTERFACE
@router.get(
    "/public",
    response_model=Dict[str, Optional[str]],
    summary="Public branding settings",
    description="Company name, logo, theme color and currency. No authentication required.",
)
async def public_settings(session: AsyncSession = Depends(get_async_session)) -> Dict[str, Optional[str]]:
    return await SettingsService(session).get_public()


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=Dict[str, Optional[str]],
    summary="All settings",
    dependencies=[Depends(require_permission("settings", "read"))],
)
async def get_settings(session: AsyncSession = Depends(get_async_session)) -> Dict[str, Optional[str]]:
    return await SettingsService(session).get_all()


# PUBLIC_INTERFACE
@router.put(
    "",
    response_model=Dict[str, Optional[str]],
    summary="Update settings",
    description="Upsert the given keys and return the full settings map.",
)
async def update_settings(
    payload: SettingsUpdate,
    user: User = Depends(require_permission("settings", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> Dict[str, Optional[str]]:
    return await SettingsService(session).update_many(payload.settings, user=user)
