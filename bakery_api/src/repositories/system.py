from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, func, select, update

from src.db.base import utcnow
from src.db.models.system import Notification, NotificationPreference, Setting
from .base import BaseRepository, CrudRepository


class SettingRepository(BaseRepository):
    """Repository for key/value settings."""

    async def list_settings(self, keys: Optional[list[str]] = None) -> List[Setting]:
        stmt = select(Setting).order_by(Setting.key)
        if keys is not None:
            stmt = stmt.where(Setting.key.in_(keys))
        res = await self.scalars(stmt)
        return list(res)

    async def get(self, key: str) -> Optional[Setting]:
        return await self.scalar_one_or_none(select(Setting).where(Setting.key == key))

    async def upsert(self, key: str, value: Optional[str], type_: str = "string") -> Setting:
        setting = await self.get(key)
        if setting is None:
            setting = Setting(key=key, value=value, type=type_)
            await self.add(setting)
        else:
            setting.value = value
            setting.type = type_
        await self.flush()
        return setting


class NotificationRepository(CrudRepository[Notification]):
    """Repository for persisted notifications."""

    model = Notification
    default_order = Notification.id.desc()

    async def list_for_user(self, user_id: int, *, unread_only: bool = False, limit: int = 100) -> List[Notification]:
        filters = [Notification.user_id == user_id]
        if unread_only:
            filters.append(Notification.is_read.is_(False))
        return await self.list(limit=limit, offset=0, filters=filters)

    async def count_unread(self, user_id: int) -> int:
        return await self.count(filters=[Notification.user_id == user_id, Notification.is_read.is_(False)])

    async def exists_since(self, user_id: int, type_: str, subject: str, since: datetime) -> bool:
        stmt = select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.type == type_,
            Notification.subject == subject,
            Notification.created_at >= since,
        )
        result = await self.execute(stmt)
        return int(result.scalar_one()) > 0

    async def mark_read(self, user_id: int, notification_id: Optional[int] = None) -> int:
        stmt = (
            update(Notification)
            .where(Notification.user_id == user_id, Notification.is_read.is_(False))
            .values(is_read=True, read_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        if notification_id is not None:
            stmt = stmt.where(Notification.id == notification_id)
        result = await self.execute(stmt)
        return int(result.rowcount or 0)

    async def prune(self, user_id: int, keep: int) -> None:
        """Delete the user's notifications beyond the newest `keep` rows."""
        keep_ids = (
            select(Notification.id)
            .where(Notification.user_id == user_id)
            .order_by(Notification.id.desc())
            .limit(keep)
        )
        keep_list = list((await self.execute(keep_ids)).scalars())
        if not keep_list:
            return
        await self.execute(
            delete(Notification)
            .where(Notification.user_id == user_id, Notification.id.not_in(keep_list))
            .execution_options(synchronize_session=False)
        )


class NotificationPreferenceRepository(BaseRepository):
    """Repository for per-user notification preferences."""

    async def get_for_user(self, user_id: int) -> Optional[NotificationPreference]:
        stmt = select(NotificationPreference).where(NotificationPreference.user_id == user_id)
        return await self.scalar_one_or_none(stmt)

    async def get_or_create(self, user_id: int) -> NotificationPreference:
        pref = await self.get_for_user(user_id)
        if pref is None:
            pref = NotificationPreference(user_id=user_id)
            await self.add(pref)
            await self.flush()
        return pref
