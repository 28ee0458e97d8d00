from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timezone
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.settings import get_app_settings
from src.db.models.inventory import InventoryItem
from src.db.models.production import ProductionScheduleItem
from src.db.models.sales import Order
from src.db.models.system import Notification
from src.db.session import session_scope
from src.repositories.inventory import InventoryItemRepository
from src.repositories.security import UserRepository
from src.repositories.system import NotificationPreferenceRepository, NotificationRepository
from src.services.base import BaseService, NotFoundError, to_decimal
from src.services.realtime import broadcast_manager

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = ("new_order", "low_stock", "production_reminder", "system")
RECIPIENT_ROLES = ["super_admin", "admin", "manager"]
DEFAULT_RULES: dict[str, dict[str, bool]] = {
    "new_order": {"enabled": True, "daily_limit": False},
    "low_stock": {"enabled": True, "daily_limit": True},
    "production_reminder": {"enabled": True, "daily_limit": True},
    "system": {"enabled": True, "daily_limit": False},
}
HIGH_PRIORITY_ORDER_TOTAL = Decimal("500")
REVIEW_ORDER_TOTAL = Decimal("1000")


# PUBLIC_INTERFACE
def merge_rules(saved: Optional[dict[str, Any]]) -> dict[str, dict[str, bool]]:
    """Overlay a user's saved rules on the defaults; unknown types are ignored."""
    rules = {k: dict(v) for k, v in DEFAULT_RULES.items()}
    for type_, rule in (saved or {}).items():
        if type_ in rules and isinstance(rule, dict):
            for key in ("enabled", "daily_limit"):
                if key in rule:
                    rules[type_][key] = bool(rule[key])
    return rules


# PUBLIC_INTERFACE
def order_alert_level(total: Any, has_attachments: bool = False) -> tuple[str, bool]:
    """Return (priority, requires_review) for a new order alert."""
    amount = to_decimal(total)
    priority = "high" if amount > HIGH_PRIORITY_ORDER_TOTAL else "medium"
    requires_review = has_attachments or amount > REVIEW_ORDER_TOTAL
    return priority, requires_review


def _start_of_day_utc() -> datetime:
    return datetime.combine(datetime.now(tz=timezone.utc).date(), time.min, tzinfo=timezone.utc)


def serialize_notification(n: Notification) -> dict[str, Any]:
    return {
        "id": n.id,
        "type": n.type,
        "title": n.title,
        "message": n.message,
        "priority": n.priority,
        "data": n.data or {},
        "is_read": n.is_read,
        "created_at": n.created_at.isoformat() if n.created_at else None,
    }


class NotificationService(BaseService):
    """
    Persisted per-user notifications.

    Business alerts go to active managers and administrators whose rules enable
    the alert type. Rules with a daily limit send at most one alert per subject
    (e.g. one inventory item) per UTC day.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = NotificationRepository(session)
        self.pref_repo = NotificationPreferenceRepository(session)
        self.user_repo = UserRepository(session)
        self.settings = get_app_settings()

    # PUBLIC_INTERFACE
    async def get_rules(self, user_id: int) -> dict[str, dict[str, bool]]:
        pref = await self.pref_repo.get_for_user(user_id)
        return merge_rules(pref.rules if pref else None)

    # PUBLIC_INTERFACE
    async def save_rules(self, user_id: int, rules: dict[str, Any]) -> dict[str, dict[str, bool]]:
        pref = await self.pref_repo.get_or_create(user_id)
        merged = merge_rules(rules)
        pref.rules = merged
        await self.session.commit()
        return merged

    # PUBLIC_INTERFACE
    async def save_subscription(self, user_id: int, subscription: Optional[dict[str, Any]]) -> None:
        """Store (or clear, with None) the user's browser push subscription."""
        pref = await self.pref_repo.get_or_create(user_id)
        pref.push_subscription = subscription
        await self.session.commit()

    # PUBLIC_INTERFACE
    async def list_for_user(self, user_id: int, *, unread_only: bool = False) -> tuple[list[Notification], int]:
        items = await self.repo.list_for_user(
            user_id, unread_only=unread_only, limit=self.settings.NOTIFICATION_RETENTION
        )
        return items, await self.repo.count_unread(user_id)

    # PUBLIC_INTERFACE
    async def mark_read(self, user_id: int, notification_id: int) -> None:
        n = await self.repo.get(notification_id)
        if n is None or n.user_id != user_id:
            raise NotFoundError(f"Notification {notification_id} not found")
        await self.repo.mark_read(user_id, notification_id)
        await self.session.commit()

    # PUBLIC_INTERFACE
    async def mark_all_read(self, user_id: int) -> int:
        count = await self.repo.mark_read(user_id)
        await self.session.commit()
        return count

    async def _create(
        self,
        user_id: int,
        *,
        type_: str,
        title: str,
        message: str,
        priority: str,
        data: Optional[dict[str, Any]],
        subject: Optional[str],
        rules: dict[str, dict[str, bool]],
    ) -> Optional[Notification]:
        rule = rules.get(type_, {"enabled": True, "daily_limit": False})
        if not rule["enabled"]:
            return None
        if rule["daily_limit"] and subject:
            if await self.repo.exists_since(user_id, type_, subject, _start_of_day_utc()):
                return None
        n = await self.repo.create(
            {
                "user_id": user_id,
                "type": type_,
                "title": title,
                "message": message,
                "priority": priority,
                "data": data,
                "subject": subject,
            },
            commit=False,
        )
        await self.repo.prune(user_id, self.settings.NOTIFICATION_RETENTION)
        return n

    async def _publish(self, created: list[Notification]) -> None:
        for n in created:
            try:
                await broadcast_manager.publish_notification(n.user_id, serialize_notification(n))
            except Exception:
                logger.exception("Failed to push notification %s", n.id)

    # PUBLIC_INTERFACE
    async def notify_user(
        self,
        user_id: int,
        *,
        type_: str,
        title: str,
        message: str,
        priority: str = "medium",
        data: Optional[dict[str, Any]] = None,
        subject: Optional[str] = None,
    ) -> Optional[Notification]:
        """Create a notification for one user if their rules allow it."""
        rules = await self.get_rules(user_id)
        n = await self._create(
            user_id,
            type_=type_,
            title=title,
            message=message,
            priority=priority,
            data=data,
            subject=subject,
            rules=rules,
        )
        await self.session.commit()
        if n is not None:
            await self._publish([n])
        return n

    # PUBLIC_INTERFACE
    async def notify_managers(
        self,
        *,
        type_: str,
        title: str,
        message: str,
        priority: str = "medium",
        data: Optional[dict[str, Any]] = None,
        subject: Optional[str] = None,
    ) -> list[Notification]:
        """Fan a business alert out to every active manager/administrator."""
        created: list[Notification] = []
        for user in await self.user_repo.list_active_by_roles(RECIPIENT_ROLES):
            rules = await self.get_rules(user.id)
            n = await self._create(
                user.id,
                type_=type_,
                title=title,
                message=message,
                priority=priority,
                data=data,
                subject=subject,
                rules=rules,
            )
            if n is not None:
                created.append(n)
        await self.session.commit()
        await self._publish(created)
        if created:
            logger.info("Sent %s notification to %d users", type_, len(created))
        return created

    # PUBLIC_INTERFACE
    async def notify_new_order(self, order: Order, *, has_attachments: bool = False) -> list[Notification]:
        priority, requires_review = order_alert_level(order.total_amount, has_attachments)
        return await self.notify_managers(
            type_="new_order",
            title="New order received",
            message=f"Order {order.order_number} from {order.customer_name} ({order.total_amount})",
            priority=priority,
            data={
                "order_id": order.id,
                "order_number": order.order_number,
                "total_amount": str(order.total_amount),
                "requires_review": requires_review,
                "source": order.source,
            },
            subject=f"order:{order.id}",
        )

    # PUBLIC_INTERFACE
    async def notify_low_stock(self, item: InventoryItem) -> list[Notification]:
        return await self.notify_managers(
            type_="low_stock",
            title="Low stock alert",
            message=(
                f"{item.name} is at {item.current_stock} {item.unit} "
                f"(minimum {item.min_level} {item.unit})"
            ),
            priority="high" if to_decimal(item.current_stock) <= 0 else "medium",
            data={
                "inventory_item_id": item.id,
                "current_stock": str(item.current_stock),
                "min_level": str(item.min_level),
            },
            subject=f"inventory:{item.id}",
        )

    # PUBLIC_INTERFACE
    async def notify_production_scheduled(
        self, item: ProductionScheduleItem, product_name: str
    ) -> list[Notification]:
        return await self.notify_managers(
            type_="production_reminder",
            title="Production scheduled",
            message=(
                f"{product_name}: {item.quantity} {item.unit} on {item.scheduled_date.isoformat()}"
            ),
            priority="high" if item.priority == "high" else "medium",
            data={
                "production_schedule_id": item.id,
                "product_id": item.product_id,
                "scheduled_date": item.scheduled_date.isoformat(),
            },
            subject=f"production:{item.id}",
        )

    # PUBLIC_INTERFACE
    async def check_low_stock(self) -> int:
        """Alert on every item at or below its minimum level; returns notifications sent."""
        sent = 0
        for item in await InventoryItemRepository(self.session).list_low_stock():
            sent += len(await self.notify_low_stock(item))
        return sent


# PUBLIC_INTERFACE
async def run_low_stock_monitor(interval_seconds: int) -> None:
    """
    Background loop that periodically checks stock levels.

    Runs until cancelled; errors in one pass are logged and the loop continues.
    """
    logger.info("Low stock monitor started (interval=%ss)", interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            async with session_scope() as session:
                sent = await NotificationService(session).check_low_stock()
            if sent:
                logger.info("Low stock monitor sent %d notifications", sent)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Low stock check failed")
