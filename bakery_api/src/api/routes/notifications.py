from __future__ import annotations

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import get_current_active_user
from src.db.models.security import User
from src.db.session import get_async_session
from src.schemas.common import MessageResponse
from src.schemas.system import (
    NotificationList,
    NotificationRead,
    NotificationRules,
    PushSubscription,
    TestNotification,
)
from src.services.notifications import NotificationService

router = APIRouter(prefix="/notifications", tags=["Notifications"])


# PUBLIC_INTERFACE
@router.get("", response_model=NotificationList, summary="My notifications", description="Newest first.")
async def list_notifications(
    unread_only: bool = Query(False),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> NotificationList:
    items, unread = await NotificationService(session).list_for_user(user.id, unread_only=unread_only)
    return NotificationList(items=[NotificationRead.model_validate(n) for n in items], unread_count=unread)


# PUBLIC_INTERFACE
@router.put("/read-all", response_model=MessageResponse, summary="Mark all notifications read")
async def mark_all_read(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    count = await NotificationService(session).mark_all_read(user.id)
    return MessageResponse(message=f"{count} notifications marked as read", details={"count": count})


# PUBLIC_INTERFACE
@router.put("/{notification_id}/read", response_model=MessageResponse, summary="Mark notification read")
async def mark_read(
    notification_id: int = Path(...),
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await NotificationService(session).mark_read(user.id, notification_id)
    return MessageResponse(message="Notification marked as read")


# PUBLIC_INTERFACE
@router.get("/rules", response_model=NotificationRules, summary="My notification rules")
async def get_rules(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> NotificationRules:
    return NotificationRules(rules=await NotificationService(session).get_rules(user.id))


# PUBLIC_INTERFACE
@router.put(
    "/rules",
    response_model=NotificationRules,
    summary="Save notification rules",
    description="Types missing from the payload keep their defaults.",
)
async def save_rules(
    payload: NotificationRules,
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> NotificationRules:
    rules = {k: v.model_dump() for k, v in payload.rules.items()}
    return NotificationRules(rules=await NotificationService(session).save_rules(user.id, rules))


# PUBLIC_INTERFACE
@router.post("/subscription", response_model=MessageResponse, summary="Register push subscription")
async def subscribe(
    payload: PushSubscription,
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    await NotificationService(session).save_subscription(user.id, payload.model_dump())
    return MessageResponse(message="Subscription saved")


# PUBLIC_INTERFACE
@router.delete("/subscription", status_code=status.HTTP_204_NO_CONTENT, summary="Remove push subscription")
async def unsubscribe(
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    await NotificationService(session).save_subscription(user.id, None)


# PUBLIC_INTERFACE
@router.post("/test", response_model=MessageResponse, summary="Send a test notification to myself")
async def send_test(
    payload: TestNotification,
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> MessageResponse:
    n = await NotificationService(session).notify_user(
        user.id, type_="system", title=payload.title, message=payload.message, priority="low"
    )
    if n is None:
        return MessageResponse(message="System notifications are disabled in your rules")
    return MessageResponse(message="Test notification sent", details={"id": n.id})
