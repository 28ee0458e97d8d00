from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SettingsUpdate(BaseModel):
    """Settings to upsert, keyed by setting name."""
    settings: Dict[str, Any] = Field(..., description="Key/value pairs")


class NotificationRead(BaseModel):
    id: int
    type: str
    title: str
    message: str
    priority: str
    data: Optional[Dict[str, Any]] = None
    is_read: bool
    read_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class NotificationList(BaseModel):
    items: List[NotificationRead] = Field(default_factory=list)
    unread_count: int = 0


class NotificationRule(BaseModel):
    enabled: bool = True
    daily_limit: bool = False


class NotificationRules(BaseModel):
    """Per-type delivery rules."""
    rules: Dict[str, NotificationRule] = Field(default_factory=dict)


class PushSubscription(BaseModel):
    """Browser push subscription as produced by the Push API."""
    endpoint: str
    keys: Dict[str, str] = Field(default_factory=dict)
    expirationTime: Optional[float] = None


class TestNotification(BaseModel):
    title: str = "Test notification"
    message: str = "Notifications are working."


class AuditLogRead(BaseModel):
    id: int
    user_id: Optional[int] = None
    user_email: Optional[str] = None
    action: str
    resource: str
    resource_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    old_values: Optional[Dict[str, Any]] = None
    new_values: Optional[Dict[str, Any]] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    status: str
    correlation_id: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True


class SecurityMetrics(BaseModel):
    """Security counters for a recent window."""
    period_hours: int
    failed_logins: int
    failed_operations: int
    active_users: int


class UploadResult(BaseModel):
    url: str = Field(..., description="Public URL of the stored file")
    filename: str
    content_type: str
    size: int
