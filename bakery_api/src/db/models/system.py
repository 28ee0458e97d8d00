from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.db.base import Base, IntPkMixin, JSONType, TimestampMixin


class Setting(IntPkMixin, TimestampMixin, Base):
    """Key/value application setting (branding, currency, ...)."""
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    type: Mapped[str] = mapped_column(Text, nullable=False, default="string")  # string | number | boolean | json


class Notification(IntPkMixin, TimestampMixin, Base):
    """Notification addressed to a single user."""
    __tablename__ = "notifications"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)  # new_order | low_stock | production_reminder | system
    title: Mapped[str] = mapped_column(Text, nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    priority: Mapped[str] = mapped_column(Text, nullable=False, default="medium")  # low | medium | high
    # Subject key used for daily de-duplication, e.g. "inventory:12".
    subject: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    data: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")
    read_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class NotificationPreference(IntPkMixin, TimestampMixin, Base):
    """Per-user notification rules and push subscription."""
    __tablename__ = "notification_preferences"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    rules: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
    push_subscription: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)
