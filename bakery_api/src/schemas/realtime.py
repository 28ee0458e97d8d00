from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class WsEnvelope(BaseModel):
    """Envelope for WebSocket messages."""
    type: str = Field(..., description="Message type (e.g., 'notification.created', 'dashboard.order.created').")
    payload: Dict[str, Any] = Field(default_factory=dict, description="Message payload.")
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Timestamp (UTC).")
    user_id: Optional[int] = Field(default=None, description="Recipient user id, if applicable.")


class DashboardEvent(BaseModel):
    """Change notice for dashboard clients; they refetch the affected widgets."""
    event: str = Field(..., description="Event type (e.g., 'order.created', 'inventory.changed').")
    details: Dict[str, Any] = Field(default_factory=dict, description="Event details.")
    at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), description="Event timestamp (UTC).")
