from __future__ import annotations

from datetime import date, time
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .common import ORMModel, PartialUpdate

ScheduleStatus = Literal["pending", "in_progress", "completed", "cancelled"]
Priority = Literal["low", "medium", "high"]


class ProductionScheduleRead(ORMModel):
    """Production schedule entry."""
    product_id: int = Field(..., description="Product to bake")
    quantity: float = Field(..., description="Quantity to produce")
    target_quantity: Optional[float] = Field(None)
    target_amount: Optional[float] = Field(None)
    target_packets: Optional[int] = Field(None)
    unit: str = Field(..., description="Quantity unit")
    priority: str = Field(..., description="low | medium | high")
    scheduled_date: date = Field(..., description="Production day")
    start_time: Optional[time] = Field(None)
    end_time: Optional[time] = Field(None)
    status: str = Field(..., description="pending | in_progress | completed | cancelled")
    assigned_to: Optional[int] = Field(None, description="Assigned user")
    notes: Optional[str] = Field(None)


class ProductionScheduleCreate(BaseModel):
    """Create production schedule payload."""
    product_id: int
    quantity: float = Field(..., gt=0)
    target_quantity: Optional[float] = Field(None, ge=0)
    target_amount: Optional[float] = Field(None, ge=0)
    target_packets: Optional[int] = Field(None, ge=0)
    unit: str = "kg"
    priority: Priority = "medium"
    scheduled_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    status: ScheduleStatus = "pending"
    assigned_to: Optional[int] = None
    notes: Optional[str] = None


class ProductionScheduleUpdate(PartialUpdate):
    NOT_NULL = ("product_id", "quantity", "unit", "priority", "scheduled_date", "status")

    product_id: Optional[int] = None
    quantity: Optional[float] = Field(None, gt=0)
    target_quantity: Optional[float] = Field(None, ge=0)
    target_amount: Optional[float] = Field(None, ge=0)
    target_packets: Optional[int] = Field(None, ge=0)
    unit: Optional[str] = None
    priority: Optional[Priority] = None
    scheduled_date: Optional[date] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    status: Optional[ScheduleStatus] = None
    assigned_to: Optional[int] = None
    notes: Optional[str] = None
