from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from .common import ORMModel


class PurchaseItemIn(BaseModel):
    """Purchase line; linked inventory items are restocked."""
    inventory_item_id: Optional[int] = None
    quantity: float = Field(..., gt=0)
    unit: Optional[str] = None
    unit_price: float = Field(..., ge=0)


class PurchaseItemRead(BaseModel):
    id: int
    inventory_item_id: Optional[int] = None
    quantity: float
    unit: Optional[str] = None
    unit_price: float
    total_price: float

    class Config:
        from_attributes = True


class PurchaseRead(ORMModel):
    """Purchase read model."""
    party_id: Optional[int] = Field(None, description="Supplier party")
    supplier_name: str = Field(..., description="Supplier name")
    invoice_number: Optional[str] = Field(None)
    total_amount: float = Field(..., description="Sum of line totals")
    payment_method: Optional[str] = Field(None)
    status: str = Field(...)
    purchase_date: date = Field(...)
    notes: Optional[str] = Field(None)
    created_by: Optional[int] = Field(None)
    items: List[PurchaseItemRead] = Field(default_factory=list)


class PurchaseCreate(BaseModel):
    """Create purchase payload."""
    party_id: Optional[int] = None
    supplier_name: Optional[str] = None
    invoice_number: Optional[str] = None
    payment_method: Optional[str] = None
    status: str = "completed"
    purchase_date: date
    notes: Optional[str] = None
    items: List[PurchaseItemIn] = Field(..., min_length=1)
