from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from .common import ORMModel, PartialUpdate


class OrderItemIn(BaseModel):
    """Order line; unit price defaults to the product price."""
    product_id: Optional[int] = None
    quantity: float = Field(..., gt=0)
    unit: Optional[str] = None
    unit_price: Optional[float] = Field(None, ge=0)


class OrderItemRead(BaseModel):
    id: int
    product_id: Optional[int] = None
    quantity: float
    unit: Optional[str] = None
    unit_price: float
    total_price: float

    class Config:
        from_attributes = True


class OrderRead(ORMModel):
    """Order with its lines."""
    order_number: str
    customer_id: Optional[int] = None
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    total_amount: float
    status: str
    payment_method: Optional[str] = None
    delivery_date: Optional[date] = None
    notes: Optional[str] = None
    source: str
    created_by: Optional[int] = None
    items: List[OrderItemRead] = Field(default_factory=list)


class OrderCreate(BaseModel):
    """Staff order entry; the total is computed from the items."""
    customer_id: Optional[int] = None
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    status: Optional[str] = "pending"
    payment_method: Optional[str] = None
    delivery_date: Optional[date] = None
    notes: Optional[str] = None
    items: List[OrderItemIn] = Field(..., min_length=1)


class OrderUpdate(PartialUpdate):
    """Partial update; a supplied item list replaces the lines and reprices the order."""
    NOT_NULL = ("customer_name", "status")

    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    status: Optional[str] = None
    payment_method: Optional[str] = None
    delivery_date: Optional[date] = None
    notes: Optional[str] = None
    items: Optional[List[OrderItemIn]] = None


class PublicOrderCreate(BaseModel):
    """Storefront order placed without an account."""
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    customer_phone: str = Field(..., min_length=1)
    delivery_date: date
    delivery_address: str = Field(..., min_length=1)
    special_instructions: Optional[str] = None
    payment_method: Optional[str] = None
    items: List[OrderItemIn] = Field(..., min_length=1)
    attachments: Optional[List[str]] = Field(None, description="Uploaded file URLs (e.g. cake designs)")


class PublicOrderReceipt(BaseModel):
    order_number: str
    total_amount: float
    status: str
    message: str = "Order received"
