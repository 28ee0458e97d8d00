from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from .common import ORMModel, PartialUpdate


class ExpenseRead(ORMModel):
    description: str
    amount: float
    category: str
    expense_date: date
    payment_method: Optional[str] = None
    vendor: Optional[str] = None
    receipt_url: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[int] = None


class ExpenseCreate(BaseModel):
    description: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    category: str
    expense_date: date
    payment_method: Optional[str] = None
    vendor: Optional[str] = None
    receipt_url: Optional[str] = None
    notes: Optional[str] = None


class ExpenseUpdate(PartialUpdate):
    NOT_NULL = ("description", "amount", "category", "expense_date")

    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[str] = None
    expense_date: Optional[date] = None
    payment_method: Optional[str] = None
    vendor: Optional[str] = None
    receipt_url: Optional[str] = None
    notes: Optional[str] = None


class AssetRead(ORMModel):
    name: str
    category: str
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = None
    current_value: Optional[float] = None
    location: Optional[str] = None
    condition: str
    description: Optional[str] = None
    is_active: bool


class AssetCreate(BaseModel):
    name: str = Field(..., min_length=1)
    category: str
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    current_value: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None
    condition: str = "good"
    description: Optional[str] = None
    is_active: bool = True


class AssetUpdate(PartialUpdate):
    NOT_NULL = ("name", "category", "condition", "is_active")

    name: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(None, ge=0)
    current_value: Optional[float] = Field(None, ge=0)
    location: Optional[str] = None
    condition: Optional[str] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None
