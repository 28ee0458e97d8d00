from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from .common import ORMModel, PartialUpdate


class InventoryCategoryRead(ORMModel):
    """Read model for an inventory category."""
    name: str = Field(..., description="Category name")
    description: Optional[str] = Field(None, description="Description")


class InventoryCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class InventoryCategoryUpdate(PartialUpdate):
    NOT_NULL = ("name",)

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class InventoryItemRead(ORMModel):
    """Read model for a stocked item (ingredient or packaging)."""
    inv_code: Optional[str] = Field(None, description="Inventory code")
    name: str = Field(..., description="Item name")
    category_id: Optional[int] = Field(None, description="Inventory category ID")
    unit: str = Field(..., description="Stock unit")
    opening_stock: float = Field(..., description="Opening stock")
    current_stock: float = Field(..., description="Quantity on hand")
    min_level: float = Field(..., description="Low stock threshold")
    cost_per_unit: float = Field(..., description="Cost per stock unit")
    supplier: Optional[str] = Field(None)
    notes: Optional[str] = Field(None)
    last_restocked: Optional[datetime] = Field(None, description="Last inbound movement")


class InventoryItemCreate(BaseModel):
    """Create payload; current stock defaults to the opening stock."""
    inv_code: Optional[str] = None
    name: str = Field(..., min_length=1)
    category_id: Optional[int] = None
    unit: str = Field(..., min_length=1)
    opening_stock: float = Field(0, ge=0)
    current_stock: Optional[float] = Field(None, ge=0)
    min_level: float = Field(0, ge=0)
    cost_per_unit: float = Field(0, ge=0)
    supplier: Optional[str] = None
    notes: Optional[str] = None


class InventoryItemUpdate(PartialUpdate):
    """Item fields; stock levels change through transactions."""
    NOT_NULL = ("name", "unit", "min_level", "cost_per_unit")

    inv_code: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1)
    category_id: Optional[int] = None
    unit: Optional[str] = None
    min_level: Optional[float] = Field(None, ge=0)
    cost_per_unit: Optional[float] = Field(None, ge=0)
    supplier: Optional[str] = None
    notes: Optional[str] = None


class InventoryTransactionRead(ORMModel):
    """Read model for inventory transaction."""
    inventory_item_id: int = Field(..., description="Inventory item ID")
    type: str = Field(..., description="in | out | adjustment")
    quantity: float = Field(..., description="Quantity moved (signed for adjustments)")
    reason: Optional[str] = Field(None, description="Reason")
    reference: Optional[str] = Field(None, description="Reference such as PUR-12")
    created_by: Optional[int] = Field(None)


class InventoryTransactionCreate(BaseModel):
    inventory_item_id: int
    type: Literal["in", "out", "adjustment"]
    quantity: float
    reason: Optional[str] = None
    reference: Optional[str] = None
    cost_per_unit: Optional[float] = Field(None, ge=0, description="Updates the item cost on inbound movements")
