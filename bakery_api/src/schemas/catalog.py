from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .common import ORMModel, PartialUpdate


class CategoryRead(ORMModel):
    """Product category."""
    name: str
    description: Optional[str] = None


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None


class CategoryUpdate(PartialUpdate):
    NOT_NULL = ("name",)

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None


class IngredientIn(BaseModel):
    """Recipe line: quantity of an inventory item per product unit."""
    inventory_item_id: int
    quantity: float = Field(..., gt=0)
    unit: str


class IngredientRead(BaseModel):
    id: int
    inventory_item_id: int
    quantity: float
    unit: str

    class Config:
        from_attributes = True


class ProductRead(ORMModel):
    """Sellable product with its recipe."""
    name: str
    description: Optional[str] = None
    sku: Optional[str] = None
    category_id: Optional[int] = None
    price: float
    cost: Optional[float] = None
    margin: Optional[float] = None
    unit: str
    image_url: Optional[str] = None
    is_active: bool
    ingredients: List[IngredientRead] = Field(default_factory=list)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    sku: Optional[str] = None
    category_id: Optional[int] = None
    price: float = Field(..., ge=0)
    cost: Optional[float] = Field(None, ge=0)
    unit: str = "pcs"
    image_url: Optional[str] = None
    is_active: bool = True
    ingredients: Optional[List[IngredientIn]] = None


class ProductUpdate(PartialUpdate):
    """Partial update; a supplied ingredient list replaces the recipe."""
    NOT_NULL = ("name", "price", "unit", "is_active")

    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    sku: Optional[str] = None
    category_id: Optional[int] = None
    price: Optional[float] = Field(None, ge=0)
    cost: Optional[float] = Field(None, ge=0)
    unit: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None
    ingredients: Optional[List[IngredientIn]] = None


class CostLine(BaseModel):
    inventory_item_id: int
    name: str
    quantity: float
    unit: str
    converted_quantity: float
    item_unit: str
    cost_per_unit: float
    cost: float


class ProductCost(BaseModel):
    """Recipe cost breakdown."""
    product_id: int
    price: float
    cost: float
    margin: Optional[float] = None
    ingredients: List[CostLine] = Field(default_factory=list)


class UnitRead(ORMModel):
    name: str
    abbreviation: str
    type: str
    base_unit: Optional[str] = None
    conversion_factor: float
    is_active: bool


class UnitCreate(BaseModel):
    name: str = Field(..., min_length=1)
    abbreviation: str = Field(..., min_length=1)
    type: str = Field(..., description="weight | volume | count")
    base_unit: Optional[str] = None
    conversion_factor: float = Field(1, gt=0)
    is_active: bool = True


class UnitUpdate(PartialUpdate):
    NOT_NULL = ("name", "abbreviation", "type", "conversion_factor", "is_active")

    name: Optional[str] = None
    abbreviation: Optional[str] = None
    type: Optional[str] = None
    base_unit: Optional[str] = None
    conversion_factor: Optional[float] = Field(None, gt=0)
    is_active: Optional[bool] = None


class UnitConversionRead(ORMModel):
    from_unit_id: int
    to_unit_id: int
    conversion_factor: float
    is_active: bool


class UnitConversionCreate(BaseModel):
    from_unit_id: int
    to_unit_id: int
    conversion_factor: float = Field(..., gt=0)
    is_active: bool = True


class UnitConversionUpdate(PartialUpdate):
    NOT_NULL = ("conversion_factor", "is_active")

    conversion_factor: Optional[float] = Field(None, gt=0)
    is_active: Optional[bool] = None


class ConvertRequest(BaseModel):
    quantity: float
    from_unit: str
    to_unit: str


class ConvertResult(BaseModel):
    quantity: float
    from_unit: str
    to_unit: str
    result: float
