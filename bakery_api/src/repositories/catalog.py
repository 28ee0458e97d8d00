from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete, or_, select

from src.db.models.catalog import Category, Product, ProductIngredient, Unit, UnitConversion
from .base import CrudRepository


class CategoryRepository(CrudRepository[Category]):
    """Repository for product categories."""

    model = Category
    default_order = Category.name


class ProductRepository(CrudRepository[Product]):
    """Repository for products and their ingredient lists."""

    model = Product
    default_order = Product.name

    async def list_products(
        self, *, category_id: Optional[int] = None, active_only: bool = False, limit: int = 100, offset: int = 0
    ) -> List[Product]:
        filters = []
        if category_id is not None:
            filters.append(Product.category_id == category_id)
        if active_only:
            filters.append(Product.is_active.is_(True))
        return await self.list(limit=limit, offset=offset, filters=filters)

    async def replace_ingredients(self, product_id: int, ingredients: list[dict]) -> None:
        await self.execute(delete(ProductIngredient).where(ProductIngredient.product_id == product_id))
        await self.add_all(ProductIngredient(product_id=product_id, **ing) for ing in ingredients)
        await self.flush()


class UnitRepository(CrudRepository[Unit]):
    """Repository for measurement units."""

    model = Unit
    default_order = Unit.name

    async def get_by_symbol(self, symbol: str) -> Optional[Unit]:
        """Find a unit by abbreviation or name (case-insensitive)."""
        lowered = symbol.lower()
        stmt = select(Unit).where(
            or_(Unit.abbreviation.ilike(lowered), Unit.name.ilike(lowered))
        )
        res = await self.scalars(stmt)
        return res.first()


class UnitConversionRepository(CrudRepository[UnitConversion]):
    """Repository for explicit unit conversions."""

    model = UnitConversion

    async def find(self, from_unit_id: int, to_unit_id: int) -> Optional[UnitConversion]:
        stmt = select(UnitConversion).where(
            UnitConversion.from_unit_id == from_unit_id,
            UnitConversion.to_unit_id == to_unit_id,
            UnitConversion.is_active.is_(True),
        )
        return await self.scalar_one_or_none(stmt)
