from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.catalog import Product, Unit
from src.repositories.catalog import ProductRepository, UnitConversionRepository, UnitRepository
from src.repositories.inventory import InventoryItemRepository
from src.services.base import BaseService, DomainValidationError, NotFoundError, money, to_decimal

logger = logging.getLogger(__name__)

QTY = Decimal("0.000001")


class UnitConversionError(DomainValidationError):
    """No conversion path between two units."""

    error_type = "unit_conversion_error"


# PUBLIC_INTERFACE
def convert_via_base(quantity: Any, from_factor: Any, to_factor: Any) -> Decimal:
    """Convert through a shared base unit: qty * from_factor / to_factor."""
    to_f = to_decimal(to_factor)
    if to_f == 0:
        raise UnitConversionError("Conversion factor of the target unit is zero")
    return (to_decimal(quantity) * to_decimal(from_factor) / to_f).quantize(QTY, rounding=ROUND_HALF_UP)


# PUBLIC_INTERFACE
def compute_margin(price: Any, cost: Any) -> Decimal:
    """Gross margin percentage (price - cost) / price * 100; zero for free items."""
    p = to_decimal(price)
    if p <= 0:
        return Decimal("0.00")
    return money((p - to_decimal(cost)) / p * 100)


class CatalogService(BaseService):
    """Unit conversion and product costing."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.unit_repo = UnitRepository(session)
        self.conversion_repo = UnitConversionRepository(session)
        self.product_repo = ProductRepository(session)
        self.item_repo = InventoryItemRepository(session)

    async def _unit(self, symbol: str) -> Unit:
        unit = await self.unit_repo.get_by_symbol(symbol)
        if unit is None:
            raise UnitConversionError(f"Unknown unit '{symbol}'")
        return unit

    # PUBLIC_INTERFACE
    async def convert(self, quantity: Any, from_symbol: str, to_symbol: str) -> Decimal:
        """
        Convert a quantity between units.

        Tries, in order: identical units, a shared base unit, an explicit
        conversion row, then the inverse of an explicit row.
        """
        qty = to_decimal(quantity)
        if from_symbol.strip().lower() == to_symbol.strip().lower():
            return qty
        src_unit = await self._unit(from_symbol)
        dst_unit = await self._unit(to_symbol)
        if src_unit.id == dst_unit.id:
            return qty
        if src_unit.base_unit and dst_unit.base_unit and src_unit.base_unit.lower() == dst_unit.base_unit.lower():
            return convert_via_base(qty, src_unit.conversion_factor, dst_unit.conversion_factor)

        direct = await self.conversion_repo.find(src_unit.id, dst_unit.id)
        if direct is not None:
            return (qty * to_decimal(direct.conversion_factor)).quantize(QTY, rounding=ROUND_HALF_UP)
        inverse = await self.conversion_repo.find(dst_unit.id, src_unit.id)
        if inverse is not None and to_decimal(inverse.conversion_factor) != 0:
            return (qty / to_decimal(inverse.conversion_factor)).quantize(QTY, rounding=ROUND_HALF_UP)

        raise UnitConversionError(f"No conversion from '{from_symbol}' to '{to_symbol}'")

    async def _product(self, product_id: int) -> Product:
        product = await self.product_repo.get(product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    # PUBLIC_INTERFACE
    async def calculate_cost(self, product_id: int) -> dict[str, Any]:
        """
        Cost one unit of a product from its ingredients.

        Each ingredient quantity is converted to the inventory item's unit and
        priced at the item's cost per unit.
        """
        product = await self._product(product_id)
        lines: list[dict[str, Any]] = []
        total = Decimal("0")
        for ing in product.ingredients:
            item = await self.item_repo.get(ing.inventory_item_id)
            if item is None:
                raise NotFoundError(f"Inventory item {ing.inventory_item_id} not found")
            qty = await self.convert(ing.quantity, ing.unit, item.unit)
            line_cost = qty * to_decimal(item.cost_per_unit)
            total += line_cost
            lines.append(
                {
                    "inventory_item_id": item.id,
                    "name": item.name,
                    "quantity": to_decimal(ing.quantity),
                    "unit": ing.unit,
                    "converted_quantity": qty,
                    "item_unit": item.unit,
                    "cost_per_unit": to_decimal(item.cost_per_unit),
                    "cost": money(line_cost),
                }
            )
        cost = money(total)
        return {
            "product_id": product.id,
            "price": money(product.price),
            "cost": cost,
            "margin": compute_margin(product.price, cost),
            "ingredients": lines,
        }

    # PUBLIC_INTERFACE
    async def update_cost(self, product_id: int) -> Product:
        """Persist the calculated cost and resulting margin on the product."""
        result = await self.calculate_cost(product_id)
        product = await self._product(product_id)
        logger.info("Product %s cost updated to %s", product_id, result["cost"])
        return await self.product_repo.update(product, {"cost": result["cost"], "margin": result["margin"]})

    # PUBLIC_INTERFACE
    async def save_product(
        self, values: dict[str, Any], ingredients: Optional[list[dict[str, Any]]], product_id: Optional[int] = None
    ) -> Product:
        """Create or update a product; a given ingredient list replaces the existing one."""
        data = dict(values)
        if "price" in data or "cost" in data:
            price = data.get("price")
            cost = data.get("cost")
            if product_id is not None:
                current = await self._product(product_id)
                price = current.price if price is None else price
                cost = current.cost if "cost" not in data else cost
            if cost is not None and price is not None:
                data["margin"] = compute_margin(price, cost)

        if product_id is None:
            product = await self.product_repo.create(data, commit=False)
        else:
            product = await self._product(product_id)
            await self.product_repo.update(product, data, commit=False)
        if ingredients is not None:
            for ing in ingredients:
                if await self.item_repo.get(ing["inventory_item_id"]) is None:
                    raise NotFoundError(f"Inventory item {ing['inventory_item_id']} not found")
            await self.product_repo.replace_ingredients(product.id, ingredients)
        await self.session.commit()
        return await self._product(product.id)
