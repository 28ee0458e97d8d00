from __future__ import annotations

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.db.base import Base, IntPkMixin, TimestampMixin


class Category(IntPkMixin, TimestampMixin, Base):
    """Product category shown on the storefront and in reports."""
    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class Product(IntPkMixin, TimestampMixin, Base):
    """Sellable product; cost is derived from its ingredients."""
    __tablename__ = "products"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    sku: Mapped[Optional[str]] = mapped_column(Text, nullable=True, unique=True)
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))
    cost: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    margin: Mapped[Optional[Decimal]] = mapped_column(Numeric(7, 2), nullable=True)
    unit: Mapped[str] = mapped_column(Text, nullable=False, default="pcs", server_default="pcs")
    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")

    ingredients: Mapped[list["ProductIngredient"]] = relationship(
        "ProductIngredient",
        back_populates="product",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class ProductIngredient(IntPkMixin, TimestampMixin, Base):
    """Quantity of an inventory item consumed by one unit of a product."""
    __tablename__ = "product_ingredients"

    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    inventory_item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    unit: Mapped[str] = mapped_column(Text, nullable=False)

    product: Mapped["Product"] = relationship("Product", back_populates="ingredients")


class Unit(IntPkMixin, TimestampMixin, Base):
    """Measurement unit; units sharing a base_unit convert via conversion_factor."""
    __tablename__ = "units"

    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    abbreviation: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    type: Mapped[str] = mapped_column(Text, nullable=False)  # weight | volume | count
    base_unit: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    conversion_factor: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("1"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")


class UnitConversion(IntPkMixin, TimestampMixin, Base):
    """Explicit conversion between two units (quantity_to = quantity_from * factor)."""
    __tablename__ = "unit_conversions"
    __table_args__ = (
        UniqueConstraint("from_unit_id", "to_unit_id", name="uq_unit_conversions_from_to"),
    )

    from_unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False
    )
    to_unit_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("units.id", ondelete="CASCADE"), nullable=False
    )
    conversion_factor: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="true")
