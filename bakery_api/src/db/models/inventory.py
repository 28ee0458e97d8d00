from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.db.base import Base, IntPkMixin, TimestampMixin


class InventoryCategory(IntPkMixin, TimestampMixin, Base):
    """Grouping for raw materials and packaging."""
    __tablename__ = "inventory_categories"

    name: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)


class InventoryItem(IntPkMixin, TimestampMixin, Base):
    """Stocked raw material or packaging item."""
    __tablename__ = "inventory_items"

    inv_code: Mapped[Optional[str]] = mapped_column(Text, nullable=True, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    category_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("inventory_categories.id", ondelete="SET NULL"), nullable=True
    )
    unit: Mapped[str] = mapped_column(Text, nullable=False)
    opening_stock: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    current_stock: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    min_level: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False, default=Decimal("0"))
    cost_per_unit: Mapped[Decimal] = mapped_column(Numeric(12, 4), nullable=False, default=Decimal("0"))
    supplier: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_restocked: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class InventoryTransaction(IntPkMixin, TimestampMixin, Base):
    """Stock movement: in adds, out subtracts, adjustment applies a signed quantity."""
    __tablename__ = "inventory_transactions"

    inventory_item_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("inventory_items.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(Text, nullable=False)  # in | out | adjustment
    quantity: Mapped[Decimal] = mapped_column(Numeric(18, 3), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(Text, nullable=True)  # e.g. PUR-12 / ORD-...
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
