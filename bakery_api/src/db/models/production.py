from __future__ import annotations

from datetime import date, time
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Integer, Numeric, Text, Time
from sqlalchemy.orm import Mapped, mapped_column

from src.db.base import Base, IntPkMixin, TimestampMixin


class ProductionScheduleItem(IntPkMixin, TimestampMixin, Base):
    """Planned production run of a product on a given day."""
    __tablename__ = "production_schedule"

    product_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, 3), nullable=False)
    target_quantity: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 3), nullable=True)
    target_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)
    target_packets: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    unit: Mapped[str] = mapped_column(Text, nullable=False, default="kg", server_default="kg")
    priority: Mapped[str] = mapped_column(Text, nullable=False, default="medium", server_default="medium")
    scheduled_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    end_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    # pending | in_progress | completed | cancelled
    status: Mapped[str] = mapped_column(Text, nullable=False, default="pending", server_default="pending")
    assigned_to: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
