from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.db.base import Base, IntPkMixin, TimestampMixin


class LedgerTransaction(IntPkMixin, TimestampMixin, Base):
    """
    Debit/credit posting against a customer or a party.

    `running_balance` is derived: it is rewritten by replaying the entity's
    history whenever any posting for that entity changes.
    """
    __tablename__ = "ledger_transactions"
    __table_args__ = (
        Index("ix_ledger_transactions_entity", "entity_type", "entity_id", "transaction_date"),
    )

    entity_type: Mapped[str] = mapped_column(Text, nullable=False)  # customer | party
    entity_id: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    reference_number: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    debit_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    credit_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    running_balance: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False, default=Decimal("0"))
    # sale | purchase | payment_received | payment_sent | adjustment
    transaction_type: Mapped[str] = mapped_column(Text, nullable=False)
    related_order_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("orders.id", ondelete="SET NULL"), nullable=True
    )
    related_purchase_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("purchases.id", ondelete="SET NULL"), nullable=True
    )
    payment_method: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
