from __future__ import annotations

from src.db.models.finance import Asset, Expense
from .base import CrudRepository


class ExpenseRepository(CrudRepository[Expense]):
    """Repository for expenses."""

    model = Expense
    default_order = Expense.expense_date.desc()


class AssetRepository(CrudRepository[Asset]):
    """Repository for assets."""

    model = Asset
    default_order = Asset.name
