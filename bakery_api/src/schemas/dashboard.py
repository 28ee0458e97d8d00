from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field


class DashboardStats(BaseModel):
    """Headline numbers for the dashboard."""
    total_products: int
    total_orders: int
    total_revenue: float = Field(..., description="Revenue of non-cancelled orders")
    low_stock_items: int
    pending_orders: int
    todays_orders: int
    todays_production: int


class DailySales(BaseModel):
    date: str
    revenue: float
    orders: int


class SalesAnalytics(BaseModel):
    start_date: str
    end_date: str
    total_sales: float
    order_count: int
    average_order_value: float
    daily: List[DailySales] = Field(default_factory=list)
