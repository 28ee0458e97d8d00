from __future__ import annotations

import logging
import secrets
import string
import time
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.sales import Order, OrderItem
from src.db.models.security import User
from src.repositories.catalog import ProductRepository
from src.repositories.sales import CustomerRepository, OrderRepository
from src.schemas.realtime import DashboardEvent
from src.services.base import BaseService, DomainValidationError, NotFoundError, money, to_decimal
from src.services.notifications import NotificationService
from src.services.realtime import broadcast_manager

logger = logging.getLogger(__name__)

ORDER_STATUSES = ("pending", "confirmed", "in_progress", "completed", "delivered", "cancelled")
_ALNUM = string.ascii_uppercase + string.digits


# PUBLIC_INTERFACE
def generate_order_number(prefix: str = "ORD", *, now_ms: Optional[int] = None, public: bool = False) -> str:
    """
    Build an order number from the epoch milliseconds.

    Staff orders: ORD-<ms>. Public orders: PUB-<ms>-<5 uppercase alphanumerics>.
    """
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    if public:
        suffix = "".join(secrets.choice(_ALNUM) for _ in range(5))
        return f"{prefix}-{ms}-{suffix}"
    return f"{prefix}-{ms}"


# PUBLIC_INTERFACE
def price_items(items: list[dict[str, Any]]) -> tuple[list[dict[str, Any]], Decimal]:
    """Compute line totals (quantity * unit_price) and the order total."""
    priced: list[dict[str, Any]] = []
    total = Decimal("0")
    for item in items:
        qty = to_decimal(item["quantity"])
        unit_price = money(item["unit_price"])
        if qty <= 0:
            raise DomainValidationError("Item quantity must be positive")
        line_total = money(qty * unit_price)
        total += line_total
        priced.append({**item, "quantity": qty, "unit_price": unit_price, "total_price": line_total})
    return priced, money(total)


# PUBLIC_INTERFACE
def build_public_order_notes(delivery_address: str, special_instructions: Optional[str]) -> str:
    notes = f"Delivery Address: {delivery_address}"
    if special_instructions:
        notes += f"\nSpecial Instructions: {special_instructions}"
    return notes


class OrderService(BaseService):
    """Order intake, totals and customer statistics."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.order_repo = OrderRepository(session)
        self.customer_repo = CustomerRepository(session)
        self.product_repo = ProductRepository(session)

    async def _unique_number(self, prefix: str, public: bool) -> str:
        ms = int(time.time() * 1000)
        while True:
            number = generate_order_number(prefix, now_ms=ms, public=public)
            exists = await self.order_repo.scalar_one_or_none(
                select(Order.id).where(Order.order_number == number)
            )
            if exists is None:
                return number
            ms += 1

    async def _resolve_items(self, items: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Fill missing unit prices from the product catalog."""
        resolved = []
        for item in items:
            data = dict(item)
            product_id = data.get("product_id")
            if product_id is not None:
                product = await self.product_repo.get(product_id)
                if product is None:
                    raise NotFoundError(f"Product {product_id} not found")
                if data.get("unit_price") is None:
                    data["unit_price"] = product.price
                if not data.get("unit"):
                    data["unit"] = product.unit
            elif data.get("unit_price") is None:
                raise DomainValidationError("unit_price is required for items without a product")
            resolved.append(data)
        return resolved

    # PUBLIC_INTERFACE
    async def get_order(self, order_id: int) -> Order:
        order = await self.order_repo.get(order_id)
        if order is None:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    # PUBLIC_INTERFACE
    async def create_order(
        self,
        values: dict[str, Any],
        items: list[dict[str, Any]],
        *,
        user: Optional[User] = None,
        source: str = "staff",
        number_prefix: str = "ORD",
    ) -> Order:
        """
        Create an order with its items; the total is computed server-side.

        A linked customer gets its order count and total spent updated in the
        same transaction.
        """
        if not items:
            raise DomainValidationError("An order needs at least one item")
        data = dict(values)
        status_ = data.get("status") or "pending"
        if status_ not in ORDER_STATUSES:
            raise DomainValidationError(f"Invalid order status '{status_}'")
        priced, total = price_items(await self._resolve_items(items))

        customer_id = data.get("customer_id")
        if customer_id is not None:
            customer = await self.customer_repo.get_for_update(customer_id)
            if customer is None:
                raise NotFoundError(f"Customer {customer_id} not found")
            if not data.get("customer_name"):
                data["customer_name"] = customer.name
            data["customer_email"] = data.get("customer_email") or customer.email
            data["customer_phone"] = data.get("customer_phone") or customer.phone
            customer.total_orders = (customer.total_orders or 0) + 1
            customer.total_spent = money(to_decimal(customer.total_spent) + total)
        if not data.get("customer_name"):
            raise DomainValidationError("customer_name is required when no customer is linked")

        data["status"] = status_
        order = Order(
            **data,
            order_number=await self._unique_number(number_prefix, public=source == "public"),
            total_amount=total,
            source=source,
            created_by=user.id if user else None,
            items=[OrderItem(**item) for item in priced],
        )
        await self.order_repo.add(order)
        await self.order_repo.commit()
        logger.info("Order %s created (total=%s, source=%s)", order.order_number, total, source)
        await self._publish("order.created", order)
        return await self.get_order(order.id)

    # PUBLIC_INTERFACE
    async def create_public_order(self, payload: dict[str, Any]) -> Order:
        """Storefront intake: no account needed, managers get a new order alert."""
        values = {
            "customer_name": payload["customer_name"],
            "customer_email": payload["customer_email"],
            "customer_phone": payload["customer_phone"],
            "delivery_date": payload["delivery_date"],
            "payment_method": payload.get("payment_method"),
            "notes": build_public_order_notes(payload["delivery_address"], payload.get("special_instructions")),
        }
        order = await self.create_order(values, payload["items"], source="public", number_prefix="PUB")
        order_id = order.id
        try:
            await NotificationService(self.session).notify_new_order(
                order, has_attachments=bool(payload.get("attachments"))
            )
        except Exception:
            logger.exception("Failed to send new order notification for %s", order.order_number)
            await self.session.rollback()
        return await self.get_order(order_id)

    # PUBLIC_INTERFACE
    async def update_order(
        self, order_id: int, values: dict[str, Any], items: Optional[list[dict[str, Any]]] = None
    ) -> Order:
        """Update order fields; a new item list replaces the old one and reprices the order."""
        order = await self.get_order(order_id)
        data = dict(values)
        if "status" in data and data["status"] not in ORDER_STATUSES:
            raise DomainValidationError(f"Invalid order status '{data['status']}'")
        old_total = to_decimal(order.total_amount)
        if items is not None:
            if not items:
                raise DomainValidationError("An order needs at least one item")
            priced, total = price_items(await self._resolve_items(items))
            order.items = [OrderItem(**item) for item in priced]
            data["total_amount"] = total
            if order.customer_id is not None:
                customer = await self.customer_repo.get_for_update(order.customer_id)
                if customer is not None:
                    customer.total_spent = money(to_decimal(customer.total_spent) + total - old_total)
        for key, value in data.items():
            setattr(order, key, value)
        await self.order_repo.commit()
        await self._publish("order.updated", order)
        return await self.get_order(order_id)

    # PUBLIC_INTERFACE
    async def delete_order(self, order_id: int) -> None:
        order = await self.get_order(order_id)
        if order.customer_id is not None:
            customer = await self.customer_repo.get_for_update(order.customer_id)
            if customer is not None:
                customer.total_orders = max((customer.total_orders or 0) - 1, 0)
                customer.total_spent = money(to_decimal(customer.total_spent) - to_decimal(order.total_amount))
        await self.order_repo.delete(order)

    async def _publish(self, event: str, order: Order) -> None:
        try:
            await broadcast_manager.publish_dashboard_event(
                DashboardEvent(event=event, details={"order_id": order.id, "order_number": order.order_number})
            )
        except Exception:
            logger.exception("Failed to publish dashboard event %s", event)
