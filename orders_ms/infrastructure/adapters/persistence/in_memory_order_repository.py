"""
In-memory Order Repository Implementation.

This is an in-memory implementation for testing and local runs without a
database.
"""
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4
import logging

from orders_ms.domain.entities.order import Order, OrderItem
from orders_ms.domain.exceptions import OrderNotFoundError
from orders_ms.domain.repositories.order_repository import OrderRepository


logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class InMemoryOrderRepository(OrderRepository):
    """
    In-memory implementation of OrderRepository.

    Stores orders in a dictionary keyed by order id. Entities are copied on
    the way in and out so callers never share state with the storage.
    """

    def __init__(self):
        """Initialize empty storage."""
        self._storage: Dict[str, Order] = {}
        logger.info("InMemoryOrderRepository initialized (in-memory storage)")

    async def count(self, status: Optional[str] = None) -> int:
        return len(self._matching(status))

    async def list(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        take: int = 10,
        include_items: bool = False,
    ) -> List[Order]:
        orders = self._matching(status)[skip:skip + take]
        return [self._copy(order, include_items) for order in orders]

    async def find_by_id(self, order_id: str, include_items: bool = True) -> Optional[Order]:
        order = self._storage.get(order_id)
        if order is None:
            logger.info(f"Order not found in memory: {order_id}")
            return None
        return self._copy(order, include_items)

    async def create_with_items(
        self,
        total_amount: Decimal,
        total_items: int,
        status: str,
        items: Sequence[OrderItem],
    ) -> Order:
        order_id = str(uuid4())
        now = _utcnow()
        # Build everything first so a bad item leaves the storage untouched
        order = Order(
            id=order_id,
            total_amount=total_amount,
            total_items=total_items,
            status=status,
            created_at=now,
            updated_at=now,
            items=[replace(item, order_id=order_id, name=None) for item in items],
        )
        self._storage[order_id] = order
        logger.info(f"✅ Order saved in memory: {order_id} ({len(items)} item(s))")
        return self._copy(order, include_items=True)

    async def update_fields(self, order_id: str, fields: Dict[str, Any]) -> Order:
        order = self._storage.get(order_id)
        if order is None:
            raise OrderNotFoundError(order_id)

        updated = replace(order, **fields, updated_at=_utcnow())
        self._storage[order_id] = updated
        return self._copy(updated, include_items=False)

    async def set_status(self, order_id: str, status: str) -> Order:
        return await self.update_fields(order_id, {"status": status})

    def _matching(self, status: Optional[str]) -> List[Order]:
        orders = sorted(self._storage.values(), key=lambda o: (o.created_at, o.id))
        if status is None:
            return orders
        return [order for order in orders if order.status == status]

    @staticmethod
    def _copy(order: Order, include_items: bool) -> Order:
        if not include_items:
            return order.without_items()
        return order.with_items(order.items)
