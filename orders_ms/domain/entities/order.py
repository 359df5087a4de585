"""
Order aggregate root.

CRITICAL: This file must contain ZERO imports from:
- sqlalchemy
- pydantic
- redis
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Set


@dataclass(frozen=True)
class OrderItem:
    """Line item of an order with the unit price captured at creation."""
    product_id: int
    quantity: int
    price: Decimal
    order_id: Optional[str] = None
    # Filled from the product catalog on read, never persisted
    name: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.price, Decimal):
            object.__setattr__(self, "price", Decimal(str(self.price)))

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def with_name(self, name: str) -> "OrderItem":
        return replace(self, name=name)


@dataclass
class Order:
    """
    Order aggregate root.

    Totals are derived once, at creation, from the priced items and are
    stored as-is afterwards.
    """
    id: str
    total_amount: Decimal
    total_items: int
    status: str
    paid: bool = False
    paid_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItem] = field(default_factory=list)

    @staticmethod
    def calculate_totals(items: Iterable[OrderItem]) -> "tuple[Decimal, int]":
        """Return ``(total_amount, total_items)`` for priced items."""
        total_amount = Decimal("0")
        total_items = 0
        for item in items:
            total_amount += item.subtotal
            total_items += item.quantity
        return total_amount, total_items

    def product_ids(self) -> Set[int]:
        """Distinct product ids referenced by the items."""
        return {item.product_id for item in self.items}

    def with_items(self, items: List[OrderItem]) -> "Order":
        return replace(self, items=list(items))

    def without_items(self) -> "Order":
        return replace(self, items=[])
