"""Static mappers for domain entities ↔ database models."""

from decimal import Decimal
from typing import Sequence

from orders_ms.domain.entities.order import Order, OrderItem

from .models.order_model import OrderItemModel, OrderModel


class OrderItemMapper:
    """Static mapper for OrderItem ↔ OrderItemModel transformation."""

    @staticmethod
    def to_domain(model: OrderItemModel) -> OrderItem:
        """Convert ORM model to domain entity.

        Args:
            model: OrderItemModel instance

        Returns:
            OrderItem domain entity
        """
        return OrderItem(
            order_id=model.order_id,
            product_id=model.product_id,
            quantity=model.quantity,
            price=Decimal(str(model.price)),
        )

    @staticmethod
    def to_persistence(entity: OrderItem) -> OrderItemModel:
        """Convert domain entity to ORM model.

        Args:
            entity: OrderItem domain entity

        Returns:
            OrderItemModel instance (order_id is set through the relationship)
        """
        return OrderItemModel(
            product_id=entity.product_id,
            quantity=entity.quantity,
            price=entity.price,
        )


class OrderMapper:
    """Static mapper for Order ↔ OrderModel transformation with nested items."""

    @staticmethod
    def to_domain(model: OrderModel, include_items: bool = True) -> Order:
        """Convert ORM model to domain aggregate.

        Args:
            model: OrderModel instance
            include_items: Map the item set; it must have been loaded eagerly

        Returns:
            Order domain aggregate
        """
        items = (
            [OrderItemMapper.to_domain(item_model) for item_model in model.items]
            if include_items
            else []
        )

        return Order(
            id=model.id,
            total_amount=Decimal(str(model.total_amount)),
            total_items=model.total_items,
            status=model.status,
            paid=bool(model.paid),
            paid_at=model.paid_at,
            created_at=model.created_at,
            updated_at=model.updated_at,
            items=items,
        )

    @staticmethod
    def to_persistence(
        order_id: str,
        total_amount: Decimal,
        total_items: int,
        status: str,
        items: Sequence[OrderItem],
    ) -> OrderModel:
        """Build a new ORM order with its item rows attached."""
        order_model = OrderModel(
            id=order_id,
            total_amount=total_amount,
            total_items=total_items,
            status=status,
            paid=False,
        )
        order_model.items = [OrderItemMapper.to_persistence(item) for item in items]
        return order_model
