"""SQLAlchemy ORM models for Order aggregate."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import relationship

from orders_ms.domain.value_objects import STATUS_MAX_LENGTH

from .base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class OrderModel(Base):
    """SQLAlchemy ORM model for orders table."""

    __tablename__ = "orders"

    id = Column(String(36), primary_key=True)

    # Totals are fixed at creation
    total_amount = Column(Numeric(12, 2), nullable=False)
    total_items = Column(Integer, nullable=False)

    status = Column(String(STATUS_MAX_LENGTH), nullable=False, index=True)
    paid = Column(Boolean, nullable=False, default=False)
    paid_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationship to items
    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )

    __table_args__ = (
        Index("ix_orders_created_at_id", "created_at", "id"),
    )

    def __repr__(self):
        return f"<OrderModel(id={self.id}, status={self.status}, total={self.total_amount})>"


class OrderItemModel(Base):
    """SQLAlchemy ORM model for order_items table."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(
        String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True
    )
    product_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    # Unit price snapshot taken when the order was created
    price = Column(Numeric(12, 2), nullable=False)

    # Relationship back to order
    order = relationship("OrderModel", back_populates="items")

    def __repr__(self):
        return f"<OrderItemModel(id={self.id}, product_id={self.product_id}, quantity={self.quantity})>"
