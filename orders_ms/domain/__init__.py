"""Domain layer - pure domain models and interfaces."""

from .entities import Order, OrderItem
from .exceptions import (
    InvalidOrderStatusError,
    OrderNotFoundError,
    OrderServiceError,
    OrderValidationError,
    ProductNotResolvedError,
    ProductValidationError,
    UpstreamUnavailableError,
)
from .repositories import OrderRepository
from .value_objects import OrderStatuses, ProductRecord

__all__ = [
    "InvalidOrderStatusError",
    "Order",
    "OrderItem",
    "OrderNotFoundError",
    "OrderRepository",
    "OrderServiceError",
    "OrderStatuses",
    "OrderValidationError",
    "ProductNotResolvedError",
    "ProductRecord",
    "ProductValidationError",
    "UpstreamUnavailableError",
]
