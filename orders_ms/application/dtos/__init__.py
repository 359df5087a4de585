"""Application DTOs."""

from .order_dto import (
    ChangeOrderStatusRequest,
    CreateOrderItemRequest,
    CreateOrderRequest,
    OrderDTO,
    OrderIdRequest,
    OrderItemDTO,
    OrderPaginationRequest,
    OrderSummaryDTO,
    PaginatedOrdersDTO,
    PaginationMetaDTO,
    UpdateOrderRequest,
)

__all__ = [
    "ChangeOrderStatusRequest",
    "CreateOrderItemRequest",
    "CreateOrderRequest",
    "OrderDTO",
    "OrderIdRequest",
    "OrderItemDTO",
    "OrderPaginationRequest",
    "OrderSummaryDTO",
    "PaginatedOrdersDTO",
    "PaginationMetaDTO",
    "UpdateOrderRequest",
]
