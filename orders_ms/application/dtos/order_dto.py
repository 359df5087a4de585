"""Application DTOs for Order operations."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from orders_ms.domain.entities.order import Order, OrderItem


# Wire payloads use camelCase keys; unknown keys are rejected
_REQUEST_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="forbid",
    frozen=True,
)

_RESPONSE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    frozen=True,
)


# =============================================================================
# REQUESTS
# =============================================================================

class OrderPaginationRequest(BaseModel):
    """Request DTO for listing orders page by page."""

    page: int = Field(default=1, ge=1, description="1-based page number")
    limit: int = Field(default=10, ge=1, description="Page size")
    status: Optional[str] = Field(default=None, description="Only orders in this status")

    model_config = _REQUEST_CONFIG

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class OrderIdRequest(BaseModel):
    """Request DTO addressing a single order."""

    id: UUID = Field(..., description="Order id")

    model_config = _REQUEST_CONFIG


class CreateOrderItemRequest(BaseModel):
    """One requested line of a new order."""

    product_id: int = Field(..., gt=0, description="Product id in the catalog")
    quantity: int = Field(..., gt=0, description="Quantity ordered")

    model_config = _REQUEST_CONFIG


class CreateOrderRequest(BaseModel):
    """Request DTO for creating an order."""

    items: List[CreateOrderItemRequest] = Field(..., min_length=1, description="Order items")

    model_config = _REQUEST_CONFIG

    def product_ids(self) -> set:
        return {item.product_id for item in self.items}


class UpdateOrderRequest(BaseModel):
    """Request DTO for updating the auxiliary fields of an order."""

    id: UUID = Field(..., description="Order id")
    paid: Optional[bool] = Field(default=None, description="Payment flag")
    paid_at: Optional[datetime] = Field(default=None, description="Payment timestamp")

    model_config = _REQUEST_CONFIG

    @field_validator("paid")
    @classmethod
    def paid_not_null(cls, value: Optional[bool]) -> bool:
        # Omit the key to leave the flag alone; the column is NOT NULL
        if value is None:
            raise ValueError("paid cannot be null")
        return value

    def changes(self) -> Dict[str, Any]:
        """Fields the caller actually sent, identity excluded."""
        return self.model_dump(exclude_unset=True, exclude={"id"})


class ChangeOrderStatusRequest(BaseModel):
    """Request DTO for moving an order to another status."""

    id: UUID = Field(..., description="Order id")
    status: str = Field(..., min_length=1, description="Target status")

    model_config = _REQUEST_CONFIG


# =============================================================================
# RESPONSES
# =============================================================================

class OrderItemDTO(BaseModel):
    """DTO for order item."""

    product_id: int = Field(..., description="Product id")
    quantity: int = Field(..., gt=0, description="Quantity ordered")
    price: Decimal = Field(..., ge=0, description="Unit price at creation time")
    name: Optional[str] = Field(None, description="Current product name")

    model_config = _RESPONSE_CONFIG

    @classmethod
    def from_entity(cls, item: OrderItem) -> "OrderItemDTO":
        return cls(
            product_id=item.product_id,
            quantity=item.quantity,
            price=item.price,
            name=item.name,
        )


class OrderSummaryDTO(BaseModel):
    """Response DTO for an order without its items."""

    id: str = Field(..., description="Order id")
    total_amount: Decimal = Field(..., ge=0, description="Total order amount")
    total_items: int = Field(..., ge=0, description="Total quantity")
    status: str = Field(..., description="Order status")
    paid: bool = Field(default=False, description="Payment flag")
    paid_at: Optional[datetime] = Field(None, description="Payment timestamp")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last write timestamp")

    model_config = _RESPONSE_CONFIG

    @classmethod
    def from_entity(cls, order: Order) -> "OrderSummaryDTO":
        return cls(
            id=order.id,
            total_amount=order.total_amount,
            total_items=order.total_items,
            status=order.status,
            paid=order.paid,
            paid_at=order.paid_at,
            created_at=order.created_at,
            updated_at=order.updated_at,
        )


class OrderDTO(OrderSummaryDTO):
    """Response DTO for order details."""

    items: List[OrderItemDTO] = Field(default_factory=list, description="Order items")

    @classmethod
    def from_entity(cls, order: Order) -> "OrderDTO":
        summary = OrderSummaryDTO.from_entity(order)
        return cls(
            **summary.model_dump(),
            items=[OrderItemDTO.from_entity(item) for item in order.items],
        )


class PaginationMetaDTO(BaseModel):
    """Pagination metadata."""

    total: int = Field(..., ge=0, description="Total matching orders")
    page: int = Field(..., ge=1, description="Current page")
    last_page: int = Field(..., ge=0, description="Last page number")

    model_config = _RESPONSE_CONFIG


class PaginatedOrdersDTO(BaseModel):
    """DTO for listing orders."""

    data: List[OrderSummaryDTO] = Field(default_factory=list, description="Orders on this page")
    meta: PaginationMetaDTO

    model_config = _RESPONSE_CONFIG
