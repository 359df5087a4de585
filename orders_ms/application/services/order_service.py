"""Application service for Order operations."""

import logging
import math
from typing import Dict, Iterable, List

from orders_ms.application.dtos.order_dto import (
    ChangeOrderStatusRequest,
    CreateOrderRequest,
    OrderDTO,
    OrderPaginationRequest,
    OrderSummaryDTO,
    PaginatedOrdersDTO,
    PaginationMetaDTO,
    UpdateOrderRequest,
)
from orders_ms.application.interfaces import IProductValidator
from orders_ms.domain.entities.order import Order, OrderItem
from orders_ms.domain.exceptions import OrderNotFoundError, ProductNotResolvedError
from orders_ms.domain.repositories import OrderRepository
from orders_ms.domain.value_objects import OrderStatuses, ProductRecord


logger = logging.getLogger(__name__)


class OrderApplicationService:
    """
    Application service for orchestrating order operations.

    Responsibilities:
    - Price new orders from validated product records
    - Enrich stored items with live product names on read
    - Paginate, update and transition orders
    - Transform between DTOs and domain entities

    Failures are raised as domain exceptions; turning them into RPC error
    envelopes is the boundary's job.
    """

    def __init__(
        self,
        orders: OrderRepository,
        products: IProductValidator,
        statuses: OrderStatuses,
    ) -> None:
        """Initialize order application service.

        Args:
            orders: Order store
            products: Product validator (RPC to the product service)
            statuses: Configured order status set
        """
        self._orders = orders
        self._products = products
        self._statuses = statuses

    @property
    def statuses(self) -> OrderStatuses:
        return self._statuses

    async def list_orders(self, request: OrderPaginationRequest) -> PaginatedOrdersDTO:
        """List orders page by page.

        Args:
            request: Pagination and optional status filter

        Returns:
            Page of orders with ``total``, ``page`` and ``lastPage`` metadata
        """
        total = await self._orders.count(status=request.status)
        orders = await self._orders.list(
            status=request.status,
            skip=request.skip,
            take=request.limit,
        )

        return PaginatedOrdersDTO(
            data=[OrderSummaryDTO.from_entity(order) for order in orders],
            meta=PaginationMetaDTO(
                total=total,
                page=request.page,
                last_page=math.ceil(total / request.limit),
            ),
        )

    async def get_order(self, order_id: str) -> OrderDTO:
        """Get order by ID with product names attached to its items.

        Args:
            order_id: Order ID string

        Returns:
            OrderDTO with stored prices, stored totals and live names

        Raises:
            OrderNotFoundError: If no order has this id
        """
        order = await self._load(order_id)
        products = await self._products.validate(order.product_ids())
        return OrderDTO.from_entity(self._attach_names(order, products))

    async def create_order(self, request: CreateOrderRequest) -> OrderDTO:
        """Create a new order priced from the product catalog.

        Args:
            request: CreateOrderRequest DTO

        Returns:
            OrderDTO with created order details
        """
        # 1. Validate products (no order is written if this fails)
        products = await self._products.validate(request.product_ids())
        by_id = self._index(products, request.product_ids())

        # 2. Snapshot unit prices and compute totals
        items = [
            OrderItem(
                product_id=line.product_id,
                quantity=line.quantity,
                price=by_id[line.product_id].price,
            )
            for line in request.items
        ]
        total_amount, total_items = Order.calculate_totals(items)

        # 3. Persist order + items atomically
        order = await self._orders.create_with_items(
            total_amount=total_amount,
            total_items=total_items,
            status=self._statuses.initial,
            items=items,
        )
        logger.info(
            f"Created order {order.id}: {total_items} item(s), total {total_amount}"
        )

        # 4. Names come from the reply we already have
        return OrderDTO.from_entity(self._attach_names(order, products))

    async def update_order(self, request: UpdateOrderRequest) -> OrderSummaryDTO:
        """Update whitelisted auxiliary fields.

        Totals and items are never touched here.
        """
        order_id = str(request.id)
        await self.get_order(order_id)

        changes = request.changes()
        if not changes:
            return OrderSummaryDTO.from_entity(await self._load(order_id, include_items=False))

        order = await self._orders.update_fields(order_id, changes)
        return OrderSummaryDTO.from_entity(order)

    async def delete_order(self, order_id: str) -> OrderSummaryDTO:
        """Soft delete: move the order to the cancelled status."""
        await self.get_order(order_id)

        order = await self._orders.set_status(order_id, self._statuses.cancelled)
        logger.info(f"Cancelled order {order_id}")
        return OrderSummaryDTO.from_entity(order)

    async def change_order_status(self, request: ChangeOrderStatusRequest) -> OrderSummaryDTO:
        """Move an order to another status.

        Setting the status the order already has is a no-op and writes
        nothing. Any other member of the status set is accepted whatever the
        current status is.
        """
        order_id = str(request.id)
        current = await self.get_order(order_id)

        self._statuses.require(request.status)
        if current.status == request.status:
            return OrderSummaryDTO(**current.model_dump(exclude={"items"}))

        order = await self._orders.set_status(order_id, request.status)
        logger.info(f"Order {order_id} status {current.status} -> {request.status}")
        return OrderSummaryDTO.from_entity(order)

    async def _load(self, order_id: str, include_items: bool = True) -> Order:
        order = await self._orders.find_by_id(order_id, include_items=include_items)
        if order is None:
            raise OrderNotFoundError(order_id)
        return order

    @staticmethod
    def _index(products: List[ProductRecord], wanted: Iterable[int]) -> Dict[int, ProductRecord]:
        """Map records by id, failing if any wanted id has no record."""
        by_id = {product.id: product for product in products}
        missing = set(wanted) - by_id.keys()
        if missing:
            raise ProductNotResolvedError(missing)
        return by_id

    def _attach_names(self, order: Order, products: List[ProductRecord]) -> Order:
        by_id = self._index(products, order.product_ids())
        return order.with_items(
            [item.with_name(by_id[item.product_id].name) for item in order.items]
        )
