"""Tests for OrderApplicationService against in-memory and SQLite-backed stores."""

from decimal import Decimal
from typing import Any, Dict
from uuid import uuid4

import pytest

from orders_ms.application.dtos import (
    ChangeOrderStatusRequest,
    CreateOrderRequest,
    OrderPaginationRequest,
    OrderSummaryDTO,
    UpdateOrderRequest,
)
from orders_ms.application.services import OrderApplicationService
from orders_ms.data.repositories import SqlAlchemyOrderRepository
from orders_ms.domain.entities import Order
from orders_ms.domain.exceptions import (
    InvalidOrderStatusError,
    OrderNotFoundError,
    ProductNotResolvedError,
    UpstreamUnavailableError,
)
from orders_ms.domain.value_objects import ProductRecord
from orders_ms.infrastructure.adapters.persistence import InMemoryOrderRepository


class RecordingOrderRepository(InMemoryOrderRepository):
    """In-memory store that counts writes to existing orders."""

    def __init__(self):
        super().__init__()
        self.writes = []

    async def update_fields(self, order_id: str, fields: Dict[str, Any]) -> Order:
        self.writes.append((order_id, dict(fields)))
        return await super().update_fields(order_id, fields)


@pytest.fixture
def order_repository() -> RecordingOrderRepository:
    return RecordingOrderRepository()


def _create_request(*lines) -> CreateOrderRequest:
    return CreateOrderRequest.model_validate(
        {"items": [{"productId": product_id, "quantity": quantity} for product_id, quantity in lines]}
    )


class TestCreateOrder:
    """Pricing and persistence of new orders."""

    @pytest.mark.asyncio
    async def test_totals_come_from_validated_prices(self, order_service):
        """P1=10.00 x2 and P2=5.00 x1 give 25.00 over 3 units."""
        order = await order_service.create_order(_create_request((1, 2), (2, 1)))

        assert order.total_amount == Decimal("25.00")
        assert order.total_items == 3
        assert order.status == "PENDING"
        assert order.paid is False
        assert [(item.product_id, item.price) for item in order.items] == [
            (1, Decimal("10.00")),
            (2, Decimal("5.00")),
        ]

    @pytest.mark.asyncio
    async def test_items_are_named_from_the_same_validation_call(self, order_service, product_validator):
        """Creating an order asks the catalog exactly once."""
        order = await order_service.create_order(_create_request((1, 1), (3, 1)))

        assert [item.name for item in order.items] == ["Keyboard", "Monitor"]
        assert product_validator.calls == [[1, 3]]

    @pytest.mark.asyncio
    async def test_duplicate_products_are_validated_once(self, order_service, product_validator):
        order = await order_service.create_order(_create_request((1, 1), (1, 2)))

        assert product_validator.calls == [[1]]
        assert order.total_amount == Decimal("30.00")
        assert order.total_items == 3

    @pytest.mark.asyncio
    async def test_missing_product_writes_nothing(self, order_service, order_repository):
        """An unknown product aborts the create."""
        with pytest.raises(ProductNotResolvedError) as exc_info:
            await order_service.create_order(_create_request((1, 1), (42, 1)))

        assert exc_info.value.product_ids == [42]
        assert await order_repository.count() == 0

    @pytest.mark.asyncio
    async def test_unavailable_catalog_writes_nothing(self, order_service, order_repository, product_validator):
        product_validator.error = UpstreamUnavailableError("product service", "timeout")

        with pytest.raises(UpstreamUnavailableError):
            await order_service.create_order(_create_request((1, 1)))

        assert await order_repository.count() == 0

    @pytest.mark.asyncio
    async def test_prices_are_snapshotted(self, order_service, product_validator):
        """Later catalog price changes do not touch stored orders."""
        created = await order_service.create_order(_create_request((1, 2), (2, 1)))

        product_validator.set_price(1, "99.00")
        loaded = await order_service.get_order(created.id)

        assert loaded.items[0].price == Decimal("10.00")
        assert loaded.total_amount == Decimal("25.00")


class TestGetOrder:
    """Reading single orders."""

    @pytest.mark.asyncio
    async def test_missing_order_raises_not_found(self, order_service):
        order_id = str(uuid4())

        with pytest.raises(OrderNotFoundError) as exc_info:
            await order_service.get_order(order_id)

        assert order_id in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_items_carry_live_names(self, order_service, product_validator):
        created = await order_service.create_order(_create_request((2, 4)))

        product_validator.catalog[2] = ProductRecord(id=2, name="Wireless Mouse", price=Decimal("7.00"))
        loaded = await order_service.get_order(created.id)

        assert loaded.items[0].name == "Wireless Mouse"
        assert loaded.items[0].price == Decimal("5.00")

    @pytest.mark.asyncio
    async def test_unresolvable_product_fails_the_read(self, order_service, product_validator):
        """A product gone from the catalog fails the whole read."""
        created = await order_service.create_order(_create_request((1, 1), (2, 1)))

        del product_validator.catalog[2]

        with pytest.raises(ProductNotResolvedError):
            await order_service.get_order(created.id)

    @pytest.mark.asyncio
    async def test_partial_validator_reply_fails_the_read(self, order_service, product_validator):
        """Records missing from a reply are detected even without a validator error."""
        created = await order_service.create_order(_create_request((1, 1), (2, 1)))

        async def partial(product_ids):
            return [product_validator.catalog[1]]

        product_validator.validate = partial

        with pytest.raises(ProductNotResolvedError) as exc_info:
            await order_service.get_order(created.id)

        assert exc_info.value.product_ids == [2]


class TestListOrders:
    """Pagination and status filtering."""

    @pytest.mark.asyncio
    async def test_last_page_holds_the_remainder(self, order_service):
        for _ in range(25):
            await order_service.create_order(_create_request((1, 1)))

        page = await order_service.list_orders(OrderPaginationRequest(page=3, limit=10))

        assert page.meta.total == 25
        assert page.meta.page == 3
        assert page.meta.last_page == 3
        assert len(page.data) == 5

    @pytest.mark.asyncio
    async def test_pages_do_not_overlap(self, order_service):
        for _ in range(12):
            await order_service.create_order(_create_request((1, 1)))

        first = await order_service.list_orders(OrderPaginationRequest(page=1, limit=10))
        second = await order_service.list_orders(OrderPaginationRequest(page=2, limit=10))

        ids = [order.id for order in first.data + second.data]
        assert len(ids) == 12
        assert len(set(ids)) == 12

    @pytest.mark.asyncio
    async def test_status_filter(self, order_service):
        keep = await order_service.create_order(_create_request((1, 1)))
        await order_service.create_order(_create_request((2, 1)))
        await order_service.change_order_status(ChangeOrderStatusRequest(id=keep.id, status="PAID"))

        page = await order_service.list_orders(OrderPaginationRequest(status="PAID"))

        assert [order.id for order in page.data] == [keep.id]
        assert page.meta.total == 1
        assert page.meta.last_page == 1

    @pytest.mark.asyncio
    async def test_empty_store(self, order_service):
        page = await order_service.list_orders(OrderPaginationRequest())

        assert page.data == []
        assert page.meta.total == 0
        assert page.meta.last_page == 0

    @pytest.mark.asyncio
    async def test_listed_orders_have_no_items(self, order_service, product_validator):
        await order_service.create_order(_create_request((1, 1)))
        calls_before = len(product_validator.calls)

        page = await order_service.list_orders(OrderPaginationRequest())

        assert not hasattr(page.data[0], "items")
        assert len(product_validator.calls) == calls_before


class TestChangeOrderStatus:
    """Status transitions."""

    @pytest.mark.asyncio
    async def test_same_status_twice_writes_once(self, order_service, order_repository):
        """Repeating a transition is a no-op."""
        created = await order_service.create_order(_create_request((1, 1)))
        request = ChangeOrderStatusRequest(id=created.id, status="PAID")

        first = await order_service.change_order_status(request)
        second = await order_service.change_order_status(request)

        assert len(order_repository.writes) == 1
        assert first.status == second.status == "PAID"
        assert second.updated_at == first.updated_at
        assert type(second) is OrderSummaryDTO

    @pytest.mark.asyncio
    async def test_current_status_is_a_no_op(self, order_service, order_repository):
        created = await order_service.create_order(_create_request((1, 1)))

        result = await order_service.change_order_status(
            ChangeOrderStatusRequest(id=created.id, status="PENDING")
        )

        assert result.status == "PENDING"
        assert order_repository.writes == []

    @pytest.mark.asyncio
    async def test_unknown_status_is_rejected(self, order_service, order_repository):
        created = await order_service.create_order(_create_request((1, 1)))

        with pytest.raises(InvalidOrderStatusError) as exc_info:
            await order_service.change_order_status(
                ChangeOrderStatusRequest(id=created.id, status="SHIPPED")
            )

        assert exc_info.value.requested_status == "SHIPPED"
        assert order_repository.writes == []

    @pytest.mark.asyncio
    async def test_missing_order_is_reported_before_bad_status(self, order_service):
        with pytest.raises(OrderNotFoundError):
            await order_service.change_order_status(
                ChangeOrderStatusRequest(id=uuid4(), status="SHIPPED")
            )

    @pytest.mark.asyncio
    async def test_cancelled_order_can_be_reopened(self, order_service):
        """Any configured status is reachable from any other."""
        created = await order_service.create_order(_create_request((1, 1)))
        await order_service.delete_order(created.id)

        reopened = await order_service.change_order_status(
            ChangeOrderStatusRequest(id=created.id, status="PENDING")
        )

        assert reopened.status == "PENDING"


class TestDeleteOrder:
    """Soft delete."""

    @pytest.mark.asyncio
    async def test_delete_twice_stays_cancelled(self, order_service, order_repository):
        created = await order_service.create_order(_create_request((1, 1)))

        first = await order_service.delete_order(created.id)
        second = await order_service.delete_order(created.id)

        assert first.status == second.status == "CANCELLED"
        assert await order_repository.count() == 1

    @pytest.mark.asyncio
    async def test_missing_order_raises_not_found(self, order_service):
        with pytest.raises(OrderNotFoundError):
            await order_service.delete_order(str(uuid4()))


class TestUpdateOrder:
    """Auxiliary field updates."""

    @pytest.mark.asyncio
    async def test_paid_fields_are_written(self, order_service):
        created = await order_service.create_order(_create_request((1, 2)))

        updated = await order_service.update_order(
            UpdateOrderRequest.model_validate(
                {"id": created.id, "paid": True, "paidAt": "2024-05-01T10:00:00"}
            )
        )

        assert updated.paid is True
        assert updated.paid_at.isoformat() == "2024-05-01T10:00:00"
        assert updated.total_amount == created.total_amount
        assert updated.status == "PENDING"

    @pytest.mark.asyncio
    async def test_empty_update_writes_nothing(self, order_service, order_repository):
        created = await order_service.create_order(_create_request((1, 1)))

        result = await order_service.update_order(UpdateOrderRequest(id=created.id))

        assert order_repository.writes == []
        assert result.id == created.id
        assert type(result) is OrderSummaryDTO

    @pytest.mark.asyncio
    async def test_missing_order_raises_not_found(self, order_service):
        with pytest.raises(OrderNotFoundError):
            await order_service.update_order(UpdateOrderRequest(id=uuid4(), paid=True))


class TestSqlAlchemyBackedOrders:
    """Create replies match what the database keeps."""

    @pytest.fixture
    def sql_order_service(self, test_session_factory, product_validator, statuses):
        return OrderApplicationService(
            orders=SqlAlchemyOrderRepository(test_session_factory),
            products=product_validator,
            statuses=statuses,
        )

    @pytest.mark.asyncio
    async def test_sub_cent_price_is_stored_as_replied(self, sql_order_service, product_validator):
        """A catalog price finer than cents is rounded once, before pricing."""
        product_validator.catalog[9] = ProductRecord(id=9, name="Washer", price=Decimal("0.125"))

        created = await sql_order_service.create_order(_create_request((9, 3)))
        loaded = await sql_order_service.get_order(created.id)

        assert created.items[0].price == Decimal("0.13")
        assert created.total_amount == Decimal("0.39")
        assert loaded.items[0].price == created.items[0].price
        assert loaded.total_amount == created.total_amount
        assert loaded.total_amount == sum(item.price * item.quantity for item in loaded.items)

    @pytest.mark.asyncio
    async def test_reply_encodes_like_a_later_read(self, sql_order_service):
        created = await sql_order_service.create_order(_create_request((1, 2), (3, 1)))
        loaded = await sql_order_service.get_order(created.id)

        fields = {"total_amount", "total_items", "status", "paid", "items"}
        assert loaded.model_dump(mode="json", include=fields) == created.model_dump(mode="json", include=fields)
