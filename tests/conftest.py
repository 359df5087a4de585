"""Shared fixtures: in-memory collaborators and an in-memory SQLite engine."""

from decimal import Decimal
from typing import AbstractSet, Dict, List, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from orders_ms.application.interfaces import IProductValidator
from orders_ms.application.services import OrderApplicationService
from orders_ms.data.models import Base
from orders_ms.domain.exceptions import ProductNotResolvedError
from orders_ms.domain.value_objects import OrderStatuses, ProductRecord
from orders_ms.infrastructure.adapters.persistence import InMemoryOrderRepository


# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeProductValidator(IProductValidator):
    """Product validator answering from a dict, recording every call."""

    def __init__(self, catalog: Optional[Dict[int, ProductRecord]] = None):
        self.catalog: Dict[int, ProductRecord] = dict(catalog or {})
        self.calls: List[List[int]] = []
        self.error: Optional[Exception] = None

    def set_price(self, product_id: int, price: str) -> None:
        record = self.catalog[product_id]
        self.catalog[product_id] = ProductRecord(id=record.id, name=record.name, price=Decimal(price))

    async def validate(self, product_ids: AbstractSet[int]) -> List[ProductRecord]:
        ids = sorted(product_ids)
        self.calls.append(ids)
        if self.error is not None:
            raise self.error

        missing = [product_id for product_id in ids if product_id not in self.catalog]
        if missing:
            raise ProductNotResolvedError(missing)
        return [self.catalog[product_id] for product_id in ids]


@pytest.fixture
def catalog() -> Dict[int, ProductRecord]:
    return {
        1: ProductRecord(id=1, name="Keyboard", price=Decimal("10.00")),
        2: ProductRecord(id=2, name="Mouse", price=Decimal("5.00")),
        3: ProductRecord(id=3, name="Monitor", price=Decimal("199.99")),
    }


@pytest.fixture
def product_validator(catalog) -> FakeProductValidator:
    return FakeProductValidator(catalog)


@pytest.fixture
def statuses() -> OrderStatuses:
    return OrderStatuses.from_names(
        ["PENDING", "PAID", "DELIVERED", "CANCELLED"],
        initial="PENDING",
        cancelled="CANCELLED",
    )


@pytest.fixture
def order_repository() -> InMemoryOrderRepository:
    return InMemoryOrderRepository()


@pytest.fixture
def order_service(order_repository, product_validator, statuses) -> OrderApplicationService:
    return OrderApplicationService(
        orders=order_repository,
        products=product_validator,
        statuses=statuses,
    )


@pytest_asyncio.fixture
async def test_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Cleanup
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_session_factory(test_engine):
    """Create test session factory."""
    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
