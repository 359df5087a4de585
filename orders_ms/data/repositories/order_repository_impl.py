"""SQLAlchemy implementation of OrderRepository."""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import async_sessionmaker
from sqlalchemy.orm import selectinload

from orders_ms.domain.entities.order import Order, OrderItem
from orders_ms.domain.exceptions import OrderNotFoundError
from orders_ms.domain.repositories.order_repository import OrderRepository

from ..mappers import OrderMapper
from ..models.order_model import OrderModel
from ..uow import create_uow


logger = logging.getLogger(__name__)

# Columns that may be overwritten through update_fields
_WRITABLE_COLUMNS = frozenset({"status", "paid", "paid_at"})


def _to_naive_utc(value: Any) -> Any:
    if isinstance(value, datetime) and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class SqlAlchemyOrderRepository(OrderRepository):
    """
    Concrete implementation of OrderRepository using SQLAlchemy.

    Every call runs in its own unit of work, so a write is committed (or
    rolled back) before the call returns.
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        """Initialize repository with a session factory.

        Args:
            session_factory: SQLAlchemy async session factory
        """
        self._session_factory = session_factory

    async def count(self, status: Optional[str] = None) -> int:
        query = select(func.count()).select_from(OrderModel)
        if status is not None:
            query = query.where(OrderModel.status == status)

        async with create_uow(self._session_factory) as uow:
            result = await uow.session.execute(query)
            return result.scalar_one()

    async def list(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        take: int = 10,
        include_items: bool = False,
    ) -> List[Order]:
        query = select(OrderModel)
        if status is not None:
            query = query.where(OrderModel.status == status)
        if include_items:
            query = query.options(selectinload(OrderModel.items))
        query = query.order_by(OrderModel.created_at, OrderModel.id).offset(skip).limit(take)

        async with create_uow(self._session_factory) as uow:
            result = await uow.session.execute(query)
            models = result.scalars().all()
            return [OrderMapper.to_domain(model, include_items) for model in models]

    async def find_by_id(self, order_id: str, include_items: bool = True) -> Optional[Order]:
        query = select(OrderModel).where(OrderModel.id == order_id)
        if include_items:
            query = query.options(selectinload(OrderModel.items))

        async with create_uow(self._session_factory) as uow:
            result = await uow.session.execute(query)
            model = result.scalar_one_or_none()

            if not model:
                logger.info(f"Order not found: {order_id}")
                return None

            return OrderMapper.to_domain(model, include_items)

    async def create_with_items(
        self,
        total_amount: Decimal,
        total_items: int,
        status: str,
        items: Sequence[OrderItem],
    ) -> Order:
        order_model = OrderMapper.to_persistence(
            order_id=str(uuid4()),
            total_amount=total_amount,
            total_items=total_items,
            status=status,
            items=items,
        )

        async with create_uow(self._session_factory) as uow:
            uow.session.add(order_model)
            # Order row and item rows are committed together
            await uow.commit()
            logger.info(f"✅ Saved order {order_model.id} with {len(items)} item row(s)")
            return OrderMapper.to_domain(order_model)

    async def update_fields(self, order_id: str, fields: Dict[str, Any]) -> Order:
        unknown = set(fields) - _WRITABLE_COLUMNS
        if unknown:
            raise ValueError(f"Cannot update order columns: {sorted(unknown)}")

        async with create_uow(self._session_factory) as uow:
            model = await uow.session.get(OrderModel, order_id)
            if model is None:
                raise OrderNotFoundError(order_id)

            for name, value in fields.items():
                setattr(model, name, _to_naive_utc(value))

            await uow.commit()
            logger.info(f"✅ Updated order {order_id}: {sorted(fields)}")
            return OrderMapper.to_domain(model, include_items=False)

    async def set_status(self, order_id: str, status: str) -> Order:
        return await self.update_fields(order_id, {"status": status})
