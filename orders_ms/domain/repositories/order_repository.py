"""Repository interfaces for Order aggregate."""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from ..entities.order import Order, OrderItem


class OrderRepository(ABC):
    """
    Abstract store for the Order aggregate.

    Pure data access: no business rules live behind this interface. The only
    guarantee beyond plain CRUD is that ``create_with_items`` is atomic.
    """

    @abstractmethod
    async def count(self, status: Optional[str] = None) -> int:
        """Count orders, optionally only those in ``status``."""
        pass

    @abstractmethod
    async def list(
        self,
        status: Optional[str] = None,
        skip: int = 0,
        take: int = 10,
        include_items: bool = False,
    ) -> List[Order]:
        """List orders oldest first.

        Args:
            status: Optional status filter
            skip: Number of rows to skip
            take: Maximum number of rows to return
            include_items: Load the item set of every order

        Returns:
            List of Order aggregates
        """
        pass

    @abstractmethod
    async def find_by_id(self, order_id: str, include_items: bool = True) -> Optional[Order]:
        """Retrieve order by id.

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def create_with_items(
        self,
        total_amount: Decimal,
        total_items: int,
        status: str,
        items: Sequence[OrderItem],
    ) -> Order:
        """Insert the order row and all its item rows in one transaction.

        Either every row is written or none is.

        Returns:
            The created Order with its items
        """
        pass

    @abstractmethod
    async def update_fields(self, order_id: str, fields: Dict[str, Any]) -> Order:
        """Overwrite the given columns of an existing order."""
        pass

    @abstractmethod
    async def set_status(self, order_id: str, status: str) -> Order:
        """Write a new status for an existing order."""
        pass
