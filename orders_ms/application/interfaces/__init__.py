"""Application layer interfaces."""
from abc import ABC, abstractmethod
from typing import AbstractSet, List

from orders_ms.domain.value_objects import ProductRecord


class IProductValidator(ABC):
    """
    Interface for resolving product ids against the product service.

    This interface defines the contract for the product catalog lookup,
    allowing the application layer to validate products without depending
    on the transport the product service is reached through.
    """

    @abstractmethod
    async def validate(self, product_ids: AbstractSet[int]) -> List[ProductRecord]:
        """
        Resolve product ids to authoritative product records.

        Args:
            product_ids: De-duplicated product ids

        Returns:
            Exactly one record per requested id, in no particular order

        Raises:
            ProductValidationError: If the catalog rejects any id
            UpstreamUnavailableError: If the product service cannot be reached
        """
        pass


__all__ = ["IProductValidator"]
