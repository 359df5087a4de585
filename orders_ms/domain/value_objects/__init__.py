"""Domain value objects."""

from .value_objects import (
    MONEY_QUANTUM,
    STATUS_MAX_LENGTH,
    OrderStatuses,
    ProductRecord,
    to_money,
)

__all__ = ["MONEY_QUANTUM", "OrderStatuses", "ProductRecord", "STATUS_MAX_LENGTH", "to_money"]
