"""
Order domain exceptions.

Raised by the application layer. The RPC boundary catches them and
translates them into the ``{status, message}`` error envelope.
"""
from typing import Iterable, Optional


class OrderServiceError(Exception):
    """Base class for all domain failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderNotFoundError(OrderServiceError):
    """No order row matches the id."""

    def __init__(self, order_id: str):
        super().__init__(f"Order with id {order_id} not found")
        self.order_id = order_id


class OrderValidationError(OrderServiceError):
    """The request cannot be carried out with the data it references."""


class ProductValidationError(OrderValidationError):
    """
    The product catalog rejected the requested products.

    ``status`` holds the product service's own status code when it sent one.
    """

    def __init__(self, reason: str, status: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.status = status


class ProductNotResolvedError(ProductValidationError):
    """Some product ids have no matching record in the catalog reply."""

    def __init__(self, product_ids: Iterable[int]):
        self.product_ids = sorted(product_ids)
        super().__init__(f"Products not found: {self.product_ids}")


class InvalidOrderStatusError(OrderValidationError):
    """Requested status is not part of the configured status set."""

    def __init__(self, status: str, allowed: Iterable[str]):
        self.requested_status = status
        self.allowed = list(allowed)
        super().__init__(f"Invalid order status {status!r}, expected one of {self.allowed}")


class UpstreamUnavailableError(OrderServiceError):
    """A collaborating service could not be reached or answered garbage."""

    def __init__(self, service: str, reason: str):
        super().__init__(f"{service} unavailable: {reason}")
        self.service = service
        self.reason = reason
