"""
Product service adapter.

Implements IProductValidator by calling ``validateProducts`` on the product
service over the Redis Streams request/reply bus.
"""
import logging
from decimal import Decimal
from typing import AbstractSet, Any, List, Protocol

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from orders_ms.application.interfaces import IProductValidator
from orders_ms.domain.exceptions import (
    ProductNotResolvedError,
    ProductValidationError,
    UpstreamUnavailableError,
)
from orders_ms.domain.value_objects import ProductRecord
from orders_ms.infrastructure.bus.errors import RpcRemoteError, RpcTransportError


logger = logging.getLogger(__name__)

VALIDATE_PRODUCTS = "validateProducts"
SERVICE_NAME = "product service"


class RpcSender(Protocol):
    async def send(self, cmd: str, data: Any = None) -> Any: ...


class _ProductPayload(BaseModel):
    """One entry of the ``validateProducts`` reply."""

    id: int
    name: str
    price: Decimal

    model_config = ConfigDict(extra="ignore")


_PRODUCT_LIST = TypeAdapter(List[_ProductPayload])


class ProductServiceClient(IProductValidator):
    """
    Product validator backed by the product service.

    Translates transport failures into UpstreamUnavailableError and
    rejections into ProductValidationError. Never returns a partial result:
    a reply missing any requested id is a validation failure.
    """

    def __init__(self, rpc: RpcSender):
        """
        Args:
            rpc: Request/reply client addressed to the product service
        """
        self._rpc = rpc

    async def validate(self, product_ids: AbstractSet[int]) -> List[ProductRecord]:
        ids = sorted(set(product_ids))
        if not ids:
            return []

        try:
            payload = await self._rpc.send(VALIDATE_PRODUCTS, ids)
        except RpcRemoteError as e:
            logger.warning(f"Product service rejected {ids}: {e.message}")
            raise ProductValidationError(e.message, status=e.status) from e
        except RpcTransportError as e:
            logger.error(f"Product service call failed for {ids}: {e}")
            raise UpstreamUnavailableError(SERVICE_NAME, str(e)) from e

        try:
            entries = _PRODUCT_LIST.validate_python(payload)
        except ValidationError as e:
            raise UpstreamUnavailableError(
                SERVICE_NAME, f"malformed {VALIDATE_PRODUCTS} reply: {e.error_count()} error(s)"
            ) from e

        records = {
            entry.id: ProductRecord(id=entry.id, name=entry.name, price=entry.price)
            for entry in entries
        }
        missing = set(ids) - records.keys()
        if missing:
            raise ProductNotResolvedError(missing)

        return [records[product_id] for product_id in ids]
