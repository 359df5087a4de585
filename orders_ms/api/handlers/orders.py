"""
Order command handlers.

Decode RPC payloads into request DTOs, call the application service and
encode the result for the reply. Errors propagate to the RPC server, which
maps them with ``orders_ms.api.errors.to_rpc_error``.
"""
import logging
from typing import Any, Awaitable, Callable, Dict

from pydantic import BaseModel

from orders_ms.application.dtos.order_dto import (
    ChangeOrderStatusRequest,
    CreateOrderRequest,
    OrderIdRequest,
    OrderPaginationRequest,
    UpdateOrderRequest,
)
from orders_ms.application.services.order_service import OrderApplicationService


logger = logging.getLogger(__name__)

Handler = Callable[[Any], Awaitable[Any]]


def _encode(dto: BaseModel) -> Dict[str, Any]:
    return dto.model_dump(mode="json", by_alias=True)


class OrdersRpcHandlers:
    """Handlers for the ``getOrders`` ... ``changeOrderStatus`` commands."""

    def __init__(self, order_service: OrderApplicationService) -> None:
        self._service = order_service

    def routes(self) -> Dict[str, Handler]:
        """Command name -> handler."""
        return {
            "getOrders": self.get_orders,
            "getOrder": self.get_order,
            "createOrder": self.create_order,
            "updateOrder": self.update_order,
            "deleteOrder": self.delete_order,
            "changeOrderStatus": self.change_order_status,
        }

    def register(self, server) -> None:
        for cmd, handler in self.routes().items():
            server.register(cmd, handler)

    async def get_orders(self, payload: Any) -> Dict[str, Any]:
        request = OrderPaginationRequest.model_validate(payload or {})
        logger.info(f"Retrieving orders with {_encode(request)}")
        return _encode(await self._service.list_orders(request))

    async def get_order(self, payload: Any) -> Dict[str, Any]:
        request = OrderIdRequest.model_validate(payload)
        logger.info(f"Retrieving order with id {request.id}")
        return _encode(await self._service.get_order(str(request.id)))

    async def create_order(self, payload: Any) -> Dict[str, Any]:
        request = CreateOrderRequest.model_validate(payload)
        logger.info(f"Creating order with {len(request.items)} item(s)")
        return _encode(await self._service.create_order(request))

    async def update_order(self, payload: Any) -> Dict[str, Any]:
        request = UpdateOrderRequest.model_validate(payload)
        logger.info(f"Updating order with id {request.id}")
        return _encode(await self._service.update_order(request))

    async def delete_order(self, payload: Any) -> Dict[str, Any]:
        request = OrderIdRequest.model_validate(payload)
        logger.info(f"Deleting order with id {request.id}")
        return _encode(await self._service.delete_order(str(request.id)))

    async def change_order_status(self, payload: Any) -> Dict[str, Any]:
        request = ChangeOrderStatusRequest.model_validate(payload)
        logger.info(f"Changing order status with id {request.id} to {request.status}")
        return _encode(await self._service.change_order_status(request))
