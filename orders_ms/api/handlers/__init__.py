"""RPC command handlers."""

from .orders import OrdersRpcHandlers

__all__ = ["OrdersRpcHandlers"]
