"""
Service wiring.

Builds the store, the product validator, the application service and the
RPC server from settings. Every collaborator is created once and handed to
the next by constructor.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables ONCE before any settings objects are created
_PROJECT_ROOT = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_PROJECT_ROOT / ".env")

from orders_ms.api.errors import to_rpc_error
from orders_ms.api.handlers import OrdersRpcHandlers
from orders_ms.application.services import OrderApplicationService
from orders_ms.data.repositories import SqlAlchemyOrderRepository
from orders_ms.infrastructure.adapters.products import ProductServiceClient
from orders_ms.infrastructure.bus import RedisRpcClient, RedisRpcServer
from orders_ms.infrastructure.database import close_database, get_engine, get_session_factory
from orders_ms.settings import get_app_settings

logger = logging.getLogger(__name__)


# =============================================================================
# SINGLETON INSTANCES
# =============================================================================

_order_repository: Optional[SqlAlchemyOrderRepository] = None
_products_rpc_client: Optional[RedisRpcClient] = None
_order_service: Optional[OrderApplicationService] = None
_rpc_server: Optional[RedisRpcServer] = None


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_order_repository() -> SqlAlchemyOrderRepository:
    global _order_repository
    if _order_repository is None:
        settings = get_app_settings()
        session_factory = get_session_factory(get_engine(settings.database))
        _order_repository = SqlAlchemyOrderRepository(session_factory)
        logger.info("Created SqlAlchemyOrderRepository instance")
    return _order_repository


def get_products_rpc_client() -> RedisRpcClient:
    global _products_rpc_client
    if _products_rpc_client is None:
        settings = get_app_settings()
        _products_rpc_client = RedisRpcClient(
            redis_url=settings.redis.url,
            stream_name=settings.products.rpc_stream,
            reply_prefix=settings.products.reply_prefix,
            timeout_seconds=settings.products.timeout_seconds,
        )
        logger.info(f"Created RedisRpcClient for {settings.products.rpc_stream}")
    return _products_rpc_client


def get_order_service() -> OrderApplicationService:
    global _order_service
    if _order_service is None:
        _order_service = OrderApplicationService(
            orders=get_order_repository(),
            products=ProductServiceClient(get_products_rpc_client()),
            statuses=get_app_settings().order_statuses(),
        )
        logger.info("Created OrderApplicationService instance")
    return _order_service


def get_rpc_server() -> RedisRpcServer:
    global _rpc_server
    if _rpc_server is None:
        settings = get_app_settings()
        _rpc_server = RedisRpcServer(
            error_mapper=to_rpc_error,
            redis_url=settings.redis.url,
            stream_name=settings.orders.rpc_stream,
            consumer_group=settings.orders.consumer_group,
            consumer_name=settings.orders.consumer_name,
            reply_ttl_seconds=settings.redis.reply_ttl_seconds,
            max_concurrency=settings.orders.max_concurrency,
        )
        OrdersRpcHandlers(get_order_service()).register(_rpc_server)
        logger.info(f"Created RedisRpcServer on {settings.orders.rpc_stream}")
    return _rpc_server


# =============================================================================
# SHUTDOWN / RESET
# =============================================================================

async def shutdown() -> None:
    """Close Redis connections and dispose the engine."""
    if _rpc_server is not None:
        await _rpc_server.disconnect()
    if _products_rpc_client is not None:
        await _products_rpc_client.disconnect()
    await close_database()
    reset_dependencies()


def reset_dependencies():
    global _order_repository, _products_rpc_client, _order_service, _rpc_server

    _order_repository = None
    _products_rpc_client = None
    _order_service = None
    _rpc_server = None

    logger.info("Dependencies reset")
