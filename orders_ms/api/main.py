"""
Orders microservice entry point.

Serves the order commands over Redis Streams until SIGINT/SIGTERM.
"""
import asyncio
import contextlib
import logging
import signal

from orders_ms.api import dependencies
from orders_ms.infrastructure.database import get_engine, init_database
from orders_ms.infrastructure.logging import configure_logging
from orders_ms.settings import get_app_settings


logger = logging.getLogger(__name__)


async def serve() -> None:
    settings = get_app_settings()
    configure_logging(settings.orders.log_level)

    await init_database(get_engine(settings.database))
    server = dependencies.get_rpc_server()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # add_signal_handler is unavailable on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, server.stop)

    try:
        await server.serve_forever(
            batch_size=settings.redis.batch_size,
            block_ms=settings.redis.block_ms,
        )
    finally:
        logger.info("🛑 Stopping orders service...")
        await dependencies.shutdown()
        logger.info("✅ Orders service stopped")


def run() -> None:
    asyncio.run(serve())


if __name__ == "__main__":
    run()
