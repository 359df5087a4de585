"""
Engine and session factory for the order store.

One process-wide engine is built lazily from ``DatabaseSettings`` and shared
by every session factory handed to the repositories.
"""
import logging
from typing import Any, Dict, Optional

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from orders_ms.settings.sections import DatabaseSettings


logger = logging.getLogger(__name__)

engine: Optional[AsyncEngine] = None


def _pool_options(settings: DatabaseSettings) -> Dict[str, Any]:
    if make_url(settings.database_url).get_backend_name() == "sqlite":
        # SQLite does not take pool sizing options
        return {}
    return {
        "pool_size": settings.pool_size,
        "max_overflow": settings.max_overflow,
        "pool_timeout": settings.pool_timeout,
        "pool_recycle": settings.pool_recycle,
        "pool_pre_ping": True,
    }


def create_engine(settings: DatabaseSettings) -> AsyncEngine:
    """
    Build an async engine for ``settings.database_url``.

    Args:
        settings: Database settings section

    Returns:
        New AsyncEngine (not connected yet)
    """
    url = make_url(settings.database_url)
    logger.info(f"Creating database engine: {url.render_as_string(hide_password=True)}")
    return create_async_engine(url, echo=settings.echo_sql, **_pool_options(settings))


def get_engine(settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
    """Return the shared engine, creating it on first use."""
    global engine
    if engine is None:
        engine = create_engine(settings or DatabaseSettings())
    return engine


def get_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    """
    Session factory for repositories.

    ``expire_on_commit`` stays off: repositories map ORM objects to domain
    entities after committing.
    """
    return async_sessionmaker(bind=bind, expire_on_commit=False, autoflush=False)


async def init_database(bind: AsyncEngine) -> None:
    """Create the ``orders`` and ``order_items`` tables when missing."""
    from orders_ms.data.models import Base

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ Order tables ready")


async def close_database() -> None:
    """Dispose the shared engine, if one was created."""
    global engine
    if engine is None:
        return
    await engine.dispose()
    engine = None
    logger.info("✅ Database connections closed")
