"""Unit of Work: one session and one transaction per store operation."""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


logger = logging.getLogger(__name__)


class UnitOfWork:
    """
    Scope of a single store operation.

    Everything added through ``session`` is committed together by
    ``commit()``; leaving the block with an exception rolls it back. The
    session is closed on exit either way.

    Usage:
        async with create_uow(session_factory) as uow:
            uow.session.add(order_model)
            await uow.commit()
    """

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory
        self._session: Optional[AsyncSession] = None

    async def __aenter__(self) -> "UnitOfWork":
        self._session = self._session_factory()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        session, self._session = self._session, None
        try:
            if exc_type is not None:
                logger.error(f"Order store operation failed, rolling back: {exc_val}")
                await session.rollback()
        finally:
            await session.close()

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork is not active; use it as an async context manager")
        return self._session

    async def commit(self) -> None:
        await self.session.commit()


def create_uow(session_factory: async_sessionmaker) -> UnitOfWork:
    """Create a Unit of Work bound to ``session_factory``."""
    return UnitOfWork(session_factory)
