"""Data layer - SQLAlchemy persistence for the Order aggregate."""

from .repositories import SqlAlchemyOrderRepository
from .uow import UnitOfWork, create_uow

__all__ = ["SqlAlchemyOrderRepository", "UnitOfWork", "create_uow"]
