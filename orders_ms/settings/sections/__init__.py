from .database import DatabaseSettings
from .orders import OrdersSettings
from .products import ProductsServiceSettings
from .redis import RedisSettings

__all__ = [
    "DatabaseSettings",
    "OrdersSettings",
    "ProductsServiceSettings",
    "RedisSettings",
]
