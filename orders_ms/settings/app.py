# orders_ms/settings/app.py
from functools import lru_cache

from orders_ms.domain.value_objects import OrderStatuses
from orders_ms.settings.sections import (
    DatabaseSettings,
    OrdersSettings,
    ProductsServiceSettings,
    RedisSettings,
)


class AppSettings:
    """
    Central application settings aggregator.
    Settings are loaded lazily inside __init__
    to prevent eager evaluation at import time.
    """

    def __init__(self):
        self.database = DatabaseSettings()
        self.redis = RedisSettings()
        self.orders = OrdersSettings()
        self.products = ProductsServiceSettings()

    def order_statuses(self) -> OrderStatuses:
        return OrderStatuses.from_names(
            self.orders.statuses,
            initial=self.orders.initial_status,
            cancelled=self.orders.cancelled_status,
        )


@lru_cache()
def get_app_settings() -> AppSettings:
    """Return cached global settings for the entire app."""
    return AppSettings()
