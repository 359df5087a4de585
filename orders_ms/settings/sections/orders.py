from typing import List

from pydantic import model_validator
from pydantic_settings import SettingsConfigDict

from orders_ms.domain.value_objects import STATUS_MAX_LENGTH
from orders_ms.settings.base import OrdersBaseSettings


class OrdersSettings(OrdersBaseSettings):
    """
    Settings for the orders service itself.
    Loaded automatically from .env with prefix ORDERS_*

    ``ORDERS_STATUSES`` is a JSON list, e.g. '["PENDING", "PAID", "CANCELLED"]'.
    """

    rpc_stream: str = "orders:rpc"
    consumer_group: str = "orders-ms"
    consumer_name: str = "orders-ms-1"
    max_concurrency: int = 20

    statuses: List[str] = ["PENDING", "PAID", "DELIVERED", "CANCELLED"]
    initial_status: str = "PENDING"
    cancelled_status: str = "CANCELLED"

    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_prefix="ORDERS_")

    @model_validator(mode="after")
    def _check_statuses(self) -> "OrdersSettings":
        too_long = [name for name in self.statuses if len(name) > STATUS_MAX_LENGTH]
        if too_long:
            raise ValueError(
                f"ORDERS_STATUSES names must be at most {STATUS_MAX_LENGTH} characters: {too_long}"
            )
        for name in (self.initial_status, self.cancelled_status):
            if name not in self.statuses:
                raise ValueError(f"{name!r} must be listed in ORDERS_STATUSES {self.statuses}")
        return self
