from pydantic_settings import SettingsConfigDict

from orders_ms.settings.base import OrdersBaseSettings


class ProductsServiceSettings(OrdersBaseSettings):
    """
    Where and how to reach the product service.
    Loaded automatically from .env with prefix PRODUCTS_*
    """

    rpc_stream: str = "products:rpc"
    reply_prefix: str = "orders-ms:reply"
    timeout_seconds: float = 5.0

    model_config = SettingsConfigDict(env_prefix="PRODUCTS_")
