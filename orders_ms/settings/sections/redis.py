from pydantic_settings import SettingsConfigDict

from orders_ms.settings.base import OrdersBaseSettings


class RedisSettings(OrdersBaseSettings):
    """
    Redis Streams transport settings.
    Loaded automatically from .env with prefix REDIS_*
    """

    url: str = "redis://localhost:6379/0"

    # Consumer loop
    block_ms: int = 1000
    batch_size: int = 10

    # Reply streams nobody picked up are dropped after this long
    reply_ttl_seconds: int = 60

    model_config = SettingsConfigDict(env_prefix="REDIS_")
