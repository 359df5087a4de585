# orders_ms/settings/base.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class OrdersBaseSettings(BaseSettings):
    """Common .env loading for every settings section."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )
