"""Centralized settings for the API process.

Values come from environment variables prefixed with ``SHOPFRONT_`` or from a
local ``.env`` file, e.g. ``SHOPFRONT_DATABASE_URL=postgresql://...``.

The low-stock threshold is not here: it is stored in the
``settings`` table so back-office staff can change it at runtime.
"""

from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SHOPFRONT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = "sqlite:///./shopfront.db"
    echo_sql: bool = False

    cors_origins: List[str] = ["*"]

    token_ttl_hours: int = 8
    order_number_prefix: str = "WEB"

    default_page_size: int = 50
    max_page_size: int = 100

    log_level: str = "INFO"
    log_file: Optional[str] = None
