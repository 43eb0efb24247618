"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Database
    database_url: str = "postgresql+asyncpg://sellerdesk:sellerdesk_dev_password@db:5432/sellerdesk"

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Catalog submission
    placeholder_image_url: str = "https://placehold.co/400x400?text=No+Image"
    default_category_name: str = "Others"
    qa_initial_status: str = "pending_digital_review"

    # SKU allocation
    sku_max_attempts: int = 10


settings = Settings()
