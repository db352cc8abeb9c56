"""
Configuration module for the Order Valuation service.
Loads settings from environment variables and an optional .env file.
"""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application Configuration
    app_host: str = Field(
        default="0.0.0.0",
        alias="APP_HOST",
        description="Host to bind the application"
    )
    app_port: int = Field(
        default=8000,
        alias="APP_PORT",
        description="Port to bind the application"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level"
    )

    # Currency display
    currency_symbol: str = Field(
        default="$",
        alias="CURRENCY_SYMBOL",
        description="Symbol prefixed to formatted amounts"
    )
    currency_code: str = Field(
        default="sgd",
        alias="CURRENCY_CODE",
        description="Default ISO currency code when a record does not carry one"
    )

    # Returns
    return_window_days: int = Field(
        default=30,
        alias="RETURN_WINDOW_DAYS",
        description="Days after delivery during which an order can be returned"
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()
