"""Configuration management using Pydantic Settings"""

from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Hosted backend (table API + auth)
    backend_url: str = "http://localhost:8001"
    backend_api_key: str = ""
    backend_access_token: str | None = None  # Falls back to the API key

    # Service
    service_name: str = "payment-tracker"
    log_level: str = "INFO"

    # HTTP Client
    http_timeout_seconds: float = 5.0

    # Lending defaults
    currency: str = "Q"
    default_monthly_percentage: Decimal = Decimal("5.00")

    # Listings
    items_per_page: int = 10
    payments_per_page: int = 15
    upcoming_horizon_days: int = 30
    upcoming_limit: int = 5


settings = Settings()
