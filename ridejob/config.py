"""Application configuration using pydantic-settings."""

from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    """Application environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_env: Environment = Environment.DEVELOPMENT
    debug: bool = True
    log_level: str = "INFO"

    # Frontend URL (CORS origin in production)
    frontend_url: str = "http://localhost:3000"

    # Lark chat webhooks (default campaign)
    lark_webhook_url: str | None = None
    lark_webhook_url_prod: str | None = None
    lark_webhook_url_test: str | None = None

    # Lark Base webhooks (default campaign)
    lark_base_webhook_url: str | None = None
    lark_base_webhook_url_prod: str | None = None
    lark_base_webhook_url_test: str | None = None

    # Lark webhooks (Coupang campaign)
    lark_webhook_url_coupang: str | None = None
    lark_webhook_url_coupang_prod: str | None = None
    lark_webhook_url_coupang_test: str | None = None
    lark_base_webhook_url_coupang: str | None = None
    lark_base_webhook_url_coupang_prod: str | None = None
    lark_base_webhook_url_coupang_test: str | None = None

    # Send only the Base record (staging / test traffic)
    lark_send_base_only: bool = False

    webhook_timeout: float = Field(default=10.0, ge=1.0, le=60.0)  # seconds

    # microCMS (job inventory + location master)
    microcms_service_domain: str | None = None
    microcms_api_key: str | None = None
    microcms_timeout: float = Field(default=10.0, ge=1.0, le=60.0)  # seconds

    # Postal code -> prefecture table (ken_all.json)
    postcode_data_path: str = "./data/ken_all.json"

    # ZipCloud address lookup
    zipcloud_enabled: bool = True
    zipcloud_endpoint: str = "https://zipcloud.ibsnet.co.jp/api/search"

    # Google Apps Script endpoints (Coupang campaign)
    gas_seminar_slots_url: str | None = None
    gas_coupang_step1_options_url: str | None = None

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.app_env == Environment.PRODUCTION

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.app_env == Environment.DEVELOPMENT

    @property
    def microcms_base_url(self) -> str | None:
        """microCMS REST endpoint, or None when the service domain is not set."""
        if not self.microcms_service_domain:
            return None
        return f"https://{self.microcms_service_domain}.microcms.io/api/v1"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience access
settings = get_settings()
