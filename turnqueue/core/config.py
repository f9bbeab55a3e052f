from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration read from environment variables."""

    model_config = SettingsConfigDict(env_prefix="TURNQUEUE_", env_file=".env", case_sensitive=False)

    app_name: str = Field(default="Turn Queue API")
    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(levelname)s %(name)s %(message)s")
    api_prefix: str = Field(default="/api")

    # Retention pruning of attended/cancelled turns
    retention_enabled: bool = Field(default=True)
    retention_max_age_seconds: int = Field(default=24 * 60 * 60, gt=0)
    retention_interval_seconds: float = Field(default=300.0, gt=0)

    # Observability configuration
    otel_enabled: bool = Field(default=False)
    otel_service_name: str = Field(default="turnqueue-api")
    otel_exporter_otlp_endpoint: str | None = Field(default=None)
    otel_exporter_otlp_headers: str | None = Field(default=None)


@lru_cache
def get_settings() -> Settings:
    """Return a cached instance of the application settings."""

    return Settings()
