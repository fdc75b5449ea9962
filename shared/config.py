"""
Shared configuration management for the Catalog service.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="CATALOG_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")
    log_file: Optional[str] = Field(default=None)
    log_file_max_bytes: int = Field(default=10 * 1024 * 1024)
    log_file_backups: int = Field(default=3)

    # PostgreSQL
    postgres_dsn: str = Field(default="postgres://localhost:5432/catalog")
    postgres_min_pool: int = Field(default=2)
    postgres_max_pool: int = Field(default=10)
    postgres_command_timeout: float = Field(default=30.0)

    # Redis
    redis_url: str = Field(default="redis://localhost:6379/0")
    cache_ttl_seconds: int = Field(default=600)

    # Kafka
    kafka_bootstrap: str = Field(default="localhost:9092")
    image_processing_topic: str = Field(default="image_processing")
    kafka_send_timeout: float = Field(default=10.0)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port)
