"""
Shared configuration management for the recipe access client.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RecipeClientConfig(BaseSettings):
    """Client configuration read from ``RECIPES_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RECIPES_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Remote recipe API
    api_base_url: str = Field(default="https://modlima.fuadfakhruz.id")
    request_timeout: float = Field(default=10.0, gt=0)

    # Cache TTLs (seconds)
    list_ttl_seconds: float = Field(default=300.0, ge=0)
    detail_ttl_seconds: float = Field(default=600.0, ge=0)
    search_ttl_seconds: float = Field(default=180.0, ge=0)
    default_ttl_seconds: float = Field(default=300.0, ge=0)
    cache_max_entries: Optional[int] = Field(default=None, gt=0)

    # Transport resilience
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=0.5, ge=0)
    circuit_failure_threshold: int = Field(default=5, ge=1)
    circuit_recovery_timeout: float = Field(default=30.0, ge=0)


def get_config(**overrides) -> RecipeClientConfig:
    """Get client configuration, applying explicit overrides over the environment."""
    return RecipeClientConfig(**overrides)
