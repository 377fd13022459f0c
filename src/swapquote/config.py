"""Application configuration using pydantic-settings.

Portion flags are read from the environment on every call through
``portion_flag_from_env`` so a runtime toggle takes effect without a restart.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_POSITIVE_CACHE_ENTRY_TTL = 600  # seconds
DEFAULT_NEGATIVE_CACHE_ENTRY_TTL = 600  # seconds


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=False, description="Enable debug logging")

    # ======================
    # Portion service
    # ======================
    portion_api_url: str = Field(
        default="http://localhost:8080", description="Base URL of the portion service"
    )
    portion_request_timeout: Optional[float] = Field(
        default=None, description="Portion request timeout in seconds (None = httpx default)"
    )

    # ======================
    # Portion flags
    # ======================
    enable_portion: bool = Field(default=False, description="Enable portion (fee) lookups")
    force_portion: bool = Field(
        default=False, description="Testing mode: skip the portion cache on every call"
    )
    portion_allowlist_only: bool = Field(
        default=True,
        description="Only allowlisted pairs get a portion; other pairs never reach the service",
    )

    # ======================
    # Portion cache
    # ======================
    positive_cache_entry_ttl: int = Field(
        default=DEFAULT_POSITIVE_CACHE_ENTRY_TTL,
        description="TTL in seconds for responses that found a portion",
    )
    negative_cache_entry_ttl: int = Field(
        default=DEFAULT_NEGATIVE_CACHE_ENTRY_TTL,
        description="TTL in seconds for responses that found no portion",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def get_safe_dict(self) -> dict:
        """Return settings as a plain dict for diagnostics."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "portion": {
                "api_url": self.portion_api_url,
                "timeout": self.portion_request_timeout,
                "enabled": self.enable_portion,
                "force": self.force_portion,
                "allowlist_only": self.portion_allowlist_only,
                "positive_ttl": self.positive_cache_entry_ttl,
                "negative_ttl": self.negative_cache_entry_ttl,
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def portion_flag_from_env() -> bool:
    """Read the ENABLE_PORTION flag fresh, bypassing the settings cache."""
    return Settings().enable_portion
