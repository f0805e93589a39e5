"""
Configuration management for ZooCare.
Loads settings from environment variables (prefix ``ZOOCARE_``) and an
optional ``.env`` file.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ZOOCARE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Settings
    environment: str = Field(
        default="development",
        description="Environment: development, staging, production",
    )
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Listing
    default_page_size: int = Field(
        default=10, ge=1, description="Page size when none is requested"
    )
    max_page_size: int = Field(
        default=100, ge=1, description="Largest page a client may request"
    )

    # Recurrence preview
    max_occurrences: int = Field(
        default=366, ge=1, description="Cap on expanded task occurrences"
    )

    # API client
    api_base_url: str = Field(
        default="http://localhost:8000",
        description="Backend base URL used by ZooCareClient",
    )
    request_timeout: float = Field(
        default=10.0, gt=0, description="Client call timeout in seconds"
    )

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    return Settings()
