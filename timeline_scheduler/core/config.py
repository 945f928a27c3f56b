"""Application configuration using pydantic-settings."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Scheduler settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="TIMELINE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application Configuration
    environment: Literal["development", "staging", "production"] = "development"
    log_level: str = "INFO"

    # Remote Timeline Service
    api_base_url: str = Field(
        default="http://localhost:54321/functions/v1/timeline-server",
        description="Base URL of the remote summarization/reminder service",
    )
    api_key: str = Field(
        default="",
        description="Bearer credential sent with every remote call",
    )
    remote_enabled: bool = Field(
        default=True,
        description="Try the remote service before the local fallback",
    )
    remote_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for a single remote attempt",
    )
    remote_retry_attempts: int = Field(
        default=3,
        description="Attempts used by caller-side retries (timeline loading)",
    )
    remote_retry_backoff_seconds: float = Field(
        default=1.0,
        description="Base delay in seconds between caller-side retries",
    )

    # Timeline Defaults
    default_summary_interval: int = Field(
        default=12,
        description="Turns between automatic summaries",
    )
    default_reminder_interval: int = Field(
        default=10,
        description="Turns between progress reminders",
    )
    default_consolidation_interval: int = Field(
        default=40,
        description="Turns between consolidation attempts",
    )
    default_summary_format: Literal["bullet", "paragraph", "sentences"] = "bullet"

    # Clamping Bounds
    min_reminder_interval: int = 5
    min_consolidation_interval: int = 30
    max_consolidation_interval: int = 100
    consolidation_min_summaries: int = Field(
        default=3,
        ge=2,
        description="Unconsolidated summaries required before consolidating",
    )

    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"


# Global settings instance
settings = Settings()
