"""
Application Configuration

Uses Pydantic Settings for type-safe configuration.
"""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field, field_validator, ConfigDict


class Settings(BaseSettings):
    """Application settings with validation."""

    # === Core ===
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # === Database ===
    database_url: str = Field(
        default="sqlite:///./plore.db",
        description="Database connection URL"
    )

    # === Health Data Provider ===
    provider_api_url: str = Field(
        default="http://localhost:8080/api/v1",
        description="Health data provider API base URL"
    )
    provider_api_token: Optional[str] = Field(
        default=None,
        description="Bearer token for the health data provider"
    )
    provider_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to every provider call"
    )
    max_concurrent_provider_calls: int = Field(
        default=8,
        ge=1,
        description="Upper bound on in-flight provider calls"
    )
    route_page_size: int = Field(default=500, ge=1)

    # === Sync ===
    sync_interval_seconds: int = Field(
        default=3600,
        description="Minimum interval between incremental syncs"
    )
    simplify_tolerance_m: float = Field(
        default=10.0,
        gt=0,
        description="Route simplification tolerance in meters"
    )
    background_sync_enabled: bool = Field(default=True)

    @field_validator('database_url')
    @classmethod
    def fix_postgres_url(cls, v: str) -> str:
        """Fix Render/Railway postgres:// URL to postgresql://"""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql://", 1)
        return v

    @field_validator('provider_api_url')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


# Global settings instance
settings = Settings()
