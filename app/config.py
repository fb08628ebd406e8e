# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import get_settings
#   settings = get_settings()
#   print(settings.CLOUDINARY_CLOUD_NAME)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# Media services never read Settings directly. app/dependencies.py converts it
# once into explicit policy/credential objects that are passed to constructors.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development
    """

    # -------------------------------------------------------------------------
    # Remote Asset Store (Cloudinary)
    # -------------------------------------------------------------------------

    ASSET_STORE_BACKEND: Literal["cloudinary", "memory"] = Field(
        default="cloudinary",
        description="Which asset store implementation to use"
    )

    CLOUDINARY_CLOUD_NAME: str = Field(
        default="",
        description="Cloudinary cloud name (required for the cloudinary backend)"
    )

    CLOUDINARY_API_KEY: str = Field(
        default="",
        description="Cloudinary API key"
    )

    CLOUDINARY_API_SECRET: str = Field(
        default="",
        description="Cloudinary API secret used to sign requests"
    )

    CLOUDINARY_API_BASE: str = Field(
        default="https://api.cloudinary.com/v1_1",
        description="Base URL of the Cloudinary upload API"
    )

    ASSET_STORE_TIMEOUT_SECONDS: float = Field(
        default=60.0,
        gt=0,
        description="HTTP timeout for upload/destroy calls"
    )

    ASSET_NAMESPACE: str = Field(
        default="patwa_toli",
        min_length=1,
        description="Top-level folder for uploaded media (<namespace>/<entity-kind>)"
    )

    DEFAULT_AVATAR_PATH: str = Field(
        default="/uploads/profile-pics/default_avatar.png",
        description="Locally served placeholder avatar, never deleted remotely"
    )

    # -------------------------------------------------------------------------
    # Upload Limits (per asset class)
    # -------------------------------------------------------------------------

    PROFILE_PIC_MAX_MB: int = Field(default=5, ge=1, le=500)
    POST_MEDIA_MAX_MB: int = Field(default=50, ge=1, le=500)
    STORY_MEDIA_MAX_MB: int = Field(default=25, ge=1, le=500)
    EVENT_IMAGE_MAX_MB: int = Field(default=10, ge=1, le=500)
    BUSINESS_IMAGE_MAX_MB: int = Field(default=10, ge=1, le=500)

    STORY_TTL_HOURS: int = Field(
        default=24,
        ge=1,
        description="How long a story stays visible before the sweep removes it"
    )

    STORY_PURGE_INTERVAL_SECONDS: int = Field(
        default=3600,
        ge=60,
        description="How often celery beat runs the expired-story sweep"
    )

    # -------------------------------------------------------------------------
    # Document Store (Supabase)
    # -------------------------------------------------------------------------

    ENTITY_STORE_BACKEND: Literal["supabase", "memory"] = Field(
        default="supabase",
        description="Which document store implementation to use"
    )

    SUPABASE_URL: str = Field(
        default="",
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        default="",
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="dev-jwt-secret-change-in-production",
        description="Secret used to verify HS256 access tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(default="0.0.0.0")

    API_PORT: int = Field(default=8000, ge=1, le=65535)

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS string into a list."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.
    """
    return Settings()


# Global settings instance for the HTTP and worker layers
settings = get_settings()
