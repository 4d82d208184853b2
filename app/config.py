# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
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

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used to verify access tokens"
    )

    # -------------------------------------------------------------------------
    # OpenAI / LLM Configuration
    # -------------------------------------------------------------------------
    # Required for question generation

    OPENAI_API_KEY: str = Field(
        ...,
        description="OpenAI API key for the question writer"
    )

    OPENAI_MODEL: str = Field(
        default="gpt-4o-mini",
        description="Model used to write questions (must support JSON mode)"
    )

    QUESTION_TEMPERATURE: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="OpenAI temperature for question writing (higher = more variety)"
    )

    # -------------------------------------------------------------------------
    # Stripe Configuration
    # -------------------------------------------------------------------------
    # Optional in development - billing endpoints return 503 without them

    STRIPE_SECRET_KEY: str = Field(
        default="",
        description="Stripe secret API key"
    )

    STRIPE_WEBHOOK_SECRET: str = Field(
        default="",
        description="Signing secret for the Stripe webhook endpoint"
    )

    STRIPE_PRICE_ID_PRO: str = Field(
        default="",
        description="Stripe price ID of the Pro subscription"
    )

    APP_URL: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web app (checkout redirects land here)"
    )

    # -------------------------------------------------------------------------
    # Game Rules
    # -------------------------------------------------------------------------

    FREE_DAILY_QUESTION_LIMIT: int = Field(
        default=20,
        ge=1,
        le=1000,
        description="Questions per UTC day for free-plan users"
    )

    HEAD_TO_HEAD_QUESTIONS: int = Field(
        default=10,
        ge=1,
        le=30,
        description="Number of questions in a head-to-head game"
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

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (production sets env vars directly)
        env_ignore_empty=True,
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:3000, https://myapp.com" -> ["http://localhost:3000", "https://myapp.com"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def stripe_configured(self) -> bool:
        """True when checkout can be created."""
        return bool(self.STRIPE_SECRET_KEY and self.STRIPE_PRICE_ID_PRO)

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

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
