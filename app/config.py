# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.STORAGE_BACKEND)
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
    # Storage Configuration
    # -------------------------------------------------------------------------
    # "supabase" talks to PostgREST; "memory" keeps documents in-process
    # (local runs and tests only - nothing survives a restart)

    STORAGE_BACKEND: Literal["supabase", "memory"] = Field(
        default="supabase",
        description="Document storage backend"
    )

    SUPABASE_URL: str | None = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_SERVICE_KEY: str | None = Field(
        default=None,
        description="Supabase service_role key (bypasses RLS)"
    )

    STORAGE_TIMEOUT_SECONDS: float = Field(
        default=10.0,
        gt=0,
        le=120,
        description="Upper bound for any single storage call"
    )

    # -------------------------------------------------------------------------
    # Identity / Tokens
    # -------------------------------------------------------------------------

    JWT_SECRET: str = Field(
        default="dev-secret-key-change-in-production",
        min_length=16,
        description="Shared secret for signing bearer tokens and admin sessions"
    )

    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Signing algorithm for bearer tokens"
    )

    ACCESS_TOKEN_TTL_MINUTES: int = Field(
        default=60,
        ge=1,
        description="Lifetime of issued bearer tokens"
    )

    ALLOW_EMAIL_TOKENS: bool = Field(
        default=True,
        description="Accept a raw email address as a bearer credential (user role only)"
    )

    # -------------------------------------------------------------------------
    # Admin Session (code exchange)
    # -------------------------------------------------------------------------

    ADMIN_ACCESS_CODE: str | None = Field(
        default=None,
        description="Admin access code; admin login is disabled when unset"
    )

    ADMIN_COOKIE_NAME: str = Field(
        default="adminAccess",
        description="Name of the admin session cookie"
    )

    ADMIN_SESSION_TTL_HOURS: int = Field(
        default=24,
        ge=1,
        le=24 * 30,
        description="Admin session lifetime in hours"
    )

    ADMIN_MAX_ATTEMPTS: int = Field(
        default=5,
        ge=1,
        description="Failed admin code attempts allowed before lockout"
    )

    ADMIN_LOCKOUT_MINUTES: int = Field(
        default=15,
        ge=1,
        description="Rolling lockout window for admin code attempts"
    )

    ADMIN_ACTOR: str = Field(
        default="admin",
        description="Actor recorded on writes made through an admin session without an email"
    )

    THROTTLE_BACKEND: Literal["memory", "redis"] = Field(
        default="memory",
        description="Where admin attempt counters live (memory = single instance only)"
    )

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for the shared attempt store"
    )

    # -------------------------------------------------------------------------
    # Domain Rules
    # -------------------------------------------------------------------------

    PROJECT_STRICT_TRANSITIONS: bool = Field(
        default=True,
        description="Only allow forward project status transitions"
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
        description="Enable debug mode (verbose logging)"
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
    def admin_session_seconds(self) -> int:
        """Admin session lifetime in seconds (cookie max-age)."""
        return self.ADMIN_SESSION_TTL_HOURS * 60 * 60

    @property
    def admin_lockout_seconds(self) -> int:
        return self.ADMIN_LOCKOUT_MINUTES * 60

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
