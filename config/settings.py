"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """
    Application settings.

    All values loaded from .env file or environment variables.
    Validation happens automatically on startup.
    """

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),  # Check current dir, then parent
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"  # Ignore extra env vars
    )

    # ===================
    # REMOTE MATCHER
    # ===================
    anthropic_api_key: Optional[str] = Field(
        None,
        description="Anthropic API key used by the remote matcher"
    )
    matcher_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model used to match order lines against the catalog"
    )
    matcher_max_tokens: int = Field(
        default=8192,
        ge=256,
        le=64000,
        description="Maximum tokens for a matcher response"
    )

    # ===================
    # LEARNED MATCHES
    # ===================
    learned_match_backend: str = Field(
        default="json",
        pattern="^(json|supabase|memory)$",
        description="Durable store for learned matches"
    )
    learned_match_path: str = Field(
        default="data/learned_matches.json",
        description="File used by the json learned match store"
    )
    learned_match_table: str = Field(
        default="app_storage",
        description="Supabase key-value table used by the supabase store"
    )
    learned_match_key: str = Field(
        default="kf_learned_matches",
        description="Row key holding the learned match list"
    )

    # ===================
    # SUPABASE
    # ===================
    supabase_url: Optional[str] = Field(
        None,
        description="Supabase project URL"
    )
    supabase_key: Optional[str] = Field(
        None,
        description="Supabase anon/public key"
    )

    # ===================
    # BUSINESS SETTINGS
    # ===================
    conversion_quantity_threshold: float = Field(
        default=20,
        gt=0,
        le=1000,
        description="Quantities at or above this are assumed to be in the target unit already"
    )

    # ===================
    # APP SETTINGS
    # ===================
    environment: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="Application environment"
    )
    debug: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Logging level"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API host"
    )
    api_port: int = Field(
        default=8000,
        ge=1000,
        le=65535,
        description="API port"
    )

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def matcher_configured(self) -> bool:
        """Check if the remote matcher has credentials."""
        return bool(self.anthropic_api_key)

    @property
    def supabase_configured(self) -> bool:
        """Check if Supabase is properly configured."""
        return bool(self.supabase_url and self.supabase_key)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
