"""
Application settings loaded from environment variables.

Uses pydantic-settings for validation and type safety.
Parsing thresholds and the UOM vocabulary live here so they can be
overridden per deployment without touching the matching logic.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from functools import lru_cache

from config.parsing import (
    DEFAULT_CURRENCY_PREFIXES,
    DEFAULT_STAGING_TTL_MINUTES,
    DEFAULT_UOM_VOCABULARY,
    FALLBACK_UOM,
)


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
    # SUPABASE
    # ===================
    supabase_url: str = Field(
        ...,
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,
        description="Supabase anon/public key"
    )
    db_timeout_seconds: int = Field(
        default=10,
        ge=1,
        le=120,
        description="PostgREST request timeout (bounds the purchase-history lookup)"
    )

    # ===================
    # QUICK-PASTE PARSING
    # ===================
    uom_vocabulary: list[str] = Field(
        default_factory=lambda: list(DEFAULT_UOM_VOCABULARY),
        min_length=1,
        description="Known unit-of-measure tokens used to anchor line parsing"
    )
    customer_match_threshold: float = Field(
        default=30,
        ge=0,
        le=100,
        description="Minimum fuzzy score to accept a customer match"
    )
    product_match_threshold: float = Field(
        default=25,
        ge=0,
        le=100,
        description="Minimum fuzzy score to accept a product match"
    )
    history_boost: float = Field(
        default=40,
        ge=0,
        le=100,
        description="Score bonus for products the customer ordered before"
    )
    history_boost_min_score: float = Field(
        default=20,
        ge=0,
        le=100,
        description="Raw score a product needs before the history boost applies"
    )
    default_uom: str = Field(
        default=FALLBACK_UOM,
        description="Fallback UOM when neither the line nor the product supplies one"
    )
    currency_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CURRENCY_PREFIXES),
        description="Currency markers recognised in front of a price"
    )
    history_lookup_limit: int = Field(
        default=200,
        ge=1,
        le=5000,
        description="Most recent order rows scanned for a customer's purchase history"
    )
    staging_ttl_minutes: int = Field(
        default=DEFAULT_STAGING_TTL_MINUTES,
        ge=1,
        le=720,
        description="How long an unconfirmed staging list is kept in memory"
    )
    order_cutoff_hour: int = Field(
        default=10,
        ge=0,
        le=23,
        description="From this hour on, pasted orders default to next-day delivery"
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

    @field_validator("uom_vocabulary")
    @classmethod
    def uom_uppercase(cls, v: list[str]) -> list[str]:
        """UOM tokens are stored uppercase, blanks removed."""
        return [u.strip().upper() for u in v if u and u.strip()]

    # ===================
    # COMPUTED PROPERTIES
    # ===================
    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload.

    Returns:
        Settings: Application settings

    Raises:
        ValidationError: If required env vars are missing or invalid
    """
    return Settings()


# For convenient imports: from config.settings import settings
settings = get_settings()
