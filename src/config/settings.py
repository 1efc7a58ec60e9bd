"""
Centralized settings management using pydantic-settings.

All environment variables and configuration values are defined here.
Use get_settings() to access the singleton settings instance.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Required environment variables:
        - SUPABASE_URL: Supabase project URL
        - SUPABASE_SERVICE_KEY: Supabase service role key

    Optional environment variables:
        - OPENAI_API_KEY: enables the LLM entity extractor
        - HOST / PORT: Server bind address
        - ENVIRONMENT: Environment name (development, staging, production)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Environment
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")

    @property
    def is_development(self) -> bool:
        return self.environment.lower() in ("development", "dev", "local")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() in ("production", "prod")

    # ==========================================================================
    # Server Configuration
    # ==========================================================================
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8080, description="Server port")

    cors_origins: List[str] = Field(
        default=[
            "http://localhost:5173",
            "http://localhost:8080",
            "http://127.0.0.1:5173",
        ],
        description="Allowed CORS origins"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    # ==========================================================================
    # Supabase Configuration
    # ==========================================================================
    supabase_url: str = Field(..., description="Supabase project URL")
    supabase_service_key: str = Field(..., description="Supabase service role key")

    products_table: str = Field(
        default="ProductCard",
        description="Table holding the scraped product catalog"
    )
    products_recency_column: str = Field(
        default="Scraped_at",
        description="Timestamp column used for most-recent-first ordering"
    )
    search_history_table: str = Field(
        default="search_history",
        description="Table that records searched queries"
    )

    # ==========================================================================
    # OpenAI (LLM Entity Extractor)
    # ==========================================================================
    openai_api_key: str = Field(default="", description="OpenAI API key for entity extraction")
    entity_extractor_model: str = Field(
        default="gpt-4o-mini",
        description="OpenAI model used to extract search entities"
    )
    entity_extractor_enabled: bool = Field(
        default=True,
        description="Enable LLM entity extraction (falls back to rules if disabled or fails)"
    )
    entity_extractor_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for the entity extraction call (seconds)"
    )
    entity_extractor_temperature: float = Field(
        default=0.1,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for entity extraction"
    )
    entity_extractor_max_tokens: int = Field(
        default=250,
        ge=1,
        description="Output token budget for entity extraction"
    )

    @property
    def extractor_mode(self) -> str:
        """Which extractor serves searches: llm or rules_only."""
        if self.entity_extractor_enabled and self.openai_api_key:
            return "llm"
        return "rules_only"

    # ==========================================================================
    # Search Tracking
    # ==========================================================================
    popular_searches_window_days: int = Field(
        default=30,
        ge=1,
        description="Only searches newer than this many days count as popular"
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Uses lru_cache to ensure only one instance is created.
    Settings are loaded from environment variables and .env file.

    Returns:
        Settings: The application settings instance

    Raises:
        ValidationError: If required environment variables are missing
    """
    env_file = Path(__file__).parent.parent.parent / ".env"
    if env_file.exists():
        os.environ.setdefault("ENV_FILE", str(env_file))

    return Settings(_env_file=env_file if env_file.exists() else None)


def get_settings_for_testing(**overrides) -> Settings:
    """
    Create a settings instance for testing with optional overrides.

    This bypasses the cache to allow different settings in tests.
    """
    test_defaults = {
        "supabase_url": "https://test.supabase.co",
        "supabase_service_key": "test-key",
        "environment": "testing",
        "debug": True,
    }
    test_defaults.update(overrides)

    return Settings(**test_defaults)
