"""Configuration management using Pydantic Settings."""
from functools import lru_cache
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = "AI Catalyst Workshop Platform"
    app_version: str = "1.0.0"
    debug: bool = False

    # Snowflake
    snowflake_account: str = ""
    snowflake_user: str = ""
    snowflake_password: str = ""
    snowflake_database: str = "AI_CATALYST"
    snowflake_schema: str = "PUBLIC"
    snowflake_warehouse: str = "COMPUTE_WH"

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0

    # Cache TTLs (seconds)
    cache_ttl_workshop: int = 120  # 2 minutes

    # Per-workshop write lock
    workshop_lock_timeout: int = 300  # lock auto-expires after 5 minutes
    workshop_lock_wait: float = 10.0  # seconds to wait for a busy workshop

    # Text generation (optional; without a key every generated step runs in demo mode)
    anthropic_api_key: str = Field(default="", validation_alias="ANTHROPIC_API_KEY")
    anthropic_model: str = "claude-sonnet-4-5-20250929"
    llm_max_tokens: int = 6144
    llm_timeout_seconds: float = 120.0

    # External analysis sources
    research_app_url: str = Field(
        default="https://smart-report-ai-claude-style.replit.app",
        validation_alias="RESEARCH_APP_URL",
    )
    cognition_app_url: str = Field(
        default="https://cognitive-analyis-with-claude.replit.app",
        validation_alias="COGNITION_APP_URL",
    )
    source_fetch_timeout: float = 30.0

    # Scoring calibration
    reconciliation_match_threshold: float = 0.8
    quadrant_threshold: float = 7.0
    value_score_floor: float = 50_000.0  # benefit mapped to value score 1
    value_score_ceiling: float = 10_000_000.0  # benefit mapped to value score 10


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
