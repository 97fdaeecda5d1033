"""Application configuration management using Pydantic Settings.

This module loads and validates environment variables using Pydantic Settings.
All configuration is loaded from environment variables or a .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        environment: Application environment (development, staging, production)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        surveys_dir: Path to directory containing survey YAML files
        benchmarks_file: Path to the company benchmark YAML file
        database_url: SQLAlchemy connection string for the SQL result store
        result_store: Which result history backend to use (memory or sql)
        seed_demo_data: Whether to seed demo history on startup
        demo_user_id: User ID that receives the seeded demo history
        openai_api_key: API key for the generative AI service (optional)
        openai_base_url: Alternative base URL for OpenAI-compatible APIs
        openai_model: Model used for insights and answer extraction
        ai_max_output_tokens: Upper bound on generated tokens per AI call
    """

    # Application Configuration
    environment: str = Field(
        default="development",
        description="Application environment"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    surveys_dir: Optional[str] = Field(
        default=None,
        description="Path to surveys directory (defaults to ./surveys)"
    )
    benchmarks_file: Optional[str] = Field(
        default=None,
        description="Path to benchmarks YAML (defaults to ./data/benchmarks.yaml)"
    )

    # Result Storage
    database_url: str = Field(
        default="sqlite:///:memory:",
        description="SQLAlchemy connection string"
    )
    result_store: str = Field(
        default="memory",
        description="Result history backend: memory or sql"
    )
    seed_demo_data: bool = Field(
        default=True,
        description="Seed demo history for the demo user on startup"
    )
    demo_user_id: str = Field(
        default="user_1",
        description="User ID owning the seeded demo history"
    )

    # Generative AI Configuration
    openai_api_key: Optional[str] = Field(
        default=None,
        description="API key for the generative AI service"
    )
    openai_base_url: Optional[str] = Field(
        default=None,
        description="Base URL override for OpenAI-compatible providers"
    )
    openai_model: str = Field(
        default="gpt-4o-mini",
        description="Model used for insight generation and answer extraction"
    )
    ai_max_output_tokens: int = Field(
        default=600,
        ge=1,
        description="Maximum tokens generated per AI call"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed = {"development", "staging", "production"}
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of {allowed}")
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"Log level must be one of {allowed}")
        return v_upper

    @field_validator("result_store")
    @classmethod
    def validate_result_store(cls, v: str) -> str:
        """Validate result store is a known backend."""
        allowed = {"memory", "sql"}
        if v.lower() not in allowed:
            raise ValueError(f"Result store must be one of {allowed}")
        return v.lower()

    @field_validator("openai_api_key")
    @classmethod
    def blank_api_key_is_missing(cls, v: Optional[str]) -> Optional[str]:
        """Treat an empty API key as not configured."""
        if v is None or not v.strip():
            return None
        return v.strip()

    @property
    def ai_configured(self) -> bool:
        """Check if credentials for the generative AI service are present."""
        return self.openai_api_key is not None

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: Application settings singleton

    Note:
        Uses lru_cache to ensure settings are only loaded once
        and shared across the application.
    """
    return Settings()
