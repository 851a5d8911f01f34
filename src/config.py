"""Application configuration using pydantic-settings pattern."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Decision Helper"
    app_version: str = "0.1.0"
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Interpretation backend
    llm_provider: Literal["anthropic", "openai"] = Field(default="anthropic")

    # Anthropic
    anthropic_api_key: str | None = Field(default=None)
    anthropic_model: str = Field(default="claude-sonnet-4-5")

    # OpenAI (or any OpenAI-compatible endpoint)
    openai_api_key: str | None = Field(default=None)
    openai_base_url: str = Field(default="https://api.openai.com/v1")
    openai_model: str = Field(default="gpt-4o-mini")

    # Wizard behaviour
    evaluation_advance_delay_seconds: float = Field(
        default=2.0,
        ge=0.0,
        description="Pause before moving to weighing once chat evaluation ends",
    )
    weighing_advance_delay_seconds: float = Field(
        default=3.0,
        ge=0.0,
        description="Pause before moving to results once chat weighing ends",
    )
    max_suggestions: int = Field(
        default=5,
        ge=0,
        description="Maximum number of option/criterion suggestions kept",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
