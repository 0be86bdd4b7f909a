"""Application settings using Pydantic Settings for environment variable management."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env.local",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # Model Configuration
    openai_api_key: str | None = Field(
        default=None, description="OpenAI API key for AI models"
    )
    review_model: str = Field(
        default="openai:gpt-4o-mini",
        description="pydantic-ai model identifier used for reviews and inline fixes",
    )
    review_temperature: float = Field(
        default=0.0, description="Temperature for AI model responses"
    )
    max_retries: int = Field(
        default=2, description="Maximum number of retries for transient model errors"
    )

    # Token Budget
    model_context_tokens: int = Field(
        default=32768, description="Context window of the review model, in tokens"
    )
    output_reserve_tokens: int = Field(
        default=1024,
        description="Tokens kept free for the model's answer when packing batches",
    )
    token_estimator: Literal["tiktoken", "approximate"] = Field(
        default="tiktoken",
        description="Token counting backend (approximate needs no encoding download)",
    )
    tiktoken_encoding: str = Field(
        default="cl100k_base", description="tiktoken encoding name"
    )

    # Concurrency
    max_concurrent_model_calls: int = Field(
        default=4, description="Upper bound on in-flight model calls per review"
    )

    # Review Output
    code_host_url: str = Field(
        default="https://github.com", description="Base URL of the code host"
    )
    issue_url_max_length: int = Field(
        default=2048, description="Maximum length of a generated issue deep-link"
    )

    # Observability
    logfire_token: str | None = Field(
        default=None, description="Pydantic Logfire token for observability"
    )

    # Application Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Application environment"
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


# Global settings instance
settings = Settings()

# Validate required secrets in production to avoid silent failures
if (
    settings.is_production
    and settings.review_model.startswith("openai:")
    and not settings.openai_api_key
):
    raise RuntimeError(
        "Missing required environment variables for production: OPENAI_API_KEY"
    )
