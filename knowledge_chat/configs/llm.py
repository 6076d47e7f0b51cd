"""
LLM completion configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Completion model configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_chat.configs.base import BaseSettings


class LLMSettings(BaseSettings):
    """Chat completion model configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LLM_",
        case_sensitive=False,
        extra="ignore",
    )

    google_api_key: str | None = Field(
        default=None,
        description="Google AI API key (falls back to GOOGLE_API_KEY when unset)",
    )
    model: str = Field(default="gemini-2.5-flash", description="Chat model identifier")
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_output_tokens: int = Field(
        default=500,
        ge=1,
        description="Maximum tokens in generated response",
    )
    timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Upper bound for a single completion attempt",
    )
    max_attempts: int = Field(
        default=2,
        ge=1,
        le=5,
        description="Completion attempts including the first one",
    )
    retry_initial_wait: float = Field(default=0.5, ge=0, description="First backoff in seconds")
    retry_max_wait: float = Field(default=4.0, ge=0, description="Backoff ceiling in seconds")
