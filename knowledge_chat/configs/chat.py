"""
Chat endpoint configuration settings.

Message limits, session lifetime, and abuse-rate ceilings for the
hosted chat endpoint.

Dependencies: pydantic, pydantic_settings
System role: Chat policy configuration
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from knowledge_chat.configs.base import BaseSettings


class ChatSettings(BaseSettings):
    """Chat endpoint policy configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="CHAT_",
        case_sensitive=False,
        extra="ignore",
    )

    max_message_length: int = Field(
        default=1000,
        ge=1,
        description="Maximum characters in a trimmed user message",
    )
    session_ttl_days: int = Field(default=30, ge=1, description="Session token lifetime in days")

    rate_limit_window_seconds: int = Field(
        default=3600,
        ge=1,
        description="Sliding window duration shared by both rate-limit layers",
    )
    max_requests_per_session: int = Field(
        default=100,
        ge=1,
        description="Accepted requests per session per window",
    )
    max_requests_per_address: int = Field(
        default=300,
        ge=1,
        description="Messages across all sessions of one source address per window",
    )
    rate_limit_fail_open: bool = Field(
        default=True,
        description=(
            "Allow requests when the limiter's own storage query fails. "
            "Exploitable during storage outages; set false to fail closed."
        ),
    )

    history_window: int = Field(
        default=20,
        ge=1,
        description="Most recent session messages forwarded to the LLM",
    )
    admin_api_key: str | None = Field(
        default=None,
        description="Shared key for the knowledge-gap listing endpoint (disabled when unset)",
    )
