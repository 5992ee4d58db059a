"""Configuration management for Parley."""

from __future__ import annotations

from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MODEL = "gpt-3.5-turbo-0613"
DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_prefix="PARLEY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Identity and network
    key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PARLEY_KEY", "KEY"),
        description="Hex private key of the bot identity; empty means ephemeral",
    )
    # Kept as a plain string: the session manager rejects unknown values with ConfigError.
    env: str = Field(
        default="production",
        validation_alias=AliasChoices("PARLEY_ENV", "XMTP_ENV"),
        description="Messaging network deployment target",
    )
    network: str = Field(default="memory", description="Name of the network plugin to connect through")
    connect_timeout_seconds: float = Field(default=30.0, gt=0, description="Timeout for session establishment")
    fetch_timeout_seconds: float = Field(default=15.0, gt=0, description="Timeout for history lookups")

    # Model configuration
    openai_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("PARLEY_OPENAI_API_KEY", "OPENAI_API_KEY"),
        description="API key for the chat completion backend",
    )
    api_base: str | None = Field(default=None, description="Optional API base URL")
    model: str = Field(default=DEFAULT_MODEL, description="Chat completion model name")
    system_prompt: str = Field(default=DEFAULT_SYSTEM_PROMPT, description="System prompt for every completion")
    max_tokens: int | None = Field(default=None, description="Maximum tokens for replies")
    request_timeout_seconds: float = Field(default=60.0, gt=0, description="Timeout for completion requests")

    # Ingestion
    history_limit: int = Field(default=5, ge=2, description="Messages fetched per history lookup, trigger included")
    history_failure_policy: Literal["degrade", "skip"] = Field(
        default="degrade",
        description="Whether a failed history lookup proceeds with empty history or drops the message",
    )
    max_retries: int = Field(default=5, ge=0, description="Reconnect attempts before giving up")
    retry_delay_seconds: float = Field(default=0.0, ge=0, description="Pause between reconnect attempts")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_profile: Literal["default", "rich"] = Field(default="default", description="Log output profile")


def load_settings(**overrides: object) -> Settings:
    """Load settings from the environment and ``.env``, applying explicit overrides."""

    settings = Settings()
    updates = {name: value for name, value in overrides.items() if value is not None}
    if updates:
        settings = settings.model_copy(update=updates)
    return settings
