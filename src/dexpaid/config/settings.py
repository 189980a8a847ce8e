"""Application settings using pydantic-settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """DexPaid Alert configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # Application
    app_name: str = Field(default="DexPaid Alert", description="Application name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Minimum log level"
    )

    # Discord webhook (secret: the URL embeds the webhook token)
    discord_webhook_url: SecretStr = Field(description="Discord webhook URL")
    alert_title: str = Field(
        default="🚀 NEW TOKEN DEX PAID", description="Embed title for alerts"
    )

    # DexScreener
    dexscreener_base_url: str = Field(
        default="https://api.dexscreener.com",
        description="DexScreener API base URL",
    )
    target_chain: str = Field(default="solana", description="Chain to monitor")
    http_timeout_seconds: float = Field(
        default=10.0, gt=0, description="Timeout for every outbound request"
    )

    # Polling
    poll_interval_ms: int = Field(
        default=5_000, ge=500, description="Milliseconds between passes"
    )

    # Payment policy: None alerts on any approved order
    approval_window_minutes: int | None = Field(
        default=None,
        ge=1,
        description="Only count orders approved within this many minutes",
    )

    @field_validator("discord_webhook_url")
    @classmethod
    def validate_webhook_url(cls, v: SecretStr) -> SecretStr:
        """Validate webhook URL format."""
        if not v.get_secret_value().startswith(("http://", "https://")):
            raise ValueError("Discord webhook URL must start with http:// or https://")
        return v

    @field_validator("dexscreener_base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate DexScreener URL format and drop trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("DexScreener base URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("target_chain")
    @classmethod
    def normalize_chain(cls, v: str) -> str:
        """Chain ids are compared lower-case."""
        v = v.strip().lower()
        if not v:
            raise ValueError("Target chain must not be empty")
        return v

    @property
    def poll_interval_seconds(self) -> float:
        """Poll interval converted for the scheduler trigger."""
        return self.poll_interval_ms / 1000


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()  # type: ignore[call-arg]  # Values from env
