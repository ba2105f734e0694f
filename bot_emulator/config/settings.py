"""Application Settings - Environment-based configuration.

Uses Pydantic Settings for validation and type coercion.
Values come from the environment or a local ``.env`` file.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from bot_emulator.config.constants import EMULATOR


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment name"
    )
    log_level: Literal["DEBUG", "INFO", "WARN", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_json: bool = Field(default=True, description="Render logs as JSON")

    # Emulator server
    server_url: str = Field(
        default="http://localhost:52673",
        description="Base URL of the emulator conversation server",
    )
    request_timeout_s: float = Field(
        default=30.0, gt=0, le=300, description="HTTP request timeout in seconds"
    )

    # User identity
    custom_user_guid: str | None = Field(
        default=None,
        description="User id presented to bots; generated per transcript when unset",
    )

    # Speech services
    speech_region: str = Field(
        default=EMULATOR.DEFAULT_SPEECH_REGION,
        description="Cognitive Services speech region",
    )
    speech_token_timeout_s: float = Field(
        default=10.0, gt=0, le=120, description="Speech token fetch timeout in seconds"
    )

    # Observability
    metrics_enabled: bool = Field(default=True, description="Enable Prometheus metrics")

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("server_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("custom_user_guid", mode="before")
    @classmethod
    def empty_guid_is_unset(cls, v: str | None) -> str | None:
        """Treat an empty user GUID as not configured."""
        if isinstance(v, str) and not v.strip():
            return None
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
