"""Manager options and application settings.

``NodeOptions`` and ``ManagerOptions`` configure the library; ``Settings``
loads the bundled bot's configuration from environment variables with support
for .env files. All models are frozen and immutable after initialization.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any, Literal

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    SecretStr,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..domain.shared.messages import ErrorMessages
from ..domain.shared.types import (
    CommandPrefixStr,
    ConnectAttempts,
    NonEmptyStr,
    PortInt,
    QueueSize,
    TimeoutSeconds,
)

SendCallback = Callable[[str, dict[str, Any]], Awaitable[None]]
"""Delivers a gateway payload to the shard that owns ``guild_id``."""


class NodeOptions(BaseModel):
    """Connection parameters for the audio node."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: NonEmptyStr = "localhost"
    port: PortInt = 3000
    password: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("password", "secret")
    )
    identifier: NonEmptyStr = Field(
        default="default", validation_alias=AliasChoices("identifier", "name")
    )
    secure: bool = False
    connect_timeout_s: TimeoutSeconds = 10.0
    request_timeout_s: TimeoutSeconds = 15.0
    max_connect_attempts: ConnectAttempts = 5
    max_pending_frames: QueueSize = 100
    heartbeat_s: TimeoutSeconds = 60.0

    @property
    def socket_url(self) -> str:
        scheme = "wss" if self.secure else "ws"
        return f"{scheme}://{self.host}:{self.port}/"

    @property
    def rest_url(self) -> str:
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.host}:{self.port}/"


class ManagerOptions(BaseModel):
    """Options supplied once when the manager is constructed."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    node: NodeOptions = Field(default_factory=NodeOptions)
    send: SendCallback
    client_id: NonEmptyStr | None = None

    @field_validator("client_id", mode="before")
    @classmethod
    def coerce_client_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @model_validator(mode="after")
    def require_password(self) -> ManagerOptions:
        if not self.node.password.get_secret_value():
            raise ValueError(ErrorMessages.NODE_PASSWORD_MISSING)
        return self


class DiscordSettings(BaseModel):
    """Discord bot configuration."""

    model_config = SettingsConfigDict(frozen=True, populate_by_name=True)

    token: SecretStr = Field(
        default=SecretStr(""), validation_alias=AliasChoices("token", "bot_token", "discord_token")
    )
    command_prefix: CommandPrefixStr = Field(
        default="!", validation_alias=AliasChoices("command_prefix", "prefix")
    )


class Settings(BaseSettings):
    """Application settings container.

    Automatically loads configuration from environment variables.

    Environment variable naming:
    - ENVIRONMENT, LOG_LEVEL (top-level)
    - DISCORD__TOKEN, DISCORD__COMMAND_PREFIX (nested)
    - NODE__HOST, NODE__PORT, NODE__PASSWORD, NODE__IDENTIFIER, NODE__SECURE (nested)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    environment: Literal["development", "production", "test"] = "development"
    log_level: str = "INFO"

    discord: DiscordSettings = Field(default_factory=DiscordSettings)
    node: NodeOptions = Field(default_factory=NodeOptions)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                ErrorMessages.INVALID_LOG_LEVEL.format(level=v, valid_levels=valid_levels)
            )
        return v_upper


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are automatically loaded from:
    1. .env file (if present)
    2. Environment variables
    3. Default values
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache (useful for testing)."""
    get_settings.cache_clear()
