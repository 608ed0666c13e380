"""Client-side channel settings.

Defaults mirror the storefront's connection options: polling first with a
WebSocket upgrade, five reconnection attempts between 1s and 5s apart, and a
10s connection timeout.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_KNOWN_TRANSPORTS = ("polling", "websocket")


class ChannelConfig(BaseSettings):
    """Settings for one storefront connection, overridable via ``BOOKHUB_CHANNEL_*``."""

    model_config = SettingsConfigDict(env_prefix="BOOKHUB_CHANNEL_")

    server_url: str = "http://localhost:8020"
    path: str = "socket.io"
    api_prefix: str = "/api/v1"
    transports: list[str] = ["polling", "websocket"]

    reconnection: bool = True
    reconnection_attempts: int = 5
    reconnection_delay: float = 1.0        # seconds before the first retry
    reconnection_delay_max: float = 5.0    # cap for the growing delay
    randomization_factor: float = 0.5
    timeout: float = 10.0                  # per connection attempt

    @field_validator("transports")
    @classmethod
    def _check_transports(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one transport is required")
        unknown = [name for name in value if name not in _KNOWN_TRANSPORTS]
        if unknown:
            raise ValueError(f"unknown transports: {', '.join(unknown)}")
        return value

    @field_validator("reconnection_attempts")
    @classmethod
    def _check_attempts(cls, value: int) -> int:
        if value < 0:
            raise ValueError("reconnection_attempts must not be negative")
        return value

    @field_validator("path")
    @classmethod
    def _strip_path(cls, value: str) -> str:
        return value.strip("/")
