"""Central configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class BitfinexConfig(BaseSettings):
    ws_url: str = Field(default="wss://api-pub.bitfinex.com/ws/2", alias="BFX_WS_URL")
    api_versions: list[int] = Field(default=[2], alias="BFX_API_VERSIONS")
    pairs: list[str] = Field(default=["BTCUSD"], alias="BFX_PAIRS")


class TuningConfig(BaseSettings):
    ws_ping_interval: int = Field(default=30, alias="WS_PING_INTERVAL")
    ws_pong_timeout: int = Field(default=10, alias="WS_PONG_TIMEOUT")
    ws_max_message_size: int = Field(default=10 * 1024 * 1024, alias="WS_MAX_MESSAGE_SIZE")
    stats_interval: int = Field(default=60, alias="STATS_INTERVAL")


class LoggingConfig(BaseSettings):
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="json", alias="LOG_FORMAT")


class AppConfig:
    """Aggregated application configuration."""

    def __init__(self) -> None:
        self.bitfinex = BitfinexConfig()
        self.tuning = TuningConfig()
        self.logging = LoggingConfig()


def get_config() -> AppConfig:
    """Create and return the application configuration."""
    return AppConfig()
