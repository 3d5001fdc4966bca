"""Unit tests for environment-driven configuration."""

from __future__ import annotations

import pytest

from bfxstream.config import BitfinexConfig, LoggingConfig, TuningConfig, get_config


class TestConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for name in ("BFX_WS_URL", "BFX_API_VERSIONS", "BFX_PAIRS"):
            monkeypatch.delenv(name, raising=False)
        cfg = BitfinexConfig()
        assert cfg.ws_url == "wss://api-pub.bitfinex.com/ws/2"
        assert cfg.api_versions == [2]
        assert cfg.pairs == ["BTCUSD"]

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("BFX_WS_URL", "ws://localhost:9000")
        monkeypatch.setenv("BFX_API_VERSIONS", "[2, 3]")
        monkeypatch.setenv("BFX_PAIRS", '["BTCUSD", "ETHUSD"]')
        cfg = BitfinexConfig()
        assert cfg.ws_url == "ws://localhost:9000"
        assert cfg.api_versions == [2, 3]
        assert cfg.pairs == ["BTCUSD", "ETHUSD"]

    def test_tuning(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WS_PING_INTERVAL", "15")
        assert TuningConfig().ws_ping_interval == 15

    def test_logging_init_by_alias(self) -> None:
        cfg = LoggingConfig(LOG_LEVEL="DEBUG", LOG_FORMAT="console")
        assert cfg.log_level == "DEBUG"
        assert cfg.log_format == "console"

    def test_get_config_aggregates(self) -> None:
        config = get_config()
        assert isinstance(config.bitfinex, BitfinexConfig)
        assert isinstance(config.tuning, TuningConfig)
        assert isinstance(config.logging, LoggingConfig)
