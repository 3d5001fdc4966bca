"""Shared test fixtures for the bfxstream test suite."""

from __future__ import annotations

import pytest
import structlog

from bfxstream.config import AppConfig
from bfxstream.ingestion.ws_client import BfxWSManager

from tests.fakes import FakeTransport


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo any ``configure_logging`` call a test made."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def app_config(monkeypatch: pytest.MonkeyPatch) -> AppConfig:
    monkeypatch.setenv("BFX_WS_URL", "wss://api-pub.bitfinex.com/ws/2")
    monkeypatch.setenv("BFX_API_VERSIONS", "[2]")
    return AppConfig()


@pytest.fixture
def transports() -> list[FakeTransport]:
    """Every FakeTransport built by the manager, oldest first."""
    return []


@pytest.fixture
def manager(app_config: AppConfig, transports: list[FakeTransport]) -> BfxWSManager:
    """A BfxWSManager whose transports are FakeTransports."""

    def factory(url: str) -> FakeTransport:
        transport = FakeTransport(url)
        transports.append(transport)
        return transport

    return BfxWSManager(app_config, transport_factory=factory)


@pytest.fixture
def connected_manager(
    manager: BfxWSManager, transports: list[FakeTransport], version_info_msg: dict
) -> BfxWSManager:
    """Manager with an open transport that has passed the version check."""
    manager.connect()
    transports[-1].open()
    transports[-1].deliver(version_info_msg)
    return manager


@pytest.fixture
def version_info_msg() -> dict:
    """Info event sent by the server right after the socket opens."""
    return {
        "event": "info",
        "version": 2,
        "serverId": "5b73a436-19ca-4a06-8472-f2fcf1e3d8fd",
        "platform": {"status": 1},
    }


@pytest.fixture
def subscribed_msg() -> dict:
    """Ticker subscription acknowledgement."""
    return {
        "event": "subscribed",
        "channel": "ticker",
        "chanId": 5,
        "symbol": "tBTCUSD",
        "pair": "BTCUSD",
    }


@pytest.fixture
def ticker_snapshot_msg() -> list:
    """Ticker data message on channel 5."""
    return [5, [42000.0, 12.5, 42001.0, 10.1, -150.0, -0.0035, 42000.5, 3500.2, 42500.0, 41000.0]]
