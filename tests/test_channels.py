"""Unit tests for the channel catalog."""

from __future__ import annotations

import pytest

from bfxstream.ingestion import channels
from bfxstream.ingestion.channels import CHANNEL_CATALOG, subscribe_channel
from bfxstream.ingestion.ws_client import BfxWSManager

from tests.fakes import FakeTransport


def _noop(msg: list) -> None:
    return None


class TestSubscribePayloads:
    @pytest.mark.parametrize(
        ("func", "expected"),
        [
            (channels.subscribe_ticker, {"channel": "ticker", "symbol": "tBTCUSD"}),
            (channels.subscribe_fticker, {"channel": "ticker", "symbol": "fBTCUSD"}),
            (channels.subscribe_trades, {"channel": "trades", "symbol": "tBTCUSD"}),
            (channels.subscribe_ftrades, {"channel": "trades", "symbol": "fBTCUSD"}),
            (channels.subscribe_books, {"channel": "book", "symbol": "tBTCUSD"}),
            (channels.subscribe_raw_books, {"channel": "book", "symbol": "tBTCUSD", "prec": "R0"}),
            (channels.subscribe_candles, {"channel": "candles", "key": "trade:1m:tBTCUSD"}),
        ],
    )
    async def test_payload(
        self,
        connected_manager: BfxWSManager,
        transports: list[FakeTransport],
        func,
        expected: dict,
    ) -> None:
        func(connected_manager, "BTCUSD", _noop)
        assert transports[0].sent_messages == [{"event": "subscribe", **expected}]

    async def test_candle_timeframe(
        self, connected_manager: BfxWSManager, transports: list[FakeTransport]
    ) -> None:
        channels.subscribe_candles(connected_manager, "ETHUSD", _noop, timeframe="15m")
        assert transports[0].sent_messages[0]["key"] == "trade:15m:tETHUSD"

    async def test_unknown_channel(self, connected_manager: BfxWSManager) -> None:
        with pytest.raises(KeyError):
            subscribe_channel(connected_manager, "status", "BTCUSD", _noop)

    def test_catalog_names(self) -> None:
        assert set(CHANNEL_CATALOG) == {
            "ticker",
            "fticker",
            "trades",
            "ftrades",
            "books",
            "raw_books",
            "candles",
        }


class TestAcknowledgements:
    async def test_funding_ack_matched_by_symbol(
        self, connected_manager: BfxWSManager, transports: list[FakeTransport]
    ) -> None:
        future = channels.subscribe_fticker(connected_manager, "USD", _noop)
        transports[0].deliver(
            {"event": "subscribed", "channel": "ticker", "chanId": 12, "symbol": "fUSD", "currency": "USD"}
        )
        ack = await future
        assert ack.chan_id == 12
        assert ack.symbol == "fUSD"

    async def test_candle_ack_matched_by_key(
        self, connected_manager: BfxWSManager, transports: list[FakeTransport]
    ) -> None:
        received: list = []
        future = channels.subscribe_candles(connected_manager, "BTCUSD", received.append)
        transports[0].deliver(
            {"event": "subscribed", "channel": "candles", "chanId": 343351, "key": "trade:1m:tBTCUSD"}
        )
        assert (await future).key == "trade:1m:tBTCUSD"

        transports[0].deliver([343351, [[1700000000000, 42000, 42010, 42050, 41990, 3.2]]])
        assert len(received) == 1
