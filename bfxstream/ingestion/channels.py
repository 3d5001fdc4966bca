"""Catalog of public Bitfinex channels and their subscribe parameters.

Trading pairs use the ``t`` symbol prefix and funding currencies the ``f``
prefix; candles are addressed by a ``key`` instead of a symbol.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from bfxstream.ingestion.ws_client import BfxWSManager, SnapshotCallback
    from bfxstream.models import SubscribedEvent

DEFAULT_TIMEFRAME = "1m"


@dataclass(frozen=True)
class ChannelSpec:
    """Wire channel name plus a builder for its subscribe parameters."""

    channel: str
    build_params: Callable[[str, str], dict[str, Any]]
    description: str = ""


def _trading(pair: str, _timeframe: str) -> dict[str, Any]:
    return {"symbol": f"t{pair}"}


def _funding(pair: str, _timeframe: str) -> dict[str, Any]:
    return {"symbol": f"f{pair}"}


def _raw_book(pair: str, _timeframe: str) -> dict[str, Any]:
    return {"symbol": f"t{pair}", "prec": "R0"}


def _candles(pair: str, timeframe: str) -> dict[str, Any]:
    return {"key": f"trade:{timeframe}:t{pair}"}


CHANNEL_CATALOG: dict[str, ChannelSpec] = {
    "ticker": ChannelSpec("ticker", _trading, "Trading pair ticker"),
    "fticker": ChannelSpec("ticker", _funding, "Funding currency ticker"),
    "trades": ChannelSpec("trades", _trading, "Trading pair trades"),
    "ftrades": ChannelSpec("trades", _funding, "Funding currency trades"),
    "books": ChannelSpec("book", _trading, "Aggregated order book"),
    "raw_books": ChannelSpec("book", _raw_book, "Raw order book (R0)"),
    "candles": ChannelSpec("candles", _candles, "Trade candles"),
}


def subscribe_channel(
    manager: BfxWSManager,
    name: str,
    pair: str,
    callback: SnapshotCallback,
    timeframe: str = DEFAULT_TIMEFRAME,
) -> asyncio.Future[SubscribedEvent]:
    """Subscribe to the catalog channel ``name`` for ``pair``.

    Raises:
        KeyError: ``name`` is not in :data:`CHANNEL_CATALOG`.
    """
    spec = CHANNEL_CATALOG[name]
    return manager.subscribe(spec.channel, pair, spec.build_params(pair, timeframe), callback)


def subscribe_ticker(manager: BfxWSManager, pair: str, callback: SnapshotCallback):
    return subscribe_channel(manager, "ticker", pair, callback)


def subscribe_fticker(manager: BfxWSManager, pair: str, callback: SnapshotCallback):
    return subscribe_channel(manager, "fticker", pair, callback)


def subscribe_trades(manager: BfxWSManager, pair: str, callback: SnapshotCallback):
    return subscribe_channel(manager, "trades", pair, callback)


def subscribe_ftrades(manager: BfxWSManager, pair: str, callback: SnapshotCallback):
    return subscribe_channel(manager, "ftrades", pair, callback)


def subscribe_books(manager: BfxWSManager, pair: str, callback: SnapshotCallback):
    return subscribe_channel(manager, "books", pair, callback)


def subscribe_raw_books(manager: BfxWSManager, pair: str, callback: SnapshotCallback):
    return subscribe_channel(manager, "raw_books", pair, callback)


def subscribe_candles(
    manager: BfxWSManager,
    pair: str,
    callback: SnapshotCallback,
    timeframe: str = DEFAULT_TIMEFRAME,
):
    return subscribe_channel(manager, "candles", pair, callback, timeframe)
