"""bfxstream tail <channel> [pair] -- Print live data messages from a channel.

Channels:
    ticker, fticker, trades, ftrades, books, raw_books, candles
"""

from __future__ import annotations

import asyncio
from typing import Any

import typer

from bfxstream.cli.display import channel_table, console, format_snapshot
from bfxstream.ingestion.channels import CHANNEL_CATALOG, DEFAULT_TIMEFRAME


def _print_snapshot(msg: list[Any]) -> None:
    console.print(format_snapshot(msg), highlight=False)


# ---------------------------------------------------------------------------
# Core tail logic
# ---------------------------------------------------------------------------

async def _tail_async(name: str, pair: str, timeframe: str) -> None:
    from bfxstream.config import get_config
    from bfxstream.ingestion.channels import subscribe_channel
    from bfxstream.ingestion.ws_client import BfxWSManager

    if name not in CHANNEL_CATALOG:
        console.print(f"[red]Unknown channel:[/red] '{name}'")
        console.print()
        console.print(channel_table())
        return

    config = get_config()
    manager = BfxWSManager(config)
    manager.connect()

    console.print(f"[bold cyan]Channel:[/bold cyan] {name} {pair}")
    ack_future = subscribe_channel(manager, name, pair.upper(), _print_snapshot, timeframe)
    closed = asyncio.ensure_future(manager.wait_closed())

    try:
        done, _ = await asyncio.wait({ack_future, closed}, return_when=asyncio.FIRST_COMPLETED)
        if ack_future not in done:
            console.print("[red]Connection closed before the subscription was acknowledged.[/red]")
            return

        ack = ack_future.result()
        console.print(f"[dim]Subscribed, chanId {ack.chan_id}[/dim]")
        console.print()
        console.print("[bold cyan]--- live tail (Ctrl+C to stop) ---[/bold cyan]")
        console.print()
        await closed

    except KeyboardInterrupt:
        console.print("\n[dim]Tail stopped.[/dim]")
    finally:
        manager.close()
        closed.cancel()


# ---------------------------------------------------------------------------
# Main command
# ---------------------------------------------------------------------------

def tail(
    name: str = typer.Argument(..., help="Channel name (e.g. ticker, trades, candles)"),
    pair: str = typer.Argument("BTCUSD", help="Pair or funding currency, without prefix"),
    timeframe: str = typer.Option(
        DEFAULT_TIMEFRAME, "--timeframe", "-t", help="Candle timeframe (candles only)"
    ),
) -> None:
    """Subscribe to a channel and print every data message."""
    asyncio.run(_tail_async(name, pair, timeframe))
