"""bfxstream ping -- Round-trip pings over the websocket."""

from __future__ import annotations

import asyncio
import time

import typer
from rich.table import Table

from bfxstream.cli.display import console, format_latency, format_state


async def _ping_async(count: int, timeout: float) -> None:
    from bfxstream.config import get_config
    from bfxstream.ingestion.ws_client import BfxWSManager

    config = get_config()
    manager = BfxWSManager(config)
    manager.connect()

    table = Table(title=f"Ping {config.bitfinex.ws_url}", show_lines=False, pad_edge=True)
    table.add_column("cid", justify="right")
    table.add_column("Server ts", style="dim")
    table.add_column("Round trip", justify="right")

    try:
        for _ in range(count):
            started = time.perf_counter()
            future = manager.ping()
            try:
                pong = await asyncio.wait_for(future, timeout)
            except asyncio.TimeoutError:
                table.add_row("--", "--", format_latency(None))
                continue
            table.add_row(str(pong.cid), str(pong.ts or "--"), format_latency(time.perf_counter() - started))
    finally:
        stats = manager.get_stats()
        manager.close()

    console.print(table)
    console.print("State: ", format_state(stats["state"]), f"[muted](epoch {stats['epoch']})[/muted]")


def ping(
    count: int = typer.Option(3, "--count", "-c", help="Number of pings to send"),
    timeout: float = typer.Option(10.0, "--timeout", help="Seconds to wait for each pong"),
) -> None:
    """Send pings and report round-trip times (the first includes connecting)."""
    asyncio.run(_ping_async(count, timeout))
