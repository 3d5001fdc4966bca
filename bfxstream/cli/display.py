"""Rich console formatting helpers for the bfxstream CLI."""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from bfxstream.ingestion.channels import CHANNEL_CATALOG

# Shared theme for consistent styling across all CLI output.
BFX_THEME = Theme(
    {
        "state.disconnected": "dim white",
        "state.connecting": "cyan",
        "state.paused": "bold yellow",
        "state.active": "bold green",
        "ok": "bold green",
        "warning": "bold yellow",
        "critical": "bold red",
        "header": "bold cyan",
        "muted": "dim",
    }
)

console = Console(theme=BFX_THEME)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def format_state(state: str | None) -> Text:
    """Return a Rich Text object for a connection state with colour coding."""
    if state is None:
        return Text("--", style="dim")
    return Text(state.upper(), style=f"state.{state.lower()}")


def format_latency(seconds: float | None) -> Text:
    if seconds is None:
        return Text("timeout", style="critical")
    ms = seconds * 1000
    style = "ok" if ms < 250 else "warning"
    return Text(f"{ms:.1f} ms", style=style)


def format_snapshot(msg: list[Any]) -> str:
    """One-line rendering of a ``[chanId, payload]`` data message."""
    chan_id, *payload = msg
    body = payload[0] if len(payload) == 1 else payload
    return f"[muted]{chan_id}[/muted] {escape(str(body))}"


def channel_table() -> Table:
    """Table listing every channel in the catalog."""
    table = Table(title="Available Channels", show_lines=False, pad_edge=True)
    table.add_column("Name", style="bold")
    table.add_column("Wire channel", style="dim")
    table.add_column("Description")
    for name, spec in CHANNEL_CATALOG.items():
        table.add_row(name, spec.channel, spec.description)
    return table
