"""bfxstream CLI entry point.

Usage:
    python -m bfxstream.cli.main [COMMAND] [OPTIONS]

Or via the installed console script:
    bfxstream [COMMAND] [OPTIONS]
"""

from __future__ import annotations

import typer

from bfxstream.cli.commands import ping, tail
from bfxstream.config import LoggingConfig
from bfxstream.log import configure_logging

app = typer.Typer(
    name="bfxstream",
    help="bfxstream -- Bitfinex websocket stream CLI",
    no_args_is_help=True,
    add_completion=False,
    pretty_exceptions_enable=True,
)


@app.callback()
def main(
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level for connection events"),
) -> None:
    configure_logging(LoggingConfig(LOG_LEVEL=log_level, LOG_FORMAT="console"))


# Register sub-commands from each module.
app.command(name="tail", help="Print live data from a channel")(tail.tail)
app.command(name="ping", help="Measure websocket round trips")(ping.ping)


if __name__ == "__main__":
    app()
