"""structlog setup shared by the ingestion process and the CLI."""

from __future__ import annotations

import logging

import structlog

from bfxstream.config import LoggingConfig


def configure_logging(config: LoggingConfig) -> None:
    """Install the processor chain and level filter for this process."""
    if config.log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    level = logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )
