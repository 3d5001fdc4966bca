"""Tests for the typer CLI surface that do not need a network."""

from __future__ import annotations

from typer.testing import CliRunner

from bfxstream.cli.display import format_latency, format_snapshot, format_state
from bfxstream.cli.main import app

runner = CliRunner()


class TestCommands:
    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "tail" in result.output
        assert "ping" in result.output

    def test_tail_unknown_channel_prints_catalog(self) -> None:
        result = runner.invoke(app, ["tail", "status"])
        assert result.exit_code == 0
        assert "Unknown channel" in result.output
        assert "raw_books" in result.output


class TestDisplay:
    def test_format_state(self) -> None:
        assert format_state("active").plain == "ACTIVE"
        assert format_state(None).plain == "--"

    def test_format_latency(self) -> None:
        assert format_latency(None).plain == "timeout"
        assert format_latency(0.0123).plain == "12.3 ms"

    def test_format_snapshot(self) -> None:
        assert format_snapshot([5, [100, 1]]) == "[muted]5[/muted] [100, 1]"
        assert format_snapshot([5, "te", [1, 2]]) == "[muted]5[/muted] ['te', [1, 2]]"
