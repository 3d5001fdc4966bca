"""Message predicates and the info-code routing table."""

from __future__ import annotations

from typing import Any

from bfxstream.ingestion.expectations import MatchFunc

HEARTBEAT = "hb"

# Info code → controller method name mapping
INFO_CODE_HANDLERS: dict[int, str] = {
    20051: "restart",  # server asks clients to reconnect
    20060: "pause",  # entering maintenance, stop sending
    20061: "resume",  # maintenance over
}


def is_event(msg: Any, event: str) -> bool:
    return isinstance(msg, dict) and msg.get("event") == event


def match_event(event: str, **fields: Any) -> MatchFunc:
    """Match an event object whose ``fields`` all equal the given values."""

    def _match(msg: Any) -> bool:
        if not is_event(msg, event):
            return False
        return all(key in msg and msg[key] == value for key, value in fields.items())

    return _match


def match_version_info(msg: Any) -> bool:
    """The info event sent right after connecting, carrying the API version."""
    return is_event(msg, "info") and bool(msg.get("version"))


def _on_channel(msg: Any, chan_id: int) -> bool:
    return isinstance(msg, list) and len(msg) > 0 and msg[0] == chan_id


def match_heartbeat(chan_id: int) -> MatchFunc:
    return lambda msg: _on_channel(msg, chan_id) and msg[1:2] == [HEARTBEAT]


def match_snapshot(chan_id: int) -> MatchFunc:
    return lambda msg: _on_channel(msg, chan_id) and msg[1:2] != [HEARTBEAT]
