"""Pydantic models for the event objects exchanged on the Bitfinex v2 websocket."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

_EVENT_CONFIG = {"frozen": True, "extra": "allow", "populate_by_name": True}


class InfoEvent(BaseModel):
    """Server info message: sent on connect with a version, later with a code."""

    event: Literal["info"]
    version: int | None = None
    code: int | None = None
    msg: str | None = None
    platform: dict[str, Any] | None = None

    model_config = _EVENT_CONFIG


class PongEvent(BaseModel):
    """Reply to a ping, correlated by ``cid``."""

    event: Literal["pong"]
    cid: int
    ts: int | None = Field(default=None, description="Server time in ms")

    model_config = _EVENT_CONFIG


class SubscribedEvent(BaseModel):
    """Subscription acknowledgement carrying the server-assigned channel id."""

    event: Literal["subscribed"]
    channel: str | None = None
    chan_id: int = Field(alias="chanId")
    pair: str | None = None
    symbol: str | None = None
    key: str | None = None

    model_config = _EVENT_CONFIG


class UnsubscribedEvent(BaseModel):
    event: Literal["unsubscribed"]
    chan_id: int = Field(alias="chanId")
    status: str | None = None

    model_config = _EVENT_CONFIG

