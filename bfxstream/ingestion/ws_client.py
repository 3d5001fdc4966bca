"""Bitfinex WebSocket connection manager, the core ingestion component.

Correlates inbound messages with the requests that produced them through an
expectation registry, gates every outbound send on the pause state, and
follows the server's restart/pause/resume info codes.
"""

from __future__ import annotations

import asyncio
import functools
import time
from enum import Enum
from typing import Any, Callable

import orjson
import structlog
from pydantic import BaseModel, ValidationError

from bfxstream.config import AppConfig, get_config
from bfxstream.ingestion.actions import DeferredActionQueue
from bfxstream.ingestion.expectations import ExpectationRegistry
from bfxstream.ingestion.transport import Transport, TransportFactory, WebSocketTransport
from bfxstream.ingestion.ws_router import (
    INFO_CODE_HANDLERS,
    is_event,
    match_event,
    match_heartbeat,
    match_snapshot,
    match_version_info,
)
from bfxstream.log import configure_logging
from bfxstream.models import InfoEvent, PongEvent, SubscribedEvent, UnsubscribedEvent

logger = structlog.get_logger(__name__)

SnapshotCallback = Callable[[list[Any]], None]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    PAUSED = "paused"
    ACTIVE = "active"


def _settle(future: asyncio.Future, model: type[BaseModel], msg: Any) -> None:
    """Resolve ``future`` with ``msg`` parsed as ``model``, or fail it."""
    if future.done():
        return
    try:
        future.set_result(model.model_validate(msg))
    except ValidationError as e:
        future.set_exception(e)


class BfxWSManager:
    """
    Manages one logical connection to the Bitfinex public websocket.

    The manager starts paused: sends issued before the socket opens are
    queued and replayed in call order once it does. Each ``connect`` that
    replaces an existing transport starts a new epoch with a fresh
    expectation registry; conversations from older epochs stay unresolved.
    """

    def __init__(
        self,
        config: AppConfig,
        transport_factory: TransportFactory | None = None,
    ) -> None:
        self._config = config
        self._transport_factory = transport_factory or self._default_transport

        self._transport: Transport | None = None
        self._state = ConnectionState.DISCONNECTED
        self._paused = True
        self._epoch = 0
        self._ping_counter = 0

        self._resume_queue = DeferredActionQueue()
        self._expectations = ExpectationRegistry()

        # Stats
        self._msg_counts: dict[str, int] = {}
        self._last_stats_time: float = time.time()

    # ── Introspection ─────────────────────────────────────────────────

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def paused(self) -> bool:
        return self._paused

    @property
    def epoch(self) -> int:
        return self._epoch

    @property
    def expectations(self) -> ExpectationRegistry:
        return self._expectations

    @property
    def queued_sends(self) -> int:
        return len(self._resume_queue)

    def get_stats(self) -> dict[str, Any]:
        """Snapshot of the connection; ``messages`` covers only the current stats window."""
        return {
            "state": self._state.value,
            "epoch": self._epoch,
            "paused": self._paused,
            "queued_sends": len(self._resume_queue),
            "pending_once": self._expectations.pending_once,
            "pending_whenever": self._expectations.pending_whenever,
            "messages": dict(self._msg_counts),
        }

    # ── Connection lifecycle ──────────────────────────────────────────

    def connect(self) -> None:
        """Open a new transport and arm the API version check."""
        if self._transport is not None:
            self._expectations = ExpectationRegistry()
        self._epoch += 1
        self._state = ConnectionState.CONNECTING
        logger.debug("connect", url=self._config.bitfinex.ws_url, epoch=self._epoch)

        self._expectations.once(match_version_info, self._check_version)

        epoch = self._epoch
        transport = self._transport_factory(self._config.bitfinex.ws_url)
        transport.on_message = lambda raw: self._on_transport_message(epoch, raw)
        transport.on_open = lambda: self._on_transport_open(epoch)
        self._transport = transport

    def close(self) -> None:
        logger.info("closing_socket", epoch=self._epoch)
        if self._transport is not None:
            self._transport.close()
        self._state = ConnectionState.DISCONNECTED

    def pause(self) -> None:
        logger.debug("pause")
        self._paused = True
        self._state = ConnectionState.PAUSED

    def resume(self) -> None:
        logger.debug("resume", queued_sends=len(self._resume_queue))
        self._paused = False
        self._state = ConnectionState.ACTIVE
        self._resume_queue.fire()

    def restart(self) -> None:
        logger.debug("restart")
        self.close()
        self.connect()

    async def wait_closed(self) -> None:
        """Wait for the current transport to close, following restarts."""
        while self._transport is not None:
            transport = self._transport
            await transport.wait_closed()
            if self._transport is transport:
                return

    def _default_transport(self, url: str) -> Transport:
        tuning = self._config.tuning
        return WebSocketTransport(
            url,
            ping_interval=tuning.ws_ping_interval,
            ping_timeout=tuning.ws_pong_timeout,
            max_size=tuning.ws_max_message_size,
        )

    def _on_transport_open(self, epoch: int) -> None:
        if epoch != self._epoch:
            logger.debug("stale_transport_open", epoch=epoch, current=self._epoch)
            return
        self.resume()

    def _on_transport_message(self, epoch: int, raw: str | bytes) -> None:
        if epoch != self._epoch:
            logger.debug("stale_transport_message", epoch=epoch, current=self._epoch)
            return
        self.handle_message(raw)

    def _check_version(self, msg: dict[str, Any]) -> None:
        version = msg.get("version")
        logger.debug("api_version", version=version)
        if version not in self._config.bitfinex.api_versions:
            logger.error(
                "unexpected_api_version",
                version=version,
                allowed=self._config.bitfinex.api_versions,
            )
            self.close()

    # ── Outbound ──────────────────────────────────────────────────────

    def send(self, payload: Any) -> None:
        """Transmit ``payload`` now, or queue it until the connection resumes.

        Non-string payloads are encoded before the pause gate, so an
        unencodable payload raises here in every state and never reaches
        the resume queue.
        """
        if not isinstance(payload, str):
            payload = orjson.dumps(payload).decode()

        transport = self._transport
        if self._paused or transport is None or not transport.is_open:
            self._resume_queue.add(functools.partial(self.send, payload))
            return
        transport.send(payload)

    def ping(self) -> asyncio.Future[PongEvent]:
        """Send a ping; the future resolves with the matching pong."""
        self._ping_counter += 1
        cid = self._ping_counter
        future: asyncio.Future[PongEvent] = asyncio.get_running_loop().create_future()

        def _on_pong(msg: dict[str, Any]) -> None:
            logger.info("pong_received", cid=cid, ts=msg.get("ts"))
            _settle(future, PongEvent, msg)

        self._expectations.once(match_event("pong", cid=cid), _on_pong)
        self.send({"cid": cid, "event": "ping"})
        return future

    def subscribe(
        self,
        channel: str,
        pair: str,
        params: dict[str, Any],
        callback: SnapshotCallback,
    ) -> asyncio.Future[SubscribedEvent]:
        """Subscribe to ``channel``; ``callback`` receives every data message on it.

        The future resolves with the server's acknowledgement. A callback that
        is not callable fails the future immediately and nothing is sent.
        """
        future: asyncio.Future[SubscribedEvent] = asyncio.get_running_loop().create_future()
        if not callable(callback):
            future.set_exception(TypeError("BfxWSManager.subscribe: callback must be callable"))
            return future

        def _is_ack(msg: Any) -> bool:
            if not is_event(msg, "subscribed"):
                return False
            if msg.get("channel", channel) != channel:
                return False
            if pair and msg.get("pair") == pair:
                return True
            # funding symbols and candle keys are acknowledged without a pair
            return any(
                params.get(field) and msg.get(field) == params[field]
                for field in ("symbol", "key")
            )

        def _on_subscribed(msg: dict[str, Any]) -> None:
            try:
                ack = SubscribedEvent.model_validate(msg)
            except ValidationError as e:
                logger.error("invalid_subscribe_ack", channel=channel, pair=pair, msg=msg)
                if not future.done():
                    future.set_exception(e)
                return

            self._expectations.whenever(match_snapshot(ack.chan_id), callback)
            self._expectations.whenever(match_heartbeat(ack.chan_id), self._on_heartbeat)
            logger.info("subscription_confirmed", channel=channel, pair=pair, chan_id=ack.chan_id)
            if not future.done():
                future.set_result(ack)

        # inbound frames are handled on a later loop iteration, so the ack
        # cannot arrive before the expectation is registered
        self.send({"event": "subscribe", "channel": channel, **params})
        self._expectations.once(_is_ack, _on_subscribed)
        return future

    def unsubscribe(self, chan_id: int) -> asyncio.Future[UnsubscribedEvent]:
        """Unsubscribe from a channel id; the future resolves with the server's ack."""
        future: asyncio.Future[UnsubscribedEvent] = asyncio.get_running_loop().create_future()
        self._expectations.once(
            match_event("unsubscribed", chanId=chan_id),
            lambda msg: _settle(future, UnsubscribedEvent, msg),
        )
        self.send({"event": "unsubscribe", "chanId": chan_id})
        return future

    # ── Inbound ───────────────────────────────────────────────────────

    def handle_message(self, raw: str | bytes) -> None:
        """Decode one inbound frame and route it."""
        try:
            msg = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.error("invalid_json", raw=raw[:200])
            self._count("invalid")
            return

        if self._expectations.dispatch(msg):
            self._count("dispatched")
        elif is_event(msg, "info"):
            self._count("control")
            self._process_info(msg)
        elif is_event(msg, "error"):
            self._count("unprocessed")
            logger.error("ws_server_error", code=msg.get("code"), error=msg.get("msg"))
        else:
            self._count("unprocessed")
            logger.debug("unprocessed_message", msg=msg)

        now = time.time()
        if now - self._last_stats_time >= self._config.tuning.stats_interval:
            self._log_stats()
            self._last_stats_time = now

    def _process_info(self, msg: dict[str, Any]) -> None:
        try:
            info = InfoEvent.model_validate(msg)
        except ValidationError:
            logger.warning("invalid_info_message", msg=msg)
            return
        logger.debug("info_message", code=info.code, msg=info.msg)

        handler_name = INFO_CODE_HANDLERS.get(info.code)
        if handler_name is None:
            logger.info("unknown_info_code", code=info.code)
            return
        getattr(self, handler_name)()

    def _on_heartbeat(self, msg: list[Any]) -> None:
        logger.debug("heartbeating", chan_id=msg[0])

    def _count(self, outcome: str) -> None:
        self._msg_counts[outcome] = self._msg_counts.get(outcome, 0) + 1

    def _log_stats(self) -> None:
        logger.info("ws_stats", **self.get_stats())
        self._msg_counts.clear()


async def main() -> None:
    """Entry point for the streaming process."""
    from bfxstream.ingestion.channels import subscribe_ticker

    config = get_config()
    configure_logging(config.logging)

    manager = BfxWSManager(config)
    manager.connect()

    for pair in config.bitfinex.pairs:
        future = subscribe_ticker(manager, pair, functools.partial(_log_snapshot, pair))
        future.add_done_callback(functools.partial(_log_subscribe_failure, pair))

    await manager.wait_closed()


def _log_subscribe_failure(pair: str, future: asyncio.Future) -> None:
    if future.cancelled():
        return
    error = future.exception()
    if error is not None:
        logger.error("subscribe_failed", pair=pair, error=str(error))


def _log_snapshot(pair: str, msg: list[Any]) -> None:
    logger.info("ticker_snapshot", pair=pair, chan_id=msg[0], data=msg[1:])


if __name__ == "__main__":
    asyncio.run(main())
