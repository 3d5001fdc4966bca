"""Websocket transport used by :class:`BfxWSManager`.

The manager only depends on the :class:`Transport` protocol: construct to
open, a ready flag, ``send``/``close``, and two callback slots. The
production implementation wraps the ``websockets`` asyncio client.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Protocol

import structlog
import websockets
import websockets.asyncio.client
from websockets.protocol import State

logger = structlog.get_logger(__name__)

MessageCallback = Callable[[str | bytes], None]
OpenCallback = Callable[[], None]


class Transport(Protocol):
    on_message: MessageCallback | None
    on_open: OpenCallback | None

    @property
    def is_open(self) -> bool: ...

    def send(self, data: str) -> None: ...

    def close(self) -> None: ...

    async def wait_closed(self) -> None: ...


TransportFactory = Callable[[str], Transport]


class WebSocketTransport:
    """
    One websocket connection, driven by a background task.

    Opening starts as soon as the object is built (a running event loop is
    required). Outbound frames go through a queue drained by a writer task,
    so calls to :meth:`send` are transmitted in call order. The transport
    never reconnects on its own.
    """

    def __init__(
        self,
        url: str,
        *,
        ping_interval: float | None = 30,
        ping_timeout: float | None = 10,
        max_size: int | None = 10 * 1024 * 1024,
    ) -> None:
        self.url = url
        self.on_message: MessageCallback | None = None
        self.on_open: OpenCallback | None = None

        self._ping_interval = ping_interval
        self._ping_timeout = ping_timeout
        self._max_size = max_size

        self._ws: websockets.asyncio.client.ClientConnection | None = None
        self._outbox: asyncio.Queue[str] = asyncio.Queue()
        self._closing = False
        self._close_task: asyncio.Task | None = None
        self._task = asyncio.get_running_loop().create_task(self._run())

    @property
    def is_open(self) -> bool:
        return not self._closing and self._ws is not None and self._ws.state is State.OPEN

    def send(self, data: str) -> None:
        if not self.is_open:
            raise ConnectionError(f"websocket to {self.url} is not open")
        self._outbox.put_nowait(data)

    def close(self) -> None:
        if self._closing:
            return
        self._closing = True
        if self._ws is not None:
            self._close_task = asyncio.get_running_loop().create_task(self._ws.close())
        else:
            self._task.cancel()

    async def wait_closed(self) -> None:
        """Wait until the reader task has finished."""
        await asyncio.wait({self._task})

    # ── Background tasks ──────────────────────────────────────────────

    async def _run(self) -> None:
        writer: asyncio.Task | None = None
        try:
            async with websockets.asyncio.client.connect(
                self.url,
                ping_interval=self._ping_interval,
                ping_timeout=self._ping_timeout,
                max_size=self._max_size,
            ) as ws:
                self._ws = ws
                logger.info("websocket_connected", url=self.url)
                writer = asyncio.create_task(self._write_loop(ws))
                if self._closing:
                    return

                self._emit_open()
                async for raw in ws:
                    self._emit_message(raw)

        except websockets.ConnectionClosed as e:
            logger.warning("websocket_disconnected", url=self.url, reason=str(e))
        except websockets.InvalidHandshake as e:
            logger.error("websocket_handshake_failed", url=self.url, error=str(e))
        except OSError as e:
            logger.error("websocket_connection_error", url=self.url, error=str(e))
        except Exception:
            logger.exception("websocket_unexpected_error", url=self.url)
        finally:
            if writer is not None:
                writer.cancel()
            self._ws = None
            logger.info("websocket_closed", url=self.url)

    async def _write_loop(self, ws: websockets.asyncio.client.ClientConnection) -> None:
        while True:
            data = await self._outbox.get()
            try:
                await ws.send(data)
            except websockets.ConnectionClosed:
                logger.debug("websocket_send_after_close", url=self.url)
                return

    def _emit_open(self) -> None:
        if self.on_open is None:
            return
        try:
            self.on_open()
        except Exception:
            logger.exception("open_handler_error", url=self.url)

    def _emit_message(self, raw: str | bytes) -> None:
        if self.on_message is None:
            return
        try:
            self.on_message(raw)
        except Exception:
            logger.exception("message_handler_error", url=self.url)
