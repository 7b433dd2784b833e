"""
WebSocket transport.

Thin duplex-connection wrapper used by WebSocketManager. The supervisor only
sees the Transport interface, so tests can swap in an in-memory transport via
the ``transport_factory`` argument.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional, Union, Callable

from websockets import connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI
from websockets.protocol import State as WsState

from config.structs import WebSocketConfig
from infrastructure.exceptions.feed import TransportClosedError, TransportConnectionError
from .structs import ConnectionState

Frame = Union[str, bytes]


class Transport(ABC):
    """Abstract persistent bidirectional connection."""

    @property
    @abstractmethod
    def state(self) -> ConnectionState:
        pass

    @abstractmethod
    async def open(self) -> None:
        """Establish the connection. Raises TransportConnectionError."""
        pass

    @abstractmethod
    async def send(self, data: Frame) -> None:
        """Send a frame. Raises TransportClosedError if the connection is gone."""
        pass

    @abstractmethod
    async def recv(self) -> Frame:
        """Next inbound frame. Raises TransportClosedError(close_code) on closure."""
        pass

    @abstractmethod
    async def close(self, code: int = 1000, reason: str = "") -> None:
        pass


TransportFactory = Callable[[WebSocketConfig], Transport]


_WS_STATE_MAP = {
    WsState.CONNECTING: ConnectionState.CONNECTING,
    WsState.OPEN: ConnectionState.OPEN,
    WsState.CLOSING: ConnectionState.CLOSING,
    WsState.CLOSED: ConnectionState.CLOSED,
}


def _close_code(error: ConnectionClosed) -> Optional[int]:
    if error.rcvd is not None:
        return error.rcvd.code
    if error.sent is not None:
        return error.sent.code
    return None


class WebsocketTransport(Transport):
    """Transport backed by a ``websockets`` client connection."""

    def __init__(self, config: WebSocketConfig):
        self.config = config
        self._websocket = None
        self._opening = False

    @property
    def state(self) -> ConnectionState:
        if self._websocket is None:
            return ConnectionState.CONNECTING if self._opening else ConnectionState.CLOSED
        return _WS_STATE_MAP.get(self._websocket.state, ConnectionState.CLOSED)

    async def open(self) -> None:
        self._opening = True
        try:
            self._websocket = await connect(
                self.config.url,
                open_timeout=self.config.connect_timeout,
                ping_interval=self.config.ping_interval,
                ping_timeout=self.config.ping_timeout,
                close_timeout=self.config.close_timeout,
                max_size=self.config.max_message_size,
                max_queue=self.config.max_queue_size,
                compression=None,
            )
        except (OSError, asyncio.TimeoutError, InvalidHandshake, InvalidURI) as e:
            raise TransportConnectionError(f"Failed to connect to {self.config.url}: {e}") from e
        finally:
            self._opening = False

    async def send(self, data: Frame) -> None:
        if self._websocket is None:
            raise TransportClosedError(None, "not connected")
        try:
            await self._websocket.send(data)
        except ConnectionClosed as e:
            raise TransportClosedError(_close_code(e), str(e)) from e

    async def recv(self) -> Frame:
        if self._websocket is None:
            raise TransportClosedError(None, "not connected")
        try:
            return await self._websocket.recv()
        except ConnectionClosed as e:
            raise TransportClosedError(_close_code(e), str(e)) from e

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self._websocket is None:
            return
        await self._websocket.close(code=code, reason=reason)
