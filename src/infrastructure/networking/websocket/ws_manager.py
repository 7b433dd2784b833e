"""
WebSocket Manager

Connection supervisor for a single long-lived WebSocket feed. Owns the
transport, the connection state machine, reconnection and the outbound
pending-frame queue. Consumers see only the state and the send primitives.

State machine:
    CLOSED -> CONNECTING -> OPEN -> (CLOSED | CONNECTING)
    CLOSING is transient while close() tears the connection down.

Key Features:
- Unbounded reconnection with a configurable delay policy
- Close code 4000 is terminal (caller-initiated close)
- Frames sent while CONNECTING are queued and flushed once on OPEN
- Message handler failures are logged, never break the connection
"""

import asyncio
import time
from typing import Optional, Callable, Any, Awaitable, Union

import msgspec

from config.structs import WebSocketConfig
from infrastructure.exceptions.feed import TransportError, TransportClosedError
from infrastructure.logging import get_logger, LoggingTimer, HFTLoggerInterface

from .frame_queue import PendingFrameQueue
from .structs import ConnectionState, ReconnectionPolicy, CALLER_CLOSE_CODE
from .transport import Transport, TransportFactory, WebsocketTransport

Frame = Union[str, bytes]


class WebSocketManager:
    """
    Supervises one WebSocket connection and reconnects it until closed.

    ``message_handler`` receives every raw inbound frame. ``connection_handler``
    is notified on every state change; OPEN is reported after queued frames
    have been flushed.
    """

    def __init__(
        self,
        config: WebSocketConfig,
        message_handler: Callable[[Frame], Awaitable[None]],
        connection_handler: Optional[Callable[[ConnectionState], Awaitable[None]]] = None,
        transport_factory: Optional[TransportFactory] = None,
        logger: Optional[HFTLoggerInterface] = None,
    ):
        self.config = config
        self._message_handler = message_handler
        self.connection_handler = connection_handler
        self._transport_factory = transport_factory or WebsocketTransport
        self.policy = ReconnectionPolicy.from_config(config)

        self.logger = logger or get_logger('ws.manager')

        self._transport: Optional[Transport] = None
        self.connection_state = ConnectionState.CLOSED
        self._connection_task: Optional[asyncio.Task] = None

        # Control flags
        self._should_reconnect = False
        self._generation = 0

        self._pending = PendingFrameQueue(config.max_pending_frames, logger=self.logger)

    @property
    def state(self) -> ConnectionState:
        return self.connection_state

    @property
    def pending_frames(self) -> int:
        return len(self._pending)

    def is_connected(self) -> bool:
        """Check if WebSocket is connected."""
        if self.connection_state != ConnectionState.OPEN or self._transport is None:
            return False
        return self._transport.state == ConnectionState.OPEN

    def is_active(self) -> bool:
        """True while the connection loop is running and allowed to reconnect."""
        return (self._should_reconnect
                and self._connection_task is not None
                and not self._connection_task.done())

    async def initialize(self) -> None:
        """Start the connection loop. No-op if it is already running."""
        if self.is_active():
            return

        self._should_reconnect = True
        self._generation += 1
        await self._update_state(ConnectionState.CONNECTING)
        self._connection_task = asyncio.create_task(
            self._connection_loop(self._generation), name="ws_connection_loop"
        )
        self.logger.info("WebSocket manager initialized", url=self.config.url)
        self.logger.metric("ws_manager_initializations", 1)

    async def send_message(self, message: Any) -> None:
        """Encode ``message`` as JSON and send it (fire-and-forget)."""
        msg_str = msgspec.json.encode(message).decode("utf-8")
        await self.send_raw(msg_str)

    async def send_raw(self, data: Frame) -> None:
        """
        Send a frame as-is.

        OPEN: sent immediately. CONNECTING: queued until the next OPEN.
        CLOSED/CLOSING: dropped. Send failures are never raised.
        """
        state = self.connection_state
        if state == ConnectionState.CONNECTING:
            self._pending.put(data)
            return

        transport = self._transport
        if state != ConnectionState.OPEN or transport is None:
            self.logger.debug("Dropping frame, connection not open", state=state.name)
            self.logger.metric("ws_frames_dropped", 1, tags={"state": state.name})
            return

        try:
            await transport.send(data)
            self.logger.metric("ws_frames_sent", 1)
        except TransportError as e:
            self.logger.debug("Send failed, connection closing", error_message=str(e))
            self.logger.metric("ws_frames_dropped", 1, tags={"state": "send_failed"})

    def _is_current(self, generation: int) -> bool:
        return self._should_reconnect and generation == self._generation

    async def _connection_loop(self, generation: int) -> None:
        """
        Main connection loop: open, flush, read until closed, back off, repeat.
        """
        reconnect_attempts = 0

        try:
            while self._is_current(generation):
                transport = self._transport_factory(self.config)
                self._transport = transport
                await self._update_state(ConnectionState.CONNECTING)

                try:
                    with LoggingTimer(self.logger, "ws_connect") as timer:
                        await transport.open()
                except TransportError as e:
                    if not self._is_current(generation):
                        break
                    await self._wait_before_reconnect(e, reconnect_attempts)
                    reconnect_attempts += 1
                    continue

                if not self._is_current(generation):
                    await self._close_transport(transport, CALLER_CLOSE_CODE)
                    break

                reconnect_attempts = 0
                self.logger.info("WebSocket connection established",
                                 url=self.config.url,
                                 connect_time_ms=round(timer.elapsed_ms, 2))
                self.logger.metric("ws_connections", 1)

                await self._on_open(transport)
                close_code = await self._message_reader(transport)

                if not self._is_current(generation):
                    break

                if close_code == CALLER_CLOSE_CODE:
                    self.logger.info("Connection closed with caller code, not reconnecting",
                                     close_code=close_code)
                    self._should_reconnect = False
                    break

                error = TransportClosedError(close_code)
                await self._wait_before_reconnect(error, reconnect_attempts)
                reconnect_attempts += 1

        except asyncio.CancelledError:
            self.logger.debug("Connection loop cancelled")

        if generation == self._generation:
            self._transport = None
            self._pending.clear()
            await self._update_state(ConnectionState.CLOSED)
        self.logger.debug("Connection loop terminated")

    async def _on_open(self, transport: Transport) -> None:
        """Flush queued frames in order, then enter OPEN and notify the handler."""
        # State is still CONNECTING here, so frames sent during the flush
        # join the queue behind the ones being written.
        flushed = 0
        while self._pending:
            for frame in self._pending.drain():
                try:
                    await transport.send(frame)
                    flushed += 1
                except TransportError as e:
                    self.logger.debug("Dropped queued frame, connection closing",
                                      error_message=str(e))

        if flushed:
            self.logger.debug("Flushed pending frames", count=flushed)
            self.logger.metric("ws_pending_frames_flushed", flushed)

        await self._update_state(ConnectionState.OPEN)

    async def _message_reader(self, transport: Transport) -> Optional[int]:
        """Read frames until the transport closes; returns the close code."""
        while True:
            try:
                raw_message = await transport.recv()
            except TransportClosedError as e:
                self.logger.info("WebSocket connection closed",
                                 close_code=e.close_code,
                                 reason=e.reason)
                return e.close_code

            processing_start = time.perf_counter()
            try:
                await self._message_handler(raw_message)
                processing_time_ms = (time.perf_counter() - processing_start) * 1000
                self.logger.metric("ws_message_processing_time_ms", processing_time_ms)
            except Exception as e:
                self.logger.error("Error processing message",
                                  error_type=type(e).__name__,
                                  error_message=str(e))
                self.logger.metric("ws_message_processing_errors", 1)

    async def _wait_before_reconnect(self, error: Exception, attempt: int) -> None:
        await self._update_state(ConnectionState.CONNECTING)
        delay = self.policy.calculate_delay(attempt)

        self.logger.warning("Connection lost, reconnecting",
                            attempt=attempt + 1,
                            delay_seconds=delay,
                            error_type=type(error).__name__,
                            error_message=str(error))
        self.logger.metric("ws_reconnection_attempts", 1)

        await asyncio.sleep(delay)

    async def _update_state(self, state: ConnectionState) -> None:
        """Update connection state and notify handlers."""
        previous_state = self.connection_state
        self.connection_state = state

        if previous_state != state:
            self.logger.info("Connection state changed",
                             previous_state=previous_state.name,
                             new_state=state.name)

            self.logger.metric("ws_state_changes", 1,
                               tags={"from_state": previous_state.name,
                                     "to_state": state.name})

            if self.connection_handler:
                try:
                    await self.connection_handler(state)
                except Exception as e:
                    self.logger.error("Error in state change handler",
                                      error_type=type(e).__name__,
                                      error_message=str(e))

    async def _close_transport(self, transport: Transport, code: int) -> None:
        try:
            await transport.close(code, "client destroy")
        except Exception as e:
            self.logger.debug("Error closing transport",
                              error_type=type(e).__name__,
                              error_message=str(e))

    async def close(self) -> None:
        """
        Close with code 4000 and stop reconnecting. Idempotent, never raises.

        Safe to call from the message or connection handler: in that case the
        loop exits on its own once the transport reports the closure.
        """
        task = self._connection_task
        transport = self._transport
        was_running = self._should_reconnect or (task is not None and not task.done())

        self._should_reconnect = False
        dropped = self._pending.clear()
        if dropped:
            self.logger.debug("Discarded pending frames on close", count=dropped)

        if not was_running and transport is None:
            return

        self.logger.info("Closing WebSocket manager...")
        with LoggingTimer(self.logger, "ws_manager_close") as timer:
            if self.connection_state != ConnectionState.CLOSED:
                await self._update_state(ConnectionState.CLOSING)

            if transport is not None:
                await self._close_transport(transport, CALLER_CLOSE_CODE)
            self._transport = None

            if task is not None and not task.done() and task is not asyncio.current_task():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

            if task is None or task.done():
                self._connection_task = None
                await self._update_state(ConnectionState.CLOSED)

        self.logger.info("WebSocket manager closed", close_time_ms=round(timer.elapsed_ms, 2))
        self.logger.metric("ws_manager_closes", 1)
