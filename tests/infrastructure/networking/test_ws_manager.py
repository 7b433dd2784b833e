"""
Tests for the WebSocket connection supervisor, its pending frame queue and
reconnection policy.
"""

import asyncio
from unittest.mock import Mock, AsyncMock

import pytest

from config.structs import WebSocketConfig
from infrastructure.networking.websocket import (
    CALLER_CLOSE_CODE,
    ConnectionState,
    PendingFrameQueue,
    ReconnectionPolicy,
    ReconnectPolicyType,
    WebSocketManager,
)
from tests.fakes import wait_until


class TestReconnectionPolicy:

    def test_exponential_backoff_is_capped(self):
        policy = ReconnectionPolicy(ReconnectPolicyType.EXPONENTIAL, initial_delay=0.5,
                                    backoff_factor=2.0, max_delay=30.0)

        assert [policy.calculate_delay(n) for n in range(8)] == [0.5, 1.0, 2.0, 4.0, 8.0, 16.0, 30.0, 30.0]

    def test_fixed_and_immediate(self):
        assert ReconnectionPolicy(ReconnectPolicyType.FIXED, initial_delay=2.0).calculate_delay(10) == 2.0
        assert ReconnectionPolicy(ReconnectPolicyType.IMMEDIATE).calculate_delay(3) == 0.0

    def test_from_config_defaults(self):
        policy = ReconnectionPolicy.from_config(WebSocketConfig(url="wss://x"))

        assert policy.policy_type == ReconnectPolicyType.EXPONENTIAL
        assert policy.initial_delay == 0.5
        assert policy.backoff_factor == 2.0
        assert policy.max_delay == 30.0


class TestPendingFrameQueue:

    def test_fifo_drain(self):
        queue = PendingFrameQueue(max_size=5, logger=Mock())
        for frame in ("a", "b", "c"):
            queue.put(frame)

        assert queue.drain() == ["a", "b", "c"]
        assert len(queue) == 0
        assert not queue

    def test_overflow_drops_oldest_with_warning(self):
        logger = Mock()
        queue = PendingFrameQueue(max_size=2, logger=logger)

        queue.put("a")
        queue.put("b")
        queue.put("c")

        assert queue.drain() == ["b", "c"]
        assert queue.dropped == 1
        logger.warning.assert_called_once()

    def test_clear_returns_count(self):
        queue = PendingFrameQueue(max_size=2, logger=Mock())
        queue.put(b"x")

        assert queue.clear() == 1
        assert queue.clear() == 0

    def test_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            PendingFrameQueue(max_size=0)


@pytest.fixture
async def manager(ws_config, transport_hub):
    handler = AsyncMock()
    ws_manager = WebSocketManager(ws_config, message_handler=handler, transport_factory=transport_hub)
    yield ws_manager
    await ws_manager.close()


class TestWebSocketManager:

    @pytest.mark.asyncio
    async def test_state_transitions_are_reported(self, ws_config, transport_hub):
        states = []

        async def on_state(state):
            states.append(state)

        ws_manager = WebSocketManager(ws_config, message_handler=AsyncMock(),
                                      connection_handler=on_state, transport_factory=transport_hub)
        await ws_manager.initialize()
        await wait_until(ws_manager.is_connected)
        await ws_manager.close()

        assert states == [
            ConnectionState.CONNECTING,
            ConnectionState.OPEN,
            ConnectionState.CLOSING,
            ConnectionState.CLOSED,
        ]

    @pytest.mark.asyncio
    async def test_initialize_is_noop_while_running(self, manager, transport_hub):
        await manager.initialize()
        await wait_until(manager.is_connected)

        await manager.initialize()
        await asyncio.sleep(0.01)

        assert len(transport_hub.transports) == 1

    @pytest.mark.asyncio
    async def test_inbound_frames_reach_handler(self, manager, transport_hub):
        await manager.initialize()
        await wait_until(manager.is_connected)

        transport_hub.current.feed('{"T":"i"}')

        await wait_until(lambda: manager._message_handler.await_count == 1)
        manager._message_handler.assert_awaited_once_with('{"T":"i"}')

    @pytest.mark.asyncio
    async def test_send_message_encodes_json(self, manager, transport_hub):
        await manager.initialize()
        await wait_until(manager.is_connected)

        await manager.send_message({"T": "aobus", "S": "ORN-USDT"})

        assert transport_hub.current.sent == ['{"T":"aobus","S":"ORN-USDT"}']

    @pytest.mark.asyncio
    async def test_pending_queue_bounded_while_connecting(self, manager, transport_hub, ws_config):
        transport_hub.open_gate.clear()
        await manager.initialize()

        for i in range(ws_config.max_pending_frames + 3):
            await manager.send_raw(str(i))

        assert manager.pending_frames == ws_config.max_pending_frames

        transport_hub.open_gate.set()
        await wait_until(manager.is_connected)

        assert transport_hub.current.sent == [str(i) for i in range(3, ws_config.max_pending_frames + 3)]
        assert manager.pending_frames == 0

    @pytest.mark.asyncio
    async def test_queue_flushed_once_per_open(self, manager, transport_hub):
        transport_hub.open_gate.clear()
        await manager.initialize()
        await manager.send_raw("queued")

        transport_hub.open_gate.set()
        await wait_until(manager.is_connected)
        transport_hub.current.drop(1006)
        await wait_until(lambda: len(transport_hub.transports) == 2 and manager.is_connected())

        assert transport_hub.transports[0].sent == ["queued"]
        assert transport_hub.transports[1].sent == []

    @pytest.mark.asyncio
    async def test_send_when_closed_is_dropped(self, manager, transport_hub):
        await manager.send_raw("nobody listens")

        assert manager.state == ConnectionState.CLOSED
        assert manager.pending_frames == 0
        assert transport_hub.transports == []

    @pytest.mark.asyncio
    async def test_handler_failure_does_not_close_connection(self, manager, transport_hub):
        manager._message_handler.side_effect = [ValueError("bad"), None]
        await manager.initialize()
        await wait_until(manager.is_connected)

        transport_hub.current.feed("first")
        transport_hub.current.feed("second")

        await wait_until(lambda: manager._message_handler.await_count == 2)
        assert manager.is_connected()

    @pytest.mark.asyncio
    async def test_reconnect_attempts_reset_after_open(self, ws_config, transport_hub):
        delays = []
        ws_manager = WebSocketManager(ws_config, message_handler=AsyncMock(), transport_factory=transport_hub)
        original = ws_manager.policy

        class RecordingPolicy:
            def calculate_delay(self, attempt):
                delays.append(attempt)
                return original.calculate_delay(attempt)

        ws_manager.policy = RecordingPolicy()
        transport_hub.fail_opens = 2
        try:
            await ws_manager.initialize()
            await wait_until(ws_manager.is_connected)
            transport_hub.current.drop(1001)
            await wait_until(lambda: len(transport_hub.transports) == 4 and ws_manager.is_connected())
        finally:
            await ws_manager.close()

        assert delays == [0, 1, 0]

    @pytest.mark.asyncio
    async def test_close_sends_caller_code(self, manager, transport_hub):
        await manager.initialize()
        await wait_until(manager.is_connected)

        await manager.close()

        assert transport_hub.current.close_code == CALLER_CLOSE_CODE
        assert not manager.is_active()
        assert manager.state == ConnectionState.CLOSED

    @pytest.mark.asyncio
    async def test_close_during_backoff_stops_loop(self, ws_config, transport_hub):
        slow = WebSocketConfig(url=ws_config.url, reconnect_policy="fixed",
                               reconnect_delay=10.0, max_reconnect_delay=10.0)
        ws_manager = WebSocketManager(slow, message_handler=AsyncMock(), transport_factory=transport_hub)
        transport_hub.fail_opens = 1

        await ws_manager.initialize()
        await wait_until(lambda: len(transport_hub.transports) == 1)
        await asyncio.sleep(0.01)
        await asyncio.wait_for(ws_manager.close(), timeout=1.0)

        assert ws_manager.state == ConnectionState.CLOSED
        assert len(transport_hub.transports) == 1
