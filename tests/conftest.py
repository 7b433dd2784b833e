"""
Pytest configuration and shared fixtures for aggregator feed tests.

Provides quiet logging, connection configs and an in-memory transport hub
so the connection supervisor can be driven without a network.
"""

import pytest
import os
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Configure test environment
os.environ['ENVIRONMENT'] = 'test'

from infrastructure.logging import configure_logging
from infrastructure.logging.structs import LoggingConfig, ConsoleBackendConfig, PerformanceConfig

from aggregator.enums import SupportedChainId
from config.structs import WebSocketConfig, AggregatorConfig

from tests.fakes import FakeTransportHub


@pytest.fixture(scope="session", autouse=True)
def setup_test_logging():
    """Set up test-appropriate logging configuration."""
    configure_logging(LoggingConfig(
        environment="test",
        console=ConsoleBackendConfig(enabled=True, min_level="WARNING", color=False),
        performance=PerformanceConfig(track_metrics=True),
    ))


@pytest.fixture
def ws_config():
    """Fast reconnects so supervisor tests finish quickly."""
    return WebSocketConfig(
        url="ws://aggregator.test/v1",
        reconnect_policy="fixed",
        reconnect_delay=0.01,
        max_reconnect_delay=0.01,
        max_pending_frames=10,
    )


@pytest.fixture
def aggregator_config(ws_config):
    return AggregatorConfig(chain_id=SupportedChainId.BSC, websocket=ws_config, name="test")


@pytest.fixture
def transport_hub():
    """In-memory transport factory; every (re)connect creates a new FakeTransport."""
    return FakeTransportHub()
