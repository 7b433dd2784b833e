"""
Logging System

Structured logging with keyword context and metrics, configured from
the ``logging`` section of config.yaml.

Usage:
    from infrastructure.logging import get_logger

    logger = get_logger('aggregator.ws')
    logger.info("Subscribed", channel="aobus", payload="ORN-USDT")

    # Metrics logging
    logger.metric("ws_reconnects", 1, tags={"chain": "56"})
"""

from .interfaces import (
    LogLevel,
    LogRecord,
    LogBackend,
    LogRouter,
    HFTLoggerInterface
)

from .hft_logger import HFTLogger, LoggingTimer

from .factory import (
    LoggerFactory,
    get_logger,
    get_component_logger,
    configure_logging
)

from .structs import (
    LoggingConfig,
    ConsoleBackendConfig,
    PerformanceConfig,
    BackendConfig
)

from .backends.console import ConsoleBackend, ColorConsoleBackend

__all__ = [
    'LogLevel',
    'LogRecord',
    'LogBackend',
    'LogRouter',
    'HFTLoggerInterface',
    'HFTLogger',
    'LoggingTimer',
    'LoggerFactory',
    'get_logger',
    'get_component_logger',
    'configure_logging',
    'LoggingConfig',
    'ConsoleBackendConfig',
    'PerformanceConfig',
    'BackendConfig',
    'ConsoleBackend',
    'ColorConsoleBackend',
]
