"""
Core Logging Interfaces

Defines lightweight interfaces for structured logging with pluggable
backends. Context travels as keyword arguments and is rendered by the
backends, never by the caller.
"""

import time
from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, Dict, List
from dataclasses import dataclass, field


class LogLevel(IntEnum):
    """Log levels with numeric values for fast comparison."""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


@dataclass
class LogRecord:
    """
    Lightweight log record passed from logger to backends.

    Formatting happens in backends, not here.
    """
    timestamp: float
    level: LogLevel
    logger_name: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, level: LogLevel, logger_name: str, message: str, **context) -> 'LogRecord':
        """Record stamped with the current time; context is kept as given."""
        return cls(
            timestamp=time.time(),
            level=level,
            logger_name=logger_name,
            message=message,
            context=context
        )


class LogBackend(ABC):
    """
    Abstract base for all logging backends.

    Each backend handles its own formatting and output logic.
    """

    def __init__(self, name: str, config: Dict[str, Any] = None):
        self.name = name
        self.config = config or {}
        self.enabled = True
        self._error_count = 0
        self._max_errors = 10  # Disable after too many failures

    @abstractmethod
    def should_handle(self, record: LogRecord) -> bool:
        """Fast check if this backend should process the record."""
        pass

    @abstractmethod
    def write(self, record: LogRecord) -> None:
        """
        Write log record to backend destination.

        Must handle errors gracefully without raising exceptions.
        """
        pass

    def flush(self) -> None:
        """Flush any buffered data."""
        pass

    def _handle_error(self, error: Exception) -> None:
        """Handle backend errors gracefully."""
        self._error_count += 1
        if self._error_count >= self._max_errors:
            self.enabled = False
            print(f"Backend {self.name} disabled after {self._max_errors} errors: {error}")


class HFTLoggerInterface(ABC):
    """
    Interface for the structured logger.

    This is what gets injected into components as ``self.logger``.
    """

    @abstractmethod
    def debug(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def info(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def warning(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def error(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def critical(self, msg: str, **context) -> None:
        pass

    @abstractmethod
    def metric(self, name: str, value: float, **tags) -> None:
        """Log metric value."""
        pass

    @abstractmethod
    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        """Log latency metric. Convenience method for timing."""
        pass

    @abstractmethod
    def set_context(self, **context) -> None:
        """Set persistent context for all logs from this logger."""
        pass


class LogRouter:
    """Routes log records to the enabled backends that accept them."""

    def __init__(self, backends: List[LogBackend]):
        self.backends = backends

    def get_backends(self, record: LogRecord) -> List[LogBackend]:
        return [b for b in self.backends if b.enabled and b.should_handle(record)]
