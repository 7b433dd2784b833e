"""
Structured Logger Implementation

Logger with keyword context, pluggable backends and in-process metric
bookkeeping. Calls never raise and never block on I/O beyond what the
backends do.
"""

import logging
import os
import time
from collections import defaultdict
from typing import Dict, List, Optional, Any

from .interfaces import (
    HFTLoggerInterface, LogBackend, LogRouter, LogRecord,
    LogLevel
)
from .structs import PerformanceConfig


class HFTLogger(HFTLoggerInterface):
    """
    Logger with multiple backends.

    Key features:
    - Keyword context merged with persistent context
    - Immediate propagation of WARNING+ to Python logging
    - Metric table for counters, latencies and gauges
    - Python logging compatibility
    """

    def __init__(self, name: str, backends: List[LogBackend], router: LogRouter, config: PerformanceConfig):
        if not isinstance(config, PerformanceConfig):
            raise TypeError(f"Expected PerformanceConfig, got {type(config)}")

        self.name = name
        self.backends = backends
        self.router = router
        self.perf_config = config

        # Persistent context for all log messages
        self.context: Dict[str, Any] = {}

        # Metric table: name -> (count, last value, total)
        self._metrics: Dict[str, Dict[str, float]] = defaultdict(
            lambda: {"count": 0, "last": 0.0, "total": 0.0}
        )
        self._metric_level = (
            LogLevel[config.metric_log_level.upper()] if config.metric_log_level else None
        )

        # Python logging compatibility
        self._py_logger = logging.getLogger(name)

        environment = os.getenv('ENVIRONMENT', 'dev').lower()
        if environment in ('dev', 'development', 'local', 'test'):
            self._py_logger.propagate = True

    @staticmethod
    def _convert_level_to_python(level: LogLevel) -> int:
        return int(level)

    def _dispatch(self, record: LogRecord) -> None:
        for backend in self.router.get_backends(record):
            try:
                backend.write(record)
            except Exception as e:
                backend._handle_error(e)

    def _log(self, level: LogLevel, msg: str, **context) -> None:
        """
        Core logging method.

        WARNING and above go straight to the Python logger so they are
        never lost; everything else is routed to the backends.
        """
        full_context = {**self.context, **context}
        record = LogRecord.create(level, self.name, str(msg), **full_context)

        if level >= LogLevel.WARNING and self._py_logger.propagate:
            extra = f" | {', '.join(f'{k}={v}' for k, v in full_context.items())}" if full_context else ""
            self._py_logger.log(self._convert_level_to_python(level), str(msg) + extra)
            return

        self._dispatch(record)

    # Standard logging methods
    def debug(self, msg: str, **context) -> None:
        self._log(LogLevel.DEBUG, msg, **context)

    def info(self, msg: str, **context) -> None:
        self._log(LogLevel.INFO, msg, **context)

    def warning(self, msg: str, **context) -> None:
        self._log(LogLevel.WARNING, msg, **context)

    def error(self, msg: str, **context) -> None:
        self._log(LogLevel.ERROR, msg, **context)

    def critical(self, msg: str, **context) -> None:
        self._log(LogLevel.CRITICAL, msg, **context)

    # Metric methods
    def metric(self, name: str, value: float, **tags) -> None:
        """Record metric value; tags may be passed flat or as ``tags={...}``."""
        if not self.perf_config.track_metrics:
            return

        nested = tags.pop("tags", None)
        if isinstance(nested, dict):
            tags.update(nested)

        entry = self._metrics[name]
        entry["count"] += 1
        entry["last"] = float(value)
        entry["total"] += float(value)

        if self._metric_level is not None:
            record = LogRecord.create(self._metric_level, self.name, f"[METRIC] {name}={float(value)}",
                                      **{**self.context, **tags})
            self._dispatch(record)

    def latency(self, operation: str, duration_ms: float, **tags) -> None:
        self.metric(f"{operation}_latency_ms", duration_ms, **tags)

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """Snapshot of recorded metrics keyed by metric name."""
        return {name: dict(values) for name, values in self._metrics.items()}

    def reset_metrics(self) -> None:
        self._metrics.clear()

    def set_context(self, **context) -> None:
        self.context.update(context)

    def flush(self) -> None:
        for backend in self.backends:
            try:
                backend.flush()
            except Exception as e:
                print(f"Backend {backend.name} flush error: {e}")


class LoggingTimer:
    """Context manager for timing operations with automatic logging."""

    def __init__(self, logger: HFTLoggerInterface, operation: str, **tags):
        self.logger = logger
        self.operation = operation
        self.tags = tags
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.start_time is not None:
            self.end_time = time.perf_counter()
            duration_ms = (self.end_time - self.start_time) * 1000
            self.logger.latency(self.operation, duration_ms, **self.tags)

        if exc_type is not None:
            self.logger.error(f"{self.operation} failed",
                              error_type=exc_type.__name__,
                              **self.tags)

    @property
    def elapsed_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        end_time = self.end_time or time.perf_counter()
        return (end_time - self.start_time) * 1000
