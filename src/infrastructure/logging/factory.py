"""
Logging Factory

Creates and caches logger instances from struct-based configuration.
Components receive the result as ``self.logger``.
"""

import os
from typing import Dict, Optional

import msgspec

from .interfaces import HFTLoggerInterface, LogRouter, LogLevel
from .hft_logger import HFTLogger
from .backends.console import ConsoleBackend, ColorConsoleBackend
from .structs import LoggingConfig, ConsoleBackendConfig, PerformanceConfig


class LoggerFactory:
    """Simplified logging factory - trust config, fail fast."""

    _cached_loggers: Dict[str, HFTLogger] = {}
    _default_config: Optional[LoggingConfig] = None

    @classmethod
    def create_logger(cls, name: str, config: Optional[LoggingConfig] = None) -> HFTLoggerInterface:
        """Create logger instance, reusing a cached one with the same name."""
        if name in cls._cached_loggers:
            return cls._cached_loggers[name]

        config = config or cls._get_default_config()

        backends = []
        if config.console and config.console.enabled:
            backend_class = ColorConsoleBackend if config.console.color else ConsoleBackend
            backends.append(backend_class('console', msgspec.structs.asdict(config.console)))

        logger = HFTLogger(
            name=name,
            backends=backends,
            router=LogRouter(backends),
            config=config.performance or PerformanceConfig()
        )
        if config.default_context:
            logger.set_context(**config.default_context)

        cls._cached_loggers[name] = logger
        return logger

    @classmethod
    def override_logger(cls, name: str, **overrides) -> bool:
        """
        Override logger configuration at runtime.

        Args:
            name: Logger name to override
            **overrides: ``min_level`` (e.g. "ERROR") and/or ``enabled``

        Returns:
            True if logger was found and modified, False otherwise

        Example:
            LoggerFactory.override_logger("aggregator.ws", min_level="ERROR")
        """
        if name not in cls._cached_loggers:
            return False

        logger = cls._cached_loggers[name]

        if "min_level" in overrides:
            level = overrides["min_level"]
            level = LogLevel[level.upper()] if isinstance(level, str) else LogLevel(level)
            for backend in logger.backends:
                if hasattr(backend, 'min_level'):
                    backend.min_level = level

        if "enabled" in overrides:
            for backend in logger.backends:
                backend.enabled = overrides["enabled"]

        return True

    @classmethod
    def clear_cache(cls) -> None:
        cls._cached_loggers.clear()
        cls._default_config = None

    @classmethod
    def _get_default_config(cls) -> LoggingConfig:
        if cls._default_config is None:
            try:
                cls._default_config = cls._load_default_config()
            except Exception as e:
                print(f"Logging configuration ignored ({type(e).__name__}: {e}), using defaults")
                cls._default_config = cls._environment_default()
        return cls._default_config

    @staticmethod
    def _environment_default() -> LoggingConfig:
        if os.getenv('ENVIRONMENT', 'dev') == 'prod':
            return LoggingConfig.default_production()
        return LoggingConfig.default_development()

    @classmethod
    def _load_default_config(cls) -> LoggingConfig:
        """Convert the ``logging`` section of config.yaml to LoggingConfig."""
        # Delayed import to avoid circular dependency
        from config.config_manager import get_logging_config

        logging_config = get_logging_config()
        if not logging_config:
            return cls._environment_default()

        struct_data = {'environment': os.getenv('ENVIRONMENT', 'dev')}

        console = logging_config.get('console')
        if console:
            struct_data['console'] = ConsoleBackendConfig(
                enabled=bool(console.get('enabled', True)),
                min_level=str(console.get('min_level', 'DEBUG')).upper(),
                color=bool(console.get('color', True)),
                include_context=bool(console.get('include_context', True))
            )

        performance = logging_config.get('performance')
        if performance:
            struct_data['performance'] = PerformanceConfig(
                track_metrics=bool(performance.get('track_metrics', True)),
                metric_log_level=performance.get('metric_log_level')
            )

        config = LoggingConfig(**struct_data)
        config.validate()
        return config


def get_logger(name: str) -> HFTLoggerInterface:
    """Get logger instance. Simple, fast."""
    return LoggerFactory.create_logger(name)


def get_component_logger(component: str, channel: Optional[str] = None) -> HFTLoggerInterface:
    """Get logger named ``component.channel``."""
    name = f"{component}.{channel}" if channel else component
    return get_logger(name)


def configure_logging(config: LoggingConfig) -> None:
    """Replace the default configuration; cached loggers are rebuilt lazily."""
    config.validate()
    LoggerFactory.clear_cache()
    LoggerFactory._default_config = config
