"""
Logging Configuration Structures

Structured configuration for the logging system using msgspec.Struct
for type safety.
"""

from typing import Optional, Dict, Any
from msgspec import Struct


_VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


class BackendConfig(Struct, frozen=True):
    """
    Base configuration for all logging backends.

    Attributes:
        enabled: Whether this backend is active
        min_level: Minimum log level to process (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    enabled: bool = True
    min_level: str = "INFO"

    def validate(self) -> None:
        if self.min_level.upper() not in _VALID_LEVELS:
            raise ValueError(f"Invalid log level: {self.min_level}")


class ConsoleBackendConfig(BackendConfig, frozen=True):
    """
    Console backend configuration.

    Attributes:
        color: Enable colored output
        include_context: Include context information
        max_message_length: Maximum message length before truncation
    """
    color: bool = True
    include_context: bool = True
    max_message_length: int = 1000


class PerformanceConfig(Struct, frozen=True):
    """
    Metric bookkeeping settings.

    Attributes:
        track_metrics: Keep an in-process table of metric values
        metric_log_level: Render metric records on backends at this level (None = do not render)
    """
    track_metrics: bool = True
    metric_log_level: Optional[str] = None

    def validate(self) -> None:
        if self.metric_log_level is not None and self.metric_log_level.upper() not in _VALID_LEVELS:
            raise ValueError(f"Invalid metric log level: {self.metric_log_level}")


class LoggingConfig(Struct, frozen=True):
    """
    Complete logging configuration.

    Attributes:
        environment: Environment name (dev, prod, test)
        console: Console backend configuration
        performance: Metric settings
        default_context: Default context for all log messages
    """
    environment: str = "dev"
    console: Optional[ConsoleBackendConfig] = None
    performance: Optional[PerformanceConfig] = None
    default_context: Optional[Dict[str, Any]] = None

    def validate(self) -> None:
        if self.environment not in {"dev", "prod", "test", "staging"}:
            raise ValueError(f"Invalid environment: {self.environment}")
        if self.console:
            self.console.validate()
        if self.performance:
            self.performance.validate()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        """Create from a plain dictionary (e.g. the YAML ``logging`` section)."""
        data = dict(data)
        if isinstance(data.get("console"), dict):
            data["console"] = ConsoleBackendConfig(**data["console"])
        if isinstance(data.get("performance"), dict):
            data["performance"] = PerformanceConfig(**data["performance"])
        return cls(**data)

    @classmethod
    def default_development(cls) -> "LoggingConfig":
        return cls(
            environment="dev",
            console=ConsoleBackendConfig(
                enabled=True,
                min_level="DEBUG",
                color=True,
                include_context=True
            ),
            performance=PerformanceConfig()
        )

    @classmethod
    def default_production(cls) -> "LoggingConfig":
        return cls(
            environment="prod",
            console=ConsoleBackendConfig(
                enabled=True,
                min_level="WARNING",
                color=False
            ),
            performance=PerformanceConfig(track_metrics=True)
        )
