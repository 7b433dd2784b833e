"""
Console Backend

Renders records through Python's logging system so existing handlers,
formatters and pytest's caplog keep working.
"""

import logging
import os
import sys
from typing import Dict, Any

from ..interfaces import LogBackend, LogRecord, LogLevel


class ConsoleBackend(LogBackend):
    """
    Console logging backend.

    Uses Python's standard logging; configures a stream handler on the
    root logger only if nothing else has.
    """

    def __init__(self, name: str = "console", config: Dict[str, Any] = None):
        super().__init__(name, config)

        config = config or {}
        min_level_config = config.get('min_level', LogLevel.DEBUG)
        if isinstance(min_level_config, str):
            self.min_level = LogLevel[min_level_config.upper()]
        else:
            self.min_level = LogLevel(min_level_config)
        self.color_enabled = config.get('color', True)
        self.include_context = config.get('include_context', True)
        self.max_message_length = config.get('max_message_length', 1000)
        self.enabled = config.get('enabled', True)

        self._py_loggers: Dict[str, logging.Logger] = {}

        if self.enabled:
            self._ensure_python_logging_configured()

    def should_handle(self, record: LogRecord) -> bool:
        if not self.enabled:
            return False
        return record.level >= self.min_level

    def write(self, record: LogRecord) -> None:
        try:
            py_logger = self._get_python_logger(record.logger_name)
            py_logger.log(int(record.level), self._format_message(record))
        except Exception as e:
            # Fallback to print if Python logging fails
            print(f"ConsoleBackend error: {e}")
            print(f"{record.level.name}: {record.logger_name}: {record.message}")

    def _ensure_python_logging_configured(self) -> None:
        root_logger = logging.getLogger()
        if not root_logger.handlers:
            console_handler = logging.StreamHandler()
            if self.color_enabled:
                formatter = logging.Formatter('%(levelname)-8s %(name)-20s %(message)s')
            else:
                formatter = logging.Formatter('%(levelname)s - %(name)s - %(message)s')
            console_handler.setFormatter(formatter)

            py_level = int(self.min_level)
            console_handler.setLevel(py_level)
            root_logger.setLevel(py_level)
            root_logger.addHandler(console_handler)

    def _get_python_logger(self, name: str) -> logging.Logger:
        if name not in self._py_loggers:
            self._py_loggers[name] = logging.getLogger(name)
        return self._py_loggers[name]

    def _format_message(self, record: LogRecord) -> str:
        message = record.message
        if len(message) > self.max_message_length:
            message = message[:self.max_message_length] + "..."

        if self.include_context and record.context:
            context_parts = []
            for key, value in record.context.items():
                value_str = str(value)
                if len(value_str) > 100:
                    value_str = value_str[:100] + "..."
                context_parts.append(f"{key}={value_str}")
            message += f" | {', '.join(context_parts)}"

        return message


class ColorConsoleBackend(ConsoleBackend):
    """Console backend adding ANSI colors by level when stdout is a TTY."""

    COLORS = {
        LogLevel.DEBUG: '\033[36m',    # Cyan
        LogLevel.INFO: '\033[37m',     # White
        LogLevel.WARNING: '\033[33m',  # Yellow
        LogLevel.ERROR: '\033[31m',    # Red
        LogLevel.CRITICAL: '\033[35m', # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, name: str = "color_console", config: Dict[str, Any] = None):
        super().__init__(name, config)
        colors_supported = (
            os.getenv('TERM') != 'dumb' and
            hasattr(sys.stdout, 'isatty') and
            sys.stdout.isatty()
        )
        self.use_colors = self.color_enabled and colors_supported

    def _format_message(self, record: LogRecord) -> str:
        message = super()._format_message(record)
        if self.use_colors and record.level in self.COLORS:
            message = f"{self.COLORS[record.level]}{message}{self.RESET}"
        return message
