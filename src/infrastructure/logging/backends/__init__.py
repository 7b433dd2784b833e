"""
Logging Backends

Each backend handles its own formatting and output logic.

Available backends:
- ConsoleBackend: console output through Python logging
- ColorConsoleBackend: same, with ANSI colors on TTYs
"""

from .console import ConsoleBackend, ColorConsoleBackend

__all__ = [
    'ConsoleBackend',
    'ColorConsoleBackend',
]
