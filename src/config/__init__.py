"""
Configuration package.

- structs: WebSocketConfig / AggregatorConfig msgspec structs
- config_manager: config.yaml + .env loading
"""

from .structs import WebSocketConfig, AggregatorConfig
from .config_manager import load_aggregator_config, get_logging_config

__all__ = [
    'WebSocketConfig',
    'AggregatorConfig',
    'load_aggregator_config',
    'get_logging_config',
]
