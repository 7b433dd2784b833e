"""
Configuration Management Module

YAML-based configuration for the aggregator feed client.

Key Features:
- config.yaml with ${VAR} / ${VAR:default} environment substitution
- .env loading through python-dotenv
- Type-checked values with errors naming the offending setting

Usage:
    from config.config_manager import load_aggregator_config

    config = load_aggregator_config()            # searches standard locations
    config = load_aggregator_config("prod.yaml") # explicit file
    logging_section = get_logging_config()
"""

import os
import re
import logging
from pathlib import Path
from typing import Dict, Optional, Any, TypeVar, Type, Union

import yaml
from dotenv import load_dotenv

from aggregator.enums import SupportedChainId
from config.structs import WebSocketConfig, AggregatorConfig, RECONNECT_POLICIES
from infrastructure.exceptions.feed import ConfigurationError

T = TypeVar('T')

ENV_VAR_PATTERN = re.compile(r'\$\{([^}]+)\}')
ENV_VAR_DEFAULT_PATTERN = re.compile(r'^([^:]+):(.*)$')

CONFIG_PATH_ENV = 'AGGREGATOR_CONFIG'

logger = logging.getLogger(__name__)


def guess_file_paths(file_name: str) -> list[Path]:
    """Returns a list of possible file locations to search."""
    return [
        Path(__file__).parent.parent.parent / file_name,  # Project root
        Path(__file__).parent.parent / file_name,         # src directory
        Path.cwd() / file_name,                           # Current working directory
    ]


def validate_config_dict(config: Dict[str, Any], required_keys: list[str], config_name: str) -> None:
    """Validate that required configuration keys are present.

    Raises:
        ConfigurationError: If required keys are missing
    """
    missing_keys = [key for key in required_keys if key not in config]
    if missing_keys:
        raise ConfigurationError(
            f"Missing required keys in {config_name}: {missing_keys}",
            config_name
        )


def safe_get_config_value(config: Dict[str, Any], key: str, default: T, value_type: Type[T], config_name: str) -> T:
    """Safely extract and validate configuration value with type checking.

    Raises:
        ConfigurationError: If value cannot be cast to expected type
    """
    try:
        value = config.get(key, default)
        if value is None:
            return default
        if value_type == bool and isinstance(value, str):
            return value.strip().lower() in ('1', 'true', 'yes', 'on')
        return value_type(value)
    except (ValueError, TypeError) as e:
        raise ConfigurationError(
            f"Invalid value for {config_name}.{key}: {config.get(key)} (expected {value_type.__name__})",
            f"{config_name}.{key}"
        ) from e


def substitute_env_vars(content: str) -> str:
    """
    Substitute environment variables in configuration content.

    Supports syntax:
    - ${VAR_NAME} - Required environment variable (empty if unset, with a warning)
    - ${VAR_NAME:default} - Optional with default value
    """
    def replace_var(match):
        var_expr = match.group(1)

        default_match = ENV_VAR_DEFAULT_PATTERN.match(var_expr)
        if default_match:
            var_name, default_value = default_match.groups()
            env_value = os.getenv(var_name.strip())
            if env_value is None:
                logger.debug(f"Using default value for {var_name}: {default_value}")
                return default_value
            return env_value

        var_name = var_expr.strip()
        env_value = os.getenv(var_name)
        if env_value is None:
            logger.warning(f"Environment variable {var_name} not set - using empty value")
            return ""
        return env_value

    return ENV_VAR_PATTERN.sub(replace_var, content)


def parse_websocket_config(part_config: Dict[str, Any], websocket_url: str) -> WebSocketConfig:
    """
    Parse WebSocket configuration from dictionary with URL injection and validation.

    Raises:
        ConfigurationError: If configuration values are invalid
    """
    if not websocket_url or not isinstance(websocket_url, str):
        raise ConfigurationError(f"Invalid WebSocket URL: {websocket_url}", "websocket_url")
    if not (websocket_url.startswith('ws://') or websocket_url.startswith('wss://')):
        raise ConfigurationError(
            f"WebSocket URL must start with ws:// or wss://, got: {websocket_url}",
            "websocket_url"
        )

    policy = safe_get_config_value(part_config, 'reconnect_policy', 'exponential', str, 'websocket')
    if policy not in RECONNECT_POLICIES:
        raise ConfigurationError(
            f"Unknown reconnect policy '{policy}'. Valid options: {RECONNECT_POLICIES}",
            "websocket.reconnect_policy"
        )

    config = WebSocketConfig(
        url=websocket_url,

        connect_timeout=safe_get_config_value(part_config, 'connect_timeout', 10.0, float, 'websocket'),
        ping_interval=safe_get_config_value(part_config, 'ping_interval', 20.0, float, 'websocket'),
        ping_timeout=safe_get_config_value(part_config, 'ping_timeout', 10.0, float, 'websocket'),
        close_timeout=safe_get_config_value(part_config, 'close_timeout', 5.0, float, 'websocket'),

        reconnect_policy=policy,
        reconnect_delay=safe_get_config_value(part_config, 'reconnect_delay', 0.5, float, 'websocket'),
        reconnect_backoff=safe_get_config_value(part_config, 'reconnect_backoff', 2.0, float, 'websocket'),
        max_reconnect_delay=safe_get_config_value(part_config, 'max_reconnect_delay', 30.0, float, 'websocket'),

        max_pending_frames=safe_get_config_value(part_config, 'max_pending_frames', 1000, int, 'websocket'),
        max_message_size=safe_get_config_value(part_config, 'max_message_size', 1048576, int, 'websocket'),
        max_queue_size=safe_get_config_value(part_config, 'max_queue_size', 1000, int, 'websocket'),
    )

    try:
        config.validate()
    except ValueError as e:
        raise ConfigurationError(f"Invalid WebSocket configuration: {e}", "websocket") from e
    return config


def parse_chain_id(value: Any) -> SupportedChainId:
    try:
        return SupportedChainId(str(value))
    except ValueError as e:
        valid = [c.value for c in SupportedChainId]
        raise ConfigurationError(
            f"Unsupported chain id '{value}'. Valid options: {valid}",
            "aggregator.chain_id"
        ) from e


def load_env_file() -> None:
    """Load environment variables from the first .env found (never overrides)."""
    for env_path in guess_file_paths('.env'):
        if env_path.exists():
            load_dotenv(dotenv_path=env_path, override=False)
            logger.info(f"Loaded environment variables from: {env_path}")
            return
    logger.debug("No .env file found - using system environment variables only")


def find_config_file(path: Optional[Union[str, Path]] = None) -> Optional[Path]:
    """Resolve config file: explicit path, AGGREGATOR_CONFIG, then standard locations."""
    if path is not None:
        candidate = Path(path)
        if not candidate.exists():
            raise ConfigurationError(f"Config file not found: {candidate}", "config_file")
        return candidate

    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path:
        candidate = Path(env_path)
        if not candidate.exists():
            raise ConfigurationError(f"{CONFIG_PATH_ENV} points to missing file: {candidate}", "config_file")
        return candidate

    for candidate in guess_file_paths('config.yaml'):
        if candidate.exists():
            return candidate
    return None


def read_config_file(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Read, substitute and parse the YAML configuration; empty dict if none exists."""
    load_env_file()

    config_path = find_config_file(path)
    if config_path is None:
        return {}

    with open(config_path, 'r', encoding='utf-8') as f:
        raw_content = f.read()

    try:
        config_data = yaml.safe_load(substitute_env_vars(raw_content))
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}", str(config_path)) from e

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise ConfigurationError(f"Top level of {config_path} must be a mapping", str(config_path))

    logger.info(f"Configuration loaded from: {config_path}")
    return config_data


def load_aggregator_config(path: Optional[Union[str, Path]] = None) -> AggregatorConfig:
    """
    Build AggregatorConfig from the ``aggregator`` section of config.yaml.

    Raises:
        ConfigurationError: If the file or section is missing or invalid
    """
    config_data = read_config_file(path)
    if not config_data:
        raise ConfigurationError("No config.yaml found", "config_file")

    validate_config_dict(config_data, ['aggregator'], 'config')
    section = config_data['aggregator'] or {}
    validate_config_dict(section, ['chain_id', 'websocket_url'], 'aggregator')

    return AggregatorConfig(
        name=safe_get_config_value(section, 'name', 'aggregator', str, 'aggregator'),
        chain_id=parse_chain_id(section['chain_id']),
        websocket=parse_websocket_config(section.get('websocket') or {}, section['websocket_url'])
    )


def get_logging_config(path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """Return the ``logging`` section of config.yaml (empty dict when absent)."""
    config_data = read_config_file(path)
    section = config_data.get('logging') or {}
    if not isinstance(section, dict):
        raise ConfigurationError("logging section must be a mapping", "logging")
    return section
