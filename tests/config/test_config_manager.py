import pytest

from aggregator.enums import SupportedChainId
from config.config_manager import (
    get_logging_config,
    load_aggregator_config,
    parse_websocket_config,
    safe_get_config_value,
    substitute_env_vars,
    validate_config_dict,
)
from config.structs import WebSocketConfig
from infrastructure.exceptions.feed import ConfigurationError


CONFIG_YAML = """
aggregator:
  name: bsc-aggregator
  chain_id: "56"
  websocket_url: ${AGGREGATOR_WS_URL:wss://aggregator.test/v1}
  websocket:
    reconnect_policy: fixed
    reconnect_delay: 1.5
    max_reconnect_delay: 5
    max_pending_frames: 50

logging:
  console:
    min_level: ${LOG_LEVEL:INFO}
    color: false
"""


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.delenv("AGGREGATOR_WS_URL", raising=False)
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("AGGREGATOR_CONFIG", raising=False)
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML)
    return path


class TestLoadAggregatorConfig:

    def test_loads_with_defaults_substituted(self, config_file):
        config = load_aggregator_config(config_file)

        assert config.name == "bsc-aggregator"
        assert config.chain_id == SupportedChainId.BSC
        assert config.websocket.url == "wss://aggregator.test/v1"
        assert config.websocket.reconnect_policy == "fixed"
        assert config.websocket.reconnect_delay == 1.5
        assert config.websocket.max_reconnect_delay == 5.0
        assert config.websocket.max_pending_frames == 50
        assert config.websocket.ping_interval == 20.0

    def test_environment_overrides_default(self, config_file, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_WS_URL", "ws://localhost:9000")

        config = load_aggregator_config(config_file)

        assert config.websocket.url == "ws://localhost:9000"

    def test_path_from_environment(self, config_file, monkeypatch):
        monkeypatch.setenv("AGGREGATOR_CONFIG", str(config_file))

        assert load_aggregator_config().chain_id == SupportedChainId.BSC

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_aggregator_config(tmp_path / "absent.yaml")

        assert exc_info.value.setting_name == "config_file"

    def test_unknown_chain(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text('aggregator:\n  chain_id: "42"\n  websocket_url: wss://x\n')

        with pytest.raises(ConfigurationError) as exc_info:
            load_aggregator_config(path)

        assert exc_info.value.setting_name == "aggregator.chain_id"

    def test_missing_section_keys(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text('aggregator:\n  chain_id: "56"\n')

        with pytest.raises(ConfigurationError, match="websocket_url"):
            load_aggregator_config(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("aggregator: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_aggregator_config(path)

    def test_logging_section(self, config_file):
        assert get_logging_config(config_file) == {"console": {"min_level": "INFO", "color": False}}


class TestParseWebsocketConfig:

    def test_rejects_non_websocket_url(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_websocket_config({}, "https://aggregator.test")

        assert exc_info.value.setting_name == "websocket_url"

    def test_rejects_unknown_policy(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_websocket_config({"reconnect_policy": "sometimes"}, "wss://x")

        assert exc_info.value.setting_name == "websocket.reconnect_policy"

    def test_rejects_inconsistent_delays(self):
        with pytest.raises(ConfigurationError):
            parse_websocket_config({"reconnect_delay": 10, "max_reconnect_delay": 1}, "wss://x")

    def test_rejects_bad_number(self):
        with pytest.raises(ConfigurationError) as exc_info:
            parse_websocket_config({"connect_timeout": "soon"}, "wss://x")

        assert exc_info.value.setting_name == "websocket.connect_timeout"

    def test_defaults(self):
        assert parse_websocket_config({}, "wss://x") == WebSocketConfig(url="wss://x")


class TestHelpers:

    def test_substitute_env_vars(self, monkeypatch):
        monkeypatch.setenv("SET_VAR", "value")
        monkeypatch.delenv("UNSET_VAR", raising=False)

        assert substitute_env_vars("${SET_VAR} ${UNSET_VAR:fallback} [${UNSET_VAR}]") == "value fallback []"

    def test_safe_get_config_value_bool_strings(self):
        assert safe_get_config_value({"flag": "yes"}, "flag", False, bool, "test") is True
        assert safe_get_config_value({}, "flag", False, bool, "test") is False

    def test_validate_config_dict(self):
        with pytest.raises(ConfigurationError, match=r"\['b'\]"):
            validate_config_dict({"a": 1}, ["a", "b"], "section")
