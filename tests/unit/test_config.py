"""Tests for configuration module."""

from __future__ import annotations

import logging
from dataclasses import FrozenInstanceError
from pathlib import Path
from unittest.mock import patch

import pytest

from nodepool_exporter.config import (
    DEFAULT_LISTEN_ADDRESS,
    DEFAULT_TELEMETRY_PATH,
    MAX_PORT,
    MIN_PORT,
    VALID_LOG_LEVELS,
    Config,
    LoggingConfig,
    NodepoolConfig,
    WebConfig,
    _normalize_telemetry_path,
    _parse_bool,
    _parse_port,
    _validate_host,
    _validate_log_level,
    load_config,
    parse_listen_address,
)
from nodepool_exporter.exceptions import ConfigurationError


class TestConfig:
    """Tests for Config dataclass."""

    def test_defaults(self) -> None:
        config = Config()
        assert config.web.listen_address == ":9533"
        assert config.web.telemetry_path == "/metrics"
        assert config.nodepool.host == "localhost"
        assert config.nodepool.port == "8005"
        assert config.logging_config.level == "INFO"
        assert config.logging_config.json is False

    def test_custom_values(self) -> None:
        config = Config(
            web=WebConfig(listen_address="127.0.0.1:9000"),
            nodepool=NodepoolConfig(host="np01", port="8080"),
            logging_config=LoggingConfig(level="DEBUG", json=True),
        )
        assert config.web.listen_address == "127.0.0.1:9000"
        assert config.web.telemetry_path == DEFAULT_TELEMETRY_PATH
        assert config.nodepool.host == "np01"
        assert config.logging_config.json is True

    def test_frozen_immutable(self) -> None:
        """Config should be immutable after creation."""
        config = Config()
        with pytest.raises(FrozenInstanceError):
            config.web = WebConfig(listen_address=":1")  # type: ignore[misc]


class TestParseBool:
    """Tests for _parse_bool."""

    @pytest.mark.parametrize("value", ["true", "TRUE", "1", "yes", "Yes"])
    def test_truthy(self, value: str) -> None:
        assert _parse_bool(value) is True

    @pytest.mark.parametrize("value", ["", "false", "0", "no", "maybe"])
    def test_falsy(self, value: str) -> None:
        assert _parse_bool(value) is False


class TestValidateLogLevel:
    """Tests for _validate_log_level."""

    def test_valid_levels_normalized(self) -> None:
        for level in VALID_LOG_LEVELS:
            assert _validate_log_level(level.lower()) == level

    def test_invalid_level_uses_default(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert _validate_log_level("verbose") == "INFO"
        assert "NODEPOOL_EXPORTER_LOG_LEVEL" in caplog.text


class TestParsePort:
    """Tests for _parse_port."""

    def test_valid_port(self) -> None:
        assert _parse_port("8005", "NODEPOOL_PORT", "8005") == "8005"

    def test_normalizes_whitespace_and_zeros(self) -> None:
        assert _parse_port(" 08080 ", "NODEPOOL_PORT", "8005") == "8080"

    def test_bounds(self) -> None:
        assert _parse_port(str(MIN_PORT), "NODEPOOL_PORT", "8005") == str(MIN_PORT)
        assert _parse_port(str(MAX_PORT), "NODEPOOL_PORT", "8005") == str(MAX_PORT)

    @pytest.mark.parametrize("value", ["0", "70000", "-1"])
    def test_out_of_range_uses_default(self, value: str, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert _parse_port(value, "NODEPOOL_PORT", "8005") == "8005"
        assert "not a valid port" in caplog.text

    def test_not_a_number_uses_default(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert _parse_port("http", "NODEPOOL_PORT", "8005") == "8005"
        assert "not a valid integer" in caplog.text


class TestValidateHost:
    """Tests for _validate_host."""

    def test_valid_host_stripped(self) -> None:
        assert _validate_host(" np01 ", "NODEPOOL_HOST", "localhost") == "np01"

    def test_empty_host_uses_default(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING):
            assert _validate_host("  ", "NODEPOOL_HOST", "localhost") == "localhost"
        assert "empty host" in caplog.text


class TestNormalizeTelemetryPath:
    """Tests for _normalize_telemetry_path."""

    def test_absolute_path_unchanged(self) -> None:
        assert _normalize_telemetry_path("/probe") == "/probe"

    def test_leading_slash_added(self) -> None:
        assert _normalize_telemetry_path("probe") == "/probe"

    def test_empty_path_uses_default(self) -> None:
        assert _normalize_telemetry_path("") == DEFAULT_TELEMETRY_PATH


class TestParseListenAddress:
    """Tests for parse_listen_address."""

    def test_port_only_binds_all_interfaces(self) -> None:
        assert parse_listen_address(DEFAULT_LISTEN_ADDRESS) == ("0.0.0.0", 9533)

    def test_host_and_port(self) -> None:
        assert parse_listen_address("127.0.0.1:9000") == ("127.0.0.1", 9000)

    def test_hostname(self) -> None:
        assert parse_listen_address("localhost:9533") == ("localhost", 9533)

    def test_bracketed_ipv6(self) -> None:
        assert parse_listen_address("[::1]:9533") == ("::1", 9533)

    def test_ephemeral_port(self) -> None:
        assert parse_listen_address(":0") == ("0.0.0.0", 0)

    @pytest.mark.parametrize(
        "address",
        ["localhost", "::1:9533", "host:http", "host:", "host:70000", "host:-1"],
    )
    def test_invalid_addresses(self, address: str) -> None:
        with pytest.raises(ConfigurationError):
            parse_listen_address(address)


class TestLoadConfig:
    """Tests for load_config."""

    def test_defaults(self, tmp_path: Path) -> None:
        with patch.dict("os.environ", {}, clear=True):
            config = load_config(tmp_path / ".env")

        assert config == Config()

    def test_environment_values(self, tmp_path: Path) -> None:
        env = {
            "NODEPOOL_EXPORTER_LISTEN_ADDRESS": "127.0.0.1:9100",
            "NODEPOOL_EXPORTER_TELEMETRY_PATH": "/probe",
            "NODEPOOL_HOST": "np01.internal",
            "NODEPOOL_PORT": "8080",
            "NODEPOOL_EXPORTER_LOG_LEVEL": "debug",
            "NODEPOOL_EXPORTER_LOG_JSON": "true",
        }
        with patch.dict("os.environ", env, clear=True):
            config = load_config(tmp_path / ".env")

        assert config.web == WebConfig(listen_address="127.0.0.1:9100", telemetry_path="/probe")
        assert config.nodepool == NodepoolConfig(host="np01.internal", port="8080")
        assert config.logging_config == LoggingConfig(level="DEBUG", json=True)

    def test_invalid_values_fall_back(self, tmp_path: Path) -> None:
        env = {
            "NODEPOOL_HOST": "",
            "NODEPOOL_PORT": "http",
            "NODEPOOL_EXPORTER_LOG_LEVEL": "loud",
            "NODEPOOL_EXPORTER_TELEMETRY_PATH": "probe",
        }
        with patch.dict("os.environ", env, clear=True):
            config = load_config(tmp_path / ".env")

        assert config.nodepool == NodepoolConfig()
        assert config.logging_config.level == "INFO"
        assert config.web.telemetry_path == "/probe"

    def test_reads_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("NODEPOOL_HOST=from-dotenv\nNODEPOOL_PORT=9999\n")

        with patch.dict("os.environ", {}, clear=True):
            config = load_config(env_file)

        assert config.nodepool == NodepoolConfig(host="from-dotenv", port="9999")

    def test_environment_wins_over_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("NODEPOOL_HOST=from-dotenv\n")

        with patch.dict("os.environ", {"NODEPOOL_HOST": "from-env"}, clear=True):
            config = load_config(env_file)

        assert config.nodepool.host == "from-env"
