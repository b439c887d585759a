"""Tests for the configuration module."""

import pytest

from log_truck.config import Config, ConfigError, format_address, load_config, parse_address

_ENV_VARS = (
    "LISTEN_ADDR", "ELASTICSEARCH_ADDR", "QUEUE_SIZE", "BUFFER_SIZE",
    "REQUEST_TIMEOUT", "DASHBOARD_PORT", "LOG_LEVEL", "CONFIG_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_config_defaults():
    cfg = Config()
    assert cfg.listen_addr == "0.0.0.0:5000"
    assert cfg.elasticsearch_addr == "127.0.0.1:9200"
    assert cfg.queue_size == 10000
    assert cfg.buffer_size == 32768
    assert cfg.request_timeout is None
    assert cfg.dashboard_port == 0


def test_load_config_defaults():
    assert load_config([]) == Config()


def test_flags():
    cfg = load_config(["--listen", "127.0.0.1:6000", "--elasticsearch", "es:9201", "--queue-size", "5"])
    assert cfg.listen_addr == "127.0.0.1:6000"
    assert cfg.elasticsearch_addr == "es:9201"
    assert cfg.queue_size == 5


def test_env(monkeypatch):
    monkeypatch.setenv("LISTEN_ADDR", "127.0.0.1:7000")
    monkeypatch.setenv("ELASTICSEARCH_ADDR", "search:9200")
    monkeypatch.setenv("REQUEST_TIMEOUT", "2.5")

    cfg = load_config([])
    assert cfg.listen_addr == "127.0.0.1:7000"
    assert cfg.elasticsearch_addr == "search:9200"
    assert cfg.request_timeout == 2.5


def test_env_applied_after_flags(monkeypatch):
    monkeypatch.setenv("LISTEN_ADDR", "127.0.0.1:7000")
    cfg = load_config(["--listen", "127.0.0.1:6000", "--elasticsearch", "es:9201"])
    assert cfg.listen_addr == "127.0.0.1:7000"
    assert cfg.elasticsearch_addr == "es:9201"


def test_empty_env_ignored(monkeypatch):
    monkeypatch.setenv("LISTEN_ADDR", "")
    cfg = load_config(["--listen", "127.0.0.1:6000"])
    assert cfg.listen_addr == "127.0.0.1:6000"


def test_yaml_file_below_flags(tmp_path):
    path = tmp_path / "truck.yml"
    path.write_text("elasticsearch_addr: yaml-es:9200\nqueue-size: 50\nlisten_addr: 127.0.0.1:5001\n")

    cfg = load_config(["--config", str(path), "--listen", "127.0.0.1:6000"])
    assert cfg.elasticsearch_addr == "yaml-es:9200"
    assert cfg.queue_size == 50
    assert cfg.listen_addr == "127.0.0.1:6000"


def test_yaml_from_config_path_env(tmp_path, monkeypatch):
    path = tmp_path / "truck.yml"
    path.write_text("dashboard_port: 8081\n")
    monkeypatch.setenv("CONFIG_PATH", str(path))
    assert load_config([]).dashboard_port == 8081


def test_missing_yaml_file_uses_defaults(tmp_path):
    assert load_config(["--config", str(tmp_path / "absent.yml")]) == Config()


def test_invalid_number_rejected():
    with pytest.raises(ConfigError):
        load_config(["--queue-size", "lots"])


def test_invalid_address_rejected(monkeypatch):
    monkeypatch.setenv("ELASTICSEARCH_ADDR", "no-port-here")
    with pytest.raises(ConfigError):
        load_config([])


def test_zero_timeout_means_none():
    assert load_config(["--request-timeout", "0"]).request_timeout is None


def test_config_frozen():
    cfg = Config()
    with pytest.raises(AttributeError):
        cfg.queue_size = 1


class TestAddresses:
    def test_ipv4(self):
        assert parse_address("0.0.0.0:5000") == ("0.0.0.0", 5000)

    def test_bracketed_ipv6(self):
        assert parse_address("[::1]:9200") == ("::1", 9200)

    def test_unbracketed_ipv6_rejected(self):
        with pytest.raises(ConfigError):
            parse_address("::1:9200")

    def test_port_out_of_range(self):
        with pytest.raises(ConfigError):
            parse_address("localhost:70000")

    def test_format_roundtrip(self):
        assert format_address("::1", 9200) == "[::1]:9200"
        assert format_address("127.0.0.1", 5000) == "127.0.0.1:5000"
