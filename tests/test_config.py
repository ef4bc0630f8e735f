"""Tests for configuration loading and overrides."""
import pytest
import yaml

from metricsreporter.config import Config, apply_overrides, load_config, parse_override

BASE_CONFIG = {
    "global": {"log_level": "DEBUG"},
    "reporter": {
        "broker_id": 1,
        "broker_rack": "rack-a",
        "source_path": "metrics.yaml",
        "broker_metrics": {"BROKER_APPEND_LATENCY_AVG_MS": 2.5},
    },
}


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "reporter.yaml"
    path.write_text(yaml.safe_dump(BASE_CONFIG))
    return str(path)


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    monkeypatch.delenv("BROKER_ID", raising=False)


def test_config_loading(config_path):
    config = load_config(config_path)
    assert isinstance(config, Config)
    assert config.global_.log_level == "DEBUG"
    assert config.reporter.broker_id == 1
    assert config.reporter.metric_version is None
    assert config.reporter.interval_s == 10
    assert config.prometheus.enabled is False


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"))


def test_env_overrides(config_path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("BROKER_ID", "7")
    config = load_config(config_path)
    assert config.global_.log_level == "WARNING"
    assert config.reporter.broker_id == 7


def test_command_line_overrides_win(config_path, monkeypatch):
    monkeypatch.setenv("BROKER_ID", "7")
    config = load_config(config_path, [
        "reporter.broker_id=9",
        "reporter.metric_version=0",
        "prometheus.enabled=true",
        "prometheus.port=9100",
    ])
    assert config.reporter.broker_id == 9
    assert config.reporter.metric_version == 0
    assert config.prometheus.enabled is True
    assert config.prometheus.port == 9100


def test_parse_override():
    assert parse_override("a.b=c=d") == ("a.b", "c=d")
    assert parse_override("key=") == ("key", "")
    with pytest.raises(ValueError):
        parse_override("novalue")
    with pytest.raises(ValueError):
        parse_override("=value")


def test_apply_overrides_creates_sections():
    raw = {"reporter": "not-a-section"}
    apply_overrides(raw, ["reporter.broker_id=3", "global.log_level=INFO"])
    assert raw == {"reporter": {"broker_id": "3"}, "global": {"log_level": "INFO"}}


@pytest.mark.parametrize("override", [
    "reporter.metric_version=5",
    "reporter.broker_id=-1",
    "reporter.interval_s=0",
    "reporter.broker_metrics.PARTITION_SIZE=1",
    "global.log_format=xml",
])
def test_validation_failures(config_path, override):
    with pytest.raises(ValueError, match="Configuration validation failed"):
        load_config(config_path, [override])


def test_reporter_section_is_required(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    with pytest.raises(ValueError):
        load_config(str(path))


@pytest.mark.parametrize("content", ["- a\n- b\n", "just a string\n", "42\n"])
def test_top_level_must_be_mapping(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(ValueError, match="Configuration validation failed"):
        load_config(str(path))
