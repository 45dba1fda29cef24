"""Tests for the configuration loader"""

from pathlib import Path

import pytest
import yaml

from renewable_usage.utils import config_loader
from renewable_usage.utils.config_loader import (
    DEFAULT_CONFIG_PATH,
    PROJECT_ROOT,
    Config,
    ConfigurationError,
    get_config,
)

MINIMAL_CONFIG = """
data_paths:
  usage_data: inputs/usage.csv
  capital_coordinates: ""
  output_dir: out
processing:
  random_seed: 7
aggregation:
  confidence_z: 2.0
charts:
  savings_by_source:
    title: Custom
logging:
  level: DEBUG
"""


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    def _write(text: str) -> Path:
        path = tmp_path / "config.yaml"
        path.write_text(text)
        monkeypatch.setenv("RENEWABLE_USAGE_CONFIG", str(path))
        Config.reset()
        return path
    return _write


def test_project_config_loads():
    config = get_config()

    assert config.get("aggregation.confidence_z") == 1.96
    assert config.get("aggregation.map_year") == 2024
    assert config.get_data_path("capital_coordinates") is None


def test_singleton():
    assert get_config() is get_config()


def test_dot_path_default(config_file):
    config_file(MINIMAL_CONFIG)
    config = get_config()

    assert config.get("aggregation.confidence_z") == 2.0
    assert config.get("aggregation.missing.key", "fallback") == "fallback"
    assert config.get_random_seed() == 7
    assert config.get_chart_config("savings_by_source") == {"title": "Custom"}
    assert config.get_chart_config("usage_map") == {}
    assert config.to_dict()["processing"] == {"random_seed": 7}


def test_relative_paths_resolve_against_config_dir(config_file, tmp_path):
    config_file(MINIMAL_CONFIG)
    assert get_config().get_data_path("usage_data") == str(tmp_path / "inputs" / "usage.csv")


def test_environment_overrides(config_file, monkeypatch):
    config_file(MINIMAL_CONFIG)
    monkeypatch.setenv("RENEWABLE_USAGE_DATA", "/data/other.csv")
    monkeypatch.setenv("RENEWABLE_USAGE_SAMPLE_SIZE", "50")
    monkeypatch.setenv("RENEWABLE_USAGE_RANDOM_SEED", "not-a-number")
    config = get_config()

    assert config.get_data_path("usage_data") == "/data/other.csv"
    assert config.get_sample_size() == 50
    assert config.get_sample_size(override=5) == 5
    assert config.get_random_seed() == 7


def test_unknown_data_path_raises(config_file):
    config_file(MINIMAL_CONFIG)
    with pytest.raises(ConfigurationError):
        get_config().get_data_path("nope")


def test_missing_file_raises(monkeypatch, tmp_path):
    monkeypatch.setenv("RENEWABLE_USAGE_CONFIG", str(tmp_path / "absent.yaml"))
    Config.reset()
    with pytest.raises(ConfigurationError, match="not found"):
        get_config()


def test_missing_section_raises(config_file):
    config_file("data_paths: {}\nprocessing: {}\n")
    with pytest.raises(ConfigurationError, match="Missing required configuration sections"):
        get_config()


def test_invalid_yaml_raises(config_file):
    config_file("data_paths: [unclosed\n")
    with pytest.raises(ConfigurationError, match="parsing"):
        get_config()


def test_packaged_defaults_without_project_config(monkeypatch, tmp_path):
    monkeypatch.delenv("RENEWABLE_USAGE_CONFIG")
    monkeypatch.setattr(config_loader, "PROJECT_ROOT", tmp_path)
    Config.reset()
    config = get_config()

    assert Config.config_path() == DEFAULT_CONFIG_PATH
    assert config.get_data_path("usage_data") is None
    assert config.get_data_path("output_dir") is None
    assert config.get("aggregation.confidence_z") == 1.96


def test_packaged_defaults_match_project_settings():
    with open(DEFAULT_CONFIG_PATH) as f:
        packaged = yaml.safe_load(f)
    with open(PROJECT_ROOT / "config.yaml") as f:
        project = yaml.safe_load(f)

    for section in ("processing", "aggregation", "charts", "logging"):
        assert packaged[section] == project[section]
