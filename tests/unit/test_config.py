"""Unit tests for config.py"""

import pytest

from metamark.config import load_config


def test_load_config_defaults(tmp_path, monkeypatch):
    """Settings defaults apply when no config.yaml, env var, or CLI override exists."""
    monkeypatch.chdir(tmp_path)
    settings = load_config()
    assert settings.max_depth == 64
    assert settings.strict_metadata is False
    assert settings.output_format == "json"
    assert settings.log_level == "WARNING"


def test_load_config_env_max_depth(monkeypatch):
    """METAMARK_MAX_DEPTH env var is coerced to int and applied to settings."""
    monkeypatch.setenv("METAMARK_MAX_DEPTH", "8")
    assert load_config().max_depth == 8


def test_load_config_env_strict_metadata(monkeypatch):
    """METAMARK_STRICT_METADATA env var is coerced to bool."""
    monkeypatch.setenv("METAMARK_STRICT_METADATA", "true")
    assert load_config().strict_metadata is True


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """METAMARK_MAX_DEPTH takes precedence over config.yaml."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("max_depth: 4\noutput_dir: out\n")
    monkeypatch.setenv("METAMARK_MAX_DEPTH", "2")
    settings = load_config()
    assert settings.max_depth == 2
    assert settings.output_dir == "out"


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("METAMARK_OUTPUT_FORMAT", "mmk")
    assert load_config(overrides={"output_format": "json"}).output_format == "json"
    assert load_config(overrides={"output_format": None}).output_format == "mmk"


def test_load_config_invalid_yaml(tmp_path, monkeypatch):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_non_mapping_yaml(tmp_path, monkeypatch):
    """A config.yaml that is not a mapping is rejected."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "config.yaml").write_text("- a\n- b\n")
    with pytest.raises(ValueError, match="expected a mapping"):
        load_config()


@pytest.mark.parametrize("overrides", [
    {"max_depth": 0},
    {"max_depth": 500},
    {"output_format": "html"},
    {"log_level": "LOUD"},
])
def test_load_config_rejects_invalid_values(overrides):
    """Out-of-range or unknown values fail validation (a ValueError)."""
    with pytest.raises(ValueError):
        load_config(overrides=overrides)
