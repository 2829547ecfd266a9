"""
Test configuration loading and precedence
"""

import pytest

from factotum.config import DEFAULT_CONFIG, build_config, load_config, parse_bool
from factotum.errors import ConfigError


def test_defaults_without_config_file(isolated_config):
    raw = load_config(environ={})
    config = build_config(raw)

    assert raw == DEFAULT_CONFIG
    assert config.url == ""
    assert config.timeout == 15
    assert config.verbose is False
    assert config.json_only is True
    assert config.output_root == "output"
    assert config.chrome.headless is True
    assert config.chrome.cdp_url == ""


def test_yaml_file_is_merged_over_defaults(tmp_path):
    path = tmp_path / "factotum.yaml"
    path.write_text(
        "url: https://www.mannings.com.hk\n"
        "timeout: 30\n"
        "jsonOnly: false\n"
        "chrome:\n"
        "  cdp_url: http://127.0.0.1:9222\n"
    )
    config = build_config(load_config(str(path), environ={}))

    assert config.url == "https://www.mannings.com.hk"
    assert config.timeout == 30
    assert config.json_only is False
    assert config.chrome.cdp_url == "http://127.0.0.1:9222"
    assert config.chrome.headless is True


def test_env_overrides_file(tmp_path):
    path = tmp_path / "factotum.yaml"
    path.write_text("timeout: 30\nverbose: false\n")
    env = {"FACTOTUM_TIMEOUT": "45", "FACTOTUM_VERBOSE": "true", "FACTOTUM_CDP_URL": "http://h:1"}

    config = build_config(load_config(str(path), environ=env))

    assert config.timeout == 45
    assert config.verbose is True
    assert config.chrome.cdp_url == "http://h:1"


def test_cli_overrides_win_and_none_falls_through(tmp_path):
    path = tmp_path / "factotum.yaml"
    path.write_text("url: https://a.example\ntimeout: 30\n")

    config = build_config(load_config(str(path), environ={}), url="https://b.example", timeout=None)

    assert config.url == "https://b.example"
    assert config.timeout == 30


def test_malformed_yaml_falls_back_to_defaults(tmp_path, capsys):
    path = tmp_path / "factotum.yaml"
    path.write_text("timeout: [unclosed\n")

    raw = load_config(str(path), environ={})

    assert raw == DEFAULT_CONFIG
    assert "Failed to load" in capsys.readouterr().out


def test_invalid_values_raise_config_error():
    with pytest.raises(ConfigError):
        build_config(dict(DEFAULT_CONFIG, timeout="soon"))
    with pytest.raises(ConfigError):
        build_config(dict(DEFAULT_CONFIG, jsonOnly="maybe"))


def test_parse_bool():
    assert parse_bool(True) is True
    assert parse_bool("TRUE") is True
    assert parse_bool("1") is True
    assert parse_bool("false") is False
    assert parse_bool("off") is False


def test_bare_key_env_vars_override_file(tmp_path):
    path = tmp_path / "factotum.yaml"
    path.write_text("timeout: 30\njsonOnly: true\nurl: https://a.example\n")
    env = {"TIMEOUT": "20", "JSONONLY": "false", "URL": "https://b.example"}

    config = build_config(load_config(str(path), environ=env))

    assert config.timeout == 20
    assert config.json_only is False
    assert config.url == "https://b.example"


def test_prefixed_env_vars_win_over_bare_names(tmp_path):
    env = {"TIMEOUT": "20", "FACTOTUM_TIMEOUT": "40"}

    config = build_config(load_config(str(tmp_path / "missing.yaml"), environ=env))

    assert config.timeout == 40
