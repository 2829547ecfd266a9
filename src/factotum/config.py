"""
Configuration management for factotum.

Config file location: ~/.factotum.yaml (or --config PATH)

Precedence, lowest first:
    DEFAULT_CONFIG < config file < environment variables < CLI flags

Environment variables are the upper-cased config keys (URL, TIMEOUT,
VERBOSE, JSONONLY, ...); FACTOTUM_URL etc. take precedence over them.

A missing config file is not an error.
"""

import copy
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from .debug_log import debug, warn
from .errors import ConfigError

CONFIG_FILE = Path.home() / ".factotum.yaml"

# Minimum listening window accepted from the command line (seconds)
MIN_TIMEOUT = 5

DEFAULT_CONFIG = {
    "url": "",
    "timeout": 15,
    "verbose": False,
    "jsonOnly": True,
    "output_root": "output",
    "poll_interval": 0.25,  # seconds between body-queue drains
    "chrome": {
        "headless": True,
        "cdp_url": "",  # attach to a running Chrome instead of launching one
        "extra_args": [],
    },
}

# Environment variable -> (section, key); section None means top level.
# Bare key names come first so the FACTOTUM_* aliases win when both are set.
ENV_OVERRIDES = {
    "URL": (None, "url"),
    "TIMEOUT": (None, "timeout"),
    "VERBOSE": (None, "verbose"),
    "JSONONLY": (None, "jsonOnly"),
    "OUTPUT_ROOT": (None, "output_root"),
    "POLL_INTERVAL": (None, "poll_interval"),
    "FACTOTUM_URL": (None, "url"),
    "FACTOTUM_TIMEOUT": (None, "timeout"),
    "FACTOTUM_VERBOSE": (None, "verbose"),
    "FACTOTUM_JSONONLY": (None, "jsonOnly"),
    "FACTOTUM_OUTPUT_ROOT": (None, "output_root"),
    "FACTOTUM_CDP_URL": ("chrome", "cdp_url"),
}

_TRUE_STRINGS = {"1", "true", "t", "yes", "y", "on"}
_FALSE_STRINGS = {"0", "false", "f", "no", "n", "off", ""}


@dataclass(frozen=True)
class ChromeSettings:
    """How the browser is obtained for a capture session."""
    headless: bool = True
    cdp_url: str = ""
    extra_args: Tuple[str, ...] = ()


@dataclass(frozen=True)
class CaptureConfig:
    """Immutable settings for one capture run, built once and passed to the driver."""
    url: str
    timeout: int = 15
    verbose: bool = False
    json_only: bool = True
    output_root: str = "output"
    poll_interval: float = 0.25
    chrome: ChromeSettings = field(default_factory=ChromeSettings)


def parse_bool(value: Any) -> bool:
    """Parse a boolean from YAML, an env var or a CLI argument."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    raise ConfigError(f"Not a boolean value: {value!r}")


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """Deep merge override into base."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _read_config_file(path: Path) -> Dict[str, Any]:
    """Read a YAML config file, returning {} when it is missing or unusable."""
    if not path.exists():
        debug("CONFIG", f"No config file at {path}")
        return {}

    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except (yaml.YAMLError, OSError) as e:
        warn("CONFIG", f"Failed to load {path}: {e}")
        warn("CONFIG", "Using default configuration")
        return {}

    if not isinstance(data, dict):
        warn("CONFIG", f"Ignoring {path}: top level is not a mapping")
        return {}

    debug("CONFIG", f"Using config file: {path}")
    return data


def _apply_env(config: Dict[str, Any], environ) -> Dict[str, Any]:
    """Overlay environment variables named after config keys onto config."""
    for var, (section, key) in ENV_OVERRIDES.items():
        if var not in environ:
            continue
        if section is None:
            config[key] = environ[var]
        else:
            config[section] = dict(config.get(section) or {})
            config[section][key] = environ[var]
    return config


def load_config(path: Optional[str] = None, environ=None) -> Dict[str, Any]:
    """Load raw configuration: defaults, then the YAML file, then env vars.

    Args:
        path: Explicit config file (``--config``); defaults to ~/.factotum.yaml
        environ: Environment mapping, defaults to os.environ
    """
    environ = os.environ if environ is None else environ
    config_path = Path(path).expanduser() if path else CONFIG_FILE

    config = _deep_merge(copy.deepcopy(DEFAULT_CONFIG), _read_config_file(config_path))
    return _apply_env(config, environ)


def build_config(raw: Dict[str, Any], **overrides) -> CaptureConfig:
    """Turn a raw config dict plus CLI overrides into a CaptureConfig.

    Overrides whose value is None are ignored, so unset CLI flags fall
    through to the file/environment value.
    """
    merged = dict(raw)
    for key, value in overrides.items():
        if value is not None:
            merged[key] = value

    chrome = merged.get("chrome") or {}
    try:
        timeout = int(merged.get("timeout", DEFAULT_CONFIG["timeout"]))
        poll_interval = float(merged.get("poll_interval", DEFAULT_CONFIG["poll_interval"]))
        settings = ChromeSettings(
            headless=parse_bool(chrome.get("headless", True)),
            cdp_url=str(chrome.get("cdp_url") or ""),
            extra_args=tuple(str(a) for a in chrome.get("extra_args") or ()),
        )
        return CaptureConfig(
            url=str(merged.get("url") or ""),
            timeout=timeout,
            verbose=parse_bool(merged.get("verbose", False)),
            json_only=parse_bool(merged.get("jsonOnly", True)),
            output_root=str(merged.get("output_root") or DEFAULT_CONFIG["output_root"]),
            poll_interval=poll_interval,
            chrome=settings,
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
