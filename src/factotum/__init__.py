"""Factotum - capture XHR JSON traffic from a web page with a headless browser."""

__version__ = "0.1.0"

from .config import CaptureConfig, ChromeSettings, build_config, load_config
from .debug_log import debug, info, warn, error, set_verbose
from .errors import ConfigError, FactotumError, OutputDirectoryError, SessionError
from .output import folder_name, resolve_output_dir
from .persister import ArtifactResult, ArtifactStatus, ArtifactWriter, RunSummary
from .templates import CapturedRequestHeader, render

__all__ = [
    "__version__",
    "CaptureConfig",
    "ChromeSettings",
    "build_config",
    "load_config",
    "ConfigError",
    "FactotumError",
    "OutputDirectoryError",
    "SessionError",
    "folder_name",
    "resolve_output_dir",
    "ArtifactResult",
    "ArtifactStatus",
    "ArtifactWriter",
    "RunSummary",
    "CapturedRequestHeader",
    "render",
    "debug",
    "info",
    "warn",
    "error",
    "set_verbose",
]
