"""
Configuration package.

- Config loads YAML files with ``E2E_*`` environment overrides and
  ``${dotted.key}`` substitution
- SessionSettings validates the session configuration with pydantic
"""

from .config import Config, convert_env_value
from .constants import CONFIG_FILE_ENV, DEFAULT_ENV_PREFIX, MAX_CONFIG_SIZE_BYTES
from .schemas import (
    A11ySettings,
    ArtifactSettings,
    BrowserSettings,
    LoggingSettings,
    RetrySettings,
    SessionSettings,
    TraceSettings,
    VideoSettings,
    WaitSettings,
    load_settings,
)

__all__ = [
    "Config",
    "convert_env_value",
    "SessionSettings",
    "BrowserSettings",
    "VideoSettings",
    "TraceSettings",
    "A11ySettings",
    "ArtifactSettings",
    "WaitSettings",
    "RetrySettings",
    "LoggingSettings",
    "load_settings",
    "MAX_CONFIG_SIZE_BYTES",
    "DEFAULT_ENV_PREFIX",
    "CONFIG_FILE_ENV",
]
