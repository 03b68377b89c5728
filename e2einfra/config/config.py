"""
YAML configuration with environment overrides and variable substitution.

Environment Variable Override Format:
    E2E_<SECTION>_<KEY>=value

Underscores are matched greedily against known keys, so a key that itself
contains underscores can be overridden:

    E2E_BROWSER_ENGINE=firefox                      -> browser.engine
    E2E_BROWSER_DEFAULT_INTERACTION_TIMEOUT_MS=5000 -> browser.default_interaction_timeout_ms
    E2E_A11Y_TAGS=wcag2a,wcag21aa                   -> a11y.tags (list)

Variable substitution uses ``${dotted.key}``:

    artifacts:
      root: target/e2e
    a11y:
      whitelist: ${artifacts.root}/../a11y-whitelist.yaml
"""

import copy
import os
import re
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import ConfigError
from .constants import CONFIG_FILE_ENV, DEFAULT_ENV_PREFIX, MAX_CONFIG_SIZE_BYTES

_VAR_PATTERN = re.compile(r"\$\{([a-zA-Z0-9_.]+)\}")
_MISSING = object()


def _check_file_size(path: Path) -> None:
    size = os.path.getsize(path)
    if size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            f"Configuration file '{path}' is {size} bytes, exceeding maximum "
            f"size of {MAX_CONFIG_SIZE_BYTES // (1024 * 1024)} MB"
        )


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = _deep_merge(out[key], value)
        else:
            out[key] = value
    return out


def convert_env_value(value: str) -> bool | int | float | str | list[Any] | None:
    """
    Convert an environment variable string to the appropriate type.

    Example:
        >>> convert_env_value("true"), convert_env_value("30"), convert_env_value("a,b")
        (True, 30, ['a', 'b'])
    """
    if value.lower() in ("null", "none", ""):
        return None
    if value.lower() in ("true", "false"):
        return value.lower() == "true"
    if "," in value:
        return [convert_env_value(v.strip()) for v in value.split(",")]
    try:
        if "." in value:
            return float(value)
        return int(value)
    except ValueError:
        pass
    return value


class Config:
    """
    Configuration loaded from an optional YAML file.

    Values come from, lowest priority first: ``defaults``, the YAML file, and
    ``E2E_*`` environment variables. ``${dotted.key}`` references are
    resolved last.

    Example:
        config = Config("etc/e2e.yaml")
        engine = config.get("browser.engine", "chromium")
    """

    def __init__(
        self,
        fname: str | Path | None = None,
        defaults: dict[str, Any] | None = None,
        enable_env_overrides: bool = True,
        env_prefix: str = DEFAULT_ENV_PREFIX,
    ) -> None:
        """
        Initialize configuration.

        Args:
            fname: Path to the YAML configuration file (optional)
            defaults: Base values the file and environment override
            enable_env_overrides: Whether to apply environment variable overrides
            env_prefix: Prefix for environment variables

        Raises:
            ConfigError: If the file is missing, too large, malformed, or
                references an undefined variable
        """
        self._env_prefix = env_prefix
        self._enable_env_overrides = enable_env_overrides
        self._path = Path(fname).resolve() if fname is not None else None

        data = copy.deepcopy(defaults or {})
        if self._path is not None:
            data = _deep_merge(data, self._load_file(self._path))
        if enable_env_overrides:
            self._apply_env_overrides(data)
        self._data = data
        self._data = self._resolve(data)

    @property
    def path(self) -> Path | None:
        return self._path

    @staticmethod
    def _load_file(path: Path) -> dict[str, Any]:
        try:
            _check_file_size(path)
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError("Cannot read configuration file", path=str(path)) from e
        except yaml.YAMLError as e:
            raise ConfigError("Malformed configuration file", path=str(path)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration root must be a mapping", path=str(path))
        return data

    # Environment overrides

    def _collect_env_vars(self) -> dict[str, str]:
        return {
            k: v
            for k, v in os.environ.items()
            if k.startswith(self._env_prefix) and k != CONFIG_FILE_ENV
        }

    def _env_key_to_path(self, env_key: str, data: dict[str, Any]) -> list[str]:
        """
        Convert an environment variable key to a configuration path.

        At each level the longest run of parts naming an existing key wins;
        unknown parts fall back to one key per underscore.
        """
        parts = env_key[len(self._env_prefix) :].lower().split("_")
        path: list[str] = []
        current: Any = data
        i = 0
        while i < len(parts):
            take = 1
            if isinstance(current, dict):
                for j in range(len(parts), i, -1):
                    if "_".join(parts[i:j]) in current:
                        take = j - i
                        break
            key = "_".join(parts[i : i + take])
            path.append(key)
            current = current.get(key) if isinstance(current, dict) else None
            i += take
        return path

    def _apply_env_overrides(self, data: dict[str, Any]) -> None:
        for env_key, env_value in sorted(self._collect_env_vars().items()):
            path = self._env_key_to_path(env_key, data)
            if path and path[0]:
                self._set_nested(data, path, convert_env_value(env_value))

    @staticmethod
    def _set_nested(data: dict[str, Any], path: list[str], value: Any) -> None:
        current = data
        for part in path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[path[-1]] = value

    def get_env_overrides(self) -> dict[str, Any]:
        """Environment overrides that apply, keyed by dotted path."""
        if not self._enable_env_overrides:
            return {}
        return {
            ".".join(self._env_key_to_path(k, self._data)): convert_env_value(v)
            for k, v in self._collect_env_vars().items()
        }

    # Substitution

    def _resolve(self, content: Any) -> Any:
        if isinstance(content, dict):
            return {k: self._resolve(v) for k, v in content.items()}
        if isinstance(content, list):
            return [self._resolve(v) for v in content]
        if isinstance(content, str):
            return _VAR_PATTERN.sub(self._substitute_var, content)
        return content

    def _substitute_var(self, match: re.Match) -> str:
        name = match.group(1)
        value = self._lookup(name)
        if value is _MISSING:
            raise ConfigError("Undefined configuration variable", variable=name)
        return str(value)

    # Access

    def _lookup(self, path: str) -> Any:
        current: Any = self._data
        for part in path.split("."):
            if not isinstance(current, dict) or part not in current:
                return _MISSING
            current = current[part]
        return current

    def get(self, path: str, default: Any = None) -> Any:
        """Value at a dotted path, or ``default``."""
        value = self._lookup(path)
        return default if value is _MISSING else value

    def has(self, path: str) -> bool:
        return self._lookup(path) is not _MISSING

    def dict(self) -> dict[str, Any]:
        """Deep copy of the configuration data."""
        return copy.deepcopy(self._data)

    def __repr__(self) -> str:
        return f"Config(path={self._path})"
