"""
Immutable logger configuration.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class LogConfig:
    """
    Immutable configuration for root loggers.

    Derived loggers only carry a level; display settings (location, colors,
    micros) always come from the root's config.
    """

    level: int | bool = logging.INFO  # False disables logging entirely
    location: int = 0
    micros: bool = False
    colors: bool = True

    @staticmethod
    def resolve_level(level: str | int | bool) -> int | bool:
        """Resolve a level name, number, or bool to an int or False."""
        from .constants import LogConstants
        from .exceptions import InvalidLogLevelError

        if isinstance(level, bool):
            return logging.INFO if level else False
        if isinstance(level, int):
            return level
        if level.isnumeric():
            return int(level)
        resolved = LogConstants.LEVEL_NAMES.get(level.lower())
        if resolved is None:
            raise InvalidLogLevelError(level)
        return resolved

    @classmethod
    def from_params(
        cls,
        level: str | int | bool,
        location: bool | int = 0,
        micros: bool = False,
        colors: bool = True,
    ) -> LogConfig:
        """
        Create LogConfig from individual parameters.

        Args:
            level: Log level (string name, numeric value, or False to disable logging)
            location: Location display level (bool or int)
            micros: Whether to show microsecond precision
            colors: Whether to enable colored output

        Returns:
            LogConfig instance
        """
        resolved_location = (
            1 if location is True else (0 if location is False else int(location))
        )
        return cls(
            level=cls.resolve_level(level),
            location=resolved_location,
            micros=micros,
            colors=colors,
        )

    @classmethod
    def from_config(cls, config_dict: dict[str, Any], section: str = "logging") -> LogConfig:
        """
        Create LogConfig from a configuration dictionary.

        Args:
            config_dict: Configuration dictionary (e.g., Config.dict())
            section: Dotted path of the logging section

        Returns:
            LogConfig instance
        """
        current: Any = config_dict
        for part in section.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                current = {}
                break

        level = current.get("level", "info")
        if level == "false":
            level = False

        return cls.from_params(
            level=level,
            location=current.get("location", 0),
            micros=current.get("micros", False),
            colors=current.get("colors", True),
        )
