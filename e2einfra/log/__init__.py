"""
Structured logging for the e2e session framework.

Extends Python's standard logging with:
- Custom TRACE and TRACE2 log levels for detailed debugging
- Structured ``extra={...}`` fields rendered as ``[key:value]``
- Worker thread names on every line, so parallel units stay readable
- Hierarchical "view" loggers (``/e2e/wait``, ``/e2e/lifecycle``) that share
  the root logger's handlers

Log Level Control:
- Use standard levels: debug, info, warning, error, critical
- Use custom levels: trace, trace2
- Disable logging completely: False or "false"
"""

import logging
import threading
from typing import Any

from .config import LogConfig
from .constants import LogConstants
from .exceptions import InvalidLogLevelError, LogError
from .factory import LoggerFactory
from .formatters import LogFormatter
from .logger import Logger

logging.addLevelName(LogConstants.CUSTOM_LEVELS["TRACE"], "TRACE")
logging.addLevelName(LogConstants.CUSTOM_LEVELS["TRACE2"], "TRACE2")

_default_lock = threading.Lock()


def resolve_level(s: str | int | bool) -> int | bool:
    """
    Resolve log level from string, numeric value, or boolean.

    Raises:
        InvalidLogLevelError: If the log level is invalid
    """
    return LogConfig.resolve_level(s)


def create_root_lg(
    level: str | int = "info",
    location: bool | int = False,
    micros: bool = False,
    colors: bool = True,
) -> Logger:
    """
    Create a root logger with the specified configuration.

    Example:
        >>> lg = create_root_lg("debug", colors=False)
    """
    config = LogConfig.from_params(level, location, micros, colors)
    return LoggerFactory.create_root(config)


def derive_lg(lg: Logger, tags: str | list[str]) -> Logger:
    """Derive a logger with tags from a parent logger."""
    return LoggerFactory.derive(lg, tags)


def default_logger() -> Logger:
    """
    Return the package-wide root logger ``/``, creating it on first use.

    Components that are not handed a logger derive theirs from this one. A
    root configured later with ``LoggerFactory.create_root`` replaces the
    on-demand configuration.
    """
    with _default_lock:
        existing = logging.root.manager.loggerDict.get("/")
        if isinstance(existing, Logger):
            return existing
        return create_root_lg("info")


def component_logger(lg: Any, tags: str | list[str]) -> Any:
    """
    Resolve the logger a component should use.

    Derives ``tags`` from ``lg`` when it is one of our loggers, or from the
    default root when ``lg`` is None. Anything else (a test double) is used
    as given.
    """
    if lg is None:
        return LoggerFactory.derive(default_logger(), tags)
    if isinstance(lg, Logger):
        return LoggerFactory.derive(lg, tags)
    return lg


__all__ = [
    "Logger",
    "LoggerFactory",
    "LogConfig",
    "LogConstants",
    "LogFormatter",
    "LogError",
    "InvalidLogLevelError",
    "resolve_level",
    "create_root_lg",
    "derive_lg",
    "default_logger",
    "component_logger",
]
