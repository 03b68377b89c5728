"""
Factory for creating and deriving loggers.
"""

import logging
import sys
from typing import Any, cast

from .config import LogConfig
from .formatters import LogFormatter
from .logger import Logger


class LoggerFactory:
    """Factory for creating and configuring loggers."""

    @staticmethod
    def create_root(config: LogConfig, stream: Any = None) -> Logger:
        """
        Create the root logger ``/`` with a console handler.

        Example:
            >>> lg = LoggerFactory.create_root(LogConfig.from_params("debug"))
            >>> lg.info("suite started", extra={"engine": "chromium"})
            [12:34:56,789] [I] suite started    [engine:chromium] [MainThread] [/]

        If the root already exists (e.g. created on demand by
        ``default_logger()``), ``config`` is applied to it instead.
        """
        existing = LoggerFactory._check_existing_logger("/")
        if existing:
            existing.apply_config(config)
            return existing
        return LoggerFactory.create("/", config, stream=stream)

    @staticmethod
    def _check_existing_logger(name: str) -> Logger | None:
        existing = logging.root.manager.loggerDict.get(name)
        if isinstance(existing, Logger):
            return existing
        return None

    @staticmethod
    def create(
        name: str,
        config: LogConfig,
        extra: dict[str, Any] | None = None,
        stream: Any = None,
    ) -> Logger:
        """
        Create a logger with its own console handler.

        Args:
            name: Logger name
            config: Logger configuration
            extra: Extra fields to include in all log records
            stream: Output stream (defaults to stdout)

        Returns:
            Configured logger instance (an existing one is returned as is)
        """
        existing = LoggerFactory._check_existing_logger(name)
        if existing:
            return existing

        lg = Logger(name, config, extra)
        handler = logging.StreamHandler(stream or sys.stdout)
        if config.level is not False:
            handler.setLevel(config.level)
        handler.setFormatter(LogFormatter(config))
        lg.addHandler(handler)
        lg.propagate = False
        lg.parent = logging.root

        logging.root.manager.loggerDict[name] = lg
        return lg

    @staticmethod
    def derive(parent: Logger, tags: str | list[str]) -> Logger:
        """
        Derive a "view" logger that delegates to the root's handlers.

        Examples:
            >>> root = LoggerFactory.create_root(config)  # name: "/"
            >>> LoggerFactory.derive(root, ["e2e", "wait"]).name
            '/e2e/wait'

        Args:
            parent: Parent logger instance
            tags: Single tag string OR list of tag strings to form hierarchy

        Returns:
            Derived logger instance
        """
        if isinstance(tags, str):
            tags = [tags]

        prefix = parent.name if parent.name == "/" else parent.name + "/"
        name = prefix + "/".join(tags)

        existing = LoggerFactory._check_existing_logger(name)
        if existing:
            return existing

        root = parent._root_logger if parent._root_logger else parent
        lg = Logger(name, LogConfig(level=parent.config.level))
        lg.setLevel(logging.NOTSET)
        lg._root_logger = root
        lg.parent = parent
        lg.propagate = False

        logging.root.manager.loggerDict[name] = lg
        lg.trace2("derived logger", extra={"root": root.name})
        return cast(Logger, lg)
