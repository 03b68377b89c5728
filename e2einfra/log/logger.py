"""
Logger class for the logging layer.

Adds the TRACE/TRACE2 levels, logger-wide extra fields merged into every
record, and "view" loggers that share the root logger's handlers.
"""

import logging
from typing import Any

from .config import LogConfig
from .constants import LogConstants
from .formatters import LogFormatter


class Logger(logging.Logger):
    """
    Enhanced logger with structured extra fields and trace levels.

    Extends the standard Python logger with:
    - Pre-populated extra fields merged into every record
    - Custom trace and trace2 methods
    - Delegation to the root logger's handlers for derived loggers
    """

    def __init__(
        self,
        name: str,
        config: LogConfig | None = None,
        extra: dict[str, Any] | None = None,
    ):
        """
        Initialize the logger.

        Args:
            name: Logger name
            config: Logger configuration (defaults to info level)
            extra: Extra fields to include in all log records
        """
        if config is None:
            config = LogConfig.from_params("info")

        if config.level is False:
            super().__init__(name, logging.CRITICAL + 1)
            self._logging_disabled = True
        else:
            super().__init__(name, config.level)
            self._logging_disabled = False

        self._config = config
        self._extra = extra or {}
        self._root_logger: Logger | None = None  # Set for derived "view" loggers

    @property
    def config(self) -> LogConfig:
        """Get logger configuration."""
        return self._config

    @property
    def disabled(self) -> bool:  # type: ignore[override]
        """Check if logging is disabled."""
        return self._logging_disabled

    @disabled.setter
    def disabled(self, value: bool) -> None:
        self._logging_disabled = value

    def isEnabledFor(self, level: int) -> bool:
        """Check if enabled, respecting ancestor loggers' levels."""
        if self._logging_disabled or not super().isEnabledFor(level):
            return False
        if self.parent and isinstance(self.parent, Logger):
            return self.parent.isEnabledFor(level)
        return True

    def setLevel(self, level: int | str) -> None:
        """Set level and clear this logger's cache."""
        super().setLevel(level)
        # Derived loggers may not be in loggerDict, so clear our own cache
        self._cache.clear()  # type: ignore[attr-defined]

    def makeRecord(  # type: ignore[override]
        self,
        name: str,
        level: int,
        fn: str,
        lno: int,
        msg: object,
        args: Any,
        exc_info: Any,
        func: str | None = None,
        extra: dict[str, Any] | None = None,
        sinfo: str | None = None,
    ) -> logging.LogRecord:
        """Create a log record carrying the merged extra fields."""
        merged = dict(self._extra)
        if extra:
            merged.update(extra)
        record = super().makeRecord(
            name, level, fn, lno, msg, args, exc_info, func, merged, sinfo
        )
        setattr(record, "__e2e__extra", merged)
        return record

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a TRACE level message."""
        level = LogConstants.CUSTOM_LEVELS["TRACE"]
        if self.isEnabledFor(level):
            self._log(level, msg, args, **kwargs)

    def trace2(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Log a TRACE2 level message (most verbose level)."""
        level = LogConstants.CUSTOM_LEVELS["TRACE2"]
        if self.isEnabledFor(level):
            self._log(level, msg, args, **kwargs)

    def callHandlers(self, record: logging.LogRecord) -> None:
        """
        Pass a record to all relevant handlers.

        Derived loggers have no handlers of their own and hand records to the
        root logger's handlers instead.
        """
        if self._root_logger is not None:
            for handler in self._root_logger.handlers:
                if record.levelno >= handler.level:
                    handler.handle(record)
        else:
            super().callHandlers(record)

    def apply_config(self, config: LogConfig) -> None:
        """
        Replace this logger's configuration in place.

        Updates the logger level and its handlers' levels and formatters.
        Derived loggers follow because they read their level from this one.
        """
        self._config = config
        if config.level is False:
            self._logging_disabled = True
            self.setLevel(logging.CRITICAL + 1)
        else:
            self._logging_disabled = False
            self.setLevel(config.level)
        for handler in self.handlers:
            if config.level is not False:
                handler.setLevel(config.level)
            handler.setFormatter(LogFormatter(config))
