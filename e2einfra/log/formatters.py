"""
Console formatter for the logging layer.

Renders records as::

    [12:34:56,789] [I] unit finished            [outcome:failed] [gw-1] [/e2e/lifecycle]

Extra fields are printed as ``[key:value]`` pairs after the message, followed
by the worker thread name and the logger name.
"""

import logging
import os
import re
import traceback
from typing import Any

from .config import LogConfig
from .constants import LogConstants

_ANSI_PATTERN = re.compile(r"\x1b\[[0-9;]*m")


def _visual_len(text: str) -> int:
    """Calculate visual width of text, excluding ANSI escape codes."""
    if "\x1b" not in text:
        return len(text)
    return len(_ANSI_PATTERN.sub("", text))


def _format_value(key: str, value: Any) -> str:
    if key == "exception" and isinstance(value, BaseException):
        return value.__class__.__name__
    if isinstance(value, (list, tuple, set)):
        return ",".join(str(v) for v in value)
    if key == "after" and isinstance(value, float):
        from ..time import delta_str

        return delta_str(value)
    return str(value)


def _render_exception(e: BaseException) -> str:
    lines = traceback.format_exception(type(e), e, e.__traceback__)
    return "".join(lines).rstrip()


class PreFormatter(logging.Formatter):
    """Standard formatter with optional microsecond timestamps."""

    def __init__(self, fmt: str, micros: bool) -> None:
        self._micros = micros
        super().__init__(fmt)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        s = super().formatTime(record)
        if self._micros:
            micros = int((record.created % 1) * 1_000_000) % 1000
            s += f".{micros:03d}"
        return s


class LogFormatter(logging.Formatter):
    """
    Log formatter with optional colors and structured field rendering.

    Exceptions passed as ``extra={"exception": e}`` are printed as the class
    name inline and, at WARNING and above, as a full traceback below the line.
    """

    def __init__(self, config: LogConfig):
        super().__init__()
        self._config = config
        self._pre_formatter = PreFormatter(LogConstants.DEFAULT_FORMAT, config.micros)

    @property
    def config(self) -> LogConfig:
        return self._config

    def format(self, record: logging.LogRecord) -> str:
        fmt = self._build_format(record)
        self._pre_formatter._fmt = fmt
        self._pre_formatter._style._fmt = fmt
        out = self._pre_formatter.format(record)

        extra = getattr(record, "__e2e__extra", None) or {}
        exc = extra.get("exception")
        if isinstance(exc, BaseException) and record.levelno >= logging.WARNING:
            out += "\n" + _render_exception(exc)
        return out

    def _calculate_width(self, record: logging.LogRecord) -> int:
        timestamp_len = 16 if self._config.micros else 12
        return 1 + timestamp_len + 4 + 1 + 2 + _visual_len(record.getMessage())

    def _fields(self, record: logging.LogRecord) -> list[str]:
        extra = getattr(record, "__e2e__extra", None) or {}
        fields = []
        if "after" in extra:
            fields.append(f"[{_format_value('after', extra['after'])}]")
        for key in sorted(extra):
            if key == "after":
                continue
            value = _format_value(key, extra[key]).replace("%", "%%")
            fields.append(f"[{key}:{value}]")
        return fields

    def _location(self, record: logging.LogRecord) -> str:
        if not self._config.location:
            return ""
        path = "./" + os.path.relpath(record.pathname, os.getcwd())
        return f" [{path}:{record.lineno}]"

    def _build_format(self, record: logging.LogRecord) -> str:
        rule = (
            LogConstants.MICRO_RULE_WIDTH
            if self._config.micros
            else LogConstants.DEFAULT_RULE_WIDTH
        )
        pad = " " * max(1, rule - self._calculate_width(record))
        fields = " ".join(self._fields(record))
        meta = "[%(threadName)s] [%(name)s]"

        if not self._config.colors:
            tail = f"{fields} {meta}" if fields else meta
            return LogConstants.DEFAULT_FORMAT + pad + tail + self._location(record)

        col = LogConstants.LEVEL_COLORS.get(record.levelno, "\x1b[38") + "m"
        bold = col[:-1] + ";1m"
        meta_col = LogConstants.META_COLOR + "m"
        fmt = col + "[%(asctime)s] [%(levelname).1s] " + bold + "%(message)s"
        fmt += LogConstants.RESET + col + pad
        if fields:
            fmt += fields + " "
        fmt += meta_col + meta + self._location(record) + LogConstants.RESET
        return fmt
