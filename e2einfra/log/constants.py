"""
Constants for the logging layer.

Format strings, custom level numbers, and the ANSI codes used by the console
formatter.
"""

import logging


class LogConstants:
    """Constants for the logging system."""

    DEFAULT_FORMAT: str = "[%(asctime)s] [%(levelname).1s] %(message)s"

    # Column the structured fields start at
    DEFAULT_RULE_WIDTH: int = 70
    MICRO_RULE_WIDTH: int = 74

    # Below DEBUG; TRACE carries swallowed poll errors, TRACE2 logger plumbing
    CUSTOM_LEVELS: dict[str, int] = {"TRACE": 5, "TRACE2": 4}

    LEVEL_NAMES: dict[str, int | bool] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
        "trace": 5,
        "trace2": 4,
        "false": False,  # Special value to disable all logging
    }

    RESET: str = "\x1b[0m"

    LEVEL_COLORS: dict[int, str] = {
        4: "\x1b[38;5;240",
        5: "\x1b[38;5;244",
        logging.DEBUG: "\x1b[38;5;32",
        logging.INFO: "\x1b[36",
        logging.WARNING: "\x1b[33",
        logging.ERROR: "\x1b[31",
        logging.CRITICAL: "\x1b[35",
    }

    META_COLOR: str = "\x1b[38;5;241"
