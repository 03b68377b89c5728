"""
Timing helpers built on the monotonic clock, plus wall-clock stamps for
artifact file names.

Example Usage:
    start_t = start()
    # ... drive the page ...
    lg.debug("page ready", extra={"after": since(start_t)})
"""

import contextlib
import datetime
import time
from collections.abc import Callable, Generator
from typing import Any

from .delta import delta_str

# Sub-second resolution so rapid repeated captures never share a name
ARTIFACT_TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S-%f"


def start() -> float:
    """Get the current monotonic time for timing measurements."""
    return time.monotonic()


def since(start_t: float) -> float:
    """Calculate elapsed seconds since a start time from start()."""
    return time.monotonic() - start_t


def since_str(start_t: float) -> str:
    """Elapsed time since ``start_t`` formatted with delta_str()."""
    return delta_str(max(0.0, time.monotonic() - start_t))


def artifact_timestamp(now: datetime.datetime | None = None) -> str:
    """
    Format a wall-clock time for use in artifact file names.

    Example:
        artifact_timestamp(datetime.datetime(2025, 1, 2, 3, 4, 5, 678901))
        -> "2025-01-02_03-04-05-678901"
    """
    return (now or datetime.datetime.now()).strftime(ARTIFACT_TIMESTAMP_FORMAT)


@contextlib.contextmanager
def time_it_lg(
    log_func: Callable[..., Any], msg: str, extra: dict[str, Any] | None = None
) -> Generator[None, None, None]:
    """
    Log ``msg`` with the elapsed time once the block finishes.

    Example:
        with time_it_lg(lg.debug, "context created", {"unit": name}):
            context = browser.new_context()
    """
    start_t = start()
    try:
        yield
    finally:
        log_func(msg, extra=(extra or {}) | {"after": since(start_t)})
