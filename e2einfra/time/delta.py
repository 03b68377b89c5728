"""
Duration formatting utilities.

Example Usage:
    >>> delta_str(3661.5)
    '1h1m1s'
    >>> delta_str(0.25)
    '250ms'
    >>> delta_str(0.000004)
    '4μs'
"""

import math

SECONDS_PER_HOUR = 3600
SECONDS_PER_MINUTE = 60


class InvalidDurationError(Exception):
    """Raised when an invalid duration value is provided."""

    pass


def validate_duration(secs: float) -> None:
    """
    Validate a duration in seconds.

    Raises:
        InvalidDurationError: If input is not a finite, non-negative number
    """
    if isinstance(secs, bool) or not isinstance(secs, (int, float)):
        raise InvalidDurationError(
            f"Duration must be a number, got {type(secs).__name__}"
        )
    if math.isnan(secs) or math.isinf(secs):
        raise InvalidDurationError(f"Duration must be finite, got {secs}")
    if secs < 0:
        raise InvalidDurationError(f"Duration cannot be negative, got {secs}")


def delta_str(secs: float) -> str:
    """
    Format a duration in seconds as a compact human-readable string.

    Sub-second durations are shown in ms (or μs below one millisecond),
    durations under a minute in seconds with millisecond precision below 10s,
    and longer durations as ``XhYmZs``.
    """
    validate_duration(secs)

    if secs == 0:
        return "0s"
    if secs < 0.001:
        return f"{round(secs * 1_000_000)}μs"
    if secs < 1:
        msecs = secs * 1000
        if msecs < 10:
            return f"{msecs:.3f}".rstrip("0").rstrip(".") + "ms"
        return f"{round(msecs)}ms"
    if secs < 10:
        return f"{secs:.3f}".rstrip("0").rstrip(".") + "s"
    if secs < SECONDS_PER_MINUTE:
        return f"{int(secs)}s"

    hours, rem = divmod(int(secs), SECONDS_PER_HOUR)
    minutes, seconds = divmod(rem, SECONDS_PER_MINUTE)
    out = f"{hours}h" if hours else ""
    if minutes or hours:
        out += f"{minutes}m"
    return out + f"{seconds}s"
