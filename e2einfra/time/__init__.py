"""Time utilities: monotonic timing, duration formatting, artifact timestamps."""

from .delta import InvalidDurationError, delta_str, validate_duration
from .time import (
    ARTIFACT_TIMESTAMP_FORMAT,
    artifact_timestamp,
    since,
    since_str,
    start,
    time_it_lg,
)

__all__ = [
    "delta_str",
    "validate_duration",
    "InvalidDurationError",
    "start",
    "since",
    "since_str",
    "artifact_timestamp",
    "time_it_lg",
    "ARTIFACT_TIMESTAMP_FORMAT",
]
