"""
Unified exception hierarchy for the e2e session framework.

Every framework error derives from E2EError so a test runner can separate
framework failures from test-logic failures (plain AssertionError) with a
single except clause.
"""

from typing import Any


class E2EError(Exception):
    """
    Base exception for all framework errors.

    Example:
        try:
            orchestrator.suite_start()
        except E2EError as e:
            lg.error("session setup failed", extra={"exception": e})
    """

    def __init__(self, message: str, **context: Any) -> None:
        """
        Initialize the exception with a message and optional context.

        Args:
            message: Human-readable error message
            **context: Additional context information (stored in self.context)
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """String representation with context if available."""
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class ConfigError(E2EError):
    """
    Configuration-related errors.

    Examples:
        - Config file not found or too large
        - Invalid YAML syntax
        - Value rejected by the settings schema
    """

    pass


class ValidationError(E2EError):
    """Input validation errors (bad whitelist file, malformed scan result)."""

    pass


class InfrastructureError(E2EError):
    """
    Resource acquisition or release failure.

    Fatal to the current unit and never retried at the lifecycle layer.

    Examples:
        - Browser process failed to launch
        - Browser context could not be created
        - Shared browser missing when a unit starts
    """

    pass


class StaleResourceError(InfrastructureError):
    """Raised when a released browser, context, or page handle is used."""

    pass


class LifecycleError(E2EError):
    """Raised on an illegal session state transition."""

    pass


class WaitTimeoutError(E2EError, TimeoutError):
    """
    Raised when a polled condition never became true before its deadline.

    Also a builtin TimeoutError so callers can catch either type.
    """

    def __init__(self, description: str, timeout_ms: int, **context: Any) -> None:
        super().__init__(
            f"Timeout waiting for: {description} (timeout: {timeout_ms}ms)",
            **context,
        )
        self.description = description
        self.timeout_ms = timeout_ms


class RetryExhaustedError(E2EError):
    """Raised after every retry attempt failed; wraps the last error."""

    def __init__(
        self, description: str, attempts: int, last_error: BaseException | None
    ) -> None:
        super().__init__(f"Failed to {description} after {attempts} attempts")
        self.description = description
        self.attempts = attempts
        self.last_error = last_error


class DiagnosticCaptureError(E2EError):
    """
    Failure to capture a diagnostic artifact.

    Logged inside the artifact capture layer and never propagated, so a broken
    screenshot can not mask the test failure it was meant to diagnose.
    """

    pass
