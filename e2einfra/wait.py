"""
Condition polling with a hard deadline.

A condition is any zero-argument callable returning a truthy value once the
awaited state has been reached. Exceptions raised by the condition count as
"not yet" and are logged at TRACE level, since the element being checked may
simply not exist yet.

Example Usage:
    from e2einfra.wait import wait_for, wait_for_element

    wait_for(lambda: page.url.endswith("/dashboard"), description="dashboard")
    wait_for_element(page.locator("#submit"), "submit button", timeout_ms=2000)
"""

import time
from collections.abc import Callable
from typing import Any

from .exceptions import WaitTimeoutError
from .log import component_logger

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_POLL_INTERVAL_MS = 500


class Waiter:
    """
    Polls a condition until it holds or the timeout elapses.

    The condition is evaluated at least once, even with a zero or negative
    timeout. Sleeps are capped at the time remaining until the deadline and
    the condition is evaluated one last time at the deadline, so a failing
    wait raises after ``timeout`` and before ``timeout + poll_interval``.
    """

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
        lg: Any | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the waiter.

        Args:
            timeout_ms: Default timeout in milliseconds
            poll_interval_ms: Default delay between evaluations in milliseconds
            lg: Logger (derived from the default root logger when omitted)
            sleep: Sleep function, replaceable in tests
            clock: Monotonic clock in seconds, replaceable in tests
        """
        self._validate_poll(poll_interval_ms)
        self.timeout_ms = timeout_ms
        self.poll_interval_ms = poll_interval_ms
        self._lg = component_logger(lg, ["e2e", "wait"])
        self._sleep = sleep
        self._clock = clock

    @staticmethod
    def _validate_poll(poll_interval_ms: int) -> None:
        if poll_interval_ms <= 0:
            raise ValueError(
                f"poll_interval_ms must be positive, got {poll_interval_ms}"
            )

    def _check(self, condition: Callable[[], Any], description: str) -> bool:
        try:
            return bool(condition())
        except Exception as e:
            self._lg.trace(
                "condition check failed",
                extra={"description": description, "error": str(e), "exception": e},
            )
            return False

    def until(
        self,
        condition: Callable[[], Any],
        description: str = "condition",
        timeout_ms: int | None = None,
        poll_interval_ms: int | None = None,
    ) -> None:
        """
        Block until ``condition`` returns a truthy value.

        Raises:
            WaitTimeoutError: If the condition never held before the deadline
        """
        timeout_ms = self.timeout_ms if timeout_ms is None else timeout_ms
        poll_ms = self.poll_interval_ms if poll_interval_ms is None else poll_interval_ms
        self._validate_poll(poll_ms)

        start_t = self._clock()
        deadline = start_t + max(0, timeout_ms) / 1000
        checks = 0

        while True:
            checks += 1
            if self._check(condition, description):
                self._lg.trace(
                    "condition met",
                    extra={
                        "description": description,
                        "checks": checks,
                        "after": self._clock() - start_t,
                    },
                )
                return
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(poll_ms / 1000, remaining))

        self._lg.error(
            "wait timed out",
            extra={
                "description": description,
                "timeout_ms": timeout_ms,
                "checks": checks,
            },
        )
        raise WaitTimeoutError(description, timeout_ms)

    def until_visible(
        self, locator: Any, description: str, timeout_ms: int | None = None
    ) -> None:
        """Block until ``locator.is_visible()`` returns True."""
        self.until(locator.is_visible, description, timeout_ms=timeout_ms)


def wait_for(
    condition: Callable[[], Any],
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    poll_interval_ms: int = DEFAULT_POLL_INTERVAL_MS,
    description: str = "condition",
    lg: Any | None = None,
) -> None:
    """
    Wait for a condition with the given timeout and poll interval.

    Raises:
        WaitTimeoutError: If the condition never held before the deadline
    """
    Waiter(timeout_ms, poll_interval_ms, lg=lg).until(condition, description)


def wait_for_element(
    locator: Any,
    description: str,
    timeout_ms: int = DEFAULT_TIMEOUT_MS,
    lg: Any | None = None,
) -> None:
    """Wait until a Playwright locator is visible."""
    Waiter(timeout_ms, lg=lg).until_visible(locator, description)
