"""
Retry with exponential backoff.

Attempt ``i`` that fails (with ``i < max_attempts``) is followed by a sleep of
``base_delay_ms * 2**(i - 1)`` milliseconds: 100ms, 200ms, 400ms, ... with the
default base. Only ``Exception`` subclasses are retried; KeyboardInterrupt and
other BaseExceptions raised by the operation or during the backoff sleep
propagate immediately.

Example Usage:
    from e2einfra.retry import Retrier, retry, retrying

    token = retry(lambda: client.login(), max_attempts=3, description="log in")

    result = Retrier(max_attempts=5).run_with_result(load_page, "load page")
    if result.recovered:
        lg.info("page load was flaky", extra={"attempts": result.attempts})

    @retrying(max_attempts=3, description="open menu")
    def open_menu(page):
        page.click("#menu")
"""

import functools
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .exceptions import RetryExhaustedError
from .log import component_logger

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_BASE_DELAY_MS = 100


@dataclass(frozen=True)
class RetryResult(Generic[T]):
    """Value returned by a successful operation and the attempts it took."""

    value: T
    attempts: int

    @property
    def recovered(self) -> bool:
        """True if the operation failed at least once before succeeding."""
        return self.attempts > 1


class Retrier:
    """Runs an operation until it succeeds or the attempt cap is reached."""

    def __init__(
        self,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
        lg: Any | None = None,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """
        Initialize the retrier.

        Args:
            max_attempts: Total number of attempts, including the first
            base_delay_ms: Backoff after the first failed attempt
            lg: Logger (derived from the default root logger when omitted)
            sleep: Sleep function (time.sleep when omitted)

        Raises:
            ValueError: If max_attempts is less than 1 or base_delay_ms negative
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        if base_delay_ms < 0:
            raise ValueError(f"base_delay_ms cannot be negative, got {base_delay_ms}")
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms
        self._lg = component_logger(lg, ["e2e", "retry"])
        self._sleep = sleep or time.sleep

    def backoff_ms(self, attempt: int) -> int:
        """Delay in milliseconds after failed attempt number ``attempt``."""
        return self.base_delay_ms * (2 ** (attempt - 1))

    def run_with_result(
        self, op: Callable[[], T], description: str = "operation"
    ) -> RetryResult[T]:
        """
        Run ``op`` with retries.

        Raises:
            RetryExhaustedError: After every attempt failed, chained to the
                last error
        """
        last_error: Exception | None = None

        for attempt in range(1, self.max_attempts + 1):
            self._lg.debug(
                f"attempt {attempt}/{self.max_attempts}",
                extra={"description": description},
            )
            try:
                value = op()
            except Exception as e:
                last_error = e
                self._lg.warning(
                    f"attempt {attempt}/{self.max_attempts} failed",
                    extra={"description": description, "error": str(e)},
                )
                if attempt < self.max_attempts:
                    wait_ms = self.backoff_ms(attempt)
                    self._lg.debug(
                        f"waiting {wait_ms}ms before retry",
                        extra={"description": description},
                    )
                    self._sleep(wait_ms / 1000)
                continue

            if attempt > 1:
                self._lg.info(
                    "retry successful",
                    extra={"description": description, "attempt": attempt},
                )
            return RetryResult(value, attempt)

        err = RetryExhaustedError(description, self.max_attempts, last_error)
        self._lg.error(
            str(err), extra={"description": description, "error": str(last_error)}
        )
        raise err from last_error

    def run(self, op: Callable[[], T], description: str = "operation") -> T:
        """Run ``op`` with retries and return its value."""
        return self.run_with_result(op, description).value


def retry(
    op: Callable[[], T],
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    description: str = "operation",
    lg: Any | None = None,
) -> T:
    """
    Run ``op`` with up to ``max_attempts`` attempts and exponential backoff.

    Raises:
        RetryExhaustedError: After every attempt failed
    """
    return Retrier(max_attempts, lg=lg).run(op, description)


def retrying(
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
    description: str | None = None,
    lg: Any | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator form of Retrier; each call of the wrapped function is retried."""

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        retrier = Retrier(max_attempts, base_delay_ms, lg=lg)
        name = description or func.__name__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            return retrier.run(lambda: func(*args, **kwargs), name)

        return wrapper

    return decorator
