"""
Tests for e2einfra.wait (condition polling).

Uses a fake clock whose sleep advances time, so deadlines are exact.
"""

import time
from unittest.mock import Mock

import pytest

from e2einfra.exceptions import E2EError, WaitTimeoutError
from e2einfra.wait import Waiter, wait_for, wait_for_element


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, secs: float) -> None:
        self.sleeps.append(secs)
        self.now += secs


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def waiter(clock: FakeClock) -> Waiter:
    return Waiter(
        timeout_ms=2000,
        poll_interval_ms=500,
        lg=Mock(),
        sleep=clock.sleep,
        clock=clock,
    )


def sequence(*values):
    """Condition returning the given values in order, then the last forever."""
    it = iter(values)
    last = [values[-1]]

    def condition():
        try:
            last[0] = next(it)
        except StopIteration:
            pass
        return last[0]

    return condition


# =============================================================================
# Success paths
# =============================================================================


@pytest.mark.unit
class TestWaitSuccess:
    def test_true_on_first_check_never_sleeps(self, waiter, clock):
        waiter.until(lambda: True, "ready")
        assert clock.sleeps == []

    def test_returns_once_condition_holds(self, waiter, clock):
        waiter.until(sequence(False, False, True), "third time")
        assert clock.sleeps == [0.5, 0.5]

    def test_truthy_value_counts_as_met(self, waiter, clock):
        waiter.until(lambda: "non-empty", "truthy")
        assert clock.sleeps == []

    def test_condition_met_just_before_deadline(self, waiter, clock):
        # Holds only once the clock reached 1.5s, well inside the 2s timeout
        waiter.until(lambda: clock.now >= 1.5, "late")
        assert clock.now == pytest.approx(1.5)


# =============================================================================
# Timeouts
# =============================================================================


@pytest.mark.unit
class TestWaitTimeout:
    def test_raises_after_timeout(self, waiter, clock):
        with pytest.raises(WaitTimeoutError) as exc_info:
            waiter.until(lambda: False, "never")

        assert 2.0 <= clock.now < 2.5
        assert exc_info.value.timeout_ms == 2000
        assert exc_info.value.description == "never"

    def test_message_format(self, waiter):
        with pytest.raises(WaitTimeoutError) as exc_info:
            waiter.until(lambda: False, "login button")
        assert str(exc_info.value) == "Timeout waiting for: login button (timeout: 2000ms)"

    def test_is_builtin_timeout_error(self, waiter):
        with pytest.raises(TimeoutError):
            waiter.until(lambda: False, "never")
        with pytest.raises(E2EError):
            waiter.until(lambda: False, "never")

    def test_never_sleeps_past_deadline(self, waiter, clock):
        with pytest.raises(WaitTimeoutError):
            waiter.until(lambda: False, "never", timeout_ms=1200)

        assert 1.2 <= clock.now < 1.7
        assert all(s <= 0.5 for s in clock.sleeps)

    @pytest.mark.parametrize("timeout_ms", [0, -100])
    def test_non_positive_timeout_still_evaluates_once(self, waiter, clock, timeout_ms):
        condition = Mock(return_value=False)
        with pytest.raises(WaitTimeoutError):
            waiter.until(condition, "instant", timeout_ms=timeout_ms)
        assert condition.call_count == 1
        assert clock.sleeps == []

    def test_zero_timeout_succeeds_if_already_true(self, waiter):
        waiter.until(lambda: True, "instant", timeout_ms=0)

    def test_timeout_is_logged_as_error(self, clock):
        lg = Mock()
        waiter = Waiter(1000, 500, lg=lg, sleep=clock.sleep, clock=clock)
        with pytest.raises(WaitTimeoutError):
            waiter.until(lambda: False, "never")
        lg.error.assert_called_once()


# =============================================================================
# Exceptions raised by the condition
# =============================================================================


@pytest.mark.unit
class TestConditionErrors:
    def test_exception_counts_as_not_met(self, waiter, clock):
        calls = {"n": 0}

        def condition():
            calls["n"] += 1
            if calls["n"] < 3:
                raise LookupError("element not attached")
            return True

        waiter.until(condition, "flaky element")
        assert calls["n"] == 3

    def test_exception_is_logged_at_trace(self, clock):
        lg = Mock()
        waiter = Waiter(1000, 500, lg=lg, sleep=clock.sleep, clock=clock)
        waiter.until(_raise_once(), "x")

        call = lg.trace.call_args_list[0]
        assert call.args == ("condition check failed",)
        extra = call.kwargs["extra"]
        assert extra["description"] == "x"
        assert extra["error"] == "not yet"
        assert isinstance(extra["exception"], ValueError)

    def test_always_raising_condition_times_out(self, waiter):
        def condition():
            raise RuntimeError("boom")

        with pytest.raises(WaitTimeoutError):
            waiter.until(condition, "broken")

    def test_keyboard_interrupt_from_condition_propagates(self, waiter):
        def condition():
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            waiter.until(condition, "interrupted")

    def test_interrupted_sleep_propagates(self, clock):
        def sleep(_secs):
            raise KeyboardInterrupt

        waiter = Waiter(1000, 500, lg=Mock(), sleep=sleep, clock=clock)
        with pytest.raises(KeyboardInterrupt):
            waiter.until(lambda: False, "interrupted")


def _raise_once():
    state = {"raised": False}

    def condition():
        if not state["raised"]:
            state["raised"] = True
            raise ValueError("not yet")
        return True

    return condition


# =============================================================================
# Configuration and helpers
# =============================================================================


@pytest.mark.unit
class TestWaiterConfig:
    def test_defaults(self):
        waiter = Waiter(lg=Mock())
        assert waiter.timeout_ms == 5000
        assert waiter.poll_interval_ms == 500

    @pytest.mark.parametrize("poll", [0, -1])
    def test_rejects_non_positive_poll_interval(self, poll):
        with pytest.raises(ValueError):
            Waiter(poll_interval_ms=poll, lg=Mock())

    def test_per_call_overrides(self, waiter, clock):
        with pytest.raises(WaitTimeoutError):
            waiter.until(lambda: False, "short", timeout_ms=300, poll_interval_ms=100)
        assert 0.3 <= clock.now < 0.4
        assert max(clock.sleeps) <= 0.1

    def test_until_visible_polls_locator(self, waiter, clock):
        locator = Mock()
        locator.is_visible.side_effect = [False, False, True]
        waiter.until_visible(locator, "submit button")
        assert locator.is_visible.call_count == 3
        assert len(clock.sleeps) == 2


@pytest.mark.unit
class TestModuleFunctions:
    def test_wait_for_returns_when_true(self):
        wait_for(lambda: True, timeout_ms=100, poll_interval_ms=10, lg=Mock())

    def test_wait_for_real_clock_timeout(self):
        start = time.monotonic()
        with pytest.raises(WaitTimeoutError):
            wait_for(lambda: False, timeout_ms=50, poll_interval_ms=10, lg=Mock())
        elapsed = time.monotonic() - start
        assert elapsed >= 0.05
        assert elapsed < 1.0

    def test_wait_for_element_visible(self):
        locator = Mock()
        locator.is_visible.return_value = True
        wait_for_element(locator, "banner", timeout_ms=100, lg=Mock())
        locator.is_visible.assert_called_once()

    def test_wait_for_element_timeout(self):
        locator = Mock()
        locator.is_visible.return_value = False
        with pytest.raises(WaitTimeoutError, match="banner"):
            wait_for_element(locator, "banner", timeout_ms=20, lg=Mock())
