"""
Lifecycle events, unit outcomes and session states.

An external runner drives the orchestrator by issuing events::

    orchestrator.handle(SuiteStart())
    orchestrator.handle(UnitStart("login works"))
    orchestrator.handle(UnitEnd(Outcome.FAILED, error))
    orchestrator.handle(SuiteEnd())
"""

from dataclasses import dataclass
from enum import Enum


class SessionState(Enum):
    """Session states; UNIT_RUNNING is reported per worker thread."""

    NOT_STARTED = "not_started"
    SUITE_READY = "suite_ready"
    UNIT_RUNNING = "unit_running"
    SUITE_TORN_DOWN = "suite_torn_down"


class Outcome(Enum):
    """Outcome of one unit."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class UnitSkipped(Exception):
    """Raised inside ``orchestrator.unit()`` to end the unit as skipped."""

    pass


@dataclass(frozen=True)
class SuiteStart:
    pass


@dataclass(frozen=True)
class UnitStart:
    name: str


@dataclass(frozen=True)
class UnitEnd:
    outcome: Outcome
    error: BaseException | None = None


@dataclass(frozen=True)
class SuiteEnd:
    pass


LifecycleEvent = SuiteStart | UnitStart | UnitEnd | SuiteEnd
