"""Session lifecycle: state machine, reporting hooks and unit results."""

from .events import (
    LifecycleEvent,
    Outcome,
    SessionState,
    SuiteEnd,
    SuiteStart,
    UnitEnd,
    UnitSkipped,
    UnitStart,
)
from .hooks import HookContext, HookEvent, SessionHooks
from .orchestrator import LifecycleOrchestrator, format_api_exchange
from .results import ResultLog, ResultSummary, UnitResult

__all__ = [
    "LifecycleOrchestrator",
    "LifecycleEvent",
    "SuiteStart",
    "UnitStart",
    "UnitEnd",
    "SuiteEnd",
    "Outcome",
    "SessionState",
    "UnitSkipped",
    "SessionHooks",
    "HookEvent",
    "HookContext",
    "ResultLog",
    "ResultSummary",
    "UnitResult",
    "format_api_exchange",
]
