"""Per-unit results, collected from every worker thread."""

import threading
from dataclasses import dataclass, field
from pathlib import Path

from .events import Outcome


@dataclass(frozen=True)
class UnitResult:
    """Result of one unit."""

    name: str
    outcome: Outcome
    duration: float = 0.0
    error: str | None = None
    artifacts: tuple[Path, ...] = ()
    infrastructure: bool = False
    worker: str = field(default_factory=lambda: threading.current_thread().name)

    @property
    def failed(self) -> bool:
        return self.outcome is Outcome.FAILED


@dataclass(frozen=True)
class ResultSummary:
    total: int
    passed: int
    failed: int
    skipped: int

    @property
    def pass_rate(self) -> float:
        """Passed units as a percentage of units that ran (skips excluded)."""
        ran = self.passed + self.failed
        return round(100.0 * self.passed / ran, 2) if ran else 0.0


class ResultLog:
    """Append-only, thread-safe list of unit results."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._results: list[UnitResult] = []

    def append(self, result: UnitResult) -> None:
        with self._lock:
            self._results.append(result)

    def results(self) -> list[UnitResult]:
        with self._lock:
            return list(self._results)

    def failed(self) -> list[UnitResult]:
        return [r for r in self.results() if r.failed]

    def summary(self) -> ResultSummary:
        results = self.results()
        count = {outcome: 0 for outcome in Outcome}
        for r in results:
            count[r.outcome] += 1
        return ResultSummary(
            total=len(results),
            passed=count[Outcome.PASSED],
            failed=count[Outcome.FAILED],
            skipped=count[Outcome.SKIPPED],
        )

    def clear(self) -> None:
        with self._lock:
            self._results.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)
