"""
Pass/fail gating of accessibility violations.

A violation is blocking when its severity is serious or critical and its rule
is not whitelisted for the scope. Blocking violations fail the evaluation
only in strict mode; otherwise they are reported and logged (soft fail).
"""

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from ..log import component_logger
from .violations import Violation
from .whitelist import Whitelist, coerce_whitelist


@dataclass(frozen=True)
class FilterResult:
    """Outcome of evaluating one scope's violations."""

    scope: str
    strict: bool
    blocking: tuple[Violation, ...]
    suppressed: tuple[Violation, ...] = ()
    non_blocking: tuple[Violation, ...] = ()

    @property
    def passed(self) -> bool:
        return not (self.blocking and self.strict)

    @property
    def blocking_ids(self) -> list[str]:
        return [v.rule_id for v in self.blocking]

    def message(self) -> str:
        return (
            f"Accessibility blocking issues found on {self.scope} "
            f"({len(self.blocking)} critical/serious violations)"
        )


class ViolationFilter:
    """
    Applies severity and whitelist rules under a strict or soft policy.

    Example:
        vf = ViolationFilter(Whitelist.from_mapping({"login": ["region"]}), strict=True)
        result = vf.evaluate(violations, "login")
        if not result.passed:
            raise AssertionError(result.message())
    """

    def __init__(
        self,
        whitelist: Whitelist | dict[str, Any] | None = None,
        strict: bool = False,
        lg: Any | None = None,
    ) -> None:
        self.whitelist = coerce_whitelist(whitelist)
        self.strict = strict
        self._lg = component_logger(lg, ["e2e", "a11y"])
        self._warned_lock = threading.Lock()
        self._warned: set[tuple[str, str]] = set()

    def evaluate(
        self,
        violations: Iterable[Violation],
        scope: str,
        whitelist: Whitelist | dict[str, Any] | None = None,
        strict: bool | None = None,
        known_rules: Iterable[str] | None = None,
    ) -> FilterResult:
        """
        Evaluate violations found in ``scope``.

        Args:
            violations: Violations reported by the scanner
            scope: Scope (page) name the whitelist is keyed by
            whitelist: Overrides the filter's whitelist for this call
            strict: Overrides the filter's strictness for this call
            known_rules: Rule ids the scanner evaluated; whitelist entries for
                this scope naming other ids are warned about once
        """
        wl = self.whitelist if whitelist is None else coerce_whitelist(whitelist)
        strict = self.strict if strict is None else strict
        if known_rules is not None:
            self._warn_unknown(wl, scope, known_rules)

        blocking, suppressed, non_blocking = [], [], []
        for v in violations:
            if not v.severity.blocking:
                non_blocking.append(v)
            elif wl.is_whitelisted(scope, v.rule_id):
                suppressed.append(v)
                self._lg.warning(
                    "whitelisted violation",
                    extra={"scope": scope, "rule": v.rule_id, "impact": v.severity.value},
                )
            else:
                blocking.append(v)

        result = FilterResult(
            scope, strict, tuple(blocking), tuple(suppressed), tuple(non_blocking)
        )
        self._log_result(result)
        return result

    def _warn_unknown(
        self, wl: Whitelist, scope: str, known_rules: Iterable[str]
    ) -> None:
        unknown = wl.unknown_rules(known_rules, scope=scope).get(scope, [])
        for rule_id in unknown:
            with self._warned_lock:
                if (scope, rule_id) in self._warned:
                    continue
                self._warned.add((scope, rule_id))
            self._lg.warning(
                "whitelist names an unknown rule",
                extra={"scope": scope, "rule": rule_id},
            )

    def _log_result(self, result: FilterResult) -> None:
        for v in result.blocking:
            self._lg.warning(
                "blocking violation",
                extra={"scope": result.scope, "rule": v.rule_id, "impact": v.severity.value},
            )
            for node in v.nodes:
                self._lg.debug(f"  ↳ {node}", extra={"rule": v.rule_id})

        if not result.blocking:
            self._lg.info(
                "accessibility check passed",
                extra={"scope": result.scope, "non_blocking": len(result.non_blocking)},
            )
        elif result.strict:
            self._lg.error(result.message())
        else:
            self._lg.warning(
                "blocking violations ignored, strict mode is off",
                extra={"scope": result.scope, "blocking": len(result.blocking)},
            )


def evaluate(
    violations: Iterable[Violation],
    scope: str,
    whitelist: Whitelist | dict[str, Any] | None = None,
    strict: bool = False,
) -> FilterResult:
    """Evaluate violations with a one-off filter."""
    return ViolationFilter(whitelist, strict).evaluate(violations, scope)
