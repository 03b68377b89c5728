"""Accessibility violations as reported by axe-core."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..exceptions import ValidationError


class Severity(Enum):
    """axe-core impact levels, lowest first."""

    MINOR = "minor"
    MODERATE = "moderate"
    SERIOUS = "serious"
    CRITICAL = "critical"

    @classmethod
    def from_impact(cls, impact: str | None) -> "Severity":
        """
        Map an axe ``impact`` to a Severity.

        axe reports a null impact for some rules; that maps to MINOR.

        Raises:
            ValidationError: If the impact is not a known level
        """
        if impact is None:
            return cls.MINOR
        try:
            return cls(str(impact).strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown violation impact: {impact}") from None

    @property
    def blocking(self) -> bool:
        """True for the levels that can fail a run."""
        return self in BLOCKING_SEVERITIES


BLOCKING_SEVERITIES = frozenset({Severity.SERIOUS, Severity.CRITICAL})


@dataclass(frozen=True)
class Violation:
    """One violated rule and the page nodes it was found on."""

    rule_id: str
    severity: Severity
    nodes: tuple[str, ...] = ()
    description: str = ""
    help_url: str = ""

    @classmethod
    def from_axe(cls, rule: dict[str, Any]) -> "Violation":
        """
        Build a Violation from one entry of axe's ``violations`` list.

        Raises:
            ValidationError: If the entry has no rule id
        """
        rule_id = rule.get("id")
        if not rule_id:
            raise ValidationError("axe result entry has no rule id", entry=rule)
        nodes = tuple(
            str(node.get("html", "")) for node in rule.get("nodes") or []
        )
        return cls(
            rule_id=str(rule_id),
            severity=Severity.from_impact(rule.get("impact")),
            nodes=nodes,
            description=str(rule.get("help") or rule.get("description") or ""),
            help_url=str(rule.get("helpUrl") or ""),
        )


def parse_violations(results: dict[str, Any]) -> list[Violation]:
    """Violations from a full ``axe.run`` result."""
    return [Violation.from_axe(rule) for rule in results.get("violations") or []]


def known_rule_ids(results: dict[str, Any]) -> set[str]:
    """Ids of every rule axe evaluated, whatever its result."""
    ids: set[str] = set()
    for group in ("violations", "passes", "incomplete", "inapplicable"):
        ids.update(str(rule["id"]) for rule in results.get(group) or [] if "id" in rule)
    return ids
