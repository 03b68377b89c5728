"""
Per-scope suppression of accessibility rules.

A whitelist maps a scope name (usually a page name) to the rule ids that are
tolerated on it. Whitelist files are JSON or YAML with the same shape::

    login:
      - color-contrast
    checkout: [region, landmark-one-main]
"""

import json
import threading
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from ..exceptions import ValidationError


class Whitelist:
    """Thread-safe mapping from scope name to suppressed rule ids."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rules: dict[str, set[str]] = {}

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]] | None) -> "Whitelist":
        """
        Build a whitelist from ``{scope: [rule_id, ...]}``.

        Raises:
            ValidationError: If the mapping has the wrong shape
        """
        whitelist = cls()
        if mapping is None:
            return whitelist
        if not isinstance(mapping, Mapping):
            raise ValidationError(
                "Whitelist must be a mapping of scope to rule ids",
                got=type(mapping).__name__,
            )
        for scope, rules in mapping.items():
            if rules is None:
                continue
            if isinstance(rules, str) or not isinstance(rules, Iterable):
                raise ValidationError(
                    "Whitelist rules must be a list", scope=scope
                )
            for rule_id in rules:
                whitelist.add(str(scope), str(rule_id))
        return whitelist

    @classmethod
    def load(cls, path: str | Path) -> "Whitelist":
        """
        Load a whitelist from a JSON or YAML file.

        Raises:
            ValidationError: If the file is missing or malformed
        """
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ValidationError("Cannot read whitelist file", path=str(path)) from e

        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValidationError("Malformed whitelist file", path=str(path)) from e
        return cls.from_mapping(data)

    def add(self, scope: str, rule_id: str) -> None:
        with self._lock:
            self._rules.setdefault(scope, set()).add(rule_id)

    def remove(self, scope: str, rule_id: str) -> bool:
        """Remove one entry; returns False if it was not present."""
        with self._lock:
            rules = self._rules.get(scope)
            if not rules or rule_id not in rules:
                return False
            rules.discard(rule_id)
            if not rules:
                del self._rules[scope]
            return True

    def is_whitelisted(self, scope: str, rule_id: str) -> bool:
        with self._lock:
            return rule_id in self._rules.get(scope, ())

    def rules_for(self, scope: str) -> frozenset[str]:
        with self._lock:
            return frozenset(self._rules.get(scope, ()))

    def scopes(self) -> list[str]:
        with self._lock:
            return sorted(self._rules)

    def clear(self) -> None:
        with self._lock:
            self._rules.clear()

    def unknown_rules(
        self, known_ids: Iterable[str], scope: str | None = None
    ) -> dict[str, list[str]]:
        """
        Entries naming a rule that is not in ``known_ids``.

        Args:
            known_ids: Rule ids the scanner knows about
            scope: Only check this scope

        Returns:
            Mapping of scope to sorted unknown rule ids; empty when all known
        """
        known = set(known_ids)
        with self._lock:
            items = (
                [(scope, self._rules.get(scope, set()))]
                if scope is not None
                else list(self._rules.items())
            )
            unknown = {s: sorted(r - known) for s, r in items if r - known}
        return unknown

    def to_dict(self) -> dict[str, list[str]]:
        with self._lock:
            return {scope: sorted(rules) for scope, rules in self._rules.items()}

    def __len__(self) -> int:
        with self._lock:
            return sum(len(rules) for rules in self._rules.values())

    def __repr__(self) -> str:
        return f"Whitelist({self.to_dict()!r})"


def coerce_whitelist(value: Any) -> Whitelist:
    """Accept a Whitelist, a mapping, or None."""
    if isinstance(value, Whitelist):
        return value
    return Whitelist.from_mapping(value)
