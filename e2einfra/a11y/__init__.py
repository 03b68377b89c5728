"""Accessibility scanning, whitelisting and pass/fail gating."""

from .filter import FilterResult, ViolationFilter, evaluate
from .scanner import (
    DEFAULT_TAGS,
    AccessibilityScanner,
    check_keyboard_navigation,
    check_landmarks,
)
from .violations import (
    BLOCKING_SEVERITIES,
    Severity,
    Violation,
    known_rule_ids,
    parse_violations,
)
from .whitelist import Whitelist

__all__ = [
    "AccessibilityScanner",
    "ViolationFilter",
    "FilterResult",
    "Whitelist",
    "Violation",
    "Severity",
    "BLOCKING_SEVERITIES",
    "DEFAULT_TAGS",
    "evaluate",
    "parse_violations",
    "known_rule_ids",
    "check_keyboard_navigation",
    "check_landmarks",
]
