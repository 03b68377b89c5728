"""
Tests for e2einfra.a11y.violations.
"""

import pytest

from e2einfra.a11y import (
    BLOCKING_SEVERITIES,
    Severity,
    Violation,
    known_rule_ids,
    parse_violations,
)
from e2einfra.exceptions import ValidationError

AXE_RESULT = {
    "violations": [
        {
            "id": "color-contrast",
            "impact": "serious",
            "help": "Elements must have sufficient color contrast",
            "helpUrl": "https://dequeuniversity.com/rules/axe/4.10/color-contrast",
            "nodes": [{"html": "<a class=\"pale\">Help</a>"}],
        },
        {"id": "region", "impact": "moderate", "nodes": []},
    ],
    "passes": [{"id": "image-alt"}],
    "incomplete": [{"id": "aria-valid-attr-value"}],
    "inapplicable": [{"id": "video-caption"}],
}


@pytest.mark.unit
class TestSeverity:
    @pytest.mark.parametrize(
        "impact,expected",
        [
            ("minor", Severity.MINOR),
            ("moderate", Severity.MODERATE),
            ("Serious", Severity.SERIOUS),
            ("critical ", Severity.CRITICAL),
            (None, Severity.MINOR),
        ],
    )
    def test_from_impact(self, impact, expected):
        assert Severity.from_impact(impact) is expected

    def test_unknown_impact(self):
        with pytest.raises(ValidationError):
            Severity.from_impact("catastrophic")

    def test_blocking(self):
        assert BLOCKING_SEVERITIES == {Severity.SERIOUS, Severity.CRITICAL}
        assert Severity.CRITICAL.blocking
        assert not Severity.MODERATE.blocking


@pytest.mark.unit
class TestViolation:
    def test_from_axe(self):
        v = Violation.from_axe(AXE_RESULT["violations"][0])

        assert v.rule_id == "color-contrast"
        assert v.severity is Severity.SERIOUS
        assert v.nodes == ("<a class=\"pale\">Help</a>",)
        assert v.description == "Elements must have sufficient color contrast"
        assert v.help_url.endswith("/color-contrast")

    def test_from_axe_without_id(self):
        with pytest.raises(ValidationError):
            Violation.from_axe({"impact": "critical"})

    def test_parse_violations(self):
        ids = [v.rule_id for v in parse_violations(AXE_RESULT)]
        assert ids == ["color-contrast", "region"]

    def test_parse_empty(self):
        assert parse_violations({}) == []
        assert parse_violations({"violations": None}) == []

    def test_known_rule_ids_covers_all_groups(self):
        assert known_rule_ids(AXE_RESULT) == {
            "color-contrast",
            "region",
            "image-alt",
            "aria-valid-attr-value",
            "video-caption",
        }
