"""
Tests for e2einfra.a11y.scanner with a mocked Playwright page.
"""

import json
from unittest.mock import Mock

import pytest

from e2einfra.a11y import (
    DEFAULT_TAGS,
    AccessibilityScanner,
    ViolationFilter,
    check_keyboard_navigation,
    check_landmarks,
)
from e2einfra.a11y.scanner import DEFAULT_AXE_URL
from e2einfra.artifacts import ArtifactKind, ArtifactLayout
from e2einfra.exceptions import ValidationError

AXE_RESULT = {
    "violations": [
        {"id": "color-contrast", "impact": "serious", "nodes": [{"html": "<a>"}]},
        {"id": "region", "impact": "moderate", "nodes": [{"html": "<div>"}]},
    ],
    "passes": [{"id": "image-alt"}, {"id": "label"}],
    "inapplicable": [{"id": "video-caption"}],
}


def _page(loaded=False, result=None):
    page = Mock()
    page.evaluate.side_effect = lambda js, *args: (
        loaded if not args else (AXE_RESULT if result is None else result)
    )
    return page


def _scanner(page, layout=None, whitelist=None, strict=False, **kwargs):
    lg = Mock()
    return AccessibilityScanner(
        page, ViolationFilter(whitelist, strict, lg=lg), layout, lg=lg, **kwargs
    )


@pytest.mark.unit
class TestInject:
    def test_loads_from_url(self):
        page = _page()
        _scanner(page).inject()
        page.add_script_tag.assert_called_once_with(url=DEFAULT_AXE_URL)

    def test_loads_local_script(self, temp_dir):
        page = _page()
        script = temp_dir / "axe.min.js"
        _scanner(page, axe_script=script).inject()
        page.add_script_tag.assert_called_once_with(path=str(script))

    def test_skips_when_loaded(self):
        page = _page(loaded=True)
        _scanner(page).inject()
        page.add_script_tag.assert_not_called()


@pytest.mark.unit
class TestRun:
    def test_passes_tags_and_selector(self):
        page = _page()
        _scanner(page).run(selector="#main")

        js, args = page.evaluate.call_args[0]
        assert "axe.run" in js
        assert args == ["#main", {"runOnly": {"type": "tag", "values": list(DEFAULT_TAGS)}}]

    def test_custom_tags(self):
        page = _page()
        _scanner(page, tags=["wcag21aa"]).run()
        assert page.evaluate.call_args[0][1][1]["runOnly"]["values"] == ["wcag21aa"]

    def test_rejects_non_object_result(self):
        page = _page(result="boom")
        with pytest.raises(ValidationError):
            _scanner(page).run()


@pytest.mark.unit
class TestScan:
    def test_soft_mode_passes(self):
        result = _scanner(_page()).scan("login")

        assert result.passed
        assert result.blocking_ids == ["color-contrast"]
        assert len(result.non_blocking) == 1

    def test_strict_mode_fails(self):
        with pytest.raises(AssertionError, match="found on login"):
            _scanner(_page(), strict=True).assert_accessible("login")

    def test_whitelisted_passes_strict(self):
        scanner = _scanner(_page(), whitelist={"login": ["color-contrast"]}, strict=True)
        assert scanner.assert_accessible("login").passed

    def test_writes_report(self, layout):
        _scanner(_page(), layout=layout).scan("login")

        reports = layout.files(ArtifactKind.A11Y_REPORT)
        assert len(reports) == 1
        assert reports[0].name.startswith("a11y-report-login-")

        report = json.loads(reports[0].read_text())
        assert report["pageName"] == "login"
        assert report["violationCount"] == 2
        assert report["passCount"] == 2
        assert report["inapplicableCount"] == 1
        assert report["violations"][0] == {
            "id": "color-contrast",
            "impact": "serious",
            "nodes": 1,
        }

    def test_no_report_without_layout(self):
        scanner = _scanner(_page())
        assert scanner.write_report("login", AXE_RESULT) is None

    def test_report_failure_is_logged(self, temp_dir):
        blocker = temp_dir / "blocked"
        blocker.write_text("a file where a directory should be")

        scanner = _scanner(_page(), layout=ArtifactLayout(blocker))
        assert scanner.write_report("login", AXE_RESULT) is None
        scanner._lg.error.assert_called_once()


@pytest.mark.unit
class TestPageChecks:
    def test_keyboard_navigation_moves_focus(self):
        page = Mock()
        page.evaluate.return_value = "A"

        assert check_keyboard_navigation(page, "home", lg=Mock())
        page.keyboard.press.assert_called_once_with("Tab")

    @pytest.mark.parametrize("tag", ["BODY", None])
    def test_keyboard_navigation_without_focusable(self, tag):
        page = Mock()
        page.evaluate.return_value = tag
        assert not check_keyboard_navigation(page, "home", lg=Mock())

    def test_landmarks(self):
        page = Mock()
        page.evaluate.side_effect = lambda js: "nav" in js
        lg = Mock()

        found = check_landmarks(page, "home", lg=lg)

        assert found == {"main": False, "navigation": True, "contentinfo": False}
        lg.warning.assert_called_once()
