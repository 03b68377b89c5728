"""
Accessibility scans of a live page with axe-core.

The scanner injects axe-core into the page when it is not already loaded,
runs it with the configured WCAG tags, writes a JSON summary report and hands
the violations to ViolationFilter.

Example Usage:
    scanner = AccessibilityScanner(page, ViolationFilter(whitelist, strict=True), layout)
    scanner.assert_accessible("login")
"""

import datetime
import json
from pathlib import Path
from typing import Any

from ..artifacts import ArtifactKind, ArtifactLayout
from ..exceptions import ValidationError
from ..log import component_logger
from ..time import artifact_timestamp
from .filter import FilterResult, ViolationFilter
from .violations import known_rule_ids, parse_violations

DEFAULT_TAGS = ("wcag2a", "wcag2aa")
DEFAULT_AXE_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

_AXE_LOADED_JS = "() => typeof window.axe !== 'undefined'"
_AXE_RUN_JS = "([context, options]) => axe.run(context || document, options)"
_ACTIVE_TAG_JS = "() => document.activeElement ? document.activeElement.tagName : null"
LANDMARK_SELECTORS = {
    "main": "main, [role=\"main\"]",
    "navigation": "nav, [role=\"navigation\"]",
    "contentinfo": "footer, [role=\"contentinfo\"]",
}


class AccessibilityScanner:
    """Runs axe-core on a page and gates the result through a ViolationFilter."""

    def __init__(
        self,
        page: Any,
        violation_filter: ViolationFilter | None = None,
        layout: ArtifactLayout | None = None,
        tags: list[str] | tuple[str, ...] = DEFAULT_TAGS,
        axe_script: str | Path | None = None,
        axe_url: str = DEFAULT_AXE_URL,
        lg: Any | None = None,
    ) -> None:
        """
        Initialize the scanner.

        Args:
            page: Playwright Page to scan
            violation_filter: Filter applied to the results (soft mode, empty
                whitelist when omitted)
            layout: Artifact layout for JSON reports; no report when omitted
            tags: axe rule tags to run
            axe_script: Local axe-core script; ``axe_url`` is used when omitted
            axe_url: URL axe-core is loaded from
            lg: Logger (derived from the default root logger when omitted)
        """
        self.page = page
        self._lg = component_logger(lg, ["e2e", "a11y"])
        self.filter = violation_filter or ViolationFilter(lg=self._lg)
        self.layout = layout
        self.tags = list(tags)
        self.axe_script = Path(axe_script) if axe_script else None
        self.axe_url = axe_url

    def inject(self) -> None:
        """Load axe-core into the page if it is not there yet."""
        if self.page.evaluate(_AXE_LOADED_JS):
            return
        if self.axe_script is not None:
            self.page.add_script_tag(path=str(self.axe_script))
        else:
            self.page.add_script_tag(url=self.axe_url)

    def run(
        self, tags: list[str] | None = None, selector: str | None = None
    ) -> dict[str, Any]:
        """
        Run axe-core and return its raw result.

        Raises:
            ValidationError: If axe returned something other than a result object
        """
        self.inject()
        options = {"runOnly": {"type": "tag", "values": list(tags or self.tags)}}
        results = self.page.evaluate(_AXE_RUN_JS, [selector, options])
        if not isinstance(results, dict):
            raise ValidationError(
                "Unexpected axe result", got=type(results).__name__
            )
        return results

    def scan(
        self,
        scope: str,
        tags: list[str] | None = None,
        selector: str | None = None,
    ) -> FilterResult:
        """Scan the page (or the element matching ``selector``) for ``scope``."""
        self._lg.info("starting accessibility scan", extra={"scope": scope})
        results = self.run(tags, selector)
        violations = parse_violations(results)
        self._lg.info(
            "accessibility scan finished",
            extra={
                "scope": scope,
                "violations": len(violations),
                "passes": len(results.get("passes") or []),
            },
        )
        self.write_report(scope, results)
        return self.filter.evaluate(
            violations, scope, known_rules=known_rule_ids(results)
        )

    def assert_accessible(
        self,
        scope: str,
        tags: list[str] | None = None,
        selector: str | None = None,
    ) -> FilterResult:
        """
        Scan and fail on blocking violations in strict mode.

        Raises:
            AssertionError: If the evaluation did not pass
        """
        result = self.scan(scope, tags, selector)
        if not result.passed:
            raise AssertionError(result.message())
        return result

    def write_report(self, scope: str, results: dict[str, Any]) -> Path | None:
        """Write a JSON summary of ``results``; failures are logged, not raised."""
        if self.layout is None:
            return None

        now = datetime.datetime.now()
        report = {
            "pageName": scope,
            "timestamp": artifact_timestamp(now),
            "violationCount": len(results.get("violations") or []),
            "passCount": len(results.get("passes") or []),
            "inapplicableCount": len(results.get("inapplicable") or []),
            "violations": [
                {
                    "id": rule.get("id"),
                    "impact": rule.get("impact"),
                    "nodes": len(rule.get("nodes") or []),
                }
                for rule in results.get("violations") or []
            ],
        }
        path = None
        try:
            path = self.layout.path_for(
                ArtifactKind.A11Y_REPORT, f"a11y-report-{scope}", now=now
            )
            path.write_text(json.dumps(report, indent=2), encoding="utf-8")
        except OSError as e:
            self._lg.error(
                "failed to write accessibility report",
                extra={"scope": scope, "error": str(e)},
            )
            return None
        self._lg.info("accessibility report written", extra={"path": path})
        return path


def check_keyboard_navigation(page: Any, scope: str, lg: Any | None = None) -> bool:
    """
    Press Tab and report whether focus moved onto an element.

    Returns:
        False when focus stayed on BODY (nothing focusable)
    """
    lg = component_logger(lg, ["e2e", "a11y"])
    page.keyboard.press("Tab")
    page.wait_for_timeout(100)
    tag = page.evaluate(_ACTIVE_TAG_JS)
    if not tag or tag == "BODY":
        lg.warning("no focusable elements found", extra={"scope": scope})
        return False
    lg.debug("tab navigation works", extra={"scope": scope, "focused": tag})
    return True


def check_landmarks(page: Any, scope: str, lg: Any | None = None) -> dict[str, bool]:
    """Report which of the main/navigation/contentinfo landmarks are present."""
    lg = component_logger(lg, ["e2e", "a11y"])
    found = {
        name: bool(page.evaluate(f"() => !!document.querySelector('{selector}')"))
        for name, selector in LANDMARK_SELECTORS.items()
    }
    lg.info("landmarks", extra={"scope": scope} | found)
    if not found["main"]:
        lg.warning("missing main landmark", extra={"scope": scope})
    return found
