"""
Tests for the pytest plugin helpers in e2einfra.testing.
"""

from types import SimpleNamespace
from unittest.mock import Mock

import pytest

from e2einfra.browser import BrowserEngine
from e2einfra.config import SessionSettings
from e2einfra.lifecycle import Outcome
from e2einfra.testing import _reports_key, apply_options, unit_outcome


def _item(**phases):
    item = SimpleNamespace(stash=pytest.Stash())
    item.stash[_reports_key] = {
        when: (Mock(failed=state == "failed", skipped=state == "skipped"), exc)
        for when, (state, exc) in phases.items()
    }
    return item


def _config(engine=None, headed=False):
    options = {"--e2e-engine": engine, "--e2e-headed": headed}
    return Mock(getoption=lambda name: options[name])


@pytest.mark.unit
class TestUnitOutcome:
    def test_no_reports(self):
        assert unit_outcome(SimpleNamespace(stash=pytest.Stash())) == (Outcome.PASSED, None)

    def test_passed(self):
        item = _item(setup=("passed", None), call=("passed", None))
        assert unit_outcome(item) == (Outcome.PASSED, None)

    def test_call_failed(self):
        err = AssertionError("title mismatch")
        item = _item(setup=("passed", None), call=("failed", err))
        assert unit_outcome(item) == (Outcome.FAILED, err)

    def test_setup_failed(self):
        err = RuntimeError("fixture broke")
        assert unit_outcome(_item(setup=("failed", err))) == (Outcome.FAILED, err)

    def test_skipped(self):
        item = _item(setup=("passed", None), call=("skipped", None))
        assert unit_outcome(item) == (Outcome.SKIPPED, None)


@pytest.mark.unit
class TestApplyOptions:
    def test_no_options(self):
        settings = SessionSettings()
        assert apply_options(settings, _config()) == settings

    def test_engine_and_headed(self):
        settings = apply_options(SessionSettings(), _config("safari", headed=True))

        assert settings.browser.engine is BrowserEngine.WEBKIT
        assert settings.browser.headless is False

    def test_original_untouched(self):
        settings = SessionSettings()
        apply_options(settings, _config("firefox"))
        assert settings.browser.engine is BrowserEngine.CHROMIUM


# =============================================================================
# Plugin run end to end (fake driver)
# =============================================================================

SESSION_CONFTEST = """
import pytest

from tests.fixtures.browser import FakeDriver

pytest_plugins = ["e2einfra.testing"]

DRIVER = FakeDriver()


@pytest.fixture(scope="session")
def e2e_driver_factory():
    return lambda: DRIVER
"""

SESSION_CONFIG = """
artifacts:
  root: artifacts
logging:
  level: warning
  colors: false
"""


@pytest.mark.integration
class TestPluginSession:
    @pytest.fixture
    def session_dir(self, pytester):
        pytester.makeconftest(SESSION_CONFTEST)
        pytester.makefile(".yaml", e2e=SESSION_CONFIG)
        return pytester

    def _run(self, pytester, *args):
        return pytester.runpytest("--e2e-config", "e2e.yaml", "-p", "no:cacheprovider", *args)

    def _screenshots(self, pytester):
        directory = pytester.path / "artifacts" / "screenshots"
        return sorted(p.name for p in directory.iterdir()) if directory.is_dir() else []

    def test_failing_test_gets_one_screenshot(self, session_dir):
        session_dir.makepyfile(
            test_login="""
            def test_login_passes(page):
                assert page is not None

            def test_login_fails(page):
                assert False, "wrong title"
            """
        )

        result = self._run(session_dir)

        result.assert_outcomes(passed=1, failed=1)
        [shot] = self._screenshots(session_dir)
        assert shot.startswith("test_login_fails_FAILED-")
        assert shot.endswith(".png")

    def test_passing_tests_get_no_screenshot(self, session_dir):
        session_dir.makepyfile(
            test_ok="""
            def test_one(page):
                pass

            def test_two(e2e_unit, e2e_context):
                assert e2e_context.scoped is e2e_unit
            """
        )

        result = self._run(session_dir)

        result.assert_outcomes(passed=2)
        assert self._screenshots(session_dir) == []

    def test_skipped_test_gets_no_screenshot(self, session_dir):
        session_dir.makepyfile(
            test_skip="""
            import pytest

            def test_skipped(page):
                pytest.skip("not on this engine")
            """
        )

        result = self._run(session_dir)

        result.assert_outcomes(skipped=1)
        assert self._screenshots(session_dir) == []

    def test_browser_shared_and_closed_at_session_end(self, session_dir):
        session_dir.makepyfile(
            test_shared="""
            from conftest import DRIVER

            def test_a(page):
                assert DRIVER.launches == 1

            def test_b(page):
                assert DRIVER.launches == 1
                assert len(DRIVER.browsers[0].contexts) == 2
                assert DRIVER.browsers[0].contexts[0].closed
            """
        )

        result = self._run(session_dir)

        result.assert_outcomes(passed=2)
