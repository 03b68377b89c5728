"""
pytest plugin driving the session lifecycle.

Enable it in a conftest.py::

    pytest_plugins = ["e2einfra.testing"]

Fixtures:
    e2e_settings:        SessionSettings (session scope)
    e2e_driver_factory:  Playwright driver factory (session scope, override to
                         run against another driver)
    e2e_session:         started LifecycleOrchestrator (session scope)
    e2e_unit:            ScopedResource of the running test
    page:                the test's Playwright Page
    e2e_context:         the ExecutionContextStore

Each test using ``e2e_unit`` or ``page`` is one unit: its outcome comes from
the test report, so a failing test gets its failure screenshot before its
browsing context is closed. Parallel runs use one browser per worker process
(pytest-xdist), with the orchestrator session-scoped per worker.

Command line options (override the configuration file):
    --e2e-config PATH   YAML configuration file
    --e2e-engine NAME   chromium, firefox or webkit
    --e2e-headed        show the browser window
"""

from collections.abc import Callable, Generator
from typing import Any

import pytest

from .browser import BrowserEngine, ScopedResource
from .config import SessionSettings, load_settings
from .context import ExecutionContextStore
from .lifecycle import LifecycleOrchestrator, Outcome
from .log import LoggerFactory

_reports_key = pytest.StashKey[dict[str, Any]]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("e2e", "e2e session lifecycle")
    group.addoption("--e2e-config", default=None, help="YAML configuration file")
    group.addoption("--e2e-engine", default=None, help="chromium, firefox or webkit")
    group.addoption(
        "--e2e-headed", action="store_true", default=False, help="Show the browser"
    )


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo) -> Any:
    """Store each phase's report and exception on the item for unit teardown."""
    outcome = yield
    rep = outcome.get_result()
    exc = call.excinfo.value if call.excinfo is not None else None
    item.stash.setdefault(_reports_key, {})[rep.when] = (rep, exc)


def unit_outcome(item: pytest.Item) -> tuple[Outcome, BaseException | None]:
    """
    Outcome of a test from its stored reports.

    A failed setup or call fails the unit; a skip in either skips it.
    """
    reports = item.stash.get(_reports_key, {})
    for phase in ("setup", "call"):
        rep, exc = reports.get(phase, (None, None))
        if rep is None:
            continue
        if rep.failed:
            return Outcome.FAILED, exc
        if rep.skipped:
            return Outcome.SKIPPED, None
    return Outcome.PASSED, None


def apply_options(settings: SessionSettings, config: pytest.Config) -> SessionSettings:
    """Apply --e2e-engine and --e2e-headed on top of loaded settings."""
    browser = settings.browser
    engine = config.getoption("--e2e-engine")
    if engine:
        browser = browser.model_copy(update={"engine": BrowserEngine.parse(engine)})
    if config.getoption("--e2e-headed"):
        browser = browser.model_copy(update={"headless": False})
    return settings.model_copy(update={"browser": browser})


@pytest.fixture(scope="session")
def e2e_settings(pytestconfig: pytest.Config) -> SessionSettings:
    settings = load_settings(pytestconfig.getoption("--e2e-config"))
    return apply_options(settings, pytestconfig)


@pytest.fixture(scope="session")
def e2e_driver_factory() -> Callable[[], Any] | None:
    """
    Factory for the Playwright driver, None for ``sync_playwright().start()``.

    Override in a conftest.py to run the session against another driver.
    """
    return None


@pytest.fixture(scope="session")
def e2e_session(
    e2e_settings: SessionSettings,
    e2e_driver_factory: Callable[[], Any] | None,
) -> Generator[LifecycleOrchestrator, None, None]:
    """Start the suite (launch the shared browser) and tear it down at the end."""
    lg = LoggerFactory.create_root(e2e_settings.log_config())
    orchestrator = LifecycleOrchestrator.from_settings(
        e2e_settings, lg=lg, driver_factory=e2e_driver_factory
    )
    orchestrator.suite_start()
    try:
        yield orchestrator
    finally:
        orchestrator.suite_end()


@pytest.fixture
def e2e_unit(
    request: pytest.FixtureRequest, e2e_session: LifecycleOrchestrator
) -> Generator[ScopedResource, None, None]:
    """Run the requesting test as one unit with its own browsing context."""
    scoped = e2e_session.unit_start(request.node.name)
    try:
        yield scoped
    finally:
        outcome, error = unit_outcome(request.node)
        e2e_session.unit_end(outcome, error)


@pytest.fixture
def page(e2e_unit: ScopedResource) -> Any:
    """The running unit's Playwright Page."""
    return e2e_unit.page


@pytest.fixture
def e2e_context(e2e_session: LifecycleOrchestrator) -> ExecutionContextStore:
    """Execution context of the calling worker thread."""
    return e2e_session.store
