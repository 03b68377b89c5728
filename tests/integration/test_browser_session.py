"""
Integration tests against a real Playwright browser.

Skipped when the browser binaries are not installed. Install them with:
    playwright install chromium
"""

import pytest

from e2einfra.artifacts import ArtifactKind, ArtifactLayout
from e2einfra.browser import ResourceLifecycleManager
from e2einfra.exceptions import InfrastructureError
from e2einfra.lifecycle import LifecycleOrchestrator, Outcome
from e2einfra.wait import Waiter

PAGE = "data:text/html,<main><h1>Sign in</h1><button id=go>Go</button></main>"


@pytest.fixture
def orch(temp_dir):
    orchestrator = LifecycleOrchestrator(
        manager=ResourceLifecycleManager(),
        layout=ArtifactLayout(temp_dir / "artifacts"),
    )
    try:
        orchestrator.suite_start()
    except InfrastructureError as e:
        pytest.skip(f"browser not available: {e}")
    yield orchestrator
    orchestrator.suite_end()


@pytest.mark.integration
class TestBrowserSession:
    def test_passing_unit(self, orch):
        with orch.unit("heading") as scoped:
            scoped.page.goto(PAGE)
            assert scoped.page.text_content("h1") == "Sign in"

        assert orch.layout.files(ArtifactKind.SCREENSHOT) == []

    def test_failed_unit_gets_screenshot(self, orch):
        orch.unit_start("broken")
        orch.store.page.goto(PAGE)
        result = orch.unit_end(Outcome.FAILED, AssertionError("wrong heading"))

        [shot] = orch.layout.files(ArtifactKind.SCREENSHOT)
        assert result.artifacts == (shot,)
        assert shot.read_bytes().startswith(b"\x89PNG")

    def test_wait_for_element(self, orch):
        with orch.unit("wait") as scoped:
            scoped.page.goto(PAGE)
            Waiter(timeout_ms=2000, poll_interval_ms=50).until_visible(
                scoped.page.locator("#go"), "go button"
            )
