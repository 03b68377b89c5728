"""
Tests for e2einfra.artifacts.
"""

import datetime
import threading
from pathlib import Path
from unittest.mock import Mock

import pytest

from e2einfra.artifacts import (
    DEFAULT_ARTIFACT_ROOT,
    Artifact,
    ArtifactCapture,
    ArtifactKind,
    ArtifactLayout,
    sanitize_name,
    unique_path,
)
from e2einfra.browser import ScopedResource
from e2einfra.exceptions import StaleResourceError

NOW = datetime.datetime(2024, 3, 9, 14, 5, 7, 123456)


@pytest.mark.unit
class TestSanitizeName:
    @pytest.mark.parametrize(
        "name,expected",
        [
            ("login", "login"),
            ("Login / bad password [chromium]", "Login_bad_password_chromium"),
            ("tests/test_cart.py::test_add", "tests_test_cart.py_test_add"),
            ("..hidden", "hidden"),
            ("///", "unit"),
            ("", "unit"),
        ],
    )
    def test_sanitize(self, name, expected):
        assert sanitize_name(name) == expected

    def test_long_names_are_truncated(self):
        assert len(sanitize_name("x" * 500)) == 120


@pytest.mark.unit
class TestUniquePath:
    def test_name_format(self, temp_dir):
        path = unique_path(temp_dir / "shots", "login", "png", NOW)

        assert path == temp_dir / "shots" / "login-2024-03-09_14-05-07-123456.png"
        assert path.exists()

    def test_collision_gets_counter(self, temp_dir):
        first = unique_path(temp_dir, "u", "png", NOW)
        second = unique_path(temp_dir, "u", "png", NOW)
        third = unique_path(temp_dir, "u", "png", NOW)

        assert first.name == "u-2024-03-09_14-05-07-123456.png"
        assert second.name == "u-2024-03-09_14-05-07-123456-1.png"
        assert third.name == "u-2024-03-09_14-05-07-123456-2.png"

    def test_concurrent_reservations_are_distinct(self, temp_dir):
        paths = []
        lock = threading.Lock()
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            p = unique_path(temp_dir, "same", "png", NOW)
            with lock:
                paths.append(p)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(set(paths)) == 8


@pytest.mark.unit
class TestArtifactLayout:
    def test_default_root(self):
        assert ArtifactLayout().root == DEFAULT_ARTIFACT_ROOT

    def test_directories(self, layout):
        assert layout.screenshots_dir == layout.root / "screenshots"
        assert layout.videos_dir == layout.root / "videos"
        assert layout.traces_dir == layout.root / "traces"
        assert layout.reports_dir == layout.root / "a11y-reports"

    def test_initialize_creates_all(self, layout):
        layout.initialize()
        for kind in ArtifactKind:
            assert layout.dir_for(kind).is_dir()

    def test_path_for_uses_kind_extension(self, layout):
        assert layout.path_for(ArtifactKind.TRACE, "u", now=NOW).suffix == ".zip"
        assert layout.path_for(ArtifactKind.VIDEO, "u", now=NOW).suffix == ".webm"
        assert layout.path_for(ArtifactKind.A11Y_REPORT, "u").suffix == ".json"

    def test_files(self, layout):
        assert layout.files(ArtifactKind.SCREENSHOT) == []
        p = layout.path_for(ArtifactKind.SCREENSHOT, "u", now=NOW)
        assert layout.files(ArtifactKind.SCREENSHOT) == [p]


def _scoped(page):
    return ScopedResource("u", Mock(), page)


@pytest.mark.unit
class TestArtifactCapture:
    @pytest.fixture
    def capture(self, layout):
        return ArtifactCapture(layout, lg=Mock())

    def test_capture_writes_failed_screenshot(self, capture, layout):
        page = Mock()
        page.screenshot.side_effect = lambda path, full_page: Path(path).write_bytes(b"png")

        path = capture.capture(_scoped(page), "login")

        assert path.parent == layout.screenshots_dir
        assert path.name.startswith("login_FAILED-")
        assert path.read_bytes() == b"png"
        page.screenshot.assert_called_once_with(path=str(path), full_page=True)

    def test_capture_screenshot_returns_artifact(self, capture):
        artifact = capture.capture_screenshot(_scoped(Mock()), "u", full_page=False)

        assert isinstance(artifact, Artifact)
        assert artifact.kind is ArtifactKind.SCREENSHOT
        assert artifact.unit_name == "u"

    def test_without_scoped_resource(self, capture):
        assert capture.capture(None, "u") is None
        capture._lg.warning.assert_called_once()

    def test_failure_is_logged_not_raised(self, capture, layout):
        page = Mock()
        page.screenshot.side_effect = RuntimeError("page crashed")

        assert capture.capture(_scoped(page), "u") is None
        assert layout.files(ArtifactKind.SCREENSHOT) == []
        message = capture._lg.warning.call_args[0][0]
        assert "Failed to capture screenshot" in message
        assert "page crashed" in message

    def test_released_resource_raises(self, capture):
        scoped = _scoped(Mock())
        scoped._mark_released()

        with pytest.raises(StaleResourceError):
            capture.capture(scoped, "u")

    def test_capture_bytes(self, capture):
        page = Mock()
        page.screenshot.return_value = b"png"

        assert capture.capture_bytes(_scoped(page), "u") == b"png"
        page.screenshot.assert_called_once_with(full_page=True)

    def test_capture_bytes_failure(self, capture):
        page = Mock()
        page.screenshot.side_effect = RuntimeError("closed")
        assert capture.capture_bytes(_scoped(page), "u") is None
        assert capture.capture_bytes(None, "u") is None
