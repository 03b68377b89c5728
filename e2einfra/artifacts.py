"""
Diagnostic artifact storage and failure-time capture.

Layout under the artifact root::

    target/test-artifacts/
        screenshots/   {unit}-{YYYY-mm-dd_HH-MM-SS-ffffff}.png
        videos/        {unit}-{timestamp}.webm
        traces/        {unit}-{timestamp}.zip
        a11y-reports/  a11y-report-{scope}-{timestamp}.json

File names are reserved with an exclusive create, so two captures can never
write the same file even when they land on the same microsecond.
"""

import datetime
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from .exceptions import DiagnosticCaptureError
from .log import component_logger
from .time import artifact_timestamp

DEFAULT_ARTIFACT_ROOT = Path("target/test-artifacts")
FAILED_SUFFIX = "_FAILED"
_MAX_NAME_LEN = 120
_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class ArtifactKind(Enum):
    """Artifact kinds and the subdirectory each is stored in."""

    SCREENSHOT = "screenshots"
    VIDEO = "videos"
    TRACE = "traces"
    A11Y_REPORT = "a11y-reports"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]


_EXTENSIONS = {
    ArtifactKind.SCREENSHOT: "png",
    ArtifactKind.VIDEO: "webm",
    ArtifactKind.TRACE: "zip",
    ArtifactKind.A11Y_REPORT: "json",
}


def sanitize_name(name: str) -> str:
    """
    Make a unit name safe for use as a file name.

    Example:
        >>> sanitize_name("Login / bad password [chromium]")
        'Login_bad_password_chromium'
    """
    safe = _UNSAFE_CHARS.sub("_", name)[:_MAX_NAME_LEN].strip("._")
    return safe or "unit"


def unique_path(
    directory: Path,
    name: str,
    ext: str,
    now: datetime.datetime | None = None,
) -> Path:
    """
    Reserve and return ``{directory}/{name}-{timestamp}.{ext}``.

    The file is created empty to claim the name; if it already exists a
    counter suffix is appended (``-1``, ``-2``, ...).
    """
    directory.mkdir(parents=True, exist_ok=True)
    base = f"{sanitize_name(name)}-{artifact_timestamp(now)}"
    path = directory / f"{base}.{ext}"
    counter = 0
    while True:
        try:
            with path.open("x"):
                return path
        except FileExistsError:
            counter += 1
            path = directory / f"{base}-{counter}.{ext}"


@dataclass(frozen=True)
class Artifact:
    """A persisted diagnostic file."""

    kind: ArtifactKind
    unit_name: str
    path: Path
    timestamp: datetime.datetime = field(default_factory=datetime.datetime.now)

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()


class ArtifactLayout:
    """Directory layout for diagnostic artifacts."""

    def __init__(self, root: str | Path = DEFAULT_ARTIFACT_ROOT) -> None:
        self.root = Path(root)

    def dir_for(self, kind: ArtifactKind) -> Path:
        return self.root / kind.value

    @property
    def screenshots_dir(self) -> Path:
        return self.dir_for(ArtifactKind.SCREENSHOT)

    @property
    def videos_dir(self) -> Path:
        return self.dir_for(ArtifactKind.VIDEO)

    @property
    def traces_dir(self) -> Path:
        return self.dir_for(ArtifactKind.TRACE)

    @property
    def reports_dir(self) -> Path:
        return self.dir_for(ArtifactKind.A11Y_REPORT)

    def initialize(self) -> None:
        """Create every artifact directory."""
        for kind in ArtifactKind:
            self.dir_for(kind).mkdir(parents=True, exist_ok=True)

    def path_for(
        self,
        kind: ArtifactKind,
        unit_name: str,
        ext: str | None = None,
        now: datetime.datetime | None = None,
    ) -> Path:
        """Reserve a unique file path for a new artifact of ``kind``."""
        return unique_path(self.dir_for(kind), unit_name, ext or kind.extension, now)

    def files(self, kind: ArtifactKind) -> list[Path]:
        """Artifacts of ``kind`` on disk, sorted by name."""
        directory = self.dir_for(kind)
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.iterdir() if p.is_file())


class ArtifactCapture:
    """
    Takes diagnostic snapshots of a unit's active page.

    A capture that fails (page crashed, navigated away, disk full) is logged
    as a warning and yields None, so it can never replace the test failure it
    was meant to diagnose. A capture attempted on a released scoped resource
    is a sequencing bug and raises StaleResourceError.
    """

    def __init__(self, layout: ArtifactLayout, lg: Any | None = None) -> None:
        self.layout = layout
        self._lg = component_logger(lg, ["e2e", "artifacts"])

    def capture(self, scoped: Any, unit_name: str) -> Path | None:
        """Capture a full-page failure screenshot and return its path."""
        artifact = self.capture_screenshot(scoped, unit_name + FAILED_SUFFIX)
        return artifact.path if artifact else None

    def capture_screenshot(
        self, scoped: Any, unit_name: str, full_page: bool = True
    ) -> Artifact | None:
        """
        Save a screenshot of the scoped resource's page.

        Raises:
            StaleResourceError: If ``scoped`` was already released
        """
        if scoped is None:
            self._lg.warning("no active page to capture", extra={"unit": unit_name})
            return None
        page = scoped.page

        path: Path | None = None
        try:
            path = self.layout.path_for(ArtifactKind.SCREENSHOT, unit_name)
            page.screenshot(path=str(path), full_page=full_page)
        except Exception as e:
            self._report_failure("screenshot", unit_name, path, e)
            return None

        self._lg.info("screenshot captured", extra={"unit": unit_name, "path": path})
        return Artifact(ArtifactKind.SCREENSHOT, unit_name, path)

    def capture_bytes(
        self, scoped: Any, unit_name: str, full_page: bool = True
    ) -> bytes | None:
        """
        Take a screenshot in memory, without writing a file.

        Raises:
            StaleResourceError: If ``scoped`` was already released
        """
        if scoped is None:
            return None
        page = scoped.page
        try:
            return page.screenshot(full_page=full_page)
        except Exception as e:
            self._report_failure("screenshot", unit_name, None, e)
            return None

    def _report_failure(
        self, what: str, unit_name: str, path: Path | None, e: Exception
    ) -> None:
        err = DiagnosticCaptureError(
            f"Failed to capture {what}", unit=unit_name, error=str(e)
        )
        err.__cause__ = e
        if path is not None:
            path.unlink(missing_ok=True)
        self._lg.warning(str(err), extra={"unit": unit_name})
