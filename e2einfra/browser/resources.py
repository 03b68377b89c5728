"""
Handles for the shared browser and the per-unit browsing context.

Both handles fail fast once released: touching ``browser``, ``context`` or
``page`` on a released handle raises StaleResourceError instead of handing
out a dead Playwright object.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ..exceptions import StaleResourceError
from .engine import BrowserEngine

DEFAULT_INTERACTION_TIMEOUT_MS = 30000


@dataclass(frozen=True)
class LaunchOptions:
    """Options for launching the shared browser process."""

    engine: BrowserEngine = BrowserEngine.CHROMIUM
    headless: bool = True
    slow_mo_ms: int = 0
    args: tuple[str, ...] = ()

    def launch_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {"headless": self.headless}
        if self.slow_mo_ms:
            kwargs["slow_mo"] = self.slow_mo_ms
        if self.args:
            kwargs["args"] = list(self.args)
        return kwargs


@dataclass(frozen=True)
class ScopedOptions:
    """
    Options for one unit's browsing context.

    Attributes:
        default_timeout_ms: Default timeout for page interactions
        record_video: Record a video of the unit into ``video_dir``
        record_video_always: Keep the video even when the unit passed
        record_trace: Record a Playwright trace, stored in ``trace_dir`` when kept
        viewport: Viewport size, e.g. ``{"width": 1280, "height": 800}``
    """

    default_timeout_ms: int = DEFAULT_INTERACTION_TIMEOUT_MS
    record_video: bool = False
    record_video_always: bool = False
    record_trace: bool = False
    viewport: dict[str, int] | None = None
    video_dir: Path | None = None
    trace_dir: Path | None = None

    def context_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {}
        if self.viewport:
            kwargs["viewport"] = dict(self.viewport)
        if self.record_video:
            if self.video_dir is None:
                raise ValueError("record_video requires video_dir")
            kwargs["record_video_dir"] = str(self.video_dir)
        return kwargs


class SharedResource:
    """The browser process shared by every unit of a run."""

    def __init__(
        self, driver: Any, browser: Any, options: LaunchOptions
    ) -> None:
        self._driver = driver
        self._browser = browser
        self.options = options
        self._released = False

    @property
    def engine(self) -> BrowserEngine:
        return self.options.engine

    @property
    def released(self) -> bool:
        return self._released

    @property
    def browser(self) -> Any:
        """
        The Playwright Browser.

        Raises:
            StaleResourceError: If the shared resource was released
        """
        if self._released:
            raise StaleResourceError(
                "Shared browser used after release", engine=self.engine.value
            )
        return self._browser

    @property
    def driver(self) -> Any:
        return self._driver

    def is_alive(self) -> bool:
        """True while not released and the browser is still connected."""
        if self._released:
            return False
        try:
            return bool(self._browser.is_connected())
        except Exception:
            return False

    def _mark_released(self) -> None:
        self._released = True

    def __repr__(self) -> str:
        state = "released" if self._released else "live"
        return f"SharedResource(engine={self.engine.value}, {state})"


@dataclass(eq=False)
class ScopedResource:
    """An isolated browsing context and its active page, owned by one unit."""

    unit_name: str
    _context: Any
    _page: Any
    options: ScopedOptions = field(default_factory=ScopedOptions)
    _released: bool = False

    @property
    def released(self) -> bool:
        return self._released

    def _check(self, what: str) -> None:
        if self._released:
            raise StaleResourceError(
                f"Scoped {what} used after release", unit=self.unit_name
            )

    @property
    def context(self) -> Any:
        """
        The Playwright BrowserContext.

        Raises:
            StaleResourceError: If the scoped resource was released
        """
        self._check("context")
        return self._context

    @property
    def page(self) -> Any:
        """
        The active Playwright Page.

        Raises:
            StaleResourceError: If the scoped resource was released
        """
        self._check("page")
        return self._page

    def _mark_released(self) -> None:
        self._released = True
