"""
Lifecycle of the shared browser and the per-unit browsing contexts.

The shared browser is launched at most once: concurrent callers of
``acquire_shared`` go through a double-checked lock, and a second call while
the browser is alive returns the same handle. Scoped resources are created on
top of it, one per unit, and ``release_scoped`` is a no-op for None or an
already released handle so teardown can run after a partial setup.

Playwright's sync objects are bound to the thread that created them. Running
units on several threads against one real browser therefore needs one
manager per worker process (e.g. pytest-xdist); the manager itself is
thread-safe.
"""

import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..artifacts import unique_path
from ..exceptions import InfrastructureError, StaleResourceError
from ..log import component_logger
from ..time import since, start
from .resources import LaunchOptions, ScopedOptions, ScopedResource, SharedResource


def _start_playwright() -> Any:
    from playwright.sync_api import sync_playwright

    return sync_playwright().start()


class ResourceLifecycleManager:
    """Owns the shared browser and mediates per-unit contexts."""

    def __init__(
        self,
        launch_options: LaunchOptions | None = None,
        lg: Any | None = None,
        driver_factory: Callable[[], Any] | None = None,
    ) -> None:
        """
        Initialize the manager.

        Args:
            launch_options: Default options for ``acquire_shared``
            lg: Logger (derived from the default root logger when omitted)
            driver_factory: Returns a started Playwright driver; defaults to
                ``sync_playwright().start()``
        """
        self.launch_options = launch_options or LaunchOptions()
        self._lg = component_logger(lg, ["e2e", "browser"])
        self._driver_factory = driver_factory or _start_playwright
        self._lock = threading.Lock()
        self._shared: SharedResource | None = None
        self._scoped_lock = threading.Lock()
        self._active: set[ScopedResource] = set()

    @property
    def shared(self) -> SharedResource | None:
        return self._shared

    @property
    def is_shared_alive(self) -> bool:
        shared = self._shared
        return shared is not None and shared.is_alive()

    @property
    def active_scoped_count(self) -> int:
        with self._scoped_lock:
            return len(self._active)

    # Shared resource

    def acquire_shared(self, options: LaunchOptions | None = None) -> SharedResource:
        """
        Launch the shared browser, or return it if already running.

        A browser that crashed or disconnected is dropped and relaunched.

        Raises:
            InfrastructureError: If the driver or browser failed to start
        """
        shared = self._shared
        if shared is not None and shared.is_alive():
            return shared

        with self._lock:
            if self._shared is not None and self._shared.is_alive():
                return self._shared
            if self._shared is not None:
                self._discard_dead(self._shared)
                self._shared = None
            self._shared = self._launch(options or self.launch_options)
            return self._shared

    def _discard_dead(self, shared: SharedResource) -> None:
        if shared.released:
            return
        self._lg.warning(
            "browser disconnected, relaunching", extra={"engine": shared.engine.value}
        )
        browser = shared.browser
        shared._mark_released()
        try:
            browser.close()
        except Exception as e:
            self._lg.debug("failed to close dead browser", extra={"error": str(e)})
        self._stop_driver(shared.driver)

    def _launch(self, options: LaunchOptions) -> SharedResource:
        start_t = start()
        extra = {"engine": options.engine.value, "headless": options.headless}
        self._lg.debug("launching browser", extra=extra)

        try:
            driver = self._driver_factory()
        except Exception as e:
            raise InfrastructureError(
                "Failed to start browser driver", engine=options.engine.value
            ) from e

        try:
            browser = options.engine.launcher(driver).launch(**options.launch_kwargs())
        except Exception as e:
            self._stop_driver(driver)
            raise InfrastructureError(
                "Failed to launch browser", engine=options.engine.value
            ) from e

        self._lg.info("browser launched", extra=extra | {"after": since(start_t)})
        return SharedResource(driver, browser, options)

    def _stop_driver(self, driver: Any) -> None:
        try:
            driver.stop()
        except Exception as e:
            self._lg.warning("failed to stop browser driver", extra={"error": str(e)})

    def release_shared(self) -> None:
        """
        Close the shared browser and forget it.

        A later ``acquire_shared`` launches a fresh browser. Calling this with
        no browser running is a no-op.

        Raises:
            InfrastructureError: If the browser failed to close (the handle
                is still dropped)
        """
        with self._lock:
            shared, self._shared = self._shared, None
        if shared is None or shared.released:
            return

        if self.active_scoped_count:
            self._lg.warning(
                "releasing browser with open contexts",
                extra={"open": self.active_scoped_count},
            )

        browser, driver = shared.browser, shared.driver
        shared._mark_released()
        try:
            browser.close()
        except Exception as e:
            raise InfrastructureError(
                "Failed to close browser", engine=shared.engine.value
            ) from e
        finally:
            self._stop_driver(driver)
        self._lg.info("browser closed", extra={"engine": shared.engine.value})

    # Scoped resources

    def acquire_scoped(
        self,
        shared: SharedResource | None = None,
        options: ScopedOptions | None = None,
        unit_name: str = "unit",
    ) -> ScopedResource:
        """
        Create an isolated browsing context and page for one unit.

        Raises:
            InfrastructureError: If no shared browser is running or the
                context could not be created
            StaleResourceError: If ``shared`` was already released
        """
        options = options or ScopedOptions()
        if shared is None:
            shared = self._shared
            if shared is not None and not shared.released and not shared.is_alive():
                shared = self.acquire_shared(shared.options)
        if shared is None:
            raise InfrastructureError("Shared browser is not running", unit=unit_name)
        if shared.released:
            raise StaleResourceError("Shared browser used after release", unit=unit_name)

        start_t = start()
        context = None
        try:
            context = shared.browser.new_context(**options.context_kwargs())
            context.set_default_timeout(options.default_timeout_ms)
            if options.record_trace:
                context.tracing.start(screenshots=True, snapshots=True)
            page = context.new_page()
        except Exception as e:
            if context is not None:
                self._close_quietly(context, unit_name)
            raise InfrastructureError(
                "Failed to create browser context", unit=unit_name
            ) from e

        scoped = ScopedResource(unit_name, context, page, options)
        with self._scoped_lock:
            self._active.add(scoped)
        self._lg.debug(
            "context created", extra={"unit": unit_name, "after": since(start_t)}
        )
        return scoped

    def _close_quietly(self, context: Any, unit_name: str) -> None:
        try:
            context.close()
        except Exception as e:
            self._lg.warning(
                "failed to close partial context",
                extra={"unit": unit_name, "error": str(e)},
            )

    def release_scoped(
        self, scoped: ScopedResource | None, keep_diagnostics: bool = False
    ) -> list[Path]:
        """
        Close a unit's browsing context.

        Traces are stored when ``keep_diagnostics`` is set. Videos are stored
        when ``keep_diagnostics`` or ``record_video_always`` is set and
        deleted otherwise. Failing to store a trace or video is logged, not
        raised.

        Returns:
            Paths of the diagnostic files kept

        Raises:
            InfrastructureError: If the context failed to close (the handle
                is released regardless)
        """
        if scoped is None or scoped.released:
            self._lg.trace("nothing to release")
            return []

        unit, options = scoped.unit_name, scoped.options
        context, page = scoped.context, scoped.page
        kept: list[Path] = []

        if options.record_trace:
            trace = self._stop_trace(context, unit, options, keep_diagnostics)
            if trace is not None:
                kept.append(trace)
        video = page.video if options.record_video else None

        with self._scoped_lock:
            self._active.discard(scoped)
        scoped._mark_released()
        try:
            context.close()
        except Exception as e:
            raise InfrastructureError("Failed to close browser context", unit=unit) from e
        finally:
            if video is not None:
                keep_video = keep_diagnostics or options.record_video_always
                stored = self._finish_video(video, unit, options, keep_video)
                if stored is not None:
                    kept.append(stored)

        self._lg.debug("context closed", extra={"unit": unit, "kept": len(kept)})
        return kept

    def _stop_trace(
        self, context: Any, unit: str, options: ScopedOptions, keep: bool
    ) -> Path | None:
        path = None
        try:
            if keep and options.trace_dir is not None:
                path = unique_path(options.trace_dir, unit, "zip")
                context.tracing.stop(path=str(path))
                return path
            context.tracing.stop()
        except Exception as e:
            if path is not None:
                path.unlink(missing_ok=True)
            self._lg.warning("failed to save trace", extra={"unit": unit, "error": str(e)})
        return None

    def _finish_video(
        self, video: Any, unit: str, options: ScopedOptions, keep: bool
    ) -> Path | None:
        path = None
        if keep and options.video_dir is not None:
            try:
                path = unique_path(options.video_dir, unit, "webm")
                video.save_as(str(path))
            except Exception as e:
                if path is not None:
                    path.unlink(missing_ok=True)
                    path = None
                self._lg.warning(
                    "failed to save video", extra={"unit": unit, "error": str(e)}
                )
        try:
            video.delete()
        except Exception as e:
            self._lg.warning(
                "failed to delete recorded video", extra={"unit": unit, "error": str(e)}
            )
        return path
