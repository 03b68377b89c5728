"""
Test session lifecycle.

The orchestrator is a state machine driven by the test runner:

    NOT_STARTED --suite_start--> SUITE_READY --suite_end--> SUITE_TORN_DOWN
                                   |     ^
                         unit_start|     |unit_end
                                   v     |
                                UNIT_RUNNING  (per worker thread)

Suite state is shared by all workers. Each worker thread runs at most one
unit at a time; its unit's handles live in the ExecutionContextStore, so
units on different threads never see each other's page or API data.

On a failed unit the failure screenshot is taken strictly before the unit's
context is closed, and the store is cleared on every exit path.

Example Usage:
    orch = LifecycleOrchestrator.from_settings(load_settings("e2e.yaml"))
    orch.suite_start()
    with orch.unit("login works") as scoped:
        scoped.page.goto(url)
        ...
    orch.suite_end()
"""

import contextlib
import json
import threading
from collections.abc import Callable, Generator
from dataclasses import replace
from pathlib import Path
from typing import Any

from ..artifacts import ArtifactCapture, ArtifactLayout
from ..browser import (
    LaunchOptions,
    ResourceLifecycleManager,
    ScopedOptions,
    ScopedResource,
)
from ..context import ExecutionContextStore, Slot
from ..exceptions import InfrastructureError, LifecycleError
from ..log import component_logger
from ..time import since, start
from .events import (
    LifecycleEvent,
    Outcome,
    SessionState,
    SuiteEnd,
    SuiteStart,
    UnitEnd,
    UnitSkipped,
    UnitStart,
)
from .hooks import HookEvent, SessionHooks
from .results import ResultLog, UnitResult

API_ATTACHMENT_NAME = "API Request/Response"
SCREENSHOT_ATTACHMENT_NAME = "Screenshot on failure"


def format_api_exchange(request: Any, status: int | None, response: Any) -> str:
    """
    Render a captured API exchange as a plain-text report attachment.

    Returns an empty string when nothing was captured.
    """

    def render(value: Any) -> str:
        if isinstance(value, (dict, list)):
            try:
                return json.dumps(value, indent=2, sort_keys=True, default=str)
            except (TypeError, ValueError):
                # unsortable or circular
                return repr(value)
        return str(value)

    out = ""
    if request is not None:
        out += f"=== API REQUEST ===\n{render(request)}\n\n"
    if status is not None:
        out += f"=== RESPONSE STATUS ===\nStatus Code: {status}\n\n"
    if response is not None:
        out += f"=== API RESPONSE ===\n{render(response)}\n\n"
    return out


class LifecycleOrchestrator:
    """Sequences shared and per-unit resources, context and failure capture."""

    def __init__(
        self,
        manager: ResourceLifecycleManager | None = None,
        store: ExecutionContextStore | None = None,
        layout: ArtifactLayout | None = None,
        capture: ArtifactCapture | None = None,
        hooks: SessionHooks | None = None,
        results: ResultLog | None = None,
        scoped_options: ScopedOptions | None = None,
        lg: Any | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            manager: Browser resource manager
            store: Execution context store shared with test code
            layout: Artifact directory layout
            capture: Failure capture (built from ``layout`` when omitted)
            hooks: Reporting hooks
            results: Result log
            scoped_options: Options for each unit's context; video and trace
                directories default to the layout's
            lg: Logger (derived from the default root logger when omitted)
        """
        self._lg = component_logger(lg, ["e2e", "lifecycle"])
        self.manager = manager or ResourceLifecycleManager(lg=lg)
        self.store = store or ExecutionContextStore()
        self.layout = layout or ArtifactLayout()
        self.capture = capture or ArtifactCapture(self.layout, lg=lg)
        self.hooks = hooks or SessionHooks(lg=lg)
        self.results = results or ResultLog()
        self.scoped_options = self._with_layout_dirs(scoped_options or ScopedOptions())

        self._state_lock = threading.Lock()
        self._state = SessionState.NOT_STARTED
        self._local = threading.local()

    @classmethod
    def from_settings(
        cls,
        settings: Any,
        lg: Any | None = None,
        driver_factory: Callable[[], Any] | None = None,
        **kwargs: Any,
    ) -> "LifecycleOrchestrator":
        """Build an orchestrator from a SessionSettings instance."""
        manager = ResourceLifecycleManager(
            settings.launch_options(), lg=lg, driver_factory=driver_factory
        )
        layout = settings.artifact_layout()
        return cls(
            manager=manager,
            layout=layout,
            scoped_options=settings.scoped_options(layout),
            lg=lg,
            **kwargs,
        )

    def _with_layout_dirs(self, options: ScopedOptions) -> ScopedOptions:
        return replace(
            options,
            video_dir=options.video_dir or self.layout.videos_dir,
            trace_dir=options.trace_dir or self.layout.traces_dir,
        )

    # State

    @property
    def suite_state(self) -> SessionState:
        """Shared suite state (never UNIT_RUNNING)."""
        return self._state

    @property
    def state(self) -> SessionState:
        """State as seen from the calling worker thread."""
        state = self._state
        if state is SessionState.SUITE_READY and self.store.has(Slot.UNIT_NAME):
            return SessionState.UNIT_RUNNING
        return state

    def reset(self) -> None:
        """
        Allow another suite run after suite_end.

        Raises:
            LifecycleError: If the suite is still running
        """
        with self._state_lock:
            if self._state is SessionState.SUITE_READY:
                raise LifecycleError("Cannot reset a running suite")
            self._state = SessionState.NOT_STARTED

    def handle(self, event: LifecycleEvent) -> Any:
        """Dispatch a lifecycle event to the matching transition."""
        if isinstance(event, SuiteStart):
            return self.suite_start()
        if isinstance(event, UnitStart):
            return self.unit_start(event.name)
        if isinstance(event, UnitEnd):
            return self.unit_end(event.outcome, event.error)
        if isinstance(event, SuiteEnd):
            return self.suite_end()
        raise LifecycleError("Unknown lifecycle event", event=repr(event))

    # Suite transitions

    def suite_start(self, options: LaunchOptions | None = None) -> None:
        """
        Launch the shared browser (if not running) and enter SUITE_READY.

        Raises:
            LifecycleError: If the suite was torn down and not reset
            InfrastructureError: If the browser failed to launch
        """
        with self._state_lock:
            if self._state is SessionState.SUITE_TORN_DOWN:
                raise LifecycleError("Suite already torn down, call reset() first")
            self.layout.initialize()
            shared = self.manager.acquire_shared(options)
            first = self._state is SessionState.NOT_STARTED
            self._state = SessionState.SUITE_READY

        if first:
            self._lg.info(
                "suite started",
                extra={"engine": shared.engine.value, "artifacts": self.layout.root},
            )
            self.hooks.trigger(HookEvent.SUITE_START)

    def suite_end(self) -> None:
        """
        Close the shared browser and enter SUITE_TORN_DOWN.

        Calling it again, or before suite_start, is a no-op.

        Raises:
            InfrastructureError: If the browser failed to close
        """
        with self._state_lock:
            if self._state is not SessionState.SUITE_READY:
                return
            self._state = SessionState.SUITE_TORN_DOWN
            try:
                self.manager.release_shared()
            finally:
                summary = self.results.summary()
                self._lg.info(
                    "suite finished",
                    extra={
                        "total": summary.total,
                        "passed": summary.passed,
                        "failed": summary.failed,
                        "skipped": summary.skipped,
                    },
                )
                self.hooks.trigger(HookEvent.SUITE_END, result=summary)

    # Unit transitions

    def unit_start(self, name: str) -> ScopedResource:
        """
        Create the unit's browsing context and publish it to the store.

        Raises:
            LifecycleError: If the suite is not ready or this thread is
                already running a unit
            InfrastructureError: If the context could not be created; the
                unit is recorded as an infrastructure failure
        """
        if self._state is not SessionState.SUITE_READY:
            raise LifecycleError(
                "Unit started outside a running suite",
                unit=name,
                state=self._state.value,
            )
        if self.store.has(Slot.UNIT_NAME):
            raise LifecycleError(
                "Worker is already running a unit",
                unit=name,
                running=self.store.unit_name,
            )

        self._local.start_t = start()
        self.store.unit_name = name
        try:
            scoped = self.manager.acquire_scoped(
                options=self.scoped_options, unit_name=name
            )
        except InfrastructureError as e:
            self.store.clear()
            self._record(name, Outcome.FAILED, e, (), infrastructure=True)
            self._lg.error(
                "unit aborted, resource acquisition failed",
                extra={"unit": name, "error": str(e)},
            )
            raise

        self.store.scoped = scoped
        self.store.browser_context = scoped.context
        self.store.page = scoped.page
        self._lg.debug("unit started", extra={"unit": name})
        self.hooks.trigger(HookEvent.UNIT_START, unit_name=name)
        return scoped

    def unit_end(
        self, outcome: Outcome, error: BaseException | None = None
    ) -> UnitResult:
        """
        End the calling thread's unit.

        A failed unit gets a failure screenshot before its context is closed.
        The captured API exchange is attached, the context released and the
        store cleared, in that order. Release, clearing and recording happen
        even when an earlier step raises.

        Raises:
            LifecycleError: If this thread is not running a unit
            InfrastructureError: If the context failed to close (the unit is
                still recorded and the store cleared)
        """
        name = self.store.unit_name
        if name is None:
            raise LifecycleError("No unit running on this worker")

        scoped = self.store.scoped
        failed = outcome is Outcome.FAILED
        artifacts: list[Path] = []
        release_error: InfrastructureError | None = None

        try:
            try:
                if failed:
                    self._capture_failure(scoped, name, artifacts)
                self._attach_api_exchange(name)
            finally:
                try:
                    artifacts.extend(
                        self.manager.release_scoped(scoped, keep_diagnostics=failed)
                    )
                except InfrastructureError as e:
                    release_error = e
                    self._lg.error(
                        "failed to release unit resources",
                        extra={"unit": name, "error": str(e)},
                    )
        finally:
            self.store.clear()
            result = self._record(name, outcome, error or release_error, artifacts)

        if release_error is not None:
            raise release_error
        return result

    def _capture_failure(
        self, scoped: ScopedResource | None, name: str, artifacts: list[Path]
    ) -> None:
        path = self.capture.capture(scoped, name)
        if path is None:
            return
        artifacts.append(path)
        self.hooks.trigger(
            HookEvent.ARTIFACT_CAPTURED, unit_name=name, artifact_path=path
        )
        try:
            content = path.read_bytes()
        except OSError as e:
            self._lg.warning(
                "failed to read screenshot for attachment",
                extra={"unit": name, "error": str(e)},
            )
            return
        self.hooks.trigger(
            HookEvent.ATTACHMENT,
            unit_name=name,
            attachment_name=SCREENSHOT_ATTACHMENT_NAME,
            content=content,
            mime_type="image/png",
            artifact_path=path,
        )

    def _attach_api_exchange(self, name: str) -> None:
        try:
            text = format_api_exchange(
                self.store.api_request,
                self.store.api_response_status,
                self.store.api_response,
            )
        except Exception as e:
            self._lg.warning(
                "failed to render api exchange",
                extra={"unit": name, "exception": e},
            )
            return
        if not text:
            self._lg.trace("no api exchange captured", extra={"unit": name})
            return
        self.hooks.trigger(
            HookEvent.ATTACHMENT,
            unit_name=name,
            attachment_name=API_ATTACHMENT_NAME,
            content=text,
            mime_type="text/plain",
        )
        self._lg.debug("api exchange attached", extra={"unit": name})

    def _record(
        self,
        name: str,
        outcome: Outcome,
        error: BaseException | None,
        artifacts: list[Path] | tuple[Path, ...],
        infrastructure: bool = False,
    ) -> UnitResult:
        start_t = getattr(self._local, "start_t", None)
        result = UnitResult(
            name=name,
            outcome=outcome,
            duration=since(start_t) if start_t is not None else 0.0,
            error=f"{type(error).__name__}: {error}" if error is not None else None,
            artifacts=tuple(artifacts),
            infrastructure=infrastructure,
        )
        self.results.append(result)

        log = self._lg.warning if result.failed else self._lg.info
        log(
            "unit finished",
            extra={
                "unit": name,
                "outcome": outcome.value,
                "after": result.duration,
                "artifacts": len(result.artifacts),
            },
        )
        self.hooks.trigger(
            HookEvent.UNIT_END,
            unit_name=name,
            outcome=outcome,
            duration=result.duration,
            error=error,
            result=result,
        )
        return result

    @contextlib.contextmanager
    def unit(self, name: str) -> Generator[ScopedResource, None, None]:
        """
        Run a block as one unit.

        AssertionError and any other exception end the unit as failed,
        UnitSkipped as skipped. The exception is re-raised either way. A
        teardown error never replaces the block's own exception.
        """
        scoped = self.unit_start(name)
        outcome, error = Outcome.PASSED, None
        try:
            yield scoped
        except UnitSkipped as e:
            outcome, error = Outcome.SKIPPED, e
            raise
        except BaseException as e:
            outcome, error = Outcome.FAILED, e
            raise
        finally:
            try:
                self.unit_end(outcome, error)
            except Exception as e:
                if error is None:
                    raise
                self._lg.warning(
                    "unit teardown failed", extra={"unit": name, "error": str(e)}
                )
