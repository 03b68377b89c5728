"""
Session hooks for reporting collaborators.

Reporters register callbacks for lifecycle events: a unit ending, a failure
screenshot being captured, an attachment (screenshot bytes, API exchange)
becoming available. Callback errors are logged and never interrupt the
lifecycle.

Example:
    hooks = SessionHooks()

    @hooks.on(HookEvent.ATTACHMENT)
    def embed(ctx: HookContext) -> None:
        report.attach(ctx.unit_name, ctx.attachment_name, ctx.content, ctx.mime_type)
"""

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from ..log import component_logger


class HookEvent(Enum):
    """Event types for session hooks."""

    SUITE_START = "suite_start"
    UNIT_START = "unit_start"
    UNIT_END = "unit_end"
    ARTIFACT_CAPTURED = "artifact_captured"
    ATTACHMENT = "attachment"
    SUITE_END = "suite_end"


@dataclass
class HookContext:
    """
    Context information passed to session hooks.

    Only the fields relevant to the event are set.
    """

    event: HookEvent
    timestamp: float = field(default_factory=time.time)
    data: dict[str, Any] = field(default_factory=dict)

    unit_name: str | None = None
    outcome: Any = None
    duration: float | None = None
    error: BaseException | None = None
    result: Any = None
    artifact_path: Path | None = None
    attachment_name: str | None = None
    content: bytes | str | None = None
    mime_type: str | None = None


_CONTEXT_FIELDS = frozenset(HookContext.__dataclass_fields__) - {"event", "data"}


class SessionHooks:
    """
    Callback registry for session events.

    Registration is locked; callbacks run on the thread that triggered the
    event, so a callback may be invoked from several worker threads at once.
    """

    def __init__(self, lg: Any | None = None) -> None:
        self._lock = threading.Lock()
        self._hooks: dict[HookEvent, list[Callable[[HookContext], None]]] = {}
        self._global_hooks: list[Callable[[HookContext], None]] = []
        self._enabled = True
        self._lg = component_logger(lg, ["e2e", "hooks"])

    def register(
        self, event: HookEvent, callback: Callable[[HookContext], None]
    ) -> None:
        """Register a callback for a specific event."""
        with self._lock:
            self._hooks.setdefault(event, []).append(callback)

    def on(self, event: HookEvent) -> Callable:
        """
        Decorator for registering event callbacks.

        Example:
            @hooks.on(HookEvent.UNIT_END)
            def record(ctx: HookContext):
                lg.info("unit ended", extra={"outcome": ctx.outcome.value})
        """

        def decorator(callback: Callable[[HookContext], None]) -> Callable:
            self.register(event, callback)
            return callback

        return decorator

    def register_global(self, callback: Callable[[HookContext], None]) -> None:
        """Register a callback that receives all events."""
        with self._lock:
            self._global_hooks.append(callback)

    def unregister(
        self, event: HookEvent, callback: Callable[[HookContext], None]
    ) -> bool:
        """Unregister a callback; returns True if it was registered."""
        with self._lock:
            callbacks = self._hooks.get(event, [])
            if callback in callbacks:
                callbacks.remove(callback)
                return True
        return False

    def clear(self, event: HookEvent | None = None) -> None:
        """Clear callbacks of one event, or of all events when None."""
        with self._lock:
            if event is None:
                self._hooks.clear()
                self._global_hooks.clear()
            elif event in self._hooks:
                self._hooks[event].clear()

    def trigger(self, event: HookEvent, **kwargs: Any) -> HookContext:
        """
        Run every callback registered for ``event``.

        Keyword arguments naming a HookContext field set that field; all of
        them are also available in ``context.data``.
        """
        context = HookContext(
            event=event,
            data=kwargs,
            **{k: v for k, v in kwargs.items() if k in _CONTEXT_FIELDS},
        )
        if not self._enabled:
            return context

        with self._lock:
            callbacks = list(self._hooks.get(event, ())) + list(self._global_hooks)
        for callback in callbacks:
            try:
                callback(context)
            except Exception as e:
                self._lg.warning(
                    "session hook failed",
                    extra={"hook_event": event.value, "error": str(e)},
                )
        return context

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    def has_callbacks(self, event: HookEvent) -> bool:
        with self._lock:
            return bool(self._hooks.get(event)) or bool(self._global_hooks)
