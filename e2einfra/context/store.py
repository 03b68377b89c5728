"""
Thread-isolated execution context.

Each worker thread sees only its own slots, so units running in parallel
never observe each other's page or captured API data. No lock is needed for
the slots themselves: isolation comes from ``threading.local``.

Example Usage:
    store = ExecutionContextStore()

    with store.scope():
        store.page = scoped.page
        store.api_request = payload
        ...
    # slots of this thread are cleared here, on every exit path
"""

import contextlib
import threading
from collections.abc import Generator
from typing import Any

from .slots import Slot


class ExecutionContextStore:
    """Per-thread mapping from Slot to value."""

    def __init__(self) -> None:
        self._local = threading.local()

    def _slots(self) -> dict[Slot, Any]:
        slots = getattr(self._local, "slots", None)
        if slots is None:
            slots = {}
            self._local.slots = slots
        return slots

    @staticmethod
    def _slot(slot: Slot | str) -> Slot:
        return slot if isinstance(slot, Slot) else Slot(slot)

    def get(self, slot: Slot | str, default: Any = None) -> Any:
        """Value of ``slot`` for the calling thread, or ``default``."""
        return self._slots().get(self._slot(slot), default)

    def set(self, slot: Slot | str, value: Any) -> None:
        """Set ``slot`` for the calling thread; None unsets it."""
        slot = self._slot(slot)
        if value is None:
            self._slots().pop(slot, None)
        else:
            self._slots()[slot] = value

    def has(self, slot: Slot | str) -> bool:
        return self._slot(slot) in self._slots()

    def clear(self) -> None:
        """Remove every slot of the calling thread. Other threads are untouched."""
        self._slots().clear()

    def snapshot(self) -> dict[Slot, Any]:
        """Copy of the calling thread's slots."""
        return dict(self._slots())

    @contextlib.contextmanager
    def scope(self) -> Generator["ExecutionContextStore", None, None]:
        """Yield the store and clear the calling thread's slots on exit."""
        try:
            yield self
        finally:
            self.clear()

    # Typed accessors

    @property
    def page(self) -> Any:
        return self.get(Slot.PAGE)

    @page.setter
    def page(self, value: Any) -> None:
        self.set(Slot.PAGE, value)

    @property
    def browser_context(self) -> Any:
        return self.get(Slot.BROWSER_CONTEXT)

    @browser_context.setter
    def browser_context(self, value: Any) -> None:
        self.set(Slot.BROWSER_CONTEXT, value)

    @property
    def scoped(self) -> Any:
        return self.get(Slot.SCOPED_RESOURCE)

    @scoped.setter
    def scoped(self, value: Any) -> None:
        self.set(Slot.SCOPED_RESOURCE, value)

    @property
    def unit_name(self) -> str | None:
        return self.get(Slot.UNIT_NAME)

    @unit_name.setter
    def unit_name(self, value: str | None) -> None:
        self.set(Slot.UNIT_NAME, value)

    @property
    def api_request(self) -> Any:
        return self.get(Slot.API_REQUEST)

    @api_request.setter
    def api_request(self, value: Any) -> None:
        self.set(Slot.API_REQUEST, value)

    @property
    def api_response(self) -> Any:
        return self.get(Slot.API_RESPONSE)

    @api_response.setter
    def api_response(self, value: Any) -> None:
        self.set(Slot.API_RESPONSE, value)

    @property
    def api_response_status(self) -> int | None:
        return self.get(Slot.API_RESPONSE_STATUS)

    @api_response_status.setter
    def api_response_status(self, value: int | None) -> None:
        self.set(Slot.API_RESPONSE_STATUS, value)
