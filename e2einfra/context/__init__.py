"""Per-thread execution context shared between lifecycle hooks and test code."""

from .slots import API_SLOTS, Slot
from .store import ExecutionContextStore

__all__ = ["ExecutionContextStore", "Slot", "API_SLOTS"]
