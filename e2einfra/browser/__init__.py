"""Shared browser and per-unit browsing context management."""

from .engine import BrowserEngine
from .manager import ResourceLifecycleManager
from .resources import (
    DEFAULT_INTERACTION_TIMEOUT_MS,
    LaunchOptions,
    ScopedOptions,
    ScopedResource,
    SharedResource,
)

__all__ = [
    "BrowserEngine",
    "ResourceLifecycleManager",
    "LaunchOptions",
    "ScopedOptions",
    "ScopedResource",
    "SharedResource",
    "DEFAULT_INTERACTION_TIMEOUT_MS",
]
