from importlib.metadata import PackageNotFoundError, version
from typing import TYPE_CHECKING

# Lazy import for the accessibility and config layers - only loaded when accessed
if TYPE_CHECKING:
    from . import a11y, config

from .artifacts import Artifact, ArtifactCapture, ArtifactKind, ArtifactLayout
from .browser import (
    BrowserEngine,
    LaunchOptions,
    ResourceLifecycleManager,
    ScopedOptions,
    ScopedResource,
    SharedResource,
)
from .context import ExecutionContextStore, Slot
from .exceptions import (
    ConfigError,
    DiagnosticCaptureError,
    E2EError,
    InfrastructureError,
    LifecycleError,
    RetryExhaustedError,
    StaleResourceError,
    ValidationError,
    WaitTimeoutError,
)
from .lifecycle import (
    HookEvent,
    LifecycleOrchestrator,
    Outcome,
    SessionHooks,
    SessionState,
    UnitSkipped,
)
from .retry import Retrier, RetryResult, retry, retrying
from .wait import Waiter, wait_for, wait_for_element

# Version is read from package metadata (pyproject.toml)
try:
    __version__ = version("e2einfra")
except PackageNotFoundError:
    # Package not installed, use fallback (development mode)
    __version__ = "0.1.0-dev"

# Explicit public API
__all__ = [
    # Version
    "__version__",
    # Modules
    "a11y",
    "config",
    # Wait / retry
    "Waiter",
    "wait_for",
    "wait_for_element",
    "Retrier",
    "RetryResult",
    "retry",
    "retrying",
    # Browser resources
    "BrowserEngine",
    "LaunchOptions",
    "ScopedOptions",
    "SharedResource",
    "ScopedResource",
    "ResourceLifecycleManager",
    # Execution context
    "ExecutionContextStore",
    "Slot",
    # Lifecycle
    "LifecycleOrchestrator",
    "Outcome",
    "SessionState",
    "SessionHooks",
    "HookEvent",
    "UnitSkipped",
    # Artifacts
    "Artifact",
    "ArtifactCapture",
    "ArtifactKind",
    "ArtifactLayout",
    # Exceptions
    "E2EError",
    "ConfigError",
    "ValidationError",
    "InfrastructureError",
    "StaleResourceError",
    "LifecycleError",
    "WaitTimeoutError",
    "RetryExhaustedError",
    "DiagnosticCaptureError",
]


def __getattr__(name: str) -> object:
    """Lazy import for the a11y and config subpackages."""
    import importlib

    if name in ("a11y", "config"):
        module = importlib.import_module(f".{name}", __name__)
        globals()[name] = module
        return module
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
