"""
Browser engine selection.

The engine is a closed set of variants. Each variant maps to the launcher
attribute of the Playwright driver that starts it, so adding an engine means
adding one enum member and one table row.
"""

from collections.abc import Callable
from enum import Enum
from typing import Any

from ..exceptions import ConfigError


class BrowserEngine(Enum):
    """Supported browser engines."""

    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"

    @classmethod
    def parse(cls, value: "str | BrowserEngine") -> "BrowserEngine":
        """
        Resolve an engine from its name or a common alias.

        Example:
            >>> BrowserEngine.parse("Chrome")
            <BrowserEngine.CHROMIUM: 'chromium'>

        Raises:
            ConfigError: If the name matches no engine
        """
        if isinstance(value, BrowserEngine):
            return value
        key = str(value).strip().lower()
        engine = _ALIASES.get(key)
        if engine is None:
            raise ConfigError(
                f"Unknown browser engine: {value}",
                valid=", ".join(sorted(_ALIASES)),
            )
        return engine

    def launcher(self, driver: Any) -> Any:
        """Return the driver's launcher for this engine (``driver.chromium`` etc)."""
        return _LAUNCHERS[self](driver)


_ALIASES: dict[str, BrowserEngine] = {
    "chromium": BrowserEngine.CHROMIUM,
    "chromium-like": BrowserEngine.CHROMIUM,
    "chrome": BrowserEngine.CHROMIUM,
    "edge": BrowserEngine.CHROMIUM,
    "firefox": BrowserEngine.FIREFOX,
    "firefox-like": BrowserEngine.FIREFOX,
    "webkit": BrowserEngine.WEBKIT,
    "webkit-like": BrowserEngine.WEBKIT,
    "safari": BrowserEngine.WEBKIT,
}

_LAUNCHERS: dict[BrowserEngine, Callable[[Any], Any]] = {
    BrowserEngine.CHROMIUM: lambda driver: driver.chromium,
    BrowserEngine.FIREFOX: lambda driver: driver.firefox,
    BrowserEngine.WEBKIT: lambda driver: driver.webkit,
}
