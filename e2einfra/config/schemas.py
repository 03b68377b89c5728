"""
Validated session settings.

``SessionSettings`` is the configuration surface the framework consumes. It
is built from a Config (YAML file + ``E2E_*`` environment overrides) and
turns into the option objects of the browser, artifact, wait, retry and
accessibility layers.

Example e2e.yaml:
    browser:
      engine: firefox
      headless: false
      default_interaction_timeout_ms: 15000
    video:
      record: true
    a11y:
      strict_mode: true
      whitelist: etc/a11y-whitelist.yaml
"""

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from ..a11y import DEFAULT_TAGS, ViolationFilter, Whitelist
from ..artifacts import DEFAULT_ARTIFACT_ROOT, ArtifactLayout
from ..browser import (
    DEFAULT_INTERACTION_TIMEOUT_MS,
    BrowserEngine,
    LaunchOptions,
    ScopedOptions,
)
from ..exceptions import ConfigError
from ..log import LogConfig
from ..retry import DEFAULT_BASE_DELAY_MS, DEFAULT_MAX_ATTEMPTS, Retrier
from ..wait import DEFAULT_POLL_INTERVAL_MS, DEFAULT_TIMEOUT_MS, Waiter
from .config import Config
from .constants import CONFIG_FILE_ENV, DEFAULT_ENV_PREFIX


class BrowserSettings(BaseModel):
    """Shared browser and per-unit context settings."""

    engine: BrowserEngine = Field(
        default=BrowserEngine.CHROMIUM, description="chromium, firefox or webkit"
    )
    headless: bool = Field(default=True, description="Run without a visible window")
    default_interaction_timeout_ms: int = Field(
        default=DEFAULT_INTERACTION_TIMEOUT_MS, ge=0
    )
    slow_mo_ms: int = Field(default=0, ge=0, description="Delay between actions")
    viewport: dict[str, int] | None = Field(
        default=None, description='e.g. {"width": 1280, "height": 800}'
    )

    @field_validator("engine", mode="before")
    @classmethod
    def parse_engine(cls, v: Any) -> BrowserEngine:
        """Accept engine names and aliases (chrome, safari, chromium-like, ...)."""
        try:
            return BrowserEngine.parse(v)
        except ConfigError as e:
            raise ValueError(str(e)) from None

    model_config = ConfigDict(extra="allow")


class VideoSettings(BaseModel):
    record: bool = Field(default=False, description="Record a video of each unit")
    record_always: bool = Field(
        default=False, description="Keep videos of passed units too"
    )


class TraceSettings(BaseModel):
    record: bool = Field(default=False, description="Record Playwright traces")


class A11ySettings(BaseModel):
    """Accessibility scan settings."""

    strict_mode: bool = Field(
        default=False, description="Fail units on blocking violations"
    )
    whitelist: Path | None = Field(default=None, description="JSON or YAML file")
    tags: list[str] = Field(default_factory=lambda: list(DEFAULT_TAGS))
    axe_script: Path | None = Field(
        default=None, description="Local axe-core script (loaded from CDN if unset)"
    )

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [t.strip() for t in v.split(",") if t.strip()]
        return v


class ArtifactSettings(BaseModel):
    root: Path = Field(default=DEFAULT_ARTIFACT_ROOT)


class WaitSettings(BaseModel):
    timeout_ms: int = Field(default=DEFAULT_TIMEOUT_MS, ge=0)
    poll_interval_ms: int = Field(default=DEFAULT_POLL_INTERVAL_MS, gt=0)


class RetrySettings(BaseModel):
    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    base_delay_ms: int = Field(default=DEFAULT_BASE_DELAY_MS, ge=0)


class LoggingSettings(BaseModel):
    """Configuration for logging."""

    level: str | bool = Field(default="info", description="Global log level")
    location: bool | int = Field(default=False, description="Show file locations")
    micros: bool = Field(default=False, description="Show microsecond timestamps")
    colors: bool = Field(default=True, description="Colored console output")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v: Any) -> Any:
        """Validate log level is a recognized level."""
        valid_levels = ["TRACE2", "TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if isinstance(v, str) and v.upper() not in valid_levels + ["FALSE"]:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(valid_levels)}"
            )
        return v


class SessionSettings(BaseModel):
    """Complete configuration schema of an e2e session."""

    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    video: VideoSettings = Field(default_factory=VideoSettings)
    trace: TraceSettings = Field(default_factory=TraceSettings)
    a11y: A11ySettings = Field(default_factory=A11ySettings)
    artifacts: ArtifactSettings = Field(default_factory=ArtifactSettings)
    wait: WaitSettings = Field(default_factory=WaitSettings)
    retry: RetrySettings = Field(default_factory=RetrySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    # Allow additional application-specific sections
    model_config = ConfigDict(extra="allow")

    @classmethod
    def from_config(cls, config: Config) -> "SessionSettings":
        """
        Validate a Config.

        Raises:
            ConfigError: If a value is rejected by the schema
        """
        try:
            return cls.model_validate(config.dict())
        except PydanticValidationError as e:
            raise ConfigError(
                "Invalid session configuration",
                path=str(config.path) if config.path else None,
                errors=e.error_count(),
            ) from e

    def launch_options(self) -> LaunchOptions:
        return LaunchOptions(
            engine=self.browser.engine,
            headless=self.browser.headless,
            slow_mo_ms=self.browser.slow_mo_ms,
        )

    def artifact_layout(self) -> ArtifactLayout:
        return ArtifactLayout(self.artifacts.root)

    def scoped_options(self, layout: ArtifactLayout | None = None) -> ScopedOptions:
        layout = layout or self.artifact_layout()
        return ScopedOptions(
            default_timeout_ms=self.browser.default_interaction_timeout_ms,
            record_video=self.video.record,
            record_video_always=self.video.record_always,
            record_trace=self.trace.record,
            viewport=self.browser.viewport,
            video_dir=layout.videos_dir,
            trace_dir=layout.traces_dir,
        )

    def log_config(self) -> LogConfig:
        return LogConfig.from_params(
            self.logging.level,
            self.logging.location,
            self.logging.micros,
            self.logging.colors,
        )

    def waiter(self, lg: Any | None = None) -> Waiter:
        return Waiter(self.wait.timeout_ms, self.wait.poll_interval_ms, lg=lg)

    def retrier(self, lg: Any | None = None) -> Retrier:
        return Retrier(self.retry.max_attempts, self.retry.base_delay_ms, lg=lg)

    def whitelist(self) -> Whitelist:
        """
        Load the configured whitelist, or an empty one.

        Raises:
            ValidationError: If the whitelist file is missing or malformed
        """
        if self.a11y.whitelist is None:
            return Whitelist()
        return Whitelist.load(self.a11y.whitelist)

    def violation_filter(self, lg: Any | None = None) -> ViolationFilter:
        return ViolationFilter(self.whitelist(), strict=self.a11y.strict_mode, lg=lg)


def load_settings(
    path: str | Path | None = None,
    enable_env_overrides: bool = True,
    env_prefix: str = DEFAULT_ENV_PREFIX,
) -> SessionSettings:
    """
    Load and validate session settings.

    Without ``path`` the file named by ``E2E_CONFIG_FILE`` is used; if that is
    unset too, defaults plus environment overrides are returned.

    Raises:
        ConfigError: If the file cannot be loaded or a value is invalid
    """
    if path is None:
        path = os.environ.get(CONFIG_FILE_ENV) or None
    defaults = SessionSettings().model_dump(mode="json")
    config = Config(
        path,
        defaults=defaults,
        enable_env_overrides=enable_env_overrides,
        env_prefix=env_prefix,
    )
    return SessionSettings.from_config(config)
