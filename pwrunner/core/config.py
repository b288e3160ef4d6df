"""
Service configuration.

``Settings`` reads the listening address, environment name, logging level,
CORS origins and every browser timeout from the process environment (or a
``.env`` file in the working directory).

Runner defaults (timeouts, viewport, retry budget, screenshot policy)
are collected into an immutable ``RunnerConfig`` which is handed to the
step interpreter, the test executor and the DOM retriever instead of
each of them carrying its own literals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Flags suitable for running Chromium inside a restricted container.
CHROMIUM_ARGS: Tuple[str, ...] = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
)


@dataclass(frozen=True)
class RunnerConfig:
    """
    Defaults used while driving the browser.

    All durations are milliseconds, matching Playwright's timeout arguments.

    ``screenshot_max_chars``: when set, base64 screenshot payloads are cut to
    this many characters followed by ``...`` to keep responses small. ``None``
    returns the full encoding.
    """

    default_browser: str = "chromium"
    headless: bool = True
    launch_args: Tuple[str, ...] = CHROMIUM_ARGS
    viewport_width: int = 1280
    viewport_height: int = 720
    launch_timeout_ms: int = 60_000
    navigation_timeout_ms: int = 30_000
    action_timeout_ms: int = 10_000
    wait_selector_timeout_ms: int = 10_000
    wait_default_ms: int = 1_000
    screenshot_max_chars: Optional[int] = None
    dom_navigation_timeout_ms: int = 45_000
    dom_load_timeout_ms: int = 30_000
    dom_max_retries: int = 3
    dom_retry_delay_ms: int = 5_000

    @property
    def viewport(self) -> dict:
        return {"width": self.viewport_width, "height": self.viewport_height}


class Settings(BaseSettings):
    """
    Environment variables understood by the test service.

    ``PORT``/``HOST``: where uvicorn listens.
    ``ENVIRONMENT``: free-form environment name reported by ``/health``
    (``NODE_ENV`` is accepted too so existing deployments keep working).
    ``LOG_LEVEL``: root logging level.
    ``CORS_ORIGINS``: comma separated list, ``*`` allows everything.

    The remaining fields feed ``RunnerConfig``.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    PORT: int = 3000
    HOST: str = "0.0.0.0"
    ENVIRONMENT: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV"),
    )
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"

    # Browser
    DEFAULT_BROWSER: str = "chromium"
    HEADLESS: bool = True
    VIEWPORT_WIDTH: int = 1280
    VIEWPORT_HEIGHT: int = 720
    LAUNCH_TIMEOUT_MS: int = 60_000

    # Step execution
    NAVIGATION_TIMEOUT_MS: int = 30_000
    ACTION_TIMEOUT_MS: int = 10_000
    WAIT_SELECTOR_TIMEOUT_MS: int = 10_000
    WAIT_DEFAULT_MS: int = 1_000
    SCREENSHOT_MAX_CHARS: Optional[int] = None

    # DOM snapshot retrieval
    DOM_NAVIGATION_TIMEOUT_MS: int = 45_000
    DOM_LOAD_TIMEOUT_MS: int = 30_000
    DOM_MAX_RETRIES: int = 3
    DOM_RETRY_DELAY_MS: int = 5_000

    def runner_config(self) -> RunnerConfig:
        return RunnerConfig(
            default_browser=self.DEFAULT_BROWSER,
            headless=self.HEADLESS,
            viewport_width=self.VIEWPORT_WIDTH,
            viewport_height=self.VIEWPORT_HEIGHT,
            launch_timeout_ms=self.LAUNCH_TIMEOUT_MS,
            navigation_timeout_ms=self.NAVIGATION_TIMEOUT_MS,
            action_timeout_ms=self.ACTION_TIMEOUT_MS,
            wait_selector_timeout_ms=self.WAIT_SELECTOR_TIMEOUT_MS,
            wait_default_ms=self.WAIT_DEFAULT_MS,
            screenshot_max_chars=self.SCREENSHOT_MAX_CHARS,
            dom_navigation_timeout_ms=self.DOM_NAVIGATION_TIMEOUT_MS,
            dom_load_timeout_ms=self.DOM_LOAD_TIMEOUT_MS,
            dom_max_retries=max(1, self.DOM_MAX_RETRIES),
            dom_retry_delay_ms=max(0, self.DOM_RETRY_DELAY_MS),
        )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()


def get_runner_config() -> RunnerConfig:
    """FastAPI dependency returning the runner defaults for one request."""
    return settings.runner_config()
