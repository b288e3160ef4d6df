"""
Browser provisioning for a single request.

Every request launches its own browser through ``browser_session`` and the
browser is closed on every exit path. ``PlaywrightProvider`` owns the
Playwright driver; tests substitute a provider that hands out fake
browsers, so nothing below the provider needs a real engine.
"""

from __future__ import annotations

import enum
import logging
from contextlib import contextmanager
from typing import Any, Callable, ContextManager, Iterator

from playwright.sync_api import Browser, Error as PlaywrightError, Playwright, sync_playwright

from pwrunner.core.config import RunnerConfig
from pwrunner.core.errors import BrowserLaunchError

logger = logging.getLogger(__name__)


class BrowserType(str, enum.Enum):
    CHROMIUM = "chromium"
    FIREFOX = "firefox"
    WEBKIT = "webkit"


def resolve_browser_type(value: Any, default: str | BrowserType = BrowserType.CHROMIUM) -> BrowserType:
    """
    Map a client supplied engine name to ``BrowserType``.

    Matching is case-insensitive. Unknown or empty values select ``default``
    (a warning is logged for unknown names so typos are visible).
    """
    try:
        fallback = BrowserType(default)
    except ValueError:
        logger.warning("Configured default browser %r is unknown, using chromium", default)
        fallback = BrowserType.CHROMIUM
    if value is None or str(value).strip() == "":
        return fallback
    try:
        return BrowserType(str(value).strip().lower())
    except ValueError:
        logger.warning("Unknown browserType %r, falling back to %s", value, fallback.value)
        return fallback


class PlaywrightProvider:
    """Starts the Playwright driver on enter and stops it on exit."""

    def __init__(self) -> None:
        self._playwright: Playwright | None = None

    def __enter__(self) -> "PlaywrightProvider":
        self._playwright = sync_playwright().start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._playwright is None:
            return
        try:
            self._playwright.stop()
        except Exception as e:
            logger.error("Error stopping Playwright driver: %s", e)
        finally:
            self._playwright = None

    def launch(self, browser_type: BrowserType, config: RunnerConfig) -> Browser:
        if self._playwright is None:
            raise RuntimeError("PlaywrightProvider used outside of its context")
        engine = getattr(self._playwright, browser_type.value)
        options: dict[str, Any] = {
            "headless": config.headless,
            "timeout": config.launch_timeout_ms,
        }
        # The sandbox flags are Chromium command-line switches.
        if browser_type is BrowserType.CHROMIUM:
            options["args"] = list(config.launch_args)
        return engine.launch(**options)


ProviderFactory = Callable[[], ContextManager[Any]]


def release_browser(browser: Any) -> None:
    """Close ``browser``; failures are logged, never raised."""
    try:
        browser.close()
    except Exception as e:
        logger.error("Error closing browser: %s", e)


@contextmanager
def browser_session(
    browser_type: BrowserType,
    config: RunnerConfig,
    provider_factory: ProviderFactory = PlaywrightProvider,
) -> Iterator[Browser]:
    """
    Launch a browser for the duration of the ``with`` block.

    :raises BrowserLaunchError: when the engine cannot be started
    """
    with provider_factory() as provider:
        try:
            browser = provider.launch(browser_type, config)
        except PlaywrightError as e:
            raise BrowserLaunchError(f"Failed to launch {browser_type.value}: {e}") from e
        logger.info("Launched %s (headless=%s)", browser_type.value, config.headless)
        try:
            yield browser
        finally:
            release_browser(browser)
            logger.info("Closed %s", browser_type.value)


def get_provider_factory() -> ProviderFactory:
    """FastAPI dependency; overridden in tests to hand out fake browsers."""
    return PlaywrightProvider
