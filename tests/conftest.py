"""
Shared pytest configuration.

Most tests drive the runner against in-memory doubles of the Playwright
``Page``/``Browser`` objects so no browser engine is needed. The
``--live-url`` option enables the smoke tests under ``tests/e2e`` which
launch a real Chromium against that URL.
"""

from __future__ import annotations

from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from pwrunner.core.browser import get_provider_factory
from pwrunner.core.config import RunnerConfig, get_runner_config


def pytest_addoption(parser):
    """Hook to add custom command-line options to pytest."""
    parser.addoption("--live-url", action="store", default=None)


@pytest.fixture(scope="session")
def live_url(pytestconfig):
    url = pytestconfig.getoption("--live-url")
    if not url:
        pytest.skip("pass --live-url to run tests against a real browser")
    return url


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    def text_content(self, timeout=None):
        self.page._record("text_content", self.selector)
        self.page._maybe_fail("text_content")
        return self.page.texts.get(self.selector)

    def is_visible(self, timeout=None):
        self.page._record("is_visible", self.selector)
        return self.page.visible.get(self.selector, False)

    def evaluate(self, expression, arg=None, timeout=None):
        self.page._record("locator.evaluate", self.selector)
        self.page._maybe_fail("locator.evaluate")
        return self.page.outer_html.get(self.selector)


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page

    def press(self, key, delay=None):
        self.page._record("keyboard.press", key)


class FakePage:
    """
    Records every call; ``failures`` maps a method name to an exception (or a
    list of outcomes consumed one call at a time, ``None`` meaning success).
    """

    def __init__(self) -> None:
        self.url = "about:blank"
        self.page_title = ""
        self.texts: Dict[str, str] = {}
        self.visible: Dict[str, bool] = {}
        self.outer_html: Dict[str, str] = {}
        self.document = "<html><body></body></html>"
        self.failures: Dict[str, Any] = {}
        self.calls: List[tuple] = []
        self.keyboard = FakeKeyboard(self)

    def _record(self, name, *args, **kwargs):
        self.calls.append((name, args, kwargs))

    def _maybe_fail(self, name):
        outcome = self.failures.get(name)
        if isinstance(outcome, list):
            outcome = outcome.pop(0) if outcome else None
        if isinstance(outcome, BaseException):
            raise outcome

    def called(self, name) -> List[tuple]:
        return [c for c in self.calls if c[0] == name]

    def goto(self, url, wait_until=None, timeout=None):
        self._record("goto", url, wait_until=wait_until, timeout=timeout)
        self._maybe_fail("goto")
        self.url = url

    def click(self, selector, timeout=None):
        self._record("click", selector, timeout=timeout)
        self._maybe_fail("click")

    def fill(self, selector, value, timeout=None):
        self._record("fill", selector, value, timeout=timeout)
        self._maybe_fail("fill")

    def select_option(self, selector, value=None, timeout=None):
        self._record("select_option", selector, value=value, timeout=timeout)
        self._maybe_fail("select_option")
        return [value]

    def wait_for_selector(self, selector, timeout=None):
        self._record("wait_for_selector", selector, timeout=timeout)
        self._maybe_fail("wait_for_selector")

    def wait_for_timeout(self, timeout):
        self._record("wait_for_timeout", timeout)

    def wait_for_load_state(self, state=None, timeout=None):
        self._record("wait_for_load_state", state, timeout=timeout)
        self._maybe_fail("wait_for_load_state")

    def screenshot(self, full_page=False, timeout=None):
        self._record("screenshot", full_page=full_page, timeout=timeout)
        self._maybe_fail("screenshot")
        return b"\x89PNG fake screenshot bytes" * 10

    def evaluate(self, expression, arg=None):
        self._record("evaluate", expression)
        self._maybe_fail("evaluate")

    def hover(self, selector, timeout=None):
        self._record("hover", selector, timeout=timeout)
        self._maybe_fail("hover")

    def press(self, selector, key, timeout=None):
        self._record("press", selector, key, timeout=timeout)
        self._maybe_fail("press")

    def locator(self, selector):
        return FakeLocator(self, selector)

    def title(self):
        return self.page_title

    def content(self):
        self._record("content")
        return self.document


class FakeContext:
    def __init__(self, browser: "FakeBrowser"):
        self.browser = browser

    def new_page(self):
        return self.browser.page


class FakeBrowser:
    def __init__(self, page: FakePage):
        self.page = page
        self.close_count = 0
        self.close_error: BaseException | None = None
        self.new_page_kwargs: Dict[str, Any] = {}
        self.new_context_kwargs: Dict[str, Any] = {}

    def new_page(self, **kwargs):
        self.new_page_kwargs = kwargs
        return self.page

    def new_context(self, **kwargs):
        self.new_context_kwargs = kwargs
        return FakeContext(self)

    def close(self):
        self.close_count += 1
        if self.close_error is not None:
            raise self.close_error


class FakeProvider:
    """Stands in for ``PlaywrightProvider``; one instance serves a whole test."""

    def __init__(self) -> None:
        self.page = FakePage()
        self.browser = FakeBrowser(self.page)
        self.launch_error: BaseException | None = None
        self.launched: List[str] = []
        self.entered = 0
        self.exited = 0

    def __call__(self) -> "FakeProvider":
        return self

    def __enter__(self):
        self.entered += 1
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exited += 1

    def launch(self, browser_type, config):
        self.launched.append(browser_type.value)
        if self.launch_error is not None:
            raise self.launch_error
        return self.browser


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def page(provider) -> FakePage:
    return provider.page


@pytest.fixture
def runner_config() -> RunnerConfig:
    # No sleeping between DOM retries in tests.
    return RunnerConfig(dom_retry_delay_ms=0)


@pytest.fixture
def client(provider, runner_config):
    from pwrunner.main import app

    app.dependency_overrides[get_provider_factory] = lambda: provider
    app.dependency_overrides[get_runner_config] = lambda: runner_config
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()
