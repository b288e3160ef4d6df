"""
Implementation of step execution for Playwright.

Each supported action kind is mapped to a concrete operation on the
Playwright ``Page`` object through ``STEP_HANDLERS``. Handlers return a
small dictionary describing what happened; any failure (unknown action,
missing field, Playwright error, assertion mismatch) is raised as
``StepExecutionError`` so the executor can record it against the step.
"""

from __future__ import annotations

import base64
from typing import Any, Callable, Dict

from playwright.sync_api import Error as PlaywrightError, Page

from pwrunner.core.config import RunnerConfig
from pwrunner.core.errors import StepExecutionError
from pwrunner.runner.models import ACTION_ALIASES, ActionKind, AssertionKind, Step

StepHandler = Callable[[Page, Step, RunnerConfig], Dict[str, Any]]

_ASSERTIONS_BY_NAME = {k.value.lower(): k for k in AssertionKind}


def parse_action(raw: Any) -> ActionKind:
    """Case-insensitive lookup of the action kind, including aliases."""
    name = str(raw or "").strip().lower()
    if name in ACTION_ALIASES:
        return ACTION_ALIASES[name]
    try:
        return ActionKind(name)
    except ValueError:
        raise StepExecutionError(f"Unknown action: {raw}") from None


def parse_assertion(raw: Any) -> AssertionKind:
    kind = _ASSERTIONS_BY_NAME.get(str(raw or "").strip().lower())
    if kind is None:
        raise StepExecutionError(f"Unknown assertion: {raw}")
    return kind


def encode_screenshot(data: bytes, max_chars: int | None = None) -> str:
    """Base64-encode a PNG, optionally cut to ``max_chars`` plus ``...``."""
    encoded = base64.b64encode(data).decode("ascii")
    if max_chars is not None and len(encoded) > max_chars:
        return encoded[:max_chars] + "..."
    return encoded


def _require(step: Step, attr: str, wire_name: str) -> Any:
    value = getattr(step, attr)
    if value is None or value == "":
        raise StepExecutionError(f"{str(step.action).lower()} step requires '{wire_name}'")
    return value


def _goto(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    url = _require(step, "url", "url")
    page.goto(url, wait_until="networkidle", timeout=config.navigation_timeout_ms)
    return {"url": page.url}


def _click(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    sel = _require(step, "selector", "selector")
    page.click(sel, timeout=config.action_timeout_ms)
    return {"clicked": sel}


def _fill(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    sel = _require(step, "selector", "selector")
    # An empty string clears the field; a missing value is an error.
    if step.value is None:
        raise StepExecutionError(f"{str(step.action).lower()} step requires 'value'")
    value = str(step.value)
    page.fill(sel, value, timeout=config.action_timeout_ms)
    return {"filled": sel, "value": value}


def _select(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    sel = _require(step, "selector", "selector")
    value = str(_require(step, "value", "value"))
    selected = page.select_option(sel, value=value, timeout=config.action_timeout_ms)
    return {"selected": sel, "value": value, "options": list(selected or [])}


def _wait(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    timeout = int(step.timeout) if step.timeout else None
    if step.selector:
        page.wait_for_selector(step.selector, timeout=timeout or config.wait_selector_timeout_ms)
        return {"waited": f"for selector: {step.selector}"}
    ms = timeout or config.wait_default_ms
    page.wait_for_timeout(ms)
    return {"waited": f"{ms}ms"}


def _screenshot(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    data = page.screenshot(full_page=bool(step.full_page), timeout=config.action_timeout_ms)
    return {"screenshot": encode_screenshot(data, config.screenshot_max_chars)}


def _scroll(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    page.evaluate("() => window.scrollTo(0, document.body.scrollHeight)")
    return {"scrolled": "bottom"}


def _hover(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    sel = _require(step, "selector", "selector")
    page.hover(sel, timeout=config.action_timeout_ms)
    return {"hovered": sel}


def _press(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    key = step.key or (None if step.value is None else str(step.value))
    if not key:
        raise StepExecutionError("press step requires 'key'")
    if step.selector:
        page.press(step.selector, key, timeout=config.action_timeout_ms)
        return {"pressed": key, "selector": step.selector}
    page.keyboard.press(key)
    return {"pressed": key}


def _expect_text(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    sel = _require(step, "selector", "selector")
    text = page.locator(sel).text_content(timeout=config.action_timeout_ms)
    if text != step.expected_value:
        raise StepExecutionError(f'Expected "{step.expected_value}", got "{text}"')
    return {"assertion": "text matches", "actual": text}


def _expect_visible(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    sel = _require(step, "selector", "selector")
    if not page.locator(sel).is_visible():
        raise StepExecutionError(f"Element is not visible: {sel}")
    return {"assertion": "element is visible"}


def _expect_url(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    actual = page.url
    if actual != step.expected_value:
        raise StepExecutionError(f'Expected URL "{step.expected_value}", got "{actual}"')
    return {"assertion": "url matches", "actual": actual}


def _expect_title(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    actual = page.title()
    if actual != step.expected_value:
        raise StepExecutionError(f'Expected title "{step.expected_value}", got "{actual}"')
    return {"assertion": "title matches", "actual": actual}


ASSERTION_HANDLERS: Dict[AssertionKind, StepHandler] = {
    AssertionKind.TO_HAVE_TEXT: _expect_text,
    AssertionKind.TO_BE_VISIBLE: _expect_visible,
    AssertionKind.TO_HAVE_URL: _expect_url,
    AssertionKind.TO_HAVE_TITLE: _expect_title,
}


def _expect(page: Page, step: Step, config: RunnerConfig) -> Dict[str, Any]:
    kind = parse_assertion(step.assertion_type)
    return ASSERTION_HANDLERS[kind](page, step, config)


STEP_HANDLERS: Dict[ActionKind, StepHandler] = {
    ActionKind.GOTO: _goto,
    ActionKind.CLICK: _click,
    ActionKind.FILL: _fill,
    ActionKind.SELECT: _select,
    ActionKind.WAIT: _wait,
    ActionKind.SCREENSHOT: _screenshot,
    ActionKind.SCROLL: _scroll,
    ActionKind.HOVER: _hover,
    ActionKind.PRESS: _press,
    ActionKind.EXPECT: _expect,
}


def execute_step(page: Page, step: Step, config: RunnerConfig | None = None) -> Dict[str, Any]:
    """
    Execute a single step against a Playwright page.

    :param page: Playwright ``Page`` object on which to perform the action
    :param step: The step to perform
    :param config: Timeouts and screenshot policy; defaults when omitted
    :return: Description of what was done (e.g. ``{"clicked": "#submit"}``)
    :raises StepExecutionError: If the step is unknown, incomplete, fails in
        the browser, or its assertion does not hold
    """
    config = config or RunnerConfig()
    handler = STEP_HANDLERS[parse_action(step.action)]
    try:
        return handler(page, step, config)
    except PlaywrightError as e:
        raise StepExecutionError(str(e)) from e
