"""
DOM snapshot retrieval.

The page at a URL is rendered in a throwaway browser and the outer HTML of
the region that matters for that URL is returned. The region is chosen by
the first ``DomTarget`` whose keyword occurs in the URL; unknown pages fall
back to ``body``. Extraction is retried because widgets on single page apps
often render after the network goes idle.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Sequence

from playwright.sync_api import Error as PlaywrightError

from pwrunner.core.browser import BrowserType, PlaywrightProvider, ProviderFactory, browser_session
from pwrunner.core.config import RunnerConfig
from pwrunner.core.errors import ResourceError, SelectorNotFoundError
from pwrunner.runner.models import DomSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DomTarget:
    keyword: str
    selector: str


DEFAULT_TARGET = DomTarget(keyword="default", selector="body")

DOM_TARGETS: tuple[DomTarget, ...] = (
    DomTarget("/auth/login", "form.oxd-form"),
    DomTarget("/dashboard", "div.oxd-dashboard-widget"),
    DomTarget("/pim/viewEmployeeList", "div.oxd-table"),
    DomTarget("/pim/addEmployee", "form.oxd-form"),
    DomTarget("/leave/viewLeaveList", "div.oxd-table"),
    DomTarget("/leave/applyLeave", "form.oxd-form"),
    DomTarget("/recruitment/viewCandidates", "div.oxd-table"),
    DomTarget("/time/viewEmployeeTimesheet", "form.oxd-form"),
    DomTarget("/performance/searchKpi", "form.oxd-form"),
    DomTarget("/admin/viewSystemUsers", "div.oxd-table"),
    DomTarget("/admin/saveSystemUser", "form.oxd-form"),
    DomTarget("/maintenance/purgeEmployee", "form.oxd-form"),
    DomTarget("/claim/viewAssignClaim", "div.oxd-table"),
    DomTarget("/buzz/viewBuzz", "div.orangehrm-buzz-newsfeed"),
    DomTarget("/myinfo", "form.oxd-form"),
)


def resolve_target(url: str, targets: Sequence[DomTarget] = DOM_TARGETS) -> DomTarget:
    for target in targets:
        if target.keyword in url:
            return target
    return DEFAULT_TARGET


def extract_outer_html(
    page,
    selector: str,
    config: RunnerConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> str:
    """
    Read the outer HTML of ``selector``, retrying up to ``dom_max_retries`` times.

    Before every attempt the page is given a chance to reach network idle
    again; between attempts we pause ``dom_retry_delay_ms``.

    :raises SelectorNotFoundError: once every attempt has failed
    """
    attempts = config.dom_max_retries
    last_error: Exception | None = None
    for attempt in range(1, attempts + 1):
        try:
            page.wait_for_load_state("networkidle", timeout=config.dom_load_timeout_ms)
            html = page.locator(selector).first.evaluate("el => el.outerHTML", timeout=config.dom_load_timeout_ms)
        except PlaywrightError as e:
            last_error = e
        else:
            if html:
                return html
            last_error = ValueError(f"{selector} has an empty outerHTML")
        logger.info("Attempt %d/%d for %s failed: %s", attempt, attempts, selector, last_error)
        if attempt < attempts:
            sleep(config.dom_retry_delay_ms / 1000)
    raise SelectorNotFoundError(selector, attempts, last_error)


def fetch_dom(
    url: str,
    *,
    full_document: bool = False,
    browser_type: BrowserType = BrowserType.CHROMIUM,
    config: RunnerConfig | None = None,
    provider_factory: ProviderFactory = PlaywrightProvider,
    sleep: Callable[[float], None] = time.sleep,
) -> DomSnapshot:
    """
    Render ``url`` and return the HTML of its relevant region.

    :param url: Page to load
    :param full_document: Skip selector resolution and return ``page.content()``
    :raises SelectorNotFoundError: if the region never appeared
    :raises ResourceError: if the browser or the navigation failed
    """
    config = config or RunnerConfig()
    target = None if full_document else resolve_target(url)

    with browser_session(browser_type, config, provider_factory) as browser:
        context = browser.new_context(viewport=config.viewport, ignore_https_errors=True)
        page = context.new_page()
        try:
            page.goto(url, wait_until="networkidle", timeout=config.dom_navigation_timeout_ms)
        except PlaywrightError as e:
            raise ResourceError(f"Navigation to {url} failed: {e}") from e

        if target is None:
            try:
                html = page.content()
            except PlaywrightError as e:
                raise ResourceError(f"Could not read document of {url}: {e}") from e
            return DomSnapshot(url=url, selector_used=None, html=html)

        html = extract_outer_html(page, target.selector, config, sleep=sleep)
        return DomSnapshot(url=url, selector_used=target.selector, html=html)
