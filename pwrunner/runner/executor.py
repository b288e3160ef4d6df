"""
Test case execution.

``run_test_case`` launches a browser, runs the steps of one test case in
order through the step interpreter and returns a ``TestReport``. A failing
step stops the run unless the step sets ``continueOnFail: true``. The
browser is closed on every exit path, including unexpected exceptions,
which propagate to the caller after cleanup.

``run_batch`` runs several test cases one after another and tallies the
outcome; an exception in one test case is recorded as an ``error`` entry
and the batch moves on.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, List, Optional

from pwrunner.core.browser import BrowserType, PlaywrightProvider, ProviderFactory, browser_session
from pwrunner.core.config import RunnerConfig
from pwrunner.core.errors import StepExecutionError
from pwrunner.core.timeutil import utc_timestamp
from pwrunner.runner.models import (
    BatchErrorEntry,
    BatchReport,
    RunState,
    Step,
    StepResult,
    StepStatus,
    TestCase,
    TestReport,
)
from pwrunner.runner.steps import encode_screenshot, execute_step

logger = logging.getLogger(__name__)


def _capture_failure_screenshot(page, config: RunnerConfig) -> Optional[str]:
    """Best-effort full-page screenshot of the state a step failed in."""
    try:
        return encode_screenshot(page.screenshot(full_page=True, timeout=config.action_timeout_ms), config.screenshot_max_chars)
    except Exception as e:
        logger.warning("Failure screenshot could not be captured: %s", e)
        return None


def run_step(page, index: int, step: Step, config: RunnerConfig) -> StepResult:
    """Run one step and turn its outcome into a ``StepResult``."""
    label = step.label(index)
    started = time.monotonic()
    try:
        outcome = execute_step(page, step, config)
    except StepExecutionError as e:
        logger.info("Step %d (%s) failed: %s", index, label, e)
        screenshot = None
        if step.screenshot_on_fail is not False:
            screenshot = _capture_failure_screenshot(page, config)
        return StepResult(
            step_index=index,
            step=label,
            status=StepStatus.FAILED,
            error=str(e),
            screenshot=screenshot,
            duration=int((time.monotonic() - started) * 1000),
        )
    return StepResult(
        step_index=index,
        step=label,
        status=StepStatus.PASSED,
        result=outcome,
        duration=int((time.monotonic() - started) * 1000),
    )


def run_steps(page, steps: Iterable[Step], config: RunnerConfig) -> tuple[List[StepResult], RunState]:
    """
    Execute ``steps`` sequentially on ``page``.

    Returns the collected results and the final run state: ``COMPLETED`` when
    every step ran, ``ABORTED`` when a failing step stopped the run.
    """
    results: List[StepResult] = []
    for index, step in enumerate(steps):
        result = run_step(page, index, step, config)
        results.append(result)
        if result.status is StepStatus.FAILED and step.continue_on_fail is not True:
            return results, RunState.ABORTED
    return results, RunState.COMPLETED


def overall_status(results: Iterable[StepResult]) -> StepStatus:
    if all(r.status is StepStatus.PASSED for r in results):
        return StepStatus.PASSED
    return StepStatus.FAILED


def run_test_case(
    test_case: TestCase,
    *,
    browser_type: BrowserType = BrowserType.CHROMIUM,
    config: RunnerConfig | None = None,
    provider_factory: ProviderFactory = PlaywrightProvider,
) -> TestReport:
    """
    Execute every step of ``test_case`` in a freshly launched browser.

    :param test_case: Test case to run
    :param browser_type: Engine to launch
    :param config: Timeouts, viewport and screenshot policy
    :param provider_factory: Source of browsers (Playwright unless overridden)
    :return: The aggregated report
    :raises ResourceError: If the browser cannot be launched
    """
    config = config or RunnerConfig()
    started = time.monotonic()
    state = RunState.NOT_STARTED
    logger.info("Running test %r (%d steps) on %s", test_case.display_name, len(test_case.steps), browser_type.value)

    try:
        with browser_session(browser_type, config, provider_factory) as browser:
            page = browser.new_page(viewport=config.viewport)
            state = RunState.RUNNING
            results, state = run_steps(page, test_case.steps, config)
    except Exception:
        logger.exception("Test %r %s (state was %s)", test_case.display_name, RunState.ERRORED.value, state.value)
        raise

    status = overall_status(results)
    logger.info("Test %r finished: %s (%s)", test_case.display_name, status.value, state.value)
    return TestReport(
        test_case_id=test_case.id,
        test_name=test_case.display_name,
        status=status,
        duration=int((time.monotonic() - started) * 1000),
        results=results,
        timestamp=utc_timestamp(),
        run_state=state,
    )


def run_batch(
    test_cases: Iterable[TestCase],
    *,
    browser_type: BrowserType = BrowserType.CHROMIUM,
    config: RunnerConfig | None = None,
    provider_factory: ProviderFactory = PlaywrightProvider,
) -> BatchReport:
    """Run test cases one at a time and tally passed/failed outcomes."""
    entries: list = []
    passed = failed = 0
    for test_case in test_cases:
        try:
            report = run_test_case(
                test_case,
                browser_type=browser_type,
                config=config,
                provider_factory=provider_factory,
            )
        except Exception as e:
            failed += 1
            entries.append(
                BatchErrorEntry(test_case_id=test_case.id, test_name=test_case.display_name, error=str(e))
            )
            continue
        if report.status is StepStatus.PASSED:
            passed += 1
        else:
            failed += 1
        entries.append(report)

    logger.info("Batch finished: %d passed, %d failed", passed, failed)
    return BatchReport(total_tests=len(entries), passed=passed, failed=failed, results=entries)
