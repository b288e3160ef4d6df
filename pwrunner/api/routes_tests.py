"""
API endpoints for executing test cases.

- ``POST /execute-test``: run one test case and return its report
- ``POST /execute-batch``: run several test cases sequentially

Handlers are plain ``def`` functions so FastAPI runs them in its
threadpool, which is where the Playwright sync API must live.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from pwrunner.core.browser import ProviderFactory, get_provider_factory, resolve_browser_type
from pwrunner.core.config import RunnerConfig, get_runner_config
from pwrunner.core.errors import InvalidRequestError
from pwrunner.core.timeutil import utc_timestamp
from pwrunner.runner import executor
from pwrunner.runner.models import BatchReport, TestCase, TestReport, WireModel

logger = logging.getLogger(__name__)

router = APIRouter(tags=["tests"])


class ExecuteTestRequest(WireModel):
    """Request body for ``/execute-test``."""

    test_case: Optional[TestCase] = None
    browser_type: Optional[str] = None


class ExecuteBatchRequest(WireModel):
    test_cases: Optional[List[TestCase]] = None
    browser_type: Optional[str] = None


def _error_response(e: Exception) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"status": "error", "error": str(e), "timestamp": utc_timestamp()},
    )


@router.post("/execute-test", response_model=TestReport)
def execute_test(
    body: ExecuteTestRequest,
    config: RunnerConfig = Depends(get_runner_config),
    provider_factory: ProviderFactory = Depends(get_provider_factory),
):
    """
    ## Run a single test case

    - **Request**: `{testCase: {id?, name?, steps: [...]}, browserType?}`
    - **Processing**: launch a browser, run the steps in order, close the browser
    - **Response**: `{testCaseId, testName, status, duration, results, timestamp}`
    - **Errors**:
      - 400: `testCase` missing
      - 500: browser launch or other unexpected failure
    """
    if body.test_case is None:
        raise InvalidRequestError("testCase is required")

    browser_type = resolve_browser_type(body.browser_type, config.default_browser)
    try:
        return executor.run_test_case(
            body.test_case,
            browser_type=browser_type,
            config=config,
            provider_factory=provider_factory,
        )
    except Exception as e:
        return _error_response(e)


@router.post("/execute-batch", response_model=BatchReport)
def execute_batch(
    body: ExecuteBatchRequest,
    config: RunnerConfig = Depends(get_runner_config),
    provider_factory: ProviderFactory = Depends(get_provider_factory),
):
    """
    ## Run several test cases one after another

    Each test case gets its own browser. A test case that errors is reported
    with `status: "error"` and does not stop the batch.
    """
    if body.test_cases is None:
        raise InvalidRequestError("testCases must be an array")

    browser_type = resolve_browser_type(body.browser_type, config.default_browser)
    logger.info("Batch of %d test cases on %s", len(body.test_cases), browser_type.value)
    try:
        return executor.run_batch(
            body.test_cases,
            browser_type=browser_type,
            config=config,
            provider_factory=provider_factory,
        )
    except Exception as e:
        return _error_response(e)
