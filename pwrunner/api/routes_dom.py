"""
API endpoint for retrieving rendered DOM snapshots.
"""

import logging
import traceback

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from pwrunner.core.browser import ProviderFactory, get_provider_factory, resolve_browser_type
from pwrunner.core.config import RunnerConfig, get_runner_config
from pwrunner.core.errors import InvalidRequestError
from pwrunner.runner import dom
from pwrunner.runner.models import DomSnapshot

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dom"])


@router.get("/get-dom", response_model=DomSnapshot)
def get_dom(
    url: str | None = Query(None),
    full: bool = Query(False, description="Return the whole document instead of the matched region"),
    browser_type: str | None = Query(None, alias="browserType"),
    config: RunnerConfig = Depends(get_runner_config),
    provider_factory: ProviderFactory = Depends(get_provider_factory),
):
    """
    ## Render a page and return its HTML

    - **Request**: `?url=<page>` (optional `full=true`, `browserType`)
    - **Processing**: pick the selector for the URL, navigate, extract
      `outerHTML` with retries
    - **Response**: `{url, selectorUsed, html}`
    - **Errors**:
      - 400: `url` missing
      - 500: `{error, message, callLog}` when navigation or extraction fails
    """
    if not url or not url.strip():
        raise InvalidRequestError("Missing or invalid 'url' parameter")

    try:
        return dom.fetch_dom(
            url,
            full_document=full,
            browser_type=resolve_browser_type(browser_type, config.default_browser),
            config=config,
            provider_factory=provider_factory,
        )
    except Exception as e:
        logger.error("DOM retrieval for %s failed: %s", url, e)
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to retrieve DOM",
                "message": str(e),
                "callLog": traceback.format_exc(),
            },
        )
