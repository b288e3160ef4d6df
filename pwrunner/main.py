"""
FastAPI application entrypoint.

This module defines the FastAPI app, mounts the routers and maps the
service's exceptions onto JSON error responses. The actual business logic
lives in ``pwrunner/runner``. Run it with ``python -m pwrunner.main`` or
``uvicorn pwrunner.main:app``; uvicorn handles SIGINT/SIGTERM and exits
gracefully.
"""

import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pwrunner.api.health import router as health_router
from pwrunner.api.routes_dom import router as dom_router
from pwrunner.api.routes_tests import router as tests_router
from pwrunner.core.config import settings
from pwrunner.core.errors import InvalidRequestError, ResourceError

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
)
logging.getLogger("uvicorn").setLevel(logging.INFO)
logging.getLogger("uvicorn.access").setLevel(logging.INFO)

logger = logging.getLogger(__name__)

app = FastAPI(title="Playwright Test Service")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(health_router)
app.include_router(tests_router)
app.include_router(dom_router)


@app.exception_handler(InvalidRequestError)
def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


@app.exception_handler(RequestValidationError)
def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(ResourceError)
def resource_error_handler(request: Request, exc: ResourceError) -> JSONResponse:
    logger.error("Resource error on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"status": "error", "error": str(exc)})


@app.exception_handler(Exception)
def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return JSONResponse(status_code=500, content={"status": "error", "error": str(exc)})


@app.on_event("startup")
def on_startup() -> None:
    logger.info("Playwright service starting (environment=%s)", settings.ENVIRONMENT)


def run() -> None:
    uvicorn.run("pwrunner.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
