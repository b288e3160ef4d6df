"""
Exception types shared by the runner and the HTTP layer.

``InvalidRequestError`` maps to a 400 response and is raised before any
browser is launched. ``StepExecutionError`` never leaves the executor: it
becomes a failed step result. ``ResourceError`` and its subclasses are
infrastructure failures surfaced as 500 responses.
"""


class ServiceError(Exception):
    """Base class for errors raised by this service."""


class InvalidRequestError(ServiceError):
    """Missing or malformed request fields."""


class StepExecutionError(ServiceError):
    """A single step could not be performed or its assertion did not hold."""


class ResourceError(ServiceError):
    """The browser (or something it depends on) is unavailable."""


class BrowserLaunchError(ResourceError):
    pass


class SelectorNotFoundError(ResourceError):
    """Raised by the DOM retriever once its retry budget is exhausted."""

    def __init__(self, selector: str, attempts: int, cause: Exception | None = None):
        self.selector = selector
        self.attempts = attempts
        msg = f"Selector {selector} not found after {attempts} attempts"
        if cause is not None:
            msg = f"{msg}: {cause}"
        super().__init__(msg)
