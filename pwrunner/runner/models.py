"""
Data model for test cases, step results and reports.

Wire names are camelCase (``stepIndex``, ``expectedValue`` ...) while the
Python attributes stay snake_case; both spellings are accepted on input.
"""

from __future__ import annotations

import enum
from typing import Any, ClassVar, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_serializer
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)


class ActionKind(str, enum.Enum):
    GOTO = "goto"
    CLICK = "click"
    FILL = "fill"
    SELECT = "select"
    WAIT = "wait"
    SCREENSHOT = "screenshot"
    SCROLL = "scroll"
    HOVER = "hover"
    PRESS = "press"
    EXPECT = "expect"


# Alternative spellings accepted from clients.
ACTION_ALIASES = {
    "type": ActionKind.FILL,
    "assert": ActionKind.EXPECT,
}


class AssertionKind(str, enum.Enum):
    TO_HAVE_TEXT = "toHaveText"
    TO_BE_VISIBLE = "toBeVisible"
    TO_HAVE_URL = "toHaveURL"
    TO_HAVE_TITLE = "toHaveTitle"


class StepStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    PASSED = "passed"
    FAILED = "failed"


class RunState(str, enum.Enum):
    NOT_STARTED = "not_started"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"
    ERRORED = "errored"


class Step(WireModel):
    """
    One declarative step as received from the client.

    ``action`` and ``assertion_type`` are taken as sent, whatever their JSON
    type; they are mapped onto the enums when the step runs so an unknown
    action fails that step instead of the whole request.

    ``continue_on_fail`` and ``screenshot_on_fail`` are kept raw as well:
    only a literal ``true`` continues and only a literal ``false`` skips the
    failure screenshot, so ``1`` or ``"true"`` are not coerced.
    """

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel, extra="allow")

    action: Any = None
    description: Optional[str] = None
    url: Optional[str] = None
    selector: Optional[str] = None
    value: Any = None
    key: Optional[str] = None
    timeout: Optional[float] = None
    assertion_type: Any = None
    expected_value: Any = None
    continue_on_fail: Any = None
    screenshot_on_fail: Any = None
    full_page: Optional[bool] = None

    def label(self, index: int) -> str:
        return self.description or f"Step {index + 1}"


class TestCase(WireModel):
    __test__: ClassVar[bool] = False

    id: Optional[Union[str, int]] = None
    name: Optional[str] = None
    steps: List[Step] = Field(default_factory=list)

    @field_validator("steps", mode="before")
    @classmethod
    def _none_means_no_steps(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def display_name(self) -> str:
        return self.name or "Unnamed Test"


class StepResult(WireModel):
    step_index: int
    step: str
    status: StepStatus
    result: Optional[dict] = None
    error: Optional[str] = None
    screenshot: Optional[str] = None
    duration: int = 0

    @model_serializer(mode="wrap")
    def _drop_empty(self, handler):
        data = handler(self)
        for key in ("result", "error", "screenshot"):
            if data.get(key) is None:
                data.pop(key, None)
        return data


class TestReport(WireModel):
    __test__: ClassVar[bool] = False

    test_case_id: Optional[Union[str, int]] = None
    test_name: str
    status: StepStatus
    duration: int
    results: List[StepResult] = Field(default_factory=list)
    timestamp: str
    run_state: RunState = Field(default=RunState.COMPLETED, exclude=True)


class BatchErrorEntry(WireModel):
    test_case_id: Optional[Union[str, int]] = None
    test_name: str
    status: str = "error"
    error: str


class BatchReport(WireModel):
    batch_status: str = "completed"
    total_tests: int
    passed: int
    failed: int
    results: List[Union[TestReport, BatchErrorEntry]] = Field(default_factory=list)


class DomSnapshot(WireModel):
    url: str
    selector_used: Optional[str] = None
    html: str
