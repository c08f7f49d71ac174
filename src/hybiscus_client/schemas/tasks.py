"""
Task schemas for the Hybiscus report API.

Contains Pydantic models for submit and status responses as returned on the
wire, plus the immutable handle and result values handed to callers.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReportKind(str, Enum):
    """Type of report job: final PDF build or low quality JPEG preview."""

    BUILD = "build"
    PREVIEW = "preview"

    @property
    def endpoint(self) -> str:
        return f"{self.value}-report"


class TaskStatus(str, Enum):
    """Remote task state. Anything unrecognised is UNKNOWN."""

    CREATED = "CREATED"
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: Any) -> "TaskStatus":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.upper())
            except ValueError:
                return cls.UNKNOWN
        return cls.UNKNOWN


class SubmitResponse(BaseModel):
    """Body of a successful build-report / preview-report call.

    Example:
        >>> SubmitResponse.model_validate({"task_id": "abc", "status": "QUEUED"})
        SubmitResponse(task_id='abc', status=<TaskStatus.QUEUED: 'QUEUED'>)
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    task_id: Optional[str] = Field(
        default=None,
        description="Identifier of the queued task (None if the service omitted it)",
    )
    status: TaskStatus = Field(
        default=TaskStatus.UNKNOWN,
        description="Task status at submission time",
    )

    @field_validator("task_id", mode="before")
    @classmethod
    def empty_task_id_is_missing(cls, v: Any) -> Optional[str]:
        if v is None:
            return None
        v = str(v).strip()
        return v or None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v: Any) -> TaskStatus:
        return TaskStatus.parse(v)


class TaskStatusResponse(BaseModel):
    """Body of a get-task-status call."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    status: TaskStatus = Field(default=TaskStatus.UNKNOWN)
    error_message: Optional[Any] = Field(
        default=None,
        description="Set by the service when the task has failed",
    )

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, v: Any) -> TaskStatus:
        return TaskStatus.parse(v)


class TaskHandle(BaseModel):
    """Identifies one submitted remote job. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    task_id: str = Field(..., min_length=1)
    submitted_status: TaskStatus = TaskStatus.UNKNOWN


class OperationResult(BaseModel):
    """Terminal success value of a build or preview.

    Example:
        >>> OperationResult(
        ...     task_id="abc",
        ...     url="https://api.hybiscus.dev/api/v1/get-report?task_id=abc&api_key=K",
        ... )
    """

    model_config = ConfigDict(frozen=True)

    task_id: str = Field(..., min_length=1)
    status: TaskStatus = TaskStatus.SUCCESS
    url: str = Field(..., min_length=1, description="Download link for the report")

    @field_validator("status")
    @classmethod
    def must_be_success(cls, v: TaskStatus) -> TaskStatus:
        if v is not TaskStatus.SUCCESS:
            raise ValueError("OperationResult is only built for SUCCESS tasks")
        return v
