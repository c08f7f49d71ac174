"""Pydantic schemas for Hybiscus task requests and results."""

from hybiscus_client.schemas.tasks import (
    OperationResult,
    ReportKind,
    SubmitResponse,
    TaskHandle,
    TaskStatus,
    TaskStatusResponse,
)

__all__ = [
    "OperationResult",
    "ReportKind",
    "SubmitResponse",
    "TaskHandle",
    "TaskStatus",
    "TaskStatusResponse",
]
