"""Tests for task schemas."""

import pytest
from pydantic import ValidationError

from hybiscus_client.schemas.tasks import (
    OperationResult,
    ReportKind,
    SubmitResponse,
    TaskHandle,
    TaskStatus,
    TaskStatusResponse,
)


class TestTaskStatus:

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("SUCCESS", TaskStatus.SUCCESS),
            ("queued", TaskStatus.QUEUED),
            ("PAUSED", TaskStatus.UNKNOWN),
            (None, TaskStatus.UNKNOWN),
            (3, TaskStatus.UNKNOWN),
        ],
    )
    def test_parse(self, value, expected):
        assert TaskStatus.parse(value) is expected


class TestReportKind:

    def test_endpoints(self):
        assert ReportKind.BUILD.endpoint == "build-report"
        assert ReportKind.PREVIEW.endpoint == "preview-report"


class TestSubmitResponse:

    def test_parses_wire_body(self):
        response = SubmitResponse.model_validate(
            {"task_id": "abc", "status": "QUEUED", "extra": 1}
        )

        assert response.task_id == "abc"
        assert response.status is TaskStatus.QUEUED

    @pytest.mark.parametrize("task_id", [None, "", "  "])
    def test_empty_task_id_is_none(self, task_id):
        response = SubmitResponse.model_validate({"task_id": task_id, "status": None})

        assert response.task_id is None
        assert response.status is TaskStatus.UNKNOWN


class TestTaskStatusResponse:

    def test_defaults(self):
        response = TaskStatusResponse.model_validate({})

        assert response.status is TaskStatus.UNKNOWN
        assert response.error_message is None


class TestTaskHandle:

    def test_frozen(self):
        handle = TaskHandle(task_id="abc", submitted_status=TaskStatus.QUEUED)

        with pytest.raises(ValidationError):
            handle.task_id = "other"

    def test_requires_task_id(self):
        with pytest.raises(ValidationError):
            TaskHandle(task_id="")


class TestOperationResult:

    def test_success_only(self):
        with pytest.raises(ValidationError):
            OperationResult(task_id="abc", status=TaskStatus.FAILED, url="https://x")

    def test_defaults_to_success(self):
        result = OperationResult(task_id="abc", url="https://x/get-report?task_id=abc")

        assert result.status is TaskStatus.SUCCESS
