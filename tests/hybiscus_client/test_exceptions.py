"""Tests for the error hierarchy."""

import pytest

from hybiscus_client.common.exceptions import (
    ErrorKind,
    HybiscusApiError,
    MissingTaskIdError,
    ProtocolError,
    ServiceError,
    TaskTimeoutError,
    TransportError,
    describe_detail,
    is_hybiscus_api_error,
)
from hybiscus_client.schemas.tasks import TaskStatus


class TestErrorKinds:

    @pytest.mark.parametrize(
        "error, kind",
        [
            (TransportError("boom"), ErrorKind.TRANSPORT),
            (ProtocolError("<html>"), ErrorKind.PROTOCOL),
            (ServiceError("bad"), ErrorKind.SERVICE),
            (MissingTaskIdError(), ErrorKind.SERVICE),
            (TaskTimeoutError("abc", 60), ErrorKind.TIMEOUT),
        ],
    )
    def test_kind_discriminator(self, error, kind):
        assert error.kind is kind
        assert isinstance(error, HybiscusApiError)
        assert is_hybiscus_api_error(error)

    def test_plain_exceptions_are_not_api_errors(self):
        assert not is_hybiscus_api_error(ValueError("x"))
        assert not is_hybiscus_api_error({"status": None, "error": "x"})

    def test_transport_error_has_no_task(self):
        cause = OSError("reset")
        error = TransportError("Connection error", cause=cause)

        assert error.task_id is None
        assert error.status is None
        assert "Caused by: reset" in str(error)

    def test_timeout_message(self):
        error = TaskTimeoutError("abc", 60.0)

        assert error.message == "Timeout waiting for task to complete. Timeout: 60 seconds"
        assert error.task_id == "abc"
        assert error.timeout_seconds == 60.0

    def test_to_dict(self):
        error = ServiceError("Task failed", task_id="abc", status=TaskStatus.FAILED)

        assert error.to_dict() == {
            "kind": "service",
            "task_id": "abc",
            "status": "FAILED",
            "error": "Task failed",
        }

    def test_str_includes_task_and_http_status(self):
        error = ServiceError("Not found", task_id="abc", http_status=404)

        assert str(error) == "Not found | task_id=abc | http_status=404"


class TestDescribeDetail:

    def test_none(self):
        assert describe_detail(None) == "Unknown error"

    def test_string(self):
        assert describe_detail("Invalid API key") == "Invalid API key"

    def test_validation_list(self):
        detail = [
            {"loc": ["body", "components", 0], "msg": "field required"},
            {"msg": "extra fields not permitted"},
        ]

        assert describe_detail(detail) == (
            "body.components.0: field required; extra fields not permitted"
        )

    def test_mapping(self):
        assert describe_detail({"code": 7}) == "{'code': 7}"
