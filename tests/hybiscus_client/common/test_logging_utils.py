"""Tests for logging helpers."""

import json
import logging

import pytest

from hybiscus_client.common.exceptions import ServiceError
from hybiscus_client.common.logging import (
    JSONFormatter,
    LoggedClass,
    log_exception,
    logged_operation,
    redact_api_key,
    setup_logging,
)


class Worker(LoggedClass):
    log_component = "worker"

    def __init__(self):
        self.base_url = "https://api.hybiscus.dev/api/v1"
        super().__init__()

    @logged_operation(level=logging.INFO)
    async def succeed(self):
        return 42

    @logged_operation(level=logging.INFO)
    async def fail(self):
        raise ServiceError("Task failed", task_id="abc")


def test_redact_api_key():
    url = "https://api.hybiscus.dev/api/v1/get-report?task_id=abc&api_key=P09U8Y7G"

    assert redact_api_key(url) == (
        "https://api.hybiscus.dev/api/v1/get-report?task_id=abc&api_key=***"
    )


def test_log_exception_adds_error_fields(caplog):
    logger = logging.getLogger("test.log_exception")
    error = ServiceError("Renderer crashed", task_id="abc")

    with caplog.at_level(logging.ERROR, logger="test.log_exception"):
        log_exception(logger, error, "Report failed", include_traceback=False)

    record = caplog.records[0]
    assert record.error_kind == "service"
    assert record.task_id == "abc"
    assert record.error_message.startswith("Renderer crashed")


def test_logged_class_logger_name():
    worker = Worker()

    assert worker._logger.name == f"{__name__}.worker"


@pytest.mark.asyncio
async def test_logged_operation_success(caplog):
    worker = Worker()

    with caplog.at_level(logging.INFO):
        assert await worker.succeed() == 42

    assert "Worker.succeed completed" in caplog.messages


@pytest.mark.asyncio
async def test_logged_operation_reraises(caplog):
    worker = Worker()

    with caplog.at_level(logging.WARNING):
        with pytest.raises(ServiceError):
            await worker.fail()

    record = next(r for r in caplog.records if r.getMessage() == "Worker.fail failed")
    assert record.levelno == logging.WARNING
    assert record.error_kind == "service"


def test_json_formatter_redacts_urls():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "Report ready", None, None)
    record.url = "https://h/get-report?task_id=abc&api_key=SECRET"
    record.task_id = "abc"

    entry = json.loads(JSONFormatter().format(record))

    assert entry["msg"] == "Report ready"
    assert entry["task_id"] == "abc"
    assert "SECRET" not in entry["url"]


def test_setup_logging_quiets_aiohttp():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        logger = setup_logging(level=logging.DEBUG, json_format=True)

        assert logger.name == "hybiscus_client"
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("aiohttp").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
