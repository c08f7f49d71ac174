"""
Task orchestration for Hybiscus report jobs.

Drives a submitted task to a final outcome: submit, check status once, then
poll on a fixed interval under an overall deadline. The caller awaits a single
coroutine that returns an OperationResult or raises a HybiscusApiError.
"""

import asyncio
import logging
import time
from typing import Any, Union
from urllib.parse import urlencode

from hybiscus_client.api_client import HybiscusApiClient
from hybiscus_client.common.exceptions import (
    HybiscusApiError,
    MissingTaskIdError,
    ServiceError,
    TaskTimeoutError,
)
from hybiscus_client.common.logging import LoggedClass
from hybiscus_client.config import HybiscusConfig
from hybiscus_client.metrics import record_poll_cycle, record_task_outcome
from hybiscus_client.schemas.tasks import (
    OperationResult,
    ReportKind,
    TaskHandle,
    TaskStatus,
    TaskStatusResponse,
)

REPORT_ENDPOINT = "get-report"


class TaskOrchestrator(LoggedClass):
    """
    Runs one report task from submission to SUCCESS, FAILED or timeout.

    State per task:
        SUBMITTED -> CREATED | QUEUED | RUNNING | UNKNOWN -> SUCCESS
                                                          -> FAILED (ServiceError)
                                                          -> TIMEOUT (TaskTimeoutError)

    Only pending states are polled again. A failed submission or a failed
    status check is never retried. Independent tasks can be orchestrated
    concurrently; polling the same task from several callers is not supported.

    Example:
        >>> async with HybiscusApiClient(config) as api:
        ...     orchestrator = TaskOrchestrator(api, config)
        ...     result = await orchestrator.run_to_completion("build", definition)
        ...     print(result.url)
    """

    log_component = "orchestrator"

    def __init__(self, api: HybiscusApiClient, config: HybiscusConfig):
        self.api = api
        self.config = config
        self.base_url = config.base_url
        super().__init__()

    async def run_to_completion(
        self,
        kind: Union[ReportKind, str],
        payload: Any,
    ) -> OperationResult:
        """
        Submit a report job and wait for it to succeed.

        Args:
            kind: ReportKind.BUILD or ReportKind.PREVIEW
            payload: JSON-serializable report definition

        Returns:
            OperationResult with the download URL

        Raises:
            TransportError, ProtocolError, ServiceError: From the API calls
            MissingTaskIdError: Submission returned no task id
            TaskTimeoutError: Task not finished within config.timeout_seconds
        """
        kind = ReportKind(kind)
        started = time.perf_counter()
        try:
            result = await self._run(kind, payload)
        except HybiscusApiError as e:
            record_task_outcome(kind.value, e.kind.value, time.perf_counter() - started)
            raise
        record_task_outcome(kind.value, "success", time.perf_counter() - started)
        return result

    async def _run(self, kind: ReportKind, payload: Any) -> OperationResult:
        submitted = await self.api.submit_job(kind, payload)
        if submitted.task_id is None:
            raise MissingTaskIdError(status=submitted.status)

        handle = TaskHandle(task_id=submitted.task_id, submitted_status=submitted.status)
        self._log(
            logging.INFO,
            "Report task submitted",
            task_id=handle.task_id,
            task_status=handle.submitted_status.value,
            report_kind=kind.value,
        )

        first = await self.api.query_status(handle.task_id)
        self._check_failed(handle.task_id, first)
        if first.status is not TaskStatus.SUCCESS:
            await self.await_completion(handle.task_id)

        result = self.build_result(handle.task_id)
        self._log(
            logging.INFO,
            "Report task succeeded",
            task_id=handle.task_id,
            report_kind=kind.value,
        )
        return result

    async def await_completion(self, task_id: str) -> TaskStatusResponse:
        """
        Poll until the task reaches SUCCESS.

        Sleeps config.poll_interval_seconds before each status check. The
        whole loop runs under a config.timeout_seconds deadline; when it
        expires the loop is cancelled and no further requests are made.

        Args:
            task_id: Task to wait for

        Returns:
            The SUCCESS status response

        Raises:
            TaskTimeoutError: Deadline passed before SUCCESS
            ServiceError: Task reported FAILED or an error message
            TransportError, ProtocolError: A status check failed
        """
        try:
            return await asyncio.wait_for(
                self._poll_until_success(task_id),
                timeout=self.config.timeout_seconds,
            )
        except asyncio.TimeoutError:
            error = TaskTimeoutError(task_id, self.config.timeout_seconds)
            self._log(
                logging.WARNING,
                "Timed out waiting for report task",
                task_id=task_id,
                timeout_seconds=self.config.timeout_seconds,
            )
            raise error from None

    async def _poll_until_success(self, task_id: str) -> TaskStatusResponse:
        poll_count = 0
        while True:
            await asyncio.sleep(self.config.poll_interval_seconds)
            poll_count += 1
            record_poll_cycle()

            response = await self.api.query_status(task_id)
            self._check_failed(task_id, response)
            if response.status is TaskStatus.SUCCESS:
                self._log(
                    logging.DEBUG,
                    "Task reached SUCCESS",
                    task_id=task_id,
                    poll_count=poll_count,
                )
                return response

            self._log(
                logging.DEBUG,
                "Task still pending",
                task_id=task_id,
                task_status=response.status.value,
                poll_count=poll_count,
            )

    def _check_failed(self, task_id: str, response: TaskStatusResponse) -> None:
        if response.status is TaskStatus.FAILED:
            raise ServiceError(
                "Task failed",
                task_id=task_id,
                status=TaskStatus.FAILED,
            )

    def build_resource_url(self, task_id: str) -> str:
        """Download URL for a finished task: {base}/get-report?task_id=..&api_key=.."""
        query = urlencode({"task_id": task_id, "api_key": self.config.api_key})
        return f"{self.base_url}/{REPORT_ENDPOINT}?{query}"

    def build_result(self, task_id: str) -> OperationResult:
        return OperationResult(
            task_id=task_id,
            status=TaskStatus.SUCCESS,
            url=self.build_resource_url(task_id),
        )
