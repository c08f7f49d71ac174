"""
Hybiscus REST API client.

Async HTTP transport for the Hybiscus report service. Each call is a single
bounded request; responses are normalised into pydantic models or one of the
typed errors in hybiscus_client.common.exceptions.
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, Optional, Tuple, Union

import aiohttp

from hybiscus_client.common.exceptions import (
    ProtocolError,
    ServiceError,
    TransportError,
)
from hybiscus_client.common.logging import LoggedClass, logged_operation
from hybiscus_client.config import HybiscusConfig
from hybiscus_client.metrics import record_api_request
from hybiscus_client.schemas.tasks import (
    ReportKind,
    SubmitResponse,
    TaskStatus,
    TaskStatusResponse,
)
from hybiscus_client.version import __version__

CLIENT_HEADER = "X-HYB-CLIENT"
CLIENT_IDENTIFIER = f"python:hybiscus-client-v{__version__}"
JSON_CONTENT_TYPE = "application/json"
STATUS_ENDPOINT = "get-task-status"


def decode_body(raw: bytes, charset: Optional[str]) -> str:
    """Decode a response body, replacing bytes that are invalid in its charset."""
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


class HybiscusApiClient(LoggedClass):
    """
    Async client for the Hybiscus report API.

    Provides the two calls the task orchestrator needs:
    - submit_job(): queue a build or preview
    - query_status(): read the current state of a task

    Every request carries the API key and client identifier headers and is
    bounded by config.timeout_seconds. Failures surface as TransportError,
    ProtocolError or ServiceError; raw aiohttp exceptions never escape.

    Usage:
        config = HybiscusConfig(api_key="...")
        async with HybiscusApiClient(config) as api:
            submitted = await api.submit_job(ReportKind.BUILD, definition)
            status = await api.query_status(submitted.task_id)

        # Reuse an application-owned session (not closed by the client)
        async with aiohttp.ClientSession() as session:
            api = HybiscusApiClient(config, session=session)
    """

    log_component = "api"

    def __init__(
        self,
        config: HybiscusConfig,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize Hybiscus API client.

        Args:
            config: Connection configuration
            session: Optional externally managed aiohttp session. When omitted
                the client creates one lazily and closes it in close().
        """
        self.config = config
        self.base_url = config.base_url
        self._session = session
        self._owns_session = session is None
        super().__init__()

    async def __aenter__(self) -> "HybiscusApiClient":
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Create aiohttp session if not exists."""
        if self._owns_session:
            if self._session is None or self._session.closed:
                self._session = aiohttp.ClientSession()
        elif self._session is None or self._session.closed:
            raise TransportError("HTTP session is closed")
        return self._session

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()
        if self._owns_session:
            self._session = None

    def _headers(self, with_body: bool) -> Dict[str, str]:
        headers = {
            "X-API-KEY": self.config.api_key,
            CLIENT_HEADER: CLIENT_IDENTIFIER,
        }
        if with_body:
            headers["Content-Type"] = JSON_CONTENT_TYPE
        return headers

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[Dict[str, str]] = None,
        json_body: Any = None,
        task_id: Optional[str] = None,
    ) -> Tuple[int, Dict[str, Any]]:
        """
        Make one API request and decode the JSON body.

        Args:
            method: HTTP method (GET, POST)
            endpoint: Path below base_url
            params: Query parameters
            json_body: Value serialized as the body of a POST request
            task_id: Task the request concerns, attached to protocol errors

        Returns:
            Tuple of (HTTP status, decoded JSON object)

        Raises:
            TransportError: Connection failure or request timeout
            ProtocolError: Body is not a JSON object
        """
        session = await self._ensure_session()
        url = f"{self.base_url}/{endpoint}"

        data: Optional[str] = None
        if method == "POST":
            try:
                data = json.dumps(json_body)
            except (TypeError, ValueError) as e:
                raise ValueError(f"Report definition is not JSON serializable: {e}") from e

        self._log(logging.DEBUG, "API request", api_endpoint=endpoint, api_method=method)
        started = time.perf_counter()

        try:
            async with session.request(
                method,
                url,
                params=params,
                data=data,
                headers=self._headers(with_body=data is not None),
                timeout=aiohttp.ClientTimeout(total=self.config.timeout_seconds),
            ) as response:
                http_status = response.status
                content_type = response.headers.get("Content-Type") or ""
                charset = response.charset
                raw = await response.read()

        except asyncio.TimeoutError as e:
            record_api_request(endpoint, "transport", time.perf_counter() - started)
            self._log(
                logging.WARNING,
                "API request timeout",
                api_endpoint=endpoint,
                api_method=method,
                timeout_seconds=self.config.timeout_seconds,
            )
            raise TransportError(
                f"Request timed out after {self.config.timeout_seconds:g}s: {endpoint}",
                cause=e,
            ) from e

        except aiohttp.ClientError as e:
            record_api_request(endpoint, "transport", time.perf_counter() - started)
            self._log_exception(
                e,
                "API connection error",
                level=logging.WARNING,
                api_endpoint=endpoint,
                api_method=method,
            )
            raise TransportError(f"Connection error: {e}", cause=e) from e

        duration = time.perf_counter() - started
        text = decode_body(raw, charset)

        if JSON_CONTENT_TYPE not in content_type.lower():
            record_api_request(endpoint, "protocol", duration)
            self._log(
                logging.WARNING,
                "Unexpected response content type",
                api_endpoint=endpoint,
                http_status=http_status,
            )
            raise ProtocolError(
                text,
                task_id=task_id,
                status=TaskStatus.FAILED,
                http_status=http_status,
            )

        try:
            decoded: Union[Dict[str, Any], Any] = json.loads(text)
        except ValueError as e:
            record_api_request(endpoint, "protocol", duration)
            raise ProtocolError(
                text,
                task_id=task_id,
                status=TaskStatus.FAILED,
                http_status=http_status,
                cause=e,
            ) from e

        if not isinstance(decoded, dict):
            record_api_request(endpoint, "protocol", duration)
            raise ProtocolError(
                text,
                task_id=task_id,
                status=TaskStatus.FAILED,
                http_status=http_status,
            )

        record_api_request(
            endpoint, "success" if 200 <= http_status < 300 else "service", duration
        )
        self._log(
            logging.DEBUG,
            "API response",
            api_endpoint=endpoint,
            http_status=http_status,
            duration_ms=round(duration * 1000, 1),
        )
        return http_status, decoded

    @logged_operation(level=logging.DEBUG)
    async def submit_job(
        self,
        kind: Union[ReportKind, str],
        payload: Any,
    ) -> SubmitResponse:
        """
        Queue a report build or preview.

        Args:
            kind: ReportKind.BUILD or ReportKind.PREVIEW
            payload: JSON-serializable report definition

        Returns:
            SubmitResponse with the task id (None if the service omitted it)
            and the initial status

        Raises:
            TransportError: Connection failure or timeout
            ProtocolError: Response was not JSON
            ServiceError: Non-2xx response; detail carries the service's
                "detail" field
        """
        kind = ReportKind(kind)
        http_status, data = await self._request("POST", kind.endpoint, json_body=payload)

        if not 200 <= http_status < 300:
            raise ServiceError(
                data.get("detail"),
                status=TaskStatus.FAILED,
                http_status=http_status,
            )

        return SubmitResponse.model_validate(data)

    @logged_operation(level=logging.DEBUG)
    async def query_status(self, task_id: str) -> TaskStatusResponse:
        """
        Read the current status of a task.

        Args:
            task_id: Task id returned by submit_job

        Returns:
            TaskStatusResponse with the parsed status

        Raises:
            TransportError: Connection failure or timeout
            ProtocolError: Response was not JSON
            ServiceError: Non-2xx response, or the service reported an
                error_message for the task
        """
        http_status, data = await self._request(
            "GET",
            STATUS_ENDPOINT,
            params={"task_id": task_id},
            task_id=task_id,
        )

        if not 200 <= http_status < 300:
            raise ServiceError(
                data.get("detail") or "Error retrieving task status!",
                task_id=task_id,
                http_status=http_status,
            )

        response = TaskStatusResponse.model_validate(data)
        if response.error_message is not None:
            raise ServiceError(
                response.error_message,
                task_id=task_id,
                status=response.status,
                http_status=http_status,
            )

        return response
