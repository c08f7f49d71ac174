"""
Exception types and error classification for hybiscus_client.

Provides:
- ErrorKind enum used as the discriminator on every API error
- Typed exception hierarchy surfaced to callers
- Helpers for recognising and describing errors
"""

from enum import Enum
from typing import Any, Optional, Union

ErrorDetail = Union[str, dict, list, None]


class ErrorKind(Enum):
    """
    Classification of failures surfaced by the client.

    Categories:
        TRANSPORT: Network failure or per-request timeout before any response
        PROTOCOL: Response received but the body was not JSON
        SERVICE: JSON response that signals failure (non-2xx detail,
                 FAILED task, error_message set, missing task id)
        TIMEOUT: Client-side deadline passed while waiting for SUCCESS
    """

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    SERVICE = "service"
    TIMEOUT = "timeout"


class ConfigurationError(ValueError):
    """Invalid or missing client configuration."""

    pass


class HybiscusApiError(Exception):
    """
    Base exception for all Hybiscus API failures.

    Attributes:
        task_id: Task the failure relates to, if one was assigned
        status: Task status at the time of failure, if known
        detail: Error detail from the service (string or structured payload)
        http_status: HTTP status code if a response was received
        cause: Original exception if wrapping
    """

    kind: ErrorKind = ErrorKind.SERVICE

    def __init__(
        self,
        detail: ErrorDetail,
        task_id: Optional[str] = None,
        status: Optional[Any] = None,
        http_status: Optional[int] = None,
        cause: Optional[BaseException] = None,
    ):
        self.detail = detail
        self.task_id = task_id
        self.status = status
        self.http_status = http_status
        self.cause = cause
        super().__init__(describe_detail(detail))

    @property
    def message(self) -> str:
        return describe_detail(self.detail)

    def __str__(self) -> str:
        parts = [self.message]
        if self.task_id:
            parts.append(f"task_id={self.task_id}")
        if self.http_status is not None:
            parts.append(f"http_status={self.http_status}")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " | ".join(parts)

    def to_dict(self) -> dict:
        """Serializable view of the error for logs and CLI output."""
        status = self.status
        if status is not None and hasattr(status, "value"):
            status = status.value
        return {
            "kind": self.kind.value,
            "task_id": self.task_id,
            "status": status,
            "error": self.detail,
        }


class TransportError(HybiscusApiError):
    """Request failed or was aborted before a response arrived."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, detail: ErrorDetail, cause: Optional[BaseException] = None):
        super().__init__(detail, task_id=None, status=None, cause=cause)


class ProtocolError(HybiscusApiError):
    """Response body was not the expected JSON document."""

    kind = ErrorKind.PROTOCOL


class ServiceError(HybiscusApiError):
    """Service answered with a structured failure."""

    kind = ErrorKind.SERVICE


class MissingTaskIdError(ServiceError):
    """Submission was accepted but no task id came back."""

    def __init__(self, status: Optional[Any] = None, http_status: Optional[int] = None):
        super().__init__(
            "No task ID returned.",
            task_id=None,
            status=status,
            http_status=http_status,
        )


class TaskTimeoutError(HybiscusApiError):
    """Task did not reach SUCCESS before the configured timeout."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, task_id: str, timeout_seconds: float):
        super().__init__(
            "Timeout waiting for task to complete. "
            f"Timeout: {_format_seconds(timeout_seconds)} seconds",
            task_id=task_id,
            status=None,
        )
        self.timeout_seconds = timeout_seconds


def describe_detail(detail: ErrorDetail) -> str:
    """
    Render an error detail as a single line of text.

    FastAPI-style validation payloads (a list of {"loc", "msg"} dicts) are
    flattened to "loc: msg" pairs.
    """
    if detail is None:
        return "Unknown error"
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        parts = []
        for item in detail:
            if isinstance(item, dict) and "msg" in item:
                loc = ".".join(str(p) for p in item.get("loc", []))
                parts.append(f"{loc}: {item['msg']}" if loc else str(item["msg"]))
            else:
                parts.append(str(item))
        return "; ".join(parts)
    return str(detail)


def is_hybiscus_api_error(obj: Any) -> bool:
    """Whether obj is one of the errors raised by this client."""
    return isinstance(obj, HybiscusApiError)


def _format_seconds(value: float) -> str:
    # 60.0 -> "60", 0.5 -> "0.5"
    return f"{value:g}"
