"""
Async client for the Hybiscus report generation API.

Submit a report definition, wait for the remote task to finish, and get back
the download URL or a typed HybiscusApiError.
"""

from hybiscus_client.api_client import HybiscusApiClient
from hybiscus_client.client import HybiscusClient
from hybiscus_client.common.exceptions import (
    ConfigurationError,
    ErrorKind,
    HybiscusApiError,
    MissingTaskIdError,
    ProtocolError,
    ServiceError,
    TaskTimeoutError,
    TransportError,
    is_hybiscus_api_error,
)
from hybiscus_client.config import HybiscusConfig
from hybiscus_client.orchestrator import TaskOrchestrator
from hybiscus_client.schemas.tasks import (
    OperationResult,
    ReportKind,
    TaskHandle,
    TaskStatus,
)
from hybiscus_client.version import __version__

__all__ = [
    "ConfigurationError",
    "ErrorKind",
    "HybiscusApiClient",
    "HybiscusApiError",
    "HybiscusClient",
    "HybiscusConfig",
    "MissingTaskIdError",
    "OperationResult",
    "ProtocolError",
    "ReportKind",
    "ServiceError",
    "TaskHandle",
    "TaskOrchestrator",
    "TaskStatus",
    "TaskTimeoutError",
    "TransportError",
    "__version__",
    "is_hybiscus_api_error",
]
