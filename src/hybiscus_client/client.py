"""
HybiscusClient: build and preview reports with one awaitable call each.
"""

from typing import Any, Mapping, Optional, Protocol

import aiohttp

from hybiscus_client.api_client import HybiscusApiClient
from hybiscus_client.config import HybiscusConfig
from hybiscus_client.orchestrator import TaskOrchestrator
from hybiscus_client.schemas.tasks import OperationResult, ReportKind


class ReportDefinitionSource(Protocol):
    """Anything that can produce a report definition (e.g. a Report builder)."""

    def get_definition(self) -> Mapping[str, Any]: ...


class HybiscusClient:
    """
    Entry point for report generation.

    Example:
        >>> async with HybiscusClient(api_key="P09U8Y7G") as client:
        ...     result = await client.build_report(report_json=definition)
        ...     print(result.url)

    Args:
        config: Full configuration; built from api_key and overrides if omitted
        api_key: API key, used when config is not given
        session: Optional externally managed aiohttp session
        **overrides: base_url, timeout_seconds or poll_interval_seconds
    """

    def __init__(
        self,
        config: Optional[HybiscusConfig] = None,
        *,
        api_key: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        **overrides: Any,
    ):
        if config is None:
            config = HybiscusConfig(api_key=api_key or "")
        config = config.with_overrides(api_key=api_key, **overrides)

        self.config = config
        self.api = HybiscusApiClient(config, session=session)
        self.orchestrator = TaskOrchestrator(self.api, config)

    async def __aenter__(self) -> "HybiscusClient":
        await self.api.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self.api.close()

    async def build_report(
        self,
        report: Optional[ReportDefinitionSource] = None,
        report_json: Optional[Mapping[str, Any]] = None,
    ) -> OperationResult:
        """
        Build the PDF report and wait for its download URL.

        Args:
            report: Object exposing get_definition(); takes precedence
            report_json: Report definition as a plain mapping

        Returns:
            OperationResult whose url points at the finished PDF
        """
        definition = resolve_definition(report, report_json)
        return await self.orchestrator.run_to_completion(ReportKind.BUILD, definition)

    async def preview_report(
        self,
        report: Optional[ReportDefinitionSource] = None,
        report_json: Optional[Mapping[str, Any]] = None,
    ) -> OperationResult:
        """
        Generate a low quality JPEG preview instead of the final PDF.

        Previews do not count towards the account's report quota.
        """
        definition = resolve_definition(report, report_json)
        return await self.orchestrator.run_to_completion(ReportKind.PREVIEW, definition)


def resolve_definition(
    report: Optional[ReportDefinitionSource],
    report_json: Optional[Mapping[str, Any]],
) -> Mapping[str, Any]:
    """Pick the definition to submit. Raises ValueError if there is none."""
    definition = report.get_definition() if report is not None else None
    if definition is None:
        definition = report_json
    if definition is None:
        raise ValueError("Either report or report_json must be provided")
    return definition
