"""
Command line entry point for building Hybiscus reports.

Usage:
    # Build the PDF for a report definition
    python -m hybiscus_client build report.json

    # Low quality preview instead of the final PDF
    python -m hybiscus_client preview report.json

    # Settings from a config file, with a longer timeout
    python -m hybiscus_client build report.json --config config.yaml --timeout 120

    # Expose Prometheus metrics while waiting
    python -m hybiscus_client build report.json --metrics-port 8000

Configuration:
    HYBISCUS_API_KEY is required unless config.yaml sets hybiscus.api_key.
    See HybiscusConfig.load_config() for the other settings.

Exit codes:
    0  report ready, URL printed on stdout
    1  API error (kind and detail printed on stderr as JSON)
    2  invalid arguments, configuration or report definition
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from prometheus_client import start_http_server

from hybiscus_client.client import HybiscusClient
from hybiscus_client.common.exceptions import ConfigurationError, HybiscusApiError
from hybiscus_client.common.logging import get_logger, setup_logging
from hybiscus_client.config import HybiscusConfig
from hybiscus_client.schemas.tasks import OperationResult, ReportKind

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hybiscus_client",
        description="Submit a report definition to Hybiscus and print the report URL",
    )
    parser.add_argument(
        "kind",
        choices=[k.value for k in ReportKind],
        help="build: final PDF, preview: low quality JPEG",
    )
    parser.add_argument("definition", type=Path, help="Path to report definition JSON")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config.yaml (default: ./config.yaml if present)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Override timeout in seconds for each request and for the wait",
    )
    parser.add_argument(
        "--metrics-port",
        type=int,
        default=None,
        help="Serve Prometheus metrics on this port",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument("--json-logs", action="store_true", help="Log as JSON lines")
    return parser.parse_args(argv)


def load_definition(path: Path) -> dict:
    """Read a report definition file. Raises ValueError on unreadable input."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ValueError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


async def run_report(
    config: HybiscusConfig, kind: ReportKind, definition: dict
) -> OperationResult:
    async with HybiscusClient(config) as client:
        if kind is ReportKind.PREVIEW:
            return await client.preview_report(report_json=definition)
        return await client.build_report(report_json=definition)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(level=getattr(logging, args.log_level), json_format=args.json_logs)

    try:
        config = HybiscusConfig.load_config(args.config).with_overrides(
            timeout_seconds=args.timeout
        )
        definition = load_definition(args.definition)
    except (ConfigurationError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    if args.metrics_port:
        start_http_server(args.metrics_port)
        logger.info(f"Metrics server started on port {args.metrics_port}")

    try:
        result = asyncio.run(run_report(config, ReportKind(args.kind), definition))
    except HybiscusApiError as e:
        print(json.dumps(e.to_dict(), default=str), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.warning("Interrupted")
        return 130

    print(result.url)
    return 0


if __name__ == "__main__":
    sys.exit(main())
