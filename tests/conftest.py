"""
pytest configuration for hybiscus_client tests.

Adds src directory to Python path and provides a fake aiohttp session that
records requests and replays queued responses.
"""

import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

from hybiscus_client.config import HybiscusConfig  # noqa: E402

API_KEY = "P09U8Y7G"


class FakeResponse:
    """Minimal stand-in for aiohttp.ClientResponse."""

    def __init__(
        self,
        body: Union[str, bytes] = "",
        status: int = 200,
        content_type: Optional[str] = "application/json",
    ):
        self.status = status
        self.headers: Dict[str, str] = {}
        if content_type:
            self.headers["Content-Type"] = content_type
        self.charset: Optional[str] = None
        if content_type and "charset=" in content_type:
            self.charset = content_type.split("charset=", 1)[1].strip()
        self._body = body.encode("utf-8") if isinstance(body, str) else body

    async def read(self) -> bytes:
        return self._body


def json_response(data: Any, status: int = 200) -> FakeResponse:
    return FakeResponse(json.dumps(data), status=status)


@dataclass
class RecordedRequest:
    method: str
    url: str
    params: Optional[Dict[str, str]]
    data: Optional[str]
    headers: Dict[str, str]
    timeout: Any

    @property
    def json(self) -> Any:
        return json.loads(self.data) if self.data is not None else None


class _RequestContext:
    def __init__(self, outcome: Any):
        self._outcome = outcome

    async def __aenter__(self) -> FakeResponse:
        outcome = self._outcome
        if callable(outcome):
            outcome = await outcome()
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> bool:
        return False


class FakeSession:
    """
    Replays queued outcomes for session.request().

    An outcome is a FakeResponse, an exception instance to raise, or an async
    callable returning either. Once the queue is empty the default outcome is
    used; with no default an unexpected request fails the test.
    """

    def __init__(self, *outcomes: Any, default: Any = None):
        self.outcomes: List[Any] = list(outcomes)
        self.default = default
        self.requests: List[RecordedRequest] = []
        self.closed = False

    def queue(self, *outcomes: Any) -> "FakeSession":
        self.outcomes.extend(outcomes)
        return self

    def request(self, method, url, params=None, data=None, headers=None, timeout=None):
        self.requests.append(
            RecordedRequest(method, url, params, data, dict(headers or {}), timeout)
        )
        if self.outcomes:
            outcome = self.outcomes.pop(0)
        elif self.default is not None:
            outcome = self.default
        else:
            outcome = AssertionError(f"Unexpected request: {method} {url}")
        return _RequestContext(outcome)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def config():
    """Fast-polling configuration with default base URL."""
    return HybiscusConfig(
        api_key=API_KEY,
        timeout_seconds=1.0,
        poll_interval_seconds=0.01,
    )


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def report_definition():
    return {
        "type": "Report",
        "options": {
            "report_title": "Report title",
            "report_byline": "Report byline",
        },
        "components": [{"type": "Text", "options": {"text": "Text component"}}],
    }
