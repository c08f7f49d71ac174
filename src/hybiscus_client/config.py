"""Hybiscus client configuration from config.yaml and environment variables."""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from hybiscus_client.common.exceptions import ConfigurationError

DEFAULT_BASE_URL = "https://api.hybiscus.dev/api/v1"
DEFAULT_TIMEOUT_SECONDS = 60.0
DEFAULT_POLL_INTERVAL_SECONDS = 0.75

# Default config file location (current working directory)
DEFAULT_CONFIG_PATH = Path("config.yaml")


@dataclass(frozen=True)
class HybiscusConfig:
    """Connection and polling configuration for the Hybiscus API.

    Immutable; derive variants with with_overrides().
    All timing values in seconds.
    """

    api_key: str
    base_url: str = DEFAULT_BASE_URL

    # Applies to each HTTP request and to the overall wait for SUCCESS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    # Fixed delay between status checks
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if not self.api_key or not str(self.api_key).strip():
            raise ConfigurationError("api_key is required")
        if not self.base_url.startswith(("http://", "https://")):
            raise ConfigurationError(
                f"base_url must be an http(s) URL, got {self.base_url!r}"
            )
        if self.timeout_seconds <= 0:
            raise ConfigurationError(
                f"timeout_seconds must be positive, got {self.timeout_seconds}"
            )
        if self.poll_interval_seconds <= 0:
            raise ConfigurationError(
                f"poll_interval_seconds must be positive, got {self.poll_interval_seconds}"
            )
        # Frozen dataclass: normalise via object.__setattr__
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))

    @classmethod
    def from_env(cls) -> "HybiscusConfig":
        """Load configuration from environment variables.

        Required environment variables:
            HYBISCUS_API_KEY: API key sent as X-API-KEY

        Optional environment variables (with defaults):
            HYBISCUS_BASE_URL: https://api.hybiscus.dev/api/v1 (default)
            HYBISCUS_TIMEOUT_SECONDS: 60 (default)
            HYBISCUS_POLL_INTERVAL_SECONDS: 0.75 (default)

        Raises:
            ConfigurationError: If required environment variables are missing
        """
        api_key = os.getenv("HYBISCUS_API_KEY")
        if not api_key:
            raise ConfigurationError("HYBISCUS_API_KEY environment variable is required")

        return cls(
            api_key=api_key,
            base_url=os.getenv("HYBISCUS_BASE_URL", DEFAULT_BASE_URL),
            timeout_seconds=_parse_float(
                "HYBISCUS_TIMEOUT_SECONDS",
                os.getenv("HYBISCUS_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)),
            ),
            poll_interval_seconds=_parse_float(
                "HYBISCUS_POLL_INTERVAL_SECONDS",
                os.getenv(
                    "HYBISCUS_POLL_INTERVAL_SECONDS", str(DEFAULT_POLL_INTERVAL_SECONDS)
                ),
            ),
        )

    @classmethod
    def load_config(cls, config_path: Optional[Path] = None) -> "HybiscusConfig":
        """Load configuration from config.yaml and environment variables.

        Configuration priority (highest to lowest):
        1. Environment variables
        2. config.yaml file (under 'hybiscus:' key)
        3. Dataclass defaults

        Example config.yaml:
            hybiscus:
              api_key: P09U8Y7G
              base_url: https://api.hybiscus.dev/api/v1
              timeout_seconds: 120
              poll_interval_seconds: 1.5

        Raises:
            ConfigurationError: If no API key is found or a value is invalid
        """
        config_path = config_path or DEFAULT_CONFIG_PATH

        data: Dict[str, Any] = {}
        if config_path.exists():
            with open(config_path, "r") as f:
                yaml_data = yaml.safe_load(f) or {}
            if not isinstance(yaml_data, dict):
                raise ConfigurationError(f"{config_path} must contain a mapping")
            data = yaml_data.get("hybiscus", {}) or {}

        api_key = os.getenv("HYBISCUS_API_KEY", data.get("api_key", ""))
        if not api_key:
            raise ConfigurationError(
                "API key not configured: set HYBISCUS_API_KEY or hybiscus.api_key "
                f"in {config_path}"
            )

        return cls(
            api_key=api_key,
            base_url=os.getenv("HYBISCUS_BASE_URL", data.get("base_url", DEFAULT_BASE_URL)),
            timeout_seconds=_parse_float(
                "timeout_seconds",
                os.getenv(
                    "HYBISCUS_TIMEOUT_SECONDS",
                    data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
                ),
            ),
            poll_interval_seconds=_parse_float(
                "poll_interval_seconds",
                os.getenv(
                    "HYBISCUS_POLL_INTERVAL_SECONDS",
                    data.get("poll_interval_seconds", DEFAULT_POLL_INTERVAL_SECONDS),
                ),
            ),
        )

    def with_overrides(self, **overrides: Any) -> "HybiscusConfig":
        """Return a copy with the given fields replaced. None values are ignored."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def _parse_float(name: str, value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
