"""
AB FIRST - Configuration
========================
Immutable settings for one A/B test service client.

Environment Variables:
    AB_TESTS_HOST - Base URL of the A/B test service
    AB_TESTS_API_TOKEN - Bearer token for the service API
    AB_TESTS_TIMEOUT - Request timeout in seconds (optional)
"""

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from abfirst.core.exceptions import ConfigurationException, MissingConfigException

DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class AbTestsConfig:
    """Configuration for the A/B test service client."""
    abtests_host: str
    api_token: str
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if not self.abtests_host:
            raise MissingConfigException("abTestsHost")
        if not self.api_token:
            raise MissingConfigException("apiToken")
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationException(
                f"timeout must be positive, got {self.timeout}",
                config_key="timeout"
            )
        # Frozen dataclass: normalise through object.__setattr__
        object.__setattr__(self, "abtests_host", self.abtests_host.rstrip("/"))

    @property
    def assignments_url(self) -> str:
        return f"{self.abtests_host}/api/assignments"

    def goal_page_url(self, page_id: Any, cookie_hash: Optional[str]) -> str:
        return f"{self.assignments_url}/goal-page/{page_id}/{cookie_hash or ''}"

    @classmethod
    def from_settings(cls, settings: Optional[Mapping[str, Any]]) -> "AbTestsConfig":
        """
        Build a config from a settings mapping.

        Accepts the camelCase keys used by the host pipeline
        (``abTestsHost``, ``apiToken``) as well as snake_case ones.
        """
        settings = settings or {}
        timeout = settings.get("timeout", DEFAULT_TIMEOUT)
        return cls(
            abtests_host=settings.get("abTestsHost") or settings.get("abtests_host"),
            api_token=settings.get("apiToken") or settings.get("api_token"),
            timeout=float(timeout) if timeout is not None else None,
        )

    @classmethod
    def from_env(cls) -> "AbTestsConfig":
        """Build a config from environment variables."""
        return cls(
            abtests_host=os.getenv("AB_TESTS_HOST"),
            api_token=os.getenv("AB_TESTS_API_TOKEN"),
            timeout=float(os.getenv("AB_TESTS_TIMEOUT", DEFAULT_TIMEOUT)),
        )
